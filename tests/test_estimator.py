"""Tests for balance estimation.

Amounts are in token-wei: `config(n)` streams n wei per second, so the
expected values below can be checked by hand.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from drips_sdk import (
    AMT_PER_SEC_MULTIPLIER,
    NETWORKS,
    AccountEstimator,
    AssetState,
    DripsReceiverConfig,
    DripsReceiverSeenEvent,
    DripsSetEvent,
    EstimatorEngine,
    InvalidArgumentError,
    MissingArgumentError,
    SubgraphQueryError,
    UnsupportedNetworkError,
    dripped_amount,
    get_cycle_info,
    pack_receiver_config,
)
from drips_sdk.estimator import active_interval, merge_intervals, subtract_intervals

from .conftest import (
    ASSET_ID,
    CYCLE_SECS,
    GOERLI,
    NOW,
    OTHER_ASSET_ID,
    TOKEN,
    config,
    set_event,
    snapshot,
    squeeze,
)

SENDER = 1
USER = 2

CURRENT_CYCLE_START = 10 * CYCLE_SECS


def _estimate(events, asset_states=None, squeezes=None, engine=None, now=NOW):
    engine = engine or EstimatorEngine()
    return engine.estimate_account(snapshot(USER, events, asset_states), get_cycle_info(GOERLI, now), squeezes)


class TestDrippedAmount:
    """Tests for the on-chain rounding of streamed amounts."""

    def test_whole_amounts(self) -> None:
        assert dripped_amount(3 * AMT_PER_SEC_MULTIPLIER, 10, 20, AMT_PER_SEC_MULTIPLIER) == 30

    def test_floors_cumulative_amount_at_both_ends(self) -> None:
        """Half a wei per second over 3 seconds starting on an odd second is 2, not 1.5."""
        assert dripped_amount(AMT_PER_SEC_MULTIPLIER // 2, 7, 10, AMT_PER_SEC_MULTIPLIER) == 2

    def test_splitting_interval_preserves_total(self) -> None:
        rate = 333_333_333
        whole = dripped_amount(rate, 5, 1005, AMT_PER_SEC_MULTIPLIER)
        parts = dripped_amount(rate, 5, 400, AMT_PER_SEC_MULTIPLIER) + dripped_amount(
            rate, 400, 1005, AMT_PER_SEC_MULTIPLIER
        )

        assert whole == parts

    def test_empty_interval(self) -> None:
        assert dripped_amount(AMT_PER_SEC_MULTIPLIER, 10, 10, AMT_PER_SEC_MULTIPLIER) == 0
        assert dripped_amount(AMT_PER_SEC_MULTIPLIER, 10, 5, AMT_PER_SEC_MULTIPLIER) == 0


class TestIntervals:
    """Tests for interval helpers."""

    def test_merge_overlapping_and_touching(self) -> None:
        assert merge_intervals([(5, 8), (0, 3), (2, 4), (8, 9), (7, 7)]) == [(0, 4), (5, 9)]

    def test_subtract(self) -> None:
        assert subtract_intervals((0, 10), [(2, 4), (6, 12)]) == [(0, 2), (4, 6)]
        assert subtract_intervals((0, 10), []) == [(0, 10)]
        assert subtract_intervals((0, 10), [(0, 10)]) == []

    def test_active_interval_clamps_to_set_time_and_limits(self) -> None:
        cfg = DripsReceiverConfig(amount_per_sec=1, start=50, duration=100)

        assert active_interval(cfg, 100, None, 2**32) == (100, 150)
        assert active_interval(cfg, 10, 80, 2**32) == (50, 80)
        assert active_interval(cfg, 10, None, 60) == (50, 60)
        assert active_interval(DripsReceiverConfig(amount_per_sec=1), 10, None, 5) == (10, 10)

    def test_active_interval_unbounded(self) -> None:
        assert active_interval(DripsReceiverConfig(amount_per_sec=1), 10, None, 2**32) == (10, 2**32)


class TestIncomingAccrual:
    """Tests for amounts accrued from incoming drips."""

    def test_one_stream_for_100_seconds(self) -> None:
        """1 wei/sec started 100 seconds ago is 100 receivable."""
        event = set_event(SENDER, [(USER, config(1, start=NOW - 100))], NOW - 100)

        asset = _estimate([event])[ASSET_ID]

        assert asset.receivable_amount == 100
        assert asset.current_cycle_amount == 100
        assert asset.total_streams_count == 1
        assert asset.token_address == TOKEN
        assert len(asset.incoming_streams) == 1

        stream = asset.incoming_streams[0]
        assert stream.sender_user_id == SENDER
        assert stream.receiver_user_id == USER
        assert stream.estimated_amount == 100
        assert stream.amount_per_sec == AMT_PER_SEC_MULTIPLIER
        assert stream.drip_ids == (0,)

    def test_start_zero_means_set_time(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)

        assert _estimate([event])[ASSET_ID].receivable_amount == 100

    def test_start_in_past_clamped_to_set_time(self) -> None:
        """A config cannot stream before it was set."""
        event = set_event(SENDER, [(USER, config(1, start=NOW - 500))], NOW - 100)

        assert _estimate([event])[ASSET_ID].receivable_amount == 100

    def test_later_event_supersedes_without_rewriting_past(self) -> None:
        """1/sec for 50 seconds, then 2/sec for 50 seconds."""
        events = [
            set_event(SENDER, [(USER, config(1))], NOW - 100),
            set_event(SENDER, [(USER, config(2))], NOW - 50),
        ]

        asset = _estimate(events)[ASSET_ID]

        assert asset.receivable_amount == 150
        assert asset.incoming_streams[0].amount_per_sec == 2 * AMT_PER_SEC_MULTIPLIER
        assert asset.total_streams_count == 1

    def test_removed_receiver_stops_accruing(self) -> None:
        events = [
            set_event(SENDER, [(USER, config(1))], NOW - 100),
            set_event(SENDER, [], NOW - 50),
        ]

        asset = _estimate(events)[ASSET_ID]

        assert asset.receivable_amount == 50
        assert asset.incoming_streams[0].amount_per_sec == 0

    def test_event_order_in_snapshot_does_not_matter(self) -> None:
        events = [
            set_event(SENDER, [(USER, config(1))], NOW - 100),
            set_event(SENDER, [(USER, config(2))], NOW - 50),
        ]

        assert _estimate(events) == _estimate(list(reversed(events)))

    def test_max_end_stops_stream(self) -> None:
        """The sender's balance runs out 40 seconds ago."""
        event = set_event(SENDER, [(USER, config(1))], NOW - 100, max_end=NOW - 40)

        asset = _estimate([event])[ASSET_ID]

        assert asset.receivable_amount == 60
        assert asset.incoming_streams[0].amount_per_sec == 0

    def test_duration_ends_stream(self) -> None:
        event = set_event(SENDER, [(USER, config(1, start=NOW - 100, duration=30))], NOW - 100)

        assert _estimate([event])[ASSET_ID].receivable_amount == 30

    def test_future_start_accrues_nothing(self) -> None:
        event = set_event(SENDER, [(USER, config(1, start=NOW + 10))], NOW - 100)

        asset = _estimate([event])[ASSET_ID]

        assert asset.receivable_amount == 0
        assert asset.incoming_streams == ()
        assert asset.total_streams_count == 0

    def test_concurrent_entries_add_up(self) -> None:
        """Two drips from the same sender are two streams."""
        event = set_event(SENDER, [(USER, config(1, drip_id=1)), (USER, config(1, drip_id=2))], NOW - 100)

        asset = _estimate([event])[ASSET_ID]

        assert asset.receivable_amount == 200
        assert asset.total_streams_count == 2
        assert len(asset.incoming_streams) == 1
        assert asset.incoming_streams[0].drip_ids == (1, 2)
        assert asset.incoming_streams[0].amount_per_sec == 2 * AMT_PER_SEC_MULTIPLIER

    def test_entries_for_other_receivers_ignored(self) -> None:
        event = set_event(SENDER, [(USER, config(1)), (99, config(5))], NOW - 100)

        assert _estimate([event])[ASSET_ID].receivable_amount == 100

    def test_fractional_rate_rounds_like_contract(self) -> None:
        half_wei = pack_receiver_config(DripsReceiverConfig(amount_per_sec=AMT_PER_SEC_MULTIPLIER // 2))
        event = set_event(SENDER, [(USER, half_wei)], NOW - 3)

        assert _estimate([event])[ASSET_ID].receivable_amount == 2


class TestAccountingWindow:
    """Tests for the receive point and the receivable cycles cap."""

    def test_accrues_across_cycles_since_first_event(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], 8 * CYCLE_SECS)

        asset = _estimate([event])[ASSET_ID]

        assert asset.receivable_amount == 2 * CYCLE_SECS + 1000
        assert asset.current_cycle_amount == 1000

    def test_receive_point_skips_received_cycles(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], 8 * CYCLE_SECS)
        state = AssetState(asset_id=ASSET_ID, receivable_from=CURRENT_CYCLE_START + 5)

        asset = _estimate([event], [state])[ASSET_ID]

        assert asset.receivable_amount == 1000
        assert asset.current_cycle_amount == 1000

    def test_cycles_cap_drops_newest_cycles(self) -> None:
        """Only the oldest `max_receivable_cycles` cycles are counted."""
        network = NETWORKS[GOERLI].model_copy(update={"max_receivable_cycles": 2})
        event = set_event(SENDER, [(USER, config(1))], 5 * CYCLE_SECS)

        asset = _estimate([event], engine=EstimatorEngine(network))[ASSET_ID]

        assert asset.receivable_amount == 2 * CYCLE_SECS
        assert asset.current_cycle_amount == 0
        assert asset.total_streams_count == 1


class TestSqueezeExclusions:
    """Tests for excluding already-squeezed funds."""

    def test_squeeze_of_first_40_seconds(self) -> None:
        """Squeezing 40 seconds into a 100 second stream leaves 60."""
        event = set_event(SENDER, [(USER, config(1, start=NOW - 100))], NOW - 100)
        squeezed = squeeze(USER, SENDER, NOW - 60, (event.drips_history_hash,))

        asset = _estimate([event], squeezes=[squeezed])[ASSET_ID]

        assert asset.receivable_amount == 60
        assert asset.current_cycle_amount == 60
        assert asset.incoming_streams[0].estimated_amount == 60

    def test_unmatched_history_hash_ignored(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)
        squeezed = squeeze(USER, SENDER, NOW - 60, ("0x" + "ff" * 32,))

        assert _estimate([event], squeezes=[squeezed])[ASSET_ID].receivable_amount == 100

    def test_history_hash_compared_case_insensitively(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100, history_hash="0x" + "ab" * 32)
        squeezed = squeeze(USER, SENDER, NOW - 60, ("0x" + "AB" * 32,))

        assert _estimate([event], squeezes=[squeezed])[ASSET_ID].receivable_amount == 60

    def test_other_sender_or_asset_ignored(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)
        squeezes = [
            squeeze(USER, 77, NOW - 60, (event.drips_history_hash,)),
            squeeze(USER, SENDER, NOW - 60, (event.drips_history_hash,), asset_id=OTHER_ASSET_ID),
        ]

        assert _estimate([event], squeezes=squeezes)[ASSET_ID].receivable_amount == 100

    def test_overlapping_squeezes_not_subtracted_twice(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)
        squeezes = [
            squeeze(USER, SENDER, NOW - 80, (event.drips_history_hash,)),
            squeeze(USER, SENDER, NOW - 60, (event.drips_history_hash,)),
        ]

        assert _estimate([event], squeezes=squeezes)[ASSET_ID].receivable_amount == 60

    def test_squeeze_applies_only_to_listed_configurations(self) -> None:
        first = set_event(SENDER, [(USER, config(1))], NOW - 100)
        second = set_event(SENDER, [(USER, config(2))], NOW - 50)

        only_second = squeeze(USER, SENDER, NOW - 20, (second.drips_history_hash,))
        both = squeeze(USER, SENDER, NOW - 20, (first.drips_history_hash, second.drips_history_hash))

        assert _estimate([first, second], squeezes=[only_second])[ASSET_ID].receivable_amount == 50 + 40
        assert _estimate([first, second], squeezes=[both])[ASSET_ID].receivable_amount == 40

    def test_squeeze_in_previous_cycle(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], 9 * CYCLE_SECS)
        squeezed = squeeze(USER, SENDER, 9 * CYCLE_SECS + 500, (event.drips_history_hash,))

        asset = _estimate([event], squeezes=[squeezed])[ASSET_ID]

        assert asset.receivable_amount == CYCLE_SECS + 1000 - 500
        assert asset.current_cycle_amount == 1000

    def test_squeeze_given_as_dict(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)
        squeezed = squeeze(USER, SENDER, NOW - 60, (event.drips_history_hash,))

        asset = _estimate([event], squeezes=[squeezed.model_dump()])[ASSET_ID]

        assert asset.receivable_amount == 60

    def test_malformed_squeeze_rejected(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)

        with pytest.raises(InvalidArgumentError):
            _estimate([event], squeezes=[{"id": "broken"}])


class TestStreamOrdering:
    """Tests for deterministic ordering of stream breakdowns."""

    def test_incoming_by_amount_then_sender(self) -> None:
        events = [
            set_event(7, [(USER, config(1))], NOW - 100),
            set_event(3, [(USER, config(2))], NOW - 50),
            set_event(9, [(USER, config(3))], NOW - 100),
        ]

        asset = _estimate(events)[ASSET_ID]

        assert [s.sender_user_id for s in asset.incoming_streams] == [9, 3, 7]
        assert [s.estimated_amount for s in asset.incoming_streams] == [300, 100, 100]
        assert asset.receivable_amount == 500
        assert asset.total_streams_count == 3

    def test_assets_sorted_by_id(self) -> None:
        events = [
            set_event(SENDER, [(USER, config(1))], NOW - 100, asset_id=OTHER_ASSET_ID),
            set_event(SENDER, [(USER, config(1))], NOW - 100, asset_id=ASSET_ID),
        ]

        estimate = _estimate(events)

        assert estimate.asset_ids == sorted([ASSET_ID, OTHER_ASSET_ID])


class TestOutgoing:
    """Tests for the account's own drips."""

    def test_streamed_and_remaining_balance(self) -> None:
        event = set_event(USER, [(10, config(1)), (11, config(2))], NOW - 100, balance=1000, max_end=NOW - 100 + 333)

        asset = _estimate([event])[ASSET_ID]

        assert asset.streamed_amount == 300
        assert asset.remaining_balance == 700
        assert asset.amount_per_sec_out == 3 * AMT_PER_SEC_MULTIPLIER
        assert asset.is_balance_exhausted is False
        assert [s.receiver_user_id for s in asset.outgoing_streams] == [11, 10]
        assert [s.estimated_amount for s in asset.outgoing_streams] == [200, 100]
        assert asset.receivable_amount == 0
        assert asset.incoming_streams == ()

    def test_balance_exhausted(self) -> None:
        event = set_event(USER, [(10, config(1))], NOW - 100, balance=60, max_end=NOW - 40)

        asset = _estimate([event])[ASSET_ID]

        assert asset.is_balance_exhausted is True
        assert asset.streamed_amount == 60
        assert asset.remaining_balance == 0
        assert asset.amount_per_sec_out == 0

    def test_no_receivers_is_not_exhausted(self) -> None:
        event = set_event(USER, [], NOW - 100, balance=500, max_end=0)

        asset = _estimate([event])[ASSET_ID]

        assert asset.is_balance_exhausted is False
        assert asset.outgoing_streams == ()
        assert asset.remaining_balance == 500

    def test_only_latest_configuration_counts(self) -> None:
        events = [
            set_event(USER, [(10, config(5))], NOW - 200, balance=10_000),
            set_event(USER, [(10, config(1))], NOW - 100, balance=1000),
        ]

        asset = _estimate(events)[ASSET_ID]

        assert asset.streamed_amount == 100
        assert asset.remaining_balance == 900


class TestAccountEstimate:
    """Tests for the AccountEstimate mapping and state-only assets."""

    def test_asset_state_only(self) -> None:
        state = AssetState(asset_id=OTHER_ASSET_ID, splittable_amount=5, collectable_amount=7)

        estimate = _estimate([], [state])

        asset = estimate[OTHER_ASSET_ID]
        assert asset.receivable_amount == 0
        assert asset.splittable_amount == 5
        assert asset.collectable_amount == 7
        assert asset.remaining_balance is None

    def test_mapping_access(self) -> None:
        estimate = _estimate([set_event(SENDER, [(USER, config(1))], NOW - 100)])

        assert ASSET_ID in estimate
        assert OTHER_ASSET_ID not in estimate
        assert estimate.get(OTHER_ASSET_ID) is None
        with pytest.raises(KeyError):
            estimate[OTHER_ASSET_ID]

        as_dict = estimate.as_dict()
        as_dict.clear()
        assert ASSET_ID in estimate

    def test_empty_account(self) -> None:
        estimate = _estimate([])

        assert estimate.assets == ()
        assert estimate.user_id == USER
        assert estimate.chain_id == GOERLI
        assert estimate.cycle.timestamp == NOW

    def test_deterministic(self) -> None:
        events = [set_event(SENDER, [(USER, config(1))], NOW - 100)]

        assert _estimate(events) == _estimate(events)


class TestMalformedSnapshot:
    """Tests for input validation of the estimator."""

    def test_missing_account(self) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            EstimatorEngine().estimate_account(None, get_cycle_info(GOERLI, NOW))

        assert exc_info.value.arg_name == "account"

    def test_missing_cycle(self) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            EstimatorEngine().estimate_account(snapshot(USER, []), None)

        assert exc_info.value.arg_name == "current_cycle"

    def test_unparsable_dict(self) -> None:
        with pytest.raises(InvalidArgumentError):
            EstimatorEngine().estimate_account({"user_id": "not a number"}, get_cycle_info(GOERLI, NOW))

    def test_wrong_type(self) -> None:
        with pytest.raises(InvalidArgumentError):
            EstimatorEngine().estimate_account(["not", "a", "snapshot"], get_cycle_info(GOERLI, NOW))

    def test_dict_snapshot_accepted(self) -> None:
        account = snapshot(USER, [set_event(SENDER, [(USER, config(1))], NOW - 100)])
        cycle = get_cycle_info(GOERLI, NOW)

        from_dict = EstimatorEngine().estimate_account(account.model_dump(), cycle)

        assert from_dict == EstimatorEngine().estimate_account(account, cycle)

    def test_seen_event_of_other_sender(self) -> None:
        event = DripsSetEvent(
            id="set",
            user_id=SENDER,
            asset_id=ASSET_ID,
            drips_history_hash="0x00",
            balance=0,
            block_timestamp=NOW - 100,
            max_end=NOW,
            drips_receiver_seen_events=(
                DripsReceiverSeenEvent(
                    id="seen",
                    receiver_user_id=USER,
                    sender_user_id=SENDER + 100,
                    config=config(1),
                    asset_id=ASSET_ID,
                    block_timestamp=NOW - 100,
                ),
            ),
        )

        with pytest.raises(InvalidArgumentError) as exc_info:
            _estimate([event])

        assert exc_info.value.arg_name == "drips_receiver_seen_events"

    def test_asset_id_out_of_range(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100, asset_id=2**160)

        with pytest.raises(InvalidArgumentError):
            _estimate([event])

    def test_duplicate_asset_states(self) -> None:
        states = [AssetState(asset_id=ASSET_ID), AssetState(asset_id=ASSET_ID)]

        with pytest.raises(InvalidArgumentError):
            _estimate([], states)

    def test_unsupported_chain(self) -> None:
        account = snapshot(USER, [], chain_id=1)

        with pytest.raises(UnsupportedNetworkError):
            EstimatorEngine().estimate_account(account, get_cycle_info(GOERLI, NOW))


def _fake_service(*snapshots):
    service = MagicMock()
    service.fetch_account = AsyncMock(side_effect=list(snapshots))
    return service


class TestAccountEstimator:
    """Tests for AccountEstimator."""

    @pytest.mark.asyncio
    async def test_create_fetches_first_snapshot(self) -> None:
        account = snapshot(USER, [set_event(SENDER, [(USER, config(1))], NOW - 100)])
        service = _fake_service(account)

        estimator = await AccountEstimator.create(str(USER), GOERLI, lambda chain_id: (service, EstimatorEngine()))

        service.fetch_account.assert_awaited_once_with(USER, GOERLI)
        assert estimator.user_id == USER
        assert estimator.chain_id == GOERLI
        assert estimator.account == account

    @pytest.mark.asyncio
    async def test_estimate_does_not_refetch(self) -> None:
        account = snapshot(USER, [set_event(SENDER, [(USER, config(1))], NOW - 100)])
        service = _fake_service(account)
        estimator = await AccountEstimator.create(USER, GOERLI, lambda chain_id: (service, EstimatorEngine()))

        first = estimator.estimate(timestamp=NOW)
        second = estimator.estimate(timestamp=NOW + 10)

        assert first[ASSET_ID].receivable_amount == 100
        assert second[ASSET_ID].receivable_amount == 110
        assert service.fetch_account.await_count == 1

    @pytest.mark.asyncio
    async def test_estimate_with_squeezes(self) -> None:
        event = set_event(SENDER, [(USER, config(1))], NOW - 100)
        service = _fake_service(snapshot(USER, [event]))
        estimator = await AccountEstimator.create(USER, GOERLI, lambda chain_id: (service, EstimatorEngine()))

        estimate = estimator.estimate([squeeze(USER, SENDER, NOW - 60, (event.drips_history_hash,))], timestamp=NOW)

        assert estimate[ASSET_ID].receivable_amount == 60

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self) -> None:
        old = snapshot(USER, [])
        new = snapshot(USER, [set_event(SENDER, [(USER, config(1))], NOW - 100)])
        service = _fake_service(old, new)
        estimator = await AccountEstimator.create(USER, GOERLI, lambda chain_id: (service, EstimatorEngine()))

        assert estimator.estimate(timestamp=NOW).assets == ()

        await estimator.refresh_account()

        assert estimator.account == new
        assert estimator.estimate(timestamp=NOW)[ASSET_ID].receivable_amount == 100

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_old_snapshot(self) -> None:
        old = snapshot(USER, [])
        service = MagicMock()
        service.fetch_account = AsyncMock(side_effect=[old, SubgraphQueryError("Subgraph query failed: 502")])
        estimator = await AccountEstimator.create(USER, GOERLI, lambda chain_id: (service, EstimatorEngine()))

        with pytest.raises(SubgraphQueryError):
            await estimator.refresh_account()

        assert estimator.account == old

    @pytest.mark.asyncio
    async def test_dependency_factory_receives_chain_id(self) -> None:
        service = _fake_service(snapshot(USER, []))
        factory = MagicMock(return_value=(service, EstimatorEngine()))

        await AccountEstimator.create(USER, GOERLI, factory)

        factory.assert_called_once_with(GOERLI)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [None, ""])
    async def test_missing_user_id(self, user_id) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            await AccountEstimator.create(user_id, GOERLI, MagicMock())

        assert exc_info.value.arg_name == "user_id"

    @pytest.mark.asyncio
    async def test_missing_chain_id(self) -> None:
        with pytest.raises(MissingArgumentError) as exc_info:
            await AccountEstimator.create(USER, None, MagicMock())

        assert exc_info.value.arg_name == "chain_id"

    @pytest.mark.asyncio
    async def test_unsupported_chain(self) -> None:
        factory = MagicMock()

        with pytest.raises(UnsupportedNetworkError):
            await AccountEstimator.create(USER, 1, factory)

        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_numeric_user_id(self) -> None:
        with pytest.raises(InvalidArgumentError):
            await AccountEstimator.create("alice", GOERLI, MagicMock())
