"""
Balance estimation for drips accounts.

The estimator replays an account's drips history off-chain the way DripsHub
accounts for it on-chain: every receiver entry of every drips-set event
streams linearly from its start until the next update of the sender, the
end of its duration or the sender's `max_end`, whichever comes first.
Everything here is pure; fetching is the job of `AccountService`.
"""

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ._exceptions import InvalidArgumentError, MissingArgumentError, UnsupportedNetworkError
from .account_service import AccountService
from .constants import get_network_config, is_supported_chain
from .cycle import cycle_start_of, get_cycle_info
from .helpers import get_address_from_asset_id, parse_user_id, unpack_receiver_config
from .history import EventHistory
from .types import (
    AccountEstimate,
    AccountSnapshot,
    AssetEstimate,
    AssetState,
    Cycle,
    DripsReceiverConfig,
    DripsSetEvent,
    NetworkConfig,
    SqueezedDripsEvent,
    StreamEstimate,
)

logger = logging.getLogger(__name__)

Interval = tuple[int, int]


def dripped_amount(amount_per_sec: int, start: int, end: int, multiplier: int) -> int:
    """
    Amount streamed at `amount_per_sec` between `start` and `end`.

    Rounds like DripsHub: the cumulative amount is floored at both ends, so
    splitting an interval never changes the total.
    """
    if end <= start:
        return 0
    return end * amount_per_sec // multiplier - start * amount_per_sec // multiplier


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Sort and merge overlapping or touching intervals."""
    merged: list[Interval] = []
    for start, end in sorted(i for i in intervals if i[1] > i[0]):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def subtract_intervals(interval: Interval, holes: list[Interval]) -> list[Interval]:
    """Parts of `interval` not covered by the (merged) `holes`."""
    start, end = interval
    parts = []
    for hole_start, hole_end in holes:
        if hole_end <= start or hole_start >= end:
            continue
        if hole_start > start:
            parts.append((start, hole_start))
        start = max(start, hole_end)
    if end > start:
        parts.append((start, end))
    return parts


def active_interval(
    config: DripsReceiverConfig,
    set_time: int,
    next_set_time: int | None,
    max_end: int,
) -> tuple[int, int | None]:
    """
    When a receiver entry of a drips-set event actually streams.

    Returns (start, end) with end None for "not ended yet". The entry cannot
    stream before it was set, after the sender's next update or after the
    sender's balance runs out.
    """
    start = config.start or set_time
    end = start + config.duration if config.duration else None
    start = max(start, set_time)

    for limit in (next_set_time, max_end):
        if limit is not None and (end is None or limit < end):
            end = limit

    if end is not None and end < start:
        end = start
    return start, end


class _StreamAccumulator:
    def __init__(self) -> None:
        self.drip_ids: set[int] = set()
        self.amount = 0
        self.amount_per_sec = 0
        self.seen = False


class EstimatorEngine:
    """
    Estimates receivable and streamed amounts for an account snapshot.

    Example:
        >>> engine = EstimatorEngine()
        >>> estimate = engine.estimate_account(snapshot, get_cycle_info(5))
        >>> estimate[asset_id].receivable_amount
    """

    def __init__(self, network: NetworkConfig | None = None) -> None:
        """
        Args:
            network: Protocol parameters to simulate with. Defaults to the
                configuration of the snapshot's chain.
        """
        self._network = network

    def estimate_account(
        self,
        account: AccountSnapshot | Mapping[str, Any] | None,
        current_cycle: Cycle | None,
        excluding_squeezes: Iterable[SqueezedDripsEvent | Mapping[str, Any]] | None = None,
    ) -> AccountEstimate:
        """
        Estimate every asset the account streams, receives or has state for.

        Args:
            account: The account snapshot (a model or its dict form)
            current_cycle: The cycle to estimate at; `current_cycle.timestamp` is "now"
            excluding_squeezes: Squeezes whose funds must not be reported as receivable

        Returns:
            A fresh AccountEstimate

        Raises:
            MissingArgumentError: If account or current_cycle is missing
            InvalidArgumentError: If the snapshot or a squeeze is malformed
            UnsupportedNetworkError: If no network is configured for the snapshot's chain
        """
        account = _parse_account(account)
        if current_cycle is None:
            raise MissingArgumentError("Could not estimate account: 'current_cycle' is missing.", "current_cycle")
        squeezes = _parse_squeezes(excluding_squeezes)
        network = self._network or get_network_config(account.chain_id)

        history = EventHistory(account.drips_set_events)
        states = {state.asset_id: state for state in account.asset_states}

        asset_ids = set(history.asset_ids(account.user_id)) | set(states)
        asset_ids |= {a for a in history.asset_ids() if history.senders_streaming_to(account.user_id, a)}

        assets = tuple(
            self._estimate_asset(
                account.user_id,
                asset_id,
                history,
                states.get(asset_id) or AssetState(asset_id=asset_id),
                current_cycle,
                network,
                [s for s in squeezes if s.user_id == account.user_id and s.asset_id == asset_id],
            )
            for asset_id in sorted(asset_ids)
        )

        logger.debug(
            "Estimated %d asset(s) for user %s at %s",
            len(assets),
            account.user_id,
            current_cycle.timestamp,
        )

        return AccountEstimate(
            user_id=account.user_id,
            chain_id=account.chain_id,
            cycle=current_cycle,
            assets=assets,
        )

    def _estimate_asset(
        self,
        user_id: int,
        asset_id: int,
        history: EventHistory,
        state: AssetState,
        cycle: Cycle,
        network: NetworkConfig,
        squeezes: list[SqueezedDripsEvent],
    ) -> AssetEstimate:
        now = cycle.timestamp
        cycle_secs = cycle.cycle_duration_secs
        epoch = cycle.current_cycle_start % cycle_secs
        multiplier = network.amt_per_sec_multiplier

        incoming: dict[int, _StreamAccumulator] = {}
        streams: set[tuple[int, int]] = set()
        receivable = 0
        current_cycle_amount = 0

        seen_events = history.receiver_seen_events(user_id, asset_id)
        if seen_events:
            first_seen = min(seen.block_timestamp for seen in seen_events)
            window_start = cycle_start_of(max(state.receivable_from, first_seen), cycle_secs, epoch)
            # receiveDrips processes the oldest cycles first
            window_end = min(now, window_start + network.max_receivable_cycles * cycle_secs)

            for sender in history.senders_streaming_to(user_id, asset_id):
                holes = _squeezed_intervals(squeezes, sender, cycle_secs, epoch)
                events = history.events(sender, asset_id)
                acc = incoming.setdefault(sender, _StreamAccumulator())

                for index, event in enumerate(events):
                    next_set_time = events[index + 1].block_timestamp if index + 1 < len(events) else None
                    event_holes = holes.get(event.drips_history_hash.lower(), [])

                    for seen in event.drips_receiver_seen_events:
                        if seen.receiver_user_id != user_id:
                            continue
                        config = unpack_receiver_config(seen.config)
                        start, end = active_interval(config, event.block_timestamp, next_set_time, event.max_end)

                        if start <= now and (end is None or now < end):
                            acc.amount_per_sec += config.amount_per_sec
                            acc.drip_ids.add(config.drip_id)
                            acc.seen = True

                        low = max(start, window_start)
                        high = window_end if end is None else min(end, window_end)
                        if high <= low:
                            continue

                        acc.drip_ids.add(config.drip_id)
                        acc.seen = True
                        streams.add((sender, config.drip_id))

                        for part_start, part_end in subtract_intervals((low, high), event_holes):
                            amount = dripped_amount(config.amount_per_sec, part_start, part_end, multiplier)
                            acc.amount += amount
                            receivable += amount
                            current_cycle_amount += dripped_amount(
                                config.amount_per_sec,
                                max(part_start, cycle.current_cycle_start),
                                part_end,
                                multiplier,
                            )

        token_address = get_address_from_asset_id(asset_id)
        incoming_streams = [
            StreamEstimate(
                sender_user_id=sender,
                receiver_user_id=user_id,
                asset_id=asset_id,
                token_address=token_address,
                drip_ids=tuple(sorted(acc.drip_ids)),
                amount_per_sec=acc.amount_per_sec,
                estimated_amount=acc.amount,
            )
            for sender, acc in incoming.items()
            if acc.seen
        ]
        incoming_streams.sort(key=lambda s: (-s.estimated_amount, s.sender_user_id))

        outgoing_streams, streamed, amount_per_sec_out, remaining, exhausted = self._estimate_outgoing(
            user_id, asset_id, token_address, history.latest(user_id, asset_id), now, multiplier
        )

        return AssetEstimate(
            asset_id=asset_id,
            token_address=token_address,
            receivable_amount=receivable,
            current_cycle_amount=current_cycle_amount,
            splittable_amount=state.splittable_amount,
            collectable_amount=state.collectable_amount,
            total_streams_count=len(streams),
            incoming_streams=tuple(incoming_streams),
            outgoing_streams=outgoing_streams,
            streamed_amount=streamed,
            remaining_balance=remaining,
            amount_per_sec_out=amount_per_sec_out,
            is_balance_exhausted=exhausted,
        )

    @staticmethod
    def _estimate_outgoing(
        user_id: int,
        asset_id: int,
        token_address: str,
        latest: DripsSetEvent | None,
        now: int,
        multiplier: int,
    ) -> tuple[tuple[StreamEstimate, ...], int, int, int | None, bool]:
        if latest is None:
            return (), 0, 0, None, False

        outgoing: dict[int, _StreamAccumulator] = {}
        for seen in latest.drips_receiver_seen_events:
            config = unpack_receiver_config(seen.config)
            start, end = active_interval(config, latest.block_timestamp, None, latest.max_end)
            acc = outgoing.setdefault(seen.receiver_user_id, _StreamAccumulator())
            acc.drip_ids.add(config.drip_id)
            acc.amount += dripped_amount(config.amount_per_sec, start, now if end is None else min(end, now), multiplier)
            if start <= now and (end is None or now < end):
                acc.amount_per_sec += config.amount_per_sec

        streams = sorted(
            (
                StreamEstimate(
                    sender_user_id=user_id,
                    receiver_user_id=receiver,
                    asset_id=asset_id,
                    token_address=token_address,
                    drip_ids=tuple(sorted(acc.drip_ids)),
                    amount_per_sec=acc.amount_per_sec,
                    estimated_amount=acc.amount,
                )
                for receiver, acc in outgoing.items()
            ),
            key=lambda s: (-s.estimated_amount, s.receiver_user_id),
        )
        streamed = sum(s.estimated_amount for s in streams)
        rate = sum(s.amount_per_sec for s in streams)
        exhausted = bool(streams) and latest.max_end <= now

        return tuple(streams), streamed, rate, max(latest.balance - streamed, 0), exhausted


def _squeezed_intervals(
    squeezes: list[SqueezedDripsEvent],
    sender_id: int,
    cycle_secs: int,
    epoch: int,
) -> dict[str, list[Interval]]:
    # A squeeze takes everything streamed in its cycle up to the squeeze time.
    intervals: dict[str, list[Interval]] = {}
    for squeeze in squeezes:
        if squeeze.sender_id != sender_id:
            continue
        squeezed = (cycle_start_of(squeeze.block_timestamp, cycle_secs, epoch), squeeze.block_timestamp)
        for history_hash in squeeze.drips_history_hashes:
            intervals.setdefault(history_hash.lower(), []).append(squeezed)
    return {history_hash: merge_intervals(parts) for history_hash, parts in intervals.items()}


def _parse_account(account: AccountSnapshot | Mapping[str, Any] | None) -> AccountSnapshot:
    if account is None:
        raise MissingArgumentError("Could not estimate account: 'account' is missing.", "account")

    if isinstance(account, Mapping):
        try:
            account = AccountSnapshot.model_validate(account)
        except PydanticValidationError as e:
            raise InvalidArgumentError(f"Could not estimate account: malformed snapshot: {e}", "account") from e
    elif not isinstance(account, AccountSnapshot):
        raise InvalidArgumentError(
            f"Could not estimate account: expected an AccountSnapshot, got {type(account).__name__}.",
            "account",
        )

    for event in account.drips_set_events:
        if not 0 <= event.asset_id < 2**160:
            raise InvalidArgumentError(
                f"Drips set event '{event.id}' has an invalid asset ID.", "asset_id", event.asset_id
            )
        if event.block_timestamp < 0 or event.max_end < 0 or event.balance < 0:
            raise InvalidArgumentError(
                f"Drips set event '{event.id}' has a negative timestamp, max end or balance.", "drips_set_events", event.id
            )
        for seen in event.drips_receiver_seen_events:
            if seen.sender_user_id != event.user_id:
                raise InvalidArgumentError(
                    f"Drips receiver seen event '{seen.id}' does not belong to drips set event '{event.id}'.",
                    "drips_receiver_seen_events",
                    seen.id,
                )
            if not 0 <= seen.config < 2**256:
                raise InvalidArgumentError(
                    f"Drips receiver seen event '{seen.id}' has an invalid config.", "config", seen.config
                )

    seen_assets: set[int] = set()
    for state in account.asset_states:
        if state.asset_id in seen_assets or not 0 <= state.asset_id < 2**160:
            raise InvalidArgumentError(
                f"Asset state for asset {state.asset_id} is duplicated or invalid.", "asset_states", state.asset_id
            )
        seen_assets.add(state.asset_id)

    return account


def _parse_squeezes(
    squeezes: Iterable[SqueezedDripsEvent | Mapping[str, Any]] | None,
) -> list[SqueezedDripsEvent]:
    if squeezes is None:
        return []

    parsed = []
    for squeeze in squeezes:
        if isinstance(squeeze, SqueezedDripsEvent):
            parsed.append(squeeze)
            continue
        try:
            parsed.append(SqueezedDripsEvent.model_validate(squeeze))
        except PydanticValidationError as e:
            raise InvalidArgumentError(f"Malformed squeeze exclusion: {e}", "excluding_squeezes") from e
    return parsed


DependencyFactory = Callable[[int], tuple[AccountService, EstimatorEngine]]


def default_dependency_factory(chain_id: int) -> tuple[AccountService, EstimatorEngine]:
    return AccountService(chain_id), EstimatorEngine()


class AccountEstimator:
    """
    Keeps one account snapshot and estimates it on demand.

    `estimate()` never fetches: call `refresh_account()` first for fresh
    data. A refresh replaces the whole snapshot at once, so a concurrent
    `estimate()` sees either the old or the new one.

    Example:
        >>> estimator = await AccountEstimator.create(user_id, chain_id=5)
        >>> estimate = estimator.estimate()
        >>> await estimator.refresh_account()
    """

    def __init__(
        self,
        user_id: int,
        chain_id: int,
        account_service: AccountService,
        estimator_engine: EstimatorEngine,
    ) -> None:
        self._user_id = user_id
        self._chain_id = chain_id
        self._account_service = account_service
        self._estimator_engine = estimator_engine
        self._account: AccountSnapshot | None = None
        self._lock = threading.Lock()

    @classmethod
    async def create(
        cls,
        user_id: str | int | None,
        chain_id: int | None,
        dependency_factory: DependencyFactory = default_dependency_factory,
    ) -> "AccountEstimator":
        """
        Create an estimator and fetch its first snapshot.

        Raises:
            MissingArgumentError: If user_id or chain_id is missing
            InvalidArgumentError: If user_id is not an integer
            UnsupportedNetworkError: If chain_id is not supported
            SubgraphQueryError: If the first fetch fails
        """
        if user_id is None or user_id == "":
            raise MissingArgumentError("Could not create 'AccountEstimator': user ID is required.", "user_id")
        if not chain_id:
            raise MissingArgumentError("Could not create 'AccountEstimator': chain ID is required.", "chain_id")
        if not is_supported_chain(chain_id):
            raise UnsupportedNetworkError(chain_id)

        try:
            parsed_user_id = parse_user_id(user_id)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Could not create 'AccountEstimator': user ID {user_id!r} is not an integer.", "user_id", user_id
            ) from None

        account_service, estimator_engine = dependency_factory(chain_id)
        estimator = cls(parsed_user_id, chain_id, account_service, estimator_engine)
        await estimator.refresh_account()

        return estimator

    @property
    def user_id(self) -> int:
        return self._user_id

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def account(self) -> AccountSnapshot | None:
        with self._lock:
            return self._account

    async def refresh_account(self) -> None:
        """Fetch a new snapshot and replace the current one."""
        account = await self._account_service.fetch_account(self._user_id, self._chain_id)
        with self._lock:
            self._account = account
        logger.info(
            "Refreshed account %s on chain %s (%d drips set events)",
            self._user_id,
            self._chain_id,
            len(account.drips_set_events),
        )

    def estimate(
        self,
        excluding_squeezes: Iterable[SqueezedDripsEvent] | None = None,
        timestamp: int | None = None,
    ) -> AccountEstimate:
        """
        Estimate the current snapshot at `timestamp` (default: now).

        Raises:
            MissingArgumentError: If no snapshot has been fetched yet
        """
        with self._lock:
            account = self._account

        current_cycle = get_cycle_info(self._chain_id, timestamp)
        return self._estimator_engine.estimate_account(account, current_cycle, excluding_squeezes)
