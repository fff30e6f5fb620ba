"""Fetches everything the estimator needs about an account."""

import logging
import time

from ._exceptions import InvalidArgumentError, MissingArgumentError, UnsupportedNetworkError
from .constants import get_network_config, is_supported_chain
from .cycle import cycle_start_of
from .helpers import parse_user_id
from .history import unique_senders
from .subgraph import DripsSubgraphClient
from .types import AccountSnapshot, AssetState, DripsSetEvent, ReceivedDripsEvent

logger = logging.getLogger(__name__)


def receivable_from_by_asset(
    received_events: list[ReceivedDripsEvent],
    cycle_secs: int,
    epoch: int = 0,
) -> dict[int, int]:
    """
    Start of the first cycle not yet received, per asset.

    Taken from the latest `receiveDrips` call of each asset. A call capped by
    `maxCycles` leaves `receivable_cycles` cycles behind, so the point moves
    back by that many cycles from the cycle the call was made in.
    """
    latest: dict[int, ReceivedDripsEvent] = {}
    for event in received_events:
        current = latest.get(event.asset_id)
        if current is None or event.block_timestamp > current.block_timestamp:
            latest[event.asset_id] = event

    receivable_from = {}
    for asset_id, event in latest.items():
        point = cycle_start_of(event.block_timestamp, cycle_secs, epoch) - event.receivable_cycles * cycle_secs
        receivable_from[asset_id] = max(point, 0)
    return receivable_from


class AccountService:
    """
    Builds account snapshots from the Drips subgraph.

    Queries run one after the other. Subgraph errors propagate unchanged.
    """

    def __init__(self, chain_id: int, subgraph_client: DripsSubgraphClient | None = None) -> None:
        """
        Args:
            chain_id: Chain ID
            subgraph_client: Client to fetch with (defaults to the chain's subgraph)

        Raises:
            UnsupportedNetworkError: If chain_id is not supported
        """
        if not is_supported_chain(chain_id):
            raise UnsupportedNetworkError(chain_id)

        self.chain_id = chain_id
        self.subgraph_client = subgraph_client or DripsSubgraphClient.create(chain_id)

    async def fetch_account(self, user_id: int | str | None, chain_id: int | None) -> AccountSnapshot:
        """
        Fetch a snapshot of an account.

        The snapshot holds the account's own drips-set events, those of every
        user that has ever streamed to it, and the receive point per asset.

        Raises:
            MissingArgumentError: If user_id or chain_id is missing
            InvalidArgumentError: If user_id is not an integer or chain_id is not this service's chain
            SubgraphQueryError: If any query fails
        """
        if user_id is None or user_id == "":
            raise MissingArgumentError("Could not fetch account: 'user_id' is missing.", "user_id")
        if not chain_id:
            raise MissingArgumentError("Could not fetch account: 'chain_id' is missing.", "chain_id")
        if chain_id != self.chain_id:
            raise InvalidArgumentError(
                f"Could not fetch account: service is connected to chain {self.chain_id}, not {chain_id}.",
                "chain_id",
                chain_id,
            )
        try:
            user_id = parse_user_id(user_id)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Could not fetch account: user ID {user_id!r} is not an integer.", "user_id", user_id
            ) from None

        async with self.subgraph_client.session() as subgraph:
            events: list[DripsSetEvent] = list(await subgraph.get_drips_set_events_by_user_id(user_id))

            seen_events = await subgraph.get_drips_receiver_seen_events_by_receiver_id(user_id)
            senders = [sender for sender in unique_senders(seen_events) if sender != user_id]
            for sender in senders:
                events.extend(await subgraph.get_drips_set_events_by_user_id(sender))

            received_events = await subgraph.get_received_drips_events_by_user_id(user_id)

        network = get_network_config(chain_id)
        receivable_from = receivable_from_by_asset(received_events, network.cycle_secs, network.cycle_epoch)
        asset_states = tuple(
            AssetState(asset_id=asset_id, receivable_from=point) for asset_id, point in sorted(receivable_from.items())
        )

        logger.debug(
            "Fetched account %s: %d drips set events from %d sender(s), %d received drips events",
            user_id,
            len(events),
            len(senders),
            len(received_events),
        )

        return AccountSnapshot(
            user_id=user_id,
            chain_id=chain_id,
            drips_set_events=tuple(events),
            asset_states=asset_states,
            fetched_at=int(time.time()),
        )
