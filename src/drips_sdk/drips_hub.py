"""Async client for the DripsHub contract: receiving, splitting and squeezing."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from web3 import AsyncWeb3

from ._contract_client import AsyncContractClient
from ._exceptions import InvalidArgumentError
from .abi import DRIPS_HUB_ABI
from .constants import get_drips_hub_address, get_network_config
from .helpers import to_drips_receiver_struct, to_splits_receiver_struct
from .receivers import canonicalize_drips_receivers, canonicalize_splits_receivers
from .transactions import DEFAULT_GAS_RECEIVE_DRIPS, DEFAULT_GAS_SPLIT, DEFAULT_GAS_SQUEEZE_DRIPS
from .types import DripsHistory, DripsReceiver, DripsSetEvent, GasOptions, SplitsReceiver, TransactionResult
from .validators import (
    validate_receive_drips_input,
    validate_split_input,
    validate_squeeze_drips_input,
    validate_user_asset_input,
)

logger = logging.getLogger(__name__)

ZERO_HASH = "0x" + "00" * 32


def _drips_history_struct(entry: DripsHistory) -> tuple[bytes, list[tuple[int, int]], int, int]:
    drips_hash = bytes.fromhex((entry.drips_hash or ZERO_HASH)[2:])
    if entry.drips_hash:
        return (drips_hash, [], entry.update_time, entry.max_end)
    receivers = [to_drips_receiver_struct(r) for r in canonicalize_drips_receivers(entry.receivers)]
    return (drips_hash, receivers, entry.update_time, entry.max_end)


def drips_history_from_events(events: Iterable[DripsSetEvent]) -> list[DripsHistory]:
    """
    Build `squeezeDrips` history entries from drips set events, oldest first.

    Each entry lists the receivers seen with its event, so no receivers hash
    is needed.
    """
    history = []
    for event in sorted(events, key=lambda e: (e.block_timestamp, e.id)):
        receivers = [
            DripsReceiver(user_id=str(seen.receiver_user_id), config=seen.config)
            for seen in event.drips_receiver_seen_events
        ]
        history.append(
            DripsHistory(
                receivers=tuple(canonicalize_drips_receivers(receivers)),
                update_time=event.block_timestamp,
                max_end=event.max_end,
            )
        )
    return history


def squeeze_args_from_events(events: Iterable[DripsSetEvent], since: int) -> tuple[str, list[DripsHistory]]:
    """
    Return the `(history_hash, drips_history)` needed to squeeze drips streamed since `since`.

    The history starts at the last update at or before `since` (the
    configuration still active then), or at the first update if all are
    later. `history_hash` is that update's `drips_history_hash`, which is the
    sender's history hash right before it.

    Args:
        events: The sender's drips set events for one asset
        since: Unix timestamp to squeeze from, usually the current cycle start

    Raises:
        InvalidArgumentError: If there are no events
    """
    ordered = sorted(events, key=lambda e: (e.block_timestamp, e.id))
    if not ordered:
        raise InvalidArgumentError("Could not squeeze drips: the sender has no drips set events.", "events", [])

    first = 0
    for index, event in enumerate(ordered):
        if event.block_timestamp <= since:
            first = index

    squeezed = ordered[first:]
    return squeezed[0].drips_history_hash, drips_history_from_events(squeezed)


class AsyncDripsHubClient(AsyncContractClient):
    """
    Async client for the DripsHub contract.

    Example:
        >>> async with AsyncDripsHubClient(rpc_url="https://rpc.ankr.com/eth_goerli", private_key="0x...") as hub:
        ...     result = await hub.receive_drips(user_id, "0xToken...")
        ...     print(result.status)
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        private_key: str | None = None,
        chain_id: int = 5,
        hub_address: str | None = None,
    ) -> None:
        """
        Initialize the DripsHub client.

        Args:
            rpc_url: RPC endpoint URL. Falls back to DRIPS_RPC_URL env var.
            private_key: Private key for signing. Falls back to DRIPS_PRIVATE_KEY env var.
            chain_id: Chain ID (5 for Goerli)
            hub_address: Custom DripsHub address (uses the network's if not provided)

        Raises:
            ConfigurationError: If rpc_url or private_key not provided
            UnsupportedNetworkError: If chain_id is not supported
        """
        super().__init__(rpc_url, private_key, chain_id)

        self.hub_address = AsyncWeb3.to_checksum_address(hub_address or get_drips_hub_address(chain_id))
        self.hub = self.w3.eth.contract(address=self.hub_address, abi=DRIPS_HUB_ABI)

    async def cycle_secs(self) -> int:
        """Get the cycle length in seconds from the contract."""
        return await self.hub.functions.cycleSecs().call()

    async def splittable(self, user_id: str | int, token_address: str) -> int:
        """
        Get the user's received funds that are waiting to be split.

        Raises:
            InvalidAddressError: If token_address is not valid
            MissingArgumentError: If user_id is missing
            InvalidArgumentError: If user_id is not a uint256
        """
        parsed = validate_user_asset_input(user_id, token_address, "read balances")
        return await self.hub.functions.splittable(parsed, AsyncWeb3.to_checksum_address(token_address)).call()

    async def collectable(self, user_id: str | int, token_address: str) -> int:
        """
        Get the user's split funds that are ready to be collected.

        Raises:
            InvalidAddressError: If token_address is not valid
            MissingArgumentError: If user_id is missing
            InvalidArgumentError: If user_id is not a uint256
        """
        parsed = validate_user_asset_input(user_id, token_address, "read balances")
        return await self.hub.functions.collectable(parsed, AsyncWeb3.to_checksum_address(token_address)).call()

    async def receive_drips(
        self,
        user_id: str | int,
        token_address: str,
        max_cycles: int | None = None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Receive the user's drips from completed cycles, making them splittable.

        Args:
            user_id: The receiving user's ID
            token_address: ERC20 token address
            max_cycles: Cycles to receive at most (defaults to the network's max_receivable_cycles)
            gas: Gas options

        Raises:
            InvalidAddressError: If token_address is not valid
            MissingArgumentError: If user_id is missing
            InvalidArgumentError: If user_id is not a uint256 or max_cycles is not a positive uint32
        """
        if max_cycles is None:
            max_cycles = get_network_config(self.chain_id).max_receivable_cycles
        parsed = validate_receive_drips_input(user_id, token_address, max_cycles)

        call = self.hub.functions.receiveDrips(parsed, AsyncWeb3.to_checksum_address(token_address), max_cycles)
        return await self._send(call, DEFAULT_GAS_RECEIVE_DRIPS, gas)

    async def split(
        self,
        user_id: str | int,
        token_address: str,
        current_receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Split the user's splittable funds among their current splits receivers.

        `current_receivers` must be the user's configured receivers; they are
        canonicalized so the contract's hash check passes.

        Raises:
            InvalidAddressError: If token_address is not valid
            MissingArgumentError: If user_id or current_receivers is missing
            InvalidArgumentError: If user_id is not a uint256 or there are too many receivers
            InvalidSplitsReceiverError: If any receiver is not valid
        """
        receivers = canonicalize_splits_receivers(current_receivers)
        parsed = validate_split_input(user_id, token_address, receivers)

        call = self.hub.functions.split(
            parsed,
            AsyncWeb3.to_checksum_address(token_address),
            [to_splits_receiver_struct(r) for r in receivers],
        )
        return await self._send(call, DEFAULT_GAS_SPLIT, gas)

    async def squeeze_drips(
        self,
        user_id: str | int,
        token_address: str,
        sender_id: str | int,
        history_hash: str,
        drips_history: Sequence[DripsHistory] | None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Receive drips from the current, not yet finished cycle of one sender.

        Args:
            user_id: The receiving user's ID
            token_address: ERC20 token address
            sender_id: The sending user's ID
            history_hash: The sender's history hash right before the first `drips_history` entry
            drips_history: The sender's drips updates to squeeze, oldest first
            gas: Gas options

        Raises:
            InvalidAddressError: If token_address is not valid
            MissingArgumentError: If an ID, history_hash or drips_history is missing
            InvalidArgumentError: If an ID, the history hash or a history entry is malformed
            InvalidDripsReceiverError: If a history entry lists an invalid receiver

        Example:
            >>> history_hash, history = squeeze_args_from_events(sender_events, cycle_start)
            >>> await hub.squeeze_drips(my_id, token, sender_id, history_hash, history)
        """
        parsed_user_id, parsed_sender_id = validate_squeeze_drips_input(
            user_id, token_address, sender_id, history_hash, drips_history
        )

        call = self.hub.functions.squeezeDrips(
            parsed_user_id,
            AsyncWeb3.to_checksum_address(token_address),
            parsed_sender_id,
            bytes.fromhex(history_hash[2:]),
            [_drips_history_struct(entry) for entry in drips_history],
        )
        logger.debug("Squeezing %d drips history entries of sender %s", len(drips_history), parsed_sender_id)
        return await self._send(call, DEFAULT_GAS_SQUEEZE_DRIPS, gas)
