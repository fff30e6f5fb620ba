"""Async client for the Drips AddressDriver contract."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from web3 import AsyncWeb3

from ._contract_client import AsyncContractClient
from ._exceptions import InvalidArgumentError, MissingArgumentError
from .abi import ADDRESS_DRIVER_ABI, DRIPS_HUB_ABI, ERC20_ABI
from .constants import get_address_driver_address, get_drips_hub_address, get_network_config
from .helpers import parse_user_id, to_drips_receiver_struct, to_splits_receiver_struct
from .receivers import canonicalize_drips_receivers, canonicalize_splits_receivers
from .transactions import (
    DEFAULT_GAS_APPROVE,
    DEFAULT_GAS_COLLECT,
    DEFAULT_GAS_GIVE,
    DEFAULT_GAS_RECEIVE_DRIPS,
    DEFAULT_GAS_SET_DRIPS,
    DEFAULT_GAS_SET_SPLITS,
    DEFAULT_GAS_SPLIT,
)
from .types import DripsReceiver, GasOptions, SplitsReceiver, TransactionResult
from .validators import validate_address, validate_max_cycles

logger = logging.getLogger(__name__)

MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1
MIN_INT128 = -(2**127)
MAX_INT128 = 2**127 - 1


class AsyncAddressDriverClient(AsyncContractClient):
    """
    Async client for configuring drips and splits through the AddressDriver.

    The signer's user ID is derived from its address. Receiver lists are
    always validated, deduplicated and sorted before they are submitted.

    Example:
        >>> import asyncio
        >>> from drips_sdk import AsyncAddressDriverClient, DripsReceiver, DripsReceiverConfig
        >>>
        >>> async def main():
        ...     async with AsyncAddressDriverClient(
        ...         rpc_url="https://rpc.ankr.com/eth_goerli",
        ...         private_key="0x...",
        ...     ) as client:
        ...         result = await client.set_drips(
        ...             "0xToken...",
        ...             current_receivers=[],
        ...             new_receivers=[
        ...                 DripsReceiver(user_id="1234", config=DripsReceiverConfig(amount_per_sec=10**9)),
        ...             ],
        ...             balance_delta=10**18,
        ...         )
        ...         print(result.status)
        >>>
        >>> asyncio.run(main())
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        private_key: str | None = None,
        chain_id: int = 5,
        driver_address: str | None = None,
        hub_address: str | None = None,
    ) -> None:
        """
        Initialize the AddressDriver client.

        Args:
            rpc_url: RPC endpoint URL. Falls back to DRIPS_RPC_URL env var.
            private_key: Private key for signing. Falls back to DRIPS_PRIVATE_KEY env var.
            chain_id: Chain ID (5 for Goerli)
            driver_address: Custom AddressDriver address (uses the network's if not provided)
            hub_address: Custom DripsHub address, used by `collect_all` (uses the network's if not provided)

        Raises:
            ConfigurationError: If rpc_url or private_key not provided
            UnsupportedNetworkError: If chain_id is not supported
        """
        super().__init__(rpc_url, private_key, chain_id)

        self.driver_address = AsyncWeb3.to_checksum_address(driver_address or get_address_driver_address(chain_id))
        self.driver = self.w3.eth.contract(address=self.driver_address, abi=ADDRESS_DRIVER_ABI)
        self.hub_address = AsyncWeb3.to_checksum_address(hub_address or get_drips_hub_address(chain_id))
        self.hub = self.w3.eth.contract(address=self.hub_address, abi=DRIPS_HUB_ABI)

    def _erc20(self, token_address: str):
        validate_address(token_address)
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(token_address), abi=ERC20_ABI)

    async def get_user_id(self) -> int:
        """Get the signer's user ID."""
        return await self.driver.functions.calcUserId(self.account.address).call()

    async def get_user_id_by_address(self, user_address: str) -> int:
        """
        Get the user ID of any address.

        Raises:
            InvalidAddressError: If user_address is not valid
        """
        validate_address(user_address)
        return await self.driver.functions.calcUserId(AsyncWeb3.to_checksum_address(user_address)).call()

    async def get_allowance(self, token_address: str) -> int:
        """Get how many of the signer's tokens the AddressDriver may spend."""
        erc20 = self._erc20(token_address)
        return await erc20.functions.allowance(self.account.address, self.driver_address).call()

    async def approve(
        self,
        token_address: str,
        amount: int = MAX_UINT256,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Allow the AddressDriver to spend the signer's tokens (unlimited by default).

        Raises:
            InvalidAddressError: If token_address is not valid
            InvalidArgumentError: If amount is not a uint256
        """
        erc20 = self._erc20(token_address)
        if not 0 <= amount <= MAX_UINT256:
            raise InvalidArgumentError(f"Could not approve: amount {amount} is not a uint256.", "amount", amount)

        call = erc20.functions.approve(self.driver_address, amount)
        return await self._send(call, DEFAULT_GAS_APPROVE, gas)

    async def set_drips(
        self,
        token_address: str,
        current_receivers: Sequence[DripsReceiver] | None,
        new_receivers: Sequence[DripsReceiver] | None,
        balance_delta: int = 0,
        transfer_to: str | None = None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Update the signer's drips configuration for a token.

        Args:
            token_address: ERC20 token address
            current_receivers: Receivers set by the last update (empty for the first one)
            new_receivers: Receivers to set (empty to stop streaming)
            balance_delta: Positive to top up, negative to withdraw, 0 to keep the balance
            transfer_to: Address withdrawn funds go to (defaults to the signer)
            gas: Gas options (estimation, EIP-1559 fees)

        Raises:
            InvalidAddressError: If token_address or transfer_to is not valid
            MissingArgumentError: If a receivers list is missing
            InvalidArgumentError: If balance_delta is not an int128 or a list is too long
            InvalidDripsReceiverError: If any receiver is not valid
        """
        validate_address(token_address)
        current = canonicalize_drips_receivers(current_receivers)
        new = canonicalize_drips_receivers(new_receivers)

        if isinstance(balance_delta, bool) or not MIN_INT128 <= balance_delta <= MAX_INT128:
            raise InvalidArgumentError(
                f"Could not set drips: balance delta {balance_delta} is not an int128.", "balance_delta", balance_delta
            )

        transfer_to = transfer_to or self.account.address
        validate_address(transfer_to)

        call = self.driver.functions.setDrips(
            AsyncWeb3.to_checksum_address(token_address),
            [to_drips_receiver_struct(r) for r in current],
            balance_delta,
            [to_drips_receiver_struct(r) for r in new],
            AsyncWeb3.to_checksum_address(transfer_to),
        )
        logger.debug("Setting %d drips receiver(s) for %s (balance delta %d)", len(new), token_address, balance_delta)
        return await self._send(call, DEFAULT_GAS_SET_DRIPS, gas)

    async def set_splits(
        self,
        receivers: Sequence[SplitsReceiver] | None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Replace the signer's splits receivers (empty to clear them).

        Raises:
            MissingArgumentError: If receivers is missing
            InvalidArgumentError: If there are too many receivers
            InvalidSplitsReceiverError: If any receiver is not valid
        """
        splits = canonicalize_splits_receivers(receivers)

        call = self.driver.functions.setSplits([to_splits_receiver_struct(r) for r in splits])
        logger.debug("Setting %d splits receiver(s)", len(splits))
        return await self._send(call, DEFAULT_GAS_SET_SPLITS, gas)

    async def give(
        self,
        receiver_user_id: int | str | None,
        token_address: str,
        amount: int,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Give tokens to a user; the receiver can collect them immediately.

        Raises:
            MissingArgumentError: If receiver_user_id is missing
            InvalidArgumentError: If receiver_user_id is not an integer or amount is not a uint128
            InvalidAddressError: If token_address is not valid
        """
        if receiver_user_id is None or receiver_user_id == "":
            raise MissingArgumentError("Could not give: 'receiver_user_id' is missing.", "receiver_user_id")
        try:
            receiver = parse_user_id(receiver_user_id)
        except (TypeError, ValueError):
            raise InvalidArgumentError(
                f"Could not give: receiver user ID {receiver_user_id!r} is not an integer.",
                "receiver_user_id",
                receiver_user_id,
            ) from None
        validate_address(token_address)
        if isinstance(amount, bool) or not 0 <= amount <= MAX_UINT128:
            raise InvalidArgumentError(f"Could not give: amount {amount} is not a uint128.", "amount", amount)

        call = self.driver.functions.give(receiver, AsyncWeb3.to_checksum_address(token_address), amount)
        return await self._send(call, DEFAULT_GAS_GIVE, gas)

    async def collect(
        self,
        token_address: str,
        transfer_to: str | None = None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Collect the signer's received and split funds.

        Raises:
            InvalidAddressError: If token_address or transfer_to is not valid
        """
        validate_address(token_address)
        transfer_to = transfer_to or self.account.address
        validate_address(transfer_to)

        call = self.driver.functions.collect(
            AsyncWeb3.to_checksum_address(token_address), AsyncWeb3.to_checksum_address(transfer_to)
        )
        return await self._send(call, DEFAULT_GAS_COLLECT, gas)

    async def collect_for_address(
        self,
        user_address: str,
        token_address: str,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Collect the signer's received and split funds and send them to `user_address`.

        The AddressDriver only collects for the calling address, so
        `user_address` is where the funds go, not whose funds are collected.

        Raises:
            InvalidAddressError: If user_address or token_address is not valid
        """
        validate_address(user_address)
        return await self.collect(token_address, transfer_to=user_address, gas=gas)

    async def collect_all(
        self,
        token_address: str,
        current_receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None,
        transfer_to: str | None = None,
        max_cycles: int | None = None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Receive, split and collect all of the signer's funds.

        Sends three transactions in order: DripsHub `receiveDrips`, DripsHub
        `split` with the signer's current splits receivers, then `collect`.
        Stops at the first one that fails and returns its result; otherwise
        returns the result of `collect`.

        Args:
            token_address: ERC20 token address
            current_receivers: The signer's current splits receivers
            transfer_to: Address collected funds go to (defaults to the signer)
            max_cycles: Cycles to receive at most (defaults to the network's max_receivable_cycles)
            gas: Gas options, applied to every transaction

        Raises:
            InvalidAddressError: If token_address or transfer_to is not valid
            MissingArgumentError: If current_receivers is missing
            InvalidArgumentError: If max_cycles is not a positive uint32 or there are too many receivers
            InvalidSplitsReceiverError: If any receiver is not valid
        """
        validate_address(token_address)
        splits = canonicalize_splits_receivers(current_receivers)
        if max_cycles is None:
            max_cycles = get_network_config(self.chain_id).max_receivable_cycles
        validate_max_cycles(max_cycles)
        transfer_to = transfer_to or self.account.address
        validate_address(transfer_to)

        user_id = await self.get_user_id()
        token = AsyncWeb3.to_checksum_address(token_address)
        structs = [to_splits_receiver_struct(r) for r in splits]
        recipient = AsyncWeb3.to_checksum_address(transfer_to)
        steps = (
            ("receive", lambda: self.hub.functions.receiveDrips(user_id, token, max_cycles), DEFAULT_GAS_RECEIVE_DRIPS),
            ("split", lambda: self.hub.functions.split(user_id, token, structs), DEFAULT_GAS_SPLIT),
            ("collect", lambda: self.driver.functions.collect(token, recipient), DEFAULT_GAS_COLLECT),
        )

        # Each call is built only once the previous transaction confirmed.
        result = None
        for step, build_call, default_gas in steps:
            result = await self._send(build_call(), default_gas, gas)
            if result.status != "CONFIRMED":
                logger.warning("collect_all stopped at %s for user %s", step, user_id)
                return result
        return result

    async def collect_all_for_address(
        self,
        user_address: str,
        token_address: str,
        current_receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None,
        max_cycles: int | None = None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Like `collect_all`, sending the collected funds to `user_address`.

        Raises:
            InvalidAddressError: If user_address or token_address is not valid
            MissingArgumentError: If current_receivers is missing
            InvalidSplitsReceiverError: If any receiver is not valid
        """
        validate_address(user_address)
        return await self.collect_all(
            token_address, current_receivers, transfer_to=user_address, max_cycles=max_cycles, gas=gas
        )
