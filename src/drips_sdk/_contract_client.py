"""Shared signer and provider setup for the contract clients."""

import os
from typing import TypeVar

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3
from web3.contract.async_contract import AsyncContractFunction

from ._exceptions import ConfigurationError, UnsupportedNetworkError
from .constants import ENV_PRIVATE_KEY, ENV_RPC_URL, is_supported_chain
from .transactions import send_transaction
from .types import GasOptions, TransactionResult

_Client = TypeVar("_Client", bound="AsyncContractClient")


class AsyncContractClient:
    """
    Base for clients that sign and send transactions to a Drips contract.

    Subclasses bind their contract(s) to `self.w3` after calling
    `super().__init__`.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        private_key: str | None = None,
        chain_id: int = 5,
    ) -> None:
        """
        Args:
            rpc_url: RPC endpoint URL. Falls back to DRIPS_RPC_URL env var.
            private_key: Private key for signing. Falls back to DRIPS_PRIVATE_KEY env var.
            chain_id: Chain ID (5 for Goerli)

        Raises:
            ConfigurationError: If rpc_url or private_key not provided
            UnsupportedNetworkError: If chain_id is not supported
        """
        resolved_rpc = rpc_url or os.environ.get(ENV_RPC_URL)
        if not resolved_rpc:
            raise ConfigurationError(f"rpc_url required (or set {ENV_RPC_URL})")

        resolved_key = private_key or os.environ.get(ENV_PRIVATE_KEY)
        if not resolved_key:
            raise ConfigurationError(f"private_key required (or set {ENV_PRIVATE_KEY})")

        if not is_supported_chain(chain_id):
            raise UnsupportedNetworkError(chain_id)

        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(resolved_rpc))
        self.account: LocalAccount = Account.from_key(resolved_key)
        self.chain_id = chain_id

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.w3.provider.disconnect()

    async def __aenter__(self: _Client) -> _Client:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def address(self) -> str:
        """Get the wallet address."""
        return self.account.address

    async def _send(
        self,
        call: AsyncContractFunction,
        default_gas: int,
        gas: GasOptions | None,
    ) -> TransactionResult:
        return await send_transaction(self.w3, self.account, call, default_gas, gas)
