"""Async client for the ImmutableSplitsDriver contract."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from web3 import AsyncWeb3

from ._contract_client import AsyncContractClient
from ._exceptions import ConfigurationError, InvalidArgumentError
from .abi import IMMUTABLE_SPLITS_DRIVER_ABI
from .constants import TOTAL_SPLITS_WEIGHT, get_immutable_splits_driver_address
from .helpers import to_splits_receiver_struct, to_user_metadata_struct
from .receivers import canonicalize_splits_receivers
from .transactions import DEFAULT_GAS_CREATE_SPLITS
from .types import GasOptions, SplitsReceiver, TransactionResult, UserMetadata
from .validators import validate_address, validate_user_metadata

logger = logging.getLogger(__name__)


class AsyncImmutableSplitsDriverClient(AsyncContractClient):
    """
    Async client for creating immutable splits configurations.

    Anybody can create a new user ID with a splits configuration, but nobody
    can change that configuration afterwards.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        private_key: str | None = None,
        chain_id: int = 5,
        driver_address: str | None = None,
    ) -> None:
        """
        Initialize the ImmutableSplitsDriver client.

        Args:
            rpc_url: RPC endpoint URL. Falls back to DRIPS_RPC_URL env var.
            private_key: Private key for signing. Falls back to DRIPS_PRIVATE_KEY env var.
            chain_id: Chain ID (5 for Goerli)
            driver_address: ImmutableSplitsDriver address (uses the network's if not provided)

        Raises:
            ConfigurationError: If rpc_url or private_key not provided, or the
                network has no ImmutableSplitsDriver and driver_address is not given
            UnsupportedNetworkError: If chain_id is not supported
            InvalidAddressError: If driver_address is not valid
        """
        super().__init__(rpc_url, private_key, chain_id)

        resolved = driver_address or get_immutable_splits_driver_address(chain_id)
        if not resolved:
            raise ConfigurationError(f"driver_address required: chain {chain_id} has no known ImmutableSplitsDriver")
        validate_address(resolved)

        self.driver_address = AsyncWeb3.to_checksum_address(resolved)
        self.driver = self.w3.eth.contract(address=self.driver_address, abi=IMMUTABLE_SPLITS_DRIVER_ABI)

    async def create_splits(
        self,
        receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None,
        metadata: Iterable[UserMetadata] | None,
        gas: GasOptions | None = None,
    ) -> TransactionResult:
        """
        Create a new user ID with an immutable splits configuration and emit its metadata.

        This is the only chance to emit metadata for the created user. The
        receivers' weights must add up to TOTAL_SPLITS_WEIGHT.

        Args:
            receivers: The splits receivers
            metadata: User metadata to emit, may be empty
            gas: Gas options

        Raises:
            MissingArgumentError: If receivers or metadata is missing
            InvalidArgumentError: If the weights do not add up to TOTAL_SPLITS_WEIGHT,
                there are too many receivers, or a metadata entry is malformed
            InvalidSplitsReceiverError: If any receiver is not valid

        Example:
            >>> await client.create_splits(
            ...     [SplitsReceiver(user_id="1", weight=600_000), SplitsReceiver(user_id="2", weight=400_000)],
            ...     [UserMetadata(key="name", value="team")],
            ... )
        """
        splits = canonicalize_splits_receivers(receivers)
        total = sum(int(r.weight) for r in splits)
        if total != TOTAL_SPLITS_WEIGHT:
            raise InvalidArgumentError(
                f"Could not create immutable splits: weights add up to {total}, not {TOTAL_SPLITS_WEIGHT}.",
                "receivers",
                total,
            )
        entries = validate_user_metadata(metadata)

        call = self.driver.functions.createSplits(
            [to_splits_receiver_struct(r) for r in splits],
            [to_user_metadata_struct(m) for m in entries],
        )
        logger.debug("Creating immutable splits with %d receivers", len(splits))
        return await self._send(call, DEFAULT_GAS_CREATE_SPLITS, gas)
