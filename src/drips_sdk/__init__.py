# Suppress websockets deprecation warning from web3.py (ethereum/web3.py#3530)
# web3.py unconditionally imports LegacyWebSocketProvider even for HTTP-only usage.
# This will be fixed in web3.py v8. Remove this filter after upgrading.
import warnings

warnings.filterwarnings(
    "ignore",
    message="websockets.legacy is deprecated",
    category=DeprecationWarning,
    module=r"websockets\.legacy",
)

"""
Drips SDK

Client for the Drips funds-streaming protocol: estimate what an account
can receive, configure its drips and splits through the AddressDriver,
and receive, split, squeeze and collect funds through DripsHub.

Usage (estimation):
    import asyncio
    from drips_sdk import AccountEstimator

    async def main():
        estimator = await AccountEstimator.create(user_id, chain_id=5)
        estimate = estimator.estimate()

        for asset in estimate.assets:
            print(asset.token_address, asset.receivable_amount)

    asyncio.run(main())

Usage (configuration):
    from drips_sdk import AsyncAddressDriverClient, DripsReceiver, DripsReceiverConfig

    async with AsyncAddressDriverClient(rpc_url="https://...", private_key="0x...") as client:
        result = await client.set_drips(
            "0xToken...",
            current_receivers=[],
            new_receivers=[DripsReceiver(user_id="1234", config=DripsReceiverConfig(amount_per_sec=10**9))],
            balance_delta=10**18,
        )

Low-level (pure) functions:
    from drips_sdk import EstimatorEngine, canonicalize_drips_receivers, get_cycle_info

    receivers = canonicalize_drips_receivers(receivers)
    estimate = EstimatorEngine().estimate_account(snapshot, get_cycle_info(5))
"""

from ._exceptions import (
    ConfigurationError,
    DripsError,
    DripsErrorCode,
    InvalidAddressError,
    InvalidArgumentError,
    InvalidDripsReceiverError,
    InvalidReceiverError,
    InvalidSplitsReceiverError,
    MissingArgumentError,
    SubgraphQueryError,
    UnsupportedNetworkError,
    ValidationError,
)
from ._version import __version__

# ABIs (for advanced usage)
from .abi import ADDRESS_DRIVER_ABI, DRIPS_HUB_ABI, ERC20_ABI, IMMUTABLE_SPLITS_DRIVER_ABI

# Data sources
from .account_service import AccountService

# Chain clients
from .address_driver import AsyncAddressDriverClient

# Constants
from .constants import (
    AMT_PER_SEC_EXTRA_DECIMALS,
    AMT_PER_SEC_MULTIPLIER,
    MAX_DRIPS_RECEIVERS,
    MAX_SPLITS_RECEIVERS,
    NETWORKS,
    SUPPORTED_CHAIN_IDS,
    TOTAL_SPLITS_WEIGHT,
    get_address_driver_address,
    get_drips_hub_address,
    get_immutable_splits_driver_address,
    get_network_config,
    get_subgraph_url,
    is_supported_chain,
)

# Cycles
from .cycle import cycle_start_of, get_cycle_info
from .drips_hub import AsyncDripsHubClient, ZERO_HASH, drips_history_from_events, squeeze_args_from_events

# Estimation
from .estimator import AccountEstimator, EstimatorEngine, dripped_amount

# Helpers
from .helpers import (
    get_address_from_asset_id,
    get_asset_id_from_address,
    pack_receiver_config,
    to_user_metadata_struct,
    unpack_receiver_config,
)
from .history import EventHistory, unique_senders
from .immutable_splits import AsyncImmutableSplitsDriverClient

# Receivers
from .receivers import canonicalize_drips_receivers, canonicalize_splits_receivers
from .subgraph import DripsSubgraphClient

# Types
from .types import (
    AccountEstimate,
    AccountSnapshot,
    AssetEstimate,
    AssetState,
    Cycle,
    DripsEntry,
    DripsHistory,
    DripsReceiver,
    DripsReceiverConfig,
    DripsReceiverSeenEvent,
    DripsSetEvent,
    FailedReason,
    GasOptions,
    NetworkConfig,
    ReceivedDripsEvent,
    SplitsEntry,
    SplitsReceiver,
    SqueezedDripsEvent,
    StreamEstimate,
    TransactionResult,
    TxStatus,
    UserAssetConfig,
    UserMetadata,
)
from .validators import (
    validate_address,
    validate_drips_receivers,
    validate_receive_drips_input,
    validate_split_input,
    validate_splits_receivers,
    validate_squeeze_drips_input,
    validate_user_metadata,
)

__all__ = [
    # Version
    "__version__",
    # Clients
    "AccountEstimator",
    "AccountService",
    "AsyncAddressDriverClient",
    "AsyncDripsHubClient",
    "AsyncImmutableSplitsDriverClient",
    "DripsSubgraphClient",
    "EstimatorEngine",
    # Receivers
    "canonicalize_drips_receivers",
    "canonicalize_splits_receivers",
    "validate_address",
    "validate_drips_receivers",
    "validate_splits_receivers",
    "validate_receive_drips_input",
    "validate_split_input",
    "validate_squeeze_drips_input",
    "validate_user_metadata",
    # Squeezing
    "ZERO_HASH",
    "drips_history_from_events",
    "squeeze_args_from_events",
    # Cycles and history
    "get_cycle_info",
    "cycle_start_of",
    "EventHistory",
    "unique_senders",
    "dripped_amount",
    # Types
    "DripsReceiver",
    "DripsReceiverConfig",
    "SplitsReceiver",
    "DripsHistory",
    "UserMetadata",
    "Cycle",
    "NetworkConfig",
    "DripsSetEvent",
    "DripsReceiverSeenEvent",
    "SqueezedDripsEvent",
    "ReceivedDripsEvent",
    "DripsEntry",
    "SplitsEntry",
    "UserAssetConfig",
    "AssetState",
    "AccountSnapshot",
    "AccountEstimate",
    "AssetEstimate",
    "StreamEstimate",
    "TransactionResult",
    "TxStatus",
    "FailedReason",
    "GasOptions",
    # Constants
    "AMT_PER_SEC_EXTRA_DECIMALS",
    "AMT_PER_SEC_MULTIPLIER",
    "MAX_DRIPS_RECEIVERS",
    "MAX_SPLITS_RECEIVERS",
    "TOTAL_SPLITS_WEIGHT",
    "NETWORKS",
    "SUPPORTED_CHAIN_IDS",
    "get_network_config",
    "get_address_driver_address",
    "get_drips_hub_address",
    "get_immutable_splits_driver_address",
    "get_subgraph_url",
    "is_supported_chain",
    # Helpers
    "pack_receiver_config",
    "unpack_receiver_config",
    "get_asset_id_from_address",
    "get_address_from_asset_id",
    "to_user_metadata_struct",
    # ABIs
    "ADDRESS_DRIVER_ABI",
    "DRIPS_HUB_ABI",
    "IMMUTABLE_SPLITS_DRIVER_ABI",
    "ERC20_ABI",
    # Exceptions
    "DripsError",
    "DripsErrorCode",
    "ConfigurationError",
    "ValidationError",
    "MissingArgumentError",
    "InvalidArgumentError",
    "InvalidAddressError",
    "InvalidReceiverError",
    "InvalidDripsReceiverError",
    "InvalidSplitsReceiverError",
    "UnsupportedNetworkError",
    "SubgraphQueryError",
]
