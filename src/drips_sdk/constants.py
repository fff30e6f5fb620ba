"""Protocol constants and per-chain network configuration for drips-sdk."""

import os

from ._exceptions import UnsupportedNetworkError
from .types import NetworkConfig

# Receiver limits (enforced by DripsHub)
MAX_DRIPS_RECEIVERS = 100
MAX_SPLITS_RECEIVERS = 200

# Splits receivers get `weight / TOTAL_SPLITS_WEIGHT` of the split funds.
TOTAL_SPLITS_WEIGHT = 1_000_000

# `amtPerSec` carries 9 extra decimals on top of the token's own.
AMT_PER_SEC_EXTRA_DECIMALS = 9
AMT_PER_SEC_MULTIPLIER = 10**AMT_PER_SEC_EXTRA_DECIMALS

# Bit widths of the packed drips receiver config.
DRIP_ID_BITS = 32
AMT_PER_SEC_BITS = 160
START_BITS = 32
DURATION_BITS = 32

MAX_USER_ID = 2**256 - 1

ONE_WEEK_SECS = 7 * 24 * 60 * 60

# Upper bound of cycles a single `receiveDrips` call is asked to process.
DEFAULT_MAX_RECEIVABLE_CYCLES = 1000

NETWORKS: dict[int, NetworkConfig] = {
    5: NetworkConfig(
        chain_id=5,
        name="goerli",
        cycle_secs=ONE_WEEK_SECS,
        amt_per_sec_multiplier=AMT_PER_SEC_MULTIPLIER,
        max_receivable_cycles=DEFAULT_MAX_RECEIVABLE_CYCLES,
        drips_hub_address="0x4FaAB6032dd0264a8e2671F56fd30F69362f31Ad",
        address_driver_address="0x76F457CD4F60c0a634781bfdB8c5318050633A08",
        subgraph_url="https://api.thegraph.com/subgraphs/name/gh0stwheel/drips-on-goerli",
    ),
}

# Supported chain IDs
SUPPORTED_CHAIN_IDS: list[int] = sorted(NETWORKS)

# Environment fallbacks
ENV_RPC_URL = "DRIPS_RPC_URL"
ENV_PRIVATE_KEY = "DRIPS_PRIVATE_KEY"
ENV_SUBGRAPH_URL = "DRIPS_SUBGRAPH_URL"


def get_network_config(chain_id: int) -> NetworkConfig:
    """Get the network configuration for a given chain ID."""
    network = NETWORKS.get(chain_id)
    if network is None:
        raise UnsupportedNetworkError(chain_id)
    return network


def get_address_driver_address(chain_id: int) -> str:
    """Get the AddressDriver address for a given chain ID."""
    return get_network_config(chain_id).address_driver_address


def get_drips_hub_address(chain_id: int) -> str:
    """Get the DripsHub address for a given chain ID."""
    return get_network_config(chain_id).drips_hub_address


def get_immutable_splits_driver_address(chain_id: int) -> str | None:
    """Get the ImmutableSplitsDriver address for a given chain ID, if one is configured."""
    return get_network_config(chain_id).immutable_splits_driver_address


def get_subgraph_url(chain_id: int) -> str:
    """Get the subgraph URL for a chain, honouring DRIPS_SUBGRAPH_URL."""
    network = get_network_config(chain_id)
    return os.environ.get(ENV_SUBGRAPH_URL) or network.subgraph_url


def is_supported_chain(chain_id: int) -> bool:
    """Check if a chain is supported."""
    return chain_id in NETWORKS
