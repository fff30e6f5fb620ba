"""Type definitions for drips-sdk."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


class NetworkConfig(BaseModel):
    """Deployed protocol parameters and contract addresses for one chain."""

    chain_id: int
    name: str
    cycle_secs: int = Field(gt=0)
    cycle_epoch: int = 0
    amt_per_sec_multiplier: int = Field(gt=0)
    max_receivable_cycles: int = Field(gt=0)
    drips_hub_address: str
    address_driver_address: str
    subgraph_url: str
    immutable_splits_driver_address: str | None = None

    model_config = {"frozen": True}


# Receivers
#
# Fields are deliberately unconstrained here: receivers are checked by
# `drips_sdk.validators` so that bad input surfaces as the SDK's own
# receiver errors instead of pydantic's.


class DripsReceiverConfig(BaseModel):
    """
    A drips stream configuration.

    `amount_per_sec` is fixed-point with AMT_PER_SEC_EXTRA_DECIMALS extra
    decimals, e.g. 1 token-wei per second is `1 * AMT_PER_SEC_MULTIPLIER`.

    Example:
        DripsReceiverConfig(drip_id=1, amount_per_sec=10**9)  # 1 wei/sec, from now, until funds run out
    """

    drip_id: int | None = 0
    start: int | None = 0
    """Unix timestamp the stream starts at, 0 meaning "when the config is set"."""

    duration: int | None = 0
    """Seconds the stream lasts, 0 meaning "until the balance runs out"."""

    amount_per_sec: int | None = None

    model_config = {"frozen": True}

    def to_uint256(self) -> int:
        """Pack this config into the uint256 stored on-chain."""
        from .helpers import pack_receiver_config

        return pack_receiver_config(self)

    @classmethod
    def from_uint256(cls, packed: int) -> "DripsReceiverConfig":
        """Unpack a uint256 config. Exact inverse of `to_uint256` for in-range configs."""
        from .helpers import unpack_receiver_config

        return unpack_receiver_config(packed)


class DripsReceiver(BaseModel):
    """A drips receiver: a user ID and either a config or its packed uint256 form."""

    user_id: str | int | None = None
    config: DripsReceiverConfig | int | None = None

    model_config = {"frozen": True}


class SplitsReceiver(BaseModel):
    """
    A splits receiver.

    The receiver gets `weight / TOTAL_SPLITS_WEIGHT` of the split funds.
    """

    user_id: str | int | None = None
    weight: int | None = None

    model_config = {"frozen": True}


class DripsHistory(BaseModel):
    """
    One entry of a sender's drips history, as passed to `squeezeDrips`.

    Either `receivers` is given (and `drips_hash` left empty) or only the
    receivers list hash is.
    """

    drips_hash: str | None = None
    receivers: tuple[DripsReceiver, ...] = ()
    update_time: int
    max_end: int

    model_config = {"frozen": True}


class UserMetadata(BaseModel):
    """A key-value pair emitted as user metadata. `key` must fit in 32 bytes of UTF-8."""

    key: str | None = None
    value: str | None = None

    model_config = {"frozen": True}


class Cycle(BaseModel):
    """The accounting cycle containing `timestamp`."""

    timestamp: int
    current_cycle_start: int
    next_cycle_start: int
    cycle_duration_secs: int

    model_config = {"frozen": True}

    @property
    def current_cycle_start_date(self) -> datetime:
        return datetime.fromtimestamp(self.current_cycle_start, tz=timezone.utc)

    @property
    def next_cycle_start_date(self) -> datetime:
        return datetime.fromtimestamp(self.next_cycle_start, tz=timezone.utc)


# Subgraph entities


class DripsReceiverSeenEvent(BaseModel):
    """A receiver that became active with a drips configuration update."""

    id: str
    receiver_user_id: int
    sender_user_id: int
    config: int
    asset_id: int
    drips_set_event_id: str | None = None
    block_timestamp: int

    model_config = {"frozen": True}


class DripsSetEvent(BaseModel):
    """
    One drips configuration update of a user for an asset.

    `max_end` is the timestamp at which `balance` runs out at the configured
    rates. `drips_history_hash` chains all updates of the (user, asset) pair
    and is passed through untouched for squeezing.
    """

    id: str
    user_id: int
    asset_id: int
    drips_history_hash: str
    balance: int
    block_timestamp: int
    max_end: int
    drips_receiver_seen_events: tuple[DripsReceiverSeenEvent, ...] = ()

    model_config = {"frozen": True}


class SqueezedDripsEvent(BaseModel):
    """Funds squeezed by `user_id` from `sender_id` before the receive point."""

    id: str
    user_id: int
    asset_id: int
    sender_id: int
    amount: int
    block_timestamp: int
    drips_history_hashes: tuple[str, ...] = ()

    model_config = {"frozen": True}


class ReceivedDripsEvent(BaseModel):
    """A `receiveDrips` call for a user and asset."""

    id: str
    user_id: int
    asset_id: int
    amount: int
    receivable_cycles: int
    block_timestamp: int

    model_config = {"frozen": True}


class DripsEntry(BaseModel):
    """A currently configured drips receiver, as indexed by the subgraph."""

    id: str
    user_id: int
    config: int

    model_config = {"frozen": True}


class UserAssetConfig(BaseModel):
    """A user's current drips configuration for one asset."""

    id: str
    asset_id: int
    drips_entries: tuple[DripsEntry, ...] = ()
    balance: int
    amount_collected: int
    last_updated_block_timestamp: int

    model_config = {"frozen": True}


class SplitsEntry(BaseModel):
    """A currently configured splits receiver, as indexed by the subgraph."""

    id: str
    user_id: int
    weight: int

    model_config = {"frozen": True}


# Estimation


class AssetState(BaseModel):
    """Per-asset account state that cannot be derived from drips-set events."""

    asset_id: int
    receivable_from: int = 0
    """Timestamp of the last on-chain receive point (0 if never received)."""

    splittable_amount: int | None = None
    collectable_amount: int | None = None

    model_config = {"frozen": True}


class AccountSnapshot(BaseModel):
    """
    Everything the estimator needs to know about an account.

    `drips_set_events` holds the account's own updates and those of every
    user streaming to it, in any order.
    """

    user_id: int
    chain_id: int
    drips_set_events: tuple[DripsSetEvent, ...] = ()
    asset_states: tuple[AssetState, ...] = ()
    fetched_at: int = 0

    model_config = {"frozen": True}


class StreamEstimate(BaseModel):
    """Estimated funds moved between two users for one asset."""

    sender_user_id: int
    receiver_user_id: int
    asset_id: int
    token_address: str
    drip_ids: tuple[int, ...]
    amount_per_sec: int
    """Currently active rate (fixed-point), 0 if the stream is not running."""

    estimated_amount: int

    model_config = {"frozen": True}


class AssetEstimate(BaseModel):
    """Estimate for one asset of an account."""

    asset_id: int
    token_address: str
    receivable_amount: int
    current_cycle_amount: int
    """Part of `receivable_amount` in the running cycle (squeezable, not yet receivable on-chain)."""

    splittable_amount: int | None = None
    collectable_amount: int | None = None
    total_streams_count: int
    incoming_streams: tuple[StreamEstimate, ...] = ()
    outgoing_streams: tuple[StreamEstimate, ...] = ()
    streamed_amount: int = 0
    """Streamed out since the account's last drips configuration update."""

    remaining_balance: int | None = None
    amount_per_sec_out: int = 0
    is_balance_exhausted: bool = False

    model_config = {"frozen": True}


class AccountEstimate(BaseModel):
    """Read-only mapping of asset ID to `AssetEstimate`."""

    user_id: int
    chain_id: int
    cycle: Cycle
    assets: tuple[AssetEstimate, ...] = ()

    model_config = {"frozen": True}

    def get(self, asset_id: int) -> AssetEstimate | None:
        for asset in self.assets:
            if asset.asset_id == asset_id:
                return asset
        return None

    def __getitem__(self, asset_id: int) -> AssetEstimate:
        asset = self.get(asset_id)
        if asset is None:
            raise KeyError(asset_id)
        return asset

    def __contains__(self, asset_id: object) -> bool:
        return any(asset.asset_id == asset_id for asset in self.assets)

    @property
    def asset_ids(self) -> list[int]:
        return [asset.asset_id for asset in self.assets]

    def as_dict(self) -> dict[int, AssetEstimate]:
        """Return a fresh dict; mutating it does not affect the estimate."""
        return {asset.asset_id: asset for asset in self.assets}


# Transactions

TxStatus = Literal["CONFIRMED", "FAILED"]
FailedReason = Literal[
    "wallet_rejected",
    "wallet_disconnected",
    "network_error",
    "transaction_failed",
    "transaction_reverted",
    "insufficient_gas",
]


class TransactionResult(BaseModel):
    """
    Result of a contract transaction.

    status: CONFIRMED | FAILED
    """

    status: TxStatus
    tx_hash: str | None = None
    reason: FailedReason | str | None = None
    message: str | None = None

    model_config = {"frozen": True}


class GasOptions(BaseModel):
    """
    Gas configuration for transactions.

    By default, uses fixed gas limits and lets the RPC set gas prices.
    Enable estimate_gas for dynamic estimation, or set EIP-1559 fees explicitly.

    Example:
        GasOptions(estimate_gas=True)  # Dynamic estimation with 20% buffer
        GasOptions(max_fee_per_gas=50_000_000_000)  # 50 gwei max fee
    """

    estimate_gas: bool = False
    """Estimate gas dynamically (adds 20% buffer). Default: False (use fixed limits)."""

    gas_limit: int | None = None
    """Override gas limit. If None, uses default or estimation."""

    max_fee_per_gas: int | None = None
    """EIP-1559 max fee per gas in wei. If set, uses type 2 transactions."""

    max_priority_fee_per_gas: int | None = None
    """EIP-1559 priority fee per gas in wei. Defaults to 1 gwei if max_fee is set."""

    model_config = {"frozen": True}
