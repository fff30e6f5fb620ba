"""Helper functions for drips-sdk."""

from web3 import Web3

from ._exceptions import InvalidAddressError, InvalidArgumentError
from .constants import AMT_PER_SEC_BITS, DRIP_ID_BITS, DURATION_BITS, START_BITS
from .types import DripsReceiver, DripsReceiverConfig, SplitsReceiver, UserMetadata

_DURATION_SHIFT = 0
_START_SHIFT = DURATION_BITS
_AMT_PER_SEC_SHIFT = START_BITS + DURATION_BITS
_DRIP_ID_SHIFT = AMT_PER_SEC_BITS + START_BITS + DURATION_BITS

MAX_DRIP_ID = 2**DRIP_ID_BITS - 1
MAX_AMT_PER_SEC = 2**AMT_PER_SEC_BITS - 1
MAX_START = 2**START_BITS - 1
MAX_DURATION = 2**DURATION_BITS - 1
MAX_PACKED_CONFIG = 2**256 - 1


def parse_user_id(user_id: str | int) -> int:
    """
    Parse a user ID given as a decimal (or 0x-prefixed hex) string or int.

    Raises:
        ValueError: If the value is not an integer
    """
    if isinstance(user_id, bool):
        raise ValueError(f"Not a user ID: {user_id!r}")
    if isinstance(user_id, int):
        return user_id
    text = str(user_id).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text, 10)


def pack_receiver_config(config: DripsReceiverConfig) -> int:
    """
    Pack a drips receiver config into the uint256 stored on-chain.

    Layout (most significant first): dripId (32) | amtPerSec (160) | start (32) | duration (32).

    Example:
        >>> pack_receiver_config(DripsReceiverConfig(drip_id=0, amount_per_sec=1, start=0, duration=0))
        18446744073709551616
    """
    packed = config.drip_id or 0
    packed = (packed << AMT_PER_SEC_BITS) | (config.amount_per_sec or 0)
    packed = (packed << START_BITS) | (config.start or 0)
    packed = (packed << DURATION_BITS) | (config.duration or 0)
    return packed


def unpack_receiver_config(packed: int) -> DripsReceiverConfig:
    """Unpack a uint256 drips receiver config. Exact inverse of pack_receiver_config."""
    packed = int(packed)
    if packed < 0 or packed > MAX_PACKED_CONFIG:
        raise InvalidArgumentError(
            f"Packed drips receiver config must be a uint256, got {packed}.", "config", packed
        )
    return DripsReceiverConfig(
        drip_id=(packed >> _DRIP_ID_SHIFT) & MAX_DRIP_ID,
        amount_per_sec=(packed >> _AMT_PER_SEC_SHIFT) & MAX_AMT_PER_SEC,
        start=(packed >> _START_SHIFT) & MAX_START,
        duration=(packed >> _DURATION_SHIFT) & MAX_DURATION,
    )


def receiver_config_of(receiver: DripsReceiver) -> DripsReceiverConfig:
    """Return the receiver's config, unpacking it if it was given packed."""
    if isinstance(receiver.config, DripsReceiverConfig):
        return receiver.config
    return unpack_receiver_config(receiver.config)


def packed_config_of(receiver: DripsReceiver) -> int:
    """Return the receiver's config in its packed uint256 form."""
    if isinstance(receiver.config, DripsReceiverConfig):
        return pack_receiver_config(receiver.config)
    return int(receiver.config)


def to_drips_receiver_struct(receiver: DripsReceiver) -> tuple[int, int]:
    """Convert a (validated) DripsReceiver to the `(userId, config)` contract struct."""
    return (parse_user_id(receiver.user_id), packed_config_of(receiver))


def to_splits_receiver_struct(receiver: SplitsReceiver) -> tuple[int, int]:
    """Convert a (validated) SplitsReceiver to the `(userId, weight)` contract struct."""
    return (parse_user_id(receiver.user_id), int(receiver.weight))


def to_user_metadata_struct(metadata: UserMetadata) -> tuple[bytes, bytes]:
    """Convert (validated) UserMetadata to the `(key, value)` contract struct, the key right-padded to 32 bytes."""
    return (metadata.key.encode("utf-8").ljust(32, b"\0"), metadata.value.encode("utf-8"))


def get_asset_id_from_address(token_address: str) -> int:
    """
    Get the asset ID of an ERC20 token: its address as a uint160.

    Raises:
        InvalidAddressError: If token_address is not a valid address
    """
    if not token_address or not Web3.is_address(token_address):
        raise InvalidAddressError(token_address)
    return int(token_address, 16)


def get_address_from_asset_id(asset_id: int) -> str:
    """Get the checksummed ERC20 token address of an asset ID."""
    asset_id = int(asset_id)
    if asset_id < 0 or asset_id >= 2**160:
        raise InvalidArgumentError(f"Asset ID {asset_id} is not a uint160.", "asset_id", asset_id)
    return Web3.to_checksum_address("0x" + format(asset_id, "040x"))
