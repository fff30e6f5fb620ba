"""
Receiver list canonicalization.

DripsHub rejects receiver lists that are not strictly sorted or that contain
duplicates, so every list goes through here before it is submitted.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from .helpers import packed_config_of, parse_user_id, unpack_receiver_config
from .types import DripsReceiver, SplitsReceiver
from .validators import validate_drips_receivers, validate_splits_receivers


def _drips_receiver_key(receiver: DripsReceiver) -> tuple[int, int]:
    return (parse_user_id(receiver.user_id), packed_config_of(receiver))


def _splits_receiver_key(receiver: SplitsReceiver) -> tuple[int, int]:
    return (parse_user_id(receiver.user_id), int(receiver.weight))


def canonicalize_drips_receivers(receivers: Iterable[DripsReceiver | Mapping[str, Any]] | None) -> list[DripsReceiver]:
    """
    Validate, deduplicate and sort drips receivers into on-chain order.

    Two receivers are duplicates when they have the same user ID and the same
    (packed) config. The result is sorted by user ID, then by packed config,
    both compared as integers. Receivers come back normalized (decimal string
    user IDs, unpacked configs) and the input is not modified. Entries may
    also be given in their dict form.

    Raises:
        MissingArgumentError: If receivers is None
        InvalidArgumentError: If there are more than MAX_DRIPS_RECEIVERS receivers
        InvalidDripsReceiverError: If any receiver is not valid

    Example:
        >>> canonicalize_drips_receivers([
        ...     DripsReceiver(user_id="100", config=DripsReceiverConfig(amount_per_sec=1)),
        ...     DripsReceiver(user_id="1", config=DripsReceiverConfig(amount_per_sec=1)),
        ... ])  # user 1 first, then user 100
    """
    unique = {_drips_receiver_key(receiver) for receiver in validate_drips_receivers(receivers)}

    return [
        DripsReceiver(user_id=str(user_id), config=unpack_receiver_config(config))
        for user_id, config in sorted(unique)
    ]


def canonicalize_splits_receivers(receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None) -> list[SplitsReceiver]:
    """
    Validate, deduplicate and sort splits receivers into on-chain order.

    Two receivers are duplicates when they have the same user ID and weight.
    The result is sorted by user ID (as an integer), with the weight breaking
    ties. Receivers come back normalized (decimal string user IDs) and the
    input is not modified. Entries may also be given in their dict form.

    Raises:
        MissingArgumentError: If receivers is None
        InvalidArgumentError: If there are more than MAX_SPLITS_RECEIVERS receivers
        InvalidSplitsReceiverError: If any receiver is not valid
    """
    unique = {_splits_receiver_key(receiver) for receiver in validate_splits_receivers(receivers)}

    return [SplitsReceiver(user_id=str(user_id), weight=weight) for user_id, weight in sorted(unique)]
