"""
Input validation for drips-sdk.

Everything here raises before any work is done, so a caller that gets an
exception can assume nothing was submitted or computed.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from web3 import Web3

from ._exceptions import (
    InvalidAddressError,
    InvalidArgumentError,
    InvalidDripsReceiverError,
    InvalidReceiverError,
    InvalidSplitsReceiverError,
    MissingArgumentError,
)
from .constants import MAX_DRIPS_RECEIVERS, MAX_SPLITS_RECEIVERS, MAX_USER_ID, TOTAL_SPLITS_WEIGHT
from .helpers import (
    MAX_AMT_PER_SEC,
    MAX_DRIP_ID,
    MAX_DURATION,
    MAX_PACKED_CONFIG,
    MAX_START,
    parse_user_id,
    unpack_receiver_config,
)
from .types import DripsHistory, DripsReceiver, DripsReceiverConfig, SplitsReceiver, UserMetadata

_Model = TypeVar("_Model", bound=BaseModel)

MAX_UINT32 = 2**32 - 1

_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def validate_address(address: Any) -> None:
    """Raise InvalidAddressError unless `address` is a valid Ethereum address."""
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddressError(address)


def _validate_config_field(name: str, value: Any, upper: int, minimum: int = 0) -> None:
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDripsReceiverError(
            f"Drips receiver config validation failed: '{name}' is missing or not an integer.",
            name,
            value,
        )
    if value < minimum:
        relation = "greater than 0" if minimum == 1 else f"greater than or equal to {minimum}"
        raise InvalidDripsReceiverError(
            f"Drips receiver config validation failed: '{name}' must be {relation}.",
            name,
            value,
        )
    if value > upper:
        raise InvalidDripsReceiverError(
            f"Drips receiver config validation failed: '{name}' must not exceed {upper}.",
            name,
            value,
        )


def validate_drips_receiver_config(config: DripsReceiverConfig | int | None) -> None:
    """Validate a drips receiver config, given as a model or in packed form."""
    if config is None:
        raise InvalidDripsReceiverError(
            "Drips receivers validation failed: 'config' is missing.", "config", config
        )

    if not isinstance(config, DripsReceiverConfig):
        if isinstance(config, bool) or not isinstance(config, int) or not 0 <= config <= MAX_PACKED_CONFIG:
            raise InvalidDripsReceiverError(
                "Drips receiver config validation failed: packed 'config' must be a uint256.",
                "config",
                config,
            )
        config = unpack_receiver_config(config)

    _validate_config_field("drip_id", config.drip_id, MAX_DRIP_ID)
    _validate_config_field("start", config.start, MAX_START)
    _validate_config_field("duration", config.duration, MAX_DURATION)
    _validate_config_field("amount_per_sec", config.amount_per_sec, MAX_AMT_PER_SEC, minimum=1)


def _validate_user_id(user_id: Any, error_class: type[InvalidReceiverError], kind: str) -> None:
    if user_id is None or user_id == "":
        raise error_class(f"{kind} receivers validation failed: 'user_id' is missing.", "user_id", user_id)
    try:
        parsed = parse_user_id(user_id)
    except (TypeError, ValueError):
        raise error_class(
            f"{kind} receivers validation failed: 'user_id' {user_id!r} is not an integer.",
            "user_id",
            user_id,
        ) from None
    if not 0 <= parsed <= MAX_USER_ID:
        raise error_class(
            f"{kind} receivers validation failed: 'user_id' {user_id!r} is not a uint256.",
            "user_id",
            user_id,
        )


def _as_list(receivers: Iterable[Any], kind: str) -> list[Any]:
    if isinstance(receivers, (str, bytes, Mapping)) or not isinstance(receivers, Iterable):
        raise InvalidArgumentError(
            f"{kind} receivers validation failed: 'receivers' must be a list of receivers.",
            "receivers",
            receivers,
        )
    return list(receivers)


def _coerce_receiver(
    receiver: Any,
    model: type[_Model],
    error_class: type[InvalidReceiverError],
    kind: str,
) -> _Model:
    if isinstance(receiver, model):
        return receiver
    if receiver is None:
        raise error_class(f"{kind} receivers validation failed: receiver is missing.", "receiver")
    if isinstance(receiver, Mapping):
        try:
            return model.model_validate(receiver)
        except PydanticValidationError as e:
            raise error_class(
                f"{kind} receivers validation failed: malformed receiver: {e}", "receiver", dict(receiver)
            ) from e
    raise error_class(
        f"{kind} receivers validation failed: {type(receiver).__name__} is not a receiver.", "receiver", receiver
    )


def validate_drips_receivers(receivers: Iterable[DripsReceiver | Mapping[str, Any]] | None) -> list[DripsReceiver]:
    """
    Validate a drips receivers list.

    Entries may be DripsReceiver models or their dict form; any iterable is
    accepted.

    Returns:
        The receivers as DripsReceiver models, in input order

    Raises:
        MissingArgumentError: If receivers is None
        InvalidArgumentError: If receivers is not a list or has more than MAX_DRIPS_RECEIVERS entries
        InvalidDripsReceiverError: If any receiver or its config is not valid
    """
    if receivers is None:
        raise MissingArgumentError("Drips receivers validation failed: 'receivers' is missing.", "receivers")

    receivers = _as_list(receivers, "Drips")
    if len(receivers) > MAX_DRIPS_RECEIVERS:
        raise InvalidArgumentError(
            "Drips receivers validation failed: max number of drips receivers exceeded. "
            f"Max allowed {MAX_DRIPS_RECEIVERS} but were {len(receivers)}.",
            "receivers",
            len(receivers),
        )

    validated = []
    for entry in receivers:
        receiver = _coerce_receiver(entry, DripsReceiver, InvalidDripsReceiverError, "Drips")
        _validate_user_id(receiver.user_id, InvalidDripsReceiverError, "Drips")
        validate_drips_receiver_config(receiver.config)
        validated.append(receiver)
    return validated


def validate_splits_receivers(receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None) -> list[SplitsReceiver]:
    """
    Validate a splits receivers list.

    Entries may be SplitsReceiver models or their dict form; any iterable is
    accepted.

    Returns:
        The receivers as SplitsReceiver models, in input order

    Raises:
        MissingArgumentError: If receivers is None
        InvalidArgumentError: If receivers is not a list or has more than MAX_SPLITS_RECEIVERS entries
        InvalidSplitsReceiverError: If any receiver is not valid
    """
    if receivers is None:
        raise MissingArgumentError("Splits receivers validation failed: 'receivers' is missing.", "receivers")

    receivers = _as_list(receivers, "Splits")
    if len(receivers) > MAX_SPLITS_RECEIVERS:
        raise InvalidArgumentError(
            "Splits receivers validation failed: max number of splits receivers exceeded. "
            f"Max allowed {MAX_SPLITS_RECEIVERS} but were {len(receivers)}.",
            "receivers",
            len(receivers),
        )

    validated = []
    for entry in receivers:
        receiver = _coerce_receiver(entry, SplitsReceiver, InvalidSplitsReceiverError, "Splits")
        _validate_user_id(receiver.user_id, InvalidSplitsReceiverError, "Splits")

        weight = receiver.weight
        if weight is None:
            raise InvalidSplitsReceiverError("Splits receivers validation failed: 'weight' is missing.", "weight", weight)
        if weight <= 0:
            raise InvalidSplitsReceiverError(
                "Splits receivers validation failed: 'weight' must be greater than 0.", "weight", weight
            )
        if weight > TOTAL_SPLITS_WEIGHT:
            raise InvalidSplitsReceiverError(
                f"Splits receivers validation failed: 'weight' must not exceed {TOTAL_SPLITS_WEIGHT}.",
                "weight",
                weight,
            )
        validated.append(receiver)
    return validated


def _require_user_id(user_id: Any, name: str, action: str) -> int:
    if user_id is None or user_id == "":
        raise MissingArgumentError(f"Could not {action}: '{name}' is missing.", name)
    try:
        parsed = parse_user_id(user_id)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Could not {action}: '{name}' {user_id!r} is not an integer.", name, user_id) from None
    if not 0 <= parsed <= MAX_USER_ID:
        raise InvalidArgumentError(f"Could not {action}: '{name}' {user_id!r} is not a uint256.", name, user_id)
    return parsed


def validate_max_cycles(max_cycles: Any) -> None:
    """Raise InvalidArgumentError unless `max_cycles` is a positive uint32."""
    if isinstance(max_cycles, bool) or not isinstance(max_cycles, int) or not 0 < max_cycles <= MAX_UINT32:
        raise InvalidArgumentError(
            "Could not receive drips: 'max_cycles' must be a uint32 greater than 0.", "max_cycles", max_cycles
        )


def validate_user_asset_input(user_id: Any, token_address: Any, action: str) -> int:
    """Validate a (user ID, token address) pair and return the parsed user ID."""
    validate_address(token_address)
    return _require_user_id(user_id, "user_id", action)


def validate_receive_drips_input(user_id: Any, token_address: Any, max_cycles: Any) -> int:
    """
    Validate `receiveDrips` input and return the parsed user ID.

    Raises:
        InvalidAddressError: If token_address is not valid
        MissingArgumentError: If user_id is missing
        InvalidArgumentError: If user_id is not a uint256 or max_cycles is not a positive uint32
    """
    parsed = validate_user_asset_input(user_id, token_address, "receive drips")
    validate_max_cycles(max_cycles)
    return parsed


def validate_split_input(
    user_id: Any,
    token_address: Any,
    current_receivers: Iterable[SplitsReceiver | Mapping[str, Any]] | None,
) -> int:
    """
    Validate `split` input and return the parsed user ID.

    Raises:
        InvalidAddressError: If token_address is not valid
        MissingArgumentError: If user_id or current_receivers is missing
        InvalidArgumentError: If user_id is not a uint256
        InvalidSplitsReceiverError: If any receiver is not valid
    """
    validate_splits_receivers(current_receivers)
    return validate_user_asset_input(user_id, token_address, "split")


def validate_history_hash(history_hash: Any, name: str = "history_hash") -> None:
    """Raise unless `history_hash` is a 0x-prefixed 32 byte hex string."""
    if history_hash is None or history_hash == "":
        raise MissingArgumentError(f"Invalid input for squeezing: '{name}' is missing.", name)
    if not isinstance(history_hash, str) or not _HASH_PATTERN.match(history_hash):
        raise InvalidArgumentError(
            f"Invalid input for squeezing: '{name}' must be a 32 byte hex string.", name, history_hash
        )


def validate_squeeze_drips_input(
    user_id: Any,
    token_address: Any,
    sender_id: Any,
    history_hash: Any,
    drips_history: Sequence[DripsHistory] | None,
) -> tuple[int, int]:
    """
    Validate `squeezeDrips` input and return the parsed (user ID, sender ID).

    Raises:
        InvalidAddressError: If token_address is not valid
        MissingArgumentError: If user_id, sender_id, history_hash or drips_history is missing
        InvalidArgumentError: If an ID, the history hash or a history entry is malformed
        InvalidDripsReceiverError: If a history entry lists an invalid receiver
    """
    validate_address(token_address)
    parsed_user_id = _require_user_id(user_id, "user_id", "squeeze drips")
    parsed_sender_id = _require_user_id(sender_id, "sender_id", "squeeze drips")
    validate_history_hash(history_hash)

    if drips_history is None:
        raise MissingArgumentError("Invalid input for squeezing: 'drips_history' is missing.", "drips_history")

    for entry in drips_history:
        if not isinstance(entry, DripsHistory):
            raise InvalidArgumentError(
                "Invalid input for squeezing: drips history entries must be DripsHistory.", "drips_history", entry
            )
        if entry.drips_hash:
            validate_history_hash(entry.drips_hash, "drips_hash")
            if entry.receivers:
                raise InvalidArgumentError(
                    "Invalid input for squeezing: a drips history entry has both a hash and receivers.",
                    "drips_history",
                    entry,
                )
        else:
            validate_drips_receivers(entry.receivers)
        for name in ("update_time", "max_end"):
            value = getattr(entry, name)
            if not 0 <= value <= MAX_UINT32:
                raise InvalidArgumentError(
                    f"Invalid input for squeezing: '{name}' must be a uint32.", name, value
                )

    return parsed_user_id, parsed_sender_id


def validate_user_metadata(metadata: Iterable[UserMetadata] | None) -> list[UserMetadata]:
    """
    Validate user metadata and return it as a list.

    Raises:
        MissingArgumentError: If metadata is None
        InvalidArgumentError: If a key or value is missing, or a key is longer than 32 bytes
    """
    if metadata is None:
        raise MissingArgumentError("Invalid user metadata: 'metadata' is missing.", "metadata")

    entries = list(metadata)
    for entry in entries:
        if not isinstance(entry, UserMetadata):
            raise InvalidArgumentError("Invalid user metadata: entries must be UserMetadata.", "metadata", entry)
        if entry.key is None or entry.key == "":
            raise InvalidArgumentError("Invalid user metadata: 'key' is missing.", "key", entry.key)
        if entry.value is None:
            raise InvalidArgumentError("Invalid user metadata: 'value' is missing.", "value", entry.value)
        if len(entry.key.encode("utf-8")) > 32:
            raise InvalidArgumentError("Invalid user metadata: 'key' must fit in 32 bytes.", "key", entry.key)
    return entries
