"""Custom exceptions for drips-sdk."""

from enum import Enum
from typing import Any


class DripsErrorCode(str, Enum):
    """Machine-readable error kinds."""

    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    UNSUPPORTED_NETWORK = "UNSUPPORTED_NETWORK"
    SUBGRAPH_QUERY_ERROR = "SUBGRAPH_QUERY_ERROR"
    INVALID_DRIPS_RECEIVER = "INVALID_DRIPS_RECEIVER"
    INVALID_SPLITS_RECEIVER = "INVALID_SPLITS_RECEIVER"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class DripsError(Exception):
    """Base exception for drips-sdk."""

    code: DripsErrorCode = DripsErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigurationError(DripsError):
    """Invalid configuration (missing RPC URL, private key, etc.)."""

    code = DripsErrorCode.CONFIGURATION_ERROR


class ValidationError(DripsError):
    """Input failed validation before any work was done."""


class MissingArgumentError(ValidationError):
    """A required argument is missing."""

    code = DripsErrorCode.MISSING_ARGUMENT

    def __init__(self, message: str, arg_name: str) -> None:
        super().__init__(message, {"missingArgumentName": arg_name})
        self.arg_name = arg_name


class InvalidArgumentError(ValidationError):
    """An argument is present but not acceptable (includes count exceeded)."""

    code = DripsErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, arg_name: str, arg_value: Any = None) -> None:
        super().__init__(message, {"invalidArgument": {"name": arg_name, "value": arg_value}})
        self.arg_name = arg_name
        self.arg_value = arg_value


class InvalidAddressError(ValidationError):
    """Not a valid Ethereum address."""

    code = DripsErrorCode.INVALID_ADDRESS

    def __init__(self, address: Any) -> None:
        super().__init__(
            f"Address validation failed: address '{address}' is not valid.",
            {"invalidAddress": address},
        )
        self.address = address


class InvalidReceiverError(ValidationError):
    """A drips or splits receiver is not valid."""

    def __init__(self, message: str, property_name: str, property_value: Any = None) -> None:
        super().__init__(
            message,
            {"invalidProperty": {"name": property_name, "value": property_value}},
        )
        self.property_name = property_name
        self.property_value = property_value


class InvalidDripsReceiverError(InvalidReceiverError):
    """A drips receiver (or its config) is not valid."""

    code = DripsErrorCode.INVALID_DRIPS_RECEIVER


class InvalidSplitsReceiverError(InvalidReceiverError):
    """A splits receiver is not valid."""

    code = DripsErrorCode.INVALID_SPLITS_RECEIVER


class UnsupportedNetworkError(DripsError):
    """Unsupported chain ID."""

    code = DripsErrorCode.UNSUPPORTED_NETWORK

    def __init__(self, chain_id: int | None) -> None:
        super().__init__(f"Chain {chain_id} is not supported", {"unsupportedChainId": chain_id})
        self.chain_id = chain_id


class SubgraphQueryError(DripsError):
    """The subgraph could not be queried or returned errors."""

    code = DripsErrorCode.SUBGRAPH_QUERY_ERROR
