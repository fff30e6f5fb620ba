"""Cycle math for drips-sdk."""

import time

from .constants import get_network_config
from .types import Cycle


def cycle_start_of(timestamp: int, cycle_secs: int, epoch: int = 0) -> int:
    """Start of the cycle containing `timestamp`."""
    return timestamp - (timestamp - epoch) % cycle_secs


def cycle_index_of(timestamp: int, cycle_secs: int, epoch: int = 0) -> int:
    """Zero-based index of the cycle containing `timestamp`, counted from `epoch`."""
    return (timestamp - epoch) // cycle_secs


def get_cycle_info(chain_id: int, timestamp: int | None = None) -> Cycle:
    """
    Get the cycle containing `timestamp` (default: now) on a chain.

    Raises:
        UnsupportedNetworkError: If chain_id is not supported

    Example:
        >>> cycle = get_cycle_info(5, timestamp=1_209_600)  # exactly on a boundary
        >>> cycle.current_cycle_start
        1209600
    """
    network = get_network_config(chain_id)
    now = int(time.time()) if timestamp is None else int(timestamp)

    current_cycle_start = cycle_start_of(now, network.cycle_secs, network.cycle_epoch)

    return Cycle(
        timestamp=now,
        current_cycle_start=current_cycle_start,
        next_cycle_start=current_cycle_start + network.cycle_secs,
        cycle_duration_secs=network.cycle_secs,
    )
