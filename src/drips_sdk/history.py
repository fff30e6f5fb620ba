"""In-memory model of drips configuration history."""

from collections.abc import Iterable

from .types import DripsReceiverSeenEvent, DripsSetEvent


def unique_senders(seen_events: Iterable[DripsReceiverSeenEvent]) -> list[int]:
    """Sender user IDs of `seen_events`, first occurrence wins, discovery order kept."""
    senders: dict[int, None] = {}
    for event in seen_events:
        senders.setdefault(event.sender_user_id, None)
    return list(senders)


class EventHistory:
    """
    Drips-set events grouped per (user ID, asset ID), oldest first.

    Events with the same block timestamp keep their input order. History
    hashes are kept as given; they are not recomputed or checked here.
    The model is never updated in place: build a new one to refresh it.

    Example:
        >>> history = EventHistory(snapshot.drips_set_events)
        >>> history.latest(user_id, asset_id).max_end
    """

    def __init__(self, events: Iterable[DripsSetEvent]) -> None:
        grouped: dict[tuple[int, int], list[DripsSetEvent]] = {}
        for event in events:
            grouped.setdefault((event.user_id, event.asset_id), []).append(event)

        self._events: dict[tuple[int, int], tuple[DripsSetEvent, ...]] = {
            key: tuple(sorted(group, key=lambda e: e.block_timestamp)) for key, group in grouped.items()
        }

    def __len__(self) -> int:
        return sum(len(group) for group in self._events.values())

    def events(self, user_id: int, asset_id: int) -> tuple[DripsSetEvent, ...]:
        """All drips-set events of a user for an asset, oldest first."""
        return self._events.get((user_id, asset_id), ())

    def latest(self, user_id: int, asset_id: int) -> DripsSetEvent | None:
        """The user's current drips configuration for the asset, if any."""
        events = self.events(user_id, asset_id)
        return events[-1] if events else None

    def user_ids(self) -> list[int]:
        return sorted({user_id for user_id, _ in self._events})

    def asset_ids(self, user_id: int | None = None) -> list[int]:
        """Assets with drips history, optionally only those of one user."""
        return sorted({asset_id for uid, asset_id in self._events if user_id is None or uid == user_id})

    def receiver_seen_events(
        self, receiver_user_id: int, asset_id: int | None = None
    ) -> list[DripsReceiverSeenEvent]:
        """Every time `receiver_user_id` was configured as a drips receiver, oldest first."""
        events = [
            event
            for (_, event_asset_id), group in self._events.items()
            if asset_id is None or event_asset_id == asset_id
            for event in group
        ]
        events.sort(key=lambda e: e.block_timestamp)

        return [
            seen
            for event in events
            for seen in event.drips_receiver_seen_events
            if seen.receiver_user_id == receiver_user_id
        ]

    def senders_streaming_to(self, receiver_user_id: int, asset_id: int | None = None) -> list[int]:
        """Users that have ever streamed to `receiver_user_id`."""
        return unique_senders(self.receiver_seen_events(receiver_user_id, asset_id))
