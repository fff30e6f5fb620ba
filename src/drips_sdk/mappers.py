"""Map raw subgraph entities (camelCase, numbers as strings) to drips-sdk types."""

from typing import Any

from .types import (
    DripsEntry,
    DripsReceiverSeenEvent,
    DripsSetEvent,
    ReceivedDripsEvent,
    SplitsEntry,
    SqueezedDripsEvent,
    UserAssetConfig,
)


def map_user_asset_config(api_config: dict[str, Any]) -> UserAssetConfig:
    return UserAssetConfig(
        id=api_config["id"],
        asset_id=int(api_config["assetId"]),
        drips_entries=tuple(
            DripsEntry(id=entry["id"], user_id=int(entry["userId"]), config=int(entry["config"]))
            for entry in api_config.get("dripsEntries") or []
        ),
        balance=int(api_config["balance"]),
        amount_collected=int(api_config["amountCollected"]),
        last_updated_block_timestamp=int(api_config["lastUpdatedBlockTimestamp"]),
    )


def map_splits_entry(api_entry: dict[str, Any]) -> SplitsEntry:
    return SplitsEntry(id=api_entry["id"], user_id=int(api_entry["userId"]), weight=int(api_entry["weight"]))


def map_drips_set_event(api_event: dict[str, Any]) -> DripsSetEvent:
    """
    Map a drips-set event with its nested receiver-seen events.

    Nested seen events carry neither a sender nor a timestamp of their own:
    both are taken from the parent event.
    """
    user_id = int(api_event["userId"])
    asset_id = int(api_event["assetId"])
    block_timestamp = int(api_event["blockTimestamp"])

    return DripsSetEvent(
        id=api_event["id"],
        user_id=user_id,
        asset_id=asset_id,
        drips_history_hash=api_event["dripsHistoryHash"],
        balance=int(api_event["balance"]),
        block_timestamp=block_timestamp,
        max_end=int(api_event["maxEnd"]),
        drips_receiver_seen_events=tuple(
            DripsReceiverSeenEvent(
                id=seen["id"],
                receiver_user_id=int(seen["receiverUserId"]),
                sender_user_id=user_id,
                config=int(seen["config"]),
                asset_id=asset_id,
                drips_set_event_id=api_event["id"],
                block_timestamp=block_timestamp,
            )
            for seen in api_event.get("dripsReceiverSeenEvents") or []
        ),
    )


def map_drips_receiver_seen_event(api_event: dict[str, Any]) -> DripsReceiverSeenEvent:
    drips_set_event = api_event.get("dripsSetEvent") or {}
    return DripsReceiverSeenEvent(
        id=api_event["id"],
        receiver_user_id=int(api_event["receiverUserId"]),
        sender_user_id=int(api_event["senderUserId"]),
        config=int(api_event["config"]),
        asset_id=int(drips_set_event.get("assetId", 0)),
        drips_set_event_id=drips_set_event.get("id"),
        block_timestamp=int(api_event["blockTimestamp"]),
    )


def map_squeezed_drips_event(api_event: dict[str, Any]) -> SqueezedDripsEvent:
    return SqueezedDripsEvent(
        id=api_event["id"],
        user_id=int(api_event["userId"]),
        asset_id=int(api_event["assetId"]),
        sender_id=int(api_event["senderId"]),
        amount=int(api_event["amt"]),
        block_timestamp=int(api_event["blockTimestamp"]),
        drips_history_hashes=tuple(api_event.get("dripsHistoryHashes") or ()),
    )


def map_received_drips_event(api_event: dict[str, Any]) -> ReceivedDripsEvent:
    return ReceivedDripsEvent(
        id=api_event["id"],
        user_id=int(api_event["userId"]),
        asset_id=int(api_event["assetId"]),
        amount=int(api_event["amt"]),
        receivable_cycles=int(api_event["receivableCycles"]),
        block_timestamp=int(api_event["blockTimestamp"]),
    )
