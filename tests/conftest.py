"""Pytest configuration and fixtures for drips-sdk tests."""

import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3 import Web3

from drips_sdk import (
    AMT_PER_SEC_MULTIPLIER,
    AccountSnapshot,
    AssetState,
    DripsReceiverConfig,
    DripsReceiverSeenEvent,
    DripsSetEvent,
    SqueezedDripsEvent,
    get_asset_id_from_address,
    pack_receiver_config,
)

# Anvil's pre-funded test accounts (same as Hardhat/Foundry)
# Private keys are well-known - DO NOT use on mainnet
ANVIL_ACCOUNTS = [
    {
        "address": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        "private_key": "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    },
    {
        "address": "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
        "private_key": "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    },
]

GOERLI = 5
CYCLE_SECS = 604_800

# Goerli WETH
TOKEN = Web3.to_checksum_address("0xb4fbf271143f4fbf7b91a5ded31805e42b2208d6")
ASSET_ID = get_asset_id_from_address(TOKEN)

# Goerli DAI
OTHER_TOKEN = Web3.to_checksum_address("0xdc31ee1784292379fbb2964b3b9c4124d8f89c60")
OTHER_ASSET_ID = get_asset_id_from_address(OTHER_TOKEN)

# 1000 seconds into the 11th cycle
NOW = 10 * CYCLE_SECS + 1000

FAR_FUTURE = 2**32 - 1

_ids = itertools.count(1)


def config(tokens_per_sec: int = 1, drip_id: int = 0, start: int = 0, duration: int = 0) -> int:
    """Packed receiver config streaming `tokens_per_sec` whole token-wei per second."""
    return pack_receiver_config(
        DripsReceiverConfig(
            drip_id=drip_id,
            amount_per_sec=tokens_per_sec * AMT_PER_SEC_MULTIPLIER,
            start=start,
            duration=duration,
        )
    )


def set_event(
    user_id: int,
    receivers: list[tuple[int, int]],
    timestamp: int,
    max_end: int = FAR_FUTURE,
    balance: int = 10**18,
    asset_id: int = ASSET_ID,
    history_hash: str | None = None,
) -> DripsSetEvent:
    """Build a drips-set event of `user_id` with (receiver, packed config) entries."""
    event_id = f"set-{next(_ids)}"
    return DripsSetEvent(
        id=event_id,
        user_id=user_id,
        asset_id=asset_id,
        drips_history_hash=history_hash or "0x" + format(next(_ids), "064x"),
        balance=balance,
        block_timestamp=timestamp,
        max_end=max_end,
        drips_receiver_seen_events=tuple(
            DripsReceiverSeenEvent(
                id=f"seen-{next(_ids)}",
                receiver_user_id=receiver,
                sender_user_id=user_id,
                config=packed,
                asset_id=asset_id,
                drips_set_event_id=event_id,
                block_timestamp=timestamp,
            )
            for receiver, packed in receivers
        ),
    )


def squeeze(
    user_id: int,
    sender_id: int,
    timestamp: int,
    history_hashes: tuple[str, ...],
    asset_id: int = ASSET_ID,
) -> SqueezedDripsEvent:
    return SqueezedDripsEvent(
        id=f"squeeze-{next(_ids)}",
        user_id=user_id,
        asset_id=asset_id,
        sender_id=sender_id,
        amount=0,
        block_timestamp=timestamp,
        drips_history_hashes=history_hashes,
    )


def snapshot(
    user_id: int,
    events: list[DripsSetEvent],
    asset_states: list[AssetState] | None = None,
    chain_id: int = GOERLI,
) -> AccountSnapshot:
    return AccountSnapshot(
        user_id=user_id,
        chain_id=chain_id,
        drips_set_events=tuple(events),
        asset_states=tuple(asset_states or ()),
    )


class AsyncChainId:
    """Awaitable that returns chain_id each time it's awaited."""

    def __init__(self, chain_id: int):
        self._chain_id = chain_id

    def __await__(self):
        async def _coro():
            return self._chain_id

        return _coro().__await__()


def create_mock_w3(chain_id: int = GOERLI, receipt_status: int = 1):
    """Create a mock AsyncWeb3 instance that confirms every transaction."""
    mock_w3 = MagicMock()
    mock_eth = MagicMock()
    mock_eth.chain_id = AsyncChainId(chain_id)
    mock_eth.get_transaction_count = AsyncMock(return_value=7)

    tx_hash = MagicMock()
    tx_hash.hex.return_value = "0xfeed"
    mock_eth.send_raw_transaction = AsyncMock(return_value=tx_hash)
    mock_eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": receipt_status})

    mock_w3.eth = mock_eth
    return mock_w3


def mock_contract(address: str, *functions: str) -> MagicMock:
    """Mock contract whose `functions` build transactions to `address`."""
    contract = MagicMock()
    for name in functions:
        getattr(contract.functions, name).return_value.build_transaction = AsyncMock(
            return_value={"to": address, "data": "0x"}
        )
    return contract


def create_mock_account(address: str) -> MagicMock:
    account = MagicMock()
    account.address = address
    account.sign_transaction.return_value.raw_transaction = b"\x01\x02"
    return account


@pytest.fixture(autouse=True)
def _clear_drips_env(monkeypatch):
    """Keep tests independent of the developer's DRIPS_* environment."""
    for name in ("DRIPS_RPC_URL", "DRIPS_PRIVATE_KEY", "DRIPS_SUBGRAPH_URL"):
        monkeypatch.delenv(name, raising=False)
