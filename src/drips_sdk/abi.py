"""
Contract ABIs used by drips-sdk.

Only the DripsHub, AddressDriver, ImmutableSplitsDriver and ERC20 functions
the SDK calls are included.
"""

_DRIPS_RECEIVER_TUPLE = {
    "type": "tuple[]",
    "components": [
        {"name": "userId", "type": "uint256"},
        {"name": "config", "type": "uint256"},
    ],
}

_SPLITS_RECEIVER_TUPLE = {
    "type": "tuple[]",
    "components": [
        {"name": "userId", "type": "uint256"},
        {"name": "weight", "type": "uint32"},
    ],
}

_DRIPS_HISTORY_TUPLE = {
    "type": "tuple[]",
    "components": [
        {"name": "dripsHash", "type": "bytes32"},
        {"name": "receivers", **_DRIPS_RECEIVER_TUPLE},
        {"name": "updateTime", "type": "uint32"},
        {"name": "maxEnd", "type": "uint32"},
    ],
}

_USER_METADATA_TUPLE = {
    "type": "tuple[]",
    "components": [
        {"name": "key", "type": "bytes32"},
        {"name": "value", "type": "bytes"},
    ],
}

# DripsHub ABI
DRIPS_HUB_ABI = [
    # Read functions
    {
        "type": "function",
        "name": "cycleSecs",
        "inputs": [],
        "outputs": [{"type": "uint32"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "splittable",
        "inputs": [
            {"name": "userId", "type": "uint256"},
            {"name": "erc20", "type": "address"},
        ],
        "outputs": [{"name": "amt", "type": "uint128"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "collectable",
        "inputs": [
            {"name": "userId", "type": "uint256"},
            {"name": "erc20", "type": "address"},
        ],
        "outputs": [{"name": "amt", "type": "uint128"}],
        "stateMutability": "view",
    },
    # Write functions
    {
        "type": "function",
        "name": "receiveDrips",
        "inputs": [
            {"name": "userId", "type": "uint256"},
            {"name": "erc20", "type": "address"},
            {"name": "maxCycles", "type": "uint32"},
        ],
        "outputs": [{"name": "receivedAmt", "type": "uint128"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "split",
        "inputs": [
            {"name": "userId", "type": "uint256"},
            {"name": "erc20", "type": "address"},
            {"name": "currReceivers", **_SPLITS_RECEIVER_TUPLE},
        ],
        "outputs": [
            {"name": "collectableAmt", "type": "uint128"},
            {"name": "splitAmt", "type": "uint128"},
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "squeezeDrips",
        "inputs": [
            {"name": "userId", "type": "uint256"},
            {"name": "erc20", "type": "address"},
            {"name": "senderId", "type": "uint256"},
            {"name": "historyHash", "type": "bytes32"},
            {"name": "dripsHistory", **_DRIPS_HISTORY_TUPLE},
        ],
        "outputs": [{"name": "amt", "type": "uint128"}],
        "stateMutability": "nonpayable",
    },
]

# AddressDriver ABI
ADDRESS_DRIVER_ABI = [
    # Read functions
    {
        "type": "function",
        "name": "calcUserId",
        "inputs": [{"name": "userAddr", "type": "address"}],
        "outputs": [{"name": "userId", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "driverId",
        "inputs": [],
        "outputs": [{"type": "uint32"}],
        "stateMutability": "view",
    },
    # Write functions
    {
        "type": "function",
        "name": "setDrips",
        "inputs": [
            {"name": "erc20", "type": "address"},
            {"name": "currReceivers", **_DRIPS_RECEIVER_TUPLE},
            {"name": "balanceDelta", "type": "int128"},
            {"name": "newReceivers", **_DRIPS_RECEIVER_TUPLE},
            {"name": "transferTo", "type": "address"},
        ],
        "outputs": [{"name": "realBalanceDelta", "type": "int128"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "setSplits",
        "inputs": [{"name": "receivers", **_SPLITS_RECEIVER_TUPLE}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "give",
        "inputs": [
            {"name": "receiver", "type": "uint256"},
            {"name": "erc20", "type": "address"},
            {"name": "amt", "type": "uint128"},
        ],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "collect",
        "inputs": [
            {"name": "erc20", "type": "address"},
            {"name": "transferTo", "type": "address"},
        ],
        "outputs": [{"name": "amt", "type": "uint128"}],
        "stateMutability": "nonpayable",
    },
]

# ImmutableSplitsDriver ABI
IMMUTABLE_SPLITS_DRIVER_ABI = [
    {
        "type": "function",
        "name": "createSplits",
        "inputs": [
            {"name": "receivers", **_SPLITS_RECEIVER_TUPLE},
            {"name": "userMetadata", **_USER_METADATA_TUPLE},
        ],
        "outputs": [{"name": "userId", "type": "uint256"}],
        "stateMutability": "nonpayable",
    },
]

# ERC20 ABI (allowance management only)
ERC20_ABI = [
    {
        "type": "function",
        "name": "allowance",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "approve",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"type": "bool"}],
        "stateMutability": "nonpayable",
    },
]
