"""
Fixed ABI fragments of the nad.fun protocol contracts.

Only the functions and events the SDK calls are listed. Calldata is encoded
offline through a provider-less ``Web3`` instance; event topics are the
keccak hashes of the canonical event signatures.
"""

from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3

# Router ABI shared by the bonding-curve router and the DEX router
ROUTER_ABI = [
    {
        "type": "function",
        "name": "buy",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "amountOutMin", "type": "uint256"},
                    {"name": "token", "type": "address"},
                    {"name": "to", "type": "address"},
                    {"name": "deadline", "type": "uint256"},
                ],
            }
        ],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "sell",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "amountOutMin", "type": "uint256"},
                    {"name": "token", "type": "address"},
                    {"name": "to", "type": "address"},
                    {"name": "deadline", "type": "uint256"},
                ],
            }
        ],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "sellPermit",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "amountOutMin", "type": "uint256"},
                    {"name": "amountAllowance", "type": "uint256"},
                    {"name": "token", "type": "address"},
                    {"name": "to", "type": "address"},
                    {"name": "deadline", "type": "uint256"},
                    {"name": "v", "type": "uint8"},
                    {"name": "r", "type": "bytes32"},
                    {"name": "s", "type": "bytes32"},
                ],
            }
        ],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
    },
]

BONDING_CURVE_ROUTER_ABI = ROUTER_ABI + [
    {
        "type": "function",
        "name": "availableBuyTokens",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [
            {"name": "availableBuyToken", "type": "uint256"},
            {"name": "requiredMonAmount", "type": "uint256"},
        ],
    },
]

LENS_ABI = [
    {
        "type": "function",
        "name": "getAmountOut",
        "stateMutability": "view",
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "amountIn", "type": "uint256"},
            {"name": "is_buy", "type": "bool"},
        ],
        "outputs": [
            {"name": "router", "type": "address"},
            {"name": "amountOut", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "getAmountIn",
        "stateMutability": "view",
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "amountOut", "type": "uint256"},
            {"name": "is_buy", "type": "bool"},
        ],
        "outputs": [
            {"name": "router", "type": "address"},
            {"name": "amountIn", "type": "uint256"},
        ],
    },
]

CURVE_ABI = [
    {
        "type": "function",
        "name": "curves",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [
            {"name": "realMonReserve", "type": "uint256"},
            {"name": "realTokenReserve", "type": "uint256"},
            {"name": "virtualMonReserve", "type": "uint256"},
            {"name": "virtualTokenReserve", "type": "uint256"},
            {"name": "k", "type": "uint256"},
            {"name": "targetTokenAmount", "type": "uint256"},
            {"name": "initVirtualMonReserve", "type": "uint256"},
            {"name": "initVirtualTokenReserve", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "isListed",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "isLocked",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

V3_FACTORY_ABI = [
    {
        "type": "function",
        "name": "getPool",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"},
        ],
        "outputs": [{"name": "pool", "type": "address"}],
    },
]


def _view(name: str, inputs: List[Dict[str, str]], output_type: str) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [{"name": "", "type": output_type}],
    }


# ERC20 + EIP-2612 surface
ERC20_ABI = [
    _view("name", [], "string"),
    _view("symbol", [], "string"),
    _view("decimals", [], "uint8"),
    _view("totalSupply", [], "uint256"),
    _view("balanceOf", [{"name": "owner", "type": "address"}], "uint256"),
    _view(
        "allowance",
        [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "uint256",
    ),
    _view("nonces", [{"name": "owner", "type": "address"}], "uint256"),
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

# Event definitions: (name, [(arg name, abi type, indexed)])
CURVE_EVENTS = {
    "CurveCreate": [
        ("creator", "address", True),
        ("token", "address", True),
        ("pool", "address", True),
        ("name", "string", False),
        ("symbol", "string", False),
        ("tokenURI", "string", False),
        ("virtualMon", "uint256", False),
        ("virtualToken", "uint256", False),
        ("targetTokenAmount", "uint256", False),
    ],
    "CurveBuy": [
        ("sender", "address", True),
        ("token", "address", True),
        ("amountIn", "uint256", False),
        ("amountOut", "uint256", False),
    ],
    "CurveSell": [
        ("sender", "address", True),
        ("token", "address", True),
        ("amountIn", "uint256", False),
        ("amountOut", "uint256", False),
    ],
    "CurveSync": [
        ("token", "address", True),
        ("realMonReserve", "uint256", False),
        ("realTokenReserve", "uint256", False),
        ("virtualMonReserve", "uint256", False),
        ("virtualTokenReserve", "uint256", False),
    ],
    "CurveTokenLocked": [
        ("token", "address", True),
    ],
    "CurveTokenListed": [
        ("token", "address", True),
        ("pool", "address", True),
    ],
}

SWAP_EVENT = (
    "Swap",
    [
        ("sender", "address", True),
        ("recipient", "address", True),
        ("amount0", "int256", False),
        ("amount1", "int256", False),
        ("sqrtPriceX96", "uint160", False),
        ("liquidity", "uint128", False),
        ("tick", "int24", False),
    ],
)

# Router custom errors
ROUTER_ERRORS = (
    "DeadlineExpired",
    "InsufficientAmountIn",
    "InsufficientAmountInMax",
    "InsufficientAmountOut",
    "InsufficientMon",
    "InvalidAllowance",
)

# Provider-less instance, used only for ABI encoding and decoding
_offline_w3 = Web3()
codec = _offline_w3.codec


def event_signature(name: str, args: Sequence[tuple]) -> str:
    """Canonical signature, e.g. ``CurveTokenLocked(address)``."""
    return f"{name}({','.join(arg[1] for arg in args)})"


def event_topic(name: str, args: Sequence[tuple]) -> str:
    """Topic0 hash (0x-prefixed) for an event definition."""
    return Web3.keccak(text=event_signature(name, args)).to_0x_hex()


CURVE_EVENT_TOPICS = {name: event_topic(name, args) for name, args in CURVE_EVENTS.items()}
SWAP_EVENT_TOPIC = event_topic(*SWAP_EVENT)

# 4-byte selectors of the parameterless router errors
ROUTER_ERROR_SELECTORS = {
    bytes(Web3.keccak(text=f"{name}()"))[:4].hex(): name for name in ROUTER_ERRORS
}


def router_error_name(revert_data: Any) -> Optional[str]:
    """Router error name for raw revert data, if it is one of ours."""
    if isinstance(revert_data, (bytes, bytearray)):
        revert_data = revert_data.hex()
    if not isinstance(revert_data, str):
        return None
    selector = revert_data[2:10] if revert_data.startswith("0x") else revert_data[:8]
    return ROUTER_ERROR_SELECTORS.get(selector.lower())


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return Web3.to_bytes(hexstr=value)
    return bytes(value)


def decode_event_args(
    args: Sequence[tuple], topics: Sequence[Any], data: Any
) -> Dict[str, Any]:
    """
    Decode indexed topics and the data blob of one log.

    Args:
        args: Event definition ``[(name, type, indexed), ...]``
        topics: Log topics including topic0
        data: Log data (bytes or hex string)

    Returns:
        Argument values by name

    Raises:
        ValueError: When the topic count does not match the definition
    """
    indexed = [arg for arg in args if arg[2]]
    if len(topics) != len(indexed) + 1:
        raise ValueError(f"Expected {len(indexed) + 1} topics, got {len(topics)}")

    values: Dict[str, Any] = {}
    for (name, abi_type, _), topic in zip(indexed, topics[1:]):
        values[name] = codec.decode([abi_type], _as_bytes(topic))[0]

    non_indexed = [arg for arg in args if not arg[2]]
    if non_indexed:
        decoded = codec.decode([arg[1] for arg in non_indexed], _as_bytes(data or b""))
        for (name, _, _), value in zip(non_indexed, decoded):
            values[name] = value
    return values


def encode_call(abi: Sequence[Dict[str, Any]], fn_name: str, args: Sequence[Any]) -> str:
    """
    Encode calldata for a contract function.

    Args:
        abi: Contract ABI containing ``fn_name``
        fn_name: Function name
        args: Positional arguments (tuple structs as Python tuples)

    Returns:
        0x-prefixed calldata hex string
    """
    contract = _offline_w3.eth.contract(abi=abi)
    return contract.encode_abi(fn_name, args=list(args))
