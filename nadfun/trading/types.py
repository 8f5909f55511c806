"""
Data types for quoting, gas estimation and trade execution.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class OperationKind(str, Enum):
    """Router operation identifiers used for gas estimation."""

    BUY = "Buy"
    SELL = "Sell"
    SELL_PERMIT = "SellPermit"


@dataclass(frozen=True)
class Quote:
    """
    Price lens result.

    ``router`` is the contract that must execute the trade for ``amount`` to
    hold: the bonding-curve router before graduation, the DEX router after.
    """

    router: str
    amount: int


@dataclass
class BuyParams:
    """Parameters for a router ``buy``; ``amount_in`` is native MON in wei."""

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    deadline: Optional[int] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None


@dataclass
class SellParams:
    """Parameters for a router ``sell``; ``amount_in`` is in token units."""

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    deadline: Optional[int] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None


@dataclass
class SellPermitParams:
    """Parameters for ``sellPermit``: a sell authorized by an EIP-2612 signature."""

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    amount_allowance: int
    v: int
    r: bytes
    s: bytes
    deadline: Optional[int] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None


# Gas estimation variants: each carries exactly what its calldata needs


@dataclass(frozen=True)
class BuyGasParams:
    kind: ClassVar[OperationKind] = OperationKind.BUY

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    deadline: int


@dataclass(frozen=True)
class SellGasParams:
    kind: ClassVar[OperationKind] = OperationKind.SELL

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    deadline: int


@dataclass(frozen=True)
class SellPermitGasParams:
    kind: ClassVar[OperationKind] = OperationKind.SELL_PERMIT

    token: str
    to: str
    amount_in: int
    amount_out_min: int
    amount_allowance: int
    deadline: int
    v: int
    r: bytes
    s: bytes


GasEstimationParams = Union[BuyGasParams, SellGasParams, SellPermitGasParams]


@dataclass(frozen=True)
class PermitSignature:
    """EIP-2612 signature, valid only for ``nonce`` and until its deadline."""

    v: int
    r: bytes
    s: bytes
    nonce: int


@dataclass(frozen=True)
class CurveState:
    """Snapshot of a token's bonding curve reserves."""

    real_mon_reserve: int
    real_token_reserve: int
    virtual_mon_reserve: int
    virtual_token_reserve: int
    k: int
    target_token_amount: int
    init_virtual_mon_reserve: int
    init_virtual_token_reserve: int

    @classmethod
    def from_tuple(cls, values) -> "CurveState":
        return cls(*(int(v) for v in values))


@dataclass(frozen=True)
class AvailableBuyTokens:
    """Tokens still buyable on the curve and the MON needed to buy them all."""

    available_buy_token: int
    required_mon_amount: int
