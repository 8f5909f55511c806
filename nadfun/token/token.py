"""ERC-20 reads and writes for launch tokens."""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..abis import ERC20_ABI, encode_call
from ..config import ChainConfig
from ..interfaces import ChainClient, Signer
from ..trading.slippage import format_units
from ..trading.types import PermitSignature
from ..utils import get_logger, to_checksum
from .permit import PermitSigner

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    decimals: int
    total_supply: int
    address: str


class TokenClient:
    """
    ERC-20 and EIP-2612 operations on behalf of one signer.

    Owner arguments default to the signer's address.
    """

    def __init__(self, config: ChainConfig, chain: ChainClient, signer: Signer):
        self.config = config
        self.chain = chain
        self.signer = signer
        self.permits = PermitSigner(config, chain, signer)

    @property
    def address(self) -> str:
        return self.signer.address

    async def _read(self, token: str, fn_name: str, args: Optional[list] = None):
        return await self.chain.call(to_checksum(token), ERC20_ABI, fn_name, args or [])

    async def get_balance(self, token: str, owner: Optional[str] = None) -> int:
        owner = to_checksum(owner or self.address)
        return int(await self._read(token, "balanceOf", [owner]))

    async def get_balance_formatted(self, token: str, owner: Optional[str] = None):
        """Balance as ``(raw, human readable string)``."""
        balance = await self.get_balance(token, owner)
        decimals = await self.get_decimals(token)
        return balance, format_units(balance, decimals)

    async def get_allowance(self, token: str, spender: str, owner: Optional[str] = None) -> int:
        owner = to_checksum(owner or self.address)
        return int(await self._read(token, "allowance", [owner, to_checksum(spender)]))

    async def get_decimals(self, token: str) -> int:
        return int(await self._read(token, "decimals"))

    async def get_name(self, token: str) -> str:
        try:
            return await self._read(token, "name")
        except Exception as e:
            logger.debug(f"name() failed for {token}: {e}")
            return "Unknown"

    async def get_symbol(self, token: str) -> str:
        try:
            return await self._read(token, "symbol")
        except Exception as e:
            logger.debug(f"symbol() failed for {token}: {e}")
            return "UNKNOWN"

    async def get_total_supply(self, token: str) -> int:
        return int(await self._read(token, "totalSupply"))

    async def get_metadata(self, token: str) -> TokenMetadata:
        name, symbol, decimals, total_supply = await asyncio.gather(
            self._read(token, "name"),
            self._read(token, "symbol"),
            self.get_decimals(token),
            self.get_total_supply(token),
        )
        return TokenMetadata(
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=total_supply,
            address=to_checksum(token),
        )

    async def get_nonce(self, token: str, owner: Optional[str] = None) -> int:
        """Current EIP-2612 nonce of ``owner``."""
        owner = to_checksum(owner or self.address)
        return int(await self._read(token, "nonces", [owner]))

    async def batch_get_balances(
        self, tokens: List[str], owner: Optional[str] = None
    ) -> Dict[str, int]:
        balances = await asyncio.gather(*(self.get_balance(t, owner) for t in tokens))
        return dict(zip(tokens, balances))

    async def batch_get_allowances(
        self, token: str, spenders: List[str], owner: Optional[str] = None
    ) -> Dict[str, int]:
        allowances = await asyncio.gather(
            *(self.get_allowance(token, spender, owner) for spender in spenders)
        )
        return dict(zip(spenders, allowances))

    async def is_contract(self, address: str) -> bool:
        return await self.chain.is_contract(to_checksum(address))

    async def _write(
        self, token: str, fn_name: str, args: list, gas_limit: Optional[int], wait: bool
    ) -> str:
        tx = {"to": to_checksum(token), "data": encode_call(ERC20_ABI, fn_name, args)}
        if gas_limit is not None:
            tx["gas"] = gas_limit
        tx_hash = await self.chain.send_transaction(tx)
        if wait:
            await self.chain.wait_for_receipt(tx_hash)
        return tx_hash

    async def approve(
        self,
        token: str,
        spender: str,
        amount: int,
        gas_limit: Optional[int] = None,
        wait: bool = True,
    ) -> str:
        logger.info(f"Approving {spender} for {amount} of {token}")
        return await self._write(
            token, "approve", [to_checksum(spender), amount], gas_limit, wait
        )

    async def transfer(
        self,
        token: str,
        to: str,
        amount: int,
        gas_limit: Optional[int] = None,
        wait: bool = True,
    ) -> str:
        logger.info(f"Transferring {amount} of {token} to {to}")
        return await self._write(token, "transfer", [to_checksum(to), amount], gas_limit, wait)

    async def ensure_allowance(self, token: str, spender: str, amount: int) -> Optional[str]:
        """
        Approve ``spender`` for ``amount`` when the current allowance is lower.

        Returns:
            Approval tx hash, or None when no approval was needed
        """
        current = await self.get_allowance(token, spender)
        if current >= amount:
            return None
        logger.info(f"Allowance {current} < {amount} for {spender}, approving")
        return await self.approve(token, spender, amount)

    async def generate_permit_signature(
        self,
        token: str,
        spender: str,
        value: int,
        deadline: int,
        owner: Optional[str] = None,
    ) -> PermitSignature:
        return await self.permits.generate(token, spender, value, deadline, owner)
