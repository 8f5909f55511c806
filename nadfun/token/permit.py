"""
EIP-2612 permit signing.

A permit is only valid for the nonce that was current when it was signed; the
nonce read and the signature are separate round trips, so a permit consumed
concurrently by the same owner makes a fresh signature fail on submission.
"""

from typing import Optional, Tuple

from ..abis import ERC20_ABI
from ..config import ChainConfig
from ..exceptions import UnsupportedOperationError, UserCancelledError
from ..interfaces import ChainClient, Signer
from ..trading.types import PermitSignature
from ..utils import get_logger, to_checksum

logger = get_logger(__name__)

PERMIT_TYPES = {
    "Permit": [
        {"name": "owner", "type": "address"},
        {"name": "spender", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ]
}

_REJECTION_MARKERS = ("user rejected", "user denied", "user cancelled")


def split_signature(signature: bytes) -> Tuple[int, bytes, bytes]:
    """Split a 65-byte signature into ``(v, r, s)`` with ``v`` in {27, 28}."""
    signature = bytes(signature)
    if len(signature) != 65:
        raise ValueError(f"Expected a 65-byte signature, got {len(signature)} bytes")
    r = signature[0:32]
    s = signature[32:64]
    v = signature[64]
    if v < 27:
        v += 27
    return v, r, s


class PermitSigner:
    """Builds and signs EIP-712 permit payloads for a token."""

    def __init__(self, config: ChainConfig, chain: ChainClient, signer: Signer):
        self.config = config
        self.chain = chain
        self.signer = signer

    async def _token_name(self, token: str) -> str:
        try:
            return await self.chain.call(token, ERC20_ABI, "name", [])
        except Exception as e:
            # Changes the signed domain versus the token's real identity
            logger.warning(
                f"name() unavailable on {token} ({e}); signing permit with empty domain name"
            )
            return ""

    async def sign(
        self,
        owner: str,
        spender: str,
        value: int,
        nonce: int,
        deadline: int,
        token: str,
    ) -> Tuple[int, bytes, bytes]:
        """
        Sign a permit for an explicit nonce.

        Returns:
            (v, r, s)

        Raises:
            UnsupportedOperationError: Signer cannot sign typed data
            UserCancelledError: The signature request was rejected
        """
        token = to_checksum(token)
        sign_typed_data = getattr(self.signer, "sign_typed_data", None)
        if not callable(sign_typed_data):
            raise UnsupportedOperationError(
                "Wallet does not support permit signing; use a regular approval instead"
            )

        domain = {
            "name": await self._token_name(token),
            "version": self.config.permit_version,
            "chainId": self.config.chain_id,
            "verifyingContract": token,
        }
        message = {
            "owner": to_checksum(owner),
            "spender": to_checksum(spender),
            "value": value,
            "nonce": nonce,
            "deadline": deadline,
        }

        try:
            signature = sign_typed_data(domain, PERMIT_TYPES, "Permit", message)
        except NotImplementedError as e:
            raise UnsupportedOperationError(
                "Wallet does not support permit signing; use a regular approval instead"
            ) from e
        except Exception as e:
            if any(marker in str(e).lower() for marker in _REJECTION_MARKERS):
                raise UserCancelledError("User cancelled the signature") from e
            raise

        return split_signature(signature)

    async def generate(
        self,
        token: str,
        spender: str,
        value: int,
        deadline: int,
        owner: Optional[str] = None,
    ) -> PermitSignature:
        """Read the owner's current nonce, then sign a permit for it."""
        owner = owner or self.signer.address
        nonce = int(
            await self.chain.call(token, ERC20_ABI, "nonces", [to_checksum(owner)])
        )
        v, r, s = await self.sign(owner, spender, value, nonce, deadline, token)
        logger.debug(f"Permit signed for {token}: spender={spender} nonce={nonce}")
        return PermitSignature(v=v, r=r, s=s, nonce=nonce)
