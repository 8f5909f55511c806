"""ERC-20 token access and EIP-2612 permits."""

from .permit import PERMIT_TYPES, PermitSigner, split_signature
from .token import TokenClient, TokenMetadata

__all__ = ["PERMIT_TYPES", "PermitSigner", "split_signature", "TokenClient", "TokenMetadata"]
