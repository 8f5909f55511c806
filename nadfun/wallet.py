"""Local private-key wallet implementing the Signer protocol."""

import os
from typing import Any, Dict, List, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .exceptions import ConfigurationError
from .utils import get_logger

logger = get_logger(__name__)

# EIP712Domain field types by domain key
_DOMAIN_FIELD_TYPES = {
    "name": "string",
    "version": "string",
    "chainId": "uint256",
    "verifyingContract": "address",
    "salt": "bytes32",
}


class Wallet:
    """Holds a signing key and an address."""

    def __init__(self, private_key: str):
        if not private_key:
            raise ConfigurationError("Private key is empty")
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid private key: {e}") from e
        logger.info(f"Loaded account: {self._account.address}")

    @classmethod
    def from_env(cls, env_var: str = "NADFUN_PRIVATE_KEY") -> "Wallet":
        """Load the key from an environment variable."""
        private_key: Optional[str] = os.getenv(env_var)
        if not private_key:
            raise ConfigurationError(
                f"Private key environment variable {env_var} not set",
                {"env_var": env_var},
            )
        return cls(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        primary_type: str,
        message: Dict[str, Any],
    ) -> bytes:
        """EIP-712 signature as 65 bytes (r | s | v)."""
        domain_type = [
            {"name": key, "type": _DOMAIN_FIELD_TYPES[key]}
            for key in _DOMAIN_FIELD_TYPES
            if key in domain
        ]
        full_message = {
            "types": {"EIP712Domain": domain_type, **types},
            "primaryType": primary_type,
            "domain": domain,
            "message": message,
        }
        signed = self._account.sign_typed_data(full_message=full_message)
        return bytes(signed.signature)

    def sign_transaction(self, tx: Dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)
