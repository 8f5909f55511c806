"""
Common utilities and helper functions for the nadfun SDK.

This module provides centralized helpers for logging and address handling
shared by the trading, streaming and bot modules.
"""

import logging
import sys
from typing import Iterable, Optional, Set, Tuple, Union

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


# Address utilities
def to_checksum(address: str) -> str:
    """Checksum an address, accepting any hex casing."""
    return Web3.to_checksum_address(address)


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive address equality."""
    if a is None or b is None:
        return False
    return a.lower() == b.lower()


def is_zero_address(address: Optional[str]) -> bool:
    """True for a missing address or the zero address."""
    return not address or address.lower() == ZERO_ADDRESS


def address_set(addresses: Optional[Iterable[str]]) -> Optional[Set[str]]:
    """Lowercased address set, or None when no addresses were given."""
    if addresses is None:
        return None
    return {a.lower() for a in addresses}


def sort_token_pair(token_a: str, token_b: str) -> Tuple[str, str]:
    """Order two token addresses the way Uniswap V3 keys its pools."""
    if token_a.lower() < token_b.lower():
        return token_a, token_b
    return token_b, token_a


def to_hex(value: Union[bytes, str, None]) -> Optional[str]:
    """0x-prefixed hex string for bytes or hex strings."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return "0x" + bytes(value).hex()


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    minimal: bool = False,
) -> logging.Logger:
    """
    Get a structured logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        minimal: If True, use simplified format (time + message only)

    Returns:
        Configured logger with structured output
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()

        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = (
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
            )

        formatter = logging.Formatter(format_str, datefmt="%H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def setup_logging(level=logging.INFO):
    """
    Configure root logging for scripts and bots.

    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Quiets the chatty transport loggers
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    for noisy in ("web3", "urllib3", "websockets", "aiohttp"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("nadfun").setLevel(level)
