"""Trading bots built on the trade executor and curve stream."""

from .bundler import (
    BundledOperation,
    BundledOperationResult,
    BundlerBot,
    BundlerConfig,
    BundleSummary,
)
from .sniper import SniperBot, SniperConfig

__all__ = [
    "BundledOperation",
    "BundledOperationResult",
    "BundlerBot",
    "BundlerConfig",
    "BundleSummary",
    "SniperBot",
    "SniperConfig",
]
