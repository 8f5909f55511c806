"""DEX swap indexing, streaming and pool discovery."""

from .discovery import PoolDiscovery
from .indexer import DexIndexer
from .parser import parse_swap_event
from .stream import DexStream

__all__ = ["DexIndexer", "DexStream", "PoolDiscovery", "parse_swap_event"]
