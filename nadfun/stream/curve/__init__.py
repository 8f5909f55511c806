"""Bonding-curve event indexing and streaming."""

from .indexer import CurveIndexer
from .parser import get_curve_event_topics, parse_curve_event
from .stream import CurveStream

__all__ = ["CurveIndexer", "CurveStream", "get_curve_event_topics", "parse_curve_event"]
