"""Utilities for neo-cache."""

from .locks import ReadWriteLock
from .single_flight import SingleFlight
from .node_id import generate_node_id

__all__ = [
    "ReadWriteLock",
    "SingleFlight",
    "generate_node_id",
]
