"""
Report + signal persistence.
"""

from ecocity.services.signal_store.base import SignalStore
from ecocity.services.signal_store.memory_store import InMemorySignalStore
from ecocity.services.signal_store.registry import get_signal_store

__all__ = [
    "SignalStore",
    "InMemorySignalStore",
    "get_signal_store",
]
