"""
Signal store selection.

USE_MOCK_DB=true gives the in-memory store; otherwise Firestore.
"""

from ecocity.core.settings import settings
from ecocity.services.signal_store.base import SignalStore
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_store: Optional[SignalStore] = None


def get_signal_store() -> SignalStore:
    """
    Get or create the signal store singleton.

    Also used as a FastAPI dependency so tests can override it.
    """
    global _store
    if _store is not None:
        return _store

    if settings.USE_MOCK_DB:
        from ecocity.services.signal_store.memory_store import InMemorySignalStore
        _store = InMemorySignalStore()
        logger.info("[STORE] USING IN-MEMORY MOCK DATABASE")
    else:
        from ecocity.services.signal_store.firestore_store import FirestoreSignalStore
        _store = FirestoreSignalStore()
        logger.info("[STORE] USING FIRESTORE")
    return _store
