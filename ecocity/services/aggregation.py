"""
Shared plumbing for the query-time aggregators.

Every aggregation is one bounded store read followed by an in-memory fold.
Nothing is cached between queries.
"""

from ecocity.core.exceptions import StoreError
from ecocity.services.signal_store.base import SignalStore
from ecocity.services.signal_store.registry import get_signal_store
from ecocity.utils.signal_rows import SignalRow, parse_signal_rows
from ecocity.utils.time_windows import utc_now
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class WindowedAggregator:
    """Base class: holds the store and the clock."""

    def __init__(
        self,
        store: Optional[SignalStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store if store is not None else get_signal_store()
        self.clock = clock or utc_now

    def _load_documents(self, cutoff: Optional[datetime], domain: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Read every stored report with created_at >= cutoff.

        Store failures are surfaced whole as StoreError, never retried.
        """
        try:
            return self.store.query_signals(cutoff=cutoff, domain=domain)
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"❌ Signal store read failed: {e}", exc_info=True)
            raise StoreError(f"Failed to read signals: {e}") from e

    def _load_rows(self, cutoff: Optional[datetime], domain: Optional[str] = None) -> List[SignalRow]:
        return parse_signal_rows(self._load_documents(cutoff, domain))
