"""
In-memory signal store.

Used when USE_MOCK_DB=true (local development without Firebase
credentials) and by the test-suite. Documents are deep-copied on the way
in and out so callers cannot mutate stored signals.
"""

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ecocity.services.signal_store.base import SignalStore
from ecocity.utils.signal_rows import parse_timestamp

logger = logging.getLogger(__name__)

_MIN_TIME = datetime.min.replace(tzinfo=timezone.utc)


class InMemorySignalStore(SignalStore):

    def __init__(self):
        self._reports: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert_report(self, report: Dict[str, Any]) -> str:
        report_id = report["id"]
        with self._lock:
            self._reports[report_id] = copy.deepcopy(report)
        logger.debug(f"[MOCK DB] Stored report {report_id}")
        return report_id

    def query_signals(
        self,
        cutoff: Optional[datetime] = None,
        domain: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            documents = [copy.deepcopy(doc) for doc in self._reports.values()]

        results = []
        for doc in documents:
            created_at = parse_timestamp(doc.get("created_at"))
            if cutoff is not None and (created_at is None or created_at < cutoff):
                continue
            if domain is not None:
                signals = doc.get("signals")
                if not isinstance(signals, dict) or signals.get("domain") != domain:
                    continue
            results.append(doc)

        # Stable: equal timestamps keep insertion order
        results.sort(key=lambda d: parse_timestamp(d.get("created_at")) or _MIN_TIME)
        return results

    def list_reports(
        self,
        offset: int,
        limit: int,
        visibility: Optional[str] = None,
        status: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        with self._lock:
            documents = [copy.deepcopy(doc) for doc in self._reports.values()]

        matching = []
        for doc in documents:
            if visibility is not None and doc.get("visibility") != visibility:
                continue
            if status is not None and doc.get("status") != status:
                continue
            if domain is not None:
                signals = doc.get("signals")
                if not isinstance(signals, dict) or signals.get("domain") != domain:
                    continue
            matching.append(doc)

        matching.sort(key=lambda d: parse_timestamp(d.get("created_at")) or _MIN_TIME, reverse=True)
        return matching[offset:offset + limit], len(matching)

    def get_report(self, report_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._reports.get(report_id)
            return copy.deepcopy(doc) if doc is not None else None

    def update_report(self, report_id: str, fields: Dict[str, Any]) -> bool:
        with self._lock:
            doc = self._reports.get(report_id)
            if doc is None:
                return False
            doc.update(copy.deepcopy(fields))
            return True

    def delete_report(self, report_id: str) -> bool:
        with self._lock:
            return self._reports.pop(report_id, None) is not None

    def __len__(self) -> int:
        return len(self._reports)
