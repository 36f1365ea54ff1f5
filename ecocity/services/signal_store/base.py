"""
Signal Store Base Interface.

The store persists each report together with its embedded signal record
and answers windowed range queries for the aggregators.

Contract:
- insert_report: persist one report document (with `signals` map)
- query_signals: documents with created_at >= cutoff (all when cutoff is
  None), optionally restricted to signals.domain == domain, ordered by
  created_at ascending
- list_reports: one page of documents, newest first, with optional
  visibility / status / signals.domain equality filters
- Failures raise StoreError; implementations never retry
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


class SignalStore(ABC):

    @abstractmethod
    def insert_report(self, report: Dict[str, Any]) -> str:
        """Persist a report document. Returns its id."""
        raise NotImplementedError

    @abstractmethod
    def query_signals(
        self,
        cutoff: Optional[datetime] = None,
        domain: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Range query by created_at >= cutoff with optional domain filter."""
        raise NotImplementedError

    @abstractmethod
    def get_report(self, report_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def update_report(self, report_id: str, fields: Dict[str, Any]) -> bool:
        """Update top-level fields. Returns False when the report does not exist."""
        raise NotImplementedError

    @abstractmethod
    def delete_report(self, report_id: str) -> bool:
        """Delete a report. Returns False when the report does not exist."""
        raise NotImplementedError

    @abstractmethod
    def list_reports(
        self,
        offset: int,
        limit: int,
        visibility: Optional[str] = None,
        status: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """One page of reports, newest first. Returns (documents, total matching)."""
        raise NotImplementedError
