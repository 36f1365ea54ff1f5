"""
Firestore signal store.

Reports live in the `reports` collection (configurable). The signal record
is embedded as the `signals` map, so the domain filter is a query on
`signals.domain`. Range queries on created_at need a composite index
(signals.domain ASC, created_at ASC) when the domain filter is used.
"""

from firebase_admin import firestore
from ecocity.config.firebase import get_db
from ecocity.core.exceptions import StoreError
from ecocity.core.settings import settings
from ecocity.services.signal_store.base import SignalStore
from ecocity.utils.firestore_helpers import where_filter
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class FirestoreSignalStore(SignalStore):

    def __init__(self, db=None, collection: Optional[str] = None):
        self.db = db if db is not None else get_db()
        self.collection_name = collection or settings.REPORTS_COLLECTION

    @property
    def _collection(self):
        return self.db.collection(self.collection_name)

    def insert_report(self, report: Dict[str, Any]) -> str:
        report_id = report["id"]
        try:
            self._collection.document(report_id).set(report)
        except Exception as e:
            logger.error(f"Failed to save report {report_id} to Firestore: {e}", exc_info=True)
            raise StoreError(f"Failed to save report: {e}") from e
        logger.info(f"Report saved to Firestore: {report_id}")
        return report_id

    def query_signals(
        self,
        cutoff: Optional[datetime] = None,
        domain: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        try:
            query = self._collection
            if domain is not None:
                query = where_filter(query, "signals.domain", "==", domain)
            if cutoff is not None:
                query = where_filter(query, "created_at", ">=", cutoff)
            query = query.order_by("created_at", direction=firestore.Query.ASCENDING)
            return self._collect(query)
        except Exception as e:
            logger.error(f"❌ Firestore signal query failed: {e}", exc_info=True)
            raise StoreError(f"Failed to query signals: {e}") from e

    def list_reports(
        self,
        offset: int,
        limit: int,
        visibility: Optional[str] = None,
        status: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        try:
            query = self._collection
            if visibility is not None:
                query = where_filter(query, "visibility", "==", visibility)
            if status is not None:
                query = where_filter(query, "status", "==", status)
            if domain is not None:
                query = where_filter(query, "signals.domain", "==", domain)

            total = query.count().get()[0][0].value
            page = query.order_by("created_at", direction=firestore.Query.DESCENDING).offset(offset).limit(limit)
            return self._collect(page), int(total)
        except Exception as e:
            logger.error(f"❌ Firestore report listing failed: {e}", exc_info=True)
            raise StoreError(f"Failed to list reports: {e}") from e

    @staticmethod
    def _collect(query) -> List[Dict[str, Any]]:
        results = []
        for doc in query.stream():
            data = doc.to_dict()
            if data is None:
                continue
            data.setdefault("id", doc.id)
            results.append(data)
        return results

    def get_report(self, report_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = self._collection.document(report_id).get()
        except Exception as e:
            raise StoreError(f"Failed to load report {report_id}: {e}") from e
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        data.setdefault("id", snapshot.id)
        return data

    def update_report(self, report_id: str, fields: Dict[str, Any]) -> bool:
        doc_ref = self._collection.document(report_id)
        try:
            if not doc_ref.get().exists:
                return False
            doc_ref.update(fields)
            return True
        except Exception as e:
            raise StoreError(f"Failed to update report {report_id}: {e}") from e

    def delete_report(self, report_id: str) -> bool:
        doc_ref = self._collection.document(report_id)
        try:
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
            return True
        except Exception as e:
            raise StoreError(f"Failed to delete report {report_id}: {e}") from e
