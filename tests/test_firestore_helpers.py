"""Tests for Firestore query helpers and the Firestore-backed store queries."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from google.cloud.firestore_v1.base_query import FieldFilter

from ecocity.services.signal_store.firestore_store import FirestoreSignalStore
from ecocity.utils.firestore_helpers import where_filter


def _filters(query_mock):
    return [call.kwargs["filter"] for call in query_mock.where.call_args_list]


class TestWhereFilter:

    def test_uses_keyword_field_filter(self):
        query = MagicMock()

        result = where_filter(query, "status", "==", "new")

        assert result is query.where.return_value
        args, kwargs = query.where.call_args
        assert args == ()
        field_filter = kwargs["filter"]
        assert isinstance(field_filter, FieldFilter)
        assert field_filter.field_path == "status"
        assert field_filter.op_string == "=="
        assert field_filter.value == "new"


class TestFirestoreQueries:

    def _store(self):
        db = MagicMock()
        query = MagicMock()
        # every chained call returns the same query so filters can be inspected
        query.where.return_value = query
        query.order_by.return_value = query
        query.offset.return_value = query
        query.limit.return_value = query
        query.stream.return_value = []
        db.collection.return_value = query
        return FirestoreSignalStore(db=db), query

    def test_query_signals_filters_by_keyword(self):
        store, query = self._store()
        cutoff = datetime(2024, 5, 1, tzinfo=timezone.utc)

        assert store.query_signals(cutoff=cutoff, domain="water") == []

        filters = _filters(query)
        assert [(f.field_path, f.op_string, f.value) for f in filters] == [
            ("signals.domain", "==", "water"),
            ("created_at", ">=", cutoff),
        ]

    def test_list_reports_counts_and_pages(self):
        store, query = self._store()
        count_result = MagicMock()
        count_result.value = 7
        query.count.return_value.get.return_value = [[count_result]]

        documents, total = store.list_reports(offset=20, limit=10, visibility="blocked", status="new")

        assert (documents, total) == ([], 7)
        assert [(f.field_path, f.value) for f in _filters(query)] == [
            ("visibility", "blocked"),
            ("status", "new"),
        ]
        query.offset.assert_called_once_with(20)
        query.limit.assert_called_once_with(10)
