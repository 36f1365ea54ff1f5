"""
Firestore query helpers using the keyword filter API.

Positional `.where(field, op, value)` emits a deprecation warning on current
google-cloud-firestore clients; every store query goes through here instead.
"""

from google.cloud.firestore_v1.base_query import FieldFilter


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply one field filter to a collection or query.

    Usage:
        query = where_filter(collection, "signals.domain", "==", "waste")
        query = where_filter(query, "created_at", ">=", cutoff)
    """
    return query.where(filter=FieldFilter(field_path, op_string, value))
