"""
Tests for the JSON document store
"""

import pytest
from sqlalchemy import Text

from edumorph.core.exceptions import ValidationError
from edumorph.core.models import Document
from edumorph.core.services.document_store import deep_merge


class TestDocumentStore:
    def test_set_and_get(self, store):
        store.set_document("things", "a", {"name": "first", "n": 1})

        assert store.get_document("things", "a") == {"name": "first", "n": 1}
        assert store.get_document("things", "missing") is None
        assert store.get_document("other", "a") is None

    def test_set_replaces_without_merge(self, store):
        store.set_document("things", "a", {"name": "first", "n": 1})
        store.set_document("things", "a", {"name": "second"})

        assert store.get_document("things", "a") == {"name": "second"}

    def test_merge_keeps_existing_fields(self, store):
        store.set_document(
            "things", "a", {"name": "first", "nested": {"x": 1, "y": 2}, "n": 1}
        )
        store.set_document("things", "a", {"nested": {"y": 3}, "n": 2}, merge=True)

        assert store.get_document("things", "a") == {
            "name": "first",
            "nested": {"x": 1, "y": 3},
            "n": 2,
        }

    def test_merge_creates_missing_document(self, store):
        store.set_document("things", "new", {"n": 1}, merge=True)
        assert store.get_document("things", "new") == {"n": 1}

    def test_add_document_generates_ids(self, store):
        first = store.add_document("things", {"n": 1})
        second = store.add_document("things", {"n": 2})

        assert first != second
        assert store.get_document("things", second) == {"n": 2}

    def test_returned_data_is_a_copy(self, store):
        store.set_document("things", "a", {"tags": ["x"]})
        data = store.get_document("things", "a")
        data["tags"].append("y")

        assert store.get_document("things", "a") == {"tags": ["x"]}

    def test_query_filters_and_ordering(self, store):
        store.set_document("events", "1", {"owner": "a", "at": "2024-01-02", "score": 10})
        store.set_document("events", "2", {"owner": "a", "at": "2024-01-03", "score": 90})
        store.set_document("events", "3", {"owner": "b", "at": "2024-01-04", "score": 50})
        store.set_document("events", "4", {"owner": "a", "at": "2024-01-01", "score": 70})

        rows = store.query_documents(
            "events", filters=[("owner", "==", "a")], order_by="at", descending=True
        )
        assert [doc_id for doc_id, _ in rows] == ["2", "1", "4"]

        rows = store.query_documents(
            "events", filters=[("owner", "==", "a"), ("score", ">=", 70)], order_by="at"
        )
        assert [doc_id for doc_id, _ in rows] == ["4", "2"]

        rows = store.query_documents("events", order_by="at", limit=2)
        assert [doc_id for doc_id, _ in rows] == ["4", "1"]

        rows = store.query_documents("events", filters=[("at", "<", "2024-01-03")])
        assert sorted(doc_id for doc_id, _ in rows) == ["1", "4"]

    def test_query_boolean_filter(self, store):
        store.set_document("flags", "on", {"enabled": True})
        store.set_document("flags", "off", {"enabled": False})

        rows = store.query_documents("flags", filters=[("enabled", "==", True)])
        assert [doc_id for doc_id, _ in rows] == ["on"]

    def test_delete(self, store):
        store.set_document("things", "a", {"n": 1})
        store.set_document("things", "b", {"n": 2})
        store.set_document("things", "c", {"n": 3})

        assert store.delete_document("things", "a") is True
        assert store.delete_document("things", "a") is False
        assert store.delete_documents("things", ["b", "c", "zzz"]) == 2
        assert store.query_documents("things") == []

    def test_invalid_collection_name_rejected(self, store):
        with pytest.raises(ValidationError):
            store.set_document("bad-name", "a", {})
        with pytest.raises(ValidationError):
            store.query_documents("users; DROP TABLE documents")

    def test_invalid_operator_rejected(self, store):
        with pytest.raises(ValidationError):
            store.query_documents("things", filters=[("n", "LIKE", "x")])

    def test_database_stats(self, store, db_service):
        store.set_document("things", "a", {"n": 1})
        store.set_document("things", "b", {"n": 2})
        store.set_document("others", "a", {"n": 3})

        assert db_service.get_database_stats() == {"things": 2, "others": 1}


def test_deep_merge_does_not_mutate_inputs():
    base = {"a": {"b": 1}}
    updates = {"a": {"c": 2}}

    merged = deep_merge(base, updates)

    assert merged == {"a": {"b": 1, "c": 2}}
    assert base == {"a": {"b": 1}}


def test_long_composite_ids_are_stored(store):
    doc_id = "-".join(["s" * 32, "m" * 200, "t" * 200])
    store.set_document("learningGaps", doc_id, {"priority": "high"})

    assert len(doc_id) > 255
    assert store.get_document("learningGaps", doc_id) == {"priority": "high"}
    assert isinstance(Document.__table__.c.doc_id.type, Text)
