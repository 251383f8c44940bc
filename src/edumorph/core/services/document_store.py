"""
Document store for EduMorph

Collections of key -> JSON document kept in the ``documents`` table. Writes
are last-write-wins; there is no compare-and-swap.
"""

import copy
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import DatabaseError, ValidationError
from ..models import Document
from ..security_utils import validate_collection_name
from .database import get_db_service
from .logging import get_logging_service

# (field, operator, value)
Filter = Tuple[str, str, Any]

_OPERATORS = {"==", "!=", "<", "<=", ">", ">="}


def deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``updates`` into a copy of ``base``; nested dicts merge key by key."""
    merged = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _json_field(field: str, value: Any):
    """Typed accessor for a top-level JSON field, chosen from the compared value"""
    element = Document.data[field]
    if isinstance(value, bool):
        return element.as_boolean()
    if isinstance(value, (int, float)):
        return element.as_float()
    return element.as_string()


def _compare(column, op: str, value: Any):
    if op == "==":
        return column == value
    if op == "!=":
        return column != value
    if op == "<":
        return column < value
    if op == "<=":
        return column <= value
    if op == ">":
        return column > value
    return column >= value


class DocumentStore:
    """Key/document access over the shared ``documents`` table"""

    def __init__(self):
        self.logging_service = get_logging_service()

    @property
    def db_service(self):
        # Resolve per call; tests re-initialize the database service between runs.
        return get_db_service()

    def _check_collection(self, collection: str):
        if not validate_collection_name(collection):
            raise ValidationError(f"Invalid collection name: {collection!r}")

    def _failure(self, message: str, error: SQLAlchemyError) -> DatabaseError:
        self.logging_service.log_error("database", f"{message}: {error}")
        return DatabaseError(f"{message}: {error}")

    def set_document(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> Dict[str, Any]:
        """Write a document, replacing it or merging into the stored one"""
        self._check_collection(collection)
        try:
            with self.db_service.get_session() as session:
                row = session.get(Document, (collection, doc_id))
                if row is None:
                    row = Document(
                        collection=collection, doc_id=doc_id, data=copy.deepcopy(data)
                    )
                    session.add(row)
                elif merge:
                    # Assign a new dict so the JSON column is flagged as changed
                    row.data = deep_merge(row.data or {}, data)
                else:
                    row.data = copy.deepcopy(data)
                session.commit()
                return copy.deepcopy(row.data)
        except SQLAlchemyError as e:
            raise self._failure(f"Failed to write {collection}/{doc_id}", e) from e

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Store a document under a generated id and return the id"""
        doc_id = uuid.uuid4().hex
        self.set_document(collection, doc_id, data)
        return doc_id

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self._check_collection(collection)
        try:
            with self.db_service.get_session() as session:
                row = session.get(Document, (collection, doc_id))
                return copy.deepcopy(row.data) if row is not None else None
        except SQLAlchemyError as e:
            raise self._failure(f"Failed to read {collection}/{doc_id}", e) from e

    def query_documents(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Query a collection.

        Args:
            collection: Collection name
            filters: ``(field, op, value)`` tuples on top-level fields, ANDed
            order_by: Top-level field to sort by (string order)
            descending: Sort direction
            limit: Maximum number of documents

        Returns:
            List of ``(doc_id, data)`` pairs
        """
        self._check_collection(collection)
        conditions = [Document.collection == collection]
        for field, op, value in filters or ():
            if op not in _OPERATORS:
                raise ValidationError(f"Unsupported filter operator: {op}")
            conditions.append(_compare(_json_field(field, value), op, value))

        try:
            with self.db_service.get_session() as session:
                query = session.query(Document).filter(and_(*conditions))
                if order_by:
                    column = Document.data[order_by].as_string()
                    query = query.order_by(column.desc() if descending else column)
                query = query.order_by(Document.doc_id)
                if limit is not None:
                    query = query.limit(limit)
                return [(row.doc_id, copy.deepcopy(row.data)) for row in query.all()]
        except SQLAlchemyError as e:
            raise self._failure(f"Failed to query {collection}", e) from e

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document; returns False when it did not exist"""
        self._check_collection(collection)
        try:
            with self.db_service.get_session() as session:
                row = session.get(Document, (collection, doc_id))
                if row is None:
                    return False
                session.delete(row)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise self._failure(f"Failed to delete {collection}/{doc_id}", e) from e

    def delete_documents(self, collection: str, doc_ids: Iterable[str]) -> int:
        """Delete several documents in one transaction"""
        self._check_collection(collection)
        deleted = 0
        try:
            with self.db_service.get_session() as session:
                for doc_id in doc_ids:
                    row = session.get(Document, (collection, doc_id))
                    if row is not None:
                        session.delete(row)
                        deleted += 1
                session.commit()
        except SQLAlchemyError as e:
            raise self._failure(f"Failed to delete from {collection}", e) from e
        return deleted


# Global store instance
_document_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Get the global document store instance"""
    global _document_store
    if _document_store is None:
        _document_store = DocumentStore()
    return _document_store
