"""
SQLAlchemy models for EduMorph

The managed document store is modelled as a single table of JSON documents
addressed by (collection, doc_id). Domain records live in the JSON payload;
see ``documents.py`` for their shapes.
"""

import enum
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class UserRole(enum.Enum):
    """User roles"""

    TEACHER = "teacher"
    STUDENT = "student"
    ADMIN = "admin"


class Collection:
    """Names of the persisted document collections"""

    PROGRESS = "progress"
    PERFORMANCE_METRICS = "performanceMetrics"
    LEARNING_GAPS = "learningGaps"
    INSIGHTS = "insights"
    REPORTS = "reports"
    STUDY_MATCHES = "studyMatches"
    USERS = "users"
    PRIVACY_SETTINGS = "privacySettings"


class Document(Base):
    """One JSON document inside a named collection"""

    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    doc_id = Column(Text, primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_documents_collection", "collection"),)

    def __repr__(self):
        return f"<Document(collection='{self.collection}', doc_id='{self.doc_id}')>"
