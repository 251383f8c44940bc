"""
Database service for EduMorph
"""

import os
import sqlite3
import weakref
from pathlib import Path
from typing import Optional
from weakref import WeakSet
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from ..models import Base
from .settings_config_service import get_settings_service


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Use WAL mode for better concurrency"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA cache_size=-64000")  # 64MB cache
        cursor.execute("PRAGMA temp_store=MEMORY")
        cursor.close()


class DatabaseService:
    """Database service for managing SQLite connections and sessions"""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database service"""
        settings = get_settings_service()
        if db_path is None:
            db_path = os.getenv("EDUMORPH_DB_PATH") or settings.get(
                "database", "path", "edumorph.db"
            )

        self.db_path = Path(db_path)
        self.echo = settings.getboolean("database", "echo", False)
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker[Session]] = None
        # Track open sessions to ensure cleanup in tests
        self._open_sessions: WeakSet[Session] = WeakSet()

        # Import logging service after initialization to avoid circular imports
        from .logging import get_logging_service

        self.logger = get_logging_service().get_logger("database")

        self._setup_engine()
        self._create_tables()

    def _setup_engine(self):
        """Set up SQLAlchemy engine"""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        database_url = f"sqlite:///{self.db_path}"

        if os.getenv("EDUMORPH_TEST_MODE"):
            self.engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                pool_pre_ping=True,
            )
        else:
            self.engine = create_engine(
                database_url,
                echo=self.echo or bool(os.getenv("EDUMORPH_DEV_MODE")),
                connect_args={"check_same_thread": False},
                pool_pre_ping=True,
                pool_recycle=3600,
            )

        # Ensure engine is disposed when DatabaseService is garbage collected
        weakref.finalize(self, self.engine.dispose)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    def _create_tables(self):
        """Create all database tables"""
        if self.engine is None:
            raise RuntimeError("Database engine not initialized")
        Base.metadata.create_all(bind=self.engine)
        self.logger.info("database_ready", path=str(self.db_path))

    def get_session(self) -> Session:
        """Get a database session"""
        if self.SessionLocal is None:
            raise RuntimeError("Database session factory not initialized")
        session = self.SessionLocal()
        self._open_sessions.add(session)
        return session

    def close(self):
        """Close database connections"""
        if self.engine:
            for session in list(self._open_sessions):
                session.close()
            self.engine.dispose()

    def get_database_stats(self) -> dict:
        """Get document counts per collection"""
        if not self.engine:
            return {}

        with self.engine.connect() as conn:
            rows = conn.execute(
                text(
                    "SELECT collection, COUNT(*) FROM documents GROUP BY collection"
                )
            )
            return {row[0]: row[1] for row in rows}


# Global database service instance
_db_service: Optional[DatabaseService] = None


def get_db_service() -> DatabaseService:
    """Get the global database service instance"""
    global _db_service
    if _db_service is None:
        _db_service = DatabaseService()
    return _db_service


def init_db_service(db_path: Optional[str] = None) -> DatabaseService:
    """Initialize (or re-initialize) the global database service"""
    global _db_service
    if _db_service is not None:
        _db_service.close()
    _db_service = DatabaseService(db_path)
    return _db_service
