from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from edumorph.core.services.database import DatabaseService
from edumorph.core.services.database import get_db_service as _get_db_service
import logging

logger = logging.getLogger(__name__)


def get_db_service() -> DatabaseService:
    # Delegate to the core database singleton so tests and the API share the
    # same DatabaseService instance.
    return _get_db_service()


def get_status_info(db_service: DatabaseService = Depends(get_db_service)) -> dict:
    """Database reachability and document counts for the status endpoint"""
    try:
        collections = db_service.get_database_stats()
    except SQLAlchemyError as e:
        logger.error(f"Database status check failed: {e}")
        return {"database": "unavailable"}
    return {"database": "online", "collections": collections}
