"""
Logging service for EduMorph
"""

import os
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
import structlog

from .settings_config_service import get_settings_service


class LoggingService:
    """Structured logging service"""

    def __init__(self, log_dir: Optional[str] = None):
        settings = get_settings_service()
        self.log_dir = Path(
            log_dir
            or os.getenv("EDUMORPH_LOG_DIR")
            or settings.get("logging", "log_dir", "logs")
        )
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = settings.get("logging", "default_level", "INFO").upper()

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        self._handlers: list[logging.Handler] = []
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up logging handlers"""
        # Main application log
        main_handler = logging.FileHandler(self.log_dir / "edumorph.log")
        main_handler.setLevel(getattr(logging, self.level, logging.INFO))
        main_handler.setFormatter(logging.Formatter("%(message)s"))

        # Error log
        error_handler = logging.FileHandler(self.log_dir / "errors.log")
        error_handler.setLevel(logging.WARNING)
        error_handler.setFormatter(logging.Formatter("%(message)s"))

        # Console handler for development
        console_handler = logging.StreamHandler()
        console_level = logging.DEBUG if os.getenv("EDUMORPH_DEV_MODE") else logging.INFO
        console_handler.setLevel(console_level)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in (main_handler, error_handler, console_handler):
            root_logger.addHandler(handler)
            self._handlers.append(handler)

    def close(self):
        """Detach and close the handlers installed by this service"""
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def get_logger(self, name: str) -> structlog.stdlib.BoundLogger:
        """Get a structured logger"""
        return structlog.get_logger(name)

    def log_event(
        self,
        logger_name: str,
        level: str,
        event_type: str,
        user_id: Optional[str] = None,
        **kwargs,
    ):
        """Log a structured event"""
        logger = self.get_logger(logger_name)

        log_data = {
            "event_type": event_type,
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **kwargs,
        }

        level_method = getattr(logger, level.lower(), logger.info)
        level_method(event_type, **log_data)

    def log_crud_operation(
        self,
        operation: str,
        entity: str,
        entity_id: Any,
        user_id: Optional[str] = None,
        **kwargs,
    ):
        """Log CRUD operation"""
        self.log_event(
            "crud",
            "INFO",
            f"crud.{operation}",
            user_id=user_id,
            entity=entity,
            entity_id=entity_id,
            **kwargs,
        )

    def log_auth_event(
        self,
        event: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        success: bool = True,
        **kwargs,
    ):
        """Log authentication event"""
        self.log_event(
            "auth",
            "INFO" if success else "WARNING",
            f"auth.{event}",
            user_id=user_id,
            email=email,
            success=success,
            **kwargs,
        )

    def log_analytics_event(
        self, event: str, student_id: Optional[str] = None, **kwargs
    ):
        """Log an analytics pipeline event (metrics, gaps, insights, reports, matches)"""
        self.log_event(
            "analytics",
            "INFO",
            f"analytics.{event}",
            user_id=student_id,
            **kwargs,
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        user_id: Optional[str] = None,
        **kwargs,
    ):
        """Log error event"""
        self.log_event(
            "error",
            "ERROR",
            f"error.{error_type}",
            user_id=user_id,
            error_message=error_message,
            **kwargs,
        )


# Global logging service instance
_logging_service: Optional[LoggingService] = None


def get_logging_service() -> LoggingService:
    """Get the global logging service instance"""
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService()
    return _logging_service


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance"""
    return get_logging_service().get_logger(name)
