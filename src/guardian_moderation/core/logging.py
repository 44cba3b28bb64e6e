"""
Structured logging configuration with request/kid correlation.

Provides centralized logging configuration with correlation IDs for tracking
moderation actions across lifecycle, batch and undo components.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

import structlog
from structlog.stdlib import LoggerFactory

# Context variables for request correlation
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
kid_id_var: ContextVar[Optional[str]] = ContextVar("kid_id", default=None)


class StructuredLogger:
    """Structured logger with correlation support."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(name)

    def _get_context(self) -> Dict[str, Any]:
        """Get current correlation context for logging."""
        context = {}

        if request_id := request_id_var.get():
            context["request_id"] = request_id
        if kid_id := kid_id_var.get():
            context["kid_id"] = kid_id

        return context

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with context."""
        self.logger.debug(message, **self._get_context(), **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with context."""
        self.logger.info(message, **self._get_context(), **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with context."""
        self.logger.warning(message, **self._get_context(), **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with context."""
        self.logger.error(message, **self._get_context(), **kwargs)

    def log_processing_step(
        self,
        step: str,
        component: str,
        duration_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """Log a processing step with timing information."""
        log_data = {
            "step": step,
            "component": component,
            **self._get_context(),
            **kwargs,
        }

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        self.logger.info(f"Processing step: {step}", **log_data)

    def log_transition(
        self,
        operation: str,
        request_id: str,
        from_status: str,
        to_status: str,
        **kwargs: Any,
    ) -> None:
        """Log a request lifecycle transition."""
        self.logger.info(
            f"Request transition: {operation}",
            operation=operation,
            moderation_request_id=request_id,
            from_status=from_status,
            to_status=to_status,
            **self._get_context(),
            **kwargs,
        )

    def log_batch_result(
        self,
        action: str,
        kind: str,
        success_count: int,
        fail_count: int,
        **kwargs: Any,
    ) -> None:
        """Log the aggregate outcome of a batch or undo run."""
        log = self.logger.warning if fail_count else self.logger.info
        log(
            f"Batch {action}: {success_count} succeeded, {fail_count} failed",
            action=action,
            kind=kind,
            success_count=success_count,
            fail_count=fail_count,
            **self._get_context(),
            **kwargs,
        )

    def log_safety_event(
        self, event_type: str, keyword: str, content: str, **kwargs: Any
    ) -> None:
        """Log safety-related events without echoing the content."""
        self.logger.warning(
            f"Safety event: {event_type}",
            event_type=event_type,
            matched_keyword=keyword,
            content_length=len(content),
            **self._get_context(),
            **kwargs,
        )


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)


def set_request_context(
    request_id: Optional[str] = None,
    kid_id: Optional[str] = None,
) -> None:
    """Set correlation context."""
    if request_id:
        request_id_var.set(request_id)
    if kid_id:
        kid_id_var.set(kid_id)


def clear_request_context() -> None:
    """Clear correlation context."""
    request_id_var.set(None)
    kid_id_var.set(None)


def generate_request_id() -> str:
    """Generate a unique correlation ID."""
    return str(uuid.uuid4())


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """Configure structured logging for the application."""

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


class ProcessingTimer:
    """Context manager for timing processing steps."""

    def __init__(
        self, logger: StructuredLogger, step: str, component: str, **kwargs: Any
    ):
        self.logger = logger
        self.step = step
        self.component = component
        self.kwargs = kwargs
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "ProcessingTimer":
        self.start_time = time.perf_counter()
        self.logger.log_processing_step(
            f"{self.step}_start", self.component, **self.kwargs
        )
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.start_time:
            self.duration_ms = (time.perf_counter() - self.start_time) * 1000
            status = "success" if exc_type is None else "error"

            self.logger.log_processing_step(
                f"{self.step}_end",
                self.component,
                duration_ms=self.duration_ms,
                status=status,
                **self.kwargs,
            )


# Initialize logging configuration
configure_logging()
