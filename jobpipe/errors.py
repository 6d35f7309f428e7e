"""Error taxonomy for the pipeline.

Every error carries an HTTP-like status code and a machine code so a caller
can render a typed message without inspecting the exception class.
"""
from __future__ import annotations

from typing import Any

from jobpipe.log import get_logger

log = get_logger(__name__)


class AppError(Exception):
    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "status": self.status_code, "message": self.message}


class ValidationError(AppError):
    """Malformed input. Never retried."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, 400, "VALIDATION_ERROR")
        self.field = field


class RateLimitError(AppError):
    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Rate limit exceeded. Try again in {retry_after} seconds.",
            429,
            "RATE_LIMIT_ERROR",
        )
        self.retry_after = retry_after


class ScrapingError(AppError):
    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message, 503, "SCRAPING_ERROR")
        self.source = source


def handle_error(exc: BaseException) -> AppError:
    """Coerce any exception into an AppError."""
    if isinstance(exc, AppError):
        return exc
    return AppError(str(exc) or exc.__class__.__name__, 500, "UNKNOWN_ERROR")


def log_error(err: AppError, **context: Any) -> None:
    log.error("[%s] %s (status=%d) %s", err.code, err.message, err.status_code, context or "")
