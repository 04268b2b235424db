"""Error taxonomy.

Every error carries a machine-readable ``code`` and a ``recoverable`` flag so
callers can decide whether a retry (or a stale cache) is a sensible fallback.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    NOT_FOUND = "NOT_FOUND"
    CACHE_CORRUPT = "CACHE_CORRUPT"
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_QUERY = "INVALID_QUERY"


class PyPISearchError(Exception):
    def __init__(self, code: ErrorCode, message: str, recoverable: bool) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "code": str(self.code),
            "message": self.message,
            "recoverable": self.recoverable,
        }


class FetchError(PyPISearchError):
    """Remote source unreachable or answered with a failure status."""

    def __init__(self, url: str, reason: str, code: ErrorCode = ErrorCode.FETCH_FAILED) -> None:
        super().__init__(code, f"Failed to fetch {url}: {reason}", recoverable=True)
        self.url = url


class NotFoundError(FetchError):
    def __init__(self, url: str) -> None:
        super().__init__(url, "not found", code=ErrorCode.NOT_FOUND)
        self.recoverable = False


class CacheCorruptionError(PyPISearchError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            ErrorCode.CACHE_CORRUPT, f"Unreadable cache file {path}: {reason}", recoverable=True
        )
        self.path = path


class ConfigurationError(PyPISearchError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_CONFIG, message, recoverable=False)


class InvalidQueryError(PyPISearchError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_QUERY, message, recoverable=False)
