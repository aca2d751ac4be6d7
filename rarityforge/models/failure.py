"""
Build failure classification.

Only two kinds of failure may abort a build:

- Configuration errors, raised before any work begins
- Artifact write errors, raised after all computation

Per-item fetch failures are contained inside the attribute fetcher and
never surface as exceptions.
"""

from enum import Enum
from pathlib import Path


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    MISSING_REQUIRED = "missing_required"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Output failures
    WRITE_FAILED = "write_failed"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def describe(self) -> str:
        """Single-line description suitable for a log record."""
        parts = [self.message]
        if self.detail:
            parts.append(self.detail)
        if self.suggestion:
            parts.append(self.suggestion)
        return " | ".join(parts)


class ConfigurationError(KnownError):
    """Missing or invalid build configuration. Fatal before any work begins."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        kind: FailureKind = FailureKind.MISSING_REQUIRED,
    ):
        super().__init__(kind=kind, message=message, detail=detail, suggestion=suggestion)


class ArtifactWriteError(KnownError):
    """
    The collection database could not be persisted.

    Carries the output path and item count so the run can be diagnosed.
    """

    def __init__(self, path: Path, item_count: int, cause: BaseException):
        self.path = path
        self.item_count = item_count
        super().__init__(
            kind=FailureKind.WRITE_FAILED,
            message=f"Failed to write collection database to {path}",
            detail=f"{item_count} items; {type(cause).__name__}: {cause}",
            suggestion="Check that the output directory is writable and retry.",
        )
