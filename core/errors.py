"""
Random Quotes - Error Types
Failure taxonomy for the configuration save flow
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class QuoteErrorType(Enum):
    """
    Categories of failure a save or query can end in.

    An empty quote collection is deliberately absent: "configured but
    nothing to show" is a normal state, not an error.
    """
    VALIDATION = "validation"    # Empty path, missing file, or not .txt
    INGESTION = "ingestion"      # A validated file could not be read
    STORAGE = "storage"          # Preference database unavailable
    NO_INSTANCE = "no_instance"  # Missing or sentinel widget id
    BUSY = "busy"                # Another save for the widget did not finish in time


class QuotesError(Exception):
    """Base class for errors raised by the quotes backend."""
    error_type: QuoteErrorType = QuoteErrorType.STORAGE


class IngestionError(QuotesError):
    """Raised when a file that passed validation can no longer be read."""
    error_type = QuoteErrorType.INGESTION

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read quote file '{path}': {reason}")


class StorageError(QuotesError):
    """Raised when the preference database cannot be read or written."""
    error_type = QuoteErrorType.STORAGE


class MissingWidgetIdError(QuotesError, ValueError):
    """Raised when a write is attempted without a valid widget id."""
    error_type = QuoteErrorType.NO_INSTANCE

    def __init__(self, message: str = "No widget instance id, refusing to write preferences"):
        super().__init__(message)


@dataclass
class QuoteError:
    """
    Structured error for display in the configuration screen.

    Attributes:
        error_type: Category of the error
        message: Human-readable error description
        hint: What the user can do about it (optional)
    """
    error_type: QuoteErrorType
    message: str
    hint: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: Exception, hint: Optional[str] = None) -> "QuoteError":
        """Build a display error from a raised backend exception."""
        error_type = getattr(exc, "error_type", QuoteErrorType.STORAGE)
        return cls(error_type=error_type, message=str(exc), hint=hint)

    def format_for_user(self) -> str:
        """
        Format the error for the configuration message log.

        Returns:
            One or two line message
        """
        lines = [f"Error ({self.error_type.value}): {self.message}"]
        if self.hint:
            lines.append(f"  {self.hint}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format_for_user()
