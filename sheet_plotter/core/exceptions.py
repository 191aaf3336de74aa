"""Custom exception hierarchy for the Sheet Plotter domain."""

from __future__ import annotations


class ProcessingError(RuntimeError):
    """Base class for every fault reported back to the caller."""

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def as_dict(self) -> dict:
        """Return a serializable representation."""
        payload = {"error": type(self).__name__, "message": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFault(ProcessingError):
    """Raised when the point configuration is incomplete or invalid."""


class EmptyHistory(ProcessingError):
    """Raised when undo or redo is requested with nothing to restore."""


class EmptyExport(ProcessingError):
    """Raised when an export is requested for an empty feature collection."""


class ParseFault(ProcessingError):
    """Raised when an uploaded spreadsheet cannot be read."""
