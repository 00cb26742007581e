"""
Error types for the quadratic tutor.

Only two failure paths are recoverable inside the core: a persisted
document that cannot be decoded (the tracker reinitializes) and an
equation that cannot be formed (the caller surfaces it to the learner).
"""

from __future__ import annotations


class TutorError(Exception):
    """Base class for tutor errors."""


class InvalidEquationError(TutorError, ValueError):
    """Raised when coefficients do not describe a quadratic equation."""


class CorruptDocumentError(TutorError):
    """Raised by a document store when the stored document cannot be decoded."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source
