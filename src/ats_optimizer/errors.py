"""User-facing error types raised at the orchestration boundary."""

from __future__ import annotations


class ATSOptimizerError(Exception):
    """Base error whose ``message`` is safe to show to the end user."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ExtractionError(ATSOptimizerError):
    """Text could not be extracted from an uploaded document."""


class UnsupportedFormatError(ExtractionError):
    """The uploaded file type is not one we can read."""


class AnalysisError(ATSOptimizerError):
    """The resume analysis call failed or returned an invalid payload."""


class RewriteError(ATSOptimizerError):
    """A section rewrite (or the batch dispatch itself) failed."""


class MatchError(ATSOptimizerError):
    """Job description matching failed."""
