"""Error types shared by the analysis pipeline, the session lifecycle and the API."""


class SpeakBetterError(Exception):
    """Base class for errors raised by this package."""


class InvalidInputError(SpeakBetterError, ValueError):
    """A value crossing a component boundary violates its preconditions
    (negative duration, negative word count, malformed record)."""


class AnalysisError(SpeakBetterError):
    """Opaque failure of an upstream step (transcription unavailable,
    aggregation failure). Moves the session to ``error``."""

    def __init__(self, message="analysis failed", code=None):
        super().__init__(message)
        self.message = message
        self.code = code


class NotFoundError(SpeakBetterError, LookupError):
    pass


class SessionNotFoundError(NotFoundError):
    pass


class PermissionDeniedError(SpeakBetterError):
    pass


class DuplicateDocumentError(SpeakBetterError):
    """A document unique per session (analysis, feedback) already exists."""


class AlignmentWarning(UserWarning):
    """Transcript word count and timing count diverge beyond the tolerance."""
