"""
Domain errors for the submission pipeline.

Evaluation outcomes (a test case failing, a remote run crashing) are data and
travel in the verdict. Only the conditions below are raised.
"""


class CodeArenaError(RuntimeError):
    """Base class for errors surfaced at the request boundary."""


class SubmissionValidationError(CodeArenaError):
    """Raised when a submission request is incomplete or unsupported."""


class NotFoundError(CodeArenaError):
    """Raised when a challenge, question or its test cases do not exist."""


class TransportError(CodeArenaError):
    """Raised when the remote execution service is unreachable or answers garbage."""


class PersistenceError(CodeArenaError):
    """Raised when a submission or progress write could not be completed."""
