"""
Domain errors raised by the group-stage core.

All of them derive from ValueError so callers that only care about
"bad input" can keep catching that.
"""


class GroupStageError(ValueError):
    """Base class for every rejection the core reports to its caller."""


class InvalidScheduleError(GroupStageError):
    """Raised when fixtures are requested for an unsupported group size."""


class InvalidScoreError(GroupStageError):
    """Raised when a played result has a malformed or undecided score."""


class TechnicalDrawNotAllowedError(GroupStageError):
    """Raised when a technical draw is requested for a knockout match."""


class InvalidTransitionError(GroupStageError):
    """Raised when a match result change is not allowed from its current state."""
