"""
Exception types raised by the issue tracker core.

The search-related errors let callers tell "no results" (an empty list)
apart from "search failed" (an exception).
"""


class IssueTrackError(Exception):
    """Base class for all issue tracker errors."""


class NotFoundError(IssueTrackError):
    """A referenced record does not exist."""


class ValidationError(IssueTrackError):
    """Input failed a domain rule (bad status, self-parenting, ...)."""


class ConflictError(IssueTrackError):
    """A record with the same identity already exists."""


class SearchUnavailable(IssueTrackError):
    """
    The search index is missing or corrupted.

    Raised instead of returning an empty result list, so a broken index is
    never mistaken for "nothing matched". Not retried automatically.
    """


class IndexWriteFailed(IssueTrackError):
    """
    The index half of an issue write could not be applied.

    The enclosing transaction has been rolled back: neither the issue row
    change nor the index change is visible.
    """


class MaintenanceInProgress(IssueTrackError):
    """
    A rebuild holds the maintenance lock.

    Transient; the caller may retry after a short delay.
    """

    retry_after = 5
