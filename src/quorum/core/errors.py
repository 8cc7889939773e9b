"""Error taxonomy shared by the discussion services."""

from __future__ import annotations


class DiscussionError(RuntimeError):
    """Base class for errors raised by the discussion core."""


class ValidationError(DiscussionError):
    """Caller input is malformed or missing."""


class NotFoundError(DiscussionError):
    """A referenced post, question, content entity or parent does not exist."""


class UnauthorizedError(DiscussionError):
    """The caller is not allowed to mutate the target entity."""


class ConsistencyError(DiscussionError):
    """An invariant maintained by the core was found violated.

    Always a bug signal; never caused by user input and never swallowed.
    """


class ConflictError(DiscussionError):
    """A unique-constraint race lost against a concurrent writer."""
