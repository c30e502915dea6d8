"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ServiceError(DomainException):
    """An external service call failed (network, timeout or server error)."""


class EditingNotAllowedError(DomainException):
    """The owning order is not in a status that permits editing."""


class CommitInProgressError(DomainException):
    """A commit is already running for this draft."""


class NothingToCommitError(DomainException):
    """The draft has no valid items and no pending deletions."""


class CommitFailedError(DomainException):
    """Base for commit failures that happen after the deletion phase.

    ``deletion_failures`` lists the tombstoned items that could not be
    deleted before the failure and ``deleted_ids`` the ones that were, so the
    operator can see what is unresolved and queue it again.
    """

    def __init__(
        self,
        message: str,
        deletion_failures: list | None = None,
        deleted_ids: list[int] | None = None,
    ) -> None:
        super().__init__(message)
        self.deletion_failures = list(deletion_failures or [])
        self.deleted_ids = list(deleted_ids or [])

    @property
    def failed_deletion_ids(self) -> list[int]:
        return [outcome.item_id for outcome in self.deletion_failures]


class CommitValidationError(CommitFailedError):
    """One or more items failed field validation; nothing was upserted."""

    def __init__(
        self,
        errors: list[str],
        deletion_failures: list | None = None,
        deleted_ids: list[int] | None = None,
    ) -> None:
        super().__init__("; ".join(errors), deletion_failures, deleted_ids)
        self.errors = list(errors)


class UpsertFailedError(CommitFailedError):
    """The bulk upsert call failed; no item changes were applied."""


class BillGenerationFailedError(DomainException):
    """The billing service did not record the bill; the draft is unchanged."""
