"""Transparency score engine errors."""

from __future__ import annotations


class ResourceNotFoundError(LookupError):
    """Raised when a referenced organization, campaign, evidence or report does not exist.

    The operation is aborted before any counter or score is touched.
    """

    def __init__(self, resource: str, resource_id) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class ScoreUpdateConflictError(RuntimeError):
    """Raised when concurrent writers kept winning for every retry attempt.

    Transient: the caller may retry the whole request.
    """

    def __init__(self, organization_id, attempts: int) -> None:
        self.organization_id = organization_id
        self.attempts = attempts
        super().__init__(
            f"Transparency score update for organization {organization_id} "
            f"conflicted {attempts} times"
        )


class RecalculationError(RuntimeError):
    """Raised when a full recalculation fails. The existing score is left untouched."""
