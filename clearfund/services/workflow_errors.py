"""Errors raised by the evidence, campaign and report workflows."""

from __future__ import annotations


class InvalidStateTransitionError(ValueError):
    """Raised when an entity is not in a state that allows the requested transition."""

    pass


class CampaignCreationNotAllowedError(PermissionError):
    """Raised when an organization's transparency score is below the creation threshold."""

    pass
