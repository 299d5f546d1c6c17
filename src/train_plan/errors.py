"""
Error kinds raised by the plan pipeline.

Every error carries a ``user_message`` so the submission boundary
(``generation.PlanGenerationController``) can show it without inspecting
the exception type.
"""

from __future__ import annotations

from typing import Optional


class PlanError(Exception):
    """Base class for all pipeline failures."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.user_message)


class ValidationError(PlanError):
    """Required request fields missing — raised before any network call."""

    user_message = "Please fill out the required fields."

    def __init__(self, message: str = "", violations: Optional[list] = None) -> None:
        super().__init__(message)
        self.violations = list(violations or [])


class UpstreamError(PlanError):
    """Transport failure or non-success HTTP status from the AI provider."""

    user_message = "Failed to generate training plan. Please try again."

    def __init__(self, status: Optional[int], body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"AI provider request failed: {body}")
        else:
            super().__init__(f"API request failed with status {status}: {body}")


class MalformedResponseError(PlanError):
    """Success status but the reply envelope lacks the expected text part."""

    user_message = "The AI service returned an unexpected response. Please try again."


class ExportError(PlanError):
    """Document layout or save failure."""

    user_message = "Could not export the plan as PDF."
