"""Error taxonomy shared by the chat and damage-analysis handlers.

The provider reports failures as free-form text only, so categories are
derived from case-insensitive substring checks on the raw message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class ErrorCategory(str, Enum):
    INVALID_INPUT = "invalid_input"
    INVALID_CREDENTIAL = "invalid_credential"
    PERMISSION_DENIED = "permission_denied"
    QUOTA_EXCEEDED = "quota_exceeded"
    BILLING_ISSUE = "billing_issue"
    CONFIGURATION_ERROR = "configuration_error"
    UNKNOWN = "unknown"


STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.INVALID_INPUT: 400,
    ErrorCategory.INVALID_CREDENTIAL: 401,
    ErrorCategory.BILLING_ISSUE: 402,
    ErrorCategory.PERMISSION_DENIED: 403,
    ErrorCategory.QUOTA_EXCEEDED: 429,
    ErrorCategory.CONFIGURATION_ERROR: 500,
    ErrorCategory.UNKNOWN: 500,
}

HUMAN_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.INVALID_CREDENTIAL: "Invalid API key. Please check your Gemini API key.",
    ErrorCategory.PERMISSION_DENIED: (
        "Permission denied. Please check your API key permissions and ensure Gemini API is enabled."
    ),
    ErrorCategory.QUOTA_EXCEEDED: "API quota exceeded. Please check your usage limits in Google AI Studio.",
    ErrorCategory.BILLING_ISSUE: "Billing issue. Please check the billing settings of your Google AI project.",
    ErrorCategory.CONFIGURATION_ERROR: (
        "Gemini API key not configured. Please add GEMINI_API_KEY to your .env file."
    ),
}

# Checked in this order; the first category with a matching pattern wins.
PATTERNS: Tuple[Tuple[ErrorCategory, Tuple[str, ...]], ...] = (
    (ErrorCategory.INVALID_CREDENTIAL, ("api_key_invalid", "invalid api key", "api key not valid")),
    (ErrorCategory.PERMISSION_DENIED, ("permission", "denied")),
    (ErrorCategory.BILLING_ISSUE, ("billing", "payment")),
    (ErrorCategory.QUOTA_EXCEEDED, ("quota", "limit", "exceeded", "resource_exhausted")),
)


@dataclass(frozen=True)
class ErrorReport:
    """A classified failure, surfaced once to the caller and never retained."""

    category: ErrorCategory
    human_message: str

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.category]

    @classmethod
    def for_category(cls, category: ErrorCategory, human_message: str | None = None) -> "ErrorReport":
        return cls(category, human_message or HUMAN_MESSAGES.get(category, category.value))


class GenerationError(RuntimeError):
    """Raised by a text generator when the provider call fails.

    Carries the provider's raw message and nothing else.
    """


class AssistantError(Exception):
    """Raised by the handlers with an already classified `ErrorReport`."""

    def __init__(self, report: ErrorReport) -> None:
        super().__init__(report.human_message)
        self.report = report

    @property
    def category(self) -> ErrorCategory:
        return self.report.category


def classify_category(raw_message: str) -> ErrorCategory:
    """Map a raw provider message to a category, or UNKNOWN when nothing matches."""
    lowered = (raw_message or "").lower()
    for category, needles in PATTERNS:
        if any(needle in lowered for needle in needles):
            return category
    return ErrorCategory.UNKNOWN


def classify_error(raw_message: str, unknown_prefix: str = "API Error") -> ErrorReport:
    """Build the `ErrorReport` for an upstream failure.

    Unmatched messages keep the original text, prefixed with `unknown_prefix`.
    """
    category = classify_category(raw_message)
    if category is ErrorCategory.UNKNOWN:
        return ErrorReport(category, f"{unknown_prefix}: {raw_message}")
    return ErrorReport.for_category(category)
