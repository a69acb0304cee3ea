from __future__ import annotations

import re
from typing import Any, Dict, Optional

_BILLING_RE = re.compile(
    r"insufficient[ _](credits|quota)|payment required", re.IGNORECASE
)


class QuizAppError(Exception):
    """Base for every error the HTTP layer knows how to render."""

    status_code = 500
    error = "Internal error"
    code: Optional[str] = None

    def __init__(self, details: Optional[str] = None, *, error: Optional[str] = None):
        super().__init__(details or error or self.error)
        self.details = details
        if error:
            self.error = error

    def to_payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        if self.code:
            body["code"] = self.code
        return body


class InvalidQuizFormat(QuizAppError):
    error = "Invalid quiz format"


class ParseFailure(QuizAppError):
    error = "Could not parse model output as JSON"


class InsufficientCredits(QuizAppError):
    status_code = 402
    error = "Insufficient credits with the AI provider"
    code = "INSUFFICIENT_CREDITS"


class GenerationFailed(QuizAppError):
    error = "Failed to generate quiz"


class ExplanationFailed(QuizAppError):
    error = "Failed to generate explanation"


def _status_of(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    return status if isinstance(status, int) else None


def is_billing_error(exc: BaseException) -> bool:
    """True when the provider refused the call for payment/quota reasons."""
    # our own errors may quote model text, so only the explicit class counts
    if isinstance(exc, QuizAppError):
        return isinstance(exc, InsufficientCredits)
    if _status_of(exc) == 402:
        return True
    return bool(_BILLING_RE.search(str(exc)))


def describe_provider_error(exc: BaseException) -> str:
    if _status_of(exc) == 429:
        return "API rate limit exceeded - please try again later"
    return str(exc) or "AI service unavailable"
