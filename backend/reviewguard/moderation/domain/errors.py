"""Error taxonomy for the review-integrity workflow.

Every failure carries a stable ``code`` (rendered to API callers) and the HTTP
status it maps to. Trust flags never appear in these errors.
"""

from __future__ import annotations

from typing import Mapping, Sequence


class ReviewWorkflowError(Exception):
    """Base class for review workflow failures."""

    code: str = "review_error"
    status_code: int = 400

    def __init__(self, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(self.code)


class ReviewValidationError(ReviewWorkflowError):
    """Malformed structural input; the caller can fix and resend."""

    code = "validation_error"
    status_code = 400

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__()


class RateLimitError(ReviewWorkflowError):
    code = "review_rate_limited"
    status_code = 429


class DuplicateReviewError(ReviewWorkflowError):
    code = "duplicate_review"
    status_code = 409


class SelfReviewError(ReviewWorkflowError):
    code = "self_review"
    status_code = 400


class InvalidRecipientError(ReviewWorkflowError):
    code = "recipient_not_found"
    status_code = 404

    def __init__(self, code: str | None = None) -> None:
        super().__init__(code)
        if self.code == "recipient_not_eligible":
            self.status_code = 400


class ScoringError(ReviewWorkflowError):
    """Unexpected failure while scoring; the submission is aborted."""

    code = "internal_error"
    status_code = 500


class ReviewNotFoundError(ReviewWorkflowError):
    code = "review_not_found"
    status_code = 404


class ContentRejectedError(ReviewWorkflowError):
    """Hard content gate rejection (contact messages)."""

    code = "content_rejected"
    status_code = 400

    def __init__(self, field: str, issues: Sequence[str]) -> None:
        self.field = field
        self.issues = tuple(issues)
        super().__init__()


class DisposableEmailError(ReviewWorkflowError):
    code = "disposable_email"
    status_code = 400


class ContactRateLimitError(ReviewWorkflowError):
    code = "contact_rate_limited"
    status_code = 429


class DeliveryError(ReviewWorkflowError):
    code = "delivery_failed"
    status_code = 502
