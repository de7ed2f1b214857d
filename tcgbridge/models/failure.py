"""
Failure classification for the product import workflow.

Every failure the import workflow can produce is one of:

- ValidationError: the card record cannot be imported as-is. Raised
  before any network activity. The remote store is never contacted.
- RemoteFatalError: a hard dependency of the import (collection lookup,
  product creation) failed. No product exists afterwards.
- StepFailure (models.import_result): an enrichment step (image,
  metadata, price) failed AFTER the product was created. Recorded,
  never raised.

Collaborator failures (admin API, card search) and missing settings are
KnownError subclasses as well, so API routes can classify them uniformly.

INVARIANT: StepFailure is a value, not an exception. Once a product
exists, no enrichment failure may abort the import.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    MISSING_REQUIRED = "missing_required"

    # Workflow failures
    REMOTE_FATAL = "remote_fatal"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"
    USER_ERRORS = "user_errors"
    NOT_CONFIGURED = "not_configured"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Merchant-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the merchant",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for API responses."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ValidationError(KnownError):
    """
    Raised when a card record is missing fields required for import.

    Pre-flight only: the caller must not proceed to any remote call.
    """

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED,
            message=f"Missing required fields: {', '.join(self.missing_fields)}",
            suggestion="Pick a card that has a name, set and card number.",
            status_code=422,
        )


class RemoteFatalError(KnownError):
    """
    Raised inside the orchestrator when a hard dependency fails.

    Covers collection resolution and base product creation. The
    orchestrator converts it to a failed-remote result; it never
    escapes import_product().
    """

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(
            kind=FailureKind.REMOTE_FATAL,
            message=message,
            detail=f"step: {step}",
            status_code=502,
        )


class AdminApiError(KnownError):
    """Transport or GraphQL-level failure talking to the Shopify Admin API."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            status_code=502,
        )


class UserErrorsError(AdminApiError):
    """
    Shopify accepted the request but rejected its input.

    Mutations report these in a `userErrors` (or `mediaUserErrors`) list
    instead of failing at the transport level.
    """

    def __init__(self, operation: str, user_errors: list[dict[str, Any]]):
        self.operation = operation
        self.user_errors = user_errors
        first = user_errors[0].get("message", "unknown error") if user_errors else "unknown error"
        super().__init__(message=f"{operation}: {first}", detail=str(user_errors))
        self.kind = FailureKind.USER_ERRORS


class SearchError(KnownError):
    """Raised when the card search API cannot be queried."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=message,
            detail=detail,
            suggestion="Try the search again in a moment.",
            status_code=502,
        )



class ConfigurationError(KnownError):
    """Raised when required settings are missing."""

    def __init__(self, missing_settings: list[str]):
        self.missing_settings = list(missing_settings)
        super().__init__(
            kind=FailureKind.NOT_CONFIGURED,
            message=f"Missing required settings: {', '.join(self.missing_settings)}",
            suggestion="Set them in the environment or in .env.",
            status_code=503,
        )
