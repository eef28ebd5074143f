"""
Failure classification for API responses.

Every failure that reaches a caller is classified by kind so the UI can
decide whether to block further action or let the user keep editing.
No failure is process-fatal; each one is scoped to a single request.

Kinds:
- Validation: a required field is missing or out of range (400)
- Not found: a referenced id does not exist (404)
- Empty result: an import recognized nothing (400)
- External API: the card database failed (502)
- Partially applied: a multi-row write could not be completed (500)
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"
    PERSISTENCE_ERROR = "persistence_error"
    PARTIALLY_APPLIED = "partially_applied"

    # Unknown
    UNKNOWN = "unknown"


class FailureDetail(BaseModel):
    """Error body returned for known failures."""

    detail: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
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

    def to_response(self) -> FailureDetail:
        """Convert to an error body."""
        return FailureDetail(
            detail=self.message,
            kind=self.kind,
            suggestion=self.suggestion,
        )


class NotFoundError(KnownError):
    """A referenced record does not exist."""

    def __init__(self, what: str, identifier: object) -> None:
        self.what = what
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{what} {identifier} not found",
            status_code=404,
        )


class EmptyImportError(KnownError):
    """
    Import text contained no recognizable card lines.

    Raised instead of applying an empty replacement, so a bad paste
    never wipes a deck.
    """

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.EMPTY_RESULT,
            message="No card lines found",
            suggestion="Paste a deck list with lines like '2x 01005 Gandalf'.",
            status_code=400,
        )


class UpstreamError(KnownError):
    """The card database API failed or returned an unusable response."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="The card database may be down. Try again later.",
            status_code=502,
        )


class PartialWriteError(KnownError):
    """
    A write that must apply to several rows together could not be completed.

    The surrounding transaction is rolled back, so nothing is left
    half-applied, but the caller must report it distinctly from a
    validation failure.
    """

    def __init__(self, operation: str, detail: str | None = None) -> None:
        self.operation = operation
        super().__init__(
            kind=FailureKind.PARTIALLY_APPLIED,
            message=f"{operation} could not be completed; no changes were saved",
            detail=detail,
            suggestion="Reload and try again.",
            status_code=500,
        )
