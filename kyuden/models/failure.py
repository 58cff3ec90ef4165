"""
Failure classification and the API response envelope.

Three error types cover everything the card browser can fail at:

- DataUnavailableError: the card data file is missing or unreadable
- CardNotFoundError: a card id or deck list name does not resolve
- DeckTextError: a deck list is not text at all

Deck composition problems are NOT failures. A deck that breaks the
construction rules is still a deck; ``validate_deck`` reports the problems
and they never block a mutation.

Every error body leaving the HTTP layer goes through ``finalize_response()``.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class FailureKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    # Reporting only; deck mutations never raise it
    VALIDATION_FAILED = "validation_failed"
    DATA_UNAVAILABLE = "data_unavailable"
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    """
    What went wrong, in words a deck builder can act on.

    Attributes:
        kind: Failure classification
        message: Short explanation shown to the user
        detail: Technical detail, if any
        suggestion: What to try next
    """

    kind: FailureKind
    message: str
    detail: str | None = None
    suggestion: str | None = None


class ApiResponse(BaseModel, Generic[T]):
    """Outcome plus failure details. Successful endpoints return their bare response models."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def known_failure(cls, failure: FailureDetail) -> "ApiResponse[Any]":
        return cls(outcome=OutcomeType.KNOWN_FAILURE, failure=failure)


class KnownError(Exception):
    """
    A failure the system can explain.

    Carries the HTTP status the API answers with.
    """

    kind: FailureKind = FailureKind.UNKNOWN
    status_code: int = 400

    def __init__(self, message: str, detail: str | None = None, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.suggestion = suggestion

    def to_detail(self) -> FailureDetail:
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class DataUnavailableError(KnownError):
    """
    The card catalog could not be loaded.

    Fatal for the session that needed it, never for the process: callers
    surface the error and carry on with an empty catalog.
    """

    kind = FailureKind.DATA_UNAVAILABLE
    status_code = 503

    def __init__(self, path: str, detail: str | None = None):
        self.path = path
        super().__init__(
            f"Card data is unavailable ({path}).",
            detail=detail,
            suggestion="Run `python -m kyuden.jobs.build_catalog` to rebuild the card data.",
        )


class CardNotFoundError(KnownError):
    """A card name or identifier does not resolve against the catalog."""

    kind = FailureKind.NOT_FOUND
    status_code = 404

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(
            f"Card '{reference}' not found",
            suggestion="Check the spelling against the card browser.",
        )


class DeckTextError(KnownError):
    """Deck list input could not be read as text at all."""

    kind = FailureKind.INVALID_INPUT

    def __init__(self, detail: str):
        super().__init__(
            "Deck list must be plain text.",
            detail=detail,
            suggestion="Paste the deck list as text, one '<quantity> <card name>' per line.",
        )


# =============================================================================
# RESPONSE BOUNDARY
# =============================================================================

UNKNOWN_FAILURE_MESSAGE = "Something went wrong and the cause is not known. Try again."
UNKNOWN_FAILURE_SUGGESTION = "If this keeps happening, please report it."

# ids of responses that passed through finalize_response
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Check a response's shape and mark it as finalized.

    Raises:
        ValueError: If a success carries failure details, or a failure lacks them
    """
    is_success = response.outcome == OutcomeType.SUCCESS
    if is_success and response.failure is not None:
        raise ValueError("Success response must not have failure details")
    if not is_success and response.failure is None:
        raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))
    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    return id(response) in _finalized_responses


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    return finalize_response(ApiResponse.known_failure(error.to_detail()))


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Finalized failure for an unclassified exception.

    Only the exception type is exposed, never its message.
    """
    failure = FailureDetail(
        kind=FailureKind.UNKNOWN,
        message=UNKNOWN_FAILURE_MESSAGE,
        detail=type(exception).__name__,
        suggestion=UNKNOWN_FAILURE_SUGGESTION,
    )
    return finalize_response(ApiResponse(outcome=OutcomeType.UNKNOWN_FAILURE, failure=failure))
