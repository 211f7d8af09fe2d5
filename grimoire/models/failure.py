"""
Failure classification for deck and collection operations.

Every refused or failed mutation is raised as a KnownError subclass.
The API layer renders them as a FailureDetail body with the error's
HTTP status; the stored state is never partially changed.

Not every condition is an error:
- Decreasing a slot that does not exist is a no-op success.
- Missing card metadata degrades statistics and exports by omission.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint violations
    CAPACITY_EXCEEDED = "capacity_exceeded"
    SIDEBOARD_FULL = "sideboard_full"
    SLOT_CONFLICT = "slot_conflict"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
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

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail response body."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class CapacityExceededError(KnownError):
    """
    Raised when an increase would place more copies in a deck than are owned.

    The deck is left unchanged.
    """

    def __init__(self, card_id: str, requested: int, owned: int):
        self.card_id = card_id
        self.requested = requested
        self.owned = owned
        super().__init__(
            kind=FailureKind.CAPACITY_EXCEEDED,
            message=(
                f"You own {owned} {'copy' if owned == 1 else 'copies'} of this card "
                f"and cannot place {requested} in one deck."
            ),
            detail=f"card={card_id} requested={requested} owned={owned}",
            suggestion="Add more copies to your collection first.",
            status_code=409,
        )


class SideboardFullError(KnownError):
    """Raised when a placement would grow the sideboard past its cap."""

    def __init__(self, current: int, requested: int, limit: int):
        self.current = current
        self.requested = requested
        self.limit = limit
        super().__init__(
            kind=FailureKind.SIDEBOARD_FULL,
            message=f"The sideboard can hold at most {limit} cards.",
            detail=f"sideboard={current} adding={requested} limit={limit}",
            suggestion="Remove a sideboard card before adding another.",
            status_code=409,
        )


class SlotConflictError(KnownError):
    """
    Raised when a slot changed between read and write.

    Another writer won the race; nothing was written and the caller may
    re-read and retry.
    """

    def __init__(self, deck_id: int, card_id: str, board: str):
        super().__init__(
            kind=FailureKind.SLOT_CONFLICT,
            message="The deck was changed by another request.",
            detail=f"deck={deck_id} card={card_id} board={board}",
            suggestion="Reload the deck and try again.",
            status_code=409,
        )


class DeckNotFoundError(KnownError):
    """
    Raised when a deck does not exist or is not visible to the caller.

    Private decks of other users are reported exactly like missing ones.
    """

    def __init__(self, deck_id: int):
        self.deck_id = deck_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Deck not found.",
            detail=f"deck={deck_id}",
            status_code=404,
        )


def invalid_input(message: str, detail: str | None = None) -> KnownError:
    """Build a 400 error for rejected arguments."""
    return KnownError(kind=FailureKind.INVALID_INPUT, message=message, detail=detail)
