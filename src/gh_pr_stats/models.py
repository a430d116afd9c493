"""Pull request record model.

Projection of one GitHub pull request payload onto the fields used for
statistics. Records are immutable so a table entry is always replaced as a
whole, never updated field by field.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, NonNegativeInt, ValidationError


class RecordValidationError(Exception):
    """Raised when an API payload lacks required pull request fields."""


class PullRequest(BaseModel):
    """One pull request as fetched from the list endpoint."""

    model_config = ConfigDict(frozen=True)

    id: int
    number: int
    state: str
    created_at: AwareDatetime
    closed_at: AwareDatetime | None = None
    merged_at: AwareDatetime | None = None
    url: str
    # The list endpoint omits these three counts; they are only populated
    # when the payload comes from the single pull request endpoint.
    comments: NonNegativeInt = 0
    additions: NonNegativeInt = 0
    changed_files: NonNegativeInt = 0
    author: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "PullRequest":
        """Build a record from a GitHub pull request payload.

        Args:
            payload: One element of the ``GET /repos/{o}/{r}/pulls`` response.

        Returns:
            Validated PullRequest.

        Raises:
            RecordValidationError: If a required field is missing or invalid.
        """
        if not isinstance(payload, dict):
            raise RecordValidationError(f"Expected an object, got {type(payload).__name__}")

        user = payload.get("user") or {}
        try:
            return cls(
                id=payload.get("id"),
                number=payload.get("number"),
                state=payload.get("state"),
                created_at=payload.get("created_at"),
                closed_at=payload.get("closed_at"),
                merged_at=payload.get("merged_at"),
                url=payload.get("url"),
                comments=payload.get("comments") or 0,
                additions=payload.get("additions") or 0,
                changed_files=payload.get("changed_files") or 0,
                author=user.get("login") if isinstance(user, dict) else None,
            )
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise RecordValidationError(
                f"Pull request {payload.get('id', '?')} has invalid fields: {', '.join(fields)}"
            ) from e

    def as_row(self) -> dict[str, Any]:
        """Flatten to a row with naive UTC timestamps for tabular use."""
        return {
            "id": self.id,
            "number": self.number,
            "state": self.state,
            "created_at": _naive_utc(self.created_at),
            "closed_at": _naive_utc(self.closed_at),
            "merged_at": _naive_utc(self.merged_at),
            "url": self.url,
            "comments": self.comments,
            "additions": self.additions,
            "changed_files": self.changed_files,
            "author": self.author,
        }


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(UTC).replace(tzinfo=None)
