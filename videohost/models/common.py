from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from videohost.core.errors import InvalidArgumentError

# ---------------------------------------------------------------------------
# Identifier aliases used across the domain models. Ids travel as canonical
# UUID strings both on the wire and in stored documents.
# ---------------------------------------------------------------------------
VideoID = str
UserID = str

__all__ = [
    "ProblemDetail",
    "VideoID",
    "UserID",
    "parse_id",
]


class ProblemDetail(BaseModel):
    type: str = Field(default="about:blank")
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = None


def parse_id(raw: Optional[str], what: str = "video") -> str:
    """Return the canonical string form of a UUID identifier.

    Raises ``InvalidArgumentError`` for missing or malformed values so that
    callers never query the store with attacker-shaped keys.
    """

    if raw is None or not str(raw).strip():
        raise InvalidArgumentError(f"Missing {what} id")
    try:
        return str(UUID(str(raw).strip()))
    except ValueError:
        raise InvalidArgumentError(f"Malformed {what} id - {raw}")
