"""Pydantic models for video comments."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from videohost.models.common import UserID


class Comment(BaseModel):
    """A comment as stored inside its parent video document.

    Comments have no identity of their own and are never edited once appended.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(..., min_length=1, max_length=5000)
    author_id: UserID = Field(..., min_length=1, alias="authorId")


class CommentDto(BaseModel):
    """Wire representation used by the comment endpoints."""

    commentText: str = Field(..., min_length=1, max_length=5000)
    # Defaults to the caller when omitted
    authorId: Optional[UserID] = None

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentDto":
        return cls(commentText=comment.text, authorId=comment.author_id)


__all__ = ["Comment", "CommentDto"]
