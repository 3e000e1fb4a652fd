"""Pydantic models representing the Video aggregate and its wire DTOs.

The ``Video`` model is the exact shape persisted in the ``videos`` collection;
the DTOs are what the HTTP layer accepts and returns.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from videohost.models.common import VideoID
from videohost.models.comment import Comment


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class VideoStatus(str, Enum):
    """Visibility of a video as chosen by its uploader."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    UNLISTED = "UNLISTED"
    PROCESSING = "PROCESSING"


def _dedupe_tags(tags: Optional[List[str]]) -> List[str]:
    # Tags behave as a set; keep first-seen order for stable output.
    seen: dict[str, None] = {}
    for tag in tags or []:
        if tag not in seen:
            seen[tag] = None
    return list(seen)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
class Video(BaseModel):
    """Full canonical representation of a video stored in the database."""

    model_config = ConfigDict(populate_by_name=True)

    videoid: VideoID = Field(..., alias="videoId")
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    video_url: str = Field(..., alias="videoUrl")
    thumbnail_url: Optional[str] = Field(None, alias="thumbnailUrl")
    video_status: Optional[VideoStatus] = Field(None, alias="videoStatus")
    view_count: int = Field(0, ge=0, alias="viewCount")
    like_count: int = Field(0, ge=0, alias="likeCount")
    dislike_count: int = Field(0, ge=0, alias="dislikeCount")
    comments: List[Comment] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value):
        return _dedupe_tags(value)

    # ------------------------------------------------------------------
    # Counter mutations. Only the engagement engine calls these.
    # ------------------------------------------------------------------

    def increment_view_count(self) -> None:
        self.view_count += 1

    def increment_likes(self) -> None:
        self.like_count += 1

    def decrement_likes(self) -> None:
        self.like_count = max(0, self.like_count - 1)

    def increment_dislikes(self) -> None:
        self.dislike_count += 1

    def decrement_dislikes(self) -> None:
        self.dislike_count = max(0, self.dislike_count - 1)

    def add_comment(self, comment: Comment) -> None:
        self.comments.append(comment)

    def to_document(self) -> dict:
        """Return the JSON-compatible document written to the collection."""

        return self.model_dump(mode="json", by_alias=False)


# ---------------------------------------------------------------------------
# DTOs
# ---------------------------------------------------------------------------
class VideoDto(BaseModel):
    """Video as exchanged with clients (details, listing, edit payload)."""

    id: Optional[VideoID] = None
    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    tags: List[str] = Field(default_factory=list)
    videoUrl: Optional[str] = None
    videoStatus: Optional[VideoStatus] = None
    thumbnailUrl: Optional[str] = None
    likeCount: int = 0
    dislikeCount: int = 0
    viewCount: int = 0

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value):
        return _dedupe_tags(value)

    @classmethod
    def from_video(cls, video: Video) -> "VideoDto":
        return cls(
            id=video.videoid,
            title=video.title,
            description=video.description,
            tags=list(video.tags),
            videoUrl=video.video_url,
            videoStatus=video.video_status,
            thumbnailUrl=video.thumbnail_url,
            likeCount=video.like_count,
            dislikeCount=video.dislike_count,
            viewCount=video.view_count,
        )


class UploadVideoResponse(BaseModel):
    """Returned by the video upload endpoint."""

    videoId: VideoID
    videoUrl: str


__all__ = [
    "VideoID",
    "VideoStatus",
    "Video",
    "VideoDto",
    "UploadVideoResponse",
]
