from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from videohost.models.common import UserID, VideoID


class EngagementState(str, Enum):
    """A user's like/dislike relationship to one video.

    Keeping a single value per (user, video) pair means a video can never be
    both liked and disliked by the same user.
    """

    NEITHER = "NEITHER"
    LIKED = "LIKED"
    DISLIKED = "DISLIKED"


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    userid: UserID = Field(..., alias="userId")
    sub: str = Field(..., min_length=1)
    email_address: Optional[str] = Field(None, alias="emailAddress")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    full_name: Optional[str] = Field(None, alias="fullName")

    # Only LIKED / DISLIKED entries are stored; a missing key means NEITHER.
    engagements: Dict[VideoID, EngagementState] = Field(default_factory=dict)
    video_history: List[VideoID] = Field(default_factory=list, alias="videoHistory")

    @field_validator("engagements", mode="after")
    @classmethod
    def _drop_neutral(cls, value: Dict[VideoID, EngagementState]):
        return {k: v for k, v in value.items() if v is not EngagementState.NEITHER}

    def engagement_for(self, video_id: VideoID) -> EngagementState:
        return self.engagements.get(video_id, EngagementState.NEITHER)

    def set_engagement(self, video_id: VideoID, state: EngagementState) -> None:
        if state is EngagementState.NEITHER:
            self.engagements.pop(video_id, None)
        else:
            self.engagements[video_id] = state

    @property
    def liked_videos(self) -> Set[VideoID]:
        return {v for v, s in self.engagements.items() if s is EngagementState.LIKED}

    @property
    def disliked_videos(self) -> Set[VideoID]:
        return {v for v, s in self.engagements.items() if s is EngagementState.DISLIKED}

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=False)


class UserResponse(BaseModel):
    """Public view of the caller's own record."""

    userId: UserID
    emailAddress: Optional[str] = None
    fullName: Optional[str] = None
    likedVideos: List[VideoID] = Field(default_factory=list)
    disLikedVideos: List[VideoID] = Field(default_factory=list)
    videoHistory: List[VideoID] = Field(default_factory=list)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            userId=user.userid,
            emailAddress=user.email_address,
            fullName=user.full_name,
            likedVideos=sorted(user.liked_videos),
            disLikedVideos=sorted(user.disliked_videos),
            videoHistory=list(user.video_history),
        )
