"""Like / dislike / view transitions between a user and a video.

Each (user, video) pair is in exactly one of NEITHER, LIKED or DISLIKED.
``like`` and ``dislike`` are toggles: repeating the same action returns the
pair to NEITHER. The video's counters move with every transition so that
``like_count`` / ``dislike_count`` equal the number of users in each state.

The load → mutate → persist cycle is not atomic across the two aggregates.
Concurrent requests on the same video race with the store's last-write-wins
semantics, and a failure between the user write and the video write leaves
them out of step. Both are surfaced, never compensated.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import NamedTuple

from videohost.core.errors import UnauthenticatedError
from videohost.metrics import ENGAGEMENT_EVENTS_TOTAL
from videohost.models.common import VideoID
from videohost.models.user import EngagementState, User
from videohost.models.video import Video
from videohost.services.user_directory import UserDirectory
from videohost.services.video_catalog import VideoCatalog

logger = logging.getLogger(__name__)


class EngagementAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class Transition(NamedTuple):
    state: EngagementState
    likes_delta: int
    dislikes_delta: int


_N = EngagementState.NEITHER
_L = EngagementState.LIKED
_D = EngagementState.DISLIKED

_TRANSITIONS: dict[tuple[EngagementState, EngagementAction], Transition] = {
    (_N, EngagementAction.LIKE): Transition(_L, +1, 0),
    (_L, EngagementAction.LIKE): Transition(_N, -1, 0),
    (_D, EngagementAction.LIKE): Transition(_L, +1, -1),
    (_N, EngagementAction.DISLIKE): Transition(_D, 0, +1),
    (_D, EngagementAction.DISLIKE): Transition(_N, 0, -1),
    (_L, EngagementAction.DISLIKE): Transition(_D, -1, +1),
}


def apply_transition(current: EngagementState, action: EngagementAction) -> Transition:
    """Return the resulting state and counter deltas for *action* from *current*."""

    return _TRANSITIONS[(current, action)]


class EngagementEngine:
    def __init__(self, catalog: VideoCatalog, users: UserDirectory) -> None:
        self._catalog = catalog
        self._users = users

    async def like(self, user: User, video_id: VideoID) -> Video:
        return await self._engage(user, video_id, EngagementAction.LIKE)

    async def dislike(self, user: User, video_id: VideoID) -> Video:
        return await self._engage(user, video_id, EngagementAction.DISLIKE)

    async def record_view(self, user: User, video_id: VideoID) -> Video:
        """Count one view and append the video to the user's watch history."""

        self._require_user(user)
        video = await self._catalog.find_by_id(video_id)

        video.increment_view_count()
        self._users.append_to_history(user, video.videoid)

        await self._catalog.save(video)
        await self._users.save(user)
        ENGAGEMENT_EVENTS_TOTAL.labels(action="view").inc()
        return video

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_user(user: User | None) -> None:
        if user is None:
            raise UnauthenticatedError("Not authenticated")

    async def _engage(
        self, user: User, video_id: VideoID, action: EngagementAction
    ) -> Video:
        self._require_user(user)
        video = await self._catalog.find_by_id(video_id)

        current = user.engagement_for(video.videoid)
        transition = apply_transition(current, action)

        self._apply_membership(user, video.videoid, transition.state)
        self._apply_counters(video, transition)
        logger.debug(
            "%s on video %s by user %s: %s -> %s (likes=%d dislikes=%d)",
            action.value,
            video.videoid,
            user.userid,
            current.value,
            transition.state.value,
            video.like_count,
            video.dislike_count,
        )

        await self._users.save(user)
        await self._catalog.save(video)
        ENGAGEMENT_EVENTS_TOTAL.labels(action=action.value).inc()
        return video

    def _apply_membership(
        self, user: User, video_id: VideoID, state: EngagementState
    ) -> None:
        if state is EngagementState.LIKED:
            self._users.add_to_liked(user, video_id)
        elif state is EngagementState.DISLIKED:
            self._users.add_to_disliked(user, video_id)
        else:
            self._users.remove_from_liked(user, video_id)
            self._users.remove_from_disliked(user, video_id)

    @staticmethod
    def _apply_counters(video: Video, transition: Transition) -> None:
        if transition.likes_delta > 0:
            video.increment_likes()
        elif transition.likes_delta < 0:
            video.decrement_likes()
        if transition.dislikes_delta > 0:
            video.increment_dislikes()
        elif transition.dislikes_delta < 0:
            video.decrement_dislikes()
