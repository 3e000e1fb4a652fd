"""Subject → User mapping and per-user engagement bookkeeping."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from astrapy import AsyncCollection
from astrapy.constants import ReturnDocument

from videohost.core.errors import UnauthenticatedError
from videohost.core.security import TokenPayload
from videohost.db.astra_client import store_errors
from videohost.models.common import VideoID
from videohost.models.user import EngagementState, User

logger = logging.getLogger(__name__)


class UserDirectory:
    """Load, lazily create and persist User aggregates keyed by ``sub``.

    Documents use the subject as ``_id`` so that the store's primary key
    guarantees one record per identity.

    The membership helpers only mutate the in-memory aggregate; callers
    persist with :meth:`save` once a transition is complete.
    """

    def __init__(self, collection: AsyncCollection) -> None:
        self._collection = collection

    async def find_by_subject(self, sub: str) -> Optional[User]:
        with store_errors("find"):
            doc = await self._collection.find_one(filter={"_id": sub})
        return User.model_validate(doc) if doc else None

    async def find_or_create_by_subject(
        self, sub: str, claims: Optional[TokenPayload] = None
    ) -> User:
        if not sub:
            raise UnauthenticatedError("Invalid token: Subject missing")

        existing = await self.find_by_subject(sub)
        if existing is not None:
            return existing

        full_name = None
        if claims is not None:
            full_name = claims.name or " ".join(
                p for p in (claims.given_name, claims.family_name) if p
            ) or None
        candidate = User(
            userid=str(uuid4()),
            sub=sub,
            email_address=claims.email if claims else None,
            first_name=claims.given_name if claims else None,
            last_name=claims.family_name if claims else None,
            full_name=full_name,
        )
        # Concurrent first requests race here; the upsert keeps whichever
        # record was inserted first and returns it to every caller.
        with store_errors("upsert"):
            doc = await self._collection.find_one_and_update(
                filter={"_id": sub},
                update={"$setOnInsert": candidate.to_document()},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        user = User.model_validate(doc)
        if user.userid == candidate.userid:
            logger.info("Registered user %s for subject %s", user.userid, sub)
        return user

    async def save(self, user: User) -> User:
        doc = user.to_document()
        doc["_id"] = user.sub
        with store_errors("replace"):
            await self._collection.replace_one(
                filter={"_id": user.sub}, replacement=doc, upsert=True
            )
        return user

    # ------------------------------------------------------------------
    # Membership helpers
    # ------------------------------------------------------------------

    @staticmethod
    def if_liked(user: User, video_id: VideoID) -> bool:
        return user.engagement_for(video_id) is EngagementState.LIKED

    @staticmethod
    def if_disliked(user: User, video_id: VideoID) -> bool:
        return user.engagement_for(video_id) is EngagementState.DISLIKED

    @staticmethod
    def add_to_liked(user: User, video_id: VideoID) -> None:
        user.set_engagement(video_id, EngagementState.LIKED)

    @staticmethod
    def remove_from_liked(user: User, video_id: VideoID) -> None:
        if user.engagement_for(video_id) is EngagementState.LIKED:
            user.set_engagement(video_id, EngagementState.NEITHER)

    @staticmethod
    def add_to_disliked(user: User, video_id: VideoID) -> None:
        user.set_engagement(video_id, EngagementState.DISLIKED)

    @staticmethod
    def remove_from_disliked(user: User, video_id: VideoID) -> None:
        if user.engagement_for(video_id) is EngagementState.DISLIKED:
            user.set_engagement(video_id, EngagementState.NEITHER)

    @staticmethod
    def append_to_history(user: User, video_id: VideoID) -> None:
        user.video_history.append(video_id)
