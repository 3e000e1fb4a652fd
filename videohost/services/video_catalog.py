"""Persistence of Video aggregates in the ``videos`` collection."""

from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from astrapy import AsyncCollection

from videohost.core.errors import NotFoundError
from videohost.db.astra_client import store_errors
from videohost.models.comment import Comment
from videohost.models.common import VideoID, parse_id
from videohost.models.video import Video

logger = logging.getLogger(__name__)


class VideoCatalog:
    """CRUD over whole Video documents.

    Writes are full overwrites; there is no partial-field patching, so the
    last writer of a given video wins.
    """

    def __init__(self, collection: AsyncCollection) -> None:
        self._collection = collection

    async def create(self, video: Video) -> Video:
        """Insert *video* under a freshly assigned id and return the stored copy."""

        stored = video.model_copy(update={"videoid": str(uuid4())})
        doc = stored.to_document()
        doc["_id"] = stored.videoid
        with store_errors("insert"):
            await self._collection.insert_one(doc)
        logger.debug("Created video %s", stored.videoid)
        return stored

    async def find_by_id(self, video_id: VideoID) -> Video:
        vid = parse_id(video_id)
        with store_errors("find"):
            doc = await self._collection.find_one(filter={"videoid": vid})
        if doc is None:
            raise NotFoundError(f"Cannot find video by ID - {vid}")
        return Video.model_validate(doc)

    async def save(self, video: Video) -> Video:
        doc = video.to_document()
        doc["_id"] = video.videoid
        with store_errors("replace"):
            await self._collection.replace_one(
                filter={"videoid": video.videoid},
                replacement=doc,
                upsert=True,
            )
        return video

    async def find_all(self) -> List[Video]:
        # No pagination: every video is loaded.
        with store_errors("find"):
            docs = await self._collection.find(filter={}).to_list()
        return [Video.model_validate(d) for d in docs]

    async def add_comment(self, video_id: VideoID, comment: Comment) -> Video:
        video = await self.find_by_id(video_id)
        video.add_comment(comment)
        return await self.save(video)

    async def get_comments(self, video_id: VideoID) -> List[Comment]:
        video = await self.find_by_id(video_id)
        return list(video.comments)
