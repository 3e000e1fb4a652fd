"""Business logic for the video endpoints.

Uploads go to the object store first and are then recorded in the catalog;
everything touching likes, dislikes and views is delegated to the
``EngagementEngine``.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from videohost.core.config import settings
from videohost.core.errors import InvalidArgumentError
from videohost.models.comment import Comment, CommentDto
from videohost.models.common import VideoID, parse_id
from videohost.models.user import User
from videohost.models.video import UploadVideoResponse, Video, VideoDto
from videohost.services.engagement import EngagementEngine
from videohost.services.user_directory import UserDirectory
from videohost.services.video_catalog import VideoCatalog
from videohost.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class VideoService:
    def __init__(
        self,
        catalog: VideoCatalog,
        users: UserDirectory,
        engine: EngagementEngine,
        object_store: ObjectStore,
        *,
        max_upload_bytes: Optional[int] = None,
    ) -> None:
        self.catalog = catalog
        self.users = users
        self.engine = engine
        self.object_store = object_store
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES

    def _check_payload(self, data: bytes) -> None:
        if not data:
            raise InvalidArgumentError("Uploaded file is empty")
        if len(data) > self.max_upload_bytes:
            raise InvalidArgumentError(
                f"Uploaded file exceeds the {self.max_upload_bytes} byte limit"
            )

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_video(
        self, data: bytes, content_type: Optional[str], filename: Optional[str]
    ) -> UploadVideoResponse:
        self._check_payload(data)
        video_url = await self.object_store.upload(data, content_type, filename)
        saved = await self.catalog.create(Video(videoid="", video_url=video_url))
        logger.info("Uploaded video %s", saved.videoid)
        return UploadVideoResponse(videoId=saved.videoid, videoUrl=saved.video_url)

    async def upload_thumbnail(
        self,
        data: bytes,
        content_type: Optional[str],
        filename: Optional[str],
        video_id: VideoID,
    ) -> str:
        # Resolve the video before writing anything so an unknown id leaves
        # no orphaned object behind.
        video = await self.catalog.find_by_id(video_id)
        self._check_payload(data)

        thumbnail_url = await self.object_store.upload(data, content_type, filename)
        video.thumbnail_url = thumbnail_url
        await self.catalog.save(video)
        return thumbnail_url

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def edit_video(self, video_dto: VideoDto) -> VideoDto:
        video = await self.catalog.find_by_id(parse_id(video_dto.id))

        video.title = video_dto.title
        video.description = video_dto.description
        video.tags = list(video_dto.tags)
        video.thumbnail_url = video_dto.thumbnailUrl
        video.video_status = video_dto.videoStatus

        await self.catalog.save(video)
        return VideoDto.from_video(video)

    async def get_video_details(self, user: User, video_id: VideoID) -> VideoDto:
        video = await self.engine.record_view(user, video_id)
        return VideoDto.from_video(video)

    async def get_all_videos(self) -> List[VideoDto]:
        return [VideoDto.from_video(v) for v in await self.catalog.find_all()]

    # ------------------------------------------------------------------
    # Engagement
    # ------------------------------------------------------------------

    async def like_video(self, user: User, video_id: VideoID) -> VideoDto:
        return VideoDto.from_video(await self.engine.like(user, video_id))

    async def dislike_video(self, user: User, video_id: VideoID) -> VideoDto:
        return VideoDto.from_video(await self.engine.dislike(user, video_id))

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def add_comment(
        self, video_id: VideoID, comment_dto: CommentDto, author: Optional[User] = None
    ) -> None:
        author_id = comment_dto.authorId or (author.userid if author else None)
        if not author_id:
            raise InvalidArgumentError("Comment author is required")
        comment = Comment(text=comment_dto.commentText, author_id=author_id)
        await self.catalog.add_comment(video_id, comment)

    async def get_all_comments(self, video_id: VideoID) -> List[CommentDto]:
        comments = await self.catalog.get_comments(video_id)
        return [CommentDto.from_comment(c) for c in comments]
