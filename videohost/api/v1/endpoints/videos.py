"""HTTP endpoints for uploading, editing, watching, rating and commenting on videos."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, File, Form, Response, UploadFile, status
from fastapi.responses import PlainTextResponse

from videohost.api.v1.dependencies import CurrentUser, VideoServiceDep
from videohost.core.errors import InvalidArgumentError
from videohost.models.comment import CommentDto
from videohost.models.video import UploadVideoResponse, VideoDto

router = APIRouter(prefix="/videos", tags=["Videos"])


async def _read_upload(file: UploadFile, limit: int) -> bytes:
    """Read at most *limit* + 1 bytes so oversized bodies never land in memory whole."""

    if file.size is not None and file.size > limit:
        raise InvalidArgumentError(f"Uploaded file exceeds the {limit} byte limit")
    return await file.read(limit + 1)


@router.post(
    "",
    response_model=UploadVideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a video file",
)
async def upload_video(
    current_user: CurrentUser,
    service: VideoServiceDep,
    file: UploadFile = File(...),
):
    data = await _read_upload(file, service.max_upload_bytes)
    return await service.upload_video(data, file.content_type, file.filename)


@router.post(
    "/thumbnail",
    response_class=PlainTextResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a thumbnail for an existing video",
)
async def upload_thumbnail(
    current_user: CurrentUser,
    service: VideoServiceDep,
    file: UploadFile = File(...),
    videoId: str = Form(...),
):
    """Store the image and return its public URL as plain text."""

    data = await _read_upload(file, service.max_upload_bytes)
    return await service.upload_thumbnail(
        data, file.content_type, file.filename, videoId
    )


@router.put("", response_model=VideoDto, summary="Edit video metadata")
async def edit_video_metadata(
    video_dto: VideoDto,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    return await service.edit_video(video_dto)


@router.get(
    "/{video_id}",
    response_model=VideoDto,
    summary="Video details (counts a view)",
)
async def get_video_details(
    video_id: str,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    return await service.get_video_details(current_user, video_id)


@router.post("/{video_id}/like", response_model=VideoDto, summary="Toggle like")
async def like_video(
    video_id: str,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    return await service.like_video(current_user, video_id)


@router.post("/{video_id}/disLike", response_model=VideoDto, summary="Toggle dislike")
async def dislike_video(
    video_id: str,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    return await service.dislike_video(current_user, video_id)


@router.post(
    "/{video_id}/comment",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary="Add a comment",
)
async def add_comment(
    video_id: str,
    comment_dto: CommentDto,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    await service.add_comment(video_id, comment_dto, author=current_user)
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/{video_id}/comment",
    response_model=List[CommentDto],
    summary="List comments in the order they were added",
)
async def get_all_comments(
    video_id: str,
    current_user: CurrentUser,
    service: VideoServiceDep,
):
    return await service.get_all_comments(video_id)


@router.get("", response_model=List[VideoDto], summary="List all videos")
async def get_all_videos(current_user: CurrentUser, service: VideoServiceDep):
    return await service.get_all_videos()
