from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from videohost.core.config import settings
from videohost.core.security import Authenticator, TokenPayload, get_authenticator
from videohost.db.astra_client import get_collection
from videohost.models.user import User
from videohost.services.engagement import EngagementEngine
from videohost.services.user_directory import UserDirectory
from videohost.services.video_catalog import VideoCatalog
from videohost.services.video_service import VideoService
from videohost.storage.object_store import ObjectStore, get_object_store


bearer_scheme = HTTPBearer(
    auto_error=False,  # Missing header is reported as 401 by the authenticator
    description="JWT issued by the configured OIDC provider",
)


# ---------------------------------------------------------------------------
# Collaborator providers. Overridden in tests via app.dependency_overrides.
# ---------------------------------------------------------------------------


async def get_video_catalog() -> VideoCatalog:
    return VideoCatalog(await get_collection(settings.VIDEOS_COLLECTION))


async def get_user_directory() -> UserDirectory:
    return UserDirectory(await get_collection(settings.USERS_COLLECTION))


def get_storage() -> ObjectStore:
    return get_object_store()


async def get_video_service(
    catalog: Annotated[VideoCatalog, Depends(get_video_catalog)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
    object_store: Annotated[ObjectStore, Depends(get_storage)],
) -> VideoService:
    engine = EngagementEngine(catalog, users)
    return VideoService(catalog, users, engine, object_store)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def get_token_payload(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> TokenPayload:
    token = credentials.credentials if credentials else None
    return await authenticator.authenticate(token)


async def get_current_user(
    payload: Annotated[TokenPayload, Depends(get_token_payload)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
) -> User:
    """Resolve the caller's User record, creating it on first contact."""

    return await users.find_or_create_by_subject(payload.sub, claims=payload)


CurrentUser = Annotated[User, Depends(get_current_user)]
VideoServiceDep = Annotated[VideoService, Depends(get_video_service)]
