"""Shared fixtures: test settings, an in-memory collection and wired services."""

import os

# Settings are read at import time, so configure them before the package loads.
os.environ.setdefault("AUTH_SECRET_KEY", "unit-test-secret")
os.environ.setdefault("AUTH_ALGORITHMS", "HS256")
os.environ.setdefault("AUTH_ISSUER", "https://videohost.test/")
os.environ.setdefault("AUTH_AUDIENCE", "videohost-api")
os.environ.setdefault("OBSERVABILITY_ENABLED", "false")

import asyncio
import copy
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import httpx
import pytest

from videohost.models.user import User
from videohost.models.video import Video
from videohost.services.engagement import EngagementEngine
from videohost.services.user_directory import UserDirectory
from videohost.services.video_catalog import VideoCatalog
from videohost.services.video_service import VideoService


class _Cursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    async def to_list(self) -> List[Dict[str, Any]]:
        return self._docs


class InMemoryCollection:
    """Minimal async stand-in for an astrapy ``AsyncCollection``.

    ``fail_on`` names operations that raise ``httpx.ConnectError`` to simulate
    an unreachable data store. Reads and upserts yield to the event loop first
    so concurrent callers interleave the way they would against the real store;
    each individual write is applied atomically.
    """

    def __init__(self) -> None:
        self.docs: List[Dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.calls: List[str] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise httpx.ConnectError(f"{op} failed")

    @staticmethod
    def _matches(doc: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
        return all(doc.get(k) == v for k, v in (query or {}).items())

    async def find_one(self, filter: Dict[str, Any], **kwargs):
        self._check("find_one")
        await asyncio.sleep(0)
        for doc in self.docs:
            if self._matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, document: Dict[str, Any], **kwargs):
        self._check("insert_one")
        self.docs.append(copy.deepcopy(document))
        return {}

    async def replace_one(
        self, filter: Dict[str, Any], replacement: Dict[str, Any], upsert: bool = False, **kwargs
    ):
        self._check("replace_one")
        for i, doc in enumerate(self.docs):
            if self._matches(doc, filter):
                self.docs[i] = copy.deepcopy(replacement)
                return {}
        if upsert:
            self.docs.append(copy.deepcopy(replacement))
        return {}

    async def find_one_and_update(
        self,
        filter: Dict[str, Any],
        update: Dict[str, Any],
        upsert: bool = False,
        return_document: str = "before",
        **kwargs,
    ):
        self._check("find_one_and_update")
        await asyncio.sleep(0)
        for doc in self.docs:
            if self._matches(doc, filter):
                before = copy.deepcopy(doc)
                doc.update(copy.deepcopy(update.get("$set", {})))
                return before if return_document == "before" else copy.deepcopy(doc)
        if not upsert:
            return None
        inserted = {**copy.deepcopy(filter), **copy.deepcopy(update.get("$setOnInsert", {}))}
        inserted.update(copy.deepcopy(update.get("$set", {})))
        self.docs.append(inserted)
        return None if return_document == "before" else copy.deepcopy(inserted)

    def find(self, filter: Optional[Dict[str, Any]] = None, **kwargs) -> _Cursor:
        self._check("find")
        return _Cursor([copy.deepcopy(d) for d in self.docs if self._matches(d, filter)])


@pytest.fixture
def videos_collection() -> InMemoryCollection:
    return InMemoryCollection()


@pytest.fixture
def users_collection() -> InMemoryCollection:
    return InMemoryCollection()


@pytest.fixture
def catalog(videos_collection: InMemoryCollection) -> VideoCatalog:
    return VideoCatalog(videos_collection)


@pytest.fixture
def directory(users_collection: InMemoryCollection) -> UserDirectory:
    return UserDirectory(users_collection)


@pytest.fixture
def engine(catalog: VideoCatalog, directory: UserDirectory) -> EngagementEngine:
    return EngagementEngine(catalog, directory)


@pytest.fixture
def object_store() -> AsyncMock:
    store = AsyncMock()
    store.upload.side_effect = lambda data, content_type, filename: (
        f"https://cdn.videohost.test/{uuid4().hex}"
    )
    return store


@pytest.fixture
def video_service(
    catalog: VideoCatalog,
    directory: UserDirectory,
    engine: EngagementEngine,
    object_store: AsyncMock,
) -> VideoService:
    return VideoService(catalog, directory, engine, object_store, max_upload_bytes=1024)


@pytest.fixture
async def stored_video(catalog: VideoCatalog) -> Video:
    return await catalog.create(
        Video(videoid="", video_url="https://cdn.videohost.test/clip.mp4")
    )


@pytest.fixture
async def user_a(directory: UserDirectory) -> User:
    return await directory.find_or_create_by_subject("auth0|user-a")


@pytest.fixture
async def user_b(directory: UserDirectory) -> User:
    return await directory.find_or_create_by_subject("auth0|user-b")
