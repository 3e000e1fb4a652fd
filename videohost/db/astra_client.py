"""Lifecycle of the shared Astra Data API client.

Videos and users are stored as whole documents in Data API *collections*,
so we only need the async collection handle from astrapy v2.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import httpx
from astrapy import DataAPIClient, AsyncCollection, AsyncDatabase
from astrapy.exceptions import DataAPIException, DataAPITimeoutException

from videohost.core.config import settings
from videohost.core.errors import PersistenceError, StoreUnavailableError

logger = logging.getLogger(__name__)
db_instance: Optional[AsyncDatabase] = None


async def init_astra_db() -> AsyncDatabase:
    global db_instance
    if not all(
        [
            settings.ASTRA_DB_API_ENDPOINT,
            settings.ASTRA_DB_APPLICATION_TOKEN,
            settings.ASTRA_DB_KEYSPACE,
        ]
    ):
        logger.error(
            "AstraDB settings are not fully configured. Please check ASTRA_DB_API_ENDPOINT, ASTRA_DB_APPLICATION_TOKEN, and ASTRA_DB_KEYSPACE."
        )
        raise ValueError("AstraDB settings are not fully configured.")

    try:
        logger.info(
            f"Initializing AstraDB client for keyspace: {settings.ASTRA_DB_KEYSPACE} at {settings.ASTRA_DB_API_ENDPOINT[:30]}..."
        )  # Log only part of endpoint
        client = DataAPIClient()
        db_instance = client.get_async_database(
            settings.ASTRA_DB_API_ENDPOINT,
            token=settings.ASTRA_DB_APPLICATION_TOKEN,
            keyspace=settings.ASTRA_DB_KEYSPACE,
        )
        logger.info("AstraDB client initialized successfully.")
    except (httpx.ConnectError, ConnectionError) as e:
        logger.error(
            "Unable to establish connection to AstraDB – check API endpoint/token."
        )
        logger.debug("Connection error details: %s", e)
        raise
    except Exception as e:
        logger.error("Failed to initialize AstraDB client: %s", e, exc_info=True)
        raise
    return db_instance


async def get_astra_db() -> AsyncDatabase:
    if db_instance is None:
        logger.info("AstraDB instance not found, attempting to initialize...")
        return await init_astra_db()
    return db_instance


async def get_collection(name: str) -> AsyncCollection:
    db = await get_astra_db()
    return db.get_collection(name)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise driver and transport failures as ``PersistenceError``.

    Connection failures and timeouts become ``StoreUnavailableError`` (503).
    """

    try:
        yield
    except (httpx.ConnectError, httpx.TimeoutException, DataAPITimeoutException) as exc:
        logger.warning("AstraDB %s could not reach the data store: %s", operation, exc)
        raise StoreUnavailableError(
            "Unable to reach data store. Please try again later."
        ) from exc
    except (DataAPIException, httpx.HTTPError) as exc:
        logger.error("AstraDB %s failed: %s", operation, exc)
        raise PersistenceError(f"Data store {operation} failed") from exc
