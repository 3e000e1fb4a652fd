"""Runtime patching helpers to instrument astrapy ``AsyncCollection`` methods.

``instrument_astra_collection()`` is called once from
``videohost.utils.observability`` during start-up. Afterwards every document
read or write performed by the catalog and the user directory is wrapped in an
OpenTelemetry span and recorded in the ``astra_db_query_duration_seconds``
histogram.
"""
from __future__ import annotations

import time
from typing import Any, Awaitable

from astrapy import AsyncCollection
from opentelemetry import trace

from videohost.metrics import ASTRA_DB_QUERY_DURATION_SECONDS

_tracer = trace.get_tracer(__name__)

# coroutine method name -> metric label
_INSTRUMENTED_METHODS = {
    "find_one": "find",
    "find_one_and_update": "upsert",
    "insert_one": "insert",
    "replace_one": "replace",
}

# ``find`` returns a cursor synchronously; the query runs in ``to_list``.
_CURSOR_METHODS = {
    "find": "find_many",
}


async def _observe(op: str, coro: Awaitable[Any]):  # noqa: D401
    """Await *coro* while recording span + histogram for DB *op*."""

    start = time.perf_counter()
    with _tracer.start_as_current_span(f"astra.{op}") as span:
        try:
            return await coro
        finally:
            duration = time.perf_counter() - start
            ASTRA_DB_QUERY_DURATION_SECONDS.labels(operation=op).observe(duration)
            span.set_attribute("duration_ms", int(duration * 1000))


def _wrap(original, op: str):
    async def _wrapper(self, *args, **kwargs):  # type: ignore
        return await _observe(op, original(self, *args, **kwargs))

    _wrapper.__wrapped__ = original  # type: ignore[attr-defined]
    return _wrapper


class _ObservedCursor:
    """Delegate to an astrapy cursor, timing ``to_list``."""

    def __init__(self, cursor: Any, op: str) -> None:
        self._cursor = cursor
        self._op = op

    async def to_list(self, *args, **kwargs):
        return await _observe(self._op, self._cursor.to_list(*args, **kwargs))

    def __aiter__(self):
        return self._cursor.__aiter__()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cursor, name)


def _wrap_cursor(original, op: str):
    def _wrapper(self, *args, **kwargs):  # type: ignore
        return _ObservedCursor(original(self, *args, **kwargs), op)

    _wrapper.__wrapped__ = original  # type: ignore[attr-defined]
    return _wrapper


def instrument_astra_collection(collection_cls: type = AsyncCollection) -> None:  # noqa: D401
    """Patch *collection_cls* once per process."""

    if getattr(collection_cls, "_vh_instrumented", False):
        return

    for method, op in _INSTRUMENTED_METHODS.items():
        if hasattr(collection_cls, method):
            setattr(collection_cls, method, _wrap(getattr(collection_cls, method), op))
    for method, op in _CURSOR_METHODS.items():
        if hasattr(collection_cls, method):
            setattr(
                collection_cls, method, _wrap_cursor(getattr(collection_cls, method), op)
            )

    collection_cls._vh_instrumented = True  # type: ignore[attr-defined]
