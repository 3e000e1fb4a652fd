from videohost.metrics import ASTRA_DB_QUERY_DURATION_SECONDS
from videohost.utils.db_instrumentation import instrument_astra_collection


class _FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self.limit_value = None

    async def to_list(self):
        return list(self._docs)


class _FakeCollection:
    async def find_one(self, filter, **kwargs):
        return {"filter": filter}

    async def replace_one(self, filter, replacement, **kwargs):
        return replacement

    def find(self, filter=None, **kwargs):
        return _FakeCursor([{"videoid": "v1"}, {"videoid": "v2"}])


def _count(op: str) -> float:
    for metric in ASTRA_DB_QUERY_DURATION_SECONDS.collect():
        for sample in metric.samples:
            if sample.name.endswith("_count") and sample.labels.get("operation") == op:
                return sample.value
    return 0.0


async def test_methods_are_wrapped_once():
    instrument_astra_collection(_FakeCollection)
    wrapped = _FakeCollection.find_one
    instrument_astra_collection(_FakeCollection)

    assert _FakeCollection.find_one is wrapped
    assert not hasattr(_FakeCollection, "insert_one")


async def test_calls_are_recorded():
    instrument_astra_collection(_FakeCollection)
    before = _count("find")

    result = await _FakeCollection().find_one({"videoid": "v1"})

    assert result == {"filter": {"videoid": "v1"}}
    assert _count("find") == before + 1


async def test_find_cursor_is_timed_on_to_list():
    instrument_astra_collection(_FakeCollection)
    before = _count("find_many")

    cursor = _FakeCollection().find(filter={})
    # Building the cursor runs no query.
    assert _count("find_many") == before
    assert cursor.limit_value is None

    docs = await cursor.to_list()

    assert [d["videoid"] for d in docs] == ["v1", "v2"]
    assert _count("find_many") == before + 1
