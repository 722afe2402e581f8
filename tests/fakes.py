"""
In-memory stand-in for the async MongoDB database.

Each fake collection returns canned ``$group`` output and records the
pipelines it was asked to run.
"""
from typing import Any, Dict, List, Optional


class FakeCursor:
    """Mimics the async command cursor returned by ``aggregate``."""

    def __init__(self, rows: List[Dict[str, Any]]):
        self._rows = rows

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self._rows) if length is None else list(self._rows)[:length]


class FakeCollection:
    """One collection: canned aggregation rows, a sample document and a count."""

    def __init__(
        self,
        rows: List[Dict[str, Any]] = None,
        sample: Dict[str, Any] = None,
        count: int = None,
        error: Exception = None,
    ):
        self.rows = rows or []
        self.sample = sample
        self.count = count if count is not None else len(self.rows)
        self.error = error
        self.pipelines: List[List[Dict[str, Any]]] = []

    async def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        if self.error:
            raise self.error
        return FakeCursor(self.rows)

    async def find_one(self, query=None):
        if self.error:
            raise self.error
        return self.sample

    async def count_documents(self, query):
        return self.count

    @property
    def last_match(self) -> Dict[str, Any]:
        """``$match`` stage of the most recent pipeline."""
        return self.pipelines[-1][0]["$match"]


class FakeDatabase:
    """Database handle: unknown collections are empty."""

    def __init__(self, collections: Dict[str, FakeCollection] = None):
        self.collections = dict(collections or {})

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection()
        return self.collections[name]

    async def list_collection_names(self) -> List[str]:
        return list(self.collections)
