"""
In-memory stand-ins used by the tests: a tiny async subset of the motor
collection API and a media store that never leaves the process.
"""

import copy
from types import SimpleNamespace

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.errors import UpstreamError


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in (query or {}).items():
        actual = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if actual not in expected["$in"]:
                return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, order in reversed(keys):
            self._docs.sort(
                key=lambda d: (d.get(field) is not None, d.get(field) if d.get(field) is not None else 0),
                reverse=order < 0,
            )
        return self

    async def to_list(self, length=None):
        docs = self._docs if length is None else self._docs[:length]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.indexes = []
        self.unique_keys = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return str(keys)

    def unique(self, *fields):
        """Reject inserts that repeat `fields`, like a unique index"""
        self.unique_keys.append(fields)
        return self

    async def insert_one(self, doc):
        for fields in self.unique_keys:
            if any(all(d.get(f) == doc.get(f) for f in fields) for d in self.docs):
                raise DuplicateKeyError(
                    "E11000 duplicate key error", 11000, {"keyPattern": {f: 1 for f in fields}},
                )
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query=None):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None):
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def distinct(self, field, query=None):
        values = []
        for doc in self.docs:
            if _matches(doc, query) and doc.get(field) not in values:
                values.append(doc.get(field))
        return values

    async def update_one(self, query, update):
        for doc in self.docs:
            if not _matches(doc, query):
                continue
            for key, value in update.get("$set", {}).items():
                doc[key] = copy.deepcopy(value)
            for key, value in update.get("$inc", {}).items():
                doc[key] = doc.get(key, 0) + value
            for key, value in update.get("$push", {}).items():
                doc.setdefault(key, []).append(copy.deepcopy(value))
            return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def command(self, name):
        return {"ok": 1}


class FakeMediaStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploads = []

    async def upload(self, data, content_type, resource_type="image", public_id=None, filename="upload"):
        if self.fail:
            raise UpstreamError("Media upload failed, please try again")
        self.uploads.append({
            "size": len(data),
            "content_type": content_type,
            "resource_type": resource_type,
            "public_id": public_id,
        })
        return f"https://media.test/{resource_type}/{public_id}"


class FakeSocket:
    """Collects whatever the room manager sends it"""

    def __init__(self, broken=False):
        self.broken = broken
        self.sent = []

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("connection closed")
        self.sent.append(message)
