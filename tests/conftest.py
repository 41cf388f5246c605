"""Shared pytest fixtures for the crudforge test suite.

Provides:
- An in-memory stand-in for the motor database/collection API, covering the
  calls the controllers make and raising the driver's own DuplicateKeyError
- Application and TestClient fixtures wired to that database
- A temporary project root for scaffolding tests
"""
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from crudforge.config import Settings
from crudforge.main import create_app
from crudforge.registry import default_registry


# ---------------------------------------------------------------------------
# In-memory document database
# ---------------------------------------------------------------------------

_COMPARISONS = {
    "$eq": lambda value, arg: value == arg,
    "$ne": lambda value, arg: value != arg,
    "$gt": lambda value, arg: value is not None and value > arg,
    "$gte": lambda value, arg: value is not None and value >= arg,
    "$lt": lambda value, arg: value is not None and value < arg,
    "$lte": lambda value, arg: value is not None and value <= arg,
    "$in": lambda value, arg: value in arg,
    "$nin": lambda value, arg: value not in arg,
}


def matches(document: Dict[str, Any], filter_: Dict[str, Any]) -> bool:
    for key, condition in filter_.items():
        value = document.get(key)
        if isinstance(condition, dict) and condition and all(op.startswith("$") for op in condition):
            if not all(_COMPARISONS[op](value, arg) for op, arg in condition.items()):
                return False
        elif value != condition:
            return False
    return True


class InsertOneResult:
    def __init__(self, inserted_id: ObjectId):
        self.inserted_id = inserted_id


class InMemoryCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        # Stable sorts applied from the least significant key
        for field, direction in reversed(list(keys)):
            self._documents.sort(
                key=lambda doc: (doc.get(field) is not None, doc.get(field)),
                reverse=direction < 0,
            )
        return self

    def skip(self, count: int):
        self._skip = count
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    async def to_list(self, length: Optional[int] = None):
        end = self._skip + self._limit if self._limit else None
        selected = self._documents[self._skip:end]
        if length is not None:
            selected = selected[:length]
        return [deepcopy(document) for document in selected]


class InMemoryCollection:
    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.unique_fields: List[str] = []

    async def create_index(self, field: str, unique: bool = False):
        if unique and field not in self.unique_fields:
            self.unique_fields.append(field)
        return f"{field}_1"

    def _check_unique(self, candidate: Dict[str, Any], ignore_id: Any = None):
        for field in self.unique_fields:
            if field not in candidate:
                continue
            for existing in self.documents:
                if existing["_id"] != ignore_id and existing.get(field) == candidate[field]:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: test.{self.name} "
                        f"index: {field}_1 dup key: {{ {field}: \"{candidate[field]}\" }}",
                        11000,
                        {"keyValue": {field: candidate[field]}},
                    )

    async def insert_one(self, document: Dict[str, Any]):
        stored = deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self._check_unique(stored)
        self.documents.append(stored)
        return InsertOneResult(stored["_id"])

    def find(self, filter_: Optional[Dict[str, Any]] = None):
        return InMemoryCursor([doc for doc in self.documents if matches(doc, filter_ or {})])

    async def find_one(self, filter_: Dict[str, Any]):
        for document in self.documents:
            if matches(document, filter_):
                return deepcopy(document)
        return None

    async def count_documents(self, filter_: Dict[str, Any]):
        return sum(1 for document in self.documents if matches(document, filter_))

    async def find_one_and_update(self, filter_, update, return_document=ReturnDocument.BEFORE):
        for document in self.documents:
            if matches(document, filter_):
                before = deepcopy(document)
                changes = update.get("$set", {})
                self._check_unique(changes, ignore_id=document["_id"])
                document.update(deepcopy(changes))
                return deepcopy(document) if return_document == ReturnDocument.AFTER else before
        return None

    async def find_one_and_delete(self, filter_):
        for index, document in enumerate(self.documents):
            if matches(document, filter_):
                return self.documents.pop(index)
        return None


class InMemoryDatabase:
    def __init__(self):
        self.collections: Dict[str, InMemoryCollection] = {}

    def __getitem__(self, name: str) -> InMemoryCollection:
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name)
        return self.collections[name]


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings(ENVIRONMENT="test", LOG_LEVEL="WARNING", DEFAULT_PAGE_SIZE=10)


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database, registry=default_registry())


@pytest.fixture
def client(app):
    """TestClient with the lifespan run, so unique indexes exist."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_payload() -> Dict[str, Any]:
    return {"name": "Ada Lovelace", "email": "ada@example.com", "password": "secretpw"}


# ---------------------------------------------------------------------------
# Scaffolding
# ---------------------------------------------------------------------------

@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project root with the package directories the generator writes into."""
    root = tmp_path / "project"
    for sub in ("models", "schemas", "controllers", "api/endpoints"):
        (root / "crudforge" / sub).mkdir(parents=True)
    return root
