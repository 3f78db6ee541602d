import asyncio
import copy

import pytest
from bson import ObjectId
from gridfs.errors import NoFile

from services.content_store import ContentStore
from services.portfolio_cache import PortfolioCache
from services.upload_service import UploadService


# ------------------- In-memory stand-ins for the motor API ------------------------
def _matches(doc, query):
    return all(doc.get(key) == value for key, value in (query or {}).items())


class FakeInsertOneResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeDeleteResult:
    def __init__(self, deleted_count):
        self.deleted_count = deleted_count


class FakeCursor:
    def __init__(self, collection, query):
        self._collection = collection
        self._query = query

    async def to_list(self, length=None):
        self._collection._check()
        docs = [copy.deepcopy(d) for d in self._collection.docs if _matches(d, self._query)]
        return docs if length is None else docs[:length]


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.fail_with = None  # exception raised by every call while set
        self.calls = 0

    def _check(self):
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with

    def find(self, query=None):
        return FakeCursor(self, query)

    async def find_one(self, query):
        self._check()
        doc = next((d for d in self.docs if _matches(d, query)), None)
        return copy.deepcopy(doc)

    async def insert_one(self, document):
        self._check()
        document.setdefault("_id", ObjectId())
        if self.name == "admins" and any(d.get("email") == document.get("email") for d in self.docs):
            from pymongo.errors import DuplicateKeyError
            raise DuplicateKeyError("duplicate email")
        self.docs.append(copy.deepcopy(document))
        return FakeInsertOneResult(document["_id"])

    async def find_one_and_update(self, query, update, return_document=None):
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc)
        return None

    async def delete_one(self, query):
        self._check()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return FakeDeleteResult(1)
        return FakeDeleteResult(0)

    async def count_documents(self, query):
        self._check()
        return sum(1 for d in self.docs if _matches(d, query))

    async def create_index(self, *args, **kwargs):
        self._check()
        return kwargs.get("name", "index")


class FakeDatabase:
    name = "portfolio_test"

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def get_collection(self, name):
        return self[name]


class FakeGridIn:
    def __init__(self, bucket, filename, metadata):
        self._id = ObjectId()
        self.filename = filename
        self.metadata = metadata
        self.buffer = b""
        self.closed = False
        self.aborted = False
        self._bucket = bucket

    async def write(self, data):
        if self._bucket.gate is not None:
            await self._bucket.gate.wait()
        if self._bucket.fail_with is not None:
            raise self._bucket.fail_with
        self.buffer += data

    async def close(self):
        self.closed = True
        self._bucket.files[self._id] = self

    async def abort(self):
        self.aborted = True


class FakeGridOut:
    def __init__(self, grid_in, chunk_size=4):
        self.metadata = grid_in.metadata
        self.filename = grid_in.filename
        self._data = grid_in.buffer
        self._chunk_size = chunk_size

    async def readchunk(self):
        chunk, self._data = self._data[:self._chunk_size], self._data[self._chunk_size:]
        return chunk


class FakeBucket:
    def __init__(self):
        self.files = {}
        self.streams = []
        self.gate = None  # asyncio.Event that holds every write until set
        self.fail_with = None

    def open_upload_stream(self, filename, metadata=None):
        grid_in = FakeGridIn(self, filename, metadata)
        self.streams.append(grid_in)
        return grid_in

    async def open_download_stream(self, file_id):
        if file_id not in self.files:
            raise NoFile(f"no file {file_id}")
        return FakeGridOut(self.files[file_id])


# ------------------- Fixtures ------------------------
@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return ContentStore(fake_db)


@pytest.fixture
def portfolio(store):
    return PortfolioCache(store)


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def uploads(bucket):
    return UploadService(bucket, public_base_url="http://testserver", max_bytes=64, chunk_size=8)


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture
def app_client(fake_db, uploads):
    from fastapi.testclient import TestClient

    from app_instance import attach_services
    from config.db import get_database
    from controllers.admin_controller import ensure_admin_account
    from main import app

    attach_services(app, fake_db, uploads=uploads)
    app.dependency_overrides[get_database] = lambda: fake_db
    asyncio.run(ensure_admin_account(fake_db, ADMIN_EMAIL, ADMIN_PASSWORD))
    asyncio.run(app.state.portfolio.initialize())

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(app_client):
    response = app_client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
