"""
Shared test fixtures.

mongomock stands in for MongoDB; a thin adapter gives it the awaitable
surface of pymongo's AsyncCollection that the repositories use.
"""

from contextlib import asynccontextmanager

import jwt
import mongomock
import pytest
from bson import ObjectId
from fastapi import FastAPI

from config import AppSettings, DatabaseSettings, JWTSettings
from errors import register_error_handlers
from repositories.click_repository import ClickRepository
from repositories.user_repository import UserRepository
from routes.analytics_routes import router as analytics_router
from routes.click_routes import router as click_router
from services.analytics_service import AnalyticsService
from services.click_service import ClickService

JWT_SECRET = "test-secret-with-enough-length-for-hs256"


class _AsyncCursor:
    def __init__(self, docs):
        self._docs = list(docs)

    async def to_list(self, length=None):
        return self._docs[:length] if length else list(self._docs)


class AsyncMongomockCollection:
    """Awaitable wrapper over a mongomock collection."""

    def __init__(self, collection):
        self.sync = collection

    async def insert_one(self, document):
        return self.sync.insert_one(document)

    async def update_one(self, *args, **kwargs):
        return self.sync.update_one(*args, **kwargs)

    async def find_one(self, *args, **kwargs):
        return self.sync.find_one(*args, **kwargs)

    async def create_index(self, keys, **kwargs):
        return self.sync.create_index(keys, **kwargs)

    async def aggregate(self, pipeline, **kwargs):
        # maxTimeMS and other server options are meaningless here
        return _AsyncCursor(self.sync.aggregate(pipeline))


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["bento"]


@pytest.fixture
def clicks(mongo_db):
    return AsyncMongomockCollection(mongo_db["clicks"])


@pytest.fixture
def users(mongo_db):
    return AsyncMongomockCollection(mongo_db["users"])


@pytest.fixture
def make_token(mongo_db):
    """Create a user document and return a signed access token for it."""

    def _make(username: str = "alice") -> str:
        user_id = ObjectId()
        mongo_db["users"].insert_one({"_id": user_id, "username": username})
        return jwt.encode({"id": str(user_id), "role": "user"}, JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def test_settings():
    return AppSettings(
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret=JWT_SECRET),
    )


@pytest.fixture
def dispatcher(mocker):
    """Stand-in for the enrichment workers; records submitted jobs."""
    fake = mocker.MagicMock()
    fake.running = True
    fake.qsize = 0
    return fake


@pytest.fixture
def api_app(clicks, users, test_settings, dispatcher):
    """FastAPI app with the click and analytics routers over mongomock."""
    click_repository = ClickRepository(clicks)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = test_settings
        app.state.dispatcher = dispatcher
        app.state.user_repository = UserRepository(users)
        app.state.click_service = ClickService(click_repository, dispatcher)
        app.state.analytics_service = AnalyticsService(click_repository)
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(click_router)
    app.include_router(analytics_router)
    return app
