import uuid

import pytest
import fakeredis
import fakeredis.aioredis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recipebox.main import app
from recipebox.db import Base, get_db
from recipebox.infra import redis_client
from recipebox.infra.sessions import store_session
from recipebox.models import Recipe, RecipeIngredient, RecipeStep, User
from recipebox.routers.public import limiter as public_limiter

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # One shared connection so every session sees the same in-memory DB
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def mock_redis():
    server = fakeredis.FakeServer()
    # Create fake clients sharing the same server
    async_redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)
    sync_redis = fakeredis.FakeRedis(server=server, decode_responses=True)

    # Force the clients into the infra module
    redis_client._redis_async = async_redis
    redis_client._redis_sync = sync_redis

    yield sync_redis

    redis_client._redis_async = None
    redis_client._redis_sync = None


@pytest.fixture(autouse=True)
def reset_rate_limits():
    public_limiter.reset()
    yield


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


# --- Factories ---

@pytest.fixture
def make_user(db_session):
    def _make(name: str = "Test User", email: str | None = None) -> User:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    """Open a session for a user and return the Authorization header."""
    def _headers(user: User) -> dict:
        token = f"token-{user.id}"
        store_session(token, user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_recipe(db_session):
    def _make(
        owner: User | None,
        title: str = "Test Recipe",
        is_public: bool = False,
        is_global: bool = False,
        ingredients: list[dict] | None = None,
        servings: int = 4,
    ) -> Recipe:
        recipe = Recipe(
            user_id=owner.id if owner else None,
            title=title,
            servings=servings,
            is_public=is_public,
            is_global=is_global,
            ingredients=[
                RecipeIngredient(sort_order=idx, **ing)
                for idx, ing in enumerate(ingredients or [])
            ],
            steps=[RecipeStep(step_number=1, instruction="Cook it.")],
        )
        db_session.add(recipe)
        db_session.commit()
        db_session.refresh(recipe)
        return recipe

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("Alice", "alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("Bob", "bob@example.com")


@pytest.fixture
def carol(make_user):
    return make_user("Carol", "carol@example.com")
