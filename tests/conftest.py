"""Test configuration."""
import os
import secrets
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Default environment for the test run
os.environ.setdefault("DATABASE_URL", "sqlite:///./helpdesk_test.db")
os.environ.setdefault("HELPDESK_ENV", "test")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789abcdef")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from helpdesk.main import app  # noqa: E402
from helpdesk.db import get_db  # noqa: E402
from helpdesk.models import User, UserRole, UserStatus  # noqa: E402
from helpdesk.services.passwords import get_hasher  # noqa: E402

DB_PATH = Path("./helpdesk_test.db")
DEFAULT_PASSWORD = "Passw0rd!"


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file for the session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Schema comes from Alembic only
_run_migrations()


class FakeHasher:
    """Cheap stand-in for bcrypt that counts comparisons."""

    def __init__(self) -> None:
        self.compare_calls = 0
        self.hash_calls = 0
        self.dummy_hash = f"fake${secrets.token_hex(8)}"

    def hash(self, plaintext: str) -> str:
        self.hash_calls += 1
        return f"fake${plaintext}"

    def compare(self, plaintext: str, hashed: str) -> bool:
        self.compare_calls += 1
        return hashed == f"fake${plaintext}"


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture(autouse=True)
def override_dependencies(db_session: Session, hasher: FakeHasher) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_hasher] = lambda: hasher
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_hasher, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_user(db_session: Session, hasher: FakeHasher) -> Callable[..., User]:
    """Factory inserting an account row directly."""

    def _factory(
        *,
        username: str | None = None,
        role: UserRole = UserRole.admin,
        status: UserStatus = UserStatus.active,
        department: str | None = None,
        password: str = DEFAULT_PASSWORD,
        login_attempts: int = 0,
    ) -> User:
        name = username or f"user-{uuid4().hex[:8]}"
        if role == UserRole.department and department is None:
            department = "Radiology"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash=hasher.hash(password),
            role=role,
            department=department,
            status=status,
            login_attempts=login_attempts,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


@pytest.fixture
def login(client: AsyncClient) -> Callable:
    async def _login(username: str, password: str = DEFAULT_PASSWORD):
        return await client.post("/auth/login", json={"username": username, "password": password})

    return _login
