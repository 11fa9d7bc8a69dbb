"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; keep tests off PostgreSQL and Alembic.
os.environ.setdefault("API_TITLE", "School Planning Test")
os.environ.setdefault("API_VERSION", "0.1.0-test")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RUN_MIGRATIONS", "False")

from dataclasses import dataclass  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import schoolplan.models  # noqa: E402,F401
from schoolplan.application import create_app  # noqa: E402
from schoolplan.config import Settings  # noqa: E402
from schoolplan.models import Degree, Room, Subject, User  # noqa: E402
from schoolplan.utils.aliases import DEFAULT_DEGREE_ALIASES  # noqa: E402
from schoolplan.utils.db import Base, get_db_session  # noqa: E402


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on FK enforcement for every new SQLite connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings instance."""
    return Settings()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with a fresh schema per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session on the per-test schema."""
    async with session_factory() as session:
        yield session


@dataclass
class Catalog:
    """Reference data seeded for planning tests."""

    degrees: dict[str, Degree]
    legacy_degree: Degree
    math: Subject
    physics: Subject
    teacher: User
    other_teacher: User
    nameless_teacher: User
    parent: User
    student: User
    orphan_student: User
    admin: User
    room: Room
    other_room: Room


@pytest.fixture
async def catalog(db_session: AsyncSession) -> Catalog:
    """Seed canonical degrees (ids 1..5 in position order), subjects and users."""
    degrees = {}
    for canonical in DEFAULT_DEGREE_ALIASES.degrees:
        degree = Degree(
            name=canonical.label, slug=canonical.slug, position=canonical.position
        )
        db_session.add(degree)
        await db_session.flush()
        degrees[canonical.slug] = degree
    legacy = Degree(name="Ancienne classe", slug=None, position=99)
    db_session.add(legacy)

    math = Subject(name="Mathematique", code="MATH")
    physics = Subject(name="Physique & Chimie", code="PC")
    room = Room(name="Salle B12")
    other_room = Room(name="Labo 1")
    teacher = User(firstname="Amina", lastname="Idrissi", role="enseignant")
    other_teacher = User(firstname="Youssef", lastname="Benali", role="Prof")
    nameless_teacher = User(role="teacher")
    parent = User(firstname="Karim", lastname="Alaoui", role="parent")
    admin = User(firstname="Nadia", lastname="Tazi", role="administrateur")
    db_session.add_all(
        [
            math,
            physics,
            room,
            other_room,
            teacher,
            other_teacher,
            nameless_teacher,
            parent,
            admin,
        ]
    )
    await db_session.flush()

    student = User(
        firstname="Salma",
        lastname="Alaoui",
        role="élève",
        degree_id=degrees["bac2"].id,
        parent_id=parent.id,
    )
    orphan_student = User(firstname="Omar", lastname="Fassi", role="eleve")
    db_session.add_all([student, orphan_student])
    await db_session.commit()
    # Detached copies keep their loaded values across later rollbacks
    db_session.expunge_all()

    return Catalog(
        degrees=degrees,
        legacy_degree=legacy,
        math=math,
        physics=physics,
        teacher=teacher,
        other_teacher=other_teacher,
        nameless_teacher=nameless_teacher,
        parent=parent,
        student=student,
        orphan_student=orphan_student,
        admin=admin,
        room=room,
        other_room=other_room,
    )


@pytest.fixture
def app(session_factory):
    """FastAPI application whose requests use the per-test database."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def api_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the application (lifespan not run)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
