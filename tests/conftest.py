import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="reportcard-logs-"))
os.environ.setdefault("SEED_REMARK_RULES_ON_STARTUP", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reportcard.core.database import Base, get_db
from reportcard.main import app
from reportcard.models import Subject, SubjectPaper


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def o_level_subjects(db):
    subjects = [
        Subject(name="Mathematics", code="MTC", level="O"),
        Subject(name="English", code="ENG", level="O"),
        Subject(name="Biology", code="BIO", level="O"),
    ]
    db.add_all(subjects)
    await db.commit()
    return subjects


@pytest.fixture
async def a_level_subject(db):
    subject = Subject(
        name="Physics",
        code="PHY",
        level="A",
        papers=[
            SubjectPaper(name="Paper 1", code="P1", sort_order=1),
            SubjectPaper(name="Paper 2", code="P2", sort_order=2),
        ],
    )
    db.add(subject)
    await db.commit()
    return subject
