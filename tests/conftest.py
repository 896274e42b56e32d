import os

# Settings are read when shortages.core.config is first imported
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PDF_FONT_PATH", "")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shortages.core.db.base import Base
from shortages.modules.directory.schemas import Contact, Directory, ReportLabels
from shortages.modules.reports.models import ShortageDraft  # noqa: F401
from shortages.modules.users.models import User  # noqa: F401
from tests.fakes import InMemoryDraftStore


@pytest.fixture
def directory() -> Directory:
    return Directory(
        branches=["Makkah-Otaibiya", "Jeddah-Naseem"],
        departments=["Groceries", "Cleaning"],
        packing_labels={"unit": "Unit", "carton": "Carton", "pack": "Pack", "": ""},
        contacts=[
            Contact(name="Ali", phone="966500000001"),
            Contact(name="Omar", phone="966500000002"),
        ],
        report=ReportLabels(),
    )


@pytest.fixture
def store() -> InMemoryDraftStore:
    return InMemoryDraftStore()


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
