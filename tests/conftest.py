"""
Pytest Configuration and Fixtures

Provides fixtures for:
- Database sessions (async, in-memory SQLite)
- HTTP client against the FastAPI app
- Task factory and signed GitHub delivery helpers
"""
# The secret must be in the environment before settings are imported
import os
os.environ.setdefault("GITHUB_WEBHOOK_SECRET", "test-webhook-secret-do-not-use-in-production")

import json
import uuid
from typing import AsyncGenerator, Optional

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hydianflow.core.config import settings
from hydianflow.db.database import Base, get_db
from hydianflow.db.models.task import Task
from hydianflow.domain.github.signature import compute_signature
from hydianflow.domain.services.task_service import TaskService
from hydianflow.main import app


# Test database URL (SQLite in memory for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WEBHOOK_URL = "/api/v1/webhooks/github"


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests"""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
async def test_client(db_session: AsyncSession):
    """Create test client with database override"""
    from httpx import AsyncClient, ASGITransport

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Test Data Factories
# ============================================================================

@pytest.fixture
def task_factory(db_session: AsyncSession):
    """Factory for creating tasks; returns the new task id"""
    async def _create_task(
        title: str = "Test task",
        status: str = "todo",
        repo_full_name: Optional[str] = "o/r",
        branch_hint: Optional[str] = None,
        creator_id: int = 1,
        project_id: Optional[int] = None,
        position: Optional[float] = None,
    ) -> int:
        task = await TaskService(db_session).create_task(
            title=title,
            creator_id=creator_id,
            status=status,
            position=position,
            project_id=project_id,
            repo_full_name=repo_full_name,
            branch_hint=branch_hint,
        )
        return task.id

    return _create_task


async def load_task(db: AsyncSession, task_id: int) -> Task:
    """Read a task straight from the database, bypassing stale identity-map state"""
    result = await db.execute(
        select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.fixture
def reload_task(db_session: AsyncSession):
    async def _reload(task_id: int) -> Task:
        return await load_task(db_session, task_id)

    return _reload


# ============================================================================
# GitHub deliveries
# ============================================================================

def next_delivery_id() -> str:
    return f"delivery-{uuid.uuid4()}"


def signed_headers(
    event: str,
    body: bytes,
    delivery_id: Optional[str] = None,
    secret: Optional[str] = None,
) -> dict[str, str]:
    """Headers GitHub would send for ``body``"""
    digest = compute_signature(secret if secret is not None else settings.GITHUB_WEBHOOK_SECRET, body)
    return {
        "Content-Type": "application/json",
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": delivery_id or next_delivery_id(),
        "X-Hub-Signature-256": f"sha256={digest}",
    }


def push_payload(
    branch: str,
    repo: str = "o/r",
    default_branch: str = "main",
    messages: Optional[list[str]] = None,
) -> dict:
    return {
        "ref": f"refs/heads/{branch}",
        "repository": {"full_name": repo, "default_branch": default_branch},
        "commits": [{"message": m} for m in (messages or [])],
    }


def pull_request_payload(
    head: str,
    base: str = "main",
    repo: str = "o/r",
    default_branch: str = "main",
    action: str = "closed",
    merged: bool = True,
) -> dict:
    return {
        "action": action,
        "repository": {"full_name": repo, "default_branch": default_branch},
        "pull_request": {
            "merged": merged,
            "base": {"ref": base},
            "head": {"ref": head},
        },
    }


@pytest.fixture
def send_delivery(test_client):
    """Post a signed delivery to the webhook endpoint"""
    async def _send(event: str, payload, delivery_id: Optional[str] = None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return await test_client.post(
            WEBHOOK_URL,
            content=body,
            headers=signed_headers(event, body, delivery_id),
        )

    return _send
