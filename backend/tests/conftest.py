import os
import tempfile

# Must be set before feedback_engine.config is imported
_tmpdir = tempfile.mkdtemp(prefix="feedback-engine-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/test.db"
os.environ["LLM_ENABLED"] = "false"
os.environ["DIGEST_ENABLED"] = "false"

import pytest
import pytest_asyncio

import feedback_engine.models  # noqa: F401
from feedback_engine.database import Base, engine, async_session
from feedback_engine.models.feedback import Feedback
from feedback_engine.services.llm_client import GenerationError, TextGenerator


class StubGenerator(TextGenerator):
    """Returns a canned response (or raises) and records every prompt."""

    def __init__(self, response: str = "", error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, prompt, options):
        self.calls.append((prompt, options))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def stub_generator():
    def make(response: str = "", error: Exception = None) -> StubGenerator:
        return StubGenerator(response=response, error=error)
    return make


@pytest.fixture
def unreachable_generator():
    return StubGenerator(error=GenerationError("connection refused"))


@pytest_asyncio.fixture
async def db():
    """Fresh schema per test; yields the session factory."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield async_session


@pytest_asyncio.fixture
async def add_feedback(db):
    async def add(content="Some feedback", **fields) -> Feedback:
        async with db() as session:
            feedback = Feedback(content=content, source=fields.pop("source", "email"), **fields)
            session.add(feedback)
            await session.commit()
            return feedback
    return add
