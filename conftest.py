from __future__ import annotations

import asyncio
import os
from typing import List
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest

from pomobot.db.session import build_async_engine, build_session_factory, create_all
from pomobot.services.pomodoro import Phase, PomodoroSession
from pomobot.services.task_store import TaskStore


class FakeTime:
    """Monotonic clock that only moves when the code under test sleeps or we advance it."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # let other tasks (and the test) run between ticks
        await asyncio.sleep(0)


class RecordingSubscriber:
    def __init__(self):
        self.ticks: List[str] = []
        self.finished: List[Phase] = []
        self.completed = asyncio.Event()

    async def on_tick(self, session: PomodoroSession) -> None:
        self.ticks.append(session.clock.render())

    async def on_complete(self, session: PomodoroSession, finished: Phase) -> None:
        self.finished.append(finished)
        self.completed.set()


def make_message(text: str, user_id: int = 42, chat_id: int = -1001, message_id: int = 7) -> MagicMock:
    message = MagicMock()
    message.text = text
    message.from_user.id = user_id
    message.chat.id = chat_id
    message.message_id = message_id
    message.answer = AsyncMock()
    return message


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
async def db_engine(tmp_path):
    engine = build_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}")
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def task_store(db_engine) -> TaskStore:
    return TaskStore(build_session_factory(db_engine), max_description_length=50)
