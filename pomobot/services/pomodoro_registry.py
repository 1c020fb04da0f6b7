from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Tuple

from pomobot.services.pomodoro import (
    CountdownSubscriber,
    Phase,
    PomodoroConfig,
    PomodoroSession,
    PomodoroSnapshot,
)

logger = logging.getLogger(__name__)

# (chat id, user id): the same user gets independent timers in different chats
SessionKey = Tuple[int, int]

ACTION_START = "start"
ACTION_BREAK = "break"
ACTION_CHECK = "check"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_STOP = "stop"

REASON_STARTED = "started"
REASON_ALREADY_ACTIVE = "already_active"
REASON_NO_SESSION = "no_session"
REASON_STATUS = "status"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ACTIVE = "not_active"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_STOPPED = "stopped"


@dataclass(frozen=True)
class PomodoroActionResult:
    """Outcome of a timer command; state conflicts are reported, never raised."""

    action: str
    accepted: bool
    reason: str
    snapshot: Optional[PomodoroSnapshot] = None


@dataclass
class _Entry:
    session: PomodoroSession
    subscriber: Optional[CountdownSubscriber] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)


class PomodoroRegistry:
    """Owns every live pomodoro session and the background task counting it down."""

    def __init__(
        self,
        config: Optional[PomodoroConfig] = None,
        *,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or PomodoroConfig()
        self._monotonic = monotonic
        self._sleep = sleep
        self._entries: Dict[SessionKey, _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: SessionKey) -> Optional[PomodoroSession]:
        entry = self._entries.get(key)
        return entry.session if entry else None

    def _entry_for(self, key: SessionKey) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            session = PomodoroSession(self.config, monotonic=self._monotonic, sleep=self._sleep)
            entry = _Entry(session=session)
            self._entries[key] = entry
        return entry

    def _spawn(self, key: SessionKey, entry: _Entry) -> None:
        entry.task = asyncio.create_task(self._run(key, entry), name=f"pomodoro-{key[0]}-{key[1]}")

    async def _run(self, key: SessionKey, entry: _Entry) -> None:
        session = entry.session
        subscriber = entry.subscriber
        try:
            finished = await session.countdown(subscriber.on_tick if subscriber else None)
            if finished is not None and subscriber is not None:
                await subscriber.on_complete(session, finished)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Pomodoro countdown for {key} failed")
            session.stop()

    async def _cancel_task(self, entry: _Entry) -> None:
        task = entry.task
        entry.task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def start_work(
        self, key: SessionKey, subscriber: Optional[CountdownSubscriber] = None
    ) -> PomodoroActionResult:
        entry = self._entry_for(key)
        if entry.session.phase.is_active:
            return PomodoroActionResult(ACTION_START, False, REASON_ALREADY_ACTIVE, entry.session.snapshot())

        entry.subscriber = subscriber
        entry.session.start_work()
        self._spawn(key, entry)
        logger.info(f"Pomodoro work started for {key}")
        return PomodoroActionResult(ACTION_START, True, REASON_STARTED, entry.session.snapshot())

    async def start_break(
        self, key: SessionKey, subscriber: Optional[CountdownSubscriber] = None
    ) -> PomodoroActionResult:
        entry = self._entry_for(key)
        if entry.session.phase.is_active:
            return PomodoroActionResult(ACTION_BREAK, False, REASON_ALREADY_ACTIVE, entry.session.snapshot())

        entry.subscriber = subscriber
        phase = entry.session.start_break()
        self._spawn(key, entry)
        logger.info(f"Pomodoro {phase.value} started for {key}")
        return PomodoroActionResult(ACTION_BREAK, True, REASON_STARTED, entry.session.snapshot())

    def check(self, key: SessionKey) -> PomodoroActionResult:
        session = self.get(key)
        if session is None:
            return PomodoroActionResult(ACTION_CHECK, False, REASON_NO_SESSION)
        return PomodoroActionResult(ACTION_CHECK, True, REASON_STATUS, session.snapshot())

    async def pause(self, key: SessionKey) -> PomodoroActionResult:
        entry = self._entries.get(key)
        if entry is None:
            return PomodoroActionResult(ACTION_PAUSE, False, REASON_NO_SESSION)
        if not entry.session.pause():
            return PomodoroActionResult(ACTION_PAUSE, False, REASON_NOT_RUNNING, entry.session.snapshot())

        await self._cancel_task(entry)
        logger.info(f"Pomodoro paused for {key} at {entry.session.clock.render()}")
        return PomodoroActionResult(ACTION_PAUSE, True, REASON_PAUSED, entry.session.snapshot())

    async def resume(self, key: SessionKey) -> PomodoroActionResult:
        entry = self._entries.get(key)
        if entry is None:
            return PomodoroActionResult(ACTION_RESUME, False, REASON_NO_SESSION)
        if not entry.session.resume():
            return PomodoroActionResult(ACTION_RESUME, False, REASON_NOT_PAUSED, entry.session.snapshot())

        self._spawn(key, entry)
        logger.info(f"Pomodoro resumed for {key} at {entry.session.clock.render()}")
        return PomodoroActionResult(ACTION_RESUME, True, REASON_RESUMED, entry.session.snapshot())

    async def stop(self, key: SessionKey) -> PomodoroActionResult:
        entry = self._entries.get(key)
        if entry is None:
            return PomodoroActionResult(ACTION_STOP, False, REASON_NO_SESSION)
        stopped: Optional[Phase] = entry.session.stop()
        if stopped is None:
            return PomodoroActionResult(ACTION_STOP, False, REASON_NOT_ACTIVE, entry.session.snapshot())

        await self._cancel_task(entry)
        logger.info(f"Pomodoro {stopped.value} stopped for {key}")
        return PomodoroActionResult(ACTION_STOP, True, REASON_STOPPED, entry.session.snapshot())

    def reap_idle(self, max_idle_seconds: float) -> int:
        """Forget sessions that have not been running for ``max_idle_seconds``.

        Paused sessions count as idle from the moment they were paused.
        """
        now = self._monotonic()
        stale = [
            key
            for key, entry in self._entries.items()
            if not entry.session.is_running and now - entry.session.last_active_at > max_idle_seconds
        ]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Reaped {len(stale)} idle pomodoro session(s)")
        return len(stale)

    async def shutdown(self) -> None:
        for entry in list(self._entries.values()):
            await self._cancel_task(entry)
        self._entries.clear()
