"""Pomodoro clock, cycle tracking and the drift-corrected countdown.

A :class:`PomodoroSession` owns one :class:`Clock` (time left in the current
phase) and one :class:`CycleTracker` (which phase we are in and which of the
four cycles is active). :meth:`PomodoroSession.countdown` ticks the clock once
per second using real elapsed time as ground truth: each sleep is one tick
minus the drift accumulated so far, so per-tick overhead (rendering, sending
progress, scheduling jitter) does not add up over a 25 minute phase.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from pomobot.errors import ClockUnderflowError

logger = logging.getLogger(__name__)

TICK_MS = 1000
MS_PER_MINUTE = 60_000
CYCLES_PER_ROUND = 4


class Phase(str, enum.Enum):
    IDLE = "idle"
    WORKING = "working"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_active(self) -> bool:
        return self is not Phase.IDLE

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class PomodoroConfig:
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15

    def minutes_for(self, phase: Phase) -> int:
        if phase is Phase.WORKING:
            return self.work_minutes
        if phase is Phase.SHORT_BREAK:
            return self.short_break_minutes
        if phase is Phase.LONG_BREAK:
            return self.long_break_minutes
        return 0


class Clock:
    """Remaining time in the current phase, kept as minutes and seconds (0..59 each)."""

    def __init__(self) -> None:
        self.minutes = 0
        self.seconds = 0

    def set_from_milliseconds(self, ms: int) -> None:
        if ms < 0:
            raise ValueError(f"clock cannot hold a negative duration: {ms}ms")
        self.minutes = (ms // MS_PER_MINUTE) % 60
        self.seconds = (ms // TICK_MS) % 60

    def set_from_minutes(self, minutes: int) -> None:
        self.set_from_milliseconds(minutes * MS_PER_MINUTE)

    def remaining_milliseconds(self) -> int:
        return self.minutes * MS_PER_MINUTE + self.seconds * TICK_MS

    def decrement_one_second(self) -> None:
        remaining = self.remaining_milliseconds()
        if remaining < TICK_MS:
            raise ClockUnderflowError("clock is already at 00:00")
        self.set_from_milliseconds(remaining - TICK_MS)

    def render(self) -> str:
        return f"{self.minutes:02d}:{self.seconds:02d}"

    def __repr__(self):
        return f"<Clock {self.render()}>"


class CycleTracker:
    """Current phase, when it began, and the rotating 1..4 cycle ordinal."""

    def __init__(self) -> None:
        self.phase: Phase = Phase.IDLE
        self.cycle_ordinal: Optional[int] = None
        self.phase_started_at: Optional[float] = None

    def advance_cycle_ordinal(self) -> None:
        if self.cycle_ordinal is not None and self.cycle_ordinal < CYCLES_PER_ROUND:
            self.cycle_ordinal += 1
        else:
            self.cycle_ordinal = 1

    def enter_working_phase(self, now: float) -> None:
        self.phase_started_at = now
        self.phase = Phase.WORKING
        self.advance_cycle_ordinal()

    def next_break_phase(self) -> Phase:
        # The fourth work cycle earns the long break
        if self.cycle_ordinal == CYCLES_PER_ROUND:
            return Phase.LONG_BREAK
        return Phase.SHORT_BREAK

    def enter_break_phase(self, now: float) -> Phase:
        self.phase_started_at = now
        self.phase = self.next_break_phase()
        return self.phase

    def finish_phase(self) -> None:
        self.phase = Phase.IDLE
        self.phase_started_at = None


def compute_sleep_ms(true_elapsed_ms: float, clock_elapsed_ms: float, tick_ms: int = TICK_MS) -> float:
    """Sleep that brings real time back in line with the countdown after the next tick.

    ``true_elapsed_ms - clock_elapsed_ms`` is the drift: time spent outside the
    sleeps so far. Never negative.
    """
    sync_offset = true_elapsed_ms - clock_elapsed_ms
    return max(0.0, tick_ms - sync_offset)


@dataclass(frozen=True)
class PomodoroSnapshot:
    phase: Phase
    cycle_ordinal: Optional[int]
    remaining_ms: int
    remaining: str
    paused: bool

    @property
    def is_active(self) -> bool:
        return self.phase.is_active


TickCallback = Callable[["PomodoroSession"], Awaitable[None]]


class CountdownSubscriber(Protocol):
    async def on_tick(self, session: "PomodoroSession") -> None: ...

    async def on_complete(self, session: "PomodoroSession", finished: Phase) -> None: ...


class PomodoroSession:
    """One user's pomodoro: a clock, a cycle tracker and the countdown loop.

    ``monotonic`` and ``sleep`` are injectable so the loop can be driven by a
    simulated clock.
    """

    def __init__(
        self,
        config: Optional[PomodoroConfig] = None,
        *,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or PomodoroConfig()
        self.clock = Clock()
        self.tracker = CycleTracker()
        self.phase_duration_ms = 0
        self.paused_at: Optional[float] = None
        self._monotonic = monotonic
        self._sleep = sleep
        self.last_active_at = monotonic()

    @property
    def phase(self) -> Phase:
        return self.tracker.phase

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    @property
    def is_running(self) -> bool:
        return self.phase.is_active and not self.is_paused

    def snapshot(self) -> PomodoroSnapshot:
        return PomodoroSnapshot(
            phase=self.phase,
            cycle_ordinal=self.tracker.cycle_ordinal,
            remaining_ms=self.clock.remaining_milliseconds(),
            remaining=self.clock.render(),
            paused=self.is_paused,
        )

    def _begin(self, phase: Phase) -> None:
        self.phase_duration_ms = self.config.minutes_for(phase) * MS_PER_MINUTE
        self.clock.set_from_milliseconds(self.phase_duration_ms)
        self.paused_at = None
        self.last_active_at = self.tracker.phase_started_at or self._monotonic()
        logger.info(f"Phase {phase.value} started: cycle={self.tracker.cycle_ordinal} duration={self.clock.render()}")

    def start_work(self) -> None:
        self.tracker.enter_working_phase(self._monotonic())
        self._begin(Phase.WORKING)

    def start_break(self) -> Phase:
        phase = self.tracker.enter_break_phase(self._monotonic())
        self._begin(phase)
        return phase

    def true_elapsed_ms(self) -> float:
        if self.tracker.phase_started_at is None:
            return 0.0
        return (self._monotonic() - self.tracker.phase_started_at) * 1000

    def clock_elapsed_ms(self) -> int:
        return self.phase_duration_ms - self.clock.remaining_milliseconds()

    def next_sleep_ms(self) -> float:
        return compute_sleep_ms(self.true_elapsed_ms(), self.clock_elapsed_ms())

    def pause(self) -> bool:
        if not self.is_running:
            return False
        self.paused_at = self._monotonic()
        self.last_active_at = self.paused_at
        return True

    def resume(self) -> bool:
        if not self.is_paused:
            return False
        now = self._monotonic()
        # Re-base the start so the time spent paused is not counted as drift
        self.tracker.phase_started_at = now - self.clock_elapsed_ms() / 1000
        self.paused_at = None
        self.last_active_at = now
        return True

    def stop(self) -> Optional[Phase]:
        if not self.phase.is_active:
            return None
        stopped = self.phase
        self.tracker.finish_phase()
        self.paused_at = None
        self.last_active_at = self._monotonic()
        return stopped

    async def countdown(self, on_tick: Optional[TickCallback] = None) -> Optional[Phase]:
        """Tick the clock down to 00:00; returns the phase that finished.

        Returns ``None`` when the loop was left early (paused or stopped).
        """
        while self.is_running and self.clock.remaining_milliseconds() > 0:
            await self._sleep(self.next_sleep_ms() / 1000)
            if not self.is_running:
                return None
            self.clock.decrement_one_second()
            self.last_active_at = self._monotonic()
            if on_tick is not None:
                await on_tick(self)

        if not self.is_running:
            return None

        finished = self.phase
        self.tracker.finish_phase()
        self.last_active_at = self._monotonic()
        logger.info(f"Phase {finished.value} completed: cycle={self.tracker.cycle_ordinal}")
        return finished
