#!/usr/bin/env python3
"""
Tests for the drift-corrected pomodoro countdown
"""

import pytest

from pomobot.services.pomodoro import (
    Phase,
    PomodoroConfig,
    PomodoroSession,
    compute_sleep_ms,
)


def test_compute_sleep_without_drift_is_one_tick():
    assert compute_sleep_ms(true_elapsed_ms=5000, clock_elapsed_ms=5000) == 1000


def test_compute_sleep_subtracts_drift():
    assert compute_sleep_ms(true_elapsed_ms=5250, clock_elapsed_ms=5000) == 750


def test_compute_sleep_is_clamped_at_zero():
    assert compute_sleep_ms(true_elapsed_ms=7500, clock_elapsed_ms=5000) == 0


def test_compute_sleep_waits_longer_when_ahead():
    assert compute_sleep_ms(true_elapsed_ms=4900, clock_elapsed_ms=5000) == 1100


def test_start_work_sets_clock_and_phase(fake_time):
    session = PomodoroSession(monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    session.start_work()

    snapshot = session.snapshot()
    assert snapshot.phase is Phase.WORKING
    assert snapshot.cycle_ordinal == 1
    assert snapshot.remaining == "25:00"
    assert session.tracker.phase_started_at == fake_time.now
    assert session.is_running


async def test_drift_does_not_accumulate_over_a_full_pomodoro(fake_time):
    overhead_s = 0.037
    session = PomodoroSession(monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    emitted = []

    async def slow_tick(s: PomodoroSession) -> None:
        emitted.append(s.clock.remaining_milliseconds())
        fake_time.advance(overhead_s)

    started_at = fake_time.now
    session.start_work()
    finished = await session.countdown(slow_tick)

    assert finished is Phase.WORKING
    assert len(emitted) == 1500
    assert fake_time.sleeps[0] == pytest.approx(1.0)
    for slept in fake_time.sleeps[1:]:
        assert slept == pytest.approx(1.0 - overhead_s, abs=1e-6)

    total_ms = (fake_time.now - started_at) * 1000
    assert abs(total_ms - 1500 * 1000) <= 1000

    # strictly decreasing, one second apart, ending at zero
    assert emitted == list(range(1_499_000, -1, -1000))
    assert session.phase is Phase.IDLE


async def test_overhead_longer_than_a_tick_never_sleeps_negative(fake_time):
    session = PomodoroSession(PomodoroConfig(work_minutes=1), monotonic=fake_time.monotonic, sleep=fake_time.sleep)

    async def very_slow_tick(s: PomodoroSession) -> None:
        fake_time.advance(1.5)

    session.start_work()
    await session.countdown(very_slow_tick)
    assert min(fake_time.sleeps) == 0
    assert session.clock.render() == "00:00"


async def test_countdown_stops_at_zero_without_underflow(fake_time):
    session = PomodoroSession(PomodoroConfig(work_minutes=1), monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    session.start_work()
    assert await session.countdown() is Phase.WORKING
    assert session.clock.remaining_milliseconds() == 0
    # idle session: nothing to count down
    assert await session.countdown() is None


async def test_countdown_is_a_noop_while_idle(fake_time):
    session = PomodoroSession(monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    assert await session.countdown() is None
    assert fake_time.sleeps == []


def test_pause_and_resume_do_not_count_paused_time_as_drift(fake_time):
    session = PomodoroSession(monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    session.start_work()
    session.clock.decrement_one_second()
    fake_time.advance(1.0)

    assert session.pause()
    assert not session.pause()
    assert session.is_paused and not session.is_running

    fake_time.advance(600)
    assert session.resume()
    assert not session.resume()
    assert session.next_sleep_ms() == pytest.approx(1000)
    assert session.snapshot().remaining == "24:59"


def test_stop_returns_phase_and_goes_idle(fake_time):
    session = PomodoroSession(monotonic=fake_time.monotonic, sleep=fake_time.sleep)
    assert session.stop() is None

    session.start_work()
    assert session.stop() is Phase.WORKING
    assert session.phase is Phase.IDLE
    assert not session.is_running


def test_break_length_follows_cycle_ordinal(fake_time):
    config = PomodoroConfig(work_minutes=25, short_break_minutes=5, long_break_minutes=15)
    session = PomodoroSession(config, monotonic=fake_time.monotonic, sleep=fake_time.sleep)

    for _ in range(3):
        session.start_work()
        session.stop()
        assert session.start_break() is Phase.SHORT_BREAK
        assert session.clock.render() == "05:00"
        session.stop()

    session.start_work()
    session.stop()
    assert session.start_break() is Phase.LONG_BREAK
    assert session.clock.render() == "15:00"
