#!/usr/bin/env python3
"""
Tests for reply formatting and chat progress notifications
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from aiogram.exceptions import TelegramAPIError

from pomobot.config import DEFAULT_COMMAND_PREFIXES
from pomobot.schemas import TaskRead
from pomobot.services.notifier import ChatProgressNotifier
from pomobot.services.pomodoro import Phase, PomodoroConfig, PomodoroSession, PomodoroSnapshot
from pomobot.utils.text_formatter import (
    format_phase_complete,
    format_status,
    format_task_list,
    split_long_message,
)


def _task(position: int, description: str) -> TaskRead:
    return TaskRead(id=position, user_id=42, description=description, created_at=datetime(2026, 1, 1))


def test_empty_task_list():
    assert format_task_list([]) == "📝 0 pending tasks"


def test_task_list_is_numbered_and_escaped():
    text = format_task_list([_task(10, "Buy milk"), _task(11, "<script>")])
    assert "2 pending task(s)" in text
    assert "1. Buy milk" in text
    assert "2. &lt;script&gt;" in text


def test_status_lines():
    running = PomodoroSnapshot(Phase.WORKING, 2, 787_000, "13:07", paused=False)
    assert format_status(running) == "🍅 working (cycle 2/4): 13:07 left"

    paused = PomodoroSnapshot(Phase.LONG_BREAK, 4, 60_000, "01:00", paused=True)
    assert format_status(paused) == "☕ long break (cycle 4/4): 01:00 left ⏸ paused"

    idle = PomodoroSnapshot(Phase.IDLE, 3, 0, "00:00", paused=False)
    assert format_status(idle) == "💤 No pomodoro running. Last cycle: 3/4."


def test_phase_complete_suggests_the_right_break():
    config, prefixes = PomodoroConfig(), DEFAULT_COMMAND_PREFIXES
    after_second = PomodoroSnapshot(Phase.IDLE, 2, 0, "00:00", paused=False)
    assert "short break (5 min)" in format_phase_complete(Phase.WORKING, after_second, config, prefixes)

    after_fourth = PomodoroSnapshot(Phase.IDLE, 4, 0, "00:00", paused=False)
    assert "long break (15 min)" in format_phase_complete(Phase.WORKING, after_fourth, config, prefixes)

    assert "Short break is over" in format_phase_complete(Phase.SHORT_BREAK, after_second, config, prefixes)


def test_phase_complete_names_the_configured_commands():
    prefixes = {**DEFAULT_COMMAND_PREFIXES, "pomodoro_break": "!pb", "pomodoro_start": "!go"}
    snapshot = PomodoroSnapshot(Phase.IDLE, 1, 0, "00:00", paused=False)

    after_work = format_phase_complete(Phase.WORKING, snapshot, PomodoroConfig(), prefixes)
    assert "<code>!pb</code>" in after_work
    assert "!pomodoro" not in after_work

    after_break = format_phase_complete(Phase.SHORT_BREAK, snapshot, PomodoroConfig(), prefixes)
    assert "<code>!go</code>" in after_break
    assert "!pomodoro" not in after_break


def test_split_long_message_keeps_lines_whole():
    lines = [f"{i}. task number {i}" for i in range(1, 200)]
    text = "\n".join(lines)
    parts = split_long_message(text, max_length=100)

    assert all(len(part) <= 100 for part in parts)
    assert "\n".join(parts).split("\n") == lines


def test_split_long_message_cuts_oversized_line():
    parts = split_long_message("a" * 250, max_length=100)
    assert [len(part) for part in parts] == [100, 100, 50]
    assert split_long_message("short") == ["short"]


def _running_session(remaining_ms: int) -> PomodoroSession:
    session = PomodoroSession(monotonic=lambda: 0.0)
    session.start_work()
    session.clock.set_from_milliseconds(remaining_ms)
    return session


async def test_notifier_sends_then_edits_status():
    bot = AsyncMock()
    bot.send_message.return_value = MagicMock(message_id=321)
    notifier = ChatProgressNotifier(bot, chat_id=-1, update_every_seconds=60)

    await notifier.on_tick(_running_session(1_439_000))
    bot.send_message.assert_not_awaited()

    await notifier.on_tick(_running_session(1_440_000))
    bot.send_message.assert_awaited_once()
    assert notifier.status_message_id == 321

    await notifier.on_tick(_running_session(1_380_000))
    bot.edit_message_text.assert_awaited_once()
    assert bot.edit_message_text.await_args.kwargs["message_id"] == 321
    assert "23:00 left" in bot.edit_message_text.await_args.args[0]


async def test_notifier_swallows_delivery_errors(caplog):
    bot = AsyncMock()
    bot.send_message.side_effect = TelegramAPIError(method=MagicMock(), message="chat not found")
    notifier = ChatProgressNotifier(bot, chat_id=-1, update_every_seconds=60)

    await notifier.on_tick(_running_session(60_000))
    await notifier.on_complete(_running_session(0), Phase.WORKING)

    assert "Could not deliver pomodoro progress" in caplog.text
    assert "Could not deliver pomodoro completion" in caplog.text


async def test_notifier_completion_uses_its_prefixes():
    bot = AsyncMock()
    prefixes = {**DEFAULT_COMMAND_PREFIXES, "pomodoro_break": "/brk"}
    notifier = ChatProgressNotifier(bot, chat_id=-1, prefixes=prefixes)

    session = _running_session(0)
    session.stop()
    await notifier.on_complete(session, Phase.WORKING)

    assert "<code>/brk</code>" in bot.send_message.await_args.args[1]
