from __future__ import annotations

from typing import Mapping

from aiogram import Bot, Router, types

from pomobot.commands import CommandName, CommandPrefixFilter, command_code
from pomobot.config import settings
from pomobot.services.notifier import ChatProgressNotifier
from pomobot.services.pomodoro import Phase
from pomobot.services.pomodoro_registry import (
    ACTION_BREAK,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_START,
    ACTION_STOP,
    REASON_ALREADY_ACTIVE,
    REASON_NO_SESSION,
    REASON_NOT_ACTIVE,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    PomodoroActionResult,
    PomodoroRegistry,
    SessionKey,
)
from pomobot.utils.text_formatter import format_status

router = Router()

_REJECTIONS = {
    REASON_ALREADY_ACTIVE: "⏳ A timer is already running. Use {stop} to cancel it first.",
    REASON_NO_SESSION: "💤 No pomodoro yet. Send {start} to begin.",
    REASON_NOT_ACTIVE: "💤 No pomodoro is running.",
    REASON_NOT_RUNNING: "💤 The timer is not running.",
    REASON_NOT_PAUSED: "▶️ The timer is not paused.",
}


def session_key(message: types.Message) -> SessionKey:
    return (message.chat.id, message.from_user.id)


def describe_result(result: PomodoroActionResult, prefixes: Mapping[str, str]) -> str:
    if not result.accepted:
        text = _REJECTIONS.get(result.reason, "🤷 Nothing to do.").format(
            start=command_code(prefixes, CommandName.POMODORO_START),
            stop=command_code(prefixes, CommandName.POMODORO_STOP),
        )
        if result.snapshot is not None and result.snapshot.is_active:
            text += "\n" + format_status(result.snapshot)
        return text

    snapshot = result.snapshot
    if result.action == ACTION_START:
        return (
            f"🍅 <b>Pomodoro {snapshot.cycle_ordinal}/4 started</b>: {snapshot.remaining} of focus. "
            "I'll let you know when it's over."
        )
    if result.action == ACTION_BREAK:
        kind = "Long break" if snapshot.phase is Phase.LONG_BREAK else "Short break"
        return f"☕ <b>{kind} started</b>: {snapshot.remaining}. Relax!"
    if result.action == ACTION_PAUSE:
        resume = command_code(prefixes, CommandName.POMODORO_RESUME)
        return f"⏸ Paused with {snapshot.remaining} left. {resume} to continue."
    if result.action == ACTION_RESUME:
        return f"▶️ Resumed: {snapshot.remaining} left."
    if result.action == ACTION_STOP:
        return "⏹ Timer stopped."
    return format_status(snapshot)


def _notifier(bot: Bot, message: types.Message) -> ChatProgressNotifier:
    return ChatProgressNotifier(
        bot,
        message.chat.id,
        config=settings.pomodoro_config,
        update_every_seconds=settings.PROGRESS_UPDATE_SECONDS,
        reply_to_message_id=message.message_id,
        prefixes=settings.command_prefixes(),
    )


async def _answer(message: types.Message, result: PomodoroActionResult) -> None:
    await message.answer(describe_result(result, settings.command_prefixes()))


@router.message(CommandPrefixFilter(CommandName.POMODORO_START))
async def start_pomodoro(message: types.Message, bot: Bot, pomodoro_registry: PomodoroRegistry) -> None:
    """Start a work phase; the countdown runs in the background."""
    if not message.from_user:
        return
    result = await pomodoro_registry.start_work(session_key(message), _notifier(bot, message))
    await _answer(message, result)


@router.message(CommandPrefixFilter(CommandName.POMODORO_BREAK))
async def start_break(message: types.Message, bot: Bot, pomodoro_registry: PomodoroRegistry) -> None:
    if not message.from_user:
        return
    result = await pomodoro_registry.start_break(session_key(message), _notifier(bot, message))
    await _answer(message, result)


@router.message(CommandPrefixFilter(CommandName.POMODORO_CHECK))
async def check_pomodoro(message: types.Message, pomodoro_registry: PomodoroRegistry) -> None:
    if not message.from_user:
        return
    await _answer(message, pomodoro_registry.check(session_key(message)))


@router.message(CommandPrefixFilter(CommandName.POMODORO_PAUSE))
async def pause_pomodoro(message: types.Message, pomodoro_registry: PomodoroRegistry) -> None:
    if not message.from_user:
        return
    await _answer(message, await pomodoro_registry.pause(session_key(message)))


@router.message(CommandPrefixFilter(CommandName.POMODORO_RESUME))
async def resume_pomodoro(message: types.Message, pomodoro_registry: PomodoroRegistry) -> None:
    if not message.from_user:
        return
    await _answer(message, await pomodoro_registry.resume(session_key(message)))


@router.message(CommandPrefixFilter(CommandName.POMODORO_STOP))
async def stop_pomodoro(message: types.Message, pomodoro_registry: PomodoroRegistry) -> None:
    if not message.from_user:
        return
    await _answer(message, await pomodoro_registry.stop(session_key(message)))
