from __future__ import annotations

from typing import List, Mapping, Sequence

from aiogram import html

from pomobot.commands import CommandName, command_code
from pomobot.schemas import TaskRead
from pomobot.services.pomodoro import Phase, PomodoroConfig, PomodoroSnapshot

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


def format_task_list(tasks: Sequence[TaskRead]) -> str:
    if not tasks:
        return "📝 0 pending tasks"

    lines = [f"📝 <b>{len(tasks)} pending task(s)</b>", ""]
    for position, task in enumerate(tasks, start=1):
        lines.append(f"{position}. {html.quote(task.description)}")
    return "\n".join(lines)


def format_status(snapshot: PomodoroSnapshot) -> str:
    """One-line pomodoro status, e.g. ``🍅 working (cycle 2/4): 13:07 left``."""
    if not snapshot.is_active:
        cycle = f" Last cycle: {snapshot.cycle_ordinal}/4." if snapshot.cycle_ordinal else ""
        return f"💤 No pomodoro running.{cycle}"

    icon = "🍅" if snapshot.phase is Phase.WORKING else "☕"
    cycle = f" (cycle {snapshot.cycle_ordinal}/4)" if snapshot.cycle_ordinal else ""
    paused = " ⏸ paused" if snapshot.paused else ""
    return f"{icon} {snapshot.phase.label}{cycle}: {snapshot.remaining} left{paused}"


def format_phase_complete(
    finished: Phase,
    snapshot: PomodoroSnapshot,
    config: PomodoroConfig,
    prefixes: Mapping[str, str],
) -> str:
    if finished is Phase.WORKING:
        if snapshot.cycle_ordinal == 4:
            next_break, minutes = "long break", config.long_break_minutes
        else:
            next_break, minutes = "short break", config.short_break_minutes
        take_break = command_code(prefixes, CommandName.POMODORO_BREAK)
        return (
            f"✅ <b>Pomodoro {snapshot.cycle_ordinal}/4 done!</b>\n"
            f"Time for a {next_break} ({minutes} min): send {take_break}"
        )
    return (
        f"🔔 <b>{finished.label.capitalize()} is over.</b>\n"
        f"Send {command_code(prefixes, CommandName.POMODORO_START)} for the next pomodoro."
    )


def split_long_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split a reply into parts no longer than ``max_length``.

    Breaks on line boundaries so list items stay whole; a single line longer
    than the limit is cut into fixed-size chunks.
    """
    if len(text) <= max_length:
        return [text]

    parts: List[str] = []
    current_part = ""

    for line in text.split("\n"):
        if len(line) > max_length:
            if current_part:
                parts.append(current_part)
                current_part = ""
            for i in range(0, len(line), max_length):
                parts.append(line[i:i + max_length])
            continue

        candidate = f"{current_part}\n{line}" if current_part else line
        if len(candidate) > max_length:
            parts.append(current_part)
            current_part = line
        else:
            current_part = candidate

    if current_part.strip():
        parts.append(current_part)

    return parts
