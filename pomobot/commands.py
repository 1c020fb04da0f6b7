from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from aiogram import html
from aiogram.filters import BaseFilter
from aiogram.types import Message

from pomobot.config import settings


class CommandName(str, enum.Enum):
    HELP = "help"
    TASK_ADD = "task_add"
    TASK_REMOVE = "task_remove"
    TASK_LIST = "task_list"
    POMODORO_START = "pomodoro_start"
    POMODORO_BREAK = "pomodoro_break"
    POMODORO_CHECK = "pomodoro_check"
    POMODORO_PAUSE = "pomodoro_pause"
    POMODORO_RESUME = "pomodoro_resume"
    POMODORO_STOP = "pomodoro_stop"


COMMAND_NOT_FOUND_MESSAGE = "I'm just a bot, I cannot do this 🤷"


@dataclass(frozen=True)
class ParsedCommand:
    name: CommandName
    argument: str


def match_prefix(text: str, prefix: str) -> Optional[str]:
    """Return the argument after ``prefix``, or None when ``text`` is not that command.

    The prefix must be followed by whitespace or the end of the message, so
    ``!task addmilk`` is not ``!task add``.
    """
    if text == prefix:
        return ""
    if text.startswith(prefix) and text[len(prefix)].isspace():
        return text[len(prefix):].strip()
    return None


def parse_command(text: str, prefixes: Mapping[str, str]) -> Optional[ParsedCommand]:
    text = text.strip()
    candidates = [(name, prefixes[name.value]) for name in CommandName if prefixes.get(name.value)]
    # Longest prefix wins when one configured prefix extends another
    for name, prefix in sorted(candidates, key=lambda item: len(item[1]), reverse=True):
        argument = match_prefix(text, prefix)
        if argument is not None:
            return ParsedCommand(name=name, argument=argument)
    return None


class CommandPrefixFilter(BaseFilter):
    """Matches one text command and hands its argument to the handler as ``command_args``."""

    def __init__(self, name: CommandName, prefixes: Optional[Mapping[str, str]] = None):
        self.name = name
        self.prefixes = prefixes

    async def __call__(self, message: Message) -> Union[bool, Dict[str, Any]]:
        if not message.text:
            return False
        parsed = parse_command(message.text, self.prefixes or settings.command_prefixes())
        if parsed is None or parsed.name is not self.name:
            return False
        return {"command_args": parsed.argument}


def command_code(prefixes: Mapping[str, str], name: CommandName, usage: str = "") -> str:
    """The configured command text, ready to embed in an HTML reply."""
    return f"<code>{html.quote(prefixes[name.value] + usage)}</code>"


def build_help_text(prefixes: Mapping[str, str]) -> str:
    def cmd(name: CommandName, usage: str = "") -> str:
        return command_code(prefixes, name, usage)

    return (
        "Hello, I'm pomodoro bot!\n\n"
        "📝 <b>Tasks</b>\n"
        f"{cmd(CommandName.TASK_ADD, ' <description>')}: add a task\n"
        f"{cmd(CommandName.TASK_REMOVE, ' <number>')}: remove a task by its number in the list\n"
        f"{cmd(CommandName.TASK_LIST)}: show your pending tasks\n\n"
        "🍅 <b>Pomodoro</b>\n"
        f"{cmd(CommandName.POMODORO_START)}: start a {settings.WORK_MINUTES} minute focus session\n"
        f"{cmd(CommandName.POMODORO_BREAK)}: start a break "
        f"({settings.SHORT_BREAK_MINUTES} min, {settings.LONG_BREAK_MINUTES} min after every 4th pomodoro)\n"
        f"{cmd(CommandName.POMODORO_CHECK)}: show the time left\n"
        f"{cmd(CommandName.POMODORO_PAUSE)}: pause the timer\n"
        f"{cmd(CommandName.POMODORO_RESUME)}: resume a paused timer\n"
        f"{cmd(CommandName.POMODORO_STOP)}: cancel the timer\n\n"
        f"{cmd(CommandName.HELP)}: this message\n\n"
        "PomodoroBot 🤖"
    )
