from __future__ import annotations

import logging
from typing import Mapping, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from pomobot.config import DEFAULT_COMMAND_PREFIXES
from pomobot.services.pomodoro import Phase, PomodoroConfig, PomodoroSession
from pomobot.utils.text_formatter import format_phase_complete, format_status

logger = logging.getLogger(__name__)


class ChatProgressNotifier:
    """Countdown subscriber that reports progress into the chat the timer was started from.

    The clock ticks every second but only every ``update_every_seconds``-th tick
    is surfaced, by editing a single status message in place.
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        *,
        config: Optional[PomodoroConfig] = None,
        update_every_seconds: int = 60,
        reply_to_message_id: Optional[int] = None,
        prefixes: Optional[Mapping[str, str]] = None,
    ):
        self.bot = bot
        self.chat_id = chat_id
        self.config = config or PomodoroConfig()
        self.update_every_seconds = update_every_seconds
        self.reply_to_message_id = reply_to_message_id
        self.prefixes = prefixes or DEFAULT_COMMAND_PREFIXES
        self.status_message_id: Optional[int] = None

    def should_report(self, remaining_ms: int) -> bool:
        remaining_seconds = remaining_ms // 1000
        return remaining_seconds > 0 and remaining_seconds % self.update_every_seconds == 0

    async def on_tick(self, session: PomodoroSession) -> None:
        snapshot = session.snapshot()
        if not self.should_report(snapshot.remaining_ms):
            return

        text = format_status(snapshot)
        try:
            if self.status_message_id is None:
                message = await self.bot.send_message(
                    self.chat_id, text, reply_to_message_id=self.reply_to_message_id
                )
                self.status_message_id = message.message_id
            else:
                await self.bot.edit_message_text(
                    text, chat_id=self.chat_id, message_id=self.status_message_id
                )
        except TelegramAPIError as e:
            logger.warning(f"Could not deliver pomodoro progress to chat {self.chat_id}: {e}")

    async def on_complete(self, session: PomodoroSession, finished: Phase) -> None:
        text = format_phase_complete(finished, session.snapshot(), self.config, self.prefixes)
        try:
            await self.bot.send_message(self.chat_id, text, reply_to_message_id=self.reply_to_message_id)
        except TelegramAPIError as e:
            logger.warning(f"Could not deliver pomodoro completion to chat {self.chat_id}: {e}")
        # the next phase starts a fresh status message
        self.status_message_id = None
