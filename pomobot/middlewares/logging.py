from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import Message

logger = logging.getLogger(__name__)


class CommandLoggingMiddleware(BaseMiddleware):
    """Middleware to log every incoming command and how long handling it took."""

    async def __call__(
        self,
        handler: Callable[[Message, Dict[str, Any]], Awaitable[Any]],
        event: Message,
        data: Dict[str, Any],
    ) -> Any:
        text = event.text or ""
        if not text.startswith("!"):
            return await handler(event, data)

        user_id = event.from_user.id if event.from_user else None
        command = " ".join(text.split()[:2])
        started = time.perf_counter()
        try:
            return await handler(event, data)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{command!r} from user={user_id} chat={event.chat.id} handled in {elapsed_ms:.1f}ms"
            )
