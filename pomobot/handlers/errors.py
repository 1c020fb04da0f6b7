from __future__ import annotations

import logging

from aiogram import Router, html
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from pomobot.errors import UserInputError

logger = logging.getLogger(__name__)

router = Router()

GENERIC_FAILURE_MESSAGE = "❌ Something went wrong on my side. Please try again in a moment."


@router.errors(ExceptionTypeFilter(UserInputError))
async def user_input_error(event: ErrorEvent) -> bool:
    message = event.update.message
    if message is not None:
        await message.answer(f"⚠️ {html.quote(str(event.exception))}")
    return True


@router.errors()
async def unexpected_error(event: ErrorEvent) -> bool:
    """Storage outages and bugs: log, apologise, keep polling."""
    logger.error(
        f"Update {event.update.update_id} failed: {event.exception!r}",
        exc_info=event.exception,
    )
    message = event.update.message
    if message is not None:
        await message.answer(GENERIC_FAILURE_MESSAGE)
    return True
