from __future__ import annotations

from aiogram import F, Router, types

from pomobot.commands import COMMAND_NOT_FOUND_MESSAGE

router = Router()


@router.message(F.text.startswith("!"))
async def unknown_command(message: types.Message) -> None:
    await message.answer(COMMAND_NOT_FOUND_MESSAGE)
