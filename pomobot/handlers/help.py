from __future__ import annotations

from aiogram import Router, types

from pomobot.commands import CommandName, CommandPrefixFilter, build_help_text
from pomobot.config import settings

router = Router()


@router.message(CommandPrefixFilter(CommandName.HELP))
async def show_help(message: types.Message) -> None:
    await message.answer(build_help_text(settings.command_prefixes()))
