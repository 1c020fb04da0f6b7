from __future__ import annotations

from aiogram import Router, html, types

from pomobot.commands import CommandName, CommandPrefixFilter
from pomobot.services.task_store import TaskStore, parse_task_index
from pomobot.utils.text_formatter import format_task_list, split_long_message

router = Router()


@router.message(CommandPrefixFilter(CommandName.TASK_ADD))
async def add_task(message: types.Message, command_args: str, task_store: TaskStore) -> None:
    """!task add <description>"""
    user = message.from_user
    if not user:
        return
    task = await task_store.add(user.id, command_args)
    await message.answer(f"✅ Task added: <b>{html.quote(task.description)}</b>")


@router.message(CommandPrefixFilter(CommandName.TASK_REMOVE))
async def remove_task(message: types.Message, command_args: str, task_store: TaskStore) -> None:
    """!task remove <number>"""
    user = message.from_user
    if not user:
        return
    index = parse_task_index(command_args)
    removed = await task_store.remove_at(user.id, index)
    left = await task_store.count_for_user(user.id)
    await message.answer(
        f"🗑 Task #{index} removed: <b>{html.quote(removed.description)}</b>\n📝 {left} pending task(s) left"
    )


@router.message(CommandPrefixFilter(CommandName.TASK_LIST))
async def list_tasks(message: types.Message, task_store: TaskStore) -> None:
    """!task list"""
    user = message.from_user
    if not user:
        return
    tasks = await task_store.list_for_user(user.id)
    for part in split_long_message(format_task_list(tasks)):
        await message.answer(part)
