from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from pomobot.config import settings
from pomobot.db.session import SessionLocal, create_all, engine
from pomobot.handlers import setup_routers
from pomobot.logging_config import setup_logging
from pomobot.middlewares import CommandLoggingMiddleware
from pomobot.services.pomodoro_registry import PomodoroRegistry
from pomobot.services.task_store import TaskStore
from pomobot.utils.scheduler import AppScheduler

logger = logging.getLogger(__name__)


async def on_startup(bot: Bot) -> None:
    me = await bot.get_me()
    logger.info(f"{me.username} is connected!")


def build_dispatcher(task_store: TaskStore, registry: PomodoroRegistry) -> Dispatcher:
    dp = Dispatcher()
    # injected into handlers by parameter name
    dp["task_store"] = task_store
    dp["pomodoro_registry"] = registry
    dp.message.middleware(CommandLoggingMiddleware())
    dp.include_router(setup_routers())
    dp.startup.register(on_startup)
    return dp


async def main() -> None:
    setup_logging().info("Starting pomodoro bot")

    # Ensure tables for local run (prefer Alembic for managed databases)
    await create_all()

    bot = Bot(token=settings.BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML"))
    registry = PomodoroRegistry(settings.pomodoro_config)
    task_store = TaskStore(SessionLocal, max_description_length=settings.MAX_TASK_DESCRIPTION_LENGTH)
    dp = build_dispatcher(task_store, registry)

    scheduler = AppScheduler(registry, idle_ttl_minutes=settings.SESSION_IDLE_TTL_MINUTES)
    scheduler.start()

    try:
        await dp.start_polling(bot)
    finally:
        scheduler.shutdown()
        await registry.shutdown()
        await bot.session.close()
        await engine.dispose()


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Bot stopped")


if __name__ == "__main__":
    run()
