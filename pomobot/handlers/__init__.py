from aiogram import Router

from .help import router as help_router
from .tasks import router as tasks_router
from .pomodoro import router as pomodoro_router
from .fallback import router as fallback_router
from .errors import router as errors_router


def setup_routers() -> Router:
    router = Router()
    router.include_router(help_router)
    router.include_router(tasks_router)
    router.include_router(pomodoro_router)
    # must stay after every command router
    router.include_router(fallback_router)
    router.include_router(errors_router)
    return router
