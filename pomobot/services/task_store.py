from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pomobot.db.models import Task
from pomobot.db.session import session_scope
from pomobot.errors import (
    EmptyTaskDescriptionError,
    InvalidTaskIndexError,
    StoreUnavailableError,
    TaskDescriptionTooLongError,
    TaskIndexOutOfRangeError,
)
from pomobot.schemas import TaskCreate, TaskRead

logger = logging.getLogger(__name__)

# Largest value SQLite can bind as an INTEGER
MAX_TASK_INDEX = 2**63 - 1


def parse_task_index(raw: str) -> int:
    """Parse a 1-based task position typed by the user."""
    text = raw.strip()
    try:
        index = int(text)
    except ValueError:
        raise InvalidTaskIndexError(text) from None
    if index < 1 or index > MAX_TASK_INDEX:
        raise InvalidTaskIndexError(text)
    return index


class TaskStore:
    """Per-user task list persisted in the ``tasks`` table.

    Tasks are ordered by their row id, which the database assigns in insertion
    order. Every query is filtered by ``user_id`` so users never see or touch
    each other's rows.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        *,
        max_description_length: int = 500,
    ):
        self.session_factory = session_factory
        self.max_description_length = max_description_length

    async def add(self, user_id: int, description: str) -> TaskRead:
        payload = TaskCreate(user_id=user_id, description=description)
        if not payload.description:
            raise EmptyTaskDescriptionError()
        if len(payload.description) > self.max_description_length:
            raise TaskDescriptionTooLongError(self.max_description_length)

        try:
            async with session_scope(self.session_factory) as session:
                task = Task(user_id=payload.user_id, description=payload.description)
                session.add(task)
                await session.flush()
                await session.refresh(task)
                created = TaskRead.model_validate(task)
        except SQLAlchemyError as e:
            logger.error(f"Failed to add task for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableError("could not add task") from e

        logger.info(f"Task {created.id} added for user {user_id}")
        return created

    async def list_for_user(self, user_id: int) -> List[TaskRead]:
        try:
            async with session_scope(self.session_factory) as session:
                rows = (
                    await session.execute(
                        select(Task).where(Task.user_id == user_id).order_by(Task.id)
                    )
                ).scalars().all()
                return [TaskRead.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tasks for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableError("could not list tasks") from e

    async def count_for_user(self, user_id: int) -> int:
        try:
            async with session_scope(self.session_factory) as session:
                return (
                    await session.execute(
                        select(func.count()).select_from(Task).where(Task.user_id == user_id)
                    )
                ).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to count tasks for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableError("could not count tasks") from e

    async def remove_at(self, user_id: int, index: int) -> TaskRead:
        """Delete the user's ``index``-th task (1-based) and return it.

        The lookup and the delete share one transaction.
        """
        if index < 1 or index > MAX_TASK_INDEX:
            raise InvalidTaskIndexError(str(index))

        try:
            async with session_scope(self.session_factory) as session:
                task = (
                    await session.execute(
                        select(Task)
                        .where(Task.user_id == user_id)
                        .order_by(Task.id)
                        .offset(index - 1)
                        .limit(1)
                    )
                ).scalar_one_or_none()
                if task is None:
                    total = (
                        await session.execute(
                            select(func.count()).select_from(Task).where(Task.user_id == user_id)
                        )
                    ).scalar_one()
                    raise TaskIndexOutOfRangeError(index, total)
                removed = TaskRead.model_validate(task)
                await session.delete(task)
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove task #{index} for user {user_id}: {e}", exc_info=True)
            raise StoreUnavailableError("could not remove task") from e

        logger.info(f"Task {removed.id} removed for user {user_id}")
        return removed
