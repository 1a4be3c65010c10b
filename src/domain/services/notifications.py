"""
Notification delivery and inbox queries.

Delivery is best-effort: ``Notifier`` never raises to its caller, it logs the
failure instead. Work that must not hold up a response is handed to
``Notifier.dispatch`` and runs as a detached task.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.errors import NotificationNotFoundError
from src.infrastructure.db.models import Employee, Notification

logger = structlog.get_logger(__name__)


def _format_score(score: float) -> str:
    return f"{float(score):g}"


class Notifier:
    """Persists notifications in their own short transactions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._pending: set[asyncio.Task[Any]] = set()

    async def notify(
        self, user_id: str, message: str, category: str = "info"
    ) -> Notification | None:
        try:
            async with self._session_factory() as session:
                notification = Notification(user_id=user_id, message=message, type=category)
                session.add(notification)
                await session.commit()
        except Exception:
            logger.warning(
                "notification_failed",
                user_id=user_id,
                category=category,
                exc_info=True,
            )
            return None

        logger.info(
            "notification_created",
            notification_id=notification.id,
            user_id=user_id,
            category=category,
        )
        return notification

    async def notify_employee(
        self, employee_id: str, message: str, category: str = "info"
    ) -> Notification | None:
        """Notify the login account linked to an employee, if there is one."""
        try:
            async with self._session_factory() as session:
                user_id = await session.scalar(
                    select(Employee.user_id).where(Employee.id == employee_id)
                )
        except Exception:
            logger.warning(
                "notification_failed",
                employee_id=employee_id,
                category=category,
                exc_info=True,
            )
            return None

        if not user_id:
            logger.debug("notification_skipped_no_user", employee_id=employee_id)
            return None
        return await self.notify(user_id, message, category)

    async def notify_assessment_result(
        self, employee_id: str, assessment_title: str, score: float, passed: bool
    ) -> Notification | None:
        if passed:
            message = (
                f'Congratulations! You passed "{assessment_title}" with {_format_score(score)}%'
            )
        else:
            message = f'You scored {_format_score(score)}% on "{assessment_title}". Keep trying!'
        return await self.notify_employee(employee_id, message, "assessment")

    async def notify_certification(
        self, employee_id: str, course_title: str, certificate_number: str
    ) -> Notification | None:
        message = (
            f'Congratulations! You earned a certificate for "{course_title}" '
            f"({certificate_number})"
        )
        return await self.notify_employee(employee_id, message, "certification")

    async def notify_enrollment(
        self, employee_id: str, course_title: str, enrollment_type: str
    ) -> Notification | None:
        message = f'You have been enrolled in "{course_title}" ({enrollment_type})'
        return await self.notify_employee(employee_id, message, "enrollment")

    def dispatch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run ``coro`` as a detached task; its outcome never reaches the caller."""
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("notification_task_failed", error=str(exc), exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every dispatched task to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class NotificationService:
    """Inbox queries for the authenticated user."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read == False)  # noqa: E712
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return list((await self.session.execute(stmt)).scalars().all())

    async def unread_count(self, user_id: str) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
        return int(await self.session.scalar(stmt) or 0)

    async def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        notification = await self.session.scalar(stmt)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")

        notification.read = True
        await self.session.commit()
        return notification

    async def mark_all_as_read(self, user_id: str) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.read == False,  # noqa: E712
            )
            .values(read=True)
        )
        await self.session.commit()
        logger.info("notifications_marked_read", user_id=user_id, count=result.rowcount)
        return result.rowcount or 0
