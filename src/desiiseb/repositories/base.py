"""Error translation shared by the content store repositories."""
from __future__ import annotations

from typing import Any

from sqlalchemy import Executable, Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from desiiseb.core.errors import ConflictError, SourceUnavailableError

__all__ = ["StoreRepository"]


class StoreRepository:
    """Base for repositories wrapping an async SQLAlchemy session.

    Every write commits on its own. Uniqueness violations surface as
    `ConflictError`; any other driver failure surfaces as
    `SourceUnavailableError`.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with an async SQLAlchemy session."""
        self.session = session

    async def _execute(self, stmt: Executable) -> Result[Any]:
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as err:
            raise SourceUnavailableError(f"Content store read failed: {err}") from err

    async def _insert(self, instance: Any, what: str) -> None:
        self.session.add(instance)
        try:
            await self.session.commit()
        except IntegrityError as err:
            await self.session.rollback()
            raise ConflictError(f"{what} already exists") from err
        except SQLAlchemyError as err:
            await self.session.rollback()
            raise SourceUnavailableError(f"Could not insert {what}: {err}") from err

    async def _write(self, stmt: Executable, what: str) -> int:
        """Execute an UPDATE/DELETE, commit, and return the affected row count."""
        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as err:
            await self.session.rollback()
            raise SourceUnavailableError(f"Could not write {what}: {err}") from err
        return result.rowcount or 0

    async def _commit(self, what: str) -> None:
        try:
            await self.session.commit()
        except IntegrityError as err:
            await self.session.rollback()
            raise ConflictError(f"{what} conflicts with an existing row") from err
        except SQLAlchemyError as err:
            await self.session.rollback()
            raise SourceUnavailableError(f"Could not write {what}: {err}") from err
