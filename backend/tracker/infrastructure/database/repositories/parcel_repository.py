"""Concrete repository implementation for Parcel backed by SQLAlchemy.

Every public method issues exactly one statement. The registered-only rule
for address changes and deletion lives in the statement's WHERE clause, so
the check and the write are a single atomic step for the database.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.application.interfaces import ParcelRepository
from tracker.domain.entities import Parcel, ParcelStatus
from tracker.domain.exceptions import NotFoundError, PersistenceError
from tracker.infrastructure.database.models import ParcelModel

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str, **context: object) -> Iterator[None]:
    """Log database failures and re-raise them as PersistenceError.

    A ValueError here comes from a stored row that cannot be mapped back to
    the domain (e.g. a status outside ParcelStatus), which is a storage fault
    as far as callers are concerned.
    """
    try:
        yield
    except (SQLAlchemyError, ValueError) as exc:
        details = ", ".join(f"{k}={v}" for k, v in context.items())
        logger.error("Parcel %s failed (%s): %s", operation, details, exc)
        raise PersistenceError(operation, exc) from exc


class SQLAlchemyParcelRepository(ParcelRepository):
    """Implements the ParcelRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ParcelModel) -> Parcel:
        """Map ORM model → domain entity."""
        return Parcel(
            number=model.number,
            client=model.client,
            status=ParcelStatus(model.status),
            address=model.address,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Parcel) -> ParcelModel:
        """Map domain entity → ORM model (for creation). The number is left to the database."""
        return ParcelModel(
            client=entity.client,
            status=ParcelStatus(entity.status).value,
            address=entity.address,
            created_at=entity.created_at,
        )

    async def add(self, parcel: Parcel) -> int:
        model = self._to_model(parcel)
        with _storage_errors("add", client=parcel.client):
            self._session.add(model)
            await self._session.flush()
        logger.debug("Inserted parcel #%d for client %d", model.number, model.client)
        return model.number

    async def get(self, number: int) -> Parcel:
        # populate_existing: always take column values from the row, not from
        # an object already sitting in the session's identity map.
        stmt = (
            select(ParcelModel)
            .where(ParcelModel.number == number)
            .execution_options(populate_existing=True)
        )
        with _storage_errors("get", number=number):
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
            parcel = self._to_entity(model) if model is not None else None
        if parcel is None:
            raise NotFoundError("Parcel", number)
        return parcel

    async def get_by_client(self, client: int) -> list[Parcel]:
        stmt = (
            select(ParcelModel)
            .where(ParcelModel.client == client)
            .order_by(ParcelModel.number.asc())
            .execution_options(populate_existing=True)
        )
        with _storage_errors("get_by_client", client=client):
            result = await self._session.execute(stmt)
            return [self._to_entity(m) for m in result.scalars().all()]

    async def set_status(self, number: int, status: ParcelStatus) -> bool:
        value = ParcelStatus(status).value
        stmt = (
            update(ParcelModel)
            .where(ParcelModel.number == number)
            .values(status=value)
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("set_status", number=number, status=value):
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def advance_status(
        self, number: int, current: ParcelStatus, next_status: ParcelStatus
    ) -> bool:
        expected = ParcelStatus(current).value
        value = ParcelStatus(next_status).value
        stmt = (
            update(ParcelModel)
            .where(
                ParcelModel.number == number,
                ParcelModel.status == expected,
            )
            .values(status=value)
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("advance_status", number=number, status=value):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            logger.debug("Parcel #%d is no longer %s; status left unchanged", number, expected)
        return result.rowcount > 0

    async def set_address(self, number: int, address: str) -> bool:
        stmt = (
            update(ParcelModel)
            .where(
                ParcelModel.number == number,
                ParcelModel.status == ParcelStatus.REGISTERED.value,
            )
            .values(address=address)
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("set_address", number=number):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            logger.debug("Address of parcel #%d left unchanged (missing or not registered)", number)
        return result.rowcount > 0

    async def delete(self, number: int) -> bool:
        stmt = (
            delete(ParcelModel)
            .where(
                ParcelModel.number == number,
                ParcelModel.status == ParcelStatus.REGISTERED.value,
            )
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("delete", number=number):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            logger.debug("Parcel #%d not deleted (missing or not registered)", number)
        return result.rowcount > 0
