"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.application.services import ParcelService
from tracker.infrastructure.database.session import get_db_session
from tracker.infrastructure.database.repositories import SQLAlchemyParcelRepository


async def get_parcel_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ParcelService, None]:
    """Provides a ParcelService instance with its repository wired up."""
    repository = SQLAlchemyParcelRepository(session)
    yield ParcelService(repository)
