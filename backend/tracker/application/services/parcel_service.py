"""Application service (use case) for Parcel operations."""

import logging

from tracker.application.interfaces import ParcelRepository
from tracker.domain.entities import Parcel, ParcelStatus, rfc3339_now

logger = logging.getLogger(__name__)


class ParcelService:
    """Orchestrates the parcel lifecycle. Depends on the repository port (DI)."""

    def __init__(self, repository: ParcelRepository):
        self._repository = repository

    async def register(self, client: int, address: str) -> Parcel:
        """Store a new parcel in the ``registered`` state, stamped with the current time."""
        parcel = Parcel(
            client=client,
            address=address,
            status=ParcelStatus.REGISTERED,
            created_at=rfc3339_now(),
        )
        parcel.number = await self._repository.add(parcel)
        logger.info(
            "Registered parcel #%d for client %d (address=%r, created_at=%s)",
            parcel.number, parcel.client, parcel.address, parcel.created_at,
        )
        return parcel

    async def get_parcel(self, number: int) -> Parcel:
        return await self._repository.get(number)

    async def list_client_parcels(self, client: int) -> list[Parcel]:
        return await self._repository.get_by_client(client)

    async def next_status(self, number: int) -> Parcel:
        """Advance a parcel one lifecycle step. Delivered parcels are left as they are."""
        parcel = await self._repository.get(number)
        if parcel.status is ParcelStatus.DELIVERED:
            return parcel

        next_status = parcel.status.next()
        if not await self._repository.advance_status(number, parcel.status, next_status):
            # Someone else moved it between the read and the write; report
            # what is stored now instead of overwriting it.
            return await self._repository.get(number)
        logger.info(
            "Parcel #%d status changed: %s -> %s",
            number, parcel.status.value, next_status.value,
        )
        parcel.status = next_status
        return parcel

    async def set_status(self, number: int, status: ParcelStatus) -> bool:
        return await self._repository.set_status(number, status)

    async def change_address(self, number: int, address: str) -> bool:
        return await self._repository.set_address(number, address)

    async def delete_parcel(self, number: int) -> bool:
        return await self._repository.delete(number)
