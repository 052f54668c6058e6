"""Abstract repository interface (port) for Parcel persistence."""

from abc import ABC, abstractmethod

from tracker.domain.entities import Parcel, ParcelStatus


class ParcelRepository(ABC):
    """Port for parcel persistence, implemented in the infrastructure layer.

    Mutations of a parcel's address and its deletion are only allowed while
    the parcel is registered. Implementations must express that condition
    inside the mutating statement itself, never as a separate read.
    """

    @abstractmethod
    async def add(self, parcel: Parcel) -> int:
        """Persist a new parcel and return its storage-assigned number."""
        ...

    @abstractmethod
    async def get(self, number: int) -> Parcel:
        """Retrieve a parcel by number. Raises NotFoundError when absent."""
        ...

    @abstractmethod
    async def get_by_client(self, client: int) -> list[Parcel]:
        """Retrieve every parcel owned by ``client`` (empty list if none)."""
        ...

    @abstractmethod
    async def set_status(self, number: int, status: ParcelStatus) -> bool:
        """Overwrite the status unconditionally. Returns True if a row changed."""
        ...

    @abstractmethod
    async def advance_status(
        self, number: int, current: ParcelStatus, next_status: ParcelStatus
    ) -> bool:
        """Set ``next_status`` only if the stored status is still ``current``.

        Returns True if a row changed. A False result means another writer
        moved the parcel first (or it does not exist).
        """
        ...

    @abstractmethod
    async def set_address(self, number: int, address: str) -> bool:
        """Change the address of a registered parcel. Returns True if a row changed."""
        ...

    @abstractmethod
    async def delete(self, number: int) -> bool:
        """Delete a registered parcel. Returns True if a row was removed."""
        ...
