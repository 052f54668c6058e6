"""Domain entity for a tracked shipment and its lifecycle states."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ParcelStatus(str, Enum):
    """Lifecycle states of a parcel."""

    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"

    def next(self) -> "ParcelStatus":
        """Return the following lifecycle step; ``delivered`` is terminal."""
        if self is ParcelStatus.REGISTERED:
            return ParcelStatus.SENT
        return ParcelStatus.DELIVERED


def rfc3339_now() -> str:
    """Current UTC time as a sortable RFC 3339 string (second precision)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class Parcel:
    """Core domain entity. ``number`` stays ``None`` until storage assigns it."""

    client: int
    address: str
    status: ParcelStatus = ParcelStatus.REGISTERED
    created_at: str = field(default_factory=rfc3339_now)
    number: int | None = None

    @property
    def is_mutable(self) -> bool:
        """Only registered parcels may change address or be deleted."""
        return self.status is ParcelStatus.REGISTERED
