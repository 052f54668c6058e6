from .parcel_repository import ParcelRepository

__all__ = [
    "ParcelRepository",
]
