from .parcel import ParcelModel

__all__ = [
    "ParcelModel",
]
