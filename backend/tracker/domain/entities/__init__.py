from .parcel import Parcel, ParcelStatus, rfc3339_now

__all__ = [
    "Parcel",
    "ParcelStatus",
    "rfc3339_now",
]
