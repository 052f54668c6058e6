from .parcel import ParcelAddressUpdate, ParcelCreate, ParcelResponse, ParcelStatusUpdate

__all__ = [
    "ParcelCreate",
    "ParcelAddressUpdate",
    "ParcelStatusUpdate",
    "ParcelResponse",
]
