from .parcel_service import ParcelService
