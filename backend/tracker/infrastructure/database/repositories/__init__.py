from .parcel_repository import SQLAlchemyParcelRepository

__all__ = [
    "SQLAlchemyParcelRepository",
]
