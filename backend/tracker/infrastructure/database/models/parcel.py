"""SQLAlchemy ORM model for the Parcel entity."""

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from tracker.infrastructure.database.base import Base


class ParcelModel(Base):
    """ORM model — maps to the 'parcel' table.

    ``status`` and ``created_at`` are plain text: the status holds the
    ParcelStatus value, the timestamp an RFC 3339 string so it sorts
    lexicographically.
    """

    __tablename__ = "parcel"

    number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_parcel_client", "client"),
    )

    def __repr__(self) -> str:
        return (
            f"<ParcelModel(number={self.number}, client={self.client}, "
            f"status='{self.status}')>"
        )
