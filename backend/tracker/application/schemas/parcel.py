"""Pydantic DTOs (Data Transfer Objects) for the Parcel feature."""

from pydantic import BaseModel, Field

from tracker.domain.entities import ParcelStatus


class ParcelCreate(BaseModel):
    """Schema for registering a new parcel."""

    client: int = Field(..., ge=0, examples=[1000])
    address: str = Field(..., min_length=1, examples=["221B Baker Street, London"])


class ParcelAddressUpdate(BaseModel):
    """Schema for changing the delivery address of a registered parcel."""

    address: str = Field(..., min_length=1)


class ParcelStatusUpdate(BaseModel):
    """Schema for overwriting a parcel's status."""

    status: ParcelStatus


class ParcelResponse(BaseModel):
    """Schema returned to the client."""

    number: int
    client: int
    status: ParcelStatus
    address: str
    created_at: str

    model_config = {"from_attributes": True}
