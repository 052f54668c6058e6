"""Parcel tracking endpoints.

The store treats a guarded change on a parcel that is no longer registered
as a silent no-op. These endpoints turn that into an explicit answer by
re-reading the parcel: 404 when it does not exist, 409 when it has already
left the ``registered`` state. If the re-read shows the parcel registered
again, the change is attempted once more before giving up with a 409.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tracker.application.schemas import (
    ParcelAddressUpdate,
    ParcelCreate,
    ParcelResponse,
    ParcelStatusUpdate,
)
from tracker.application.services import ParcelService
from tracker.domain.entities import Parcel
from tracker.domain.exceptions import NotFoundError
from tracker.infrastructure.dependencies import get_parcel_service

router = APIRouter(prefix="/parcels", tags=["Parcels"])


async def _load(service: ParcelService, number: int) -> Parcel:
    try:
        return await service.get_parcel(number)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _conflict(parcel: Parcel) -> HTTPException:
    if parcel.is_mutable:
        detail = f"Parcel {parcel.number} changed status while the request ran; retry it"
    else:
        detail = (
            f"Parcel {parcel.number} is '{parcel.status.value}'; "
            "only registered parcels can be changed"
        )
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def register_parcel(
    data: ParcelCreate,
    service: ParcelService = Depends(get_parcel_service),
) -> ParcelResponse:
    """Register a new parcel for a client."""
    parcel = await service.register(data.client, data.address)
    return ParcelResponse.model_validate(parcel, from_attributes=True)


@router.get("", response_model=list[ParcelResponse])
async def list_client_parcels(
    client: int = Query(..., description="Owning client identifier"),
    service: ParcelService = Depends(get_parcel_service),
) -> list[ParcelResponse]:
    """List every parcel belonging to a client."""
    parcels = await service.list_client_parcels(client)
    return [ParcelResponse.model_validate(p, from_attributes=True) for p in parcels]


@router.get("/{number}", response_model=ParcelResponse)
async def get_parcel(
    number: int,
    service: ParcelService = Depends(get_parcel_service),
) -> ParcelResponse:
    """Retrieve a single parcel by tracking number."""
    parcel = await _load(service, number)
    return ParcelResponse.model_validate(parcel, from_attributes=True)


@router.post("/{number}/next-status", response_model=ParcelResponse)
async def advance_status(
    number: int,
    service: ParcelService = Depends(get_parcel_service),
) -> ParcelResponse:
    """Move a parcel to the next lifecycle step."""
    try:
        parcel = await service.next_status(number)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ParcelResponse.model_validate(parcel, from_attributes=True)


@router.put("/{number}/status", response_model=ParcelResponse)
async def set_status(
    number: int,
    data: ParcelStatusUpdate,
    service: ParcelService = Depends(get_parcel_service),
) -> ParcelResponse:
    """Overwrite a parcel's status with any lifecycle value."""
    await service.set_status(number, data.status)
    parcel = await _load(service, number)
    return ParcelResponse.model_validate(parcel, from_attributes=True)


@router.put("/{number}/address", response_model=ParcelResponse)
async def change_address(
    number: int,
    data: ParcelAddressUpdate,
    service: ParcelService = Depends(get_parcel_service),
) -> ParcelResponse:
    """Change the delivery address of a registered parcel."""
    changed = await service.change_address(number, data.address)
    parcel = await _load(service, number)
    if not changed and parcel.is_mutable:
        # registered again by the time we re-read it: one more attempt
        changed = await service.change_address(number, data.address)
        parcel = await _load(service, number)
    if not changed:
        raise _conflict(parcel)
    return ParcelResponse.model_validate(parcel, from_attributes=True)


@router.delete("/{number}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_parcel(
    number: int,
    service: ParcelService = Depends(get_parcel_service),
) -> None:
    """Delete a registered parcel."""
    if await service.delete_parcel(number):
        return
    parcel = await _load(service, number)
    if parcel.is_mutable and await service.delete_parcel(number):
        return
    raise _conflict(parcel)
