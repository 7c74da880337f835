from fastapi import APIRouter

from taskdeck.models.postal import AddressLookup, RegionLookup
from taskdeck.services import postal as postal_service

router = APIRouter(prefix="/api/postal", tags=["postal"])


@router.get("/address")
def lookup_address(zipcode: str) -> AddressLookup:
    return postal_service.lookup_address(zipcode)


@router.get("/region")
def lookup_region(zipcode: str) -> RegionLookup:
    return postal_service.lookup_region(zipcode)
