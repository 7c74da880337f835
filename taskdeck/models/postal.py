from pydantic import BaseModel


class ZipCloudResult(BaseModel):
    zipcode: str | None = None
    address1: str
    address2: str
    address3: str


class ZipCloudResponse(BaseModel):
    status: int
    message: str | None = None
    results: list[ZipCloudResult] | None = None


class AddressLookup(BaseModel):
    zipcode: str
    address: str
    region: str | None = None  # prefecture + city from the bundled reference table


class RegionLookup(BaseModel):
    zipcode: str
    region: str | None = None
