import logging

import requests
from pydantic import ValidationError

from taskdeck.config import get_settings
from taskdeck.exceptions import IntegrationError, NetworkError, RateLimitError
from taskdeck.http_client import get_session
from taskdeck.models.postal import AddressLookup, RegionLookup, ZipCloudResponse
from taskdeck.zip_table import get_zip_table, normalize_zipcode

logger = logging.getLogger(__name__)


def _handle_response(resp: requests.Response) -> ZipCloudResponse:
    """Check HTTP and API-level errors, return the parsed payload."""
    if resp.status_code == 429:
        raise RateLimitError("Postal API rate limit exceeded. Try again shortly.")
    try:
        data = ZipCloudResponse.model_validate(resp.json())
    except (ValueError, ValidationError) as e:
        raise IntegrationError(f"Json parse error: {e}") from e
    if data.status != 200:
        raise IntegrationError(data.message or "Unknown API error")
    return data


def lookup_address(zipcode: str) -> AddressLookup:
    """Resolve a Japanese postal code to a full address via zipcloud."""
    settings = get_settings()
    code = normalize_zipcode(zipcode)
    try:
        resp = get_session().get(
            f"{settings.zipcloud_base_url}/search",
            params={"zipcode": code},
            timeout=settings.http_timeout,
        )
    except requests.RequestException as e:
        logger.warning("Postal lookup for %s failed: %s", code, e)
        raise NetworkError(f"Network error: {e}") from e
    data = _handle_response(resp)
    if not data.results:
        raise IntegrationError("No address found")
    first = data.results[0]
    return AddressLookup(
        zipcode=code,
        address=f"{first.address1}{first.address2}{first.address3}",
        region=get_zip_table().get(code),
    )


def lookup_region(zipcode: str) -> RegionLookup:
    """Prefecture + city for a postal code, from the local table only."""
    code = normalize_zipcode(zipcode)
    return RegionLookup(zipcode=code, region=get_zip_table().get(code))
