# spotfeed/services/directory.py
import logging
from typing import List, Optional
import httpx
from pydantic import BaseModel, ValidationError
from spotfeed.config import GOOGLE_PLACES_API_KEY
from spotfeed.core.geopoint import GeoPointModel

logger = logging.getLogger(__name__)

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"


class RawPoiRecord(BaseModel):
    external_id: str
    name: str
    address: Optional[str] = None
    location: GeoPointModel
    tags: List[str] = []


class GooglePlacesDirectory:
    """Nearby lookups against Google Places; any failure yields an empty list."""

    def __init__(self, api_key: Optional[str] = GOOGLE_PLACES_API_KEY, timeout: float = 10,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def lookup_nearby(self, lat: float, lon: float, radius: int) -> List[RawPoiRecord]:
        if not self.api_key:
            logger.warning("GOOGLE_PLACES_API_KEY is not set, skipping nearby lookup")
            return []
        params = {
            "location": f"{lat},{lon}",
            "radius": radius,
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(NEARBY_SEARCH_URL, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error calling Google Places nearby search: %s", e)
            return []

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.error("Google Places nearby search returned %s: %s", status, data.get("error_message"))
            return []

        records = []
        for item in data.get("results", []):
            location = (item.get("geometry") or {}).get("location") or {}
            try:
                records.append(
                    RawPoiRecord(
                        external_id=item.get("place_id"),
                        name=item.get("name") or "Unnamed place",
                        address=item.get("vicinity"),
                        location={"latitude": location.get("lat"), "longitude": location.get("lng")},
                        tags=item.get("types") or [],
                    )
                )
            except ValidationError as e:
                logger.warning("Skipping unusable Google Places result %s: %s", item.get("place_id"), e)
                continue
        logger.debug("Google Places returned %d usable results near %s,%s", len(records), lat, lon)
        return records
