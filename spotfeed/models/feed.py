# spotfeed/models/feed.py
import json
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator
from spotfeed.core.exceptions import TrailFormatError
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.models.base import as_utc
from spotfeed.models.place import AccessPolicy, PlaceKind


class HistoricalPoint(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_to_utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def location(self) -> GeoPointModel:
        return GeoPointModel(latitude=self.latitude, longitude=self.longitude)


class HistoricalSearchRequest(BaseModel):
    history: Optional[List[HistoricalPoint]] = None


_trail_adapter = TypeAdapter(Optional[List[HistoricalPoint]])


def parse_trail(payload: Any) -> List[HistoricalPoint]:
    """Decode a serialized trail (JSON text or already-decoded list); null means empty."""
    try:
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        return _trail_adapter.validate_python(payload) or []
    except (ValueError, ValidationError) as e:
        raise TrailFormatError(f"Malformed location trail: {e}") from e


class FeedItem(BaseModel):
    place_kind: PlaceKind
    name: str
    latitude: float
    longitude: float
    cover_image_ref: Optional[str] = None
    cover_image_url: Optional[str] = None
    photo_count: int = 0
    newest_photo_timestamp: Optional[datetime] = None

    global_poi_id: Optional[str] = None
    ephemeral_spot_id: Optional[str] = None

    # Global POI only
    address: Optional[str] = None
    importance_score: Optional[int] = None

    capture_radius_m: Optional[int] = None

    # Ephemeral Spot only
    access_policy: Optional[AccessPolicy] = None
    is_trending: Optional[bool] = None
    is_live: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @property
    def place_id(self) -> str:
        return self.global_poi_id or self.ephemeral_spot_id
