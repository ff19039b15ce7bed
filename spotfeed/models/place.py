# spotfeed/models/place.py
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union
from datetime import datetime
from pydantic import BaseModel, Field
from spotfeed.config import MAX_POI_CAPTURE_RADIUS_M, MAX_SPOT_CAPTURE_RADIUS_M, MIN_SPOT_CAPTURE_RADIUS_M
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.models.base import DocumentInDB


class PlaceKind(str, Enum):
    GLOBAL_POI = "GLOBAL_POI"
    EPHEMERAL_SPOT = "EPHEMERAL_SPOT"


class AccessPolicy(str, Enum):
    OPEN = "open"
    PASSWORD = "password"
    QR = "qr"
    APPROVAL = "approval"


class GlobalPoiCreate(BaseModel):
    external_id: str
    name: str
    address: Optional[str] = None
    location: GeoPointModel
    capture_radius_m: int = Field(..., gt=0, le=MAX_POI_CAPTURE_RADIUS_M)
    importance_score: int = 0


class GlobalPoiInDB(DocumentInDB, GlobalPoiCreate):
    kind: ClassVar[PlaceKind] = PlaceKind.GLOBAL_POI

    @property
    def place_key(self) -> Tuple[str, str]:
        return (self.kind.value, self.id)


class EphemeralSpotInDB(DocumentInDB):
    kind: ClassVar[PlaceKind] = PlaceKind.EPHEMERAL_SPOT

    creator_id: str
    name: str
    location: GeoPointModel
    capture_radius_m: int = Field(..., ge=MIN_SPOT_CAPTURE_RADIUS_M, le=MAX_SPOT_CAPTURE_RADIUS_M)
    access_policy: AccessPolicy = AccessPolicy.OPEN
    access_secret: Optional[str] = None
    is_trending: bool = False
    is_live: bool = False
    scheduled_live_at: Optional[datetime] = None
    expires_at: datetime
    challenges_enabled: bool = False
    cover_image_ref: Optional[str] = None

    @property
    def place_key(self) -> Tuple[str, str]:
        return (self.kind.value, self.id)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_active(self, now: datetime) -> bool:
        return self.is_live and not self.is_expired(now)


Place = Union[GlobalPoiInDB, EphemeralSpotInDB]
