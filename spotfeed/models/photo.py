# spotfeed/models/photo.py
from enum import Enum
from typing import Optional, Tuple
from datetime import datetime
from pydantic import BaseModel, model_validator
from spotfeed.config import SPOT_ONLY_TTL, SHARED_TTL
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.models.base import DocumentInDB
from spotfeed.models.place import PlaceKind


class PhotoVisibility(str, Enum):
    SPOT_ONLY = "SPOT_ONLY"
    FRIENDS_ONLY = "FRIENDS_ONLY"
    SPOT_AND_FRIENDS = "SPOT_AND_FRIENDS"


PUBLIC_VISIBILITIES = frozenset({PhotoVisibility.SPOT_ONLY, PhotoVisibility.SPOT_AND_FRIENDS})


def expiry_for(visibility: PhotoVisibility, uploaded_at: datetime) -> datetime:
    if visibility == PhotoVisibility.SPOT_ONLY:
        return uploaded_at + SPOT_ONLY_TTL
    return uploaded_at + SHARED_TTL


class PhotoInDB(DocumentInDB):
    uploader_id: str
    global_poi_id: Optional[str] = None
    ephemeral_spot_id: Optional[str] = None
    location: GeoPointModel
    visibility: PhotoVisibility
    storage_ref: str
    uploaded_at: datetime
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_place_and_expiry(self):
        if self.global_poi_id and self.ephemeral_spot_id:
            raise ValueError("A photo can be linked to a Global POI or an Ephemeral Spot, not both.")
        if self.expires_at is None:
            self.expires_at = expiry_for(self.visibility, self.uploaded_at)
        return self

    @property
    def place_key(self) -> Optional[Tuple[str, str]]:
        if self.global_poi_id:
            return (PlaceKind.GLOBAL_POI.value, self.global_poi_id)
        if self.ephemeral_spot_id:
            return (PlaceKind.EPHEMERAL_SPOT.value, self.ephemeral_spot_id)
        return None

    def is_live(self, now: datetime) -> bool:
        return self.expires_at > now


class PhotoResponse(BaseModel):
    photo_id: str
    storage_url: Optional[str] = None
    timestamp: datetime
    place_kind: Optional[PlaceKind] = None
    place_id: Optional[str] = None
    uploader_id: str


class PhotoScope(str, Enum):
    OTHERS = "others"
    MINE = "mine"
