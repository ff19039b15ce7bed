# spotfeed/db/photo_store.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from google.api_core.exceptions import GoogleAPIError
from pydantic import ValidationError
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.db.utils import convert_doc_to_model
from spotfeed.models.base import utcnow
from spotfeed.models.photo import PhotoInDB, PhotoVisibility
from spotfeed.models.place import Place, PlaceKind

logger = logging.getLogger(__name__)

PHOTOS = "photos"
PLACE_FIELDS = {
    PlaceKind.GLOBAL_POI: "global_poi_id",
    PlaceKind.EPHEMERAL_SPOT: "ephemeral_spot_id",
}
# Firestore caps "in" filters at 30 values
IN_QUERY_LIMIT = 30


def _visible(photo: PhotoInDB, visibility: Optional[Iterable[PhotoVisibility]]) -> bool:
    return visibility is None or photo.visibility in visibility


class PhotoStore:
    def __init__(self, db, places=None):
        self.db = db
        self.places = places

    def _run(self, query, what: str) -> List[PhotoInDB]:
        if self.db is None:
            logger.warning("Firestore not initialized, no %s", what)
            return []
        photos = []
        try:
            for doc in query.stream():
                try:
                    photos.append(convert_doc_to_model(doc.id, doc.to_dict(), PhotoInDB))
                except ValidationError:
                    logger.warning("Skipping malformed photo document %s", doc.id)
        except GoogleAPIError as e:
            logger.error("Photo query for %s failed: %s", what, e)
            return []
        return photos

    def _for_place(self, place: Place):
        return self.db.collection(PHOTOS).where(PLACE_FIELDS[place.kind], "==", place.id)

    def find_near_time_window(self, place: Place, window_start: datetime, window_end: datetime,
                              visibility: Optional[Iterable[PhotoVisibility]] = None) -> List[PhotoInDB]:
        """Photos attached to place with window_start <= uploaded_at <= window_end; expiry is ignored."""
        if self.db is None:
            return []
        query = self._for_place(place) \
            .where("uploaded_at", ">=", window_start) \
            .where("uploaded_at", "<=", window_end)
        return [
            p for p in self._run(query, f"{place.kind.value} {place.id} window")
            if _visible(p, visibility) and window_start <= p.uploaded_at <= window_end
        ]

    def find_live_for_place(self, place: Place, visibility: Optional[Iterable[PhotoVisibility]] = None,
                            now: Optional[datetime] = None) -> List[PhotoInDB]:
        if self.db is None:
            return []
        now = now or utcnow()
        query = self._for_place(place).where("expires_at", ">", now)
        return [
            p for p in self._run(query, f"{place.kind.value} {place.id} live photos")
            if _visible(p, visibility) and p.is_live(now)
        ]

    def find_live_near(self, center: GeoPointModel, radius_m: float,
                       visibility: Optional[Iterable[PhotoVisibility]] = None,
                       now: Optional[datetime] = None) -> List[PhotoInDB]:
        """Live photos of every place (either kind) within radius_m of center."""
        if self.places is None:
            raise RuntimeError("PhotoStore needs a PlaceStore for proximity lookups")
        now = now or utcnow()
        photos = []
        for kind in PlaceKind:
            for place in self.places.find_within_radius(center, radius_m, kind):
                photos.extend(self.find_live_for_place(place, visibility, now))
        return photos

    def find_by_uploaders_since(self, uploader_ids: Iterable[str],
                                visibility: Optional[Iterable[PhotoVisibility]] = None,
                                not_expired: bool = True,
                                now: Optional[datetime] = None) -> List[PhotoInDB]:
        """Friends-feed photos by any of uploader_ids, newest first."""
        if self.db is None:
            return []
        now = now or utcnow()
        ids = list(dict.fromkeys(uploader_ids))
        photos = []
        for i in range(0, len(ids), IN_QUERY_LIMIT):
            query = self.db.collection(PHOTOS).where("uploader_id", "in", ids[i:i + IN_QUERY_LIMIT])
            if not_expired:
                query = query.where("expires_at", ">", now)
            photos.extend(self._run(query, "uploader feed"))
        photos = [
            p for p in photos
            if _visible(p, visibility) and (not not_expired or p.is_live(now))
        ]
        return sorted(photos, key=lambda p: (p.uploaded_at, p.id), reverse=True)
