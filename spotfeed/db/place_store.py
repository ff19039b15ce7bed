# spotfeed/db/place_store.py
import logging
from typing import Dict, Iterable, List, Optional
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1 import SERVER_TIMESTAMP
from pydantic import ValidationError
from spotfeed.config import MAX_POI_CAPTURE_RADIUS_M, MAX_SPOT_CAPTURE_RADIUS_M
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.db.utils import convert_doc_to_model, encode_geohash, geohash_ranges
from spotfeed.models.place import EphemeralSpotInDB, GlobalPoiInDB, Place, PlaceKind

logger = logging.getLogger(__name__)

COLLECTIONS = {
    PlaceKind.GLOBAL_POI: ("global_pois", GlobalPoiInDB),
    PlaceKind.EPHEMERAL_SPOT: ("ephemeral_spots", EphemeralSpotInDB),
}


class PlaceStore:
    """Global POIs and Ephemeral Spots, indexed by a precision-9 geohash field."""

    def __init__(self, db):
        self.db = db

    def _to_models(self, kind: PlaceKind, docs: Iterable) -> List[Place]:
        _, Model = COLLECTIONS[kind]
        places = []
        for doc in docs:
            try:
                places.append(convert_doc_to_model(doc.id, doc.to_dict(), Model))
            except ValidationError:
                logger.warning("Skipping malformed %s document %s", kind.value, doc.id)
        return places

    def _load_near(self, kind: PlaceKind, center: GeoPointModel, radius_m: float) -> List[Place]:
        if self.db is None:
            logger.warning("Firestore not initialized, no %s lookup", kind.value)
            return []
        name, _ = COLLECTIONS[kind]
        docs, seen = [], set()
        try:
            for start, end in geohash_ranges(center.latitude, center.longitude, radius_m):
                query = self.db.collection(name) \
                    .where("geohash", ">=", start) \
                    .where("geohash", "<=", end)
                for doc in query.stream():
                    if doc.id not in seen:
                        seen.add(doc.id)
                        docs.append(doc)
        except GoogleAPIError as e:
            logger.error("Spatial lookup on %s failed: %s", name, e)
            return []
        return self._to_models(kind, docs)

    def find_within_radius(self, center: GeoPointModel, radius_m: float, kind: PlaceKind) -> List[Place]:
        return [
            place for place in self._load_near(kind, center, radius_m)
            if place.location.is_within(center, radius_m)
        ]

    def find_by_individual_radius(self, center: GeoPointModel, kind: PlaceKind) -> List[Place]:
        """Places whose own capture radius covers center."""
        scan = MAX_SPOT_CAPTURE_RADIUS_M if kind == PlaceKind.EPHEMERAL_SPOT else MAX_POI_CAPTURE_RADIUS_M
        return [
            place for place in self._load_near(kind, center, scan)
            if place.location.is_within(center, place.capture_radius_m)
        ]

    def count_within_radius(self, center: GeoPointModel, radius_m: float,
                            kind: PlaceKind = PlaceKind.GLOBAL_POI) -> int:
        return len(self.find_within_radius(center, radius_m, kind))

    def get(self, kind: PlaceKind, place_id: str) -> Optional[Place]:
        if self.db is None:
            return None
        name, Model = COLLECTIONS[kind]
        try:
            doc = self.db.collection(name).document(place_id).get()
        except GoogleAPIError as e:
            logger.error("Lookup of %s %s failed: %s", kind.value, place_id, e)
            return None
        if not doc.exists:
            return None
        try:
            return convert_doc_to_model(doc.id, doc.to_dict(), Model)
        except ValidationError:
            logger.warning("Skipping malformed %s document %s", kind.value, doc.id)
            return None

    def find_spots(self, trending: Optional[bool] = None,
                   creator_id: Optional[str] = None) -> List[EphemeralSpotInDB]:
        """Spots filtered by trending flag and/or creator, newest first."""
        if self.db is None:
            return []
        query = self.db.collection(COLLECTIONS[PlaceKind.EPHEMERAL_SPOT][0])
        if trending is not None:
            query = query.where("is_trending", "==", trending)
        if creator_id is not None:
            query = query.where("creator_id", "==", creator_id)
        try:
            spots = self._to_models(PlaceKind.EPHEMERAL_SPOT, query.stream())
        except GoogleAPIError as e:
            logger.error("Spot listing failed: %s", e)
            return []
        return sorted(spots, key=lambda s: (s.created_at is not None, s.created_at), reverse=True)

    def upsert_global_poi(self, external_id: str, name: str, address: Optional[str],
                          location: GeoPointModel, capture_radius_m: int,
                          importance_score: int) -> GlobalPoiInDB:
        """Create or refresh the POI keyed on external_id; location and created_at stay as first stored."""
        if self.db is None:
            raise RuntimeError("Firestore not initialized.")
        collection = self.db.collection(COLLECTIONS[PlaceKind.GLOBAL_POI][0])
        existing = list(collection.where("external_id", "==", external_id).limit(1).stream())

        refreshed: Dict = {
            "name": name,
            "address": address,
            "capture_radius_m": capture_radius_m,
            "importance_score": importance_score,
        }
        if existing:
            doc_ref = collection.document(existing[0].id)
            doc_ref.update(refreshed)
        else:
            doc_ref = collection.document()
            doc_ref.set({
                **refreshed,
                "external_id": external_id,
                "location": location.to_firestore_geopoint(),
                "geohash": encode_geohash(location.latitude, location.longitude),
                "created_at": SERVER_TIMESTAMP,
            })

        stored = doc_ref.get()
        return convert_doc_to_model(stored.id, stored.to_dict(), GlobalPoiInDB)
