import os

# Keep Firebase offline during tests
os.environ.pop("GOOGLE_APPLICATION_CREDENTIALS", None)
os.environ.pop("FIREBASE_SERVICE_ACCOUNT_JSON", None)

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from spotfeed.core.geopoint import GeoPointModel
from spotfeed.models.photo import PhotoInDB, PhotoVisibility
from spotfeed.models.place import EphemeralSpotInDB, GlobalPoiInDB, PlaceKind

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
ORIGIN = (50.0, 8.0)
# Meters per degree of latitude around 50°N
METERS_PER_LAT_DEGREE = 111_229.0


def north_of(lat, lon, meters):
    return lat + meters / METERS_PER_LAT_DEGREE, lon


def make_poi(poi_id, lat, lon, radius=100, importance=0, name=None, address="Somewhere 1"):
    return GlobalPoiInDB(
        id=poi_id,
        external_id=f"ext-{poi_id}",
        name=name or f"POI {poi_id}",
        address=address,
        location=GeoPointModel(latitude=lat, longitude=lon),
        capture_radius_m=radius,
        importance_score=importance,
        created_at=T0 - timedelta(days=30),
    )


def make_spot(spot_id, lat, lon, radius=100, is_live=True, expires_at=None, name=None,
              creator_id="creator", is_trending=False, created_at=None):
    return EphemeralSpotInDB(
        id=spot_id,
        creator_id=creator_id,
        name=name or f"Spot {spot_id}",
        location=GeoPointModel(latitude=lat, longitude=lon),
        capture_radius_m=radius,
        is_live=is_live,
        is_trending=is_trending,
        expires_at=expires_at or T0 + timedelta(days=3),
        created_at=created_at or T0 - timedelta(days=1),
    )


def make_photo(photo_id, place, uploaded_at, visibility=PhotoVisibility.SPOT_ONLY,
               uploader_id="someone", expires_at=None):
    place_ref = {}
    if place is not None:
        field = "global_poi_id" if place.kind == PlaceKind.GLOBAL_POI else "ephemeral_spot_id"
        place_ref[field] = place.id
    location = place.location if place is not None else GeoPointModel(latitude=ORIGIN[0], longitude=ORIGIN[1])
    return PhotoInDB(
        id=photo_id,
        uploader_id=uploader_id,
        location=location,
        visibility=visibility,
        storage_ref=f"{photo_id}.jpg",
        uploaded_at=uploaded_at,
        expires_at=expires_at,
        **place_ref,
    )


class InMemoryPlaceStore:
    """Same contract as PlaceStore, backed by lists."""

    def __init__(self, pois=(), spots=()):
        self.pois = list(pois)
        self.spots = list(spots)
        self.probe_calls = []

    def _all(self, kind):
        return self.pois if kind == PlaceKind.GLOBAL_POI else self.spots

    def find_within_radius(self, center, radius_m, kind):
        return [p for p in self._all(kind) if p.location.is_within(center, radius_m)]

    def find_by_individual_radius(self, center, kind):
        return [p for p in self._all(kind) if p.location.is_within(center, p.capture_radius_m)]

    def count_within_radius(self, center, radius_m, kind=PlaceKind.GLOBAL_POI):
        self.probe_calls.append((center, radius_m))
        return len(self.find_within_radius(center, radius_m, kind))

    def get(self, kind, place_id):
        return next((p for p in self._all(kind) if p.id == place_id), None)

    def find_spots(self, trending=None, creator_id=None):
        spots = [
            s for s in self.spots
            if (trending is None or s.is_trending == trending)
            and (creator_id is None or s.creator_id == creator_id)
        ]
        return sorted(spots, key=lambda s: s.created_at, reverse=True)


class InMemoryPhotoStore:
    """Same contract as PhotoStore, backed by a list."""

    def __init__(self, photos=()):
        self.photos = list(photos)
        self.window_queries = []

    def _for_place(self, place):
        return [p for p in self.photos if p.place_key == place.place_key]

    def find_near_time_window(self, place, window_start, window_end, visibility=None):
        self.window_queries.append((place.place_key, window_start, window_end))
        return [
            p for p in self._for_place(place)
            if window_start <= p.uploaded_at <= window_end
            and (visibility is None or p.visibility in visibility)
        ]

    def find_live_for_place(self, place, visibility=None, now=None):
        return [
            p for p in self._for_place(place)
            if p.is_live(now) and (visibility is None or p.visibility in visibility)
        ]


class FakeSigner:
    def __init__(self, failing: Optional[List[str]] = None):
        self.failing = set(failing or [])
        self.signed = []

    def sign(self, object_ref, bucket_name=None, ttl=None):
        self.signed.append(object_ref)
        if object_ref in self.failing:
            return None
        return f"https://signed.example/{object_ref}"


@pytest.fixture
def signer():
    return FakeSigner()
