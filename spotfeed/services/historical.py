# spotfeed/services/historical.py
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple
from spotfeed.config import (
    ADAPTIVE_RADIUS_DEFAULT_M, ADAPTIVE_RADIUS_TIERS, DENSITY_PROBE_RADIUS_M,
    HISTORICAL_LOOKBACK, PLACE_PHOTOS_POI_RADIUS_M,
)
from spotfeed.core.exceptions import PlaceNotFoundError
from spotfeed.db.photo_store import PhotoStore
from spotfeed.db.place_store import PlaceStore
from spotfeed.models.base import utcnow
from spotfeed.models.feed import FeedItem, HistoricalPoint, parse_trail
from spotfeed.models.photo import PUBLIC_VISIBILITIES, PhotoResponse, PhotoScope, PhotoVisibility
from spotfeed.models.place import EphemeralSpotInDB, Place, PlaceKind
from spotfeed.services.aggregator import Match, build_historical_feed, sign_covers
from spotfeed.services.storage import BlobSigner

logger = logging.getLogger(__name__)

Visits = Dict[Tuple[str, str], Tuple[Place, List[HistoricalPoint]]]


def select_adaptive_radius(probe_count: int) -> float:
    """50 m in dense areas (more than 10 POIs nearby), 100 m above 2, otherwise 300 m."""
    for threshold, radius in ADAPTIVE_RADIUS_TIERS:
        if probe_count > threshold:
            return radius
    return ADAPTIVE_RADIUS_DEFAULT_M


def as_trail(trail: Any) -> List[HistoricalPoint]:
    if trail is None:
        return []
    if isinstance(trail, list) and all(isinstance(h, HistoricalPoint) for h in trail):
        return trail
    return parse_trail(trail)


class HistoricalFeedService:
    """The "where you've been" feed, replaying a client-supplied trail against the stores."""

    def __init__(self, places: PlaceStore, photos: PhotoStore, signer: BlobSigner,
                 lookback: timedelta = HISTORICAL_LOOKBACK):
        self.places = places
        self.photos = photos
        self.signer = signer
        self.lookback = lookback

    def adaptive_radius(self, trail: List[HistoricalPoint]) -> float:
        last = trail[-1]
        probe = self.places.count_within_radius(last.location, DENSITY_PROBE_RADIUS_M, PlaceKind.GLOBAL_POI)
        radius = select_adaptive_radius(probe)
        logger.debug("Density probe found %d POIs, using %.0f m", probe, radius)
        return radius

    def _visits(self, trail: List[HistoricalPoint], radius: float, now: datetime) -> Visits:
        visits: Visits = {}

        def visit(place, point):
            visits.setdefault(place.place_key, (place, []))[1].append(point)

        for point in trail:
            for poi in self.places.find_within_radius(point.location, radius, PlaceKind.GLOBAL_POI):
                visit(poi, point)
            for spot in self.places.find_by_individual_radius(point.location, PlaceKind.EPHEMERAL_SPOT):
                if not spot.is_expired(now):
                    visit(spot, point)
        return visits

    def _matches(self, visits: Visits,
                 visibility: Optional[Iterable[PhotoVisibility]]) -> List[Match]:
        matches = []
        for place, points in visits.values():
            # one query per place over the span of all its visits
            start = min(p.timestamp for p in points) - self.lookback
            end = max(p.timestamp for p in points)
            for photo in self.photos.find_near_time_window(place, start, end, visibility):
                for point in points:
                    if point.timestamp - self.lookback <= photo.uploaded_at <= point.timestamp:
                        matches.append(Match(place, photo, point.timestamp))
        return matches

    def generate_historical_feed(self, trail: Any, now: Optional[datetime] = None) -> List[FeedItem]:
        trail = as_trail(trail)
        if not trail:
            return []
        now = now or utcnow()

        radius = self.adaptive_radius(trail)
        visits = self._visits(trail, radius, now)
        items = build_historical_feed(self._matches(visits, PUBLIC_VISIBILITIES))
        logger.info("Historical feed for %d trail points: %d places", len(trail), len(items))
        return sign_covers(items, self.signer.sign)

    def find_historical_photos(self, kind: PlaceKind, place_id: str, trail: Any, caller_id: str,
                               scope: PhotoScope = PhotoScope.OTHERS,
                               now: Optional[datetime] = None) -> List[PhotoResponse]:
        """
        Photos taken at one place while the caller was there.

        ``others`` returns public photos uploaded by anyone but the caller, ``mine``
        the caller's own photos whatever their visibility.
        """
        trail = as_trail(trail)
        if not trail:
            return []
        now = now or utcnow()

        place = self.places.get(kind, place_id)
        if place is None or (isinstance(place, EphemeralSpotInDB) and place.is_expired(now)):
            raise PlaceNotFoundError(kind.value, place_id)

        radius = PLACE_PHOTOS_POI_RADIUS_M if kind == PlaceKind.GLOBAL_POI else place.capture_radius_m
        points = [p for p in trail if place.location.is_within(p.location, radius)]
        if not points:
            return []

        visibility = PUBLIC_VISIBILITIES if scope == PhotoScope.OTHERS else None
        photos = {m.photo.id: m.photo for m in self._matches({place.place_key: (place, points)}, visibility)}
        if scope == PhotoScope.OTHERS:
            selected = [p for p in photos.values() if p.uploader_id != caller_id]
        else:
            selected = [p for p in photos.values() if p.uploader_id == caller_id]
        selected.sort(key=lambda p: (p.uploaded_at, p.id), reverse=True)

        return [
            PhotoResponse(
                photo_id=p.id,
                storage_url=self.signer.sign(p.storage_ref),
                timestamp=p.uploaded_at,
                place_kind=place.kind,
                place_id=place.id,
                uploader_id=p.uploader_id,
            )
            for p in selected
        ]
