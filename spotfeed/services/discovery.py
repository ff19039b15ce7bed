# spotfeed/services/discovery.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from spotfeed.config import DISCOVERY_SCAN_RADIUS_M
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.db.photo_store import PhotoStore
from spotfeed.db.place_store import PlaceStore
from spotfeed.models.base import utcnow
from spotfeed.models.feed import FeedItem
from spotfeed.models.photo import PUBLIC_VISIBILITIES
from spotfeed.models.place import Place, PlaceKind
from spotfeed.services.aggregator import (
    Match, build_discovery_feed, group_matches, sign_covers, to_feed_item,
)
from spotfeed.services.poi_ingest import PoiIngestService
from spotfeed.services.storage import BlobSigner

logger = logging.getLogger(__name__)


class DiscoveryService:
    """The "near me, right now" feed and the spot galleries built on the same live-photo rules."""

    def __init__(self, places: PlaceStore, photos: PhotoStore, signer: BlobSigner,
                 ingest: Optional[PoiIngestService] = None,
                 scan_radius_m: float = DISCOVERY_SCAN_RADIUS_M):
        self.places = places
        self.photos = photos
        self.signer = signer
        self.ingest = ingest
        self.scan_radius_m = scan_radius_m

    def _live_matches(self, places: Iterable[Place], now: datetime) -> List[Match]:
        return [
            Match(place, photo, now)
            for place in places
            for photo in self.photos.find_live_for_place(place, PUBLIC_VISIBILITIES, now)
        ]

    def get_discovered_spots(self, lat: float, lon: float, now: Optional[datetime] = None) -> List[FeedItem]:
        now = now or utcnow()
        center = GeoPointModel(latitude=lat, longitude=lon)

        pois = self.places.find_within_radius(center, self.scan_radius_m, PlaceKind.GLOBAL_POI)
        spots = [
            spot for spot in self.places.find_by_individual_radius(center, PlaceKind.EPHEMERAL_SPOT)
            if spot.is_active(now)
        ]

        items = build_discovery_feed(self._live_matches(pois + spots, now))
        logger.info("Discovery feed at %s,%s: %d places from %d POIs and %d spots",
                    lat, lon, len(items), len(pois), len(spots))
        return sign_covers(items, self.signer.sign)

    def _spot_gallery(self, spots, now: datetime, keep_empty: bool) -> List[FeedItem]:
        groups = group_matches(self._live_matches(spots, now))
        items = []
        for spot in spots:
            group = groups.get(spot.place_key)
            if group is None and not keep_empty:
                continue
            items.append(to_feed_item(spot, group))
        return sign_covers(items, self.signer.sign)

    def get_trending_spots(self, now: Optional[datetime] = None) -> List[FeedItem]:
        now = now or utcnow()
        spots = [s for s in self.places.find_spots(trending=True) if not s.is_expired(now)]
        return self._spot_gallery(spots, now, keep_empty=False)

    def get_created_spots(self, creator_id: str, now: Optional[datetime] = None) -> List[FeedItem]:
        now = now or utcnow()
        spots = [s for s in self.places.find_spots(creator_id=creator_id) if not s.is_expired(now)]
        return self._spot_gallery(spots, now, keep_empty=True)

    async def get_taggable_places(self, lat: float, lon: float, now: Optional[datetime] = None) -> List[FeedItem]:
        """Places a photo taken here can be tagged with; no photo aggregate is attached."""
        now = now or utcnow()
        center = GeoPointModel(latitude=lat, longitude=lon)

        spots = [
            spot for spot in self.places.find_by_individual_radius(center, PlaceKind.EPHEMERAL_SPOT)
            if spot.is_active(now)
        ]
        pois = self.places.find_by_individual_radius(center, PlaceKind.GLOBAL_POI)
        if not pois and self.ingest is not None:
            logger.info("No local POIs at %s,%s, asking the directory", lat, lon)
            pois = await self.ingest.refresh_nearby(lat, lon)

        items = [to_feed_item(place) for place in pois + spots]
        return sorted(items, key=lambda i: (i.name, i.place_kind.value, i.place_id))
