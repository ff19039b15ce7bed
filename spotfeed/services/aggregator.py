# spotfeed/services/aggregator.py
"""
Grouping of matched (place, photo, match time) triples into feed items.

Both feeds share one convention: a place's cover is the photo uploaded first among
the photos that matched it, and the count is taken over exactly that same set.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple
from spotfeed.models.feed import FeedItem
from spotfeed.models.photo import PhotoInDB
from spotfeed.models.place import EphemeralSpotInDB, GlobalPoiInDB, Place

logger = logging.getLogger(__name__)


class Match(NamedTuple):
    place: Place
    photo: PhotoInDB
    matched_at: datetime


@dataclass
class PlaceAggregate:
    place: Place
    first_match: datetime
    photos: Dict[str, PhotoInDB] = field(default_factory=dict)

    @property
    def photo_count(self) -> int:
        return len(self.photos)

    @property
    def newest_photo_timestamp(self) -> Optional[datetime]:
        if not self.photos:
            return None
        return max(p.uploaded_at for p in self.photos.values())

    @property
    def cover_photo(self) -> Optional[PhotoInDB]:
        if not self.photos:
            return None
        return min(self.photos.values(), key=lambda p: (p.uploaded_at, p.id))


def group_matches(matches: Iterable[Match]) -> Dict[Tuple[str, str], PlaceAggregate]:
    groups: Dict[Tuple[str, str], PlaceAggregate] = {}
    for match in matches:
        key = match.place.place_key
        if match.photo.place_key != key:
            # photo no longer points at this place
            logger.debug("Ignoring photo %s for %s", match.photo.id, key)
            continue
        group = groups.get(key)
        if group is None:
            group = groups[key] = PlaceAggregate(place=match.place, first_match=match.matched_at)
        group.first_match = min(group.first_match, match.matched_at)
        group.photos[match.photo.id] = match.photo
    return groups


def to_feed_item(place: Place, aggregate: Optional[PlaceAggregate] = None) -> FeedItem:
    cover = aggregate.cover_photo if aggregate else None
    item = FeedItem(
        place_kind=place.kind,
        name=place.name,
        latitude=place.location.latitude,
        longitude=place.location.longitude,
        cover_image_ref=cover.storage_ref if cover else None,
        photo_count=aggregate.photo_count if aggregate else 0,
        newest_photo_timestamp=aggregate.newest_photo_timestamp if aggregate else None,
        capture_radius_m=place.capture_radius_m,
    )
    if isinstance(place, GlobalPoiInDB):
        item.global_poi_id = place.id
        item.address = place.address
        item.importance_score = place.importance_score
    elif isinstance(place, EphemeralSpotInDB):
        item.ephemeral_spot_id = place.id
        item.access_policy = place.access_policy
        item.is_trending = place.is_trending
        item.is_live = place.is_live
        item.expires_at = place.expires_at
    return item


def _ordered(groups: Iterable[PlaceAggregate],
             recency: Callable[[PlaceAggregate], datetime]) -> List[PlaceAggregate]:
    by_key = sorted(groups, key=lambda g: g.place.place_key)
    return sorted(by_key, key=recency, reverse=True)


def build_discovery_feed(matches: Iterable[Match]) -> List[FeedItem]:
    """Places with at least one match, most recent upload first."""
    groups = [g for g in group_matches(matches).values() if g.photo_count > 0]
    return [to_feed_item(g.place, g) for g in _ordered(groups, lambda g: g.newest_photo_timestamp)]


def build_historical_feed(matches: Iterable[Match]) -> List[FeedItem]:
    """Places ordered by their earliest matching trail point, most recently visited first."""
    groups = list(group_matches(matches).values())
    return [to_feed_item(g.place, g) for g in _ordered(groups, lambda g: g.first_match)]


def sign_covers(items: List[FeedItem], sign: Callable[[Optional[str]], Optional[str]]) -> List[FeedItem]:
    for item in items:
        if item.cover_image_ref:
            item.cover_image_url = sign(item.cover_image_ref)
    return items
