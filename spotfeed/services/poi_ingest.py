# spotfeed/services/poi_ingest.py
import logging
from typing import List
from google.api_core.exceptions import GoogleAPIError
from spotfeed.config import DIRECTORY_LOOKUP_RADIUS_M
from spotfeed.db.place_store import PlaceStore
from spotfeed.models.place import GlobalPoiInDB
from spotfeed.services.classifier import PlaceClassifier
from spotfeed.services.directory import GooglePlacesDirectory

logger = logging.getLogger(__name__)


class PoiIngestService:
    """Pulls nearby POIs from the directory, classifies them and upserts them as Global POIs."""

    def __init__(self, directory: GooglePlacesDirectory, classifier: PlaceClassifier, places: PlaceStore):
        self.directory = directory
        self.classifier = classifier
        self.places = places

    async def refresh_nearby(self, lat: float, lon: float,
                             radius: int = DIRECTORY_LOOKUP_RADIUS_M) -> List[GlobalPoiInDB]:
        records = await self.directory.lookup_nearby(lat, lon, radius)
        stored = []
        for record in records:
            if self.classifier.is_excluded(record.tags):
                continue
            rule = self.classifier.classify(record.tags)
            try:
                stored.append(
                    self.places.upsert_global_poi(
                        external_id=record.external_id,
                        name=record.name,
                        address=record.address,
                        location=record.location,
                        capture_radius_m=rule.capture_radius_m,
                        importance_score=rule.importance_score,
                    )
                )
            except (GoogleAPIError, RuntimeError) as e:
                logger.error("Could not store POI %s: %s", record.external_id, e)
        logger.info("Ingested %d of %d directory results near %s,%s", len(stored), len(records), lat, lon)
        return stored
