# spotfeed/dependencies.py
from fastapi import Depends, HTTPException, status
from spotfeed import config
from spotfeed.db.photo_store import PhotoStore
from spotfeed.db.place_store import PlaceStore
from spotfeed.services.classifier import default_classifier
from spotfeed.services.directory import GooglePlacesDirectory
from spotfeed.services.discovery import DiscoveryService
from spotfeed.services.historical import HistoricalFeedService
from spotfeed.services.poi_ingest import PoiIngestService
from spotfeed.services.storage import BlobSigner


def get_db():
    if config.db is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Firestore not initialized.")
    return config.db


def get_place_store(db=Depends(get_db)) -> PlaceStore:
    return PlaceStore(db)


def get_photo_store(db=Depends(get_db), places: PlaceStore = Depends(get_place_store)) -> PhotoStore:
    return PhotoStore(db, places)


def get_signer() -> BlobSigner:
    return BlobSigner()


def get_ingest_service(places: PlaceStore = Depends(get_place_store)) -> PoiIngestService:
    return PoiIngestService(GooglePlacesDirectory(), default_classifier, places)


def get_discovery_service(
    places: PlaceStore = Depends(get_place_store),
    photos: PhotoStore = Depends(get_photo_store),
    signer: BlobSigner = Depends(get_signer),
    ingest: PoiIngestService = Depends(get_ingest_service),
) -> DiscoveryService:
    return DiscoveryService(places, photos, signer, ingest)


def get_historical_service(
    places: PlaceStore = Depends(get_place_store),
    photos: PhotoStore = Depends(get_photo_store),
    signer: BlobSigner = Depends(get_signer),
) -> HistoricalFeedService:
    return HistoricalFeedService(places, photos, signer)
