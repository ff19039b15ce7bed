from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from spotfeed.auth.firebase_auth import get_current_user_id
from spotfeed.core.exceptions import PlaceNotFoundError, TrailFormatError
from spotfeed.dependencies import get_discovery_service, get_historical_service
from spotfeed.models.feed import FeedItem, HistoricalSearchRequest
from spotfeed.models.photo import PhotoResponse, PhotoScope
from spotfeed.models.place import PlaceKind
from spotfeed.services.discovery import DiscoveryService
from spotfeed.services.historical import HistoricalFeedService
import logging

router = APIRouter(prefix="/places", tags=["Places"])
logger = logging.getLogger(__name__)

KIND_PATHS = {
    "global-pois": PlaceKind.GLOBAL_POI,
    "ephemeral-spots": PlaceKind.EPHEMERAL_SPOT,
}


@router.get("/taggable", response_model=List[FeedItem])
async def get_taggable_places(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    current_user_id: str = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return await service.get_taggable_places(lat, lon)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to retrieve taggable places: {e}")


@router.post("/{kind}/{place_id}/historical-photos", response_model=List[PhotoResponse])
async def get_historical_photos(
    kind: str,
    place_id: str,
    search_request: HistoricalSearchRequest,
    scope: PhotoScope = PhotoScope.OTHERS,
    current_user_id: str = Depends(get_current_user_id),
    service: HistoricalFeedService = Depends(get_historical_service),
):
    if kind not in KIND_PATHS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown place kind {kind}")
    try:
        return service.find_historical_photos(
            KIND_PATHS[kind], place_id, search_request.history, current_user_id, scope
        )
    except PlaceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TrailFormatError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.exception("Historical photos failed for %s %s", kind, place_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to retrieve photos: {e}")
