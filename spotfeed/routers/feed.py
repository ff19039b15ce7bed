from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
from spotfeed.auth.firebase_auth import get_current_user_id
from spotfeed.core.exceptions import TrailFormatError
from spotfeed.dependencies import get_discovery_service, get_historical_service
from spotfeed.models.feed import FeedItem, HistoricalSearchRequest
from spotfeed.services.discovery import DiscoveryService
from spotfeed.services.historical import HistoricalFeedService
import logging

router = APIRouter(prefix="/feed", tags=["Feed"])
logger = logging.getLogger(__name__)


@router.get("/discover", response_model=List[FeedItem])
async def get_discovered_spots(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    current_user_id: str = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return service.get_discovered_spots(lat, lon)
    except Exception as e:
        logger.exception("Discovery feed failed for %s", current_user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to build discovery feed: {e}")


@router.post("/historical", response_model=List[FeedItem])
async def get_historical_feed(
    search_request: HistoricalSearchRequest,
    current_user_id: str = Depends(get_current_user_id),
    service: HistoricalFeedService = Depends(get_historical_service),
):
    try:
        return service.generate_historical_feed(search_request.history)
    except TrailFormatError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.exception("Historical feed failed for %s", current_user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to build historical feed: {e}")


@router.get("/trending", response_model=List[FeedItem])
async def get_trending_spots(service: DiscoveryService = Depends(get_discovery_service)):
    try:
        return service.get_trending_spots()
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to retrieve trending spots: {e}")


@router.get("/my-spots", response_model=List[FeedItem])
async def get_my_spots(
    current_user_id: str = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    try:
        return service.get_created_spots(current_user_id)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to retrieve your spots: {e}")
