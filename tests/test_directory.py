from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.api_core.exceptions import GoogleAPIError

from conftest import make_poi
from spotfeed.core.geopoint import GeoPointModel
from spotfeed.services.classifier import default_classifier
from spotfeed.services.directory import GooglePlacesDirectory, RawPoiRecord
from spotfeed.services.poi_ingest import PoiIngestService

NEARBY_PAYLOAD = {
    "status": "OK",
    "results": [
        {
            "place_id": "g-cafe",
            "name": "Corner Cafe",
            "vicinity": "Main St 1",
            "geometry": {"location": {"lat": 50.0001, "lng": 8.0001}},
            "types": ["cafe", "food", "point_of_interest"],
        },
        {
            "place_id": "g-broken",
            "name": "No geometry",
            "types": ["store"],
        },
    ],
}


def directory_with(handler, api_key="test-key"):
    return GooglePlacesDirectory(api_key=api_key, transport=httpx.MockTransport(handler))


class TestGooglePlacesDirectory:
    @pytest.mark.asyncio
    async def test_maps_results(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=NEARBY_PAYLOAD)

        records = await directory_with(handler).lookup_nearby(50.0, 8.0, 50)

        assert [r.external_id for r in records] == ["g-cafe"]
        assert records[0].tags == ["cafe", "food", "point_of_interest"]
        assert records[0].address == "Main St 1"
        assert records[0].location.latitude == 50.0001
        assert seen["params"]["location"] == "50.0,8.0"
        assert seen["params"]["radius"] == "50"

    @pytest.mark.asyncio
    async def test_zero_results(self):
        directory = directory_with(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))

        assert await directory.lookup_nearby(50.0, 8.0, 50) == []

    @pytest.mark.asyncio
    async def test_error_status(self):
        payload = {"status": "REQUEST_DENIED", "error_message": "bad key", "results": NEARBY_PAYLOAD["results"]}
        directory = directory_with(lambda request: httpx.Response(200, json=payload))

        assert await directory.lookup_nearby(50.0, 8.0, 50) == []

    @pytest.mark.asyncio
    async def test_http_failure(self):
        directory = directory_with(lambda request: httpx.Response(500, text="oops"))

        assert await directory.lookup_nearby(50.0, 8.0, 50) == []

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        assert await directory_with(handler).lookup_nearby(50.0, 8.0, 50) == []

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        handler = MagicMock()

        assert await directory_with(handler, api_key=None).lookup_nearby(50.0, 8.0, 50) == []
        handler.assert_not_called()


def record(external_id, tags, lat=50.0, lon=8.0):
    return RawPoiRecord(
        external_id=external_id,
        name=external_id.title(),
        location=GeoPointModel(latitude=lat, longitude=lon),
        tags=tags,
    )


class TestPoiIngest:
    @pytest.mark.asyncio
    async def test_classifies_and_upserts(self):
        directory = AsyncMock()
        directory.lookup_nearby.return_value = [
            record("airport", ["airport", "restaurant"]),
            record("street", ["route"]),
            record("unknown", ["establishment"]),
        ]
        places = MagicMock()
        places.upsert_global_poi.side_effect = lambda **kw: make_poi(kw["external_id"], 50.0, 8.0,
                                                                     radius=kw["capture_radius_m"])

        stored = await PoiIngestService(directory, default_classifier, places).refresh_nearby(50.0, 8.0)

        assert [p.id for p in stored] == ["airport", "unknown"]
        directory.lookup_nearby.assert_awaited_once_with(50.0, 8.0, 50)
        first, second = places.upsert_global_poi.call_args_list
        assert (first.kwargs["capture_radius_m"], first.kwargs["importance_score"]) == (1000, 3)
        assert (second.kwargs["capture_radius_m"], second.kwargs["importance_score"]) == (100, 0)

    @pytest.mark.asyncio
    async def test_store_failure_skips_record(self):
        directory = AsyncMock()
        directory.lookup_nearby.return_value = [record("cafe", ["cafe"]), record("bar", ["bar"])]
        places = MagicMock()
        places.upsert_global_poi.side_effect = [GoogleAPIError("write failed"), make_poi("bar", 50.0, 8.0)]

        stored = await PoiIngestService(directory, default_classifier, places).refresh_nearby(50.0, 8.0)

        assert [p.id for p in stored] == ["bar"]
