from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import (
    ORIGIN,
    FakeSigner,
    InMemoryPhotoStore,
    InMemoryPlaceStore,
    make_photo,
    make_poi,
    make_spot,
)
from spotfeed.auth.firebase_auth import get_current_user_id
from spotfeed.dependencies import get_discovery_service, get_historical_service
from spotfeed.main import app
from spotfeed.models.base import utcnow
from spotfeed.services.discovery import DiscoveryService
from spotfeed.services.historical import HistoricalFeedService


@pytest.fixture
def now():
    return utcnow()


@pytest.fixture
def stores(now):
    poi = make_poi("p1", *ORIGIN, name="Town Hall")
    spot = make_spot("s1", *ORIGIN, creator_id="me", expires_at=now + timedelta(days=1),
                     is_trending=True, created_at=now - timedelta(hours=3))
    photos = [
        make_photo("ph1", poi, now - timedelta(hours=1), uploader_id="them"),
        make_photo("ph2", spot, now - timedelta(hours=2), uploader_id="me"),
    ]
    return InMemoryPlaceStore([poi], [spot]), InMemoryPhotoStore(photos)


@pytest.fixture
def client(stores):
    places, photos = stores
    signer = FakeSigner()
    app.dependency_overrides[get_current_user_id] = lambda: "me"
    app.dependency_overrides[get_discovery_service] = lambda: DiscoveryService(places, photos, signer)
    app.dependency_overrides[get_historical_service] = lambda: HistoricalFeedService(places, photos, signer)
    yield TestClient(app)
    app.dependency_overrides.clear()


def trail(now):
    return {"history": [{"latitude": ORIGIN[0], "longitude": ORIGIN[1], "timestamp": now.isoformat()}]}


def test_root():
    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert "message" in response.json()


def test_discover(client):
    response = client.get("/feed/discover", params={"lat": ORIGIN[0], "lon": ORIGIN[1]})

    assert response.status_code == 200
    body = response.json()
    assert [item["global_poi_id"] or item["ephemeral_spot_id"] for item in body] == ["p1", "s1"]
    assert body[0]["cover_image_url"] == "https://signed.example/ph1.jpg"


def test_discover_validates_coordinates(client):
    response = client.get("/feed/discover", params={"lat": 120, "lon": 0})

    assert response.status_code == 422


def test_historical(client, now):
    response = client.post("/feed/historical", json=trail(now))

    assert response.status_code == 200
    # both visited at the same point, so the place key breaks the tie
    assert [item["place_kind"] for item in response.json()] == ["EPHEMERAL_SPOT", "GLOBAL_POI"]


def test_historical_null_history(client):
    response = client.post("/feed/historical", json={"history": None})

    assert response.status_code == 200
    assert response.json() == []


def test_historical_malformed_point(client):
    response = client.post("/feed/historical", json={"history": [{"latitude": 10}]})

    assert response.status_code == 422


def test_trending_and_my_spots(client):
    trending = client.get("/feed/trending")
    mine = client.get("/feed/my-spots")

    assert [item["ephemeral_spot_id"] for item in trending.json()] == ["s1"]
    assert [item["ephemeral_spot_id"] for item in mine.json()] == ["s1"]


def test_taggable(client):
    response = client.get("/places/taggable", params={"lat": ORIGIN[0], "lon": ORIGIN[1]})

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Spot s1", "Town Hall"]


def test_historical_photos_scopes(client, now):
    others = client.post("/places/global-pois/p1/historical-photos", json=trail(now))
    mine = client.post("/places/ephemeral-spots/s1/historical-photos",
                       params={"scope": "mine"}, json=trail(now))

    assert [p["photo_id"] for p in others.json()] == ["ph1"]
    assert [p["photo_id"] for p in mine.json()] == ["ph2"]


def test_historical_photos_unknown_place(client, now):
    assert client.post("/places/global-pois/nope/historical-photos", json=trail(now)).status_code == 404
    assert client.post("/places/volcanoes/p1/historical-photos", json=trail(now)).status_code == 404


def test_requires_token():
    app.dependency_overrides[get_discovery_service] = lambda: None
    try:
        response = TestClient(app).get("/feed/discover", params={"lat": 0, "lon": 0})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401
