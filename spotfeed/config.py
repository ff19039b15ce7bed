# spotfeed/config.py
import os, json
import logging
from datetime import timedelta
from dotenv import load_dotenv
import firebase_admin
from firebase_admin import credentials, firestore

load_dotenv()

logger = logging.getLogger(__name__)

FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET")
PHOTOS_BUCKET = os.getenv("PHOTOS_BUCKET", FIREBASE_STORAGE_BUCKET)
GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

DISCOVERY_SCAN_RADIUS_M = float(os.getenv("DISCOVERY_SCAN_RADIUS_M", "500"))
# Upper bound of any spot's capture radius, used to size the spatial prefilter
MAX_SPOT_CAPTURE_RADIUS_M = float(os.getenv("MAX_SPOT_CAPTURE_RADIUS_M", "1000"))
# Largest capture radius the rule table hands out (airport)
MAX_POI_CAPTURE_RADIUS_M = 1000.0
SIGNED_URL_TTL = timedelta(hours=int(os.getenv("SIGNED_URL_TTL_HOURS", "12")))

# Historical feed
DENSITY_PROBE_RADIUS_M = 50.0
# (minimum probe count exclusive, radius) checked top-down, last entry is the fallback
ADAPTIVE_RADIUS_TIERS = ((10, 50.0), (2, 100.0))
ADAPTIVE_RADIUS_DEFAULT_M = 300.0
HISTORICAL_LOOKBACK = timedelta(hours=5)
PLACE_PHOTOS_POI_RADIUS_M = 500.0

# Photo lifetime
SPOT_ONLY_TTL = timedelta(hours=48)
SHARED_TTL = timedelta(days=7)

# External directory
DIRECTORY_LOOKUP_RADIUS_M = 50
MIN_SPOT_CAPTURE_RADIUS_M = 10

# Ordered (tag, capture radius m, importance) entries, first match on the record's tags wins
PLACE_RULE_TABLE = (
    ("restaurant", 50, 9),
    ("cafe", 40, 8),
    ("bar", 60, 8),
    ("store", 70, 7),
    ("shopping_mall", 200, 7),
    ("park", 300, 5),
    ("tourist_attraction", 150, 6),
    ("museum", 100, 6),
    ("train_station", 250, 4),
    ("airport", 1000, 3),
)
DEFAULT_PLACE_RULE = (100, 0)

EXCLUDED_PLACE_TYPES = frozenset({
    "street_address", "route", "intersection", "political", "country",
    "administrative_area_level_1", "administrative_area_level_2",
    "locality", "sublocality", "postal_code", "plus_code", "doctor",
})


def init_firebase():
    if os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        cred = credentials.ApplicationDefault()
    elif os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON"):
        cred = credentials.Certificate(json.loads(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON")))
    elif os.path.exists("./serviceAccountKey.json"):
        cred = credentials.Certificate("./serviceAccountKey.json")
    else:
        raise RuntimeError("Firebase credentials not found.")

    options = {"storageBucket": FIREBASE_STORAGE_BUCKET} if FIREBASE_STORAGE_BUCKET else None
    firebase_admin.initialize_app(cred, options)
    return firestore.client()


try:
    db = init_firebase()
except Exception as e:
    logger.error("Error initializing Firebase: %s", e)
    db = None
