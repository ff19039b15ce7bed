from typing import Dict, Any, List, Set, Tuple, Type
from google.cloud.firestore import GeoPoint
from spotfeed.models.base import DocumentInDB
import geohash2
import logging
import math

logger = logging.getLogger(__name__)

GEOHASH_PRECISION = 9
EARTH_RADIUS_M = 6378137.0
METERS_PER_DEGREE = math.pi * EARTH_RADIUS_M / 180


def _plain(value: Any) -> Any:
    if isinstance(value, GeoPoint):
        return {"_latitude": value.latitude, "_longitude": value.longitude}
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def convert_doc_to_model(doc_id: str, doc_data: Dict[str, Any], Model: Type) -> Any:
    try:
        data = {"id": doc_id, **{k: _plain(v) for k, v in doc_data.items()}}
        data = DocumentInDB.convert_timestamp_to_datetime(data)
        return Model.model_validate(data)
    except Exception as e:
        logger.error("Error converting document %s to %s: %s", doc_id, Model.__name__, e)
        raise


def encode_geohash(lat: float, lon: float) -> str:
    return geohash2.encode(lat, lon, precision=GEOHASH_PRECISION)


def _cell_size_m(lat: float, lon: float, precision: int) -> Tuple[float, float, float, float]:
    """(height m, width m, lat step deg, lon step deg) of the cell containing lat/lon."""
    _, _, lat_err, lon_err = geohash2.decode_exactly(geohash2.encode(lat, lon, precision=precision))
    lat_step, lon_step = 2 * float(lat_err), 2 * float(lon_err)
    height = lat_step * METERS_PER_DEGREE
    width = lon_step * METERS_PER_DEGREE * math.cos(math.radians(lat))
    return height, width, lat_step, lon_step


def geohash_cells(lat: float, lon: float, radius: float) -> Set[str]:
    """
    Geohash cells whose union covers the circle of radius meters around lat/lon.

    Picks the finest precision whose cells are at least radius on each side, so the
    cell holding the center plus its eight neighbours enclose the whole circle.
    """
    for precision in range(GEOHASH_PRECISION, 0, -1):
        height, width, lat_step, lon_step = _cell_size_m(lat, lon, precision)
        if min(height, width) >= radius or precision == 1:
            break

    cells = set()
    for d_lat in (-lat_step, 0.0, lat_step):
        for d_lon in (-lon_step, 0.0, lon_step):
            n_lat = max(-90.0, min(90.0, lat + d_lat))
            n_lon = (lon + d_lon + 180.0) % 360.0 - 180.0
            cells.add(geohash2.encode(n_lat, n_lon, precision=precision))
    return cells


def geohash_ranges(lat: float, lon: float, radius: float) -> List[Tuple[str, str]]:
    """Inclusive [start, end] string ranges for Firestore geohash prefix queries."""
    return [(cell, cell + "~") for cell in sorted(geohash_cells(lat, lon, radius))]
