# spotfeed/core/geopoint.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from google.cloud.firestore import GeoPoint
from geopy.distance import geodesic


class GeoPointModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    latitude: float = Field(..., alias="_latitude", ge=-90, le=90)
    longitude: float = Field(..., alias="_longitude", ge=-180, le=180)

    @model_validator(mode="before")
    @classmethod
    def validate_geopoint(cls, v):
        if isinstance(v, cls):
            return v
        if isinstance(v, GeoPoint):
            return {"latitude": v.latitude, "longitude": v.longitude}
        elif isinstance(v, dict):
            # Accept both alias and non-alias keys
            if 'latitude' in v and 'longitude' in v:
                return {"latitude": v['latitude'], "longitude": v['longitude']}
            elif '_latitude' in v and '_longitude' in v:
                return {"latitude": v['_latitude'], "longitude": v['_longitude']}
        elif isinstance(v, (tuple, list)) and len(v) == 2:
            return {"latitude": v[0], "longitude": v[1]}
        raise ValueError("Invalid GeoPoint format")

    def to_firestore_geopoint(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)

    def distance_to(self, other: "GeoPointModel") -> float:
        """WGS-84 geodesic distance in meters."""
        return geodesic((self.latitude, self.longitude), (other.latitude, other.longitude)).meters

    def is_within(self, other: "GeoPointModel", radius_m: float) -> bool:
        return self.distance_to(other) <= radius_m
