# spotfeed/models/base.py
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from google.protobuf.timestamp_pb2 import Timestamp

TIMESTAMP_FIELDS = (
    "created_at", "uploaded_at", "expires_at", "scheduled_live_at", "timestamp",
)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentInDB(BaseModel):
    id: str = Field(..., description="Firestore document ID")
    created_at: Optional[datetime] = None

    @classmethod
    def convert_timestamp_to_datetime(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        for key in TIMESTAMP_FIELDS:
            value = data.get(key)
            if isinstance(value, Timestamp):
                data[key] = value.ToDatetime(tzinfo=timezone.utc)
            elif isinstance(value, datetime):
                data[key] = as_utc(value)
        return data
