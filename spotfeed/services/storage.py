# spotfeed/services/storage.py
import logging
from datetime import timedelta
from typing import Optional
from firebase_admin import storage
from spotfeed.config import PHOTOS_BUCKET, SIGNED_URL_TTL

logger = logging.getLogger(__name__)


def object_name_from_ref(object_ref: str) -> str:
    """Older rows hold full URLs instead of object names; keep only the last path segment."""
    if object_ref.startswith("http"):
        return object_ref.rsplit("/", 1)[-1]
    return object_ref


class BlobSigner:
    def __init__(self, bucket_name: Optional[str] = PHOTOS_BUCKET, ttl: timedelta = SIGNED_URL_TTL):
        self.bucket_name = bucket_name
        self.ttl = ttl

    def sign(self, object_ref: Optional[str], bucket_name: Optional[str] = None,
             ttl: Optional[timedelta] = None) -> Optional[str]:
        """V4 signed GET URL, or None when the object cannot be signed."""
        if not object_ref or not object_ref.strip():
            return None
        object_name = object_name_from_ref(object_ref)
        bucket_name = bucket_name or self.bucket_name
        try:
            blob = storage.bucket(bucket_name).blob(object_name)
            return blob.generate_signed_url(expiration=ttl or self.ttl, version="v4", method="GET")
        except Exception as e:
            logger.error("Could not generate signed URL for object %s in bucket %s: %s",
                         object_name, bucket_name, e)
            return None
