"""Object store backends used as upload sinks."""

from mperf.core.config import Settings
from mperf.storage.base import ObjectStore
from mperf.storage.gcs import GCSObjectStore
from mperf.storage.local import LocalObjectStore


def create_store(settings: Settings) -> ObjectStore:
    """Build the object store selected by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "gcs":
        return GCSObjectStore(
            bucket_name=settings.GCS_BUCKET_NAME,
            project_id=settings.GCP_PROJECT_ID or None,
        )
    return LocalObjectStore(settings.LOCAL_ROOT)


__all__ = [
    "ObjectStore",
    "LocalObjectStore",
    "GCSObjectStore",
    "create_store",
]
