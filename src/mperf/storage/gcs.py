"""Google Cloud Storage object store."""

import logging
import posixpath
from typing import Iterable, Optional

from google.api_core.exceptions import (
    InternalServerError,
    ServiceUnavailable,
    TooManyRequests,
)
from google.cloud import storage
from google.cloud.exceptions import Forbidden, NotFound
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from mperf.exceptions import MissingParentDirectoryError, StorageError, TransientUploadError
from mperf.storage.base import ObjectStore

logger = logging.getLogger(__name__)

DIRECTORY_CONTENT_TYPE = "application/x-directory"


class GCSObjectStore(ObjectStore):
    """Google Cloud Storage object store.

    GCS has a flat namespace, so directories are emulated with zero-byte
    marker objects whose names end in '/'. A write whose parent marker is
    absent fails with MissingParentDirectoryError.
    """

    def __init__(self, bucket_name: str, project_id: str | None = None):
        self.bucket_name = bucket_name
        self.project_id = project_id
        self._client: Optional[storage.Client] = None
        self._bucket: Optional[storage.Bucket] = None

    def _get_bucket(self) -> storage.Bucket:
        """Lazy-load and cache GCS bucket."""
        if self._bucket is None:
            if not self.bucket_name:
                raise StorageError("GCS_BUCKET_NAME not configured")

            self._client = storage.Client(project=self.project_id)
            self._bucket = self._client.bucket(self.bucket_name)

        return self._bucket

    @staticmethod
    def _marker_name(path: str) -> str:
        return path.strip("/") + "/"

    async def write_object(
        self, path: str, chunks: Iterable[bytes], size: int, content_type: str
    ) -> int:
        """Stream chunks into a blob after checking its parent directory."""
        return await self._run_blocking(self._write, path.strip("/"), chunks, size, content_type)

    def _write(self, object_name: str, chunks: Iterable[bytes], size: int, content_type: str) -> int:
        try:
            bucket = self._get_bucket()
            parent = posixpath.dirname(object_name)
            if parent and not bucket.blob(self._marker_name(parent)).exists():
                raise MissingParentDirectoryError(
                    f"Parent directory does not exist: gs://{self.bucket_name}/{parent}"
                )

            blob = bucket.blob(object_name)
            blob.content_type = content_type

            written = 0
            with blob.open("wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
        except StorageError:
            raise
        except NotFound as e:
            raise TransientUploadError(f"Bucket not found: gs://{self.bucket_name}") from e
        except Forbidden as e:
            raise TransientUploadError(
                f"Access denied: gs://{self.bucket_name}/{object_name}"
            ) from e
        except Exception as e:
            logger.error(
                "Failed to upload object to GCS",
                extra={
                    "bucket": self.bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                },
            )
            raise TransientUploadError(f"Failed to upload object: {e}") from e

        if written != size:
            raise TransientUploadError(
                f"Size mismatch for gs://{self.bucket_name}/{object_name}: "
                f"declared {size}, wrote {written}"
            )
        return written

    async def mkdirp(self, path: str) -> None:
        """Create marker objects for the directory and all its ancestors."""
        await self._run_blocking(self._mkdirp, path.strip("/"))

    def _mkdirp(self, dir_name: str) -> None:
        parts = [p for p in dir_name.split("/") if p]
        try:
            bucket = self._get_bucket()
            for i in range(1, len(parts) + 1):
                marker = bucket.blob(self._marker_name("/".join(parts[:i])))
                if not marker.exists():
                    self._put_marker(marker)
        except StorageError:
            raise
        except Exception as e:
            logger.error(
                "Failed to create directory in GCS",
                extra={"bucket": self.bucket_name, "path": dir_name, "error": str(e)},
            )
            raise StorageError(f"Failed to create directory {dir_name}: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(
            (ServiceUnavailable, TooManyRequests, InternalServerError, ConnectionError)
        ),
        reraise=True,
    )
    def _put_marker(self, marker: storage.Blob) -> None:
        # Concurrent creators write the same empty object; last writer wins
        marker.upload_from_string(b"", content_type=DIRECTORY_CONTENT_TYPE)

    def get_backend_name(self) -> str:
        return "gcs"
