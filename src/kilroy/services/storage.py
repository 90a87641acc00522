"""Blob store for kilroy images on Google Cloud Storage."""

from datetime import datetime

from google.cloud import storage  # type: ignore[attr-defined]
from google.cloud.exceptions import GoogleCloudError

from ..config import get_gcs_bucket, get_project_id, get_public_base_url
from ..error_handling import StorageError
from ..logging_config import get_logger
from .image_normalizer import OUTPUT_CONTENT_TYPE

logger = get_logger(__name__)


class StorageService:
    """Service for Google Cloud Storage operations."""

    def __init__(self, bucket_name: str | None = None, project_id: str | None = None) -> None:
        """
        Initialize the storage service.

        Args:
            bucket_name: GCS bucket for kilroy images (defaults to GCS_IMAGES_BUCKET)
            project_id: GCP project ID (defaults to GOOGLE_CLOUD_PROJECT)

        Configuration:
            GCS_IMAGES_BUCKET: Bucket for storing kilroy images
            GOOGLE_CLOUD_PROJECT: GCP project ID
            GCS_PUBLIC_BASE_URL: Optional base URL (e.g. a CDN) used instead of the bucket's public URL
        """
        try:
            self.bucket_name = bucket_name or get_gcs_bucket()
            self.project_id = project_id or get_project_id()
        except ValueError as e:
            raise StorageError(
                f"Storage is not configured: {e}", code="storage_not_configured", original_exception=e
            ) from e
        self.public_base_url = get_public_base_url()

        try:
            self.client = storage.Client(project=self.project_id)
            self.bucket = self.client.bucket(self.bucket_name)
            logger.info("storage_service_initialized", bucket=self.bucket_name, project_id=self.project_id)
        except Exception as e:
            raise StorageError(f"Failed to initialize GCS client: {e}", original_exception=e) from e

    def get_kilroy_image_path(self, place_id: str, kilroy_id: str) -> str:
        """
        Generate the object path for a kilroy image.

        Args:
            place_id: Place the kilroy was left at
            kilroy_id: Kilroy identifier

        Returns:
            str: GCS object path namespaced by place
        """
        return f"kilroys/{place_id}/{kilroy_id}.jpg"

    def upload_kilroy_image(self, place_id: str, kilroy_id: str, image_data: bytes) -> str:
        """
        Upload a normalized kilroy image.

        Args:
            place_id: Place the kilroy was left at
            kilroy_id: Kilroy identifier
            image_data: Encoded JPEG bytes

        Returns:
            str: GCS object path of the uploaded image

        Raises:
            StorageError: If upload fails
        """
        gcs_path = self.get_kilroy_image_path(place_id, kilroy_id)
        try:
            blob = self.bucket.blob(gcs_path)
            blob.metadata = {
                "place_id": place_id,
                "kilroy_id": kilroy_id,
                "uploaded_at": datetime.now().isoformat(),
                "file_size": str(len(image_data)),
            }
            blob.upload_from_string(image_data, content_type=OUTPUT_CONTENT_TYPE)

            logger.info("kilroy_image_uploaded", gcs_path=gcs_path, file_size=len(image_data))
            return gcs_path

        except GoogleCloudError as e:
            raise StorageError(
                f"Failed to upload image '{gcs_path}': {e}",
                code="image_upload_failed",
                details={"gcs_path": gcs_path, "file_size": len(image_data)},
                original_exception=e,
            ) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error uploading '{gcs_path}': {e}",
                code="image_upload_failed",
                details={"gcs_path": gcs_path, "file_size": len(image_data)},
                original_exception=e,
            ) from e

    def get_public_url(self, gcs_path: str) -> str:
        """
        Get the publicly retrievable URL for an uploaded object.

        Raises:
            StorageError: If the URL cannot be produced
        """
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{gcs_path}"

        try:
            public_url: str = self.bucket.blob(gcs_path).public_url
            return public_url
        except Exception as e:
            raise StorageError(
                f"Failed to get URL for '{gcs_path}': {e}",
                code="image_url_failed",
                details={"gcs_path": gcs_path},
                original_exception=e,
            ) from e


_storage_service: StorageService | None = None


def get_storage_service(bucket_name: str | None = None, project_id: str | None = None) -> StorageService:
    """Get the global storage service, creating it on first use."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService(bucket_name, project_id)
    return _storage_service
