"""
Kilroy repository: creating and listing posts at a place.

Documents live in the DocumentStore, images in the blob store. Creating a
kilroy is not transactional: if the document write fails after the image
upload, the uploaded image is left behind and logged as orphaned.
"""

import secrets
import time
from collections.abc import Callable
from datetime import datetime

from ..error_handling import KilroyError, UploadError
from ..logging_config import get_logger, log_error, log_performance
from ..models.document_store import DocumentStore
from ..models.kilroy import Circle, Kilroy, normalize_caption
from ..models.place import Place, PlaceMetadata
from .place_resolver import BASE36_DIGITS
from .storage import StorageService

logger = get_logger(__name__)

KILROY_ID_SUFFIX_LENGTH = 7


def current_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_kilroy_id(now_millis: int | None = None) -> str:
    """
    Generate a kilroy id of the form "{millis}_{7 base36 chars}".

    Uniqueness is probabilistic only; two posts at the same place in the same
    millisecond share the random suffix space.
    """
    millis = current_millis() if now_millis is None else now_millis
    suffix = "".join(secrets.choice(BASE36_DIGITS) for _ in range(KILROY_ID_SUFFIX_LENGTH))
    return f"{millis}_{suffix}"


class KilroyRepository:
    """Creates and lists kilroys scoped to a place and circle."""

    def __init__(
        self,
        document_store: DocumentStore,
        storage_service: StorageService,
        clock: Callable[[], int] = current_millis,
    ) -> None:
        """
        Args:
            document_store: Places/kilroys document store
            storage_service: Blob store for kilroy images
            clock: Source of epoch-millisecond timestamps
        """
        self.document_store = document_store
        self.storage_service = storage_service
        self.clock = clock

    def ensure_place(self, place: Place) -> None:
        """
        Write place metadata the first time anything targets the place.

        Two first posters may both see the place missing and both write it;
        the store replaces by id so the last write simply wins.
        """
        if self.document_store.get_place(place.place_id) is not None:
            return

        metadata = PlaceMetadata.from_place(place, created_at=self.clock())
        self.document_store.set_place(metadata)
        logger.info("place_metadata_created", place_id=place.place_id)

    def list_posts(self, place_id: str, circle: Circle | None = None) -> list[Kilroy]:
        """
        List a place's kilroys, newest first.

        Args:
            place_id: Place to list
            circle: Only return kilroys in exactly this circle

        Returns:
            Kilroys ordered by created_at descending

        Raises:
            DatabaseError: If the query fails
        """
        kilroys = self.document_store.query_kilroys(place_id, circle=circle)
        logger.debug(
            "kilroys_listed",
            place_id=place_id,
            circle=circle.value if circle else None,
            count=len(kilroys),
        )
        return kilroys

    def has_any_posts(self, place_id: str) -> bool:
        """
        Check whether anything has been left at a place.

        Raises:
            DatabaseError: If the query fails; callers that only use this as a hint swallow it
        """
        return len(self.document_store.query_kilroys(place_id, limit=1)) > 0

    def create_post(self, place: Place, image_blob: bytes, caption: str | None, circle: Circle) -> Kilroy:
        """
        Create a kilroy.

        Steps run strictly in order: ensure place metadata, upload the image,
        look up its public URL, write the document.

        Args:
            place: Place the kilroy is left at
            image_blob: Normalized JPEG bytes
            caption: Free text, trimmed and capped at 200 characters
            circle: Circle to store the kilroy under

        Returns:
            Kilroy: The stored kilroy

        Raises:
            UploadError: If any step fails
        """
        start_time = datetime.now()
        kilroy_id = generate_kilroy_id(self.clock())

        try:
            self.ensure_place(place)
            gcs_path = self.storage_service.upload_kilroy_image(place.place_id, kilroy_id, image_blob)
            image_url = self.storage_service.get_public_url(gcs_path)
        except KilroyError as e:
            raise UploadError(
                f"Failed to create kilroy at {place.place_id}: {e}",
                code="kilroy_create_failed",
                details={"place_id": place.place_id, "kilroy_id": kilroy_id, "cause_code": e.code},
                original_exception=e,
            ) from e

        kilroy = Kilroy(
            id=kilroy_id,
            place_id=place.place_id,
            image_url=image_url,
            caption=normalize_caption(caption),
            circle=circle,
            created_at=self.clock(),
        )

        try:
            self.document_store.set_kilroy(kilroy)
        except KilroyError as e:
            log_error(e, {"operation": "create_post", "orphaned_blob": gcs_path, "kilroy_id": kilroy_id})
            logger.warning("kilroy_image_orphaned", gcs_path=gcs_path, place_id=place.place_id, kilroy_id=kilroy_id)
            raise UploadError(
                f"Failed to save kilroy {kilroy_id}: {e}",
                code="kilroy_create_failed",
                details={"place_id": place.place_id, "kilroy_id": kilroy_id, "cause_code": e.code},
                original_exception=e,
            ) from e

        duration = (datetime.now() - start_time).total_seconds()
        log_performance("create_kilroy", duration, place_id=place.place_id, file_size=len(image_blob))
        logger.info(
            "kilroy_created",
            place_id=place.place_id,
            kilroy_id=kilroy_id,
            circle=circle.value,
            caption_length=len(kilroy.caption),
        )
        return kilroy
