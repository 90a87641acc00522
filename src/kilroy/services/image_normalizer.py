"""Image normalization service for Kilroy uploads."""

import io
import os
from dataclasses import dataclass
from datetime import datetime

from PIL import Image, ImageOps, UnidentifiedImageError

from ..error_handling import ImageProcessingError, ValidationError
from ..logging_config import get_logger, log_error, log_performance

try:
    from pillow_heif import register_heif_opener  # type: ignore[import-untyped]

    register_heif_opener()
    HEIF_AVAILABLE = True
except ImportError:
    HEIF_AVAILABLE = False

logger = get_logger(__name__)

OUTPUT_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class NormalizedImage:
    """An encoded image that respects the upload bounds (best effort on size)."""

    data: bytes
    width: int
    height: int
    quality: float
    attempts: int
    content_type: str = OUTPUT_CONTENT_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


def is_image_upload(content_type: str | None) -> bool:
    """Check whether an uploaded file declares an image content type."""
    return bool(content_type) and str(content_type).lower().startswith("image/")


class ImageNormalizer:
    """
    Bounds width and byte size of uploaded photos.

    Images wider than MAX_WIDTH are scaled down with their aspect ratio kept,
    then encoded as JPEG. While the result is larger than MAX_BYTES the
    quality is lowered one step at a time, never below MIN_QUALITY. The last
    encode is returned even if it is still too large.
    """

    # Quality values are whole percent so the ladder has no float drift
    QUALITY_STEP = 10

    def __init__(self) -> None:
        self.MAX_WIDTH = int(os.getenv("IMAGE_MAX_WIDTH", 1200))
        self.MAX_BYTES = int(os.getenv("IMAGE_MAX_BYTES", int(1.5 * 1024 * 1024)))
        self.INITIAL_QUALITY = round(float(os.getenv("IMAGE_INITIAL_QUALITY", 0.75)) * 100)
        self.MIN_QUALITY = round(float(os.getenv("IMAGE_MIN_QUALITY", 0.3)) * 100)

        if not HEIF_AVAILABLE:
            logger.warning("heif_support_unavailable", message="Install pillow-heif for HEIC support")

    def calculate_target_size(self, original_size: tuple[int, int]) -> tuple[int, int]:
        """
        Calculate output dimensions.

        Args:
            original_size: Decoded size as (width, height)

        Returns:
            tuple: (width, height) no wider than MAX_WIDTH
        """
        width, height = original_size
        if width <= self.MAX_WIDTH:
            return (width, height)

        # Halves round up
        new_height = max(1, int(height * self.MAX_WIDTH / width + 0.5))
        return (self.MAX_WIDTH, new_height)

    def quality_ladder(self) -> list[int]:
        """
        Return the encoder qualities tried in order.

        Returns:
            list: Descending qualities, starting at INITIAL_QUALITY, none below MIN_QUALITY
        """
        ladder = [self.INITIAL_QUALITY]
        while ladder[-1] - self.QUALITY_STEP >= self.MIN_QUALITY:
            ladder.append(ladder[-1] - self.QUALITY_STEP)
        return ladder

    def _decode(self, image_data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
            return image
        except (UnidentifiedImageError, OSError, ValueError) as e:
            log_error(e, {"operation": "decode_image", "file_size": len(image_data)})
            raise ImageProcessingError(
                f"Could not load image: {e}",
                code="image_decode_failed",
                user_message="That file could not be read as an image.",
                details={"file_size": len(image_data), "operation": "decode_image"},
                retry_suggested=False,
                original_exception=e,
            ) from e

    def _render(self, image: Image.Image) -> tuple[Image.Image, tuple[int, int]]:
        """Render the decoded image into an RGB bitmap no wider than MAX_WIDTH."""
        target_size = image.size
        try:
            # Orientation swaps width and height, so measure after transposing
            image = ImageOps.exif_transpose(image)
            target_size = self.calculate_target_size(image.size)
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            if image.size != target_size:
                image = image.resize(target_size, Image.Resampling.LANCZOS)
            return image, target_size
        except (OSError, ValueError, MemoryError) as e:
            log_error(e, {"operation": "render_image", "target_size": target_size})
            raise ImageProcessingError(
                f"Could not get rendering surface: {e}",
                code="render_surface_unavailable",
                details={"target_size": target_size, "operation": "render_image"},
                original_exception=e,
            ) from e

    def _encode(self, image: Image.Image, quality: int) -> bytes:
        buffer = io.BytesIO()
        try:
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
        except (OSError, ValueError) as e:
            log_error(e, {"operation": "encode_image", "quality": quality})
            raise ImageProcessingError(
                f"Could not compress image: {e}",
                code="image_encode_failed",
                details={"quality": quality, "operation": "encode_image"},
                original_exception=e,
            ) from e
        return buffer.getvalue()

    def normalize(self, image_data: bytes) -> NormalizedImage:
        """
        Produce a size- and dimension-bounded JPEG.

        Args:
            image_data: Raw bytes of any decodable image

        Returns:
            NormalizedImage: Encoded JPEG with its final dimensions and quality

        Raises:
            ValidationError: If no data was supplied
            ImageProcessingError: If the image cannot be decoded, rendered or encoded
        """
        if not image_data:
            raise ValidationError(
                "Empty image upload",
                code="empty_image",
                user_message="Please select an image file",
            )

        start_time = datetime.now()

        with self._decode(image_data) as decoded:
            original_size = decoded.size
            rendered, target_size = self._render(decoded)

        encoded = b""
        attempts = 0
        ladder = self.quality_ladder()
        quality = ladder[0]
        for quality in ladder:
            encoded = self._encode(rendered, quality)
            attempts += 1
            if len(encoded) <= self.MAX_BYTES:
                break
            logger.debug("image_over_size_budget", size=len(encoded), max_bytes=self.MAX_BYTES, quality=quality)

        if len(encoded) > self.MAX_BYTES:
            logger.warning(
                "image_size_budget_exceeded_at_floor",
                size=len(encoded),
                max_bytes=self.MAX_BYTES,
                quality=quality,
            )

        duration = (datetime.now() - start_time).total_seconds()
        log_performance(
            "normalize_image",
            duration,
            original_size=original_size,
            output_size=target_size,
            original_file_size=len(image_data),
            output_file_size=len(encoded),
            quality=quality,
            attempts=attempts,
        )

        return NormalizedImage(
            data=encoded,
            width=target_size[0],
            height=target_size[1],
            quality=quality / 100,
            attempts=attempts,
        )


image_normalizer = ImageNormalizer()


def get_image_normalizer() -> ImageNormalizer:
    """
    Get the global image normalizer instance.

    Returns:
        ImageNormalizer: Global image normalizer instance
    """
    return image_normalizer
