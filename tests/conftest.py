"""
Pytest configuration and fixtures for Kilroy tests.
"""

import io
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from src.kilroy.config import get_config
from src.kilroy.models.document_store import DocumentStore
from src.kilroy.models.kilroy import Circle, Kilroy
from src.kilroy.models.place import Place
from src.kilroy.services.storage import StorageService


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("GCS_IMAGES_BUCKET", "test-kilroy-bucket")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    monkeypatch.delenv("GCS_PUBLIC_BASE_URL", raising=False)
    monkeypatch.delenv("KILROY_DB_PATH", raising=False)
    for key in ("IMAGE_MAX_WIDTH", "IMAGE_MAX_BYTES", "IMAGE_INITIAL_QUALITY", "IMAGE_MIN_QUALITY"):
        monkeypatch.delenv(key, raising=False)

    get_config().clear_cache()
    yield
    get_config().clear_cache()


@pytest.fixture
def document_store(temp_dir: Path) -> Generator[DocumentStore, None, None]:
    """A DuckDB document store in a temporary directory."""
    store = DocumentStore(str(temp_dir / "kilroy.duckdb"))
    yield store
    store.close()


@pytest.fixture
def storage_service() -> MagicMock:
    """A blob store double that records uploads and serves bucket URLs."""
    service = MagicMock(spec=StorageService)
    service.uploads = {}

    def upload(place_id: str, kilroy_id: str, image_data: bytes) -> str:
        path = f"kilroys/{place_id}/{kilroy_id}.jpg"
        service.uploads[path] = image_data
        return path

    service.upload_kilroy_image.side_effect = upload
    service.get_public_url.side_effect = lambda path: f"https://storage.googleapis.com/test-kilroy-bucket/{path}"
    return service


class TestDataFactory:
    """Factory class for creating test data objects."""

    @staticmethod
    def create_place(
        place_id: str = "ChIJtest123",
        place_name: str = "Corner Cafe",
        address: str | None = "1 Main St",
    ) -> Place:
        return Place(place_id=place_id, place_name=place_name, address=address)

    @staticmethod
    def create_kilroy(
        kilroy_id: str = "1700000000000_abc1234",
        place_id: str = "ChIJtest123",
        caption: str = "was here",
        circle: Circle = Circle.COMMUNITY,
        created_at: int = 1700000000000,
    ) -> Kilroy:
        return Kilroy(
            id=kilroy_id,
            place_id=place_id,
            image_url=f"https://storage.googleapis.com/test-kilroy-bucket/kilroys/{place_id}/{kilroy_id}.jpg",
            caption=caption,
            circle=circle,
            created_at=created_at,
        )

    @staticmethod
    def create_test_image(
        width: int = 800,
        height: int = 600,
        format: str = "JPEG",
        color: str | tuple = "red",
        mode: str = "RGB",
    ) -> bytes:
        """Create an encoded test image.

        Args:
            width: Image width
            height: Image height
            format: Pillow format name
            color: Fill color
            mode: Pillow image mode

        Returns:
            Encoded image bytes
        """
        image = Image.new(mode, (width, height), color)
        buffer = io.BytesIO()
        image.save(buffer, format=format)
        return buffer.getvalue()


@pytest.fixture
def test_data_factory() -> type[TestDataFactory]:
    """Provide the test data factory."""
    return TestDataFactory
