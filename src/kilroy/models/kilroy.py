"""
Kilroy post model and the Circle enumeration.

A kilroy is a photo plus caption left at a Place. It is written once and
never updated or deleted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

MAX_CAPTION_LENGTH = 200


class Circle(Enum):
    """Visibility scope of a kilroy."""

    COMMUNITY = "community"
    VERIFIED = "verified"

    @classmethod
    def parse(cls, value: "str | Circle") -> "Circle":
        """
        Parse a circle name.

        "world" is the alternate spelling of community used by older clients.

        Raises:
            ValueError: If the value names no circle
        """
        if isinstance(value, Circle):
            return value

        normalized = str(value).strip().lower()
        if normalized == "world":
            return cls.COMMUNITY
        return cls(normalized)


def normalize_caption(caption: str | None) -> str:
    """Trim surrounding whitespace and cap the caption at MAX_CAPTION_LENGTH."""
    return (caption or "").strip()[:MAX_CAPTION_LENGTH]


@dataclass(frozen=True)
class Kilroy:
    """A single photo+caption post anchored to a place."""

    id: str
    place_id: str
    image_url: str
    caption: str
    circle: Circle
    created_at: int

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a dictionary for document storage.

        Returns:
            Dictionary representation with the circle as its string value
        """
        return {
            "id": self.id,
            "place_id": self.place_id,
            "image_url": self.image_url,
            "caption": self.caption,
            "circle": self.circle.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Kilroy":
        """
        Create a Kilroy from a stored document.

        Args:
            data: Dictionary containing kilroy fields

        Returns:
            Kilroy instance
        """
        return cls(
            id=str(data["id"]),
            place_id=str(data["place_id"]),
            image_url=str(data["image_url"]),
            caption=str(data.get("caption") or ""),
            circle=Circle.parse(data["circle"]),
            created_at=int(data["created_at"]),
        )

    def validate(self) -> bool:
        """
        Validate the kilroy.

        Returns:
            True if valid, False otherwise
        """
        if not self.id or not self.place_id or not self.image_url:
            return False

        if len(self.caption) > MAX_CAPTION_LENGTH:
            return False

        if self.created_at <= 0:
            return False

        return True
