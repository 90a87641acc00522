"""
Place models for Kilroy.

A Place is the stable identity kilroys accumulate under. It is resolved once
per session and never changes afterwards; PlaceMetadata is the persisted
record written the first time anything is left there.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Place:
    """A resolved location identity."""

    place_id: str
    place_name: str
    address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict for the session cache."""
        data: dict[str, Any] = {"place_id": self.place_id, "place_name": self.place_name}
        if self.address is not None:
            data["address"] = self.address
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Place":
        """
        Build a Place from a dict.

        Raises:
            KeyError: If place_id or place_name is missing
        """
        return cls(
            place_id=str(data["place_id"]),
            place_name=str(data["place_name"]),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class PlaceMetadata:
    """Persisted superset of Place, written once per place."""

    place_id: str
    place_name: str
    address: str | None
    created_at: int

    @classmethod
    def from_place(cls, place: Place, created_at: int) -> "PlaceMetadata":
        """
        Derive metadata from a Place.

        The payload depends only on the place and the timestamp, so two
        first posters racing on the same place write equivalent records.
        """
        return cls(
            place_id=place.place_id,
            place_name=place.place_name,
            address=place.address,
            created_at=created_at,
        )
