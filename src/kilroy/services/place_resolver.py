"""
Place resolution for Kilroy.

Turns a coordinate pair into a stable Place. Resolution tries, in order, the
Google Places Nearby Search, reverse geocoding and finally a coordinate-derived
place, so a caller always gets a Place back. The result is kept in a one-slot
session cache and reused for the rest of the session.
"""

import json
from collections.abc import MutableMapping
from datetime import datetime
from typing import Any

import requests

from ..error_handling import NetworkError
from ..logging_config import get_logger, log_error, log_performance
from ..models.place import Place

logger = get_logger(__name__)

PLACE_CACHE_KEY = "kilroy_place"

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NEARBY_RADIUS_METERS = 50

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_place_id_from_address(address: str) -> str:
    """
    Derive a deterministic place id from a formatted address.

    The hash runs over UTF-16 code units as `hash * 31 + unit`, wrapped to a
    signed 32-bit integer after every step, so ids stay identical to the ones
    other clients already wrote for the same address.

    Args:
        address: Formatted address text

    Returns:
        str: "addr_" followed by the base36 absolute hash
    """
    encoded = address.encode("utf-16-le")
    hash_value = 0
    for index in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[index : index + 2], "little")
        hash_value = (hash_value * 31 + unit) & 0xFFFFFFFF
        if hash_value >= 0x80000000:
            hash_value -= 0x100000000
    return f"addr_{to_base36(abs(hash_value))}"


def coordinate_place(latitude: float, longitude: float) -> Place:
    """Build the last-resort place named after the rounded coordinates."""
    return Place(
        place_id=f"geo_{latitude:.4f}_{longitude:.4f}",
        place_name=f"{latitude:.4f}, {longitude:.4f}",
    )


class PlaceCache:
    """
    One-slot place cache over a session mapping.

    In the app the mapping is `st.session_state`; anything dict-like works.
    The slot holds the place as JSON text. A slot that cannot be read back
    is treated as empty.
    """

    def __init__(self, session: MutableMapping[str, Any], key: str = PLACE_CACHE_KEY) -> None:
        self.session = session
        self.key = key

    def get(self) -> Place | None:
        raw = self.session.get(self.key)
        if not raw:
            return None

        try:
            data = json.loads(raw) if isinstance(raw, str | bytes) else raw
            return Place.from_dict(data)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("place_cache_unreadable", key=self.key, error=str(e))
            return None

    def set(self, place: Place) -> None:
        self.session[self.key] = json.dumps(place.to_dict())

    def clear(self) -> None:
        self.session.pop(self.key, None)


class PlaceResolver:
    """Resolves coordinates to a Place through a tiered fallback chain."""

    def __init__(
        self,
        cache: PlaceCache,
        api_key: str | None = None,
        http_session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            cache: Session cache consulted before and filled after resolution
            api_key: Google Places/Geocoding key; without one only coordinate places are produced
            http_session: Reused HTTP session (created when omitted)
            timeout: Per-request timeout in seconds
        """
        self.cache = cache
        self.api_key = api_key
        self.http_session = http_session or requests.Session()
        self.timeout = timeout

    def get_cached(self) -> Place | None:
        """Return the place cached for this session, if any."""
        return self.cache.get()

    def set_cached(self, place: Place) -> None:
        """Store a place for the rest of the session."""
        self.cache.set(place)

    def resolve(self, latitude: float, longitude: float) -> Place:
        """
        Resolve coordinates to a Place.

        A cached place wins unconditionally. Otherwise every tier caches its
        result before returning. Provider failures fall through to the next
        tier, so this never raises.

        Args:
            latitude: Latitude in degrees
            longitude: Longitude in degrees

        Returns:
            Place: The resolved place
        """
        cached = self.get_cached()
        if cached is not None:
            logger.debug("place_cache_hit", place_id=cached.place_id)
            return cached

        start_time = datetime.now()
        place: Place | None = None
        source = "coordinates"

        if self.api_key:
            place = self._resolve_nearby(latitude, longitude)
            source = "nearby_search"
            if place is None:
                place = self._resolve_geocode(latitude, longitude)
                source = "geocode"

        if place is None:
            place = coordinate_place(latitude, longitude)
            source = "coordinates"

        self.set_cached(place)

        duration = (datetime.now() - start_time).total_seconds()
        log_performance("resolve_place", duration, source=source, place_id=place.place_id)
        logger.info("place_resolved", place_id=place.place_id, source=source)
        return place

    def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.http_session.get(url, params={**params, "key": self.api_key}, timeout=self.timeout)
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
        except (requests.RequestException, ValueError) as e:
            raise NetworkError(
                f"Places request to {url} failed: {e}",
                code="places_request_failed",
                details={"url": url},
                original_exception=e,
            ) from e
        return payload

    def _resolve_nearby(self, latitude: float, longitude: float) -> Place | None:
        try:
            payload = self._get_json(
                NEARBY_SEARCH_URL,
                {"location": f"{latitude},{longitude}", "radius": NEARBY_RADIUS_METERS},
            )
            results = payload.get("results") or []
            if not results:
                logger.debug("nearby_search_empty", status=payload.get("status"))
                return None

            top = results[0]
            return Place(
                place_id=str(top["place_id"]),
                place_name=str(top["name"]),
                address=top.get("vicinity"),
            )
        except NetworkError:
            return None
        except (KeyError, TypeError, ValueError) as e:
            log_error(e, {"operation": "nearby_search"})
            return None

    def _resolve_geocode(self, latitude: float, longitude: float) -> Place | None:
        try:
            payload = self._get_json(GEOCODE_URL, {"latlng": f"{latitude},{longitude}"})
            results = payload.get("results") or []
            if not results:
                logger.debug("geocode_empty", status=payload.get("status"))
                return None

            top = results[0]
            formatted_address = str(top["formatted_address"])
            return Place(
                place_id=str(top.get("place_id") or generate_place_id_from_address(formatted_address)),
                place_name=formatted_address,
                address=formatted_address,
            )
        except NetworkError:
            return None
        except (KeyError, TypeError, ValueError) as e:
            log_error(e, {"operation": "reverse_geocode"})
            return None
