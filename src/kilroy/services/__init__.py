"""
Services module for Kilroy.

This module contains the service classes that hold the business logic:
- ImageNormalizer: Bounding upload dimensions and byte size
- PlaceResolver: Coordinates to a stable Place with a session cache
- KilroyRepository: Creating and listing kilroys at a place
- StorageService: Google Cloud Storage operations
- VerificationService: Human verification for the verified circle
"""

from .geolocation import Coordinates, GeolocationError, GeolocationOptions, GeolocationProvider, locate
from .image_normalizer import ImageNormalizer, NormalizedImage, get_image_normalizer, is_image_upload
from .kilroy_repository import KilroyRepository, generate_kilroy_id
from .place_resolver import PlaceCache, PlaceResolver, generate_place_id_from_address
from .storage import StorageService, get_storage_service
from .verification import (
    VerificationLevel,
    VerificationProvider,
    VerificationResult,
    VerificationService,
    create_verification_service,
)
from .visibility import can_post_to, can_view, effective_view_circle, resolve_post_circle

__all__ = [
    "Coordinates",
    "GeolocationError",
    "GeolocationOptions",
    "GeolocationProvider",
    "locate",
    "ImageNormalizer",
    "NormalizedImage",
    "get_image_normalizer",
    "is_image_upload",
    "KilroyRepository",
    "generate_kilroy_id",
    "PlaceCache",
    "PlaceResolver",
    "generate_place_id_from_address",
    "StorageService",
    "get_storage_service",
    "VerificationLevel",
    "VerificationProvider",
    "VerificationResult",
    "VerificationService",
    "create_verification_service",
    "can_post_to",
    "can_view",
    "effective_view_circle",
    "resolve_post_circle",
]
