"""
Models module for Kilroy.

This module contains data models and the document store:
- Place, PlaceMetadata: resolved locations and their persisted record
- Kilroy, Circle: posts and their visibility scope
- DocumentStore: DuckDB-backed places/kilroys collections
"""

from .document_store import DocumentStore, get_document_store
from .kilroy import MAX_CAPTION_LENGTH, Circle, Kilroy, normalize_caption
from .place import Place, PlaceMetadata

__all__ = [
    "Circle",
    "DocumentStore",
    "Kilroy",
    "MAX_CAPTION_LENGTH",
    "Place",
    "PlaceMetadata",
    "get_document_store",
    "normalize_caption",
]
