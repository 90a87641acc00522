"""
Document store schema for Kilroy.

The hosted layout is two collections, places/{place_id} and
places/{place_id}/kilroys/{kilroy_id}. Locally each collection is a DuckDB
table and the sub-collection is keyed by (place_id, id).
"""

PLACES_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS places (
    place_id TEXT PRIMARY KEY,
    place_name TEXT NOT NULL,
    address TEXT,
    created_at BIGINT NOT NULL
);
"""

KILROYS_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS kilroys (
    place_id TEXT NOT NULL,
    id TEXT NOT NULL,
    image_url TEXT NOT NULL,
    caption TEXT NOT NULL,
    circle TEXT NOT NULL CHECK (circle IN ('community', 'verified')),
    created_at BIGINT NOT NULL,
    PRIMARY KEY (place_id, id)
);
"""

KILROYS_TABLE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_kilroys_place_created ON kilroys(place_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_kilroys_place_circle ON kilroys(place_id, circle);",
]

ALL_SCHEMA_STATEMENTS = [PLACES_TABLE_SCHEMA, KILROYS_TABLE_SCHEMA] + KILROYS_TABLE_INDEXES

KILROY_COLUMNS = ("place_id", "id", "image_url", "caption", "circle", "created_at")
PLACE_COLUMNS = ("place_id", "place_name", "address", "created_at")


def get_schema_statements() -> list[str]:
    """
    Get all schema creation statements.

    Returns:
        List of SQL statements to create tables and indexes
    """
    return ALL_SCHEMA_STATEMENTS


def validate_schema_compatibility() -> bool:
    """
    Check that the kilroys table carries every Kilroy model field.

    Returns:
        True if schema is compatible, False otherwise
    """
    from .kilroy import Kilroy

    model_fields = set(Kilroy.__dataclass_fields__)
    return model_fields.issubset(set(KILROY_COLUMNS))
