"""
DuckDB-backed document store for places and kilroys.

Supports the three access patterns Kilroy needs: get-by-id, set-by-id, and
ordered queries over a place's kilroys filtered by circle equality.
"""

from typing import Any

import duckdb

from ..error_handling import DatabaseError, ValidationError
from ..logging_config import get_logger
from .kilroy import Circle, Kilroy
from .place import PlaceMetadata
from .schema import KILROY_COLUMNS, PLACE_COLUMNS, get_schema_statements, validate_schema_compatibility

logger = get_logger(__name__)


class DocumentStore:
    """
    Owns one DuckDB connection and the places/kilroys tables.

    The connection is opened lazily and the schema is created on first use.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path to the DuckDB database file, or ":memory:"
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create the database connection, initializing the schema.

        Raises:
            DatabaseError: If the database cannot be opened
        """
        if self._connection is None:
            try:
                self._connection = duckdb.connect(self.db_path)
                self._initialize_schema(self._connection)
            except duckdb.Error as e:
                self._connection = None
                raise DatabaseError(
                    f"Failed to open document store at {self.db_path}: {e}",
                    code="document_store_open_failed",
                    details={"db_path": self.db_path},
                    original_exception=e,
                ) from e
            logger.info("document_store_connected", db_path=self.db_path)

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.info("document_store_closed", db_path=self.db_path)

    def _initialize_schema(self, conn: duckdb.DuckDBPyConnection) -> None:
        if not validate_schema_compatibility():
            raise RuntimeError("Schema is not compatible with Kilroy model")

        for statement in get_schema_statements():
            conn.execute(statement)
        logger.debug("document_store_schema_initialized", db_path=self.db_path)

    def _execute(self, operation: str, query: str, parameters: list[Any] | None = None) -> list[tuple]:
        conn = self.connect()
        try:
            result = conn.execute(query, parameters or [])
            return result.fetchall()
        except duckdb.Error as e:
            raise DatabaseError(
                f"Document store {operation} failed: {e}",
                code=f"{operation}_failed",
                details={"operation": operation},
                original_exception=e,
            ) from e

    def get_place(self, place_id: str) -> PlaceMetadata | None:
        """
        Get place metadata by id.

        Returns:
            PlaceMetadata or None if the place has never been written
        """
        rows = self._execute(
            "get_place",
            f"SELECT {', '.join(PLACE_COLUMNS)} FROM places WHERE place_id = ?",
            [place_id],
        )
        if not rows:
            return None

        row = rows[0]
        return PlaceMetadata(place_id=row[0], place_name=row[1], address=row[2], created_at=int(row[3]))

    def set_place(self, metadata: PlaceMetadata) -> None:
        """Write place metadata, replacing any existing record with the same id."""
        self._execute(
            "set_place",
            f"INSERT OR REPLACE INTO places ({', '.join(PLACE_COLUMNS)}) VALUES (?, ?, ?, ?)",
            [metadata.place_id, metadata.place_name, metadata.address, metadata.created_at],
        )

    def set_kilroy(self, kilroy: Kilroy) -> None:
        """
        Write a kilroy document.

        Raises:
            ValidationError: If the kilroy is missing required fields
            DatabaseError: If the write fails, including a duplicate id at the same place
        """
        if not kilroy.validate():
            raise ValidationError(
                f"Invalid kilroy {kilroy.id!r} at {kilroy.place_id!r}",
                code="invalid_kilroy",
                details={"place_id": kilroy.place_id, "kilroy_id": kilroy.id},
            )

        self._execute(
            "set_kilroy",
            f"INSERT INTO kilroys ({', '.join(KILROY_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?)",
            [
                kilroy.place_id,
                kilroy.id,
                kilroy.image_url,
                kilroy.caption,
                kilroy.circle.value,
                kilroy.created_at,
            ],
        )

    def query_kilroys(self, place_id: str, circle: Circle | None = None, limit: int | None = None) -> list[Kilroy]:
        """
        Query a place's kilroys, newest first.

        Args:
            place_id: Place whose kilroys to return
            circle: Restrict to exactly this circle when given
            limit: Maximum number of rows to return

        Returns:
            Kilroys ordered by created_at descending
        """
        query = f"SELECT {', '.join(KILROY_COLUMNS)} FROM kilroys WHERE place_id = ?"
        parameters: list[Any] = [place_id]

        if circle is not None:
            query += " AND circle = ?"
            parameters.append(circle.value)

        # id breaks ties so equal timestamps still come back in a stable order
        query += " ORDER BY created_at DESC, id DESC"

        if limit is not None:
            query += " LIMIT ?"
            parameters.append(limit)

        rows = self._execute("query_kilroys", query, parameters)
        return [Kilroy.from_dict(dict(zip(KILROY_COLUMNS, row, strict=True))) for row in rows]

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


_document_store: DocumentStore | None = None


def get_document_store(db_path: str | None = None) -> DocumentStore:
    """
    Get the global document store, creating it from configuration if needed.

    Args:
        db_path: Override for KILROY_DB_PATH
    """
    global _document_store
    if _document_store is None or (db_path is not None and _document_store.db_path != db_path):
        from ..config import get_database_path

        _document_store = DocumentStore(db_path or get_database_path())
    return _document_store
