"""
Shared CRUD plumbing for entity services.

Each entity service declares its table, columns and display rules; this base
turns them into parameterized SQL and translates database integrity errors
into the typed exceptions in core.exceptions.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

import psycopg2.errors
from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from core.exceptions import (
    InvalidReferenceError,
    ResourceConflictError,
    ResourceInUseError,
    ResourceNotFoundError,
)
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# DETAIL line of a Postgres foreign key violation: Key (client_id)=(...) is not present ...
_FK_FIELD_PATTERN = re.compile(r"Key \((?P<field>[^)]+)\)=")

MAX_LIST_LIMIT = 500


def foreign_key_field(exc: psycopg2.Error) -> str | None:
    """Name of the column a foreign key violation complains about, if reported."""
    match = _FK_FIELD_PATTERN.search(str(exc))
    if match:
        return match.group("field")

    diag = getattr(exc, "diag", None)
    constraint = getattr(diag, "constraint_name", None) if diag is not None else None
    if constraint and constraint.endswith("_fkey"):
        return constraint
    return None


class CrudService(Generic[ModelT]):
    """Single-entity create/read/update/delete over one table.

    Subclasses set the class attributes and may override _select_sql for
    joined display columns and _conflict_message / label for wording.
    """

    ENTITY: ClassVar[str]
    TABLE: ClassVar[str]
    MODEL: ClassVar[type[BaseModel]]
    WRITABLE_COLUMNS: ClassVar[tuple[str, ...]]
    SORTABLE_COLUMNS: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at"})
    FILTERABLE_COLUMNS: ClassVar[frozenset[str]] = frozenset()
    SEARCH_COLUMNS: ClassVar[tuple[str, ...]] = ()
    DEFAULT_SORT: ClassVar[str] = "created_at"
    DEFAULT_DESCENDING: ClassVar[bool] = True

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _select_sql(self) -> str:
        """SELECT ... FROM clause; the entity table is always aliased t."""
        return f"SELECT t.* FROM {self.TABLE} t"

    def _conflict_message(self, data: BaseModel) -> str:
        return f"{self.ENTITY} already exists"

    def _reference_message(self, field: str | None) -> str:
        if field:
            return (
                f"Invalid reference: field '{field}' must point to an existing record. "
                f"Problem field: {field}."
            )
        return "Invalid reference: a related record does not exist."

    def _in_use_message(self, entity_id: UUID) -> str:
        return (
            f"{self.ENTITY} {entity_id} cannot be deleted as it has associated records. "
            "Delete associated records first."
        )

    def label(self, row: dict[str, Any]) -> str:
        """Short human label used in delete confirmations."""
        return str(row["id"])

    # ------------------------------------------------------------------
    # Error translation
    # ------------------------------------------------------------------

    @contextmanager
    def _write_errors(self, data: BaseModel):
        """Translate integrity errors raised by an INSERT or UPDATE."""
        try:
            yield
        except psycopg2.errors.UniqueViolation as e:
            raise ResourceConflictError(self._conflict_message(data)) from e
        except psycopg2.errors.ForeignKeyViolation as e:
            field = foreign_key_field(e)
            raise InvalidReferenceError(field or "unknown", self._reference_message(field)) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, data: BaseModel) -> ModelT:
        """
        Insert a new row.

        Raises:
            ResourceConflictError: Unique constraint violated
            InvalidReferenceError: Foreign key points at a missing row
        """
        values = data.model_dump(mode="json")
        columns = ("id", *self.WRITABLE_COLUMNS, "created_at", "updated_at")
        now = now_utc()
        params = (uuid4(), *(values.get(c) for c in self.WRITABLE_COLUMNS), now, now)
        placeholders = ", ".join(["%s"] * len(columns))

        with self._write_errors(data):
            row = self.postgres.execute_returning(
                f"INSERT INTO {self.TABLE} ({', '.join(columns)}) "
                f"VALUES ({placeholders}) RETURNING id",
                params,
            )[0]

        created = self.get_by_id(row["id"])
        logger.info(f"{self.ENTITY} {created.id} created")
        return created

    def get_by_id(self, entity_id: UUID) -> ModelT | None:
        """Fetch by id. Returns None if missing."""
        row = self.postgres.execute_single(
            f"{self._select_sql()} WHERE t.id = %s",
            (entity_id,),
        )
        if row is None:
            return None
        return self.MODEL.model_validate(row)

    def get(self, entity_id: UUID) -> ModelT:
        """Fetch by id. Raises ResourceNotFoundError if missing."""
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise ResourceNotFoundError(self.ENTITY, entity_id)
        return entity

    def update(self, entity_id: UUID, data: BaseModel) -> ModelT:
        """
        Replace all writable columns.

        Raises:
            ResourceNotFoundError: No row with entity_id
            ResourceConflictError: Unique constraint violated
            InvalidReferenceError: Foreign key points at a missing row
        """
        values = data.model_dump(mode="json")
        set_parts = [f"{column} = %s" for column in self.WRITABLE_COLUMNS]
        set_parts.append("updated_at = %s")
        params = (*(values.get(c) for c in self.WRITABLE_COLUMNS), now_utc(), entity_id)

        with self._write_errors(data):
            rows = self.postgres.execute_returning(
                f"UPDATE {self.TABLE} SET {', '.join(set_parts)} WHERE id = %s RETURNING id",
                params,
            )

        if not rows:
            raise ResourceNotFoundError(self.ENTITY, entity_id)

        logger.info(f"{self.ENTITY} {entity_id} updated")
        return self.get(entity_id)

    def delete(self, entity_id: UUID) -> dict[str, Any]:
        """
        Hard delete. Returns the deleted row.

        Raises:
            ResourceNotFoundError: No row with entity_id
            ResourceInUseError: Other records still reference this row
        """
        try:
            rows = self.postgres.execute_returning(
                f"DELETE FROM {self.TABLE} WHERE id = %s RETURNING *",
                (entity_id,),
            )
        except psycopg2.errors.ForeignKeyViolation as e:
            raise ResourceInUseError(self._in_use_message(entity_id)) from e

        if not rows:
            raise ResourceNotFoundError(self.ENTITY, entity_id)

        logger.info(f"{self.ENTITY} {entity_id} deleted")
        return rows[0]

    def list_all(
        self,
        filters: dict[str, Any] | None = None,
        sort: str | None = None,
        descending: bool | None = None,
        limit: int = 100,
        offset: int = 0,
        search: str | None = None,
    ) -> list[ModelT]:
        """
        List rows with equality filters, free-text search, one sort column and pagination.

        Raises:
            ValueError: Unknown filter or sort column, or search on an entity without it
        """
        conditions = []
        params: list[Any] = []

        if search:
            if not self.SEARCH_COLUMNS:
                raise ValueError(f"Search is not supported for {self.TABLE}")
            pattern = f"%{search}%"
            conditions.append(
                "(" + " OR ".join(f"t.{column} ILIKE %s" for column in self.SEARCH_COLUMNS) + ")"
            )
            params.extend([pattern] * len(self.SEARCH_COLUMNS))

        for column, value in (filters or {}).items():
            if column not in self.FILTERABLE_COLUMNS:
                raise ValueError(
                    f"Cannot filter {self.TABLE} by '{column}'. "
                    f"Allowed: {', '.join(sorted(self.FILTERABLE_COLUMNS)) or 'none'}"
                )
            conditions.append(f"t.{column} = %s")
            params.append(value)

        sort = sort or self.DEFAULT_SORT
        if sort not in self.SORTABLE_COLUMNS:
            raise ValueError(
                f"Cannot sort {self.TABLE} by '{sort}'. "
                f"Allowed: {', '.join(sorted(self.SORTABLE_COLUMNS))}"
            )
        if descending is None:
            descending = self.DEFAULT_DESCENDING

        where_clause = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        direction = "DESC" if descending else "ASC"
        params.extend([min(limit, MAX_LIST_LIMIT), offset])

        try:
            rows = self.postgres.execute(
                f"{self._select_sql()}{where_clause} "
                f"ORDER BY t.{sort} {direction}, t.id "
                f"LIMIT %s OFFSET %s",
                tuple(params),
            )
        except psycopg2.errors.DataError as e:
            # Filter values arrive as raw query strings (bad UUID, unknown enum value)
            raise ValueError(f"Invalid filter value for {self.TABLE}") from e
        return [self.MODEL.model_validate(row) for row in rows]
