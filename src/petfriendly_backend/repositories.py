"""
One repository per entity, translating finder/count/exists calls into SQL.

Simple equality lookups go through ``find_by``/``count_by``/``exists_by``
with keyword criteria (``repo.find_by(status=PetStatus.AVAILABLE)``); anything
needing LIKE, ranges or joins has its own method. Every method accepts an
optional open connection so services can group several calls into one
transaction.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from .database import Database, serialize_datetime
from .entities import AdoptionRequest, ContactMessage, Foundation, Pet, PetImage, User
from .errors import ValidationError
from .models import AdoptionRequestStatus, PetStatus
from .pagination import Page, PageRequest

E = TypeVar("E")


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return serialize_datetime(value)
    return value


def _like_pattern(fragment: str) -> str:
    """``%fragment%`` for ``LIKE ... ESCAPE '\\'`` with wildcards in the fragment taken literally."""
    escaped = fragment.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class Repository(Generic[E]):
    table: str = ""
    entity: Type[E]
    columns: Tuple[str, ...] = ()
    # Columns accepted in ``sort``; empty means every column
    sortable: Tuple[str, ...] = ()
    default_order: str = "created_at DESC"

    def __init__(self, db: Database) -> None:
        self.db = db

    @contextmanager
    def _connection(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
        else:
            with self.db.connect() as new_conn:
                yield new_conn

    def _values(self, entity: E) -> Dict[str, Any]:
        return {column: _to_db(getattr(entity, column)) for column in self.columns}

    def _criteria(self, criteria: Dict[str, Any]) -> Tuple[str, List[Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        for column, value in criteria.items():
            if column not in self.columns:
                raise ValueError(f"Unknown column for {self.table}: {column}")
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(_to_db(value))
        return " AND ".join(clauses), params

    def _order_by(self, pageable: PageRequest) -> str:
        if not pageable.sort:
            return self.default_order
        orders = []
        for column, direction in pageable.sort:
            if column not in (self.sortable or self.columns):
                raise ValidationError(f"Cannot sort by '{column}'")
            orders.append(f"{column} {direction.upper()}")
        return ", ".join(orders)

    # Generic queries

    def _select(
        self,
        where: str = "",
        params: Sequence[Any] = (),
        pageable: Optional[PageRequest] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Page[E]:
        pageable = pageable or PageRequest.unpaged()
        where_sql = f" WHERE {where}" if where else ""
        sql = f"SELECT * FROM {self.table}{where_sql} ORDER BY {self._order_by(pageable)}"
        query_params = list(params)
        if pageable.is_paged:
            sql += " LIMIT ? OFFSET ?"
            query_params.extend([pageable.size, pageable.offset])

        with self._connection(conn) as c:
            rows = c.execute(sql, query_params).fetchall()
            if pageable.is_paged:
                total = c.execute(f"SELECT COUNT(*) FROM {self.table}{where_sql}", list(params)).fetchone()[0]
            else:
                total = len(rows)
        return Page([self.entity.from_row(row) for row in rows], total, pageable)

    def _select_one(
        self, where: str, params: Sequence[Any], conn: Optional[sqlite3.Connection] = None
    ) -> Optional[E]:
        with self._connection(conn) as c:
            row = c.execute(f"SELECT * FROM {self.table} WHERE {where} LIMIT 1", list(params)).fetchone()
        return self.entity.from_row(row) if row else None

    def _count(self, where: str = "", params: Sequence[Any] = (), conn: Optional[sqlite3.Connection] = None) -> int:
        where_sql = f" WHERE {where}" if where else ""
        with self._connection(conn) as c:
            return c.execute(f"SELECT COUNT(*) FROM {self.table}{where_sql}", list(params)).fetchone()[0]

    # Public API shared by every repository

    def insert(self, entity: E, conn: Optional[sqlite3.Connection] = None) -> E:
        values = self._values(entity)
        if values.get("id") is None:
            values.pop("id", None)
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with self._connection(conn) as c:
            cursor = c.execute(
                f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})", list(values.values())
            )
            if getattr(entity, "id", None) is None:
                entity.id = cursor.lastrowid  # type: ignore[attr-defined]
        return entity

    def update(self, entity: E, conn: Optional[sqlite3.Connection] = None) -> E:
        values = self._values(entity)
        entity_id = values.pop("id")
        assignments = ", ".join(f"{column} = ?" for column in values)
        with self._connection(conn) as c:
            c.execute(f"UPDATE {self.table} SET {assignments} WHERE id = ?", [*values.values(), entity_id])
        return entity

    def find_by_id(self, entity_id: Any, conn: Optional[sqlite3.Connection] = None) -> Optional[E]:
        return self._select_one("id = ?", (_to_db(entity_id),), conn=conn)

    def find_all(self, pageable: Optional[PageRequest] = None) -> Page[E]:
        return self._select(pageable=pageable)

    def find_by(self, pageable: Optional[PageRequest] = None, **criteria: Any) -> Page[E]:
        where, params = self._criteria(criteria)
        return self._select(where, params, pageable)

    def count(self) -> int:
        return self._count()

    def count_by(self, **criteria: Any) -> int:
        where, params = self._criteria(criteria)
        return self._count(where, params)

    def exists_by_id(self, entity_id: Any) -> bool:
        return self._count("id = ?", (_to_db(entity_id),)) > 0

    def exists_by(self, **criteria: Any) -> bool:
        return self.count_by(**criteria) > 0

    def delete_by_id(self, entity_id: Any) -> bool:
        with self.db.connect() as conn:
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (_to_db(entity_id),))
            return cursor.rowcount > 0

    def _contains(
        self, column: str, fragment: str, pageable: Optional[PageRequest] = None, extra: str = "", params: Sequence[Any] = ()
    ) -> Page[E]:
        where = f"LOWER({column}) LIKE ? ESCAPE '\\'"
        if extra:
            where = f"{where} AND {extra}"
        return self._select(where, [_like_pattern(fragment), *params], pageable)


class UserRepository(Repository[User]):
    table = "users"
    entity = User
    columns = (
        "id", "email", "password", "first_name", "last_name", "role",
        "phone", "city", "active", "created_at", "updated_at",
    )
    sortable = tuple(column for column in columns if column != "password")

    def find_by_email(self, email: str) -> Optional[User]:
        return self._select_one("LOWER(email) = ?", (email.lower(),))

    def exists_by_email(self, email: str) -> bool:
        return self._count("LOWER(email) = ?", (email.lower(),)) > 0

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[User]:
        fragment = _like_pattern(name)
        return self._select(
            "LOWER(first_name) LIKE ? ESCAPE '\\' OR LOWER(last_name) LIKE ? ESCAPE '\\'", (fragment, fragment), pageable
        )


class FoundationRepository(Repository[Foundation]):
    table = "foundations"
    entity = Foundation
    columns = (
        "id", "name", "city", "state", "description", "contact_email", "website",
        "address", "phone_number", "verified", "created_at", "updated_at",
    )

    def find_by_name(self, name: str) -> Optional[Foundation]:
        return self._select_one("LOWER(name) = ?", (name.lower(),))

    def find_by_contact_email(self, email: str) -> Optional[Foundation]:
        return self._select_one("LOWER(contact_email) = ?", (email.lower(),))

    def find_by_city(self, city: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self._select("LOWER(city) = ?", (city.lower(),), pageable)

    def find_by_state(self, state: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self._select("LOWER(state) = ?", (state.lower(),), pageable)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self._contains("name", name, pageable)

    def find_with_available_pets(self, pageable: Optional[PageRequest] = None) -> Page[Foundation]:
        return self._select(
            "id IN (SELECT foundation_id FROM pets WHERE status = ?)", (PetStatus.AVAILABLE.value,), pageable
        )

    def count_by_city(self, city: str) -> int:
        return self._count("LOWER(city) = ?", (city.lower(),))

    def count_by_state(self, state: str) -> int:
        return self._count("LOWER(state) = ?", (state.lower(),))


class PetRepository(Repository[Pet]):
    table = "pets"
    entity = Pet
    columns = (
        "id", "name", "species", "breed", "age", "gender", "size", "description",
        "status", "foundation_id", "created_at", "updated_at",
    )

    def find_by_breed(self, breed: str, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self._select("LOWER(breed) = ?", (breed.lower(),), pageable)

    def find_by_age_between(self, min_age: int, max_age: int, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self._select("age BETWEEN ? AND ?", (min_age, max_age), pageable)

    def search_by_name(self, name: str, pageable: Optional[PageRequest] = None) -> Page[Pet]:
        return self._contains("name", name, pageable)

    def find_available_with_filters(
        self,
        species: Optional[str] = None,
        size: Optional[str] = None,
        gender: Optional[str] = None,
        city: Optional[str] = None,
        pageable: Optional[PageRequest] = None,
    ) -> Page[Pet]:
        clauses = ["status = ?"]
        params: List[Any] = [PetStatus.AVAILABLE.value]
        for column, value in (("species", species), ("size", size), ("gender", gender)):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(_to_db(value))
        if city:
            clauses.append("foundation_id IN (SELECT id FROM foundations WHERE LOWER(city) = ?)")
            params.append(city.lower())
        return self._select(" AND ".join(clauses), params, pageable)


class PetImageRepository(Repository[PetImage]):
    table = "pet_images"
    entity = PetImage
    columns = ("id", "image_url", "is_primary", "alt_text", "pet_id", "created_at", "updated_at")

    def find_primary_by_pet(self, pet_id: str, conn: Optional[sqlite3.Connection] = None) -> Optional[PetImage]:
        return self._select_one("pet_id = ? AND is_primary = 1", (pet_id,), conn=conn)

    def search_by_url(self, fragment: str, pageable: Optional[PageRequest] = None) -> Page[PetImage]:
        return self._contains("image_url", fragment, pageable)

    def clear_primary(self, pet_id: str, updated_at: datetime, conn: Optional[sqlite3.Connection] = None) -> int:
        """Unset the primary flag on every image of a pet; returns rows touched."""
        with self._connection(conn) as c:
            cursor = c.execute(
                "UPDATE pet_images SET is_primary = 0, updated_at = ? WHERE pet_id = ? AND is_primary = 1",
                (serialize_datetime(updated_at), pet_id),
            )
            return cursor.rowcount

    def count_distinct_pets(self) -> int:
        with self._connection() as c:
            return c.execute("SELECT COUNT(DISTINCT pet_id) FROM pet_images").fetchone()[0]

    def delete_by_pet(self, pet_id: str) -> int:
        with self.db.connect() as conn:
            return conn.execute("DELETE FROM pet_images WHERE pet_id = ?", (pet_id,)).rowcount


_BY_FOUNDATION = "pet_id IN (SELECT id FROM pets WHERE foundation_id = ?)"


class AdoptionRequestRepository(Repository[AdoptionRequest]):
    table = "adoption_requests"
    entity = AdoptionRequest
    columns = (
        "id", "user_id", "pet_id", "message", "status", "experience", "living_situation",
        "review_notes", "created_at", "updated_at", "reviewed_at",
    )

    def find_by_foundation(
        self,
        foundation_id: str,
        status: Optional[AdoptionRequestStatus] = None,
        pageable: Optional[PageRequest] = None,
    ) -> Page[AdoptionRequest]:
        if status is None:
            return self._select(_BY_FOUNDATION, (foundation_id,), pageable)
        return self._select(f"{_BY_FOUNDATION} AND status = ?", (foundation_id, status.value), pageable)

    def count_by_foundation(self, foundation_id: str, status: Optional[AdoptionRequestStatus] = None) -> int:
        if status is None:
            return self._count(_BY_FOUNDATION, (foundation_id,))
        return self._count(f"{_BY_FOUNDATION} AND status = ?", (foundation_id, status.value))

    def find_by_created_between(
        self, start: datetime, end: datetime, pageable: Optional[PageRequest] = None
    ) -> Page[AdoptionRequest]:
        return self._select(
            "created_at BETWEEN ? AND ?", (serialize_datetime(start), serialize_datetime(end)), pageable
        )


class ContactMessageRepository(Repository[ContactMessage]):
    table = "contact_messages"
    entity = ContactMessage
    columns = (
        "id", "sender_name", "sender_email", "subject", "message", "foundation_id",
        "is_read", "read_at", "created_at",
    )

    def find_by_sender_email(self, email: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        return self._select("LOWER(sender_email) = ?", (email.lower(),), pageable)

    def search(self, column: str, fragment: str, pageable: Optional[PageRequest] = None) -> Page[ContactMessage]:
        if column not in {"sender_name", "subject", "message"}:
            raise ValueError(f"Cannot search contact messages by {column}")
        return self._contains(column, fragment, pageable)

    def count_created_after(self, since: datetime, foundation_id: Optional[str] = None) -> int:
        if foundation_id is None:
            return self._count("created_at >= ?", (serialize_datetime(since),))
        return self._count("foundation_id = ? AND created_at >= ?", (foundation_id, serialize_datetime(since)))
