"""SQLAlchemy-backed catalog store with a transactional audit log."""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text, create_engine, delete, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from catalog_dedupe.errors import InvalidArgumentError, NotFoundError
from catalog_dedupe.models import AuditEntry, ProductRecord


class CatalogBase(DeclarativeBase):
    """Declarative base for catalog persistence."""


class ProductRow(CatalogBase):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, default="")
    sku: Mapped[str] = mapped_column(String, default="", index=True)
    brand_name: Mapped[str | None] = mapped_column(String, nullable=True)
    category_name: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Stored as text to keep Decimal precision on every backend.
    price: Mapped[str | None] = mapped_column(String(32), nullable=True)
    attributes: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)


class AuditLogRow(CatalogBase):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor: Mapped[str] = mapped_column(String)
    action: Mapped[str] = mapped_column(String, index=True)
    entity_type: Mapped[str] = mapped_column(String)
    entity_id: Mapped[str] = mapped_column(String, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class SqlCatalogStore:
    """Catalog store over any SQLAlchemy database URL.

    Calls made inside ``transaction()`` share one session that commits on
    exit and rolls back on error; calls outside it commit individually.
    """

    def __init__(self, database_url: str) -> None:
        self._engine = create_engine(database_url, future=True)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False)
        CatalogBase.metadata.create_all(self._engine)
        self._local = threading.local()

    def __enter__(self) -> "SqlCatalogStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            yield
            return
        with self._new_session() as session:
            self._local.session = session
            try:
                yield
            finally:
                self._local.session = None

    def list_products(self) -> list[ProductRecord]:
        with self._session() as session:
            rows = session.scalars(select(ProductRow).order_by(ProductRow.id)).all()
            return [_to_record(row) for row in rows]

    def get_product(self, product_id: str) -> ProductRecord | None:
        with self._session() as session:
            row = session.get(ProductRow, product_id)
            return _to_record(row) if row is not None else None

    def add_product(self, record: ProductRecord) -> None:
        with self._session() as session:
            if session.get(ProductRow, record.id) is not None:
                raise InvalidArgumentError(f"product already exists: {record.id}", field="id")
            session.add(ProductRow(id=record.id, **_row_values(record)))

    def update_product(self, record: ProductRecord) -> None:
        with self._session() as session:
            row = session.get(ProductRow, record.id)
            if row is None:
                raise NotFoundError(record.id)
            for key, value in _row_values(record).items():
                setattr(row, key, value)

    def delete_products(self, product_ids: Sequence[str]) -> None:
        with self._session() as session:
            existing = set(
                session.scalars(select(ProductRow.id).where(ProductRow.id.in_(list(product_ids)))).all()
            )
            missing = [product_id for product_id in product_ids if product_id not in existing]
            if missing:
                raise NotFoundError(missing[0])
            session.execute(delete(ProductRow).where(ProductRow.id.in_(list(product_ids))))

    def append(self, entry: AuditEntry) -> None:
        with self._session() as session:
            session.add(
                AuditLogRow(
                    actor=entry.actor,
                    action=entry.action,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    details=dict(entry.details),
                    timestamp=entry.timestamp,
                )
            )

    def list_audit_entries(self) -> list[AuditEntry]:
        with self._session() as session:
            rows = session.scalars(select(AuditLogRow).order_by(AuditLogRow.id)).all()
            return [
                AuditEntry(
                    actor=row.actor,
                    action=row.action,
                    entity_type=row.entity_type,
                    entity_id=row.entity_id,
                    details=dict(row.details or {}),
                    timestamp=_aware(row.timestamp),
                )
                for row in rows
            ]

    @contextmanager
    def _session(self) -> Iterator[Session]:
        active = getattr(self._local, "session", None)
        if active is not None:
            yield active
            active.flush()
            return
        with self._new_session() as session:
            yield session

    @contextmanager
    def _new_session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()


def _row_values(record: ProductRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "sku": record.sku,
        "brand_name": record.brand_name,
        "category_name": record.category_name,
        "description": record.description,
        "price": str(record.price) if record.price is not None else None,
        "attributes": dict(record.attributes),
    }


def _to_record(row: ProductRow) -> ProductRecord:
    return ProductRecord(
        id=row.id,
        name=row.name or "",
        sku=row.sku or "",
        brand_name=row.brand_name,
        category_name=row.category_name,
        description=row.description,
        price=Decimal(row.price) if row.price is not None else None,
        attributes=dict(row.attributes or {}),
    )


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; everything is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
