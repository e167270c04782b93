from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from catalog_dedupe.errors import InvalidArgumentError


@dataclass(slots=True, frozen=True)
class ProductRecord:
    """Canonical representation of a catalog product."""

    id: str
    name: str
    sku: str
    brand_name: str | None = None
    category_name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def with_changes(self, **changes: Any) -> "ProductRecord":
        return replace(self, **changes)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "brandName": self.brand_name,
            "categoryName": self.category_name,
            "description": self.description,
            "price": str(self.price) if self.price is not None else None,
            **self.attributes,
        }


@dataclass(slots=True)
class SimilarityResult:
    """Score and human-readable signals from comparing two products."""

    score: float
    reasons: list[str] = field(default_factory=list)
    field_scores: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class DuplicateGroup:
    """Connected component of products linked by above-threshold similarity."""

    group_id: str
    products: tuple[ProductRecord, ...]
    score: float
    reasons: tuple[str, ...] = ()

    @property
    def product_ids(self) -> list[str]:
        return [product.id for product in self.products]

    def to_payload(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "products": [product.to_payload() for product in self.products],
            "averageScore": self.score,
            "reasons": list(self.reasons),
        }


@dataclass(slots=True, frozen=True)
class NameMatch:
    """Catalog product whose name resembles a looked-up name."""

    product: ProductRecord
    similarity: float


@dataclass(slots=True, frozen=True)
class FieldPolicy:
    """Per-field merge rule.

    ``True`` keeps the primary's value unconditionally. ``False`` lets the
    first non-empty duplicate value fill the field when the primary has none.
    """

    keep_name: bool = True
    keep_description: bool = True
    keep_price: bool = True
    keep_brand: bool = True
    keep_category: bool = True

    _PAYLOAD_KEYS = {
        "keepName": "keep_name",
        "keepDescription": "keep_description",
        "keepPrice": "keep_price",
        "keepBrand": "keep_brand",
        "keepCategory": "keep_category",
    }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "FieldPolicy":
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise InvalidArgumentError("mergeOptions must be an object", field="mergeOptions")
        values: dict[str, bool] = {}
        for key, attr in cls._PAYLOAD_KEYS.items():
            if key not in payload or payload[key] is None:
                continue
            value = payload[key]
            if not isinstance(value, bool):
                raise InvalidArgumentError(f"{key} must be a boolean", field=key)
            values[attr] = value
        return cls(**values)

    def keeps(self, field_name: str) -> bool:
        return getattr(self, f"keep_{field_name}")


@dataclass(slots=True, frozen=True)
class MergeRequest:
    """Instruction to absorb ``duplicate_ids`` into ``primary_id``."""

    primary_id: str
    duplicate_ids: tuple[str, ...]
    field_policy: FieldPolicy = field(default_factory=FieldPolicy)
    actor: str | None = None

    def validate(self) -> None:
        if not self.primary_id:
            raise InvalidArgumentError("primary product id is required", field="primaryProductId")
        if not self.duplicate_ids:
            raise InvalidArgumentError("at least one duplicate id is required", field="duplicateProductIds")
        if any(not duplicate_id for duplicate_id in self.duplicate_ids):
            raise InvalidArgumentError("duplicate ids must be non-empty", field="duplicateProductIds")
        if len(set(self.duplicate_ids)) != len(self.duplicate_ids):
            raise InvalidArgumentError("duplicate ids must be unique", field="duplicateProductIds")
        if self.primary_id in self.duplicate_ids:
            raise InvalidArgumentError(
                f"primary product {self.primary_id} cannot be merged into itself",
                field="duplicateProductIds",
            )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], actor: str | None = None) -> "MergeRequest":
        if not isinstance(payload, Mapping):
            raise InvalidArgumentError("merge payload must be an object")
        primary_id = payload.get("primaryProductId")
        duplicate_ids = payload.get("duplicateProductIds")
        if not isinstance(primary_id, str) or not primary_id:
            raise InvalidArgumentError("primaryProductId must be a non-empty string", field="primaryProductId")
        if not isinstance(duplicate_ids, list) or not all(isinstance(i, str) for i in duplicate_ids):
            raise InvalidArgumentError("duplicateProductIds must be a list of strings", field="duplicateProductIds")
        request = cls(
            primary_id=primary_id,
            duplicate_ids=tuple(duplicate_ids),
            field_policy=FieldPolicy.from_payload(payload.get("mergeOptions")),
            actor=actor,
        )
        request.validate()
        return request


@dataclass(slots=True, frozen=True)
class AuditEntry:
    """Append-only record of a scan or merge."""

    actor: str
    action: str
    entity_type: str
    entity_id: str
    details: dict[str, Any]
    timestamp: datetime


@dataclass(slots=True, frozen=True)
class MergeResult:
    primary: ProductRecord
    merged_ids: tuple[str, ...]
    updated_fields: tuple[str, ...]
    audit: AuditEntry
