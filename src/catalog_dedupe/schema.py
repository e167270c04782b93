from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Mapping

from catalog_dedupe.errors import InvalidArgumentError


class ProductField(StrEnum):
    NAME = "name"
    SKU = "sku"
    BRAND = "brand"
    CATEGORY = "category"
    DESCRIPTION = "description"


@dataclass(frozen=True)
class ScoringProfile:
    """Field weights and reason thresholds used when comparing two products.

    With ``name_prefix_credit`` a short name scores high against any longer
    name that starts with it: "Apple" vs "Apple Watch" gets 0.75 on name.
    Brand-only names therefore lean on SKU and the other fields to stay apart.
    """

    weights: Mapping[ProductField, float]
    name_strong_threshold: float = 0.8
    name_weak_threshold: float = 0.6
    sku_threshold: float = 0.7
    description_threshold: float = 0.8
    # A name that extends another by whole trailing words ("iPhone 15 Pro" vs
    # "iPhone 15 Pro Space Black") scores at least 0.5 + 0.5 * shared/longer tokens.
    name_prefix_credit: bool = True

    def __post_init__(self) -> None:
        if any(weight < 0 for weight in self.weights.values()):
            raise InvalidArgumentError("field weights must be non-negative", field="weights")
        if sum(self.weights.values()) <= 0:
            raise InvalidArgumentError("field weights must sum to a positive value", field="weights")

    @classmethod
    def from_mapping(cls, weights: Mapping[ProductField, float], **thresholds: float) -> "ScoringProfile":
        frozen = {ProductField(key): float(value) for key, value in weights.items()}
        return cls(weights=frozen, **thresholds)

    def weight_for(self, product_field: ProductField) -> float:
        return self.weights.get(product_field, 0.0)


DEFAULT_PROFILE = ScoringProfile.from_mapping(
    {
        ProductField.NAME: 0.40,
        ProductField.SKU: 0.30,
        ProductField.BRAND: 0.15,
        ProductField.CATEGORY: 0.10,
        ProductField.DESCRIPTION: 0.05,
    }
)
