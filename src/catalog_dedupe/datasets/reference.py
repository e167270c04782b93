from __future__ import annotations

import random
from decimal import Decimal

from catalog_dedupe.datasets.profiles import (
    CAPACITIES,
    COLOURS,
    DESCRIPTION_TEMPLATES,
    PRODUCT_LINES,
)
from catalog_dedupe.models import ProductRecord


class ReferenceCatalogGenerator:
    """Generate synthetic catalogs (with intentional dupes) for tests and benchmarks."""

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    def generate(self, size: int, duplicate_rate: float = 0.15) -> list[ProductRecord]:
        if size <= 0:
            return []

        unique_count = int(size * (1.0 - duplicate_rate))
        unique_count = max(1, min(unique_count, size))

        records: list[ProductRecord] = [self._product(i) for i in range(unique_count)]

        while len(records) < size:
            source = self._rng.choice(records[:unique_count])
            records.append(self._perturb(source, f"prod_{len(records):07d}"))

        self._rng.shuffle(records)
        return records

    def _product(self, idx: int) -> ProductRecord:
        brand, category, base_name, sku_stem = PRODUCT_LINES[idx % len(PRODUCT_LINES)]
        colour = self._rng.choice(COLOURS)
        capacity = self._rng.choice(CAPACITIES)
        # Later passes over the product lines become distinct models.
        generation = idx // len(PRODUCT_LINES)
        name = base_name if generation == 0 else f"{base_name} Gen {generation + 1}"
        description = self._rng.choice(DESCRIPTION_TEMPLATES).format(
            name=name,
            brand=brand,
            category_lower=category.lower(),
            colour=colour,
            capacity=capacity,
        )
        return ProductRecord(
            id=f"prod_{idx:07d}",
            name=name,
            sku=f"{sku_stem}-G{generation + 1}-{capacity}",
            brand_name=brand,
            category_name=category,
            description=description,
            price=Decimal(self._rng.randrange(1999, 199999)) / 100,
            attributes={"colour": colour},
        )

    def _perturb(self, source: ProductRecord, record_id: str) -> ProductRecord:
        mutation = self._rng.choice(["name", "sku", "case", "mixed"])
        name = source.name
        sku = source.sku
        description = source.description

        if mutation in {"name", "mixed"}:
            name = self._name_variant(name, source.attributes.get("colour", "Black"))
        if mutation in {"sku", "mixed"}:
            sku = self._sku_variant(sku)
        if mutation == "case":
            name = name.upper()
            sku = sku.lower()
        if self._rng.random() < 0.3:
            description = None

        return source.with_changes(
            id=record_id,
            name=name,
            sku=sku,
            description=description,
            price=None if self._rng.random() < 0.3 else source.price,
        )

    def _name_variant(self, name: str, colour: str) -> str:
        variant = self._rng.choice(["colour", "punctuation", "typo"])
        if variant == "colour":
            return f"{name} - {colour}"
        if variant == "punctuation":
            return name.replace(" ", "-", 1)
        if len(name) > 4:
            idx = self._rng.randrange(1, len(name) - 1)
            return name[:idx] + name[idx + 1 :]
        return name

    def _sku_variant(self, sku: str) -> str:
        variant = self._rng.choice(["suffix", "separator"])
        if variant == "suffix":
            return f"{sku}-{self._rng.choice(['SB', 'RB', 'V2'])}"
        return sku.replace("-", "", 1)
