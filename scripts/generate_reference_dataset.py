from __future__ import annotations

import argparse
from pathlib import Path

from catalog_dedupe.cli import write_products_csv
from catalog_dedupe.datasets import ReferenceCatalogGenerator
from catalog_dedupe.stores import SqlCatalogStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic product catalog with duplicates")
    parser.add_argument("--size", type=int, default=5000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--duplicate-rate", type=float, default=0.15)
    parser.add_argument("--output", type=Path, default=Path("data/reference_catalog.csv"))
    parser.add_argument("--database-url", type=str, default=None, help="Also load the catalog into this database")
    args = parser.parse_args()

    records = ReferenceCatalogGenerator(seed=args.seed).generate(
        size=args.size,
        duplicate_rate=args.duplicate_rate,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    write_products_csv(args.output, records)

    if args.database_url:
        with SqlCatalogStore(args.database_url) as store:
            with store.transaction():
                for record in records:
                    store.add_product(record)


if __name__ == "__main__":
    main()
