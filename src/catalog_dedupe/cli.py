from __future__ import annotations

import argparse
import csv
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from catalog_dedupe.config import DedupeConfig
from catalog_dedupe.datasets import ReferenceCatalogGenerator
from catalog_dedupe.errors import DedupeError
from catalog_dedupe.logging_config import configure_logging
from catalog_dedupe.models import DuplicateGroup, FieldPolicy, MergeRequest, ProductRecord
from catalog_dedupe.service import DuplicateService
from catalog_dedupe.steps.grouping import find_duplicates
from catalog_dedupe.stores.sql import SqlCatalogStore

_CSV_COLUMNS = ["id", "name", "sku", "brand_name", "category_name", "description", "price"]


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = DedupeConfig.from_env()
        configure_logging(args.log_level or config.log_level)

        if args.command == "run-test":
            run_test(
                size=args.size,
                duplicate_rate=args.duplicate_rate,
                seed=args.seed,
                output_dir=args.output_dir,
                input_csv=args.input_csv,
                threshold=args.threshold if args.threshold is not None else config.threshold,
                show_groups=args.show_groups,
            )
        elif args.command == "scan":
            with SqlCatalogStore(args.database_url or config.database_url) as store:
                groups = DuplicateService(store, config).scan(args.threshold, actor=args.actor)
                print(json.dumps([group.to_payload() for group in groups], indent=2))
        elif args.command == "merge":
            request = MergeRequest(
                primary_id=args.primary,
                duplicate_ids=tuple(args.duplicate),
                field_policy=FieldPolicy(
                    keep_name=not args.fill_name,
                    keep_description=not args.fill_description,
                    keep_price=not args.fill_price,
                    keep_brand=not args.fill_brand,
                    keep_category=not args.fill_category,
                ),
                actor=args.actor,
            )
            with SqlCatalogStore(args.database_url or config.database_url) as store:
                result = DuplicateService(store, config).merge(request)
                payload = {
                    "success": True,
                    "merged": len(result.merged_ids),
                    "primary": result.primary.to_payload(),
                }
                print(json.dumps(payload, indent=2))
        elif args.command == "check-name":
            with SqlCatalogStore(args.database_url or config.database_url) as store:
                matches = DuplicateService(store, config).check_name(args.name, exclude_id=args.exclude_id)
                payload = [
                    {"id": match.product.id, "name": match.product.name, "similarity": round(match.similarity, 4)}
                    for match in matches
                ]
                print(json.dumps(payload, indent=2))
    except DedupeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


def run_test(
    *,
    size: int,
    duplicate_rate: float,
    seed: int,
    output_dir: Path,
    input_csv: Path | None,
    threshold: float,
    show_groups: int,
) -> dict[str, object]:
    output_dir.mkdir(parents=True, exist_ok=True)

    if input_csv is None:
        records = ReferenceCatalogGenerator(seed=seed).generate(size=size, duplicate_rate=duplicate_rate)
        dataset_path = output_dir / "test_catalog.csv"
        write_products_csv(dataset_path, records)
    else:
        records = read_products_csv(input_csv)
        dataset_path = input_csv

    groups = find_duplicates(records, threshold)

    groups_path = output_dir / "groups.json"
    summary_path = output_dir / "summary.json"

    _write_json(groups_path, [group.to_payload() for group in groups])
    summary = _build_summary(
        record_count=len(records),
        groups=groups,
        threshold=threshold,
        dataset_path=dataset_path,
        groups_path=groups_path,
    )
    _write_json(summary_path, summary)

    print(f"Dataset: {dataset_path}")
    print(f"Groups: {groups_path}")
    print(f"Summary: {summary_path}")
    print("---")
    print(f"records={summary['record_count']}")
    print(f"groups={summary['group_count']}")
    print(f"grouped_records={summary['grouped_record_count']}")
    print(f"avg_group_size={summary['avg_group_size']}")
    if show_groups > 0:
        print("---")
        print("sample_groups=")
        print(json.dumps(_group_sample_payload(groups, limit=show_groups), indent=2))
    return summary


def _build_summary(
    *,
    record_count: int,
    groups: list[DuplicateGroup],
    threshold: float,
    dataset_path: Path,
    groups_path: Path,
) -> dict[str, object]:
    group_sizes = [len(group.products) for group in groups]

    return {
        "record_count": record_count,
        "threshold": threshold,
        "group_count": len(groups),
        "grouped_record_count": sum(group_sizes),
        "avg_group_size": round(sum(group_sizes) / len(group_sizes), 3) if group_sizes else 0.0,
        "max_group_size": max(group_sizes) if group_sizes else 0,
        "min_group_size": min(group_sizes) if group_sizes else 0,
        "dataset_path": str(dataset_path),
        "groups_path": str(groups_path),
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog-dedupe", description="Product catalog dedupe CLI")
    parser.add_argument("--log-level", type=str, default=None)
    subparsers = parser.add_subparsers(dest="command")

    run_test_parser = subparsers.add_parser(
        "run-test",
        help="Generate or load a test catalog, scan for duplicates, and output groups + summary",
    )
    run_test_parser.add_argument("--size", type=int, default=500)
    run_test_parser.add_argument("--duplicate-rate", type=float, default=0.15)
    run_test_parser.add_argument("--seed", type=int, default=42)
    run_test_parser.add_argument("--threshold", type=float, default=None)
    run_test_parser.add_argument("--input-csv", type=Path, default=None)
    run_test_parser.add_argument("--output-dir", type=Path, default=Path("data/cli_output"))
    run_test_parser.add_argument("--show-groups", type=int, default=10)

    scan_parser = subparsers.add_parser("scan", help="Scan a SQL catalog and print duplicate groups")
    scan_parser.add_argument("--database-url", type=str, default=None)
    scan_parser.add_argument("--threshold", type=float, default=None)
    scan_parser.add_argument("--actor", type=str, default=None)

    merge_parser = subparsers.add_parser("merge", help="Merge duplicates into a primary product")
    merge_parser.add_argument("--database-url", type=str, default=None)
    merge_parser.add_argument("--primary", type=str, required=True)
    merge_parser.add_argument("--duplicate", type=str, action="append", required=True)
    merge_parser.add_argument("--actor", type=str, default=None)
    for field_name in ("name", "description", "price", "brand", "category"):
        merge_parser.add_argument(
            f"--fill-{field_name}",
            action="store_true",
            help=f"Fill an empty primary {field_name} from the duplicates",
        )

    check_parser = subparsers.add_parser("check-name", help="List products whose name resembles NAME")
    check_parser.add_argument("name", type=str)
    check_parser.add_argument("--database-url", type=str, default=None)
    check_parser.add_argument("--exclude-id", type=str, default=None)

    return parser


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def write_products_csv(path: Path, records: list[ProductRecord]) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=_CSV_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(
                {
                    "id": record.id,
                    "name": record.name,
                    "sku": record.sku,
                    "brand_name": record.brand_name or "",
                    "category_name": record.category_name or "",
                    "description": record.description or "",
                    "price": "" if record.price is None else str(record.price),
                }
            )


def read_products_csv(path: Path) -> list[ProductRecord]:
    records: list[ProductRecord] = []
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for row in reader:
            record_id = row.get("id")
            if not record_id:
                continue
            extras = {k: v for k, v in row.items() if k not in _CSV_COLUMNS and k is not None}
            records.append(
                ProductRecord(
                    id=record_id,
                    name=row.get("name") or "",
                    sku=row.get("sku") or "",
                    brand_name=row.get("brand_name") or None,
                    category_name=row.get("category_name") or None,
                    description=row.get("description") or None,
                    price=_parse_price(row.get("price")),
                    attributes=extras,
                )
            )
    return records


def _parse_price(raw: str | None) -> Decimal | None:
    if not raw or not raw.strip():
        return None
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        return None


def _group_sample_payload(groups: list[DuplicateGroup], limit: int = 10) -> list[dict[str, Any]]:
    payload: list[dict[str, Any]] = []
    for group in groups[:limit]:
        payload.append(
            {
                "group_id": group.group_id,
                "size": len(group.products),
                "score": round(group.score, 4),
                "reasons": list(group.reasons),
                "products": [{"id": p.id, "name": p.name, "sku": p.sku} for p in group.products],
            }
        )
    return payload


if __name__ == "__main__":
    sys.exit(main())
