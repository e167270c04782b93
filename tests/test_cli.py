import json

from catalog_dedupe.cli import main, read_products_csv, write_products_csv
from catalog_dedupe.datasets import ReferenceCatalogGenerator
from catalog_dedupe.stores import SqlCatalogStore


def test_run_test_writes_groups_and_summary(tmp_path, capsys) -> None:
    exit_code = main(
        ["run-test", "--size", "30", "--seed", "3", "--output-dir", str(tmp_path), "--show-groups", "2"]
    )

    assert exit_code == 0
    summary = json.loads((tmp_path / "summary.json").read_text())
    groups = json.loads((tmp_path / "groups.json").read_text())
    assert summary["record_count"] == 30
    assert summary["group_count"] == len(groups)
    assert (tmp_path / "test_catalog.csv").exists()
    assert "sample_groups=" in capsys.readouterr().out


def test_products_csv_round_trip(tmp_path) -> None:
    records = ReferenceCatalogGenerator(seed=1).generate(size=5, duplicate_rate=0.0)
    path = tmp_path / "catalog.csv"

    write_products_csv(path, records)
    loaded = read_products_csv(path)

    assert [r.id for r in loaded] == [r.id for r in records]
    assert [r.price for r in loaded] == [r.price for r in records]


def test_scan_and_merge_against_database(tmp_path, sql_store, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'catalog.db'}"

    assert main(["scan", "--database-url", url, "--threshold", "0.5"]) == 0
    groups = json.loads(capsys.readouterr().out)
    assert all(len(group["products"]) >= 2 for group in groups)

    exit_code = main(
        ["merge", "--database-url", url, "--primary", "p1", "--duplicate", "d1", "--fill-description"]
    )

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["merged"] == 1
    assert payload["primary"]["description"] == "First description"
    assert sql_store.get_product("d1") is None


def test_merge_into_itself_exits_with_error(tmp_path, sql_store, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'catalog.db'}"

    exit_code = main(["merge", "--database-url", url, "--primary", "p1", "--duplicate", "p1"])

    assert exit_code == 2
    assert "cannot be merged into itself" in capsys.readouterr().err
    assert sql_store.get_product("p1") is not None


def test_bad_environment_value_exits_with_error(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("CATALOG_DEDUPE_THRESHOLD", "high")

    exit_code = main(["run-test", "--size", "3", "--output-dir", str(tmp_path)])

    assert exit_code == 2
    assert "CATALOG_DEDUPE_THRESHOLD" in capsys.readouterr().err
    assert not (tmp_path / "summary.json").exists()


def test_unknown_log_level_exits_with_error(tmp_path, capsys) -> None:
    exit_code = main(["--log-level", "chatty", "run-test", "--size", "3", "--output-dir", str(tmp_path)])

    assert exit_code == 2
    assert "invalid log level" in capsys.readouterr().err


def test_check_name_prints_matches(tmp_path, sql_store, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'catalog.db'}"

    assert main(["check-name", "widget", "--database-url", url]) == 0
    matches = json.loads(capsys.readouterr().out)

    assert {match["id"]: match["similarity"] for match in matches} == {"p1": 1.0, "d2": 1.0, "d1": 0.9}
