from pathlib import Path

import pytest

from salesanalytics.config import DEFAULT_ALIASES, AppConfig, load_config, merge_aliases

ROOT = Path(__file__).resolve().parent.parent


def test_load_config_resolves_paths_relative_to_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "\n".join(
            [
                "inputs:",
                "  products: data/produtos.xlsx",
                "analytics:",
                "  top_resellers: 3",
                "output:",
                "  directory: reports",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.inputs.products == (tmp_path / "data/produtos.xlsx").resolve()
    assert config.inputs.buyers is None
    assert config.analytics.top_resellers == 3
    assert config.analytics.top_products == 10
    assert config.output.directory == (tmp_path / "reports").resolve()


def test_repository_config_loads():
    config = load_config(ROOT / "config" / "config.yaml")
    assert config.aliases == DEFAULT_ALIASES
    assert config.analytics.missing_label == "N/A"


def test_alias_overrides_replace_field_lists():
    table = merge_aliases({"ledger": {"sector": ["Área", "setor"]}, "buyers": {"buyer_name": "Cliente"}})
    assert table["ledger"]["sector"] == ["área", "setor"]
    assert table["buyers"]["buyer_name"] == ["cliente"]
    assert table["products"] == DEFAULT_ALIASES["products"]
    assert DEFAULT_ALIASES["ledger"]["sector"] == ["setor", "sector"]


def test_alias_overrides_reject_unknown_names():
    with pytest.raises(ValueError):
        merge_aliases({"orders": {"id": ["id"]}})
    with pytest.raises(ValueError):
        merge_aliases({"products": {"sku": ["sku"]}})


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_default_config_has_independent_alias_tables():
    first = AppConfig()
    first.aliases["products"]["id"].append("ref")
    assert "ref" not in AppConfig().aliases["products"]["id"]
