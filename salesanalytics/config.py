"""Configuration loading utilities for Sales Analytics."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

AliasTable = Dict[str, Dict[str, List[str]]]

# Ordered alias substrings per canonical field.  The products and buyers
# tables are matched on lowercased headers only, so accented spellings are
# listed explicitly; ledger aliases are compared without whitespace or accents.
DEFAULT_ALIASES: AliasTable = {
    "products": {
        "id": ["id", "codigo", "código"],
        "name": ["nome", "produto", "name"],
        "price": ["preco", "preço", "valor", "price"],
        "category": ["categoria", "category", "tipo"],
    },
    "buyers": {
        "buyer_name": ["comprador", "cliente", "buyer", "nome"],
        "product_ref": ["produto", "product", "id", "produtoid"],
    },
    "ledger": {
        "management_unit": [
            "unidadegestora",
            "unidadedenegocio",
            "gerencia",
            "regional",
            "regiao",
            "unidade",
        ],
        "sector": ["setor", "sector"],
        "reseller_code": [
            "codigorevendedor",
            "codrevendedor",
            "codigodarevendedor",
            "resellercode",
        ],
        "reseller_name": [
            "nomerevendedor",
            "nomedarevendedor",
            "revendedor",
            "reseller",
        ],
        "product_code": [
            "codigoproduto",
            "codproduto",
            "codigodoproduto",
            "sku",
            "productcode",
        ],
        "product_name": [
            "nomeproduto",
            "nomedoproduto",
            "descricaoproduto",
            "produto",
            "product",
        ],
        "type": ["tipo", "type"],
        "item_quantity": [
            "quantidadeitens",
            "qtditens",
            "quantidade",
            "qtd",
            "itens",
            "quantity",
        ],
        "transaction_value": [
            "valortotal",
            "valorvenda",
            "valortransacao",
            "valor",
            "total",
            "value",
        ],
    },
}

TABLE_KINDS = tuple(DEFAULT_ALIASES)


@dataclass
class InputConfig:
    """Spreadsheet files used by the command line pipeline."""

    products: Optional[Path] = None
    buyers: Optional[Path] = None
    ledger: Optional[Path] = None

    def resolved(self, base_path: Path) -> "InputConfig":
        return InputConfig(
            products=_resolve_optional(self.products, base_path),
            buyers=_resolve_optional(self.buyers, base_path),
            ledger=_resolve_optional(self.ledger, base_path),
        )


@dataclass
class AnalyticsConfig:
    """Ranking sizes and default labels used by the aggregation passes."""

    top_products: int = 10
    top_buyers: int = 10
    top_resellers: int = 20
    top_ledger_products: int = 20
    products_per_reseller: int = 5
    default_category: str = "Sem Categoria"
    missing_label: str = "N/A"
    preview_rows: int = 100


@dataclass
class OutputConfig:
    """Paths describing where reports should be written."""

    directory: Path = Path("output")
    products_report: str = "products_report.xlsx"
    ledger_report: str = "ledger_report.xlsx"
    summary_report: str = "analytics_summary.json"

    def resolved(self, base_path: Path) -> "OutputConfig":
        return OutputConfig(
            directory=_resolve_path(self.directory, base_path),
            products_report=self.products_report,
            ledger_report=self.ledger_report,
            summary_report=self.summary_report,
        )


@dataclass
class AppConfig:
    """Container for all configuration required by the CLI pipeline."""

    inputs: InputConfig = field(default_factory=InputConfig)
    aliases: AliasTable = field(default_factory=lambda: copy.deepcopy(DEFAULT_ALIASES))
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            inputs=self.inputs.resolved(base_path),
            aliases=self.aliases,
            analytics=self.analytics,
            output=self.output.resolved(base_path),
        )


def load_config(path: Path) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config: Mapping[str, Any] = yaml.safe_load(stream) or {}

    inputs = InputConfig(**_parse_inputs_section(raw_config.get("inputs", {})))
    aliases = merge_aliases(raw_config.get("aliases") or {})
    analytics = AnalyticsConfig(**raw_config.get("analytics", {}))
    output = OutputConfig(**_parse_output_section(raw_config.get("output", {})))

    config = AppConfig(inputs=inputs, aliases=aliases, analytics=analytics, output=output)
    return config.resolved(config_path.parent)


def merge_aliases(overrides: Mapping[str, Mapping[str, Any]]) -> AliasTable:
    """Return the default alias table with per-field overrides applied.

    Overrides replace the alias list of a field entirely, so the priority
    order in the configuration file is the order used for matching.
    """

    table = copy.deepcopy(DEFAULT_ALIASES)
    for kind, fields_section in overrides.items():
        if kind not in table:
            raise ValueError(f"Unknown table kind '{kind}' in aliases section")
        if not isinstance(fields_section, Mapping):
            raise ValueError(f"aliases.{kind} must be a mapping of field to alias list")
        for field_name, values in fields_section.items():
            if field_name not in table[kind]:
                raise ValueError(f"Unknown field '{field_name}' for table '{kind}'")
            if isinstance(values, str):
                values = [values]
            table[kind][field_name] = [str(value).strip().lower() for value in values if str(value).strip()]
    return table


def _parse_inputs_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for key in ("products", "buyers", "ledger"):
        value = section.get(key)
        if value:
            parsed[key] = Path(value)
    return parsed


def _parse_output_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    if "directory" in section:
        parsed["directory"] = Path(section["directory"])
    for key in ("products_report", "ledger_report", "summary_report"):
        if key in section:
            parsed[key] = section[key]
    return parsed


def _resolve_optional(path: Optional[Path], base_path: Path) -> Optional[Path]:
    if path is None:
        return None
    return _resolve_path(path, base_path)


def _resolve_path(path: Path, base_path: Path) -> Path:
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()


__all__ = [
    "AliasTable",
    "AnalyticsConfig",
    "AppConfig",
    "DEFAULT_ALIASES",
    "InputConfig",
    "OutputConfig",
    "TABLE_KINDS",
    "load_config",
    "merge_aliases",
]
