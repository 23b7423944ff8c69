"""Row normalisation for catalog, buyers and sales-ledger tables."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import DEFAULT_ALIASES, AnalyticsConfig
from .errors import MissingRequiredColumns
from .headers import candidate_headers, is_blank, lookup_values, resolve_columns

logger = logging.getLogger(__name__)

CATALOG_COLUMNS: Sequence[str] = ("id", "name", "price", "category")
PURCHASE_COLUMNS: Sequence[str] = ("buyer_name", "product_ref")
LEDGER_COLUMNS: Sequence[str] = (
    "management_unit",
    "sector",
    "reseller",
    "product",
    "type",
    "item_quantity",
    "transaction_value",
    "total_value",
)

LEADING_NUMBER = r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"

MATCH_OPTIONS: Dict[str, Dict[str, bool]] = {
    "products": {},
    "buyers": {},
    "ledger": {"collapse_whitespace": True, "strip_accents": True},
}

# Each entry is a group of fields of which at least one must resolve.
REQUIRED_FIELDS: Dict[str, Sequence[Tuple[str, ...]]] = {
    "products": (("id",), ("name",), ("price",)),
    "buyers": (("buyer_name",), ("product_ref",)),
    "ledger": (("reseller_code", "reseller_name"), ("transaction_value",)),
}

REQUIRED_MESSAGES: Dict[str, str] = {
    "products": "Tabela de produtos deve conter: ID, Nome e Preço",
    "buyers": "Tabela de compradores deve conter: Comprador e Produto",
    "ledger": "Tabela de vendas deve conter: Revendedora e Valor",
}


def validate_columns(
    frame: pd.DataFrame,
    kind: str,
    aliases: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
) -> None:
    """Fail fast when ``frame`` has no header for a mandatory field."""

    table_aliases = (aliases or DEFAULT_ALIASES)[kind]
    options = MATCH_OPTIONS[kind]
    headers = list(frame.columns)

    missing = []
    for group in REQUIRED_FIELDS[kind]:
        if not any(candidate_headers(headers, table_aliases[name], **options) for name in group):
            missing.append(" | ".join(group))
    if missing:
        logger.info("Table '%s' is missing required fields: %s", kind, ", ".join(missing))
        raise MissingRequiredColumns(REQUIRED_MESSAGES[kind], missing)


def normalize_table(
    frame: pd.DataFrame,
    kind: str,
    aliases: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
    settings: Optional[AnalyticsConfig] = None,
) -> pd.DataFrame:
    table_aliases = (aliases or DEFAULT_ALIASES)[kind]
    settings = settings or AnalyticsConfig()
    if kind == "products":
        return normalize_catalog(frame, table_aliases, settings.default_category)
    if kind == "buyers":
        return normalize_purchases(frame, table_aliases)
    if kind == "ledger":
        return normalize_ledger(frame, table_aliases, settings.missing_label)
    raise ValueError(f"Unknown table kind '{kind}'")


def normalize_catalog(
    frame: pd.DataFrame,
    aliases: Mapping[str, Sequence[str]] = DEFAULT_ALIASES["products"],
    default_category: str = "Sem Categoria",
) -> pd.DataFrame:
    """Catalog seeds: verbatim id and name, numeric price, defaulted category."""

    columns = resolve_columns(frame.columns, aliases)
    normalised = pd.DataFrame(index=frame.index)
    normalised["id"] = _column_values(frame, columns["id"])
    normalised["name"] = _column_values(frame, columns["name"])
    normalised["price"] = coerce_numeric(_column_values(frame, columns["price"]))
    category = _column_values(frame, columns["category"])
    normalised["category"] = category.map(lambda value: default_category if is_blank(value) else value)
    return normalised.loc[:, CATALOG_COLUMNS].reset_index(drop=True)


def normalize_purchases(
    frame: pd.DataFrame,
    aliases: Mapping[str, Sequence[str]] = DEFAULT_ALIASES["buyers"],
) -> pd.DataFrame:
    """Purchase seeds: verbatim buyer name, product reference as text."""

    columns = resolve_columns(frame.columns, aliases)
    normalised = pd.DataFrame(index=frame.index)
    normalised["buyer_name"] = _column_values(frame, columns["buyer_name"])
    normalised["product_ref"] = _column_values(frame, columns["product_ref"]).map(key_text)
    return normalised.loc[:, PURCHASE_COLUMNS].reset_index(drop=True)


def normalize_ledger(
    frame: pd.DataFrame,
    aliases: Mapping[str, Sequence[str]] = DEFAULT_ALIASES["ledger"],
    missing_label: str = "N/A",
) -> pd.DataFrame:
    """Self-contained sales rows with composite reseller and product labels.

    Values are looked up per row, so an empty cell under the preferred header
    falls back to the next matching header.  ``transaction_value`` is already
    the transaction total and is never multiplied by ``item_quantity``.
    """

    def lookup(field_name: str) -> pd.Series:
        return lookup_values(frame, aliases[field_name], **MATCH_OPTIONS["ledger"])

    normalised = pd.DataFrame(index=frame.index)
    normalised["management_unit"] = lookup("management_unit").map(
        lambda value: _digits_only(value, missing_label)
    )
    normalised["sector"] = lookup("sector").map(lambda value: _text_or(value, missing_label))
    normalised["reseller"] = _composite_labels(
        lookup("reseller_code"), lookup("reseller_name"), missing_label
    )
    normalised["product"] = _composite_labels(
        lookup("product_code"), lookup("product_name"), missing_label
    )
    normalised["type"] = lookup("type").map(lambda value: _text_or(value, missing_label))
    normalised["item_quantity"] = coerce_numeric(lookup("item_quantity"))
    normalised["transaction_value"] = coerce_numeric(lookup("transaction_value"))
    normalised["total_value"] = normalised["transaction_value"]
    return normalised.loc[:, LEDGER_COLUMNS].reset_index(drop=True)


def coerce_numeric(values: Any) -> pd.Series:
    """Read the leading decimal number of each value, failures to 0.

    Parsing stops at the first character that cannot continue the number, so
    ``"12abc"`` is 12 and ``"10,50"`` is 10, while a currency prefix such as
    ``"R$ 25,50"`` leaves nothing to parse.
    """

    if not isinstance(values, pd.Series):
        values = pd.Series(values, dtype=object)
    if values.empty:
        return pd.Series(dtype=float, index=values.index)

    is_number = values.map(
        lambda value: isinstance(value, (int, float, np.number)) and not isinstance(value, bool)
    )

    prefix = values.astype(str).str.extract(LEADING_NUMBER, expand=False)
    parsed = pd.to_numeric(prefix, errors="coerce")
    direct = pd.to_numeric(values.where(is_number), errors="coerce")
    parsed = parsed.where(~is_number, direct)
    parsed = parsed.replace([np.inf, -np.inf], np.nan)
    return parsed.fillna(0.0).astype(float)


def key_text(value: Any) -> str:
    """String identity of a cell, rendering integral floats without ``.0``."""

    if is_blank(value):
        return ""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def _column_values(frame: pd.DataFrame, column: Optional[Any]) -> pd.Series:
    if column is None:
        return pd.Series(None, index=frame.index, dtype=object)
    values = frame[column].astype(object)
    return values.where(values.notna(), None)


def _digits_only(value: Any, missing_label: str) -> str:
    if is_blank(value):
        return missing_label
    digits = re.sub(r"\D", "", key_text(value))
    return digits or missing_label


def _text_or(value: Any, missing_label: str) -> str:
    return missing_label if is_blank(value) else key_text(value)


def _composite_labels(codes: pd.Series, names: pd.Series, missing_label: str) -> pd.Series:
    labels = []
    for code, name in zip(codes, names):
        code_text = "" if is_blank(code) else key_text(code)
        name_text = "" if is_blank(name) else key_text(name)
        # Code and name aliases overlap ("codrevendedor" contains "revendedor"),
        # so both lookups can land on the same cell.
        if code_text and name_text and code_text != name_text:
            labels.append(f"{code_text} - {name_text}")
        else:
            labels.append(code_text or name_text or missing_label)
    return pd.Series(labels, index=codes.index, dtype=object)


__all__ = [
    "CATALOG_COLUMNS",
    "LEDGER_COLUMNS",
    "PURCHASE_COLUMNS",
    "REQUIRED_FIELDS",
    "coerce_numeric",
    "key_text",
    "normalize_catalog",
    "normalize_ledger",
    "normalize_purchases",
    "normalize_table",
    "validate_columns",
]
