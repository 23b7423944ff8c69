"""Utilities for writing analytics reports to disk."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd

from .config import OutputConfig
from .export import (
    DEFAULT_SHEET,
    export_buyers,
    export_groups,
    export_ledger,
    export_products,
    workbook_bytes,
)
from .state import PipelineState

logger = logging.getLogger(__name__)


def export_reports(state: PipelineState, output: OutputConfig) -> Dict[str, Path]:
    """Persist the workbooks and JSON summary for every computed pipeline."""

    output_dir = output.directory
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Writing reports to %s", output_dir)

    paths: Dict[str, Path] = {}
    summary: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "filters": {
            "search_term": state.filters.search_term,
            "category": state.filters.category,
            "type": state.filters.type,
            "management_unit": state.filters.management_unit,
        },
    }

    products = state.product_analytics
    if products is not None:
        view = state.filtered_products
        sheets = {
            DEFAULT_SHEET: export_products(view.rows),
            "Compradores": export_buyers(products.buyers),
            "Categorias": _category_sheet(products.category_stats),
        }
        path = output_dir / output.products_report
        path.write_bytes(workbook_bytes(sheets))
        paths["products"] = path
        summary["products"] = {
            **products.kpis(),
            "unmatched_purchases": products.unmatched_purchases,
            "exported_rows": view.total,
            "top_products": _records(products.top_products),
            "top_buyers": _records(products.top_buyers),
        }

    ledger = state.ledger_analytics
    if ledger is not None:
        view = state.filtered_ledger
        sheets = {
            DEFAULT_SHEET: export_ledger(view.rows),
            "Revendedoras": export_groups(ledger.by_reseller, "Revendedora"),
            "Produtos": export_groups(ledger.by_product, "Produto"),
            "Unidades": export_groups(ledger.by_management_unit, "Unidade Gestora"),
            "Setores": export_groups(ledger.by_sector, "Setor"),
            "Tipos": export_groups(ledger.by_type, "Tipo"),
            "Top por Revendedora": _nested_sheet(ledger.top_products_per_reseller),
        }
        path = output_dir / output.ledger_report
        path.write_bytes(workbook_bytes(sheets))
        paths["ledger"] = path
        summary["ledger"] = {
            **ledger.kpis(),
            "exported_rows": view.total,
            "top_resellers": _records(ledger.top_resellers),
            "top_products": _records(ledger.top_products),
        }

    summary_path = output_dir / output.summary_report
    with summary_path.open("w", encoding="utf-8") as handle:
        json.dump(summary, handle, ensure_ascii=False, indent=2, default=_json_default)
    paths["summary"] = summary_path

    return paths


def _category_sheet(category_stats: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Categoria": category_stats["category"],
            "Vendas": category_stats["sales"],
            "Receita Total": category_stats["revenue"].map(lambda value: f"{float(value):.2f}"),
        }
    )


def _nested_sheet(nested: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    frames = []
    for position, (reseller, products) in enumerate(nested.items(), start=1):
        frame = export_groups(products, "Produto")
        frame.insert(0, "Revendedora", reseller)
        frame.insert(0, "Posição", position)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["Posição", "Revendedora", "Produto", "Valor Total", "Transações", "Itens"])
    return pd.concat(frames, ignore_index=True)


def _records(frame: pd.DataFrame):
    return frame.to_dict(orient="records")


def _json_default(value: Any) -> Any:
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    return str(value)


__all__ = ["export_reports"]
