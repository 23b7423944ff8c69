"""Export projections and XLSX encoding."""

from __future__ import annotations

import io
from typing import Mapping

import pandas as pd

DEFAULT_SHEET = "Análise de Vendas"


def format_amount(value: float) -> str:
    return f"{float(value):.2f}"


def format_currency(value: float) -> str:
    """Brazilian display format, e.g. ``R$ 1.234,56``."""

    text = f"{float(value):,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def export_products(products: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "ID": products["id"],
            "Nome": products["name"],
            "Categoria": products["category"],
            "Preço": products["price"].map(format_amount),
            "Vendas": products["sales"],
            "Receita Total": products["revenue"].map(format_amount),
        }
    )


def export_buyers(buyers: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Comprador": buyers["name"],
            "Compras": buyers["purchases"],
            "Total Gasto": buyers["total_spent"].map(format_amount),
            "Ticket Médio": buyers["average_ticket"].map(format_amount),
        }
    )


def export_ledger(rows: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Unidade Gestora": rows["management_unit"],
            "Setor": rows["sector"],
            "Revendedora": rows["reseller"],
            "Produto": rows["product"],
            "Tipo": rows["type"],
            "Itens": rows["item_quantity"],
            "Valor Total": rows["transaction_value"].map(format_amount),
        }
    )


def export_groups(groups: pd.DataFrame, label: str) -> pd.DataFrame:
    """Ledger group table with its key column relabelled."""

    key = groups.columns[0]
    return pd.DataFrame(
        {
            label: groups[key],
            "Valor Total": groups["valor_total"].map(format_amount),
            "Transações": groups["quantidade"],
            "Itens": groups["itens"],
        }
    )


def to_excel_bytes(frame: pd.DataFrame, sheet_name: str = DEFAULT_SHEET) -> bytes:
    """Serialize a single dataframe to XLSX."""

    return workbook_bytes({sheet_name: frame})


def workbook_bytes(sheets: Mapping[str, pd.DataFrame]) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, frame in sheets.items():
            safe_sheet = sheet_name[:31] or "Data"
            frame.to_excel(writer, index=False, sheet_name=safe_sheet)
    buffer.seek(0)
    return buffer.getvalue()


__all__ = [
    "DEFAULT_SHEET",
    "export_buyers",
    "export_groups",
    "export_ledger",
    "export_products",
    "format_amount",
    "format_currency",
    "to_excel_bytes",
    "workbook_bytes",
]
