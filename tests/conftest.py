from __future__ import annotations

import io
from pathlib import Path
import sys

import pandas as pd
import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))


def _xlsx_bytes(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


@pytest.fixture
def xlsx_bytes():
    return _xlsx_bytes


@pytest.fixture
def raw_catalog() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "ID": [1, 2, 3],
            "Nome do Produto": ["Widget", "Gadget", "Gizmo"],
            "Preço": ["10", "25.50", "abc"],
            "Categoria": ["Tools", None, "Tools"],
        }
    )


@pytest.fixture
def raw_purchases() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Comprador": ["Ana", "Bruno", "Ana", "Carla", "Bruno"],
            "Produto": ["1", "gadget", "Widget", "99", 2],
        }
    )


@pytest.fixture
def raw_ledger() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Unidade Gestora": ["Região 04", "Região 04", "UG 7", "Região 04", "UG 7"],
            "Setor": ["Norte", "Norte", "Sul", "Centro", "Sul"],
            "Código Revendedora": ["042", "042", "017", "042", "099"],
            "Nome Revendedora": ["Jane Doe", "Jane Doe", "Maria", "Jane Doe", "Rita"],
            "Código Produto": ["P1", "P2", "P1", "P3", "P2"],
            "Nome Produto": ["Perfume", "Creme", "Perfume", "Batom", "Creme"],
            "Tipo": ["Venda", "Venda", "Venda", "Brinde", "Venda"],
            "Quantidade Itens": ["1", "6", "2", "3", "abc"],
            "Valor Total": ["100,00", "30", "200", "15", "45"],
        }
    )
