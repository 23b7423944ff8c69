import pandas as pd

from salesanalytics.headers import (
    candidate_headers,
    lookup_values,
    normalise_header,
    resolve_columns,
    resolve_header,
)


def test_resolve_header_prefers_alias_priority_over_column_order():
    headers = ["Nome do Cliente", "Comprador Final"]
    assert resolve_header(headers, ["comprador", "cliente", "nome"]) == "Comprador Final"


def test_resolve_header_takes_first_header_for_the_same_alias():
    headers = ["Produto ID", "Produto Nome"]
    assert resolve_header(headers, ["produto"]) == "Produto ID"


def test_resolve_header_returns_none_without_match():
    assert resolve_header(["Data", "Loja"], ["preco", "valor"]) is None
    assert resolve_header([], ["preco"]) is None


def test_resolution_is_deterministic():
    headers = ["Código", "Nome", "Valor Unitário", "Preço"]
    aliases = ["preco", "preço", "valor", "price"]
    assert resolve_header(headers, aliases) == resolve_header(list(headers), list(aliases))


def test_lowercase_matching_keeps_accents_by_default():
    assert resolve_header(["PREÇO"], ["preco"]) is None
    assert resolve_header(["PREÇO"], ["preço"]) == "PREÇO"


def test_ledger_matching_ignores_whitespace_and_accents():
    headers = ["Região", "Unidade  Gestora", "Código Revendedora"]
    options = {"collapse_whitespace": True, "strip_accents": True}
    assert resolve_header(headers, ["unidadegestora"], **options) == "Unidade  Gestora"
    assert resolve_header(headers, ["codigo revendedor"], **options) == "Código Revendedora"
    assert normalise_header(" Região 04 ", **options) == "regiao04"


def test_candidate_headers_lists_each_match_once_in_priority_order():
    headers = ["Código Produto", "Nome Produto"]
    options = {"collapse_whitespace": True, "strip_accents": True}
    matches = candidate_headers(headers, ["nomeproduto", "produto"], **options)
    assert matches == ["Nome Produto", "Código Produto"]


def test_resolve_columns_maps_every_field():
    resolved = resolve_columns(
        ["ID", "Nome", "Preço"],
        {"id": ["id"], "name": ["nome"], "price": ["preço"], "category": ["categoria"]},
    )
    assert resolved == {"id": "ID", "name": "Nome", "price": "Preço", "category": None}


def test_lookup_values_skips_empty_cells():
    frame = pd.DataFrame(
        {
            "Valor Total": ["10", None, "", "  "],
            "Valor": ["1", "2", "3", None],
        }
    )
    values = lookup_values(frame, ["valortotal", "valor"])
    assert values.tolist()[:3] == ["10", "2", "3"]
    assert pd.isna(values.iloc[3])
