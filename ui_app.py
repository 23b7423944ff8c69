"""Streamlit UI for the Sales Analytics dashboard."""
from __future__ import annotations

from pathlib import Path

import plotly.express as px
import streamlit as st

from salesanalytics.config import AppConfig, load_config
from salesanalytics.export import (
    export_buyers,
    export_ledger,
    export_products,
    format_currency,
    to_excel_bytes,
)
from salesanalytics.state import (
    PipelineState,
    begin_upload,
    dismiss_error,
    load_upload,
    reset,
    set_filters,
)
from salesanalytics.views import ALL, filter_options

st.set_page_config(page_title="Sales Analytics", layout="wide")

CONFIG_PATH = Path("config/config.yaml")
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
UPLOAD_LABELS = {
    "products": "Tabela de Produtos",
    "buyers": "Tabela de Compradores",
    "ledger": "Tabela de Vendas (opcional)",
}


def _initial_state() -> PipelineState:
    config = load_config(CONFIG_PATH) if CONFIG_PATH.exists() else AppConfig()
    return PipelineState(config=config)


def _state() -> PipelineState:
    if "pipeline" not in st.session_state:
        st.session_state["pipeline"] = _initial_state()
    return st.session_state["pipeline"]


def _commit(state: PipelineState) -> None:
    st.session_state["pipeline"] = state


def _upload_slot(slot: str) -> None:
    state = _state()
    current = state.slot(slot)
    title = UPLOAD_LABELS[slot]
    st.subheader(f"✓ {title} carregada" if current.loaded else title)
    uploaded = st.file_uploader("Arraste ou clique para enviar arquivo Excel", key=f"upload_{slot}")
    marker = f"seen_{slot}"
    if uploaded is not None and st.session_state.get(marker) != uploaded.file_id:
        st.session_state[marker] = uploaded.file_id
        with st.spinner("Processando..."):
            state = begin_upload(state, slot)
            state = load_upload(state, slot, uploaded.name, uploaded.getvalue())
        _commit(state)
        current = state.slot(slot)
    if current.error:
        st.error(current.error)
        if st.button("Fechar", key=f"dismiss_{slot}"):
            _commit(dismiss_error(_state(), slot))
            st.rerun()


def _kpi_row(values) -> None:
    columns = st.columns(len(values))
    for column, (label, value) in zip(columns, values):
        column.metric(label, value)


def _products_dashboard(state: PipelineState) -> None:
    analytics = state.product_analytics
    _kpi_row(
        [
            ("Receita Total", format_currency(analytics.total_revenue)),
            ("Total de Vendas", analytics.total_sales),
            ("Produtos", analytics.total_products),
            ("Compradores", analytics.total_buyers),
        ]
    )
    left, right = st.columns(2)
    if not analytics.top_products.empty:
        left.plotly_chart(
            px.bar(analytics.top_products, x="name", y="sales", title="Top 10 Produtos"),
            use_container_width=True,
        )
    if not analytics.category_stats.empty:
        right.plotly_chart(
            px.pie(analytics.category_stats, names="category", values="revenue", title="Vendas por Categoria"),
            use_container_width=True,
        )
    st.subheader("Top Compradores")
    st.dataframe(export_buyers(analytics.top_buyers), hide_index=True)


def _products_table(state: PipelineState) -> None:
    analytics = state.product_analytics
    search_col, category_col = st.columns([3, 1])
    search = search_col.text_input("Buscar produtos por nome ou ID...", value=state.filters.search_term)
    options = filter_options(analytics.products, "category")
    current = state.filters.category if state.filters.category in options else ALL
    category = category_col.selectbox(
        "Categoria",
        options,
        index=options.index(current),
        format_func=lambda value: "Todas Categorias" if value == ALL else str(value),
    )
    if search != state.filters.search_term or category != state.filters.category:
        state = set_filters(state, search_term=search, category=category)
        _commit(state)

    view = state.filtered_products
    limit = state.config.analytics.preview_rows
    st.caption(f"Produtos ({view.total}) · {view.caption(limit)}")
    exported = export_products(view.rows)
    st.dataframe(exported.head(limit), hide_index=True)
    st.download_button(
        "Exportar",
        data=to_excel_bytes(exported),
        file_name="analise_vendas.xlsx",
        mime=XLSX_MIME,
    )


def _buyers_table(state: PipelineState) -> None:
    buyers = state.product_analytics.buyers
    st.subheader(f"Todos os Compradores ({len(buyers)})")
    st.dataframe(export_buyers(buyers), hide_index=True)


def _ledger_dashboard(state: PipelineState) -> None:
    analytics = state.ledger_analytics
    _kpi_row(
        [
            ("Valor Total", format_currency(analytics.total_value)),
            ("Transações", analytics.transactions),
            ("Itens", f"{analytics.total_items:,.0f}"),
            ("Ticket Médio", format_currency(analytics.average_ticket)),
        ]
    )
    left, right = st.columns(2)
    if not analytics.top_resellers.empty:
        left.plotly_chart(
            px.bar(analytics.top_resellers, x="reseller", y="valor_total", title="Top 20 Revendedoras"),
            use_container_width=True,
        )
    if not analytics.by_management_unit.empty:
        right.plotly_chart(
            px.bar(analytics.by_management_unit, x="management_unit", y="valor_total", title="Por Unidade Gestora"),
            use_container_width=True,
        )
    st.subheader("Top Produtos por Revendedora")
    for reseller, products in analytics.top_products_per_reseller.items():
        with st.expander(reseller):
            st.dataframe(products, hide_index=True)

    options_type = filter_options(analytics.rows, "type")
    options_unit = filter_options(analytics.rows, "management_unit")
    search_col, type_col, unit_col = st.columns([2, 1, 1])
    search = search_col.text_input("Buscar revendedora, produto ou setor...", key="ledger_search")
    type_filter = type_col.selectbox("Tipo", options_type, key="ledger_type")
    unit_filter = unit_col.selectbox("Unidade", options_unit, key="ledger_unit")
    state = set_filters(state, search_term=search, type=type_filter, management_unit=unit_filter)

    view = state.filtered_ledger
    limit = state.config.analytics.preview_rows
    st.caption(view.caption(limit))
    exported = export_ledger(view.rows)
    st.dataframe(exported.head(limit), hide_index=True)
    st.download_button(
        "Exportar vendas",
        data=to_excel_bytes(exported),
        file_name="analise_revendedoras.xlsx",
        mime=XLSX_MIME,
    )


st.title("Sales Analytics")
st.write("Análise Avançada de Vendas")

state = _state()
if not (state.products.loaded and state.buyers.loaded and state.ledger.loaded):
    upload_columns = st.columns(3)
    for column, slot in zip(upload_columns, UPLOAD_LABELS):
        with column:
            _upload_slot(slot)

state = _state()
if state.product_analytics is None and state.ledger_analytics is None:
    st.info("Envie as tabelas de produtos e compradores, ou a tabela de vendas.")
    st.stop()

tab_names = []
if state.product_analytics is not None:
    tab_names.extend(["Dashboard", "Produtos", "Compradores"])
if state.ledger_analytics is not None:
    tab_names.append("Revendedoras")
tabs = dict(zip(tab_names, st.tabs(tab_names)))

if "Dashboard" in tabs:
    with tabs["Dashboard"]:
        _products_dashboard(state)
    with tabs["Produtos"]:
        _products_table(state)
    with tabs["Compradores"]:
        _buyers_table(state)
if "Revendedoras" in tabs:
    with tabs["Revendedoras"]:
        _ledger_dashboard(state)

if st.button("Carregar Novos Dados"):
    _commit(reset(_state()))
    for key in [key for key in st.session_state if str(key).startswith("seen_")]:
        del st.session_state[key]
    st.rerun()
