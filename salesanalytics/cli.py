"""Command line interface for the Sales Analytics pipeline."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from tabulate import tabulate

from .config import AppConfig, load_config
from .export import format_currency
from .reporting import export_reports
from .state import SLOTS, PipelineState, load_upload, set_filters

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sales analytics for catalog, buyer and ledger spreadsheets")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--products", type=Path, help="Catalog spreadsheet (.xlsx/.xls)")
    parser.add_argument("--buyers", type=Path, help="Buyers spreadsheet (.xlsx/.xls)")
    parser.add_argument("--ledger", type=Path, help="Sales ledger spreadsheet (.xlsx/.xls)")
    parser.add_argument("--output-dir", type=Path, help="Directory for generated reports")
    parser.add_argument("--search", default="", help="Search term applied to exported rows")
    parser.add_argument("--category", default="all", help="Category filter for catalog products")
    parser.add_argument("--type", default="all", help="Type filter for ledger rows")
    parser.add_argument("--unit", default="all", help="Management unit filter for the ledger")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--quiet", action="store_true", help="Suppress console summary output")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = _load_app_config(args.config)
        _apply_overrides(config, args)
    except Exception as exc:  # pragma: no cover - CLI validation
        logger.error("Failed to load configuration: %s", exc)
        return 1

    state = PipelineState(config=config)
    for slot in SLOTS:
        path = getattr(config.inputs, slot)
        if path is None:
            continue
        if not path.exists():
            logger.error("Input file for %s does not exist: %s", slot, path)
            continue
        state = load_upload(state, slot, path.name, path.read_bytes())
        if state.slot(slot).error:
            logger.error("Could not load %s from %s: %s", slot, path, state.slot(slot).error)

    state = set_filters(
        state,
        search_term=args.search,
        category=args.category,
        type=args.type,
        management_unit=args.unit,
    )

    if state.product_analytics is None and state.ledger_analytics is None:
        logger.warning("Nothing to analyse: provide products and buyers tables, or a ledger table")
        return 1

    try:
        export_reports(state, config.output)
    except Exception as exc:
        logger.exception("Failed to export reports: %s", exc)
        return 1

    if not args.quiet:
        _print_summary(state)

    return 0


def _load_app_config(path: Optional[Path]) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    for slot in SLOTS:
        value = getattr(args, slot)
        if value:
            setattr(config.inputs, slot, _resolve_override_path(value))

    if args.output_dir:
        config.output.directory = _resolve_override_path(args.output_dir)


def _resolve_override_path(path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def _print_summary(state: PipelineState) -> None:
    products = state.product_analytics
    if products is not None:
        print("Products & buyers:")
        print(f"  Receita total: {format_currency(products.total_revenue)}")
        print(f"  Vendas: {products.total_sales}  Produtos: {products.total_products}  Compradores: {products.total_buyers}")
        print(tabulate(products.top_products, headers="keys", tablefmt="github", floatfmt=".2f", showindex=False))
        print(tabulate(products.top_buyers, headers="keys", tablefmt="github", floatfmt=".2f", showindex=False))
        print(state.filtered_products.caption(state.config.analytics.preview_rows))

    ledger = state.ledger_analytics
    if ledger is not None:
        print("Sales ledger:")
        print(f"  Valor total: {format_currency(ledger.total_value)}")
        print(f"  Transações: {ledger.transactions}  Itens: {ledger.total_items:.0f}  Revendedoras: {ledger.resellers}")
        print(tabulate(ledger.top_resellers, headers="keys", tablefmt="github", floatfmt=".2f", showindex=False))
        print(tabulate(ledger.by_management_unit, headers="keys", tablefmt="github", floatfmt=".2f", showindex=False))
        print(state.filtered_ledger.caption(state.config.analytics.preview_rows))


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
