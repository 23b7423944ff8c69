"""Sales Analytics core package.

Column reconciliation, the catalog/purchase join and the rollups behind the
sales dashboard.  The command line interface and the Streamlit app in
``ui_app.py`` both drive it through :class:`PipelineState`.
"""

from .aggregate import (
    LedgerAnalytics,
    ProductAnalytics,
    build_ledger_analytics,
    build_product_analytics,
    group_aggregate,
)
from .catalog import CatalogEntry, CatalogIndex, reconcile
from .config import DEFAULT_ALIASES, AnalyticsConfig, AppConfig, load_config
from .errors import (
    DecodeFailure,
    EmptyFile,
    MissingRequiredColumns,
    UnsupportedFileType,
    UploadError,
)
from .headers import resolve_header
from .io import load_table, read_spreadsheet
from .state import PipelineState, load_upload, reset, set_filters
from .views import FilterState, filter_ledger, filter_products

__all__ = [
    "AnalyticsConfig",
    "AppConfig",
    "CatalogEntry",
    "CatalogIndex",
    "DEFAULT_ALIASES",
    "DecodeFailure",
    "EmptyFile",
    "FilterState",
    "LedgerAnalytics",
    "MissingRequiredColumns",
    "PipelineState",
    "ProductAnalytics",
    "UnsupportedFileType",
    "UploadError",
    "build_ledger_analytics",
    "build_product_analytics",
    "filter_ledger",
    "filter_products",
    "group_aggregate",
    "load_config",
    "load_table",
    "load_upload",
    "read_spreadsheet",
    "reconcile",
    "reset",
    "resolve_header",
    "set_filters",
]
