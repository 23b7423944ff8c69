"""Header resolution: map arbitrary spreadsheet headers onto canonical fields."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_header(
    value: Any,
    *,
    collapse_whitespace: bool = False,
    strip_accents: bool = False,
) -> str:
    """Lowercase ``value`` and optionally drop whitespace and diacritics."""

    text = "" if value is None else str(value)
    text = text.lower()
    if strip_accents:
        normalized = unicodedata.normalize("NFKD", text)
        text = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    if collapse_whitespace:
        text = re.sub(r"\s+", "", text)
    return text


def candidate_headers(
    headers: Iterable[Any],
    aliases: Sequence[str],
    *,
    collapse_whitespace: bool = False,
    strip_accents: bool = False,
) -> List[Any]:
    """Return every header matching ``aliases`` in resolution priority order.

    Aliases are tried in the given order and, for each alias, headers are
    scanned in source order.  A header is listed once, at its first match.
    """

    options = {"collapse_whitespace": collapse_whitespace, "strip_accents": strip_accents}
    header_pairs = [(header, normalise_header(header, **options)) for header in headers]

    matches: List[Any] = []
    for alias in aliases:
        needle = normalise_header(alias, **options)
        if not needle:
            continue
        for original, normalised in header_pairs:
            if needle in normalised and original not in matches:
                matches.append(original)
    return matches


def resolve_header(
    headers: Iterable[Any],
    aliases: Sequence[str],
    *,
    collapse_whitespace: bool = False,
    strip_accents: bool = False,
) -> Optional[Any]:
    """Return the first header containing one of ``aliases`` or ``None``."""

    matches = candidate_headers(
        headers,
        aliases,
        collapse_whitespace=collapse_whitespace,
        strip_accents=strip_accents,
    )
    return matches[0] if matches else None


def resolve_columns(
    headers: Iterable[Any],
    field_aliases: Mapping[str, Sequence[str]],
    **options: bool,
) -> Dict[str, Optional[Any]]:
    """Resolve one source header per canonical field."""

    header_list = list(headers)
    resolved: Dict[str, Optional[Any]] = {}
    for field_name, aliases in field_aliases.items():
        match = resolve_header(header_list, aliases, **options)
        if match is not None:
            logger.debug("Resolved column '%s' for '%s'", match, field_name)
        else:
            logger.debug("No column found for '%s'", field_name)
        resolved[field_name] = match
    return resolved


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def first_present(frame: pd.DataFrame, columns: Sequence[Any]) -> pd.Series:
    """Per row, take the first non-blank value across ``columns``."""

    result = pd.Series(None, index=frame.index, dtype=object)
    for column in columns:
        values = frame[column].astype(object)
        values = values.mask(values.map(is_blank))
        result = result.where(result.notna(), values)
    return result


def lookup_values(
    frame: pd.DataFrame,
    aliases: Sequence[str],
    *,
    collapse_whitespace: bool = True,
    strip_accents: bool = True,
) -> pd.Series:
    """Row-wise field lookup that falls back past empty cells.

    Unlike :func:`resolve_columns`, a matching header whose cell is empty does
    not end the search; the next candidate header is consulted instead.
    """

    columns = candidate_headers(
        frame.columns,
        aliases,
        collapse_whitespace=collapse_whitespace,
        strip_accents=strip_accents,
    )
    return first_present(frame, columns)


__all__ = [
    "candidate_headers",
    "first_present",
    "is_blank",
    "lookup_values",
    "normalise_header",
    "resolve_columns",
    "resolve_header",
]
