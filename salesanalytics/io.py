"""Spreadsheet decoding and the per-upload validation boundary."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

import pandas as pd

from .config import AnalyticsConfig
from .errors import DecodeFailure, EmptyFile, UnsupportedFileType, UploadError
from .normalize import normalize_table, validate_columns

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".xlsx", ".xls"}

Decoder = Callable[[bytes, str], pd.DataFrame]


def check_extension(filename: str) -> None:
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileType(filename)


def read_spreadsheet(content: bytes, filename: str) -> pd.DataFrame:
    """Decode the first sheet of a workbook, first row as header."""

    logger.debug("Reading Excel %s (%d bytes)", filename, len(content))
    frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    return frame.dropna(how="all").reset_index(drop=True)


def load_table(
    content: bytes,
    filename: str,
    kind: str,
    aliases: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
    settings: Optional[AnalyticsConfig] = None,
    decoder: Decoder = read_spreadsheet,
) -> pd.DataFrame:
    """Decode, validate and normalise one uploaded table.

    Raises one of the :class:`~salesanalytics.errors.UploadError` kinds;
    nothing is normalised unless the mandatory headers are present.
    """

    check_extension(filename)
    try:
        frame = decoder(content, filename)
    except UploadError:
        raise
    except Exception as exc:
        logger.debug("Decoder failed for %s", filename, exc_info=True)
        raise DecodeFailure(str(exc)) from exc

    if frame is None or len(frame) == 0:
        raise EmptyFile()

    validate_columns(frame, kind, aliases)
    normalised = normalize_table(frame, kind, aliases, settings)
    logger.info("Loaded %d %s rows from %s", len(normalised), kind, filename)
    return normalised


def load_table_from_path(
    path: Path,
    kind: str,
    aliases: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
    settings: Optional[AnalyticsConfig] = None,
) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset '{path}' does not exist")
    return load_table(path.read_bytes(), path.name, kind, aliases, settings)


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "check_extension",
    "load_table",
    "load_table_from_path",
    "read_spreadsheet",
]
