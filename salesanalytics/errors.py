"""Upload errors surfaced per upload slot."""

from __future__ import annotations

from typing import Optional, Sequence

EMPTY_FILE_MESSAGE = "O arquivo está vazio"
UNSUPPORTED_FILE_MESSAGE = "Por favor, envie um arquivo Excel (.xlsx ou .xls)"


class UploadError(ValueError):
    """Base class for every error recovered at the upload boundary."""


class EmptyFile(UploadError):
    def __init__(self, message: str = EMPTY_FILE_MESSAGE) -> None:
        super().__init__(message)


class UnsupportedFileType(UploadError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(UNSUPPORTED_FILE_MESSAGE)
        self.filename = filename


class MissingRequiredColumns(UploadError):
    """Raised when a table lacks a header for one of its mandatory fields."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class DecodeFailure(UploadError):
    """Wraps whatever the spreadsheet decoder raised, keeping its message."""


__all__ = [
    "DecodeFailure",
    "EMPTY_FILE_MESSAGE",
    "EmptyFile",
    "MissingRequiredColumns",
    "UNSUPPORTED_FILE_MESSAGE",
    "UnsupportedFileType",
    "UploadError",
]
