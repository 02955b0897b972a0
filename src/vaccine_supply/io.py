"""I/O helpers — fetch the provider table from a URL or a local file."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import cast

import pandas as pd
import requests
from openpyxl.utils.exceptions import InvalidFileException

from vaccine_supply.errors import MalformedDataError, SourceUnavailableError
from vaccine_supply.pipeline import normalize_columns, validate_schema

REQUEST_TIMEOUT = 30
_EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


# ── Fetching ─────────────────────────────────────────────────────


def _fetch_bytes(url: str) -> bytes:
    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.exceptions.RequestException as exc:
        raise SourceUnavailableError(f"Could not fetch {url}: {exc}") from exc
    return response.content


def _read_path_bytes(path: Path) -> bytes:
    if not path.exists():
        raise SourceUnavailableError(f"Input file not found: {path}")
    if path.is_dir():
        raise SourceUnavailableError(f"Input path is a directory, not a file: {path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc


# ── Parsing ──────────────────────────────────────────────────────


def _parse_csv(payload: bytes, label: str, delimiter: str) -> pd.DataFrame:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return pd.read_csv(
                io.BytesIO(payload),
                dtype="string",
                sep=delimiter,
                encoding=encoding,
                encoding_errors="strict",
                na_filter=True,
                keep_default_na=True,
            )
        except pd.errors.EmptyDataError as exc:
            raise MalformedDataError(f"{label} has no header row") from exc
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
    raise MalformedDataError(f"Could not read CSV {label} (decode or parse failed)") from last_exc


def _parse_excel(path: Path) -> pd.DataFrame:
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        return read_excel(path, engine="openpyxl", dtype="string")
    except OSError as exc:
        raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc
    except (ValueError, zipfile.BadZipFile, InvalidFileException) as exc:
        raise MalformedDataError(f"Could not read workbook {path}: {exc}") from exc


# ── Loading ──────────────────────────────────────────────────────


def load_table(source: str | Path, delimiter: str = ",") -> pd.DataFrame:
    """Load the raw provider table from *source* (``http(s)://`` URL or path).

    Local ``.xlsx`` workbooks are read with openpyxl; anything else is
    parsed as delimited text.

    Raises
    ------
    SourceUnavailableError
        If the URL or file cannot be reached or read.
    MalformedDataError
        If the payload has no header or cannot be parsed.
    """
    if _is_url(source):
        url = str(source)
        return _parse_csv(_fetch_bytes(url), url, delimiter)

    path = Path(source)
    if path.suffix.lower() in _EXCEL_SUFFIXES:
        if not path.is_file():
            raise SourceUnavailableError(f"Input file not found: {path}")
        return _parse_excel(path)
    return _parse_csv(_read_path_bytes(path), str(path), delimiter)


def load_providers(source: str | Path, delimiter: str = ",") -> pd.DataFrame:
    """Load *source* and return a schema-checked ProviderTable."""
    table = normalize_columns(load_table(source, delimiter=delimiter))
    validate_schema(table)
    return table
