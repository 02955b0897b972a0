"""Normalisation + aggregation pipeline — pure functions, no side effects."""

from __future__ import annotations

import re

import pandas as pd

from vaccine_supply import REQUIRED_COLUMNS, STATE, VACCINE_COLUMNS
from vaccine_supply.errors import MalformedDataError, SchemaMismatchError
from vaccine_supply.models import SupplyReport

Number = int | float

# ── Header normalisation ────────────────────────────────────────


_AMPERSAND_JOIN_RE = re.compile(r"(?<=[0-9A-Za-z])&(?=[0-9A-Za-z])")
_CAMEL_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]+")
_THOUSANDS_SEP_RE = re.compile(r"(?<=\d),(?=\d{3}(?:\D|$))")
_MAX_REPORTED_ROWS = 5


def normalize_column_name(name: object) -> str:
    """Return the canonical lowercase_snake_case form of *name*.

    ``"Pfizer Available"`` -> ``pfizer_available``, ``"J&J Available"`` ->
    ``jj_available``, ``"TotalShipped"`` -> ``total_shipped``.  Applying it
    to an already-canonical name returns the name unchanged.
    """
    text = str(name).strip()
    text = _AMPERSAND_JOIN_RE.sub("", text)
    text = _CAMEL_ACRONYM_RE.sub(r"\1_\2", text)
    text = _CAMEL_RE.sub(r"\1_\2", text)
    return _NON_ALNUM_RE.sub("_", text).strip("_").lower()


def _find_duplicate_columns(columns: pd.Index) -> list[str]:
    return sorted({str(name) for name in columns[columns.duplicated(keep=False)]})


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *df* with canonical column names.

    Raises ``MalformedDataError`` when a header normalises to nothing or
    when two headers collapse onto the same canonical name.
    """
    raw_names = [str(c) for c in df.columns]
    canonical = [normalize_column_name(c) for c in raw_names]

    blank = [raw for raw, name in zip(raw_names, canonical) if not name]
    if blank:
        raise MalformedDataError(
            f"Header has column names with no usable characters: {blank!r}"
        )

    df = df.copy()
    df.columns = pd.Index(canonical)
    duplicate_cols = _find_duplicate_columns(df.columns)
    if duplicate_cols:
        details = []
        for target in duplicate_cols:
            sources = " + ".join(
                raw for raw, name in zip(raw_names, canonical) if name == target
            )
            details.append(f"{target} (source: {sources})")
        raise MalformedDataError(
            f"Duplicate columns after normalization: {'; '.join(details)}"
        )
    return df


def validate_schema(df: pd.DataFrame) -> None:
    """Raise ``SchemaMismatchError`` if any required column is absent."""
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaMismatchError(
            f"Missing required columns: {', '.join(missing)}", missing=missing
        )


# ── Measure parsing ──────────────────────────────────────────────


def _parse_measure(s: pd.Series) -> pd.Series:
    text = s.astype("string").str.strip()
    text = text.str.replace(_THOUSANDS_SEP_RE, "", regex=True)
    return pd.to_numeric(text, errors="coerce")


def _column_total(
    table: pd.DataFrame, column: str, *, lenient: bool
) -> tuple[Number, int]:
    """Return ``(total, n_replaced)`` for one measure column."""
    parsed = _parse_measure(table[column])
    non_finite = parsed.abs() == float("inf")
    invalid = (parsed.isna() | (parsed < 0) | non_finite).fillna(True).astype(bool)
    n_invalid = int(invalid.sum())

    if n_invalid and not lenient:
        rows = ", ".join(str(idx) for idx in invalid[invalid].index[:_MAX_REPORTED_ROWS])
        more = " …" if n_invalid > _MAX_REPORTED_ROWS else ""
        raise SchemaMismatchError(
            f"Column {column!r} has {n_invalid} missing, non-numeric, negative or infinite "
            f"values (rows: {rows}{more}); rerun in lenient mode to count them as 0"
        )

    values = parsed.mask(invalid, 0)
    if pd.api.types.is_integer_dtype(values.dtype):
        return int(values.sum()), n_invalid

    as_float = values.astype("float64")
    if bool((as_float % 1 == 0).all()):
        return int(as_float.astype("int64").sum()), n_invalid
    return float(as_float.sum()), n_invalid


# ── Aggregation ─────────────────────────────────────────────────


def aggregate_wide(
    table: pd.DataFrame,
    *,
    lenient: bool = False,
    report: SupplyReport | None = None,
) -> pd.DataFrame:
    """Sum each vaccine column into a single statewide row.

    Returns a one-row frame with columns ``state, Pfizer, Moderna, JandJ``.
    In strict mode (the default) any missing, non-numeric, negative or
    infinite value raises ``SchemaMismatchError``; with ``lenient=True`` those values
    count as 0 and are tallied on *report*.
    """
    validate_schema(table)

    totals: dict[str, Number] = {}
    for label, column in VACCINE_COLUMNS.items():
        total, n_replaced = _column_total(table, column, lenient=lenient)
        totals[label] = total
        if n_replaced and report is not None:
            report.coerced_values += n_replaced
            suffix = "" if n_replaced == 1 else "s"
            report.warnings.append(
                f"Counted {n_replaced} missing or invalid value{suffix} in {column} as 0"
            )

    return pd.DataFrame([{"state": STATE, **totals}], columns=["state", *VACCINE_COLUMNS])


def reshape_long(wide: pd.DataFrame) -> pd.DataFrame:
    """Pivot the statewide row into one ``vaccine_type, supply`` row per vaccine.

    Totals keep their own type: a fractional total does not turn the
    integer ones into floats.
    """
    measures = list(VACCINE_COLUMNS)
    if wide[measures].dtypes.nunique() > 1:
        wide = wide.astype({label: object for label in measures})
    long = wide.melt(
        id_vars="state",
        value_vars=measures,
        var_name="vaccine_type",
        value_name="supply",
    )
    return long[["vaccine_type", "supply"]].reset_index(drop=True)


def summarize_supply(
    table: pd.DataFrame, *, lenient: bool = False
) -> tuple[pd.DataFrame, SupplyReport]:
    """Aggregate a ProviderTable into long-form supply totals.

    Returns ``(supply_long, report)``.  ``supply_long`` always has exactly
    three rows in the order Pfizer, Moderna, JandJ, including for an empty
    table where every total is 0.
    """
    report = SupplyReport(rows_in=len(table))
    wide = aggregate_wide(table, lenient=lenient, report=report)
    supply_long = reshape_long(wide)

    if report.rows_in == 0:
        report.warnings.append("Provider table is empty; all supply totals are 0")

    return supply_long, report
