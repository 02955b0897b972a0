"""Targeted tests for normalisation, aggregation and reshape contracts."""

from __future__ import annotations

import pandas as pd
import pytest

from vaccine_supply import REQUIRED_COLUMNS
from vaccine_supply.errors import MalformedDataError, SchemaMismatchError
from vaccine_supply.models import SupplyReport
from vaccine_supply.pipeline import (
    aggregate_wide,
    normalize_column_name,
    normalize_columns,
    reshape_long,
    summarize_supply,
    validate_schema,
)

RAW_HEADERS = [
    "Pfizer Available",
    "  Moderna Available ",
    "J&J Available",
    "JJ-Available",
    "TotalShipped",
    "Provider Type",
    "provider__type",
    "JJAvailable",
    "Total Shipped (doses)",
    "pfizer_available",
    "Dose #2",
]


def _providers(rows: list[dict[str, object]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=[*REQUIRED_COLUMNS, "total_shipped", "provider_type"])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Pfizer Available", "pfizer_available"),
        ("  Moderna Available ", "moderna_available"),
        ("J&J Available", "jj_available"),
        ("JJAvailable", "jj_available"),
        ("TotalShipped", "total_shipped"),
        ("Provider Type", "provider_type"),
        ("Total Shipped (doses)", "total_shipped_doses"),
    ],
)
def test_normalize_column_name_canonical_forms(raw: str, expected: str) -> None:
    assert normalize_column_name(raw) == expected


@pytest.mark.parametrize("raw", RAW_HEADERS)
def test_normalize_column_name_is_idempotent(raw: str) -> None:
    once = normalize_column_name(raw)

    assert normalize_column_name(once) == once


def test_normalize_columns_rejects_duplicate_targets() -> None:
    df = pd.DataFrame(columns=["Pfizer Available", "pfizer_available", "jj_available"])

    with pytest.raises(MalformedDataError, match="pfizer_available"):
        normalize_columns(df)


def test_normalize_columns_rejects_blank_header() -> None:
    df = pd.DataFrame(columns=["pfizer_available", " -- "])

    with pytest.raises(MalformedDataError, match="no usable characters"):
        normalize_columns(df)


def test_normalize_columns_returns_copy() -> None:
    df = pd.DataFrame({"Pfizer Available": ["1"]})

    out = normalize_columns(df)

    assert list(out.columns) == ["pfizer_available"]
    assert list(df.columns) == ["Pfizer Available"]


def test_validate_schema_lists_every_missing_column() -> None:
    df = pd.DataFrame(columns=["pfizer_available", "provider_type"])

    with pytest.raises(SchemaMismatchError) as excinfo:
        validate_schema(df)

    assert excinfo.value.missing == ["moderna_available", "jj_available"]
    assert excinfo.value.stage == "aggregate"


def test_end_to_end_totals_match_expected_values() -> None:
    table = _providers(
        [
            {"pfizer_available": "100", "moderna_available": "50", "jj_available": "25",
             "total_shipped": "500", "provider_type": "Pharmacy"},
            {"pfizer_available": "200", "moderna_available": "0", "jj_available": "75",
             "total_shipped": "900", "provider_type": "Hospital"},
        ]
    )

    supply_long, report = summarize_supply(table)

    assert supply_long.to_dict("records") == [
        {"vaccine_type": "Pfizer", "supply": 300},
        {"vaccine_type": "Moderna", "supply": 50},
        {"vaccine_type": "JandJ", "supply": 100},
    ]
    assert report.rows_in == 2
    assert report.coerced_values == 0
    assert report.warnings == []


def test_sum_is_preserved_against_independent_column_sums() -> None:
    table = _providers(
        [
            {"pfizer_available": 10.5, "moderna_available": 3, "jj_available": 0},
            {"pfizer_available": 4, "moderna_available": 7.25, "jj_available": 12},
            {"pfizer_available": 1, "moderna_available": 0, "jj_available": 8.5},
        ]
    )
    independent = sum(float(pd.to_numeric(table[col]).sum()) for col in REQUIRED_COLUMNS)

    supply_long, _report = summarize_supply(table)

    assert float(supply_long["supply"].sum()) == independent


def test_empty_table_yields_three_zero_rows() -> None:
    table = pd.DataFrame(columns=[*REQUIRED_COLUMNS, "provider_type"])

    supply_long, report = summarize_supply(table)

    assert list(supply_long["vaccine_type"]) == ["Pfizer", "Moderna", "JandJ"]
    assert list(supply_long["supply"]) == [0, 0, 0]
    assert report.rows_in == 0
    assert any("empty" in w for w in report.warnings)


@pytest.mark.parametrize("n_rows", [1, 2, 17])
def test_output_always_has_three_rows(n_rows: int) -> None:
    table = _providers(
        [
            {"pfizer_available": i, "moderna_available": i * 2, "jj_available": 1}
            for i in range(n_rows)
        ]
    )

    supply_long, _report = summarize_supply(table)

    assert len(supply_long) == 3
    assert list(supply_long.columns) == ["vaccine_type", "supply"]


def test_missing_jj_column_raises_schema_mismatch() -> None:
    table = pd.DataFrame({"pfizer_available": ["1"], "moderna_available": ["2"]})

    with pytest.raises(SchemaMismatchError, match="jj_available"):
        summarize_supply(table)


def test_strict_mode_rejects_non_numeric_values() -> None:
    table = _providers(
        [
            {"pfizer_available": "10", "moderna_available": "n/a", "jj_available": "1"},
            {"pfizer_available": "5", "moderna_available": None, "jj_available": "2"},
        ]
    )

    with pytest.raises(SchemaMismatchError, match="moderna_available.*2 missing"):
        summarize_supply(table)


def test_strict_mode_rejects_negative_values() -> None:
    table = _providers(
        [{"pfizer_available": "-3", "moderna_available": "1", "jj_available": "1"}]
    )

    with pytest.raises(SchemaMismatchError, match="pfizer_available"):
        summarize_supply(table)


@pytest.mark.parametrize("token", ["inf", "Infinity", "-inf"])
def test_strict_mode_rejects_infinite_values(token: str) -> None:
    table = _providers(
        [{"pfizer_available": token, "moderna_available": "1", "jj_available": "1"}]
    )

    with pytest.raises(SchemaMismatchError, match="pfizer_available.*infinite"):
        summarize_supply(table)


def test_lenient_mode_counts_infinite_values_as_zero() -> None:
    table = _providers(
        [
            {"pfizer_available": "inf", "moderna_available": "1", "jj_available": "1"},
            {"pfizer_available": "4", "moderna_available": "1", "jj_available": "1"},
        ]
    )

    supply_long, report = summarize_supply(table, lenient=True)

    assert list(supply_long["supply"]) == [4, 2, 2]
    assert report.coerced_values == 1


def test_large_integer_counts_sum_without_precision_loss() -> None:
    table = _providers(
        [
            {"pfizer_available": "9007199254740993", "moderna_available": "0", "jj_available": "0"},
            {"pfizer_available": "2", "moderna_available": "0", "jj_available": "0"},
        ]
    )

    supply_long, _report = summarize_supply(table)

    assert int(supply_long["supply"].iloc[0]) == 9007199254740995


def test_fractional_total_keeps_other_totals_integral() -> None:
    table = _providers(
        [{"pfizer_available": "300", "moderna_available": "0.5", "jj_available": "100"}]
    )

    supply_long, _report = summarize_supply(table)

    assert supply_long["supply"].map(str).tolist() == ["300", "0.5", "100"]
    assert supply_long["supply"].tolist() == [300, 0.5, 100]


def test_lenient_mode_counts_invalid_values_as_zero() -> None:
    table = _providers(
        [
            {"pfizer_available": "10", "moderna_available": "n/a", "jj_available": "1"},
            {"pfizer_available": "5", "moderna_available": None, "jj_available": "2"},
        ]
    )

    supply_long, report = summarize_supply(table, lenient=True)

    assert list(supply_long["supply"]) == [15, 0, 3]
    assert report.coerced_values == 2
    assert report.warnings == ["Counted 2 missing or invalid values in moderna_available as 0"]


def test_thousands_separators_and_whitespace_are_parsed() -> None:
    table = _providers(
        [{"pfizer_available": " 1,200 ", "moderna_available": "3,000,000", "jj_available": "7"}]
    )

    supply_long, _report = summarize_supply(table)

    assert list(supply_long["supply"]) == [1200, 3_000_000, 7]


def test_aggregate_wide_builds_single_texas_row() -> None:
    table = _providers(
        [{"pfizer_available": "1", "moderna_available": "2", "jj_available": "3"}]
    )

    wide = aggregate_wide(table)

    assert list(wide.columns) == ["state", "Pfizer", "Moderna", "JandJ"]
    assert wide.iloc[0].to_dict() == {"state": "Texas", "Pfizer": 1, "Moderna": 2, "JandJ": 3}


def test_aggregate_wide_records_coercions_on_report() -> None:
    table = _providers(
        [{"pfizer_available": "", "moderna_available": "2", "jj_available": "x"}]
    )
    report = SupplyReport(rows_in=1)

    aggregate_wide(table, lenient=True, report=report)

    assert report.coerced_values == 2
    assert len(report.warnings) == 2


def test_reshape_long_follows_wide_column_order() -> None:
    wide = pd.DataFrame([{"state": "Texas", "Pfizer": 9, "Moderna": 8, "JandJ": 7}])

    supply_long = reshape_long(wide)

    assert supply_long.values.tolist() == [["Pfizer", 9], ["Moderna", 8], ["JandJ", 7]]
