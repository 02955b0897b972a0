"""Data models used across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from pathlib import Path
from typing import Any

ARTIFACT_KINDS = ("csv", "png")


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass
class SupplyReport:
    """Summary of one aggregation pass.

    Contract invariant: ``coerced_values <= 3 * rows_in`` (one slot per
    measure per provider row).
    """

    rows_in: int = 0
    coerced_values: int = 0
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.coerced_values = _to_non_negative_int(self.coerced_values, "coerced_values")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.coerced_values > 3 * self.rows_in:
            raise ValueError("coerced_values must be <= 3 * rows_in")

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "coerced_values": self.coerced_values,
            "warnings": list(self.warnings),
        }


@dataclass
class ExportResult:
    """Outcome of writing a single output artifact."""

    artifact: str
    path: Path
    error: str = ""

    def __post_init__(self) -> None:
        if self.artifact not in ARTIFACT_KINDS:
            raise ValueError(f"artifact must be one of {', '.join(ARTIFACT_KINDS)}")
        self.path = Path(self.path)

    @property
    def ok(self) -> bool:
        return not self.error
