"""Artifact writers — clean_supply_data.csv and vaccine_supply_chart.png."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pandas as pd
from matplotlib.figure import Figure

from vaccine_supply.errors import WriteError
from vaccine_supply.models import ExportResult

CSV_NAME = "clean_supply_data.csv"
PNG_NAME = "vaccine_supply_chart.png"
CHART_DPI = 300

SUPPLY_COLUMNS = ["vaccine_type", "supply"]


def _atomic_write(path: Path, write: Callable[[Path], None]) -> Path:
    """Write via *write* into a sibling temp file, then replace *path*."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        write(tmp_path)
        tmp_path.replace(path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return path


def write_supply_csv(out_dir: Path, supply_long: pd.DataFrame) -> Path:
    """Write ``clean_supply_data.csv`` into *out_dir* and return the path."""
    frame = supply_long[SUPPLY_COLUMNS]

    def _write(tmp: Path) -> None:
        frame.to_csv(tmp, index=False, encoding="utf-8", lineterminator="\n")

    return _atomic_write(Path(out_dir) / CSV_NAME, _write)


def write_chart_png(out_dir: Path, fig: Figure) -> Path:
    """Write ``vaccine_supply_chart.png`` (300 DPI) into *out_dir*."""

    def _write(tmp: Path) -> None:
        fig.savefig(tmp, dpi=CHART_DPI, format="png")

    return _atomic_write(Path(out_dir) / PNG_NAME, _write)


def export_artifacts(
    out_dir: Path, supply_long: pd.DataFrame, fig: Figure
) -> list[ExportResult]:
    """Write both artifacts independently.

    A failed write never prevents the other one.  Raises ``WriteError``
    carrying every ``ExportResult`` if either write failed.
    """
    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        unwritten = [
            ExportResult("csv", out_dir / CSV_NAME, error=str(exc)),
            ExportResult("png", out_dir / PNG_NAME, error=str(exc)),
        ]
        raise WriteError(f"Cannot create output directory {out_dir}: {exc}", unwritten) from exc

    results: list[ExportResult] = []
    try:
        results.append(ExportResult("csv", write_supply_csv(out_dir, supply_long)))
    except OSError as exc:
        results.append(ExportResult("csv", out_dir / CSV_NAME, error=str(exc)))
    try:
        results.append(ExportResult("png", write_chart_png(out_dir, fig)))
    except OSError as exc:
        results.append(ExportResult("png", out_dir / PNG_NAME, error=str(exc)))

    failed = [r for r in results if not r.ok]
    if failed:
        names = ", ".join(r.path.name for r in failed)
        raise WriteError(f"Could not write {names}", results)
    return results
