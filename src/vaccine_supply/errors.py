"""Error taxonomy — every error is fatal to the run and names its stage."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vaccine_supply.models import ExportResult


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    stage = "pipeline"


class SourceUnavailableError(PipelineError):
    """The input source could not be reached or read."""

    stage = "load"


class MalformedDataError(PipelineError, ValueError):
    """The input could not be parsed into a table with a usable header."""

    stage = "load"


class SchemaMismatchError(PipelineError, ValueError):
    """Required columns are absent, or hold values that cannot be summed."""

    stage = "aggregate"

    def __init__(self, message: str, missing: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class WriteError(PipelineError):
    """One or more output artifacts could not be persisted."""

    stage = "export"

    def __init__(self, message: str, results: Sequence[ExportResult] | None = None) -> None:
        super().__init__(message)
        self.results = list(results or [])
