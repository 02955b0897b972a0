"""texas-vaccine-supply — Statewide vaccine supply totals from provider data."""

__version__ = "0.1.0"

STATE = "Texas"

# Display label -> canonical source column. Order is the output row order.
VACCINE_COLUMNS: dict[str, str] = {
    "Pfizer": "pfizer_available",
    "Moderna": "moderna_available",
    "JandJ": "jj_available",
}

REQUIRED_COLUMNS: list[str] = list(VACCINE_COLUMNS.values())
