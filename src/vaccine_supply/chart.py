"""Bar chart of statewide supply per vaccine type."""

from __future__ import annotations

import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

# ── Chart text + layout ─────────────────────────────────────────

TITLE = "Texas Vaccine Supply, by Type"
SUBTITLE = "Current doses available at Texas vaccine providers"
CAPTION = "Source: Texas Department of State Health Services"
X_LABEL = "Vaccine Type"
Y_LABEL = "Current Supply in Texas"

FIG_WIDTH_IN = 10
FIG_HEIGHT_IN = 6

PALETTE: dict[str, str] = {
    "Pfizer": "#1f77b4",
    "Moderna": "#d62728",
    "JandJ": "#2ca02c",
}
FALLBACK_COLOR = "#7f7f7f"


def _thousands(value: float, _pos: int | None = None) -> str:
    return f"{value:,.0f}"


def _annotate_bars(ax: Axes) -> None:
    for patch in ax.patches:
        height = patch.get_height()
        ax.annotate(
            _thousands(height),
            (patch.get_x() + patch.get_width() / 2, height),
            ha="center",
            va="bottom",
            fontsize=10,
            xytext=(0, 3),
            textcoords="offset points",
        )


def build_supply_chart(supply_long: pd.DataFrame) -> Figure:
    """Render *supply_long* as a categorical bar chart.

    One bar per ``vaccine_type`` with a fixed per-category fill and no
    legend.  An empty frame produces a chart with no bars.
    """
    categories = [str(v) for v in supply_long["vaccine_type"]]
    values = [float(v) for v in supply_long["supply"]]
    colors = [PALETTE.get(name, FALLBACK_COLOR) for name in categories]

    fig = Figure(figsize=(FIG_WIDTH_IN, FIG_HEIGHT_IN))
    ax = fig.add_subplot()
    ax.bar(categories, values, color=colors or None)
    _annotate_bars(ax)

    fig.suptitle(TITLE, x=0.125, ha="left", fontsize=16, fontweight="bold")
    ax.set_title(SUBTITLE, loc="left", fontsize=11, color="#555555")
    ax.set_xlabel(X_LABEL)
    ax.set_ylabel(Y_LABEL)
    ax.yaxis.set_major_formatter(FuncFormatter(_thousands))
    ax.spines[["top", "right"]].set_visible(False)
    fig.text(0.99, 0.01, CAPTION, ha="right", va="bottom", fontsize=9, color="#555555")
    return fig
