from __future__ import annotations

import pandas as pd
import pytest


@pytest.fixture
def supply_long() -> pd.DataFrame:
    return pd.DataFrame(
        {"vaccine_type": ["Pfizer", "Moderna", "JandJ"], "supply": [300, 50, 100]}
    )
