"""
Utility functions for data processing and normalization.
"""

import pandas as pd
import numpy as np


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lower-case and snake_case column names (``ph.ecog`` -> ``ph_ecog``)."""
    out = df.copy()
    out.columns = (
        out.columns.str.strip()
        .str.lower()
        .str.replace(" ", "_", regex=False)
        .str.replace("-", "_", regex=False)
        .str.replace(".", "_", regex=False)
    )
    return out


STATUS_CODINGS = {
    "lung": {1: 0, 2: 1},
    "binary": {0: 0, 1: 1},
}


def event_from_status(status: pd.Series, coding: str = "lung") -> pd.Series:
    """
    Decode a survival status column into a 0/1 event indicator.

    ``coding="lung"``: 1 = censored, 2 = dead (NCCTG lung convention).
    ``coding="binary"``: 0 = censored, 1 = event.
    Missing status stays missing; any other code raises ValueError.
    """
    if coding not in STATUS_CODINGS:
        raise ValueError(f"Unknown status coding '{coding}', expected one of {sorted(STATUS_CODINGS)}")
    mapping = STATUS_CODINGS[coding]
    s = pd.to_numeric(status, errors="coerce")
    codes = set(s.dropna().unique())
    unknown = codes - set(mapping)
    if unknown:
        raise ValueError(f"Unrecognised status codes for '{coding}' coding: {sorted(unknown)}")
    return s.map(mapping).where(s.notna(), np.nan)
