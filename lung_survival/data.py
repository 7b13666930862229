"""
Dataset loading for the NCCTG lung-cancer survival data.

Loads the copy bundled with lifelines (or a user CSV with the same columns),
normalizes column names and decodes the event indicator.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from lifelines.datasets import load_lung

from .utils import event_from_status, normalize_columns

COVARIATES = ["sex", "age", "ph_ecog"]


def load_lung_data(
    csv_path: str | Path | None = None,
    covariates: list[str] | None = None,
    coding: str | None = None,
) -> pd.DataFrame:
    """
    Load and prepare lung-cancer observation data.

    Parameters
    ----------
    csv_path : str | Path | None
        Optional CSV with columns time, status and the covariates.
        Default: the NCCTG lung data shipped with lifelines.
    covariates : list[str] | None
        Covariate columns to keep. Default: ["sex", "age", "ph_ecog"]
    coding : str | None
        Status coding, "lung" (1 = censored, 2 = dead) or "binary" (0/1).
        Default: "lung" for CSV input; the bundled table keeps its own coding.

    Returns
    -------
    pd.DataFrame
        Columns: time, status, event (0/1) and the covariates, one row per
        subject with complete data and positive time.
    """
    if covariates is None:
        covariates = COVARIATES

    if csv_path is None:
        df = load_lung()
        if coding is None:
            # bundled copy holds both censored and dead patients, so its coding is unambiguous
            coding = "binary" if 0 in set(df["status"].dropna()) else "lung"
    else:
        csv_path = Path(csv_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"Input file not found: {csv_path}")
        df = pd.read_csv(csv_path)
    df = normalize_columns(df)
    if coding is None:
        coding = "lung"

    required_cols = {"time", "status"} | set(covariates)
    missing = required_cols - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {sorted(missing)}")

    df = df[["time", "status"] + list(covariates)].copy()
    for c in df.columns:
        df[c] = pd.to_numeric(df[c], errors="coerce")

    before = len(df)
    df = df.dropna().copy()
    dropped = before - len(df)
    if dropped:
        print(f"  [diag] dropping {dropped} row(s) with missing time/status/covariates")

    nonpos = df["time"] <= 0
    if nonpos.any():
        print(f"  [diag] dropping {int(nonpos.sum())} row(s) with non-positive time")
        df = df[~nonpos].copy()

    df["event"] = event_from_status(df["status"], coding=coding).astype(int)

    cols = ["time", "status", "event"] + list(covariates)
    return df[cols].reset_index(drop=True)


def describe_cohort(df: pd.DataFrame) -> dict[str, float]:
    """Basic counts for a prepared cohort."""
    n = len(df)
    events = int(df["event"].sum())
    return {
        "n": n,
        "events": events,
        "censored": n - events,
        "event_rate": events / n if n else np.nan,
        "median_time": float(df["time"].median()) if n else np.nan,
        "max_time": float(df["time"].max()) if n else np.nan,
    }
