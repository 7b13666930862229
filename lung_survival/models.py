"""
Model fitting functions for right-censored survival data.

Thin wrappers around lifelines: Kaplan-Meier, log-rank comparison, Cox
proportional hazards (with the Schoenfeld residual test) and Weibull AFT
regression. Fitting errors from lifelines are not caught here.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from lifelines import CoxPHFitter, KaplanMeierFitter, WeibullAFTFitter
from lifelines.statistics import (
    StatisticalResult,
    logrank_test,
    multivariate_logrank_test,
    proportional_hazard_test,
)

from .data import COVARIATES
from .weibull import INTERCEPT, WeibullParameters

SEX_LABELS = {1: "Male", 2: "Female"}


def fit_kaplan_meier(df: pd.DataFrame, label: str = "All patients") -> KaplanMeierFitter:
    kmf = KaplanMeierFitter()
    kmf.fit(df["time"], event_observed=df["event"], label=label)
    return kmf


def fit_kaplan_meier_by_group(
    df: pd.DataFrame,
    group_col: str = "sex",
    labels: dict | None = None,
) -> dict[str, KaplanMeierFitter]:
    """One Kaplan-Meier fit per level of ``group_col``, keyed by label."""
    if labels is None:
        labels = SEX_LABELS if group_col == "sex" else {}
    fits = {}
    for level, sub in df.groupby(group_col, sort=True):
        label = labels.get(level, f"{group_col}={level}")
        fits[label] = fit_kaplan_meier(sub, label=label)
    return fits


def compare_groups(df: pd.DataFrame, group_col: str = "sex") -> StatisticalResult:
    """
    Log-rank test of equal survival across the levels of ``group_col``.

    Uses the two-sample test for two groups and the multivariate version
    otherwise.
    """
    levels = sorted(df[group_col].dropna().unique())
    if len(levels) < 2:
        raise ValueError(f"Need at least two groups in '{group_col}', found {levels}")
    if len(levels) == 2:
        a = df[df[group_col] == levels[0]]
        b = df[df[group_col] == levels[1]]
        return logrank_test(
            a["time"], b["time"],
            event_observed_A=a["event"], event_observed_B=b["event"],
        )
    return multivariate_logrank_test(df["time"], df[group_col], df["event"])


def _fit_frame(df: pd.DataFrame, covariates: list[str]) -> pd.DataFrame:
    missing = set(covariates) - set(df.columns)
    if missing:
        raise ValueError(f"Missing covariate columns: {sorted(missing)}")
    return df[["time", "event"] + list(covariates)]


def fit_cox(df: pd.DataFrame, covariates: list[str] | None = None) -> CoxPHFitter:
    if covariates is None:
        covariates = COVARIATES
    cph = CoxPHFitter()
    cph.fit(_fit_frame(df, covariates), duration_col="time", event_col="event")
    return cph


def check_proportional_hazards(
    cph: CoxPHFitter,
    df: pd.DataFrame,
    covariates: list[str] | None = None,
) -> pd.DataFrame:
    """Scaled Schoenfeld residual test per covariate (rank time transform)."""
    if covariates is None:
        covariates = COVARIATES
    result = proportional_hazard_test(cph, _fit_frame(df, covariates), time_transform="rank")
    return result.summary.reset_index().rename(columns={"index": "covariate"})


def fit_weibull(df: pd.DataFrame, covariates: list[str] | None = None) -> WeibullAFTFitter:
    if covariates is None:
        covariates = COVARIATES
    aft = WeibullAFTFitter()
    aft.fit(_fit_frame(df, covariates), duration_col="time", event_col="event")
    return aft


def weibull_parameters(aft: WeibullAFTFitter) -> WeibullParameters:
    """
    Extract shape, scale and coefficients from a fitted Weibull AFT model.

    lifelines parameterizes S(t) = exp(-(t / lambda) ** rho) with
    log(lambda) linear in the covariates, so shape = rho and the log-time
    scale is 1 / rho.
    """
    shape = float(np.exp(aft.params_.loc[("rho_", INTERCEPT)]))
    coefficients = aft.params_.loc["lambda_"]
    return WeibullParameters(
        shape=shape,
        scale=1.0 / shape,
        coefficients={str(k): float(v) for k, v in coefficients.items()},
    )


def tidy_summary(model_name: str, fitter) -> pd.DataFrame:
    s = fitter.summary.reset_index()
    s.insert(0, "model", model_name)
    s["log_likelihood"] = fitter.log_likelihood_
    return s
