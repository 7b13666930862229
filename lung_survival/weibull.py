"""
Weibull survival and hazard curves for covariate profiles.

A fitted Weibull regression is reduced to a ``WeibullParameters`` record
(shape, scale and the coefficients of the log-time linear predictor). Each
covariate profile gets its own frozen ``ProfileCurve`` so that no profile's
linear predictor can leak into another's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

import numpy as np
import pandas as pd

INTERCEPT = "Intercept"
GRID_POINTS = 200


@dataclass(frozen=True)
class WeibullParameters:
    """Shape, scale and linear-predictor coefficients of a fitted Weibull model."""

    shape: float
    scale: float
    coefficients: Mapping[str, float]

    def __post_init__(self):
        object.__setattr__(self, "coefficients", MappingProxyType(dict(self.coefficients)))

    @property
    def covariates(self) -> list[str]:
        """Covariate names, intercept excluded, in fitted order."""
        return [k for k in self.coefficients if k != INTERCEPT]


@dataclass(frozen=True)
class CovariateProfile:
    name: str
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


@dataclass(frozen=True)
class ProfileCurve:
    """Everything needed to evaluate one profile's curves."""

    name: str
    shape: float
    scale: float
    linear_predictor: float
    coefficients: Mapping[str, float]


DEFAULT_PROFILES = (
    CovariateProfile("Male, 60y, ECOG 0", {"sex": 1, "age": 60, "ph_ecog": 0}),
    CovariateProfile("Female, 60y, ECOG 0", {"sex": 2, "age": 60, "ph_ecog": 0}),
    CovariateProfile("Male, 60y, ECOG 2", {"sex": 1, "age": 60, "ph_ecog": 2}),
)


def _invalid(shape: float, scale: float, linear_predictor: float) -> bool:
    return not (shape > 0 and scale > 0 and np.isfinite(linear_predictor))


def _as_result(t, values):
    return float(values) if np.ndim(t) == 0 else values


def survival(t, shape: float, scale: float, linear_predictor: float):
    """
    S(t) = exp(-(t / exp(lp)) ** shape)

    Returns NaN everywhere if shape/scale are not strictly positive or the
    linear predictor is not finite.
    """
    t = np.asarray(t, dtype=float)
    if _invalid(shape, scale, linear_predictor):
        return _as_result(t, np.full(t.shape, np.nan))
    # log scale keeps t = 0 at exactly 1 even when exp(lp) under- or overflows
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        values = np.exp(-np.exp(shape * (np.log(t) - linear_predictor)))
    return _as_result(t, values)


def hazard(t, shape: float, scale: float, linear_predictor: float):
    """
    h(t) = shape * t ** (shape - 1) / exp(lp)

    For shape < 1 the value at t = 0 is inf; it is returned as is. Use
    ``time_grid(..., include_zero=False)`` to keep it off the grid.
    """
    t = np.asarray(t, dtype=float)
    if _invalid(shape, scale, linear_predictor):
        return _as_result(t, np.full(t.shape, np.nan))
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        values = shape * t ** (shape - 1) / np.exp(linear_predictor)
    return _as_result(t, values)


def check_profile(profile: CovariateProfile, covariates: Iterable[str]):
    """Raise ValueError unless the profile supplies exactly ``covariates``."""
    expected = list(covariates)
    missing = set(expected) - set(profile.values)
    extra = set(profile.values) - set(expected)
    if missing or extra:
        raise ValueError(
            f"Profile '{profile.name}' does not match model covariates {expected}: "
            f"missing={sorted(missing)}, unexpected={sorted(extra)}"
        )


def check_profile_names(profiles: Iterable[CovariateProfile]):
    """Raise ValueError if two profiles share a name."""
    seen = set()
    for profile in profiles:
        if profile.name in seen:
            raise ValueError(f"Duplicate profile name '{profile.name}'; profile names must be unique")
        seen.add(profile.name)


def linear_predictor(coefficients: Mapping[str, float], profile: CovariateProfile) -> float:
    """Intercept plus the coefficient-weighted profile values, matched by name."""
    expected = [k for k in coefficients if k != INTERCEPT]
    check_profile(profile, expected)
    lp = float(coefficients.get(INTERCEPT, 0.0))
    for name in expected:
        lp += float(coefficients[name]) * float(profile.values[name])
    return lp


def profile_curve(params: WeibullParameters, profile: CovariateProfile) -> ProfileCurve:
    return ProfileCurve(
        name=profile.name,
        shape=float(params.shape),
        scale=float(params.scale),
        linear_predictor=linear_predictor(params.coefficients, profile),
        coefficients=MappingProxyType(dict(params.coefficients)),
    )


def time_grid(max_time: float, num: int = GRID_POINTS, include_zero: bool = True) -> np.ndarray:
    """Evenly spaced times on [0, max_time]; drop 0 for hazard evaluation."""
    if not np.isfinite(max_time) or max_time <= 0:
        raise ValueError(f"max_time must be positive, got {max_time}")
    if num < 2:
        raise ValueError(f"num must be at least 2, got {num}")
    grid = np.linspace(0.0, float(max_time), int(num))
    return grid if include_zero else grid[1:]


def evaluate_profiles(
    params: WeibullParameters,
    profiles: Iterable[CovariateProfile],
    grid,
) -> pd.DataFrame:
    """
    Evaluate survival and hazard for each profile over a shared grid.

    Returns
    -------
    pd.DataFrame
        Long format: profile, linear_predictor, time, survival, hazard
    """
    profiles = list(profiles)
    check_profile_names(profiles)
    grid = np.asarray(grid, dtype=float)
    frames = []
    for profile in profiles:
        curve = profile_curve(params, profile)
        frames.append(pd.DataFrame({
            "profile": curve.name,
            "linear_predictor": curve.linear_predictor,
            "time": grid,
            "survival": survival(grid, curve.shape, curve.scale, curve.linear_predictor),
            "hazard": hazard(grid, curve.shape, curve.scale, curve.linear_predictor),
        }))
    if not frames:
        return pd.DataFrame(columns=["profile", "linear_predictor", "time", "survival", "hazard"])
    return pd.concat(frames, ignore_index=True)
