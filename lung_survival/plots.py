"""
Diagnostic plots for the fitted survival models.

Every function saves one figure (300 dpi), closes it and returns the path.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

sns.set_theme(style="whitegrid")

COLOR_KM = "#4C4C4C"
GROUP_PALETTE = "deep"


def _save(fig, out_path: str | Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path, dpi=300, bbox_inches="tight")
    plt.close(fig)
    print(f"Saved: {out_path}")
    return out_path


def plot_kaplan_meier(kmf, out_path: str | Path, title: str = "Kaplan-Meier estimate") -> Path:
    fig, ax = plt.subplots(figsize=(7, 5))
    kmf.plot_survival_function(ax=ax, ci_show=True, color=COLOR_KM, show_censors=True,
                               censor_styles={"ms": 4, "marker": "|"})
    median = kmf.median_survival_time_
    if np.isfinite(median):
        ax.axhline(0.5, ls=":", color="grey", lw=1)
        ax.axvline(median, ls=":", color="grey", lw=1)
        ax.text(median, 0.52, f" median ≈ {median:.0f} d", fontsize=9)
    ax.set_xlabel("Time (days)")
    ax.set_ylabel("Survival probability")
    ax.set_ylim(0, 1.02)
    ax.set_title(title)
    return _save(fig, out_path)


def plot_kaplan_meier_by_group(fits: dict, out_path: str | Path, logrank=None,
                               title: str = "Kaplan-Meier estimate by sex") -> Path:
    colors = sns.color_palette(GROUP_PALETTE, len(fits))
    fig, ax = plt.subplots(figsize=(7, 5))
    for color, kmf in zip(colors, fits.values()):
        kmf.plot_survival_function(ax=ax, ci_show=True, color=color, show_censors=True,
                                   censor_styles={"ms": 4, "marker": "|"})
    if logrank is not None:
        ax.text(0.98, 0.96, f"log-rank p = {logrank.p_value:.4f}", transform=ax.transAxes,
                va="top", ha="right", fontsize=10)
    ax.set_xlabel("Time (days)")
    ax.set_ylabel("Survival probability")
    ax.set_ylim(0, 1.02)
    ax.set_title(title)
    return _save(fig, out_path)


def plot_cox_coefficients(cph, out_path: str | Path) -> Path:
    """Forest plot of log hazard ratios with 95% CI."""
    fig, ax = plt.subplots(figsize=(6, 0.8 + 0.6 * len(cph.params_)))
    cph.plot(ax=ax)
    ax.set_title("Cox PH: log(HR) with 95% CI")
    return _save(fig, out_path)


def plot_cox_profiles(cph, profiles, out_path: str | Path) -> Path:
    """Cox-predicted survival for each covariate profile."""
    X = pd.DataFrame([dict(p.values) for p in profiles], index=[p.name for p in profiles])
    X = X[list(cph.params_.index)]
    sf = cph.predict_survival_function(X)
    colors = sns.color_palette(GROUP_PALETTE, len(profiles))
    fig, ax = plt.subplots(figsize=(7, 5))
    for color, name in zip(colors, sf.columns):
        ax.step(sf.index, sf[name], where="post", color=color, label=name, lw=1.6)
    ax.set_xlabel("Time (days)")
    ax.set_ylabel("Survival probability")
    ax.set_ylim(0, 1.02)
    ax.set_title("Cox PH: predicted survival by profile")
    ax.legend(frameon=False)
    return _save(fig, out_path)


def plot_weibull_curves(curves: pd.DataFrame, out_path: str | Path, kmf=None) -> Path:
    """
    Two panels from the long curve table (profile, time, survival, hazard):
    survival on the left (Kaplan-Meier overlaid if given), hazard on the right.
    Hazard points at t = 0 are left out.
    """
    fig, (ax_s, ax_h) = plt.subplots(1, 2, figsize=(12, 5))
    sns.lineplot(data=curves, x="time", y="survival", hue="profile",
                 palette=GROUP_PALETTE, ax=ax_s, lw=1.6)
    if kmf is not None:
        kmf.plot_survival_function(ax=ax_s, ci_show=False, color=COLOR_KM, ls="--")
    ax_s.set_xlabel("Time (days)")
    ax_s.set_ylabel("Survival probability")
    ax_s.set_ylim(0, 1.02)
    ax_s.set_title("Weibull: survival by profile")

    positive = curves[curves["time"] > 0]
    sns.lineplot(data=positive, x="time", y="hazard", hue="profile",
                 palette=GROUP_PALETTE, ax=ax_h, lw=1.6, legend=False)
    ax_h.set_xlabel("Time (days)")
    ax_h.set_ylabel("Hazard rate")
    ax_h.set_title("Weibull: hazard by profile")
    return _save(fig, out_path)
