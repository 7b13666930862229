# 01_lung_survival_analysis.py
# Kaplan-Meier, Cox PH and Weibull AFT on the NCCTG lung cancer data.
#
# Input : lifelines' bundled lung dataset (or pass a CSV path as first argument)
# Output: 01_lung_survival_analysis/
#   km_overall.png, km_by_sex.png
#   cox_coefficients.png, cox_profiles.png
#   weibull_curves.png
#   survival_results.xlsx

import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

from lung_survival.analysis import run_analysis
from lung_survival.data import COVARIATES
from lung_survival.weibull import DEFAULT_PROFILES

# --- console encoding (Windows) ---
try:
    sys.stdout.reconfigure(encoding="utf-8")
except Exception:
    pass

ROOT = Path.cwd()
OUT_DIR = ROOT / "01_lung_survival_analysis"
IN_CSV = Path(sys.argv[1]) if len(sys.argv) > 1 else None

# --- settings ---
GRID_POINTS = 300

# --- run ---
results = run_analysis(
    output_dir=OUT_DIR,
    csv_path=IN_CSV,
    profiles=DEFAULT_PROFILES,
    grid_points=GRID_POINTS,
    covariates=COVARIATES,
)

params = results["weibull_parameters"]
print("\nWeibull parameters")
print(f"  shape (rho)   : {params.shape:.4f}")
print(f"  scale (1/rho) : {params.scale:.4f}")
for name, value in params.coefficients.items():
    print(f"  {name:<14}: {value:+.5f}")
print(f"\nDone. Outputs in: {OUT_DIR}")
