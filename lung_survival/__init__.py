"""
Lung Cancer Survival Analysis Package

Kaplan-Meier, Cox proportional hazards and Weibull regression on the NCCTG
lung-cancer data, with Weibull survival/hazard curves per covariate profile.
"""

__version__ = "0.1.0"

from . import data
from . import models
from . import weibull
from . import plots
from . import analysis
from . import utils

__all__ = [
    "data",
    "models",
    "weibull",
    "plots",
    "analysis",
    "utils",
]
