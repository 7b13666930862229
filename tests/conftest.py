import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


def make_lung_like(n=300, shape=1.4, seed=42):
    """Weibull AFT data shaped like the NCCTG lung table (status 1/2, ph.ecog)."""
    rng = np.random.default_rng(seed)
    sex = rng.integers(1, 3, n)
    age = rng.integers(40, 81, n)
    ecog = rng.integers(0, 4, n)
    log_lambda = 5.5 + 0.4 * sex - 0.01 * age - 0.3 * ecog
    t_event = np.exp(log_lambda) * rng.weibull(shape, n)
    t_censor = rng.uniform(50, 600, n)
    time = np.ceil(np.minimum(t_event, t_censor))
    status = np.where(t_event <= t_censor, 2, 1)
    return pd.DataFrame({
        "inst": rng.integers(1, 30, n),
        "time": time,
        "status": status,
        "age": age,
        "sex": sex,
        "ph.ecog": ecog,
    })


@pytest.fixture
def lung_raw():
    return make_lung_like()


@pytest.fixture
def lung_csv(tmp_path, lung_raw):
    path = tmp_path / "lung.csv"
    lung_raw.to_csv(path, index=False)
    return path


@pytest.fixture
def lung_df(lung_csv):
    from lung_survival.data import load_lung_data
    return load_lung_data(lung_csv)


@pytest.fixture
def make_lung():
    return make_lung_like
