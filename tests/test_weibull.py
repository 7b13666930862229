import dataclasses

import numpy as np
import pytest

from lung_survival.weibull import (
    CovariateProfile,
    WeibullParameters,
    evaluate_profiles,
    hazard,
    linear_predictor,
    profile_curve,
    survival,
    time_grid,
)

PARAMS = WeibullParameters(
    shape=1.3,
    scale=1 / 1.3,
    coefficients={"sex": 0.35, "age": -0.01, "ph_ecog": -0.3, "Intercept": 6.2},
)


def profile(name="p", sex=1, age=60, ph_ecog=0):
    return CovariateProfile(name, {"sex": sex, "age": age, "ph_ecog": ph_ecog})


def test_survival_is_one_at_zero():
    assert survival(0.0, 1.3, 0.77, 5.0) == pytest.approx(1.0)
    assert survival(0.0, 0.6, 1.6, -2.0) == pytest.approx(1.0)


def test_survival_non_increasing():
    t = np.linspace(0, 1000, 500)
    for shape in (0.5, 1.0, 2.5):
        s = survival(t, shape, 1 / shape, 5.0)
        assert np.all(np.diff(s) <= 0)
        assert np.all((s >= 0) & (s <= 1))


def test_hazard_non_negative_for_positive_times():
    t = np.linspace(0.1, 1000, 500)
    for shape in (0.5, 1.0, 2.5):
        assert np.all(hazard(t, shape, 1 / shape, 4.0) >= 0)


def test_shape_one_is_exponential():
    t = np.array([0.0, 0.5, 1.0, 3.0, 10.0])
    np.testing.assert_allclose(survival(t, 1.0, 1.0, 0.0), np.exp(-t))
    np.testing.assert_allclose(hazard(t[1:], 1.0, 1.0, 0.0), np.ones(4))


def test_reference_values_at_t10():
    assert survival(10.0, 1.2, 1.0, 0.0) == pytest.approx(np.exp(-(10 ** 1.2)))
    assert hazard(10.0, 1.2, 1.0, 0.0) == pytest.approx(1.2 * 10 ** 0.2)
    assert hazard(10.0, 1.2, 1.0, 0.0) == pytest.approx(1.902, abs=1e-3)


def test_scalar_in_scalar_out():
    assert isinstance(survival(5.0, 1.2, 1.0, 1.0), float)
    assert isinstance(hazard(5, 1.2, 1.0, 1.0), float)
    assert survival([5.0], 1.2, 1.0, 1.0).shape == (1,)


def test_hazard_at_zero_with_shape_below_one_is_infinite():
    h = hazard(np.array([0.0, 1.0]), 0.7, 1 / 0.7, 0.0)
    assert np.isinf(h[0])
    assert np.isfinite(h[1])


@pytest.mark.parametrize("shape,scale,lp", [
    (0.0, 1.0, 0.0),
    (-1.2, 1.0, 0.0),
    (1.2, 0.0, 0.0),
    (1.2, -1.0, 0.0),
    (np.nan, 1.0, 0.0),
    (1.2, 1.0, np.inf),
    (1.2, 1.0, np.nan),
])
def test_invalid_parameters_give_nan(shape, scale, lp):
    t = np.array([0.0, 1.0, 10.0])
    assert np.all(np.isnan(survival(t, shape, scale, lp)))
    assert np.all(np.isnan(hazard(t, shape, scale, lp)))


def test_linear_predictor_binds_by_name():
    coefs = {"Intercept": 1.0, "a": 2.0, "b": 3.0}
    p1 = CovariateProfile("x", {"a": 1.0, "b": 10.0})
    p2 = CovariateProfile("y", {"b": 10.0, "a": 1.0})
    assert linear_predictor(coefs, p1) == pytest.approx(1.0 + 2.0 + 30.0)
    assert linear_predictor(coefs, p2) == linear_predictor(coefs, p1)


def test_linear_predictor_without_intercept():
    assert linear_predictor({"a": 2.0}, CovariateProfile("x", {"a": 3.0})) == pytest.approx(6.0)


def test_missing_covariate_fails_fast():
    bad = CovariateProfile("short", {"sex": 1, "age": 60})
    with pytest.raises(ValueError, match="ph_ecog"):
        linear_predictor(PARAMS.coefficients, bad)


def test_extra_covariate_fails_fast():
    bad = CovariateProfile("long", {"sex": 1, "age": 60, "ph_ecog": 0, "wt_loss": 5})
    with pytest.raises(ValueError, match="wt_loss"):
        linear_predictor(PARAMS.coefficients, bad)


def test_evaluate_profiles_rejects_any_bad_profile():
    grid = time_grid(100, 10)
    with pytest.raises(ValueError):
        evaluate_profiles(PARAMS, [profile("ok"), CovariateProfile("bad", {"sex": 1})], grid)


def test_profile_curve_is_frozen():
    curve = profile_curve(PARAMS, profile())
    with pytest.raises(dataclasses.FrozenInstanceError):
        curve.linear_predictor = 0.0
    with pytest.raises(TypeError):
        curve.coefficients["sex"] = 0.0


def test_parameters_record_is_read_only():
    with pytest.raises(TypeError):
        PARAMS.coefficients["age"] = 1.0
    assert PARAMS.covariates == ["sex", "age", "ph_ecog"]


def test_profiles_get_their_own_linear_predictor():
    profiles = [
        profile("male", sex=1),
        profile("female", sex=2),
        profile("male ecog 2", sex=1, ph_ecog=2),
    ]
    curves = evaluate_profiles(PARAMS, profiles, time_grid(500, 50))
    lps = curves.groupby("profile", sort=False)["linear_predictor"].first()
    assert list(lps.index) == ["male", "female", "male ecog 2"]
    assert lps["female"] - lps["male"] == pytest.approx(0.35)
    assert lps["male ecog 2"] - lps["male"] == pytest.approx(-0.6)
    assert lps.nunique() == 3


def test_evaluate_profiles_long_format():
    grid = time_grid(500, 25)
    curves = evaluate_profiles(PARAMS, [profile("a"), profile("b", sex=2)], grid)
    assert list(curves.columns) == ["profile", "linear_predictor", "time", "survival", "hazard"]
    assert len(curves) == 50
    first = curves[curves["profile"] == "a"]
    np.testing.assert_allclose(first["time"], grid)
    lp = linear_predictor(PARAMS.coefficients, profile("a"))
    np.testing.assert_allclose(first["survival"], survival(grid, PARAMS.shape, PARAMS.scale, lp))


def test_evaluate_profiles_many_profiles():
    profiles = [profile(f"age {a}", age=a) for a in range(40, 90, 5)]
    curves = evaluate_profiles(PARAMS, profiles, time_grid(300, 5))
    assert curves["profile"].nunique() == 10


def test_evaluate_profiles_empty():
    curves = evaluate_profiles(PARAMS, [], time_grid(300, 5))
    assert curves.empty


def test_time_grid():
    grid = time_grid(1022, 200)
    assert grid[0] == 0.0
    assert grid[-1] == pytest.approx(1022)
    assert len(grid) == 200
    no_zero = time_grid(1022, 200, include_zero=False)
    assert len(no_zero) == 199
    assert no_zero.min() > 0


@pytest.mark.parametrize("max_time", [0, -5, np.nan, np.inf])
def test_time_grid_rejects_bad_bounds(max_time):
    with pytest.raises(ValueError):
        time_grid(max_time)


@pytest.mark.parametrize("lp", [-800.0, 800.0])
def test_survival_at_zero_with_extreme_linear_predictor(lp):
    s = survival(np.array([0.0, 10.0]), 1.2, 1 / 1.2, lp)
    assert s[0] == 1.0
    assert s[1] == pytest.approx(0.0 if lp < 0 else 1.0)


def test_duplicate_profile_names_rejected():
    twins = [profile("p", sex=1), profile("p", sex=2)]
    with pytest.raises(ValueError, match="Duplicate profile name 'p'"):
        evaluate_profiles(PARAMS, twins, time_grid(100, 10))


def test_duplicate_names_checked_from_generator():
    twins = (profile("p", age=a) for a in (50, 70))
    with pytest.raises(ValueError, match="Duplicate"):
        evaluate_profiles(PARAMS, twins, time_grid(100, 10))
