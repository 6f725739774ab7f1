import pytest

from healthpath.growth.reference import GrowthReferenceParams, reference_curve, reference_table


def test_weight_is_linear_until_six_months_then_slower():
    assert reference_curve("Male", 0).weight_p50 == pytest.approx(3.3)
    assert reference_curve("Male", 6).weight_p50 == pytest.approx(3.3 + 6 * 0.8)
    assert reference_curve("Male", 10).weight_p50 == pytest.approx(3.3 + 6 * 0.8 + 4 * 0.5)
    assert reference_curve("Female", 3).weight_p50 == pytest.approx(3.2 + 3 * 0.7)


def test_height_breakpoint_is_twelve_months():
    assert reference_curve("Female", 12).height_p50 == pytest.approx(49 + 12 * 2.5)
    assert reference_curve("Female", 20).height_p50 == pytest.approx(49 + 12 * 2.5 + 8 * 1.2)
    assert reference_curve("Male", 0).height_p50 == pytest.approx(50)


def test_percentile_bands_scale_the_median():
    c = reference_curve("Male", 9)
    assert c.weight_p3 == pytest.approx(c.weight_p50 * 0.85)
    assert c.weight_p97 == pytest.approx(c.weight_p50 * 1.15)
    assert c.height_p3 == pytest.approx(c.height_p50 * 0.95)
    assert c.height_p97 == pytest.approx(c.height_p50 * 1.05)


@pytest.mark.parametrize("gender", ["Male", "Female"])
def test_curves_increase_with_age(gender):
    df = reference_table(gender, range(0, 61))
    for col in ("weight_p3", "weight_p50", "weight_p97", "height_p3", "height_p50", "height_p97"):
        assert df[col].is_monotonic_increasing


def test_table_matches_scalar_curve():
    df = reference_table("Female", [0, 6, 18])
    row = df[df["age_months"] == 18].iloc[0]
    c = reference_curve("Female", 18)
    assert row["weight_p50"] == pytest.approx(c.weight_p50)
    assert row["height_p97"] == pytest.approx(c.height_p97)


def test_params_from_config_override_constants():
    params = GrowthReferenceParams.from_config({"weight_rate2": 0.25, "weight_tails": [0.8, 1.2]})
    c = reference_curve("Male", 10, params)
    assert c.weight_p50 == pytest.approx(3.3 + 6 * 0.8 + 4 * 0.25)
    assert c.weight_p3 == pytest.approx(c.weight_p50 * 0.8)


def test_unknown_param_is_rejected():
    with pytest.raises(ValueError):
        GrowthReferenceParams.from_config({"weight_slope": 1})
