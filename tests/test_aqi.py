import math

import pytest

from aqi import (
    AQI_CEILING,
    PM10_BREAKPOINTS,
    PM25_BREAKPOINTS,
    _build_table,
    aqi_category,
    compute_aqi,
    pm10_to_aqi,
    pm25_to_aqi,
    sub_index,
    truncate_concentration,
)


@pytest.mark.parametrize(
    "pm25, pm10, expected",
    [
        (8.0, 20.0, 33),  # Good, PM2.5 dominant
        (35.4, 50.0, 100),
        (55.4, 100.0, 150),
        (250.4, 350.0, 300),
        (400.0, 500.0, 434),
        (10.0, 200.0, 123),  # PM10 dominant
        (35.7, 45.0, 101),
    ],
)
def test_compute_aqi(pm25, pm10, expected):
    assert compute_aqi(pm25, pm10) == expected


@pytest.mark.parametrize(
    "pm25, expected",
    [
        (0.0, 0),
        (12.0, 50),
        (12.1, 51),
        (35.4, 100),
        (35.5, 101),
        (55.4, 150),
        (150.4, 200),
        (250.4, 300),
        (350.4, 400),
        (500.4, 500),
        (600.0, 500),
    ],
)
def test_pm25_breakpoint_edges(pm25, expected):
    assert pm25_to_aqi(pm25) == expected


@pytest.mark.parametrize(
    "pm10, expected",
    [
        (53.0, 49),
        (54.0, 50),
        (54.5, 50),  # between tiers: stays in the lower tier
        (54.9, 50),
        (55.0, 51),
        (55.1, 51),
        (100.0, 73),
        (154.0, 100),
        (154.5, 100),
        (155.0, 101),
        (604.0, 500),
        (605.0, 500),
    ],
)
def test_pm10_gap_between_tiers(pm10, expected):
    assert pm10_to_aqi(pm10) == expected


def test_tier_upper_bounds_hit_aqi_high_exactly():
    for bp in PM10_BREAKPOINTS:
        assert sub_index(bp.conc_high, PM10_BREAKPOINTS) == bp.aqi_high
        assert sub_index(bp.conc_low, PM10_BREAKPOINTS) == bp.aqi_low


def test_truncation_not_rounding():
    assert truncate_concentration(35.49) == 35.4
    assert pm25_to_aqi(35.49) == pm25_to_aqi(35.40) == 100
    assert pm25_to_aqi(12.09) == 50


@pytest.mark.parametrize("value", [35.49, 12.05, 54.99, 350.45])
def test_truncation_is_idempotent(value):
    once = truncate_concentration(value)
    assert truncate_concentration(once) == once


def test_saturates_above_last_tier():
    assert pm25_to_aqi(500.5) == AQI_CEILING
    assert pm25_to_aqi(10_000.0) == AQI_CEILING
    assert pm10_to_aqi(1e9) == AQI_CEILING
    assert pm25_to_aqi(math.inf) == AQI_CEILING


@pytest.mark.parametrize("table", [PM25_BREAKPOINTS, PM10_BREAKPOINTS])
def test_sub_index_is_monotonic(table):
    previous = 0
    for i in range(0, 7000):
        value = sub_index(i / 10, table)
        assert previous <= value <= AQI_CEILING
        previous = value


def test_max_of_sub_indices():
    for pm25 in (0.0, 9.3, 40.0, 180.2, 420.0):
        for pm10 in (0.0, 60.0, 210.0, 390.0, 550.0):
            assert compute_aqi(pm25, pm10) == max(pm25_to_aqi(pm25), pm10_to_aqi(pm10))


@pytest.mark.parametrize("bad", [-0.1, -5.0, float("nan")])
def test_invalid_concentrations_raise(bad):
    with pytest.raises(ValueError):
        pm25_to_aqi(bad)


def test_below_lowest_breakpoint_raises():
    table = _build_table([(1.0, 10.0, 0, 50)])
    with pytest.raises(ValueError):
        sub_index(0.5, table)


def test_build_table_rejects_bad_tables():
    with pytest.raises(ValueError):
        _build_table([])
    with pytest.raises(ValueError):
        _build_table([(0, 10, 0, 50), (5, 20, 51, 100)])
    with pytest.raises(ValueError):
        _build_table([(0, 0, 0, 50)])


def test_tables_are_immutable():
    with pytest.raises(TypeError):
        PM25_BREAKPOINTS[0] = PM25_BREAKPOINTS[1]
    with pytest.raises(AttributeError):
        PM25_BREAKPOINTS[0].aqi_high = 60


@pytest.mark.parametrize(
    "aqi, label",
    [
        (0, "Good"),
        (50, "Good"),
        (51, "Moderate"),
        (101, "Unhealthy for Sensitive Groups"),
        (151, "Unhealthy"),
        (201, "Very Unhealthy"),
        (301, "Hazardous"),
        (500, "Hazardous"),
    ],
)
def test_aqi_category(aqi, label):
    assert aqi_category(aqi) == label


def test_integer_beyond_float_range():
    assert pm25_to_aqi(10 ** 400) == AQI_CEILING
    with pytest.raises(ValueError):
        pm10_to_aqi(-(10 ** 400))
