"""
AQI (Air Quality Index) calculation utilities.

PM2.5 and PM10 -> AQI using US EPA 24-hour breakpoints. The overall AQI is the
worse of the two pollutant sub-indices.

Source: https://www.airnow.gov/sites/default/files/2020-05/aqi-technical-assistance-document-sept2018.pdf
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence, Tuple


AQI_CEILING = 500


@dataclass(frozen=True)
class Breakpoint:
    conc_low: float
    conc_high: float
    aqi_low: int
    aqi_high: int


def _build_table(rows: Sequence[Tuple[float, float, int, int]]) -> Tuple[Breakpoint, ...]:
    table = tuple(Breakpoint(*row) for row in rows)
    if not table:
        raise ValueError("Breakpoint table must have at least one tier.")
    for prev, cur in zip(table, table[1:]):
        if cur.conc_low <= prev.conc_high:
            raise ValueError(f"Breakpoint tiers overlap or are out of order: {prev} / {cur}")
    for bp in table:
        if bp.conc_low >= bp.conc_high or bp.aqi_low > bp.aqi_high:
            raise ValueError(f"Invalid breakpoint tier: {bp}")
    return table


# US EPA PM2.5 (24-hour) AQI breakpoints (ug/m3).
PM25_BREAKPOINTS = _build_table(
    [
        (0.0, 12.0, 0, 50),
        (12.1, 35.4, 51, 100),
        (35.5, 55.4, 101, 150),
        (55.5, 150.4, 151, 200),
        (150.5, 250.4, 201, 300),
        (250.5, 350.4, 301, 400),
        (350.5, 500.4, 401, 500),
    ]
)

# US EPA PM10 (24-hour) AQI breakpoints (ug/m3).
PM10_BREAKPOINTS = _build_table(
    [
        (0, 54, 0, 50),
        (55, 154, 51, 100),
        (155, 254, 101, 150),
        (255, 354, 151, 200),
        (355, 424, 201, 300),
        (425, 504, 301, 400),
        (505, 604, 401, 500),
    ]
)

_CATEGORIES = (
    (50, "Good"),
    (100, "Moderate"),
    (150, "Unhealthy for Sensitive Groups"),
    (200, "Unhealthy"),
    (300, "Very Unhealthy"),
)


def truncate_concentration(concentration: float) -> float:
    """
    Truncate (floor) to one decimal place as per EPA guidance; never round up.
    """
    return math.floor(concentration * 10) / 10


def sub_index(concentration: float, breakpoints: Sequence[Breakpoint]) -> int:
    """
    Convert one pollutant concentration to its AQI sub-index.

    Each tier except the last covers [conc_low, next.conc_low); a value in the
    gap above conc_high is interpolated at conc_high. Anything above the last
    tier saturates to AQI_CEILING.
    """
    try:
        c = float(concentration)
    except OverflowError:
        if concentration < 0:
            raise ValueError("Concentration must be non-negative.") from None
        return AQI_CEILING
    if math.isnan(c):
        raise ValueError("Concentration is NaN.")
    if c < 0:
        raise ValueError(f"Concentration must be non-negative, got {c}.")
    if math.isinf(c):
        return AQI_CEILING

    cp = truncate_concentration(c)
    if cp < breakpoints[0].conc_low:
        raise ValueError(f"Concentration {cp} is below the lowest breakpoint.")

    last = len(breakpoints) - 1
    for i, bp in enumerate(breakpoints):
        if i == last:
            if cp > bp.conc_high:
                break
        elif cp >= breakpoints[i + 1].conc_low:
            continue

        cp = min(cp, bp.conc_high)
        # AQI = ((IHi - ILo) / (BPHi - BPLo)) * (Cp - BPLo) + ILo
        aqi = (bp.aqi_high - bp.aqi_low) / (bp.conc_high - bp.conc_low) * (cp - bp.conc_low) + bp.aqi_low
        return int(round(aqi))

    return AQI_CEILING


def pm25_to_aqi(pm25_ug_m3: float) -> int:
    return sub_index(pm25_ug_m3, PM25_BREAKPOINTS)


def pm10_to_aqi(pm10_ug_m3: float) -> int:
    return sub_index(pm10_ug_m3, PM10_BREAKPOINTS)


def compute_aqi(pm25_ug_m3: float, pm10_ug_m3: float) -> int:
    """
    Overall AQI: the higher of the PM2.5 and PM10 sub-indices.
    """
    return max(pm25_to_aqi(pm25_ug_m3), pm10_to_aqi(pm10_ug_m3))


def aqi_category(aqi: int) -> str:
    a = int(aqi)
    for upper, label in _CATEGORIES:
        if a <= upper:
            return label
    return "Hazardous"
