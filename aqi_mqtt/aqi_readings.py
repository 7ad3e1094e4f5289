"""
Sensor payload codec.

Decodes AirGradient-style JSON readings, pulls out the standard PM2.5/PM10
concentrations and re-encodes the payload with an `aqi` field attached.
Every other field passes through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import math
from typing import Any, Dict, Mapping

from aqi import compute_aqi


PM25_FIELD = "pm02Standard"
PM10_FIELD = "pm10Standard"
AQI_FIELD = "aqi"


class InvalidReading(ValueError):
    """Raised when a payload cannot be turned into a SensorReading."""


@dataclass(frozen=True)
class SensorReading:
    pm25_standard: float
    pm10_standard: float
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False)


def _concentration(payload: Mapping[str, Any], name: str) -> float:
    if name not in payload:
        raise InvalidReading(f"Missing field '{name}'.")
    value = payload[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidReading(f"Field '{name}' must be a number, got {value!r}.")
    if value < 0:
        raise InvalidReading(f"Field '{name}' must be non-negative, got {value!r}.")
    try:
        value = float(value)
    except OverflowError:
        # Integer too large for a float: saturates in the AQI lookup
        return math.inf
    if not math.isfinite(value):
        raise InvalidReading(f"Field '{name}' must be a finite non-negative number, got {value!r}.")
    return value


def parse_reading(raw: bytes | str) -> SensorReading:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidReading(f"Payload is not UTF-8: {e}") from e

    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # ValueError also covers JSONDecodeError and over-long integer literals
        raise InvalidReading(f"Payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidReading(f"Expected a JSON object, got {type(payload).__name__}.")

    return SensorReading(
        pm25_standard=_concentration(payload, PM25_FIELD),
        pm10_standard=_concentration(payload, PM10_FIELD),
        payload=payload,
    )


def enrich(reading: SensorReading) -> Dict[str, Any]:
    """
    Copy of the original payload with the overall AQI under `aqi`.
    """
    out = dict(reading.payload)
    out[AQI_FIELD] = compute_aqi(reading.pm25_standard, reading.pm10_standard)
    return out


def process_payload(raw: bytes | str) -> Dict[str, Any]:
    return enrich(parse_reading(raw))


def encode(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")
