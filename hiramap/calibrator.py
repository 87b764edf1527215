"""Calibration helpers shared by all detectors.

A calibration fragment is a mapping of the form
``{"method": <name>, "parameters": [<numbers>]}``. Supported methods are
``"poly"`` (polynomial in the raw value) and ``"copy"`` (raw value passed
through). ``"walkCorrection"`` fragments describe a time-walk offset.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, Union

Calibration = Union[Mapping[str, Any], Iterable[float]]


class CalibrationError(ValueError):
    """Raised when a calibration fragment cannot be applied."""


def _method_of(fragment: Mapping[str, Any]) -> str:
    try:
        return str(fragment["method"])
    except KeyError as exc:
        raise CalibrationError("calibration fragment has no method") from exc


def _parameters_for(calibration: Calibration, expected_method: str) -> list[float]:
    """Return the parameter list, checking the method if a fragment is given."""
    if not isinstance(calibration, Mapping):
        return [float(p) for p in calibration]

    method = _method_of(calibration)
    if method != expected_method:
        raise CalibrationError(f"{method} is not {expected_method}!")
    try:
        parameters = calibration["parameters"]
    except KeyError as exc:
        raise CalibrationError(f"{method} calibration has no parameters") from exc
    return [float(p) for p in parameters]


def _divide_by_root(numerator: float, energy: float) -> float:
    """Compute numerator / sqrt(energy) with IEEE semantics instead of exceptions."""
    root = math.sqrt(energy) if energy >= 0 else math.nan
    if root == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / root


def calibrate_polynomial(raw_data: float, calibration: Calibration) -> float:
    """Return sum(raw_data**i * p_i) over the polynomial parameters.

    ``calibration`` is either a parameter sequence or a fragment whose method
    must be ``"poly"``.
    """
    parameters = _parameters_for(calibration, "poly")
    raw = float(raw_data)
    value = 0.0
    for power, coefficient in enumerate(parameters):
        value += raw**power * coefficient
    return value


def time_walk_offset(raw_energy: float, calibration: Calibration) -> float:
    """Return the time-walk offset to subtract from a raw time.

    The offset is ``p0 / sqrt(E) + p1 * E + p2``. ``calibration`` is either the
    three parameters or a fragment whose method must be ``"walkCorrection"``.
    """
    parameters = _parameters_for(calibration, "walkCorrection")
    if len(parameters) != 3:
        raise CalibrationError(
            f"Parameter list passed for TimeWalkOffset had {len(parameters)} "
            "parameters. Expected 3!"
        )
    energy = float(raw_energy)
    p0, p1, p2 = parameters
    return _divide_by_root(p0, energy) + p1 * energy + p2


def calibrate(raw_data: float, fragment: Mapping[str, Any]) -> float:
    """Calibrate ``raw_data`` with the method named in ``fragment``."""
    method = _method_of(fragment)
    if method == "poly":
        return calibrate_polynomial(raw_data, fragment)
    if method == "copy":
        return float(raw_data)
    raise CalibrationError(f"{method} is not a valid method!")