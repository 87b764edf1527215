"""The MUSIC ion chamber: nine rectangle pads and four triangle pads.

Left and right on the triangle pads are from the beam's point of view.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator

from hiramap.calibrator import calibrate, time_walk_offset
from hiramap.detectors import UNSET, Detector

NUM_PADS = 9
TRIANGLE_PAD_WIDTH = 41.0  # mm
TRIANGLE_PAD_Z = 124.0  # mm from the detector centre

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class Vector3:
    """A Cartesian 3-vector in mm."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> Vector3:
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vector3:
        return Vector3(
            _divide(self.x, divisor), _divide(self.y, divisor), _divide(self.z, divisor)
        )


def _divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics instead of raising on a zero denominator."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def _to_short(value: int) -> int:
    """Wrap an integer to a signed 16-bit value."""
    return (int(value) + 0x8000) % 0x10000 - 0x8000


def _pad_index(key: Any) -> int:
    """Read a pad number from a key the way a C string-to-int would (0 if none)."""
    if isinstance(key, int):
        return key
    match = _LEADING_INT.match(str(key))
    return int(match.group()) if match else 0


def _pad_items(fragment: Any) -> Iterator[tuple[int, Any]]:
    """Yield (pad, calibration) pairs from a mapping or a list of calibrations."""
    if isinstance(fragment, Mapping):
        for key, value in fragment.items():
            yield _pad_index(key), value
    else:
        yield from enumerate(fragment)


def _is_walk_correction(fragment: Mapping[str, Any]) -> bool:
    return fragment.get("method") == "walkCorrection"


class MusicIC(Detector):
    """The MUSIC ion chamber with rectangle and triangle pads."""

    detector_type = "HTMusicIC"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.drift_velocity: float = 1.0  # mm/ns
        self.time_offset: float = 0.0  # electronic offset, ns
        self.reference_time: float = 0.0  # e.g. MCP anode time
        self.offset_z: float = 0.0  # positive values move the origin downstream
        self.clear()

    def clear(self) -> None:
        self.energy_raw: list[int] = [UNSET] * NUM_PADS
        self.time_raw: list[float] = [UNSET] * NUM_PADS
        self.energy: list[float] = [UNSET] * NUM_PADS
        self.time: list[float] = [UNSET] * NUM_PADS

        self.energy_ds_left_raw: int = UNSET
        self.energy_ds_right_raw: int = UNSET
        self.energy_us_left_raw: int = UNSET
        self.energy_us_right_raw: int = UNSET

        self.energy_ds_left: float = UNSET
        self.energy_ds_right: float = UNSET
        self.energy_us_left: float = UNSET
        self.energy_us_right: float = UNSET

        self.time_ds_left_raw: float = UNSET
        self.time_ds_right_raw: float = UNSET
        self.time_us_left_raw: float = UNSET
        self.time_us_right_raw: float = UNSET

        self.time_ds_left: float = UNSET
        self.time_ds_right: float = UNSET
        self.time_us_left: float = UNSET
        self.time_us_right: float = UNSET

    def _triangle_x(self, right: float, left: float) -> float:
        return _divide(right - left, right + left) * TRIANGLE_PAD_WIDTH

    def _drift_y(self, pad_time: float) -> float:
        return (pad_time - self.reference_time + self.time_offset) * self.drift_velocity

    def position_us(self) -> Vector3:
        """Beam position at the upstream triangle pads, in mm."""
        return Vector3(
            self._triangle_x(self.energy_us_right, self.energy_us_left),
            self._drift_y(self.time[0]),
            -TRIANGLE_PAD_Z,
        )

    def position_ds(self) -> Vector3:
        """Beam position at the downstream triangle pads, in mm."""
        return Vector3(
            self._triangle_x(self.energy_ds_right, self.energy_ds_left),
            self._drift_y(self.time[NUM_PADS - 1]),
            TRIANGLE_PAD_Z,
        )

    def position(self, z_position: float) -> Vector3:
        """Beam position at ``z_position`` measured from the shifted origin."""
        upstream = self.position_us()
        slope = self.position_ds() - upstream
        slope = slope / slope.z
        return upstream + slope * (z_position + self.offset_z + TRIANGLE_PAD_Z)

    def set_energy_raw(self, ch: int, energy: int) -> None:
        """Store the raw energy of pad ``ch``; out-of-range pads are ignored."""
        if 0 <= ch < NUM_PADS:
            self.energy_raw[ch] = _to_short(energy)

    def set_time_raw(self, ch: int, time: float) -> None:
        """Store the raw time of pad ``ch``; out-of-range pads are ignored."""
        if 0 <= ch < NUM_PADS:
            self.time_raw[ch] = time

    def get_energy_raw(self, ch: int) -> int:
        return self.energy_raw[ch] if 0 <= ch < NUM_PADS else UNSET

    def get_energy(self, ch: int) -> float:
        return self.energy[ch] if 0 <= ch < NUM_PADS else UNSET

    def get_time_raw(self, ch: int) -> float:
        return self.time_raw[ch] if 0 <= ch < NUM_PADS else UNSET

    def get_time(self, ch: int) -> float:
        return self.time[ch] if 0 <= ch < NUM_PADS else UNSET

    def _calibrated_time(
        self, raw_time: float, raw_energy: float, fragment: Mapping[str, Any]
    ) -> float:
        if _is_walk_correction(fragment):
            return raw_time - time_walk_offset(raw_energy, fragment)
        return calibrate(raw_time, fragment)

    def calibrate(self, calibration: Mapping[str, Any]) -> None:
        if "fEnergy" in calibration:
            for pad, fragment in _pad_items(calibration["fEnergy"]):
                if 0 <= pad < NUM_PADS:
                    self.energy[pad] = calibrate(self.energy_raw[pad], fragment)

        if "fTime" in calibration:
            for pad, fragment in _pad_items(calibration["fTime"]):
                if 0 <= pad < NUM_PADS:
                    self.time[pad] = self._calibrated_time(
                        self.time_raw[pad], self.energy_raw[pad], fragment
                    )

        for side in ("ds_right", "ds_left", "us_right", "us_left"):
            key = "fEnergy" + _side_key(side)
            if key in calibration:
                raw = getattr(self, f"energy_{side}_raw")
                setattr(self, f"energy_{side}", calibrate(raw, calibration[key]))

        for side in ("ds_right", "ds_left", "us_right", "us_left"):
            key = "fTime" + _side_key(side)
            if key in calibration:
                value = self._calibrated_time(
                    getattr(self, f"time_{side}_raw"),
                    getattr(self, f"energy_{side}_raw"),
                    calibration[key],
                )
                setattr(self, f"time_{side}", value)


def _side_key(side: str) -> str:
    """Turn ``"ds_right"`` into the calibration key suffix ``"DSRight"``."""
    position, hand = side.split("_")
    return position.upper() + hand.capitalize()