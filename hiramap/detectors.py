"""Detector state holders: raw data in, calibrated data out."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from hiramap.calibrator import calibrate

UNSET = -9999


class Detector(ABC):
    """Base for all detectors: holds a name and the detector's state."""

    detector_type = "Undefined"

    def __init__(self, name: str = "Undefined") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @abstractmethod
    def clear(self) -> None:
        """Reset all data to the unset value."""

    @abstractmethod
    def calibrate(self, calibration: Mapping[str, Any]) -> None:
        """Fill calibrated values from raw values using a calibration fragment."""


class SimpleDetector(Detector):
    """A detector holding one energy and one time, raw and calibrated."""

    detector_type = "HTSimpleDetector"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.clear()

    def clear(self) -> None:
        self.energy_raw: int = -999
        self.time_raw: float = UNSET
        self.energy: float = UNSET
        self.time: float = UNSET

    def calibrate(self, calibration: Mapping[str, Any]) -> None:
        if "fEnergy" in calibration:
            self.energy = calibrate(self.energy_raw, calibration["fEnergy"])
        if "fTime" in calibration:
            self.time = calibrate(self.time_raw, calibration["fTime"])


class Mcp(Detector):
    """An MCP detector: energy and multi-hit times at the MCP back and anode."""

    detector_type = "HTMcp"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.time_mcp_raw: list[float] = []
        self.time_anode_raw: list[float] = []
        self.time_mcp: list[float] = []
        self.time_anode: list[float] = []
        self.clear()

    def clear(self) -> None:
        self.energy_anode: float = UNSET
        self.energy_anode_raw: int = UNSET
        self.energy_mcp: float = UNSET
        self.energy_mcp_raw: int = UNSET
        self.time_anode.clear()
        self.time_anode_raw.clear()
        self.time_mcp.clear()
        self.time_mcp_raw.clear()

    def calibrate(self, calibration: Mapping[str, Any]) -> None:
        if "fEnergyMcp" in calibration:
            self.energy_mcp = calibrate(self.energy_mcp_raw, calibration["fEnergyMcp"])
        if "fEnergyAnode" in calibration:
            self.energy_anode = calibrate(
                self.energy_anode_raw, calibration["fEnergyAnode"]
            )
        if "fTimeMcp" in calibration:
            fragment = calibration["fTimeMcp"]
            self.time_mcp.extend(calibrate(t, fragment) for t in self.time_mcp_raw)
        if "fTimeAnode" in calibration:
            fragment = calibration["fTimeAnode"]
            self.time_anode.extend(calibrate(t, fragment) for t in self.time_anode_raw)


class Timestamp(Detector):
    """A detector holding a single 64-bit timestamp."""

    detector_type = "HTTimestamp"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.clear()

    def clear(self) -> None:
        self.timestamp: int = 0

    def calibrate(self, calibration: Mapping[str, Any]) -> None:
        """Timestamps need no calibration; the value is left unchanged."""
        return None