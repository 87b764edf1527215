"""Detector mappers: fill a detector from module data and calibrate it.

One mapper exists per configured detector. Each event, the mapper pulls raw
values from a data source (the set of electronics modules for the current
event) into its detector, then applies the detector's calibration.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Protocol

from hiramap.detectors import Detector, Mcp, SimpleDetector, Timestamp
from hiramap.modules import Adc, Caen1x90, Caen1x90SingleHit, RootModule, SisTimestamp
from hiramap.music_ic import NUM_PADS, MusicIC

logger = logging.getLogger(__name__)


class _DataSource(Protocol):
    """What a mapper needs to read raw values for one event."""

    modules: Mapping[str, RootModule]

    def get_adc_energy(self, module_name: str, ch: int) -> int: ...

    def get_time_single_hit(self, module_name: str, ch: int) -> float: ...

    def get_time_multi_hit(self, module_name: str, ch: int) -> list[float]: ...


def _in_range(info: Mapping[str, Any], run_number: int) -> bool:
    if "runRange" not in info:
        return False
    low, high = info["runRange"][0], info["runRange"][1]
    return low <= run_number <= high


def select_calibration(calibration: Mapping[str, Any], run_number: int) -> Mapping[str, Any]:
    """Pick the entry of a ``calibrationList`` that applies to ``run_number``.

    An entry whose ``run`` equals the run number wins, then the first entry
    whose ``runRange`` holds it, then the first entry with neither key. A
    calibration without a list, or with no entry that applies, is returned
    unchanged.
    """
    if "calibrationList" not in calibration:
        return calibration
    entries = calibration["calibrationList"]

    for info in entries:
        if info.get("run", -1) == run_number:
            logger.info("Using calibration for run %s", info["run"])
            return info

    for info in entries:
        if _in_range(info, run_number):
            logger.info("Using calibration for range %s", info["runRange"])
            return info

    for info in entries:
        if "run" not in info and "runRange" not in info:
            logger.info("Using default calibration")
            return info

    return calibration


def load_calibration(config: Mapping[str, Any], run_number: int) -> Mapping[str, Any]:
    """Return the calibration for a detector configuration and run.

    The calibration is taken from the ``calibration`` key, or else read from
    the JSON file named by ``calibrationFile``. A file that cannot be opened,
    or a configuration with neither key, gives an empty calibration.
    """
    if "calibration" in config:
        calibration = config["calibration"]
    elif "calibrationFile" in config:
        file_name = config["calibrationFile"]
        try:
            with open(file_name, encoding="utf-8") as handle:
                logger.info("Loading calibration file: %s", file_name)
                calibration = json.load(handle)
        except OSError:
            logger.warning("Failed to open calibration file %s", file_name)
            return {}
    else:
        logger.info("No calibration data found for %s", config.get("detectorName"))
        return {}
    return select_calibration(calibration, run_number)


def _channel(config: Mapping[str, Any], key: str) -> tuple[str, int]:
    entry = config[key]
    return str(entry["moduleName"]), int(entry["ch"])


class DetectorMapper(ABC):
    """Owns one detector and fills it from module data each event."""

    detector_class: Callable[[str], Detector]

    def __init__(self, config: Mapping[str, Any], run_number: int = -1) -> None:
        self.configuration = config
        self.run_number = run_number
        self.calibration = load_calibration(config, run_number)
        self.detector = self.detector_class(str(config["detectorName"]))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(detector={self.detector.name!r})"

    @abstractmethod
    def map_and_calibrate(self, source: _DataSource) -> None:
        """Fill the detector's raw values from ``source`` and calibrate them."""


class SimpleDetectorMapper(DetectorMapper):
    """Maps one ADC channel and one TDC channel onto a SimpleDetector."""

    detector_class = SimpleDetector

    def map_and_calibrate(self, source: _DataSource) -> None:
        det = self.detector
        modules = source.modules

        module_name, ch = _channel(self.configuration, "fEnergy")
        energy_module = modules.get(module_name)
        if not isinstance(energy_module, Adc):
            raise ValueError(
                f"Could not map fEnergy using module name {module_name} "
                "either it does not exist or is the wrong type."
            )
        det.energy_raw = energy_module.get_data(ch)

        module_name, ch = _channel(self.configuration, "fTime")
        time_module = modules.get(module_name)
        if isinstance(time_module, Caen1x90):
            det.time_raw = time_module.get_hit(ch, 0)
        elif isinstance(time_module, Caen1x90SingleHit):
            det.time_raw = time_module.get_data(ch)
        else:
            raise ValueError(
                f"Could not map fTime using module name {module_name} "
                "either it does not exist or is the wrong type."
            )

        det.calibrate(self.calibration)


class McpMapper(DetectorMapper):
    """Maps MCP and anode energies and multi-hit times onto an Mcp."""

    detector_class = Mcp

    def map_and_calibrate(self, source: _DataSource) -> None:
        det = self.detector
        config = self.configuration
        det.energy_anode_raw = source.get_adc_energy(*_channel(config, "fEnergyAnode"))
        det.energy_mcp_raw = source.get_adc_energy(*_channel(config, "fEnergyMcp"))
        det.time_anode_raw = list(source.get_time_multi_hit(*_channel(config, "fTimeAnode")))
        det.time_mcp_raw = list(source.get_time_multi_hit(*_channel(config, "fTimeMcp")))
        det.calibrate(self.calibration)


class MusicICMapper(DetectorMapper):
    """Maps the pads of the MUSIC ion chamber.

    An optional ``gasFile`` holds a ``gasList`` of entries keyed by ``run`` or
    ``runRange``; a matching entry sets the drift velocity and time offset.
    """

    detector_class = MusicIC

    def __init__(self, config: Mapping[str, Any], run_number: int = -1) -> None:
        super().__init__(config, run_number)
        if "gasFile" in config:
            self._load_gas_file(config["gasFile"])

    def _load_gas_file(self, file_name: str) -> None:
        try:
            with open(file_name, encoding="utf-8") as handle:
                gas_info = json.load(handle)
        except OSError as exc:
            raise ValueError(f"Can not open gas file: {file_name}") from exc

        for info in gas_info.get("gasList", []):
            matches = info.get("run", -1) == self.run_number or _in_range(
                info, self.run_number
            )
            if matches:
                logger.info(
                    "Setting drift velocity: %s mm/ns, time offset: %s ns",
                    info["driftVelocity"],
                    info["timeOffset"],
                )
                self.detector.drift_velocity = float(info["driftVelocity"])
                self.detector.time_offset = float(info["timeOffset"])

    def map_and_calibrate(self, source: _DataSource) -> None:
        det = self.detector
        config = self.configuration

        for pad in range(NUM_PADS):
            energy = config["fEnergy"][pad]
            det.set_energy_raw(
                pad, source.get_adc_energy(str(energy["moduleName"]), int(energy["ch"]))
            )
            timing = config["fTime"][pad]
            det.set_time_raw(
                pad,
                source.get_time_single_hit(str(timing["moduleName"]), int(timing["ch"])),
            )

        det.energy_us_left_raw = source.get_adc_energy(*_channel(config, "fEnergyUSLeft"))
        det.energy_us_right_raw = source.get_adc_energy(*_channel(config, "fEnergyUSRight"))
        det.energy_ds_left_raw = source.get_adc_energy(*_channel(config, "fEnergyDSLeft"))
        det.energy_ds_right_raw = source.get_adc_energy(*_channel(config, "fEnergyDSRight"))

        det.time_us_left_raw = source.get_time_single_hit(*_channel(config, "fTimeUSLeft"))
        det.time_us_right_raw = source.get_time_single_hit(*_channel(config, "fTimeUSRight"))
        det.time_ds_left_raw = source.get_time_single_hit(*_channel(config, "fTimeDSLeft"))
        det.time_ds_right_raw = source.get_time_single_hit(*_channel(config, "fTimeDSRight"))

        det.reference_time = source.get_time_single_hit(*_channel(config, "fTimeReference"))

        det.calibrate(self.calibration)


class TimestampMapper(DetectorMapper):
    """Maps one word of a SIS timestamp module onto a Timestamp."""

    detector_class = Timestamp

    def map_and_calibrate(self, source: _DataSource) -> None:
        module_name, ch = _channel(self.configuration, "fTimestamp")
        module = source.modules.get(module_name)
        if not isinstance(module, SisTimestamp):
            raise ValueError(
                f"Could not map fTimestamp using module name {module_name} "
                "either it does not exist or is the wrong type."
            )
        self.detector.timestamp = module.get_data(ch)


_MAPPER_TYPES: dict[str, type[DetectorMapper]] = {
    "HTSimpleDetector": SimpleDetectorMapper,
    "HTMcp": McpMapper,
    "HTMusicIC": MusicICMapper,
    "HTTimestamp": TimestampMapper,
}


def create_mapper(config: Mapping[str, Any], run_number: int = -1) -> DetectorMapper:
    """Create the mapper for the ``detectorType`` named in ``config``."""
    detector_type = str(config["detectorType"])
    try:
        mapper_class = _MAPPER_TYPES[detector_type]
    except KeyError:
        raise ValueError(f"Detector type {detector_type} is not defined!") from None
    return mapper_class(config, run_number)