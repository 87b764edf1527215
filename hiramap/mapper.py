"""The event loop: feed electronics modules to detector mappers, event by event."""

from __future__ import annotations

import copy
import time
from collections.abc import Iterable, Iterator, Mapping, Sized
from typing import Any, TextIO

from hiramap.detector_mappers import DetectorMapper, create_mapper
from hiramap.detectors import Detector
from hiramap.modules import Adc, Caen1x90, Caen1x90SingleHit, RootModule, create_module

UNSET = -9999
PROGRESS_INTERVAL = 1000
_BAR_WIDTH = 20


def _scaled(seconds: float) -> tuple[float, str]:
    """Express a duration in seconds, minutes or hours, whichever fits."""
    if seconds < 60:
        return seconds, "s"
    if seconds < 3600:
        return seconds / 60, "m"
    return seconds / 3600, "h"


def format_progress(events_mapped: int, total_events: int, elapsed_seconds: float) -> str:
    """Return the one-line status shown while mapping events.

    The line holds the percentage done, a 20-character bar, the elapsed time
    and, once at least one event is mapped, an estimate of the time remaining.
    """
    fraction = events_mapped / total_events if total_events else 0.0
    filled = int(_BAR_WIDTH * fraction)
    bar = "=" * filled + " " * (_BAR_WIDTH - filled)

    elapsed = int(elapsed_seconds)
    if elapsed < 60:
        elapsed_text = f"{elapsed} s; "
    elif elapsed < 3600:
        elapsed_text = f"{elapsed // 60} m; "
    else:
        elapsed_text = f"{elapsed // 3600} h; "

    line = f"Percentage= {100 * fraction:5.1f} %   [{bar}]   elapsed time: {elapsed_text}"

    if events_mapped > 0:
        remaining_events = total_events - events_mapped
        remaining = elapsed / events_mapped * remaining_events
        value, unit = _scaled(remaining)
        line += f"Estimated remaining time: {value:.1f} {unit}      "
    return line


class Mapper:
    """Holds the electronics modules and detector mappers of one run.

    ``config`` lists the ``modules`` (``moduleName``, ``moduleType``) and the
    ``detectors`` (each a detector configuration) to build.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        run_number: int = -1,
        progress: TextIO | None = None,
    ) -> None:
        self.config = config
        self.run_number = run_number
        self.progress = progress
        self.modules: dict[str, RootModule] = {}
        for module in config.get("modules", []):
            name = str(module["moduleName"])
            self.modules[name] = create_module(str(module["moduleType"]), name)
        self.mappers: list[DetectorMapper] = [
            create_mapper(detector, run_number) for detector in config.get("detectors", [])
        ]

    def __repr__(self) -> str:
        return (
            f"Mapper(run_number={self.run_number}, modules={len(self.modules)}, "
            f"detectors={len(self.mappers)})"
        )

    @property
    def detectors(self) -> dict[str, Detector]:
        """The live detectors, keyed by name."""
        return {mapper.detector.name: mapper.detector for mapper in self.mappers}

    def _module(self, module_name: str) -> RootModule:
        try:
            return self.modules[module_name]
        except KeyError:
            raise ValueError(
                f"Could not map an energy using module {module_name} it does not exist."
            ) from None

    def get_adc_energy(self, module_name: str, ch: int) -> int:
        """Return channel ``ch`` of the ADC named ``module_name``."""
        module = self._module(module_name)
        if not isinstance(module, Adc):
            raise ValueError(
                f"Could not map an energy using module name {module_name} "
                "it is not of type HTRootAdc."
            )
        return module.get_data(ch)

    def get_time_single_hit(self, module_name: str, ch: int) -> float:
        """Return the first hit in ``ch`` of a TDC, or -9999 if it has none."""
        times = self.get_time_multi_hit(module_name, ch)
        return times[0] if times else UNSET

    def get_time_multi_hit(self, module_name: str, ch: int) -> list[float]:
        """Return all hits in ``ch`` of a multi-hit or single-hit TDC."""
        module = self._module(module_name)
        if isinstance(module, Caen1x90):
            hits = module.get_hits(ch)
            return list(hits) if hits is not None else []
        if isinstance(module, Caen1x90SingleHit):
            return [module.get_data(ch)]
        raise ValueError(
            f"Could not map time using module {module_name} it is the wrong type."
        )

    def map_events(
        self, events: Iterable[Mapping[str, RootModule]]
    ) -> Iterator[dict[str, Detector]]:
        """Map each event and yield a snapshot of every detector, keyed by name.

        An event maps module names to the modules read for that event; they
        replace the modules of the same name before the detectors are filled.
        """
        total = len(events) if isinstance(events, Sized) else None
        start = time.monotonic()
        reported = False
        for index, event in enumerate(events):
            if (
                self.progress is not None
                and total is not None
                and index % PROGRESS_INTERVAL == 0
            ):
                line = format_progress(index, total, time.monotonic() - start)
                self.progress.write(line + "\r")
                self.progress.flush()
                reported = True

            self.modules.update(event)
            for mapper in self.mappers:
                mapper.detector.clear()
                mapper.map_and_calibrate(self)
            yield {
                mapper.detector.name: copy.deepcopy(mapper.detector)
                for mapper in self.mappers
            }

        if self.progress is not None and reported:
            self.progress.write("\n")
            self.progress.flush()