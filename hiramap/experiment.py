"""Experiment descriptions: the registered modules and run information."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from hiramap.modules import RootModule


class Experiment:
    """An experiment holding the electronics modules written out by the unpacker."""

    def __init__(self, experiment_number: int | None = None) -> None:
        self.name = "HTExperiment" if experiment_number is None else f"E{experiment_number}"
        self.modules: list[RootModule] = []

    def __repr__(self) -> str:
        return f"Experiment(name={self.name!r}, modules={len(self.modules)})"

    def register_module(self, module: RootModule) -> None:
        """Append ``module`` to the experiment's modules."""
        self.modules.append(module)


@dataclass
class ExperimentInfo:
    """Information on the current run and experimental setup."""

    experiment_number: int = -1
    run_title: str = ""
    run_number: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    name: str = field(init=False)

    def __post_init__(self) -> None:
        self.name = f"E{self.experiment_number}Info"