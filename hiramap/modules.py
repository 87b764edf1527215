"""In-memory representations of unpacked electronics modules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

UNSET = -9999
ADC_CHANNELS = 32
TDC_CHANNELS = 128
SIS_CHANNELS = 2


def _to_short(value: int) -> int:
    """Wrap an integer to a signed 16-bit value."""
    return (int(value) + 0x8000) % 0x10000 - 0x8000


def _to_ulong64(value: int) -> int:
    """Wrap an integer to an unsigned 64-bit value."""
    return int(value) % (1 << 64)


class RootModule(ABC):
    """Base for all electronics modules read from unpacked data."""

    module_type = "HTRootModule"

    def __init__(self, name: str = "Undefined") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def __str__(self) -> str:
        return self.format_data()

    @abstractmethod
    def clear(self) -> None:
        """Reset all channels to their unset value."""

    @abstractmethod
    def format_data(self) -> str:
        """Return a human-readable dump of the module's data."""


class Adc(RootModule):
    """A 32-channel ADC holding one 16-bit value per channel."""

    module_type = "HTRootAdc"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.data: list[int] = []
        self.clear()

    def clear(self) -> None:
        self.data = [UNSET] * ADC_CHANNELS

    def format_data(self) -> str:
        lines = [self.name]
        lines.extend(f"{ch} {value}" for ch, value in enumerate(self.data))
        return "\n".join(lines) + "\n"

    def get_data(self, ch: int) -> int:
        """Return the value in ``ch``, or -9999 if the channel is out of range."""
        return self.data[ch] if 0 <= ch < ADC_CHANNELS else UNSET

    def set_data(self, ch: int, data: int) -> None:
        """Store ``data`` in ``ch``; out-of-range channels are ignored."""
        if 0 <= ch < ADC_CHANNELS:
            self.data[ch] = _to_short(data)


class Caen1x90(RootModule):
    """A 128-channel multi-hit TDC."""

    module_type = "HTRootCAEN1x90"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.data: list[list[float]] = [[] for _ in range(TDC_CHANNELS)]

    def clear(self) -> None:
        for hits in self.data:
            hits.clear()

    def format_data(self) -> str:
        return "".join(
            f"{ch}: " + "".join(f"{t:g} " for t in hits) + "\n"
            for ch, hits in enumerate(self.data)
        )

    def get_hits(self, ch: int) -> list[float] | None:
        """Return the hit list of ``ch``, or None if the channel is out of range."""
        return self.data[ch] if 0 <= ch < TDC_CHANNELS else None

    def get_hit(self, ch: int, depth: int) -> float:
        """Return hit number ``depth`` of ``ch``, or -9999 if there is none."""
        if 0 <= ch < TDC_CHANNELS and 0 <= depth < len(self.data[ch]):
            return self.data[ch][depth]
        return UNSET

    def set_data(self, ch: int, depth: int, data: float) -> None:
        """Pad ``ch`` with -9999 up to ``depth`` hits, then append ``data``."""
        if 0 <= ch < TDC_CHANNELS:
            hits = self.data[ch]
            if len(hits) < depth:
                hits.extend([UNSET] * (depth - len(hits)))
            hits.append(data)

    def set_next_data(self, ch: int, data: float) -> None:
        """Append a hit to ``ch``; out-of-range channels are ignored."""
        if 0 <= ch < TDC_CHANNELS:
            self.data[ch].append(data)


class Caen1x90SingleHit(RootModule):
    """A 128-channel TDC keeping only one hit per channel."""

    module_type = "HTRootCAEN1x90SingleHit"

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.data: list[float] = []
        self.clear()

    def clear(self) -> None:
        self.data = [UNSET] * TDC_CHANNELS

    def format_data(self) -> str:
        return "".join(f"{ch}: {value:g}\n" for ch, value in enumerate(self.data))

    def get_data(self, ch: int) -> float:
        """Return the time in ``ch``, or -9999 if the channel is out of range."""
        return self.data[ch] if 0 <= ch < TDC_CHANNELS else UNSET

    def set_data(self, ch: int, data: float) -> None:
        """Store ``data`` in ``ch``; out-of-range channels are ignored."""
        if 0 <= ch < TDC_CHANNELS:
            self.data[ch] = data


class SisTimestamp(RootModule):
    """A SIS timestamp module with two unsigned 64-bit words."""

    def __init__(self, name: str = "Undefined") -> None:
        super().__init__(name)
        self.data: list[int] = []
        self.clear()

    def clear(self) -> None:
        self.data = [0] * SIS_CHANNELS

    def format_data(self) -> str:
        return f"{self.data[0]} {self.data[1]}\n"

    def get_data(self, ch: int) -> int:
        """Return word ``ch``, or 0 if the channel is out of range."""
        return self.data[ch] if 0 <= ch < SIS_CHANNELS else 0

    def set_data(self, ch: int, data: int) -> None:
        """Store ``data`` in word ``ch``; out-of-range channels are ignored."""
        if 0 <= ch < SIS_CHANNELS:
            self.data[ch] = _to_ulong64(data)


_MODULE_TYPES: dict[str, Callable[[str], RootModule]] = {
    "HTRootAdc": Adc,
    "HTRootCAEN1x90": Caen1x90,
    "HTRootCAEN1x90SingleHit": Caen1x90SingleHit,
    "HTRootSisTimestamp": SisTimestamp,
}


def create_module(module_type: str, module_name: str) -> RootModule:
    """Create a module of the named type."""
    try:
        factory = _MODULE_TYPES[module_type]
    except KeyError:
        raise ValueError(
            f"Failed to create module type {module_type} is not defined!"
        ) from None
    return factory(module_name)