"""Map electronics module data onto detectors and calibrate it."""

__version__ = "0.1.0"