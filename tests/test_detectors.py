import pytest

from hiramap.calibrator import CalibrationError
from hiramap.detectors import Detector, Mcp, SimpleDetector, Timestamp

IDENTITY = {"method": "poly", "parameters": [0.0, 1.0]}


def test_detector_is_abstract():
    with pytest.raises(TypeError):
        Detector("x")


def test_simple_detector_defaults():
    det = SimpleDetector("ic")
    assert det.name == "ic"
    assert det.detector_type == "HTSimpleDetector"
    assert (det.energy_raw, det.time_raw, det.energy, det.time) == (-999, -9999, -9999, -9999)


def test_simple_detector_default_name():
    assert SimpleDetector().name == "Undefined"


def test_simple_detector_calibrate_copy():
    det = SimpleDetector("d")
    det.energy_raw = 512
    det.time_raw = 31.5
    det.calibrate({"fEnergy": {"method": "copy"}, "fTime": {"method": "copy"}})
    assert det.energy == 512.0
    assert det.time == 31.5


def test_simple_detector_calibrate_poly():
    det = SimpleDetector("d")
    det.energy_raw = 100
    det.calibrate({"fEnergy": {"method": "poly", "parameters": [5.0]}})
    assert det.energy == 5.0
    assert det.time == -9999


def test_simple_detector_calibration_missing_keys_leaves_values():
    det = SimpleDetector("d")
    det.energy_raw = 100
    det.calibrate({})
    assert det.energy == -9999


def test_simple_detector_bad_method_raises():
    det = SimpleDetector("d")
    with pytest.raises(CalibrationError):
        det.calibrate({"fEnergy": {"method": "nope"}})


def test_simple_detector_clear_resets():
    det = SimpleDetector("d")
    det.energy_raw = 1
    det.calibrate({"fEnergy": IDENTITY})
    det.clear()
    assert det.energy_raw == -999
    assert det.energy == -9999


def test_mcp_defaults():
    mcp = Mcp("mcp0")
    assert mcp.detector_type == "HTMcp"
    assert mcp.energy_mcp_raw == -9999
    assert mcp.energy_anode == -9999
    assert mcp.time_mcp == [] and mcp.time_anode_raw == []


def test_mcp_calibrate_energies_and_times():
    mcp = Mcp("mcp0")
    mcp.energy_mcp_raw = 300
    mcp.energy_anode_raw = 400
    mcp.time_mcp_raw = [1.0, 2.0]
    mcp.time_anode_raw = [3.0]
    mcp.calibrate(
        {
            "fEnergyMcp": IDENTITY,
            "fEnergyAnode": {"method": "copy"},
            "fTimeMcp": IDENTITY,
            "fTimeAnode": {"method": "copy"},
        }
    )
    assert mcp.energy_mcp == 300.0
    assert mcp.energy_anode == 400.0
    assert mcp.time_mcp == [1.0, 2.0]
    assert mcp.time_anode == [3.0]


def test_mcp_calibrate_appends_until_cleared():
    mcp = Mcp("mcp0")
    mcp.time_mcp_raw = [5.0]
    mcp.calibrate({"fTimeMcp": IDENTITY})
    mcp.calibrate({"fTimeMcp": IDENTITY})
    assert mcp.time_mcp == [5.0, 5.0]
    mcp.clear()
    assert mcp.time_mcp == []
    assert mcp.time_mcp_raw == []


def test_mcp_without_time_calibration_leaves_lists_empty():
    mcp = Mcp("mcp0")
    mcp.time_anode_raw = [7.0]
    mcp.calibrate({})
    assert mcp.time_anode == []


def test_timestamp_defaults_and_clear():
    ts = Timestamp("ts")
    assert ts.detector_type == "HTTimestamp"
    assert ts.timestamp == 0
    ts.timestamp = 123456789
    ts.clear()
    assert ts.timestamp == 0


def test_timestamp_calibrate_leaves_value():
    ts = Timestamp("ts")
    ts.timestamp = 99
    ts.calibrate({"fTimestamp": {"method": "bogus"}})
    assert ts.timestamp == 99