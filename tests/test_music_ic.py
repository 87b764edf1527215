import pytest

from hiramap.calibrator import CalibrationError
from hiramap.music_ic import MusicIC, Vector3

COPY = {"method": "copy"}


def _prepared(us_left=100, us_right=100, ds_left=100, ds_right=100, t0=50.0, t8=50.0):
    det = MusicIC("music")
    det.energy_us_left_raw = us_left
    det.energy_us_right_raw = us_right
    det.energy_ds_left_raw = ds_left
    det.energy_ds_right_raw = ds_right
    det.set_time_raw(0, t0)
    det.set_time_raw(8, t8)
    det.calibrate(
        {
            "fTime": {"0": COPY, "8": COPY},
            "fEnergyUSLeft": COPY,
            "fEnergyUSRight": COPY,
            "fEnergyDSLeft": COPY,
            "fEnergyDSRight": COPY,
        }
    )
    return det


def test_clear_sets_unset_values():
    det = MusicIC()
    for ch in range(9):
        assert det.get_energy_raw(ch) == -9999
        assert det.get_energy(ch) == -9999
        assert det.get_time_raw(ch) == -9999
        assert det.get_time(ch) == -9999
    assert det.time_us_left == -9999
    assert det.energy_ds_right_raw == -9999
    assert det.detector_type == "HTMusicIC"


def test_clear_keeps_gas_settings():
    det = MusicIC()
    det.drift_velocity = 2.5
    det.set_energy_raw(3, 17)
    det.clear()
    assert det.drift_velocity == 2.5
    assert det.get_energy_raw(3) == -9999


def test_set_and_get_round_trip():
    det = MusicIC()
    det.set_energy_raw(4, 1234)
    det.set_time_raw(4, 56.5)
    assert det.get_energy_raw(4) == 1234
    assert det.get_time_raw(4) == 56.5


@pytest.mark.parametrize("ch", [-1, 9, 100])
def test_out_of_range_channels(ch):
    det = MusicIC()
    det.set_energy_raw(ch, 10)
    det.set_time_raw(ch, 10.0)
    assert det.get_energy_raw(ch) == -9999
    assert det.get_time(ch) == -9999
    assert det.energy_raw == [-9999] * 9


def test_energy_copy_calibration_by_key():
    det = MusicIC()
    det.set_energy_raw(2, 300)
    det.calibrate({"fEnergy": {"2": COPY, "42": COPY}})
    assert det.get_energy(2) == 300
    assert det.get_energy(0) == -9999


def test_energy_calibration_from_list():
    det = MusicIC()
    for ch in range(9):
        det.set_energy_raw(ch, ch * 10)
    det.calibrate({"fEnergy": [COPY] * 9})
    assert [det.get_energy(ch) for ch in range(9)] == det.energy_raw


def test_time_walk_correction_with_zero_parameters_keeps_raw():
    det = MusicIC()
    det.set_energy_raw(1, 400)
    det.set_time_raw(1, 77.0)
    det.calibrate(
        {"fTime": {"1": {"method": "walkCorrection", "parameters": [0, 0, 0]}}}
    )
    assert det.get_time(1) == pytest.approx(77.0)


def test_triangle_pad_calibration():
    det = MusicIC()
    det.time_ds_left_raw = 12.0
    det.energy_us_right_raw = 250
    det.calibrate(
        {
            "fTimeDSLeft": COPY,
            "fEnergyUSRight": {"method": "poly", "parameters": [7]},
        }
    )
    assert det.time_ds_left == 12.0
    assert det.energy_us_right == 7
    assert det.time_ds_right == -9999


def test_invalid_method_raises():
    det = MusicIC()
    with pytest.raises(CalibrationError):
        det.calibrate({"fEnergyDSLeft": {"method": "bogus"}})


def test_walk_correction_needs_three_parameters():
    det = MusicIC()
    with pytest.raises(CalibrationError):
        det.calibrate({"fTimeUSLeft": {"method": "walkCorrection", "parameters": [1]}})


def test_positions_centred_beam():
    det = _prepared()
    det.reference_time = 50.0
    us = det.position_us()
    ds = det.position_ds()
    assert us.x == 0
    assert us.y == 0
    assert us.z == -124
    assert ds.z == 124


def test_position_sign_follows_larger_pad():
    det = _prepared(us_left=50, us_right=150)
    assert det.position_us().x > 0
    det = _prepared(us_left=150, us_right=50)
    assert det.position_us().x < 0


def test_position_interpolates_between_pads():
    det = _prepared(us_left=80, us_right=120, ds_left=130, ds_right=70, t0=40.0, t8=60.0)
    det.drift_velocity = 0.5
    det.offset_z = 10.0
    us = det.position_us()
    ds = det.position_ds()
    at_us = det.position(-124 - det.offset_z)
    at_ds = det.position(124 - det.offset_z)
    for got, want in zip(at_us, us):
        assert got == pytest.approx(want)
    for got, want in zip(at_ds, ds):
        assert got == pytest.approx(want)


def test_position_zero_energy_gives_nan():
    det = _prepared(us_left=0, us_right=0)
    x = det.position_us().x
    assert str(x) == "nan"


def test_vector_arithmetic_round_trips():
    a = Vector3(1.5, -2.0, 3.25)
    b = Vector3(0.5, 4.0, -1.0)
    assert (a + b) - b == a
    assert (a * 4) / 4 == a
    assert 2 * a == a * 2
    assert list(a) == [1.5, -2.0, 3.25]