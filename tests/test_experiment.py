from datetime import datetime

from hiramap.experiment import Experiment, ExperimentInfo
from hiramap.modules import Adc, Caen1x90


def test_default_experiment_name():
    assert Experiment().name == "HTExperiment"


def test_numbered_experiment_name():
    assert Experiment(12014).name == "E12014"


def test_register_module_keeps_order():
    exp = Experiment(12014)
    adc = Adc("adc1")
    tdc = Caen1x90("tdc1")
    exp.register_module(adc)
    exp.register_module(tdc)
    assert exp.modules == [adc, tdc]
    assert [m.name for m in exp.modules] == ["adc1", "tdc1"]


def test_new_experiment_has_no_modules():
    assert Experiment(5).modules == []


def test_experiment_info_name():
    assert ExperimentInfo(12014).name == "E12014Info"
    assert ExperimentInfo().name == "E-1Info"


def test_experiment_info_run_fields():
    start = datetime(2021, 5, 6, 12, 0, 0)
    end = datetime(2021, 5, 6, 13, 0, 0)
    info = ExperimentInfo(12014, run_title="beam on target", run_number=42)
    info.start_time = start
    info.end_time = end
    assert info.run_title == "beam on target"
    assert info.run_number == 42
    assert info.start_time == start
    assert info.end_time == end
    assert info.experiment_number == 12014