# hiramap

`hiramap` takes electronics-module data from an experiment and assigns it to
detectors. It then calibrates the detector values. The module data comes from
ADCs, multi-hit and single-hit TDCs, and timestamp scalers. Configuration is
given as plain JSON-style dictionaries.

The package has no runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Building blocks

### `hiramap.modules`

This module holds the electronics modules:

- `Adc`: 32 channels of signed 16-bit values.
- `Caen1x90`: 128 channels. Each channel holds a list of hits.
- `Caen1x90SingleHit`: 128 channels. Each channel holds one time.
- `SisTimestamp`: two unsigned 64-bit words.

`create_module(module_type, module_name)` builds a module from its type name.
The type names are `"HTRootAdc"`, `"HTRootCAEN1x90"`,
`"HTRootCAEN1x90SingleHit"` and `"HTRootSisTimestamp"`. Any other name raises
`ValueError`.

Channels that are out of range are ignored when you set them. When you read
them you get a sentinel: `-9999` for the ADC and the TDCs, and `0` for the
timestamp words. `clear()` resets a module. `format_data()` returns a text
dump of its contents.

```python
from hiramap.modules import create_module

adc = create_module("HTRootAdc", "adc1")
adc.set_data(3, 1200)
print(adc.get_data(3))     # 1200
print(adc.get_data(40))    # -9999, channel out of range
```

### `hiramap.calibrator`

This module applies calibration fragments of the form
`{"method": ..., "parameters": [...]}`:

- `calibrate(raw_data, fragment)` supports two methods. `"poly"` returns
  `sum(raw**i * p_i)`. `"copy"` returns the raw value unchanged.
- `calibrate_polynomial(raw_data, calibration)` takes either a `"poly"`
  fragment or a plain list of parameters.
- `time_walk_offset(raw_energy, calibration)` returns
  `p0 / sqrt(E) + p1 * E + p2`. It takes a `"walkCorrection"` fragment or
  exactly three parameters.

An unknown method, a method that does not fit the function, or a wrong number
of walk parameters raises `CalibrationError`. `CalibrationError` is a subclass
of `ValueError`.

### `hiramap.detectors` and `hiramap.music_ic`

- `SimpleDetector` holds one energy and one time. Each comes as a raw value and
  a calibrated value.
- `Mcp` holds the MCP and anode energies and their multi-hit time lists.
- `Timestamp` holds a single timestamp. Its `calibrate` does nothing.
- `MusicIC` is an ion chamber. It has nine rectangle pads and four triangle
  pads: upstream/downstream, left/right. For times it accepts either
  `"walkCorrection"` fragments or ordinary fragments.
  - `position_us()` and `position_ds()` give the beam position at the triangle
    pads as a `Vector3`.
  - `position(z)` interpolates the beam position along z.
  - The position uses `drift_velocity`, `time_offset`, `reference_time` and
    `offset_z`.

`clear()` resets a detector. Most values go back to `-9999`.

```python
from hiramap.detectors import SimpleDetector

det = SimpleDetector("scint")
det.energy_raw = 100
det.time_raw = 12.5
det.calibrate({
    "fEnergy": {"method": "poly", "parameters": [1.0, 0.5]},
    "fTime": {"method": "copy"},
})
print(det.energy, det.time)   # 51.0 12.5
```

### `hiramap.detector_mappers`

There is one mapper class per detector type: `SimpleDetectorMapper`,
`McpMapper`, `MusicICMapper` and `TimestampMapper`. Use
`create_mapper(config, run_number)` to get the mapper for the config's
`detectorType`. The types are `"HTSimpleDetector"`, `"HTMcp"`, `"HTMusicIC"`
and `"HTTimestamp"`.

Each signal in a detector configuration names its channel as
`{"moduleName": ..., "ch": ...}`.

The calibration comes from one of two places:

- the `calibration` key;
- a JSON file named by `calibrationFile`. A file that cannot be opened gives
  an empty calibration.

If the calibration holds a `calibrationList`, `select_calibration` picks one
entry from it, in this order:

1. an entry whose `"run"` equals the run number;
2. the first entry whose `"runRange"` contains the run number;
3. the first entry that has neither key.

For `MusicICMapper`, an optional `gasFile` can be given. It holds a `gasList`
whose entries match by run number or run range. A matching entry sets the
drift velocity and the time offset.

### `hiramap.mapper`

`Mapper(config, run_number, progress=None)` builds the modules listed under
`config["modules"]` and the mappers listed under `config["detectors"]`.

`map_events(events)` takes an iterable of events. Each event maps module names
to the modules read for that event. For each event it:

1. replaces the stored modules of those names with the event's modules;
2. clears and maps every detector;
3. yields a deep copy of every detector, keyed by name.

If you pass a text stream as `progress` and `events` has a length, a progress
line is written to the stream every 1000 events. `format_progress` builds that
line.

`get_adc_energy`, `get_time_single_hit` and `get_time_multi_hit` read values
by module name and channel. They raise `ValueError` if the module is missing
or is of the wrong type.

```python
from hiramap.mapper import Mapper
from hiramap.modules import create_module

config = {
    "modules": [
        {"moduleName": "adc1", "moduleType": "HTRootAdc"},
        {"moduleName": "tdc1", "moduleType": "HTRootCAEN1x90"},
    ],
    "detectors": [
        {
            "detectorName": "scint",
            "detectorType": "HTSimpleDetector",
            "fEnergy": {"moduleName": "adc1", "ch": 0},
            "fTime": {"moduleName": "tdc1", "ch": 5},
            "calibration": {"fEnergy": {"method": "poly", "parameters": [0.0, 2.0]}},
        }
    ],
}

mapper = Mapper(config, run_number=12)
adc = create_module("HTRootAdc", "adc1")
adc.set_data(0, 300)
tdc = create_module("HTRootCAEN1x90", "tdc1")
tdc.set_next_data(5, 41.5)

for detectors in mapper.map_events([{"adc1": adc, "tdc1": tdc}]):
    print(detectors["scint"].energy, detectors["scint"].time_raw)   # 600.0 41.5
```

### `hiramap.experiment`

- `Experiment` holds a list of registered modules. It is named `E<number>`.
- `ExperimentInfo` is a dataclass with the run title, run number and the start
  and end times.

## What the package does not do

- It does not read or write event files. You supply the events as Python
  objects, and you keep or store the detector snapshots yourself.
- It has no command-line program.