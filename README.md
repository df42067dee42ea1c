# gnsslab

A small library for processing GPS and BeiDou data:

- reading RINEX 3.04 observation files epoch by epoch (`gnsslab.rinex_obs`)
- reading RINEX 3 navigation files (`gnsslab.nav_header`, `gnsslab.nav_records`,
  `gnsslab.rinex_nav`)
- satellite position, velocity and clock from broadcast ephemerides
  (`gnsslab.gps_ephemeris.GPSEphemeris`, `gnsslab.bds_ephemeris.BDSEphemeris`)
- selecting and renaming observation types (`gnsslab.obs_select`)
- Melbourne–Wübbena cycle-slip detection (`gnsslab.cycle_slip.MWDetector`)
- between-station and between-satellite differencing of observation equations
  (`gnsslab.differencing`)
- a Kalman filter with optional augmented measurements (`gnsslab.kalman.KalmanFilter`)

Time tags, satellite identifiers, unknowns and equations are defined in
`gnsslab.gnss_types` (`Epoch`, `SatID`, `Variable`, `EquID`, `EquData`, `EquSys`, ...).
Errors raised by the package derive from `gnsslab.gnss_types.GnssError`.

## Installation

```
pip install .
```

The only runtime dependency is numpy.

## Reading observations

```python
from gnsslab.rinex_obs import RinexObsReader
from gnsslab.obs_select import choose_obs, convert_obs_type

with open("rover.rnx") as stream:
    reader = RinexObsReader(stream)
    for obs in reader:
        obs = choose_obs(obs, {"G": {"C1C", "C2W", "L1C", "L2W"}})
        obs = convert_obs_type(obs)          # L1C -> L1, C2W -> C2, ...
        print(obs.epoch, len(obs.data))
```

Only RINEX version 3.04 headers are accepted. Carrier-phase values are converted
from cycles to metres while reading, zero or blank values are dropped, and only
GPS (`G`) and BeiDou (`C`) satellites are kept. `choose_obs` and
`convert_obs_type` return new `ObsData` objects; `obs.data` maps each `SatID`
to a dictionary of observation type to value.

## Satellite positions from broadcast ephemerides

```python
from gnsslab.rinex_nav import RinexNavStore
from gnsslab.gnss_types import SatID, Epoch, TimeSystem

store = RinexNavStore("G")          # "G" for GPS, "C" for BeiDou
store.load_file("brdc.rnx")
epoch = Epoch.from_civil(2024, 1, 1, 0, 0, 0.0, TimeSystem.GPS)
xvt = store.get_xvt(SatID.parse("G05"), epoch)
print(xvt.x, xvt.v, xvt.clock_bias, xvt.relcorr)
```

A store loads the records of one system only. The ephemeris whose reference
time is closest to the requested epoch is used: within two hours for GPS and
for BeiDou PRN 6 and above, within four hours for BeiDou PRN 1 to 5. When none
qualifies, `InvalidRequest` is raised.

## Cycle-slip detection

```python
from gnsslab.cycle_slip import MWDetector

detector = MWDetector(120.0, 2.0)
result = detector.detect(obs)   # obs after convert_obs_type
print(result.cs_flags)          # ambiguity Variable -> 1 on a slip, else 0
```

The detector keeps per-satellite state between calls, so use one detector per
station and feed it epochs in time order. Only GPS satellites with L1, L2, C1
and C2 are checked; `result.obs_data` holds just those satellites.

## Differencing

`difference_station(rover, base, cs_flag_rover, cs_flag_base)` forms
single differences and merges cycle-slip flags; `find_datum_sat` picks the
satellite of highest elevation; `difference_sat` forms double differences
against it; `ambiguity_datum` adds heavily weighted equations for the datum
satellite's ambiguities; `format_solution` formats one line of a solution file.

## Kalman filter

```python
import numpy as np
from gnsslab.kalman import KalmanFilter

kf = KalmanFilter(np.zeros(3), np.eye(3) * 100.0)
kf.compute(np.eye(3), np.eye(3) * 0.01, measurements, h, w)
print(kf.xhat, kf.P, kf.postfit_residual)
```

## What the package does not do

There are no command-line programs. The package builds differenced equation
systems and filters them, but has no single-point positioning solver and no
integer ambiguity resolution; fixing ambiguities is left to the caller, whose
fixed values `ambiguity_datum` can take in.

## Running the tests

```
pip install .[test]
pytest
```