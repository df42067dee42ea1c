"""Cycle-slip detection with the Melbourne-Wubbena combination."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from gnsslab.gnss_types import (
    BEGINNING_OF_TIME,
    C_MPS,
    Epoch,
    ObsData,
    ObsID,
    Parameter,
    SatID,
    Variable,
    get_frequency,
)

# Observation types used to form the combination, per supported system.
_MW_TYPES = {
    "G": ("L1", "L2", "C1", "C2"),
}


def wavelength_of_mw(system: str, l1_type: str, l2_type: str) -> float:
    """Wide-lane wavelength in metres of the MW combination."""
    f1 = get_frequency(system, l1_type)
    f2 = get_frequency(system, l2_type)
    return C_MPS / (f1 - f2)


def var_of_mw(system: str, l1_type: str, l2_type: str) -> float:
    """Initial variance assigned to the MW combination after a reset."""
    return math.sqrt(2.0) / 2 * 0.3


@dataclass
class _MWState:
    former_epoch: Epoch = BEGINNING_OF_TIME
    window_size: int = 0
    mean: float = 0.0
    var: float = 0.0


@dataclass
class MWResult:
    """Outcome of cycle-slip detection for one epoch.

    ``obs_data`` holds only satellites whose MW combination could be formed.
    ``cs_flags`` maps each ambiguity variable to 1 on a slip, else 0.
    ``cs_values`` is the flag scaled by the MW value, for plotting.
    """

    obs_data: ObsData
    cs_flags: dict = field(default_factory=dict)
    mw: dict = field(default_factory=dict)
    mean_mw: dict = field(default_factory=dict)
    cs_values: dict = field(default_factory=dict)


class MWDetector:
    """Tracks a running mean and variance of MW per satellite across epochs."""

    def __init__(self, delta_t_max: float = 120.0, min_cycles: float = 2.0):
        self.delta_t_max = delta_t_max
        self.min_cycles = min_cycles
        self._states: dict[SatID, _MWState] = {}
        self.mw_history: dict[SatID, dict[Epoch, float]] = {}
        self.mean_history: dict[SatID, dict[Epoch, float]] = {}
        self.cs_history: dict[SatID, dict[Epoch, float]] = {}

    def detect(self, obs_data: ObsData) -> MWResult:
        epoch = obs_data.epoch
        kept = {}
        result = MWResult(obs_data=obs_data)

        for sat, values in obs_data.data.items():
            types = _MW_TYPES.get(sat.system)
            if types is None:
                continue
            l1_type, l2_type, c1_type, c2_type = types
            try:
                l1, l2 = values[l1_type], values[l2_type]
                c1, c2 = values[c1_type], values[c2_type]
            except KeyError:
                continue

            f1 = get_frequency(sat.system, l1_type)
            f2 = get_frequency(sat.system, l2_type)
            mw = (f1 * l1 - f2 * l2) / (f1 - f2) - (f1 * c1 + f2 * c2) / (f1 + f2)
            wavelength = wavelength_of_mw(sat.system, l1_type, l2_type)
            variance = var_of_mw(sat.system, l1_type, l2_type)

            state = self._states.setdefault(sat, _MWState())
            delta_t = epoch - state.former_epoch
            state.former_epoch = epoch
            bias = abs(mw - state.mean)
            state.window_size += 1
            sig_limit = 4 * math.sqrt(state.var)

            if (delta_t > self.delta_t_max
                    or bias > abs(self.min_cycles * wavelength)
                    or bias > sig_limit):
                state.mean = mw
                state.var = variance
                state.window_size = 1
                flag = 1
            else:
                diff = mw - state.mean
                size = float(state.window_size)
                state.mean += diff / size
                state.var += (diff * diff - state.var) / size
                flag = 0

            kept[sat] = values
            result.mw[sat] = mw
            result.mean_mw[sat] = state.mean
            result.cs_values[sat] = flag * mw
            self.mw_history.setdefault(sat, {})[epoch] = mw
            self.mean_history.setdefault(sat, {})[epoch] = state.mean
            self.cs_history.setdefault(sat, {})[epoch] = flag * mw

            for band in (l1_type, l2_type):
                var = Variable(
                    station=obs_data.station,
                    para=Parameter.AMBIGUITY,
                    obs_id=ObsID(sat.system, band),
                    sat=sat,
                )
                result.cs_flags[var] = flag

        result.obs_data = replace(obs_data, data=kept)
        return result