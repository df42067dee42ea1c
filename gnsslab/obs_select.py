"""Selection and renaming of observation types."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from gnsslab.gnss_types import ObsData


def choose_obs(obs_data: ObsData, sys_types: Mapping[str, Iterable[str]]) -> ObsData:
    """Keep only the observation types allowed for each satellite system.

    Satellites whose system is not in ``sys_types``, or that have no allowed
    observation left, are dropped.
    """
    allowed = {system: set(types) for system, types in sys_types.items()}
    filtered = {}
    for sat, values in obs_data.data.items():
        types = allowed.get(sat.system)
        if types is None:
            continue
        kept = {t: v for t, v in values.items() if t in types}
        if kept:
            filtered[sat] = kept
    return replace(obs_data, data=filtered)


def convert_obs_type(obs_data: ObsData) -> ObsData:
    """Shorten three-character types to their first two, e.g. ``L1C`` to ``L1``.

    When several types collapse onto the same name, the one that sorts last wins.
    """
    converted = {}
    for sat, values in obs_data.data.items():
        converted[sat] = {t[:2]: values[t] for t in sorted(values)}
    return replace(obs_data, data=converted)