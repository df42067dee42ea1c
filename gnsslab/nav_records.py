"""Parsing of GPS and BDS data records of RINEX 3 navigation files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from gnsslab.bds_ephemeris import BDSEphemeris
from gnsslab.gnss_types import (
    FULLWEEK,
    HALFWEEK,
    SEC_PER_DAY,
    CivilTime,
    Epoch,
    FFStreamError,
    SatID,
    TimeSystem,
    safe_float,
)
from gnsslab.gps_ephemeris import GPSEphemeris

_ORBIT_LINES = 7
_FIELD = 19


def _safe_int(text: str) -> int:
    stripped = text.strip()
    if not stripped:
        return 0
    try:
        return int(stripped)
    except ValueError:
        raise FFStreamError(f"invalid integer: {text!r}") from None


def _fields(line: str) -> list[float]:
    return [safe_float(line[4 + _FIELD * i:4 + _FIELD * (i + 1)]) for i in range(4)]


def _orbit_lines(lines: Iterable[str]) -> list[list[float]]:
    it: Iterator[str] = iter(lines)
    rows = []
    for _ in range(_ORBIT_LINES):
        line = next(it, None)
        if line is None:
            raise FFStreamError("navigation record ends before its last orbit line")
        rows.append(_fields(line.rstrip("\r\n")))
    return rows


def _epoch_line(first_line: str, time_system: TimeSystem):
    line = first_line.rstrip("\r\n")
    try:
        sat = SatID.parse(line[0:3])
    except ValueError as exc:
        raise FFStreamError(str(exc)) from None

    year = _safe_int(line[4:8])
    month = _safe_int(line[9:11])
    day = _safe_int(line[12:14])
    hour = _safe_int(line[15:17])
    minute = _safe_int(line[18:20])
    second = safe_float(line[21:23])

    # Epochs of the form 'hh 59 60.0' occur in real files.
    overflow = 0
    if second >= 60.0:
        overflow, second = int(second), 0.0

    civil = CivilTime(year, month, day, hour, minute, second)
    try:
        epoch = Epoch.from_civil(year, month, day, hour, minute, second, time_system)
    except ValueError as exc:
        raise FFStreamError(f"Invalid time: {exc}") from None
    if overflow:
        epoch = epoch + overflow

    clock = [safe_float(line[23 + _FIELD * i:23 + _FIELD * (i + 1)]) for i in range(3)]
    return sat, civil, epoch, clock


def _adjust_weeks(how_time: int, week: float, toe: float, toc: float,
                  time_system: TimeSystem) -> tuple[int, float, Epoch]:
    """Normalise HOW and week, and build the clock reference epoch."""
    while how_time < 0:
        how_time += FULLWEEK
        week -= 1

    # In files the week is that of TOE; it is kept as the week of HOW.
    if how_time - toe > HALFWEEK:
        week -= 1
    elif how_time - toe < -HALFWEEK:
        week += 1

    adj_how = how_time
    l_toc = int(toc)
    if how_time % SEC_PER_DAY == 0 and l_toc % SEC_PER_DAY == 0 and how_time == l_toc:
        adj_how = how_time - 30
        if adj_how < 0:
            adj_how += FULLWEEK

    dt = toc - adj_how
    toc_week = int(week)
    if dt < -HALFWEEK:
        toc_week += 1
    elif dt > HALFWEEK:
        toc_week -= 1
    ct_toc = Epoch.from_week_second(toc_week, toc, time_system)
    return how_time, week, ct_toc


def parse_gps_record(first_line: str, lines: Iterable[str]) -> GPSEphemeris:
    """Parse a GPS record from its epoch line and the seven orbit lines that follow."""
    sat, civil, ct_toe, clock = _epoch_line(first_line, TimeSystem.GPS)
    orbits = _orbit_lines(lines)
    eph = GPSEphemeris(
        prn=sat.prn,
        civil_toc=civil,
        toc=ct_toe.to_week_second().sow,
        af0=clock[0], af1=clock[1], af2=clock[2],
        ct_toe=ct_toe,
    )
    eph.iode, eph.crs, eph.delta_n, eph.m0 = orbits[0]
    eph.cuc, eph.ecc, eph.cus, eph.sqrt_a = orbits[1]
    eph.toe, eph.cic, eph.omega0, eph.cis = orbits[2]
    eph.i0, eph.crc, eph.omega, eph.omega_dot = orbits[3]
    eph.idot, eph.l2_codes, eph.gps_week, eph.l2p_flag = orbits[4]
    eph.accuracy, eph.sv_health, eph.tgd, eph.iodc = orbits[5]
    how, eph.fit_interval = int(orbits[6][0]), orbits[6][1]

    eph.how_time, eph.gps_week, eph.ct_toc = _adjust_weeks(
        how, eph.gps_week, eph.toe, eph.toc, TimeSystem.GPS
    )
    return eph


def parse_bds_record(first_line: str, lines: Iterable[str]) -> BDSEphemeris:
    """Parse a BDS record from its epoch line and the seven orbit lines that follow."""
    sat, civil, ct_toe, clock = _epoch_line(first_line, TimeSystem.BDT)
    orbits = _orbit_lines(lines)
    eph = BDSEphemeris(
        prn=sat.prn,
        civil_toc=civil,
        toc=ct_toe.to_week_second().sow,
        af0=clock[0], af1=clock[1], af2=clock[2],
        ct_toe=ct_toe,
    )
    eph.aode, eph.crs, eph.delta_n, eph.m0 = orbits[0]
    eph.cuc, eph.ecc, eph.cus, eph.sqrt_a = orbits[1]
    eph.toe, eph.cic, eph.omega0, eph.cis = orbits[2]
    eph.i0, eph.crc, eph.omega, eph.omega_dot = orbits[3]
    eph.idot, eph.spare1, eph.bds_week, eph.spare2 = orbits[4]
    eph.accuracy, eph.sv_health, eph.tgd1, eph.tgd2 = orbits[5]
    how, eph.aodc = int(orbits[6][0]), orbits[6][1]

    eph.how_time, eph.bds_week, eph.ct_toc = _adjust_weeks(
        how, eph.bds_week, eph.toe, eph.toc, TimeSystem.BDT
    )
    return eph