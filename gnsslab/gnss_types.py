"""Core GNSS data types: time tags, identifiers, observations and equations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum, IntEnum
from typing import NamedTuple

import numpy as np

C_MPS = 299792458.0
SEC_PER_DAY = 86400
HALFWEEK = 302400
FULLWEEK = 604800

_MJD_ORDINAL = date(1858, 11, 17).toordinal()


class GnssError(Exception):
    """Base class of all errors raised by this package."""


class FFStreamError(GnssError):
    """A formatted file holds data that cannot be parsed."""


class InvalidRequest(GnssError):
    """A request cannot be served with the data at hand."""


class InvalidSolver(GnssError):
    """A solver failed to produce a solution."""


class TimeSystem(Enum):
    GPS = "GPS"
    BDT = "BDT"


# Modified Julian Date of week zero, and offset of each system from GPS time.
_WEEK_ORIGIN_MJD = {TimeSystem.GPS: 44244, TimeSystem.BDT: 53736}
_OFFSET_FROM_GPS = {TimeSystem.GPS: 0.0, TimeSystem.BDT: -14.0}


class CivilTime(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float


class WeekSecond(NamedTuple):
    week: int
    sow: float


class YDSTime(NamedTuple):
    year: int
    doy: int
    sod: float


@dataclass(frozen=True, order=True)
class Epoch:
    """A time tag held as Modified Julian Day and seconds of day."""

    day: int = 0
    sod: float = 0.0
    time_system: TimeSystem = field(default=TimeSystem.GPS, compare=False)

    def __post_init__(self) -> None:
        day = int(self.day)
        sod = float(self.sod)
        carry = math.floor(sod / SEC_PER_DAY)
        day += carry
        sod -= carry * SEC_PER_DAY
        if sod >= SEC_PER_DAY:
            day += 1
            sod -= SEC_PER_DAY
        object.__setattr__(self, "day", day)
        object.__setattr__(self, "sod", sod)

    @classmethod
    def from_civil(cls, year, month, day, hour=0, minute=0, second=0.0,
                   time_system=TimeSystem.GPS) -> Epoch:
        mjd = date(year, month, day).toordinal() - _MJD_ORDINAL
        return cls(mjd, hour * 3600 + minute * 60 + second, time_system)

    @classmethod
    def from_week_second(cls, week, sow, time_system=TimeSystem.GPS) -> Epoch:
        origin = _WEEK_ORIGIN_MJD[time_system]
        return cls(origin + 7 * int(week), float(sow), time_system)

    def to_civil(self) -> CivilTime:
        d = date.fromordinal(_MJD_ORDINAL + self.day)
        hour = int(self.sod // 3600)
        minute = int((self.sod - hour * 3600) // 60)
        second = self.sod - hour * 3600 - minute * 60
        return CivilTime(d.year, d.month, d.day, hour, minute, second)

    def to_week_second(self) -> WeekSecond:
        days = self.day - _WEEK_ORIGIN_MJD[self.time_system]
        week, dow = divmod(days, 7)
        return WeekSecond(week, dow * SEC_PER_DAY + self.sod)

    def to_yds(self) -> YDSTime:
        d = date.fromordinal(_MJD_ORDINAL + self.day)
        return YDSTime(d.year, d.timetuple().tm_yday, self.sod)

    def convert(self, time_system) -> Epoch:
        """Return the same instant tagged in another time system."""
        if time_system == self.time_system:
            return self
        if time_system not in _OFFSET_FROM_GPS:
            raise InvalidRequest(f"unsupported time system: {time_system}")
        shift = _OFFSET_FROM_GPS[time_system] - _OFFSET_FROM_GPS[self.time_system]
        return Epoch(self.day, self.sod + shift, time_system)

    def __add__(self, seconds):
        if isinstance(seconds, Epoch) or not isinstance(seconds, (int, float)):
            return NotImplemented
        return Epoch(self.day, self.sod + seconds, self.time_system)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, Epoch):
            return (self.day - other.day) * SEC_PER_DAY + (self.sod - other.sod)
        if isinstance(other, (int, float)):
            return self + (-other)
        return NotImplemented

    def __str__(self) -> str:
        c = self.to_civil()
        return (f"{c.year:04d}-{c.month:02d}-{c.day:02d} "
                f"{c.hour:02d}:{c.minute:02d}:{c.second:09.6f} {self.time_system.value}")


BEGINNING_OF_TIME = Epoch(0, 0.0)
END_OF_TIME = Epoch(2973483, 0.0)


@dataclass(frozen=True, order=True)
class SatID:
    """Satellite identifier: system letter and PRN number."""

    system: str = ""
    prn: int = -1

    @classmethod
    def parse(cls, text: str) -> SatID:
        """Parse a three-character id such as ``G05``."""
        if len(text) < 2:
            raise ValueError(f"invalid satellite id: {text!r}")
        try:
            prn = int(text[1:3])
        except ValueError:
            raise ValueError(f"invalid satellite id: {text!r}") from None
        return cls(text[0], prn)

    def __str__(self) -> str:
        return f"{self.system}{self.prn:02d}"


_PARAMETER_LABELS = ("Unknown", "dX", "dY", "dZ", "cdt", "ifb", "iono", "ambiguity")


class Parameter(IntEnum):
    UNKNOWN = 0
    DX = 1
    DY = 2
    DZ = 3
    CDT = 4
    IFB = 5
    IONO = 6
    AMBIGUITY = 7

    @property
    def label(self) -> str:
        return _PARAMETER_LABELS[self.value]

    @classmethod
    def from_label(cls, label: str) -> Parameter:
        """Return the parameter with this label, or UNKNOWN."""
        for member in cls:
            if member.label == label:
                return member
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, order=True)
class ObsID:
    sat_sys: str = ""
    obs_type: str = ""

    def __str__(self) -> str:
        return f"{self.sat_sys}{self.obs_type}"


@dataclass(frozen=True, order=True)
class Variable:
    """An unknown parameter; ordered by station, parameter, observation, satellite."""

    station: str = ""
    para: Parameter = Parameter.UNKNOWN
    obs_id: ObsID = ObsID()
    sat: SatID = SatID()

    def with_station(self, station: str) -> Variable:
        return replace(self, station=station)

    def __str__(self) -> str:
        return (f"Variable{{station={self.station}, sat={self.sat}, "
                f"obsID={self.obs_id.sat_sys} {self.obs_id.obs_type}, "
                f"paraName={self.para}}}")


@dataclass(frozen=True, order=True)
class EquID:
    sat: SatID = SatID()
    obs_type: str = ""

    def __str__(self) -> str:
        return f"EquID{{sat={self.sat}, obsType={self.obs_type}}}"


@dataclass
class EquData:
    """One linearised observation equation."""

    station: str = ""
    prefit: float = 0.0
    var_coeff: dict = field(default_factory=dict)
    weight: float = 0.0


@dataclass
class EquSys:
    """A set of observation equations and all their unknowns."""

    station: str = ""
    equations: dict = field(default_factory=dict)
    var_set: set = field(default_factory=set)


@dataclass
class Xvt:
    """Satellite position, velocity and clock state in ECEF."""

    x: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    clock_bias: float = 0.0
    clock_drift: float = 0.0
    relcorr: float = 0.0
    tgd: dict = field(default_factory=dict)


@dataclass
class RinexHeader:
    station: str = ""
    version: float = 0.0
    antenna_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    obs_types: dict = field(default_factory=dict)


@dataclass
class ObsData:
    """Observations of one station at one epoch, keyed by satellite then type."""

    station: str = ""
    epoch: Epoch = BEGINNING_OF_TIME
    data: dict = field(default_factory=dict)
    antenna_position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __str__(self) -> str:
        lines = [f"Epoch: {self.epoch}"]
        if not self.data:
            lines.append("No satellite data available.")
        else:
            lines.append("Satellite Data:")
            for sat, values in self.data.items():
                lines.append(f"Satellite ID: {sat}")
                lines.extend(f"  Type: {t}, Value: {v:.6f}" for t, v in values.items())
        return "\n".join(lines)


def safe_float(text: str) -> float:
    """Parse a numeric field; blanks give 0.0 and Fortran ``D`` exponents are accepted."""
    stripped = text.strip()
    if not stripped:
        return 0.0
    try:
        return float(stripped.replace("D", "E").replace("d", "e"))
    except ValueError:
        raise FFStreamError(f"invalid number: {text!r}") from None


_FREQUENCIES = {
    ("G", 1): 1575.42e6,
    ("G", 2): 1227.60e6,
    ("G", 5): 1176.45e6,
    ("C", 1): 1575.42e6,
    ("C", 2): 1561.098e6,
    ("C", 5): 1176.45e6,
    ("C", 6): 1268.52e6,
    ("C", 7): 1207.14e6,
    ("C", 8): 1191.795e6,
}


def get_frequency(system: str, obs_type: str) -> float:
    """Carrier frequency in Hz of an observation type such as ``L1`` or ``C2W``."""
    if len(obs_type) < 2 or not obs_type[1].isdigit():
        raise InvalidRequest(f"no frequency for observation type {obs_type!r}")
    try:
        return _FREQUENCIES[(system, int(obs_type[1]))]
    except KeyError:
        raise InvalidRequest(f"no frequency for {system} {obs_type}") from None


def get_wavelength(system: str, band: int) -> float:
    """Carrier wavelength in metres, or 0.0 for an unknown band."""
    freq = _FREQUENCIES.get((system, band))
    return C_MPS / freq if freq else 0.0