"""GPS legacy broadcast ephemeris and the satellite state it yields."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from gnsslab.gnss_types import (
    BEGINNING_OF_TIME,
    END_OF_TIME,
    HALFWEEK,
    FULLWEEK,
    CivilTime,
    Epoch,
    TimeSystem,
    Xvt,
)

GM_GPS = 3.986005e14
OMEGA_EARTH_GPS = 7.2921151467e-5
REL_CONST = -4.442807633e-10

_KEPLER_TOLERANCE = 1.0e-11
_KEPLER_MAX_ITERATIONS = 20


def solve_kepler(mean_anomaly: float, ecc: float) -> float:
    """Eccentric anomaly for a mean anomaly, by Newton iteration."""
    mk = math.fmod(mean_anomaly, 2.0 * math.pi)
    ek = mk + ecc * math.sin(mk)
    for _ in range(_KEPLER_MAX_ITERATIONS):
        delta = (mk - (ek - ecc * math.sin(ek))) / (1.0 - ecc * math.cos(ek))
        ek += delta
        if abs(delta) <= _KEPLER_TOLERANCE:
            break
    return ek


def _wrap_week(tk: float) -> float:
    if tk > HALFWEEK:
        tk -= FULLWEEK
    if tk < -HALFWEEK:
        tk += FULLWEEK
    return tk


@dataclass
class GPSEphemeris:
    """One GPS broadcast ephemeris record (angles in radians)."""

    prn: int = 0
    civil_toc: CivilTime | None = None
    toc: float = 0.0
    af0: float = 0.0
    af1: float = 0.0
    af2: float = 0.0
    iode: float = 0.0
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    ecc: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0
    cic: float = 0.0
    omega0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0
    idot: float = 0.0
    l2_codes: float = 0.0
    gps_week: float = 0.0
    l2p_flag: float = 0.0
    accuracy: float = 0.0
    sv_health: float = 0.0
    tgd: float = 0.0
    iodc: float = 0.0
    how_time: int = 0
    fit_interval: float = 0.0
    ct_toc: Epoch = BEGINNING_OF_TIME
    ct_toe: Epoch = BEGINNING_OF_TIME
    transmit_time: Epoch = BEGINNING_OF_TIME
    begin_valid: Epoch = field(default_factory=lambda: END_OF_TIME.convert(TimeSystem.GPS))
    end_valid: Epoch = field(default_factory=lambda: BEGINNING_OF_TIME.convert(TimeSystem.GPS))

    def clock_bias(self, t: Epoch) -> float:
        """Satellite clock bias in seconds."""
        elapsed = t - self.ct_toc
        return self.af0 + elapsed * (self.af1 + elapsed * self.af2)

    def clock_drift(self, t: Epoch) -> float:
        """Satellite clock drift in seconds per second."""
        return self.af1 + (t - self.ct_toc) * self.af2

    def _eccentric_anomaly(self, t: Epoch) -> tuple[float, float, float, float]:
        a = self.sqrt_a * self.sqrt_a
        n = math.sqrt(GM_GPS / (a * a * a)) + self.delta_n
        tk = _wrap_week(t - self.ct_toe)
        ek = solve_kepler(self.m0 + n * tk, self.ecc)
        return a, n, tk, ek

    def relativity(self, t: Epoch) -> float:
        """Relativistic clock correction in seconds."""
        a, _, _, ek = self._eccentric_anomaly(t)
        return REL_CONST * self.ecc * math.sqrt(a) * math.sin(ek)

    def ura(self, t: Epoch) -> float:
        """User range accuracy of the broadcast, in metres."""
        return self.accuracy

    def xvt(self, t: Epoch) -> Xvt:
        """ECEF position, velocity and clock state at ``t``."""
        a, n, tk, ek = self._eccentric_anomaly(t)
        ecc = self.ecc

        q = math.sqrt(1.0 - ecc * ecc)
        sin_ek, cos_ek = math.sin(ek), math.cos(ek)
        vk = math.atan2(q * sin_ek, cos_ek - ecc)

        phi = vk + self.omega
        cos2, sin2 = math.cos(2.0 * phi), math.sin(2.0 * phi)
        uk = phi + cos2 * self.cuc + sin2 * self.cus
        rk = a * (1.0 - ecc * cos_ek) + cos2 * self.crc + sin2 * self.crs
        ik = self.i0 + cos2 * self.cic + sin2 * self.cis + self.idot * tk

        xip, yip = rk * math.cos(uk), rk * math.sin(uk)
        omega_k = (self.omega0 + (self.omega_dot - OMEGA_EARTH_GPS) * tk
                   - OMEGA_EARTH_GPS * self.toe)
        sin_om, cos_om = math.sin(omega_k), math.cos(omega_k)
        sin_i, cos_i = math.sin(ik), math.cos(ik)

        position = np.array([
            xip * cos_om - yip * cos_i * sin_om,
            xip * sin_om + yip * cos_i * cos_om,
            yip * sin_i,
        ])

        dek = n * a / rk
        dlk = self.sqrt_a * q * math.sqrt(GM_GPS) / (rk * rk)
        div = self.idot - 2.0 * dlk * (self.cic * sin2 - self.cis * cos2)
        domk = self.omega_dot - OMEGA_EARTH_GPS
        duv = dlk * (1.0 + 2.0 * (self.cus * cos2 - self.cuc * sin2))
        drv = a * ecc * dek * sin_ek - 2.0 * dlk * (self.crc * sin2 - self.crs * cos2)
        dxp = drv * math.cos(uk) - rk * math.sin(uk) * duv
        dyp = drv * math.sin(uk) + rk * math.cos(uk) * duv

        velocity = np.array([
            dxp * cos_om - xip * sin_om * domk - dyp * cos_i * sin_om
            + yip * (sin_i * sin_om * div - cos_i * cos_om * domk),
            dxp * sin_om + xip * cos_om * domk + dyp * cos_i * cos_om
            - yip * (sin_i * cos_om * div + cos_i * sin_om * domk),
            dyp * sin_i + yip * cos_i * div,
        ])

        return Xvt(
            x=position,
            v=velocity,
            clock_bias=self.clock_bias(t),
            clock_drift=self.clock_drift(t),
            relcorr=self.relativity(t),
        )

    def is_valid(self, t: Epoch) -> bool:
        """Whether ``t`` lies within the validity interval."""
        return not (t < self.begin_valid or t > self.end_valid)