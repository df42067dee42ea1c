"""Store of GPS and BDS broadcast ephemerides read from RINEX 3 navigation files."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

from gnsslab.bds_ephemeris import BDSEphemeris
from gnsslab.gnss_types import Epoch, InvalidRequest, SatID, TimeSystem, Xvt
from gnsslab.gps_ephemeris import GPSEphemeris
from gnsslab.nav_header import NavHeader, parse_nav_header
from gnsslab.nav_records import parse_bds_record, parse_gps_record

_SUPPORTED_SYSTEMS = ("G", "C")

# Largest distance in seconds between a request and an ephemeris reference time.
_GPS_VALIDITY = 7201.0
_BDS_GEO_VALIDITY = 14400.0
_BDS_VALIDITY = 7200.0
_BDS_MAX_GEO_PRN = 5


class RinexNavStore:
    """Broadcast ephemerides of one satellite system, keyed by satellite and TOE.

    Only records of the selected system (``"G"`` for GPS, ``"C"`` for BDS)
    are loaded; records of other systems in the file are skipped.
    """

    def __init__(self, system: str = "G"):
        if system not in _SUPPORTED_SYSTEMS:
            raise ValueError(f"unsupported satellite system: {system!r}")
        self.system = system
        self.path = ""
        self.header = NavHeader()
        self.sat_table: list[SatID] = []
        self.gps_eph_data: dict[SatID, dict[Epoch, GPSEphemeris]] = {}
        self.bds_eph_data: dict[SatID, dict[Epoch, BDSEphemeris]] = {}

    def load_file(self, path) -> None:
        """Read a navigation file from disk."""
        if not str(path):
            raise ValueError("the navigation file path is empty")
        self.path = str(path)
        with Path(path).open("r", encoding="ascii", errors="replace") as stream:
            self.read(stream)

    def read(self, stream: TextIO) -> None:
        """Read the header and all records of the selected system from a stream."""
        self.header = parse_nav_header(stream)
        lines = iter(stream.readline, "")
        for raw in lines:
            line = raw.rstrip("\r\n")
            if not line:
                continue
            code = line[0]
            if code != self.system:
                continue
            if code == "G":
                eph = parse_gps_record(line, lines)
                sat = SatID("G", eph.prn)
                self.gps_eph_data.setdefault(sat, {})[eph.ct_toe] = eph
            else:
                eph = parse_bds_record(line, lines)
                sat = SatID("C", eph.prn)
                self.bds_eph_data.setdefault(sat, {})[eph.ct_toe] = eph
            if sat not in self.sat_table:
                self.sat_table.append(sat)

    def get_xvt(self, sat: SatID, epoch: Epoch) -> Xvt:
        """Satellite position, velocity and clock state at ``epoch``."""
        if sat.system == "G" and self.system == "G":
            real_epoch = epoch.convert(TimeSystem.GPS)
            return self.find_gps_eph(sat, real_epoch).xvt(real_epoch)
        if sat.system == "C" and self.system == "C":
            real_epoch = epoch.convert(TimeSystem.BDT)
            return self.find_bds_eph(sat, real_epoch).xvt(real_epoch)
        raise InvalidRequest("RinexNavStore: don't support the input satellite system!")

    @staticmethod
    def _closest(records: dict, epoch: Epoch, window: float, sat: SatID):
        best = None
        best_diff = None
        for toe, eph in records.items():
            diff = abs(epoch - toe)
            if diff <= window and (best_diff is None or diff < best_diff):
                best, best_diff = eph, diff
        if best is None:
            raise InvalidRequest(f"no valid ephemeris for {sat} at {epoch}")
        return best

    def find_gps_eph(self, sat: SatID, epoch: Epoch) -> GPSEphemeris:
        """The GPS ephemeris whose TOE is closest to ``epoch``, within two hours."""
        records = self.gps_eph_data.get(sat)
        if not records:
            raise InvalidRequest(f"no ephemeris for {sat}")
        return self._closest(records, epoch.convert(TimeSystem.GPS), _GPS_VALIDITY, sat)

    def find_bds_eph(self, sat: SatID, epoch: Epoch) -> BDSEphemeris:
        """The BDS ephemeris whose TOE is closest to ``epoch``.

        GEO satellites (PRN 1 to 5) accept four hours, the others two.
        """
        records = self.bds_eph_data.get(sat)
        if not records:
            raise InvalidRequest(f"no ephemeris for {sat}")
        window = _BDS_GEO_VALIDITY if sat.prn <= _BDS_MAX_GEO_PRN else _BDS_VALIDITY
        return self._closest(records, epoch.convert(TimeSystem.BDT), window, sat)