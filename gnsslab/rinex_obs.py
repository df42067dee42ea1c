"""Reader for RINEX 3.04 observation files."""

from __future__ import annotations

from typing import Iterator, TextIO

from gnsslab.gnss_types import (
    BEGINNING_OF_TIME,
    Epoch,
    FFStreamError,
    GnssError,
    ObsData,
    RinexHeader,
    SatID,
    TimeSystem,
    get_wavelength,
    safe_float,
)

_MAX_OBS_PER_LINE = 13
_SUPPORTED_VERSION = 3.04


class EndOfFile(GnssError):
    """The observation stream has no more records."""


def _read_line(stream: TextIO) -> str | None:
    raw = stream.readline()
    if not raw:
        return None
    return raw.rstrip("\r\n")


def _int_field(text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise FFStreamError(f"invalid {what}: {text!r}") from None


def parse_time(line: str) -> Epoch:
    """Parse the time tag of a RINEX 3 epoch line."""
    if len(line) < 31:
        raise FFStreamError("Invalid time format")
    if any(line[i] != " " for i in (1, 6, 9, 12, 15, 18, 29, 30)):
        raise FFStreamError("Invalid time format")
    if line[2:29].strip() == "":
        return BEGINNING_OF_TIME

    year = _int_field(line[2:6], "year")
    month = _int_field(line[7:9], "month")
    day = _int_field(line[10:12], "day")
    hour = _int_field(line[13:15], "hour")
    minute = _int_field(line[16:18], "minute")
    second = safe_float(line[19:30])

    # Epochs of the form 'hh 59 60.0' occur in real files.
    overflow = 0.0
    if second >= 60.0:
        overflow, second = second, 0.0

    try:
        epoch = Epoch.from_civil(year, month, day, hour, minute, second, TimeSystem.GPS)
    except ValueError as exc:
        raise FFStreamError(f"Invalid time: {exc}") from None
    return epoch + overflow if overflow else epoch


def parse_header(stream: TextIO) -> RinexHeader:
    """Read header lines up to END OF HEADER."""
    header = RinexHeader()
    system = ""
    count = 0
    while True:
        line = _read_line(stream)
        if line is None:
            raise FFStreamError("end of file reached before END OF HEADER")
        label = line[60:80].strip() if len(line) >= 80 else ""

        if label == "END OF HEADER":
            return header
        if label == "MARKER NAME":
            header.station = line[0:60].replace(" ", "_")
        elif label == "RINEX VERSION / TYPE":
            version = safe_float(line[0:20])
            if version != _SUPPORTED_VERSION:
                raise FFStreamError("only RINEX 3.04 observation files are supported")
            header.version = version
        elif label == "APPROX POSITION XYZ":
            header.antenna_position[:] = [
                safe_float(line[0:14]),
                safe_float(line[14:28]),
                safe_float(line[28:42]),
            ]
        elif label == "SYS / # / OBS TYPES":
            code = line[0:1].strip()
            if code:
                count = _int_field(line[3:6], "number of observation types")
                system = code
            types = header.obs_types.setdefault(system, [])
            for i in range(_MAX_OBS_PER_LINE):
                if len(types) >= count:
                    break
                types.append(line[4 * i + 7:4 * i + 10])


class RinexObsReader:
    """Reads epochs of GPS and BDS observations from a RINEX 3.04 stream.

    Carrier phases are converted from cycles to metres; zero or blank
    values are dropped.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self.header = parse_header(stream)

    def _next_line(self) -> str:
        line = _read_line(self._stream)
        if line is None:
            raise EndOfFile("EOF encountered!")
        return line

    def read_epoch(self) -> ObsData:
        line = self._next_line()
        if len(line) < 2 or line[0] != ">" or line[1] != " ":
            raise FFStreamError(f"Bad epoch line: >{line}<")

        flag = _int_field(line[31:32], "epoch flag")
        if not 0 <= flag <= 6:
            raise FFStreamError(f"Invalid epoch flag: {flag}")

        epoch = parse_time(line)
        num_sats = _int_field(line[32:35], "number of satellites")

        data: dict = {}
        if flag in (0, 1, 6):
            for _ in range(num_sats):
                sat_line = self._next_line()
                sat, values = self._parse_satellite(sat_line)
                if sat is not None:
                    data[sat] = values
        else:
            # Event records: skip the special lines that follow.
            for _ in range(num_sats):
                self._next_line()

        return ObsData(
            station=self.header.station,
            epoch=epoch,
            data=data,
            antenna_position=self.header.antenna_position.copy(),
        )

    def _parse_satellite(self, line: str):
        try:
            sat = SatID.parse(line[0:3])
        except ValueError as exc:
            raise FFStreamError(str(exc)) from None
        if sat.system not in ("G", "C"):
            return None, None

        try:
            types = self.header.obs_types[sat.system]
        except KeyError:
            raise FFStreamError(f"no observation types for system {sat.system}") from None

        line = line.ljust(3 + 16 * len(types))
        values = {}
        for i, obs_type in enumerate(types):
            pos = 3 + 16 * i
            value = safe_float(line[pos:pos + 14])
            if obs_type.startswith("L"):
                band = 1 if obs_type[1] == "A" else _int_field(obs_type[1:2], "band")
                wavelength = get_wavelength(sat.system, band)
                if wavelength == 0.0:
                    continue
                value *= wavelength
            if value == 0.0:
                continue
            values[obs_type] = value
        return sat, values

    def __iter__(self) -> Iterator[ObsData]:
        while True:
            try:
                yield self.read_epoch()
            except EndOfFile:
                return