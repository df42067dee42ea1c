"""Header of RINEX 3 navigation files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TextIO

from gnsslab.gnss_types import FFStreamError, safe_float

LABEL_VERSION = "RINEX VERSION / TYPE"
LABEL_RUN_BY = "PGM / RUN BY / DATE"
LABEL_COMMENT = "COMMENT"
LABEL_IONO_CORR = "IONOSPHERIC CORR"
LABEL_TIME_SYS_CORR = "TIME SYSTEM CORR"
LABEL_LEAP_SECONDS = "LEAP SECONDS"
LABEL_END_OF_HEADER = "END OF HEADER"


@dataclass
class TimeSysCorr:
    """Coefficients relating one time system to another."""

    a0: float = 0.0
    a1: float = 0.0
    ref_sow: int = 0
    ref_week: int = 0
    geo_provider: str = " "
    geo_utc_id: int = 0


@dataclass
class NavHeader:
    version: float = 0.0
    file_type: str = ""
    file_sys: str = ""
    program: str = ""
    agency: str = ""
    date: str = ""
    comments: list = field(default_factory=list)
    iono_corr: dict = field(default_factory=dict)
    time_sys_corr: dict = field(default_factory=dict)
    leap_seconds: int = 0
    leap_delta: int = 0
    leap_week: int = 0
    leap_day: int = 0


def _safe_int(text: str) -> int:
    stripped = text.strip()
    if not stripped:
        return 0
    try:
        return int(stripped)
    except ValueError:
        raise FFStreamError(f"invalid integer: {text!r}") from None


def parse_nav_header(stream: TextIO) -> NavHeader:
    """Read header lines up to END OF HEADER, leaving the stream at the first record."""
    header = NavHeader()
    while True:
        raw = stream.readline()
        if not raw:
            raise FFStreamError("end of file reached before END OF HEADER")
        line = raw.rstrip()
        if not line:
            continue
        if len(line) < 60:
            raise FFStreamError(
                "Invalid line length, the file may have Windows line endings: "
                f"{line!r}"
            )

        label = line[60:80].rstrip()
        if label == LABEL_VERSION:
            header.version = safe_float(line[0:20])
            if header.version < 3.0:
                raise FFStreamError(
                    "navigation files with version less than 3.0 are not supported"
                )
            file_type = line[20:40].strip()
            if not file_type or file_type[0] not in "Nn":
                raise FFStreamError(f"File type is not NAVIGATION: {file_type}")
            header.file_sys = line[40:60].strip()
            header.file_type = "NAVIGATION"
        elif label == LABEL_RUN_BY:
            header.program = line[0:20].strip()
            header.agency = line[20:40].strip()
            header.date = line[40:60].strip()
        elif label == LABEL_COMMENT:
            header.comments.append(line[0:60].strip())
        elif label == LABEL_IONO_CORR:
            kind = line[0:4].strip()
            header.iono_corr[kind] = [
                safe_float(line[5 + 12 * i:17 + 12 * i]) for i in range(4)
            ]
        elif label == LABEL_TIME_SYS_CORR:
            kind = line[0:4].strip()
            header.time_sys_corr[kind] = TimeSysCorr(
                a0=safe_float(line[5:22]),
                a1=safe_float(line[22:38]),
                ref_sow=_safe_int(line[38:45]),
                ref_week=_safe_int(line[45:50]),
            )
        elif label == LABEL_LEAP_SECONDS:
            header.leap_seconds = _safe_int(line[0:6])
            header.leap_delta = _safe_int(line[6:12])
            header.leap_week = _safe_int(line[12:18])
            header.leap_day = _safe_int(line[18:24])
        elif label == LABEL_END_OF_HEADER:
            return header