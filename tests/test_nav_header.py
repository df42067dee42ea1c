import io

import pytest

from gnsslab.gnss_types import FFStreamError
from gnsslab.nav_header import TimeSysCorr, parse_nav_header


def _line(content: str, label: str) -> str:
    return content.ljust(60) + label + "\n"


def _version_line(version="3.04", file_type="N: GNSS NAV DATA", sys="M: MIXED"):
    return _line(version.rjust(9) + " " * 11 + file_type.ljust(20) + sys, "RINEX VERSION / TYPE")


def _sample_header() -> str:
    iono = "GPSA " + "".join(f"{v:12.4E}" for v in (1.1176e-08, 7.4506e-09, -5.9605e-08, -5.9605e-08))
    iono = iono.replace("1.1176E-08", "1.1176D-08")
    tcorr = "GPUT " + f"{-9.3132257462E-10:17.10E}" + f"{8.881784197E-16:16.9E}" + f"{233472:7d}" + f"{2185:5d}"
    return "".join([
        _version_line(),
        _line("convbin".ljust(20) + "agency".ljust(20) + "20211226 000000 UTC", "PGM / RUN BY / DATE"),
        _line("first comment", "COMMENT"),
        "   \n",
        _line("second comment", "COMMENT"),
        _line(iono, "IONOSPHERIC CORR"),
        _line(tcorr, "TIME SYSTEM CORR"),
        _line(f"{18:6d}{18:6d}{2185:6d}{7:6d}", "LEAP SECONDS"),
        _line("", "END OF HEADER"),
        "G01 2021 12 26 00 00 00\n",
    ])


def test_version_and_type():
    header = parse_nav_header(io.StringIO(_sample_header()))
    assert header.version == pytest.approx(3.04)
    assert header.file_type == "NAVIGATION"
    assert header.file_sys == "M: MIXED"


def test_run_by_and_comments():
    header = parse_nav_header(io.StringIO(_sample_header()))
    assert header.program == "convbin"
    assert header.agency == "agency"
    assert header.date == "20211226 000000 UTC"
    assert header.comments == ["first comment", "second comment"]


def test_iono_coefficients_accept_fortran_exponent():
    header = parse_nav_header(io.StringIO(_sample_header()))
    coeffs = header.iono_corr["GPSA"]
    assert coeffs == pytest.approx([1.1176e-08, 7.4506e-09, -5.9605e-08, -5.9605e-08])


def test_time_system_correction():
    header = parse_nav_header(io.StringIO(_sample_header()))
    corr = header.time_sys_corr["GPUT"]
    assert corr == TimeSysCorr(
        a0=pytest.approx(-9.3132257462e-10),
        a1=pytest.approx(8.881784197e-16),
        ref_sow=233472,
        ref_week=2185,
    )
    assert corr.geo_provider == " "


def test_leap_seconds():
    header = parse_nav_header(io.StringIO(_sample_header()))
    assert (header.leap_seconds, header.leap_delta, header.leap_week, header.leap_day) == (18, 18, 2185, 7)


def test_stream_left_at_first_record():
    stream = io.StringIO(_sample_header())
    parse_nav_header(stream)
    assert stream.readline().startswith("G01 2021")


def test_short_line_rejected():
    text = _version_line() + "too short\n" + _line("", "END OF HEADER")
    with pytest.raises(FFStreamError):
        parse_nav_header(io.StringIO(text))


def test_old_version_rejected():
    text = _version_line(version="2.11") + _line("", "END OF HEADER")
    with pytest.raises(FFStreamError):
        parse_nav_header(io.StringIO(text))


def test_observation_file_rejected():
    text = _version_line(file_type="O: OBSERVATION") + _line("", "END OF HEADER")
    with pytest.raises(FFStreamError):
        parse_nav_header(io.StringIO(text))


def test_missing_end_of_header_rejected():
    with pytest.raises(FFStreamError):
        parse_nav_header(io.StringIO(_version_line()))


def test_repeated_iono_record_replaces_earlier():
    first = "GPSB " + "".join(f"{v:12.4E}" for v in (1.0, 2.0, 3.0, 4.0))
    second = "GPSB " + "".join(f"{v:12.4E}" for v in (5.0, 6.0, 7.0, 8.0))
    text = (_version_line() + _line(first, "IONOSPHERIC CORR")
            + _line(second, "IONOSPHERIC CORR") + _line("", "END OF HEADER"))
    header = parse_nav_header(io.StringIO(text))
    assert header.iono_corr == {"GPSB": [5.0, 6.0, 7.0, 8.0]}