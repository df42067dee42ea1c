import pytest

from gnsslab.gnss_types import (
    C_MPS,
    Epoch,
    FFStreamError,
    InvalidRequest,
    ObsID,
    Parameter,
    SatID,
    TimeSystem,
    Variable,
    get_frequency,
    get_wavelength,
    safe_float,
)


def test_satid_str_zero_pads():
    assert str(SatID("G", 5)) == "G05"


@pytest.mark.parametrize("text", ["G01", "C23", "G32"])
def test_satid_parse_round_trip(text):
    assert str(SatID.parse(text)) == text


def test_satid_parse_invalid():
    with pytest.raises(ValueError):
        SatID.parse("Gxx")


def test_satid_ordering_system_then_prn():
    sats = [SatID("G", 2), SatID("C", 1), SatID("G", 1)]
    assert sorted(sats) == [SatID("C", 1), SatID("G", 1), SatID("G", 2)]


def test_parameter_labels():
    assert str(Parameter.AMBIGUITY) == "ambiguity"
    assert Parameter.from_label("iono") is Parameter.IONO
    assert Parameter.from_label("bogus") is Parameter.UNKNOWN


def test_obsid_str_concatenates():
    assert str(ObsID("G", "L1")) == "GL1"


def test_variable_orders_by_station_first():
    a = Variable("AAAA", Parameter.AMBIGUITY)
    b = Variable("BBBB", Parameter.DX)
    assert a < b
    assert Variable("AAAA", Parameter.DX) < Variable("AAAA", Parameter.DY)


def test_variable_with_station():
    var = Variable("ROVR", Parameter.AMBIGUITY, ObsID("G", "L1"), SatID("G", 3))
    stripped = var.with_station("")
    assert stripped.station == ""
    assert stripped.sat == var.sat and stripped.obs_id == var.obs_id
    assert var.station == "ROVR"
    assert stripped.with_station("ROVR") == var


def test_epoch_civil_round_trip():
    epoch = Epoch.from_civil(2020, 3, 15, 12, 34, 56.5)
    assert tuple(epoch.to_civil()) == (2020, 3, 15, 12, 34, 56.5)


def test_gps_week_origin():
    civil = Epoch.from_week_second(0, 0.0, TimeSystem.GPS).to_civil()
    assert tuple(civil) == (1980, 1, 6, 0, 0, 0.0)


@pytest.mark.parametrize("system", [TimeSystem.GPS, TimeSystem.BDT])
def test_week_second_round_trip(system):
    epoch = Epoch.from_week_second(2100, 345600.0, system)
    ws = epoch.to_week_second()
    assert ws.week == 2100
    assert ws.sow == pytest.approx(345600.0)


def test_epoch_arithmetic_rolls_over_day():
    epoch = Epoch.from_civil(2020, 1, 1, 23, 59, 59.0)
    later = epoch + 2.0
    assert later == Epoch.from_civil(2020, 1, 2, 0, 0, 1.0)
    assert later - epoch == pytest.approx(2.0)
    assert later - 2.0 == epoch


def test_convert_round_trip_and_offset():
    gps = Epoch.from_civil(2021, 5, 1, 0, 0, 0.0, TimeSystem.GPS)
    bdt = gps.convert(TimeSystem.BDT)
    assert bdt.time_system is TimeSystem.BDT
    assert gps - bdt == pytest.approx(14.0)
    assert bdt.convert(TimeSystem.GPS) == gps
    assert gps.convert(TimeSystem.GPS) is gps


def test_yds_first_day():
    assert Epoch.from_civil(2021, 1, 1, 6, 0, 0.0).to_yds().doy == 1


def test_epoch_usable_as_key():
    table = {Epoch.from_civil(2020, 1, 1, 0, 0, 30.0): "x"}
    assert table[Epoch.from_civil(2020, 1, 1, 0, 0, 30.0)] == "x"


def test_safe_float_fortran_exponent():
    assert safe_float("  1.5D+02 ") == safe_float("1.5e+02")


def test_safe_float_blank_is_zero():
    assert safe_float("      ") == 0.0


def test_safe_float_invalid():
    with pytest.raises(FFStreamError):
        safe_float("abc")


def test_wavelength_times_frequency_is_light_speed():
    for system, band, obs in [("G", 1, "L1"), ("G", 2, "C2W"), ("C", 2, "L2I")]:
        assert get_wavelength(system, band) * get_frequency(system, obs) == pytest.approx(C_MPS)


def test_unknown_band():
    assert get_wavelength("G", 9) == 0.0
    with pytest.raises(InvalidRequest):
        get_frequency("X", "L1")