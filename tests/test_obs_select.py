from gnsslab.gnss_types import Epoch, ObsData, SatID
from gnsslab.obs_select import choose_obs, convert_obs_type


def _obs():
    return ObsData(
        station="ROVER",
        epoch=Epoch.from_civil(2024, 1, 1, 0, 0, 0.0),
        data={
            SatID("G", 1): {"C1C": 1.0, "L1C": 2.0, "S1C": 3.0},
            SatID("G", 2): {"S1C": 4.0},
            SatID("C", 3): {"C2I": 5.0, "L2I": 6.0},
        },
    )


def test_choose_obs_keeps_allowed_types():
    out = choose_obs(_obs(), {"G": {"C1C", "L1C"}})
    assert out.data == {SatID("G", 1): {"C1C": 1.0, "L1C": 2.0}}


def test_choose_obs_drops_empty_and_unlisted_systems():
    out = choose_obs(_obs(), {"G": {"C1C"}, "C": {"L2I"}})
    assert set(out.data) == {SatID("G", 1), SatID("C", 3)}
    assert out.data[SatID("C", 3)] == {"L2I": 6.0}


def test_choose_obs_keeps_metadata_and_original():
    obs = _obs()
    out = choose_obs(obs, {"G": ["S1C"]})
    assert out.station == "ROVER"
    assert out.epoch == obs.epoch
    assert len(obs.data) == 3


def test_convert_obs_type_shortens_names():
    out = convert_obs_type(_obs())
    assert out.data[SatID("G", 1)] == {"C1": 1.0, "L1": 2.0, "S1": 3.0}
    assert out.data[SatID("C", 3)] == {"C2": 5.0, "L2": 6.0}


def test_convert_obs_type_collision_last_sorted_wins():
    obs = ObsData(data={SatID("G", 5): {"C1W": 7.0, "C1C": 8.0}})
    out = convert_obs_type(obs)
    assert out.data[SatID("G", 5)] == {"C1": 7.0}


def test_convert_is_idempotent():
    once = convert_obs_type(_obs())
    twice = convert_obs_type(once)
    assert once.data == twice.data