"""Between-station and between-satellite differencing of observation equations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from gnsslab.gnss_types import (
    EquData,
    EquID,
    EquSys,
    Epoch,
    InvalidRequest,
    ObsID,
    Parameter,
    SatID,
    Variable,
)

_COORDINATES = (Parameter.DX, Parameter.DY, Parameter.DZ)
_DATUM_WEIGHT = 1.0e8


def _combined_weight(weight_a: float, weight_b: float) -> float:
    """Weight of the difference of two uncorrelated observations."""
    return 1.0 / (1.0 / weight_a + 1.0 / weight_b)


def difference_station(
    rover: EquSys,
    base: EquSys,
    cs_flag_rover: Mapping[Variable, float] | None = None,
    cs_flag_base: Mapping[Variable, float] | None = None,
) -> tuple[EquSys, dict[Variable, int]]:
    """Form single differences between a rover and a base station.

    Equations present only at the rover are dropped. Ionospheric unknowns are
    removed, as for short baselines. Cycle-slip flags are merged: a slip at
    either station marks the single-differenced ambiguity, which keeps the
    rover's station name. Returns the differenced system and its flags.
    """
    equations: dict[EquID, EquData] = {}
    var_set: set[Variable] = set()
    for equ_id, rover_eq in rover.equations.items():
        base_eq = base.equations.get(equ_id)
        if base_eq is None:
            continue
        coeffs = {
            var: coeff
            for var, coeff in rover_eq.var_coeff.items()
            if var.para != Parameter.IONO
        }
        var_set.update(coeffs)
        equations[equ_id] = EquData(
            prefit=rover_eq.prefit - base_eq.prefit,
            var_coeff=coeffs,
            weight=_combined_weight(rover_eq.weight, base_eq.weight),
        )

    flags: dict[Variable, int] = {}
    rover_flags = {var.with_station(""): flag for var, flag in (cs_flag_rover or {}).items()}
    base_flags = {var.with_station(""): flag for var, flag in (cs_flag_base or {}).items()}
    for var, flag_rover in rover_flags.items():
        if var not in base_flags:
            continue
        slipped = bool(flag_rover) or bool(base_flags[var])
        flags[var.with_station(rover.station)] = 1 if slipped else 0

    return EquSys(station=rover.station, equations=equations, var_set=var_set), flags


def find_datum_sat(sat_elevations: Mapping[SatID, float]) -> SatID:
    """Return the satellite with the highest elevation."""
    if not sat_elevations:
        raise InvalidRequest("no satellites to choose a datum from")
    return max(sat_elevations, key=sat_elevations.__getitem__)


def difference_sat(
    datum_sat: SatID,
    equ_sys_sd: EquSys,
    cs_flag_sd: Mapping[Variable, float] | None = None,
) -> tuple[EquSys, dict[Variable, float]]:
    """Form double differences against the datum satellite.

    Each equation is differenced with the datum equation of the same system
    and observation type; equations without such a partner are dropped.
    Receiver clock terms cancel and coordinate coefficients are differenced.

    Without cycle-slip flags the ambiguities keep their coefficients only.
    With flags, the datum's single-differenced ambiguity is kept as a separate
    unknown with a negated coefficient, and the flags pass through unchanged.
    """
    keep_datum_ambiguity = cs_flag_sd is not None
    datum: dict[ObsID, EquData] = {}
    others: dict[EquID, EquData] = {}
    for equ_id, equation in equ_sys_sd.equations.items():
        if equ_id.sat == datum_sat:
            datum[ObsID(equ_id.sat.system, equ_id.obs_type)] = equation
        else:
            others[equ_id] = equation

    equations: dict[EquID, EquData] = {}
    var_set: set[Variable] = set()
    for equ_id in sorted(others):
        equation = others[equ_id]
        reference = datum.get(ObsID(equ_id.sat.system, equ_id.obs_type))
        if reference is None:
            continue
        try:
            coeffs, used = _double_difference_coeffs(
                equation.var_coeff, reference.var_coeff, keep_datum_ambiguity
            )
        except KeyError:
            continue
        equations[equ_id] = EquData(
            prefit=equation.prefit - reference.prefit,
            var_coeff=coeffs,
            weight=_combined_weight(equation.weight, reference.weight),
        )
        var_set.update(used)

    result = EquSys(station=equ_sys_sd.station, equations=equations, var_set=var_set)
    return result, dict(cs_flag_sd or {})


def _double_difference_coeffs(coeffs, datum_coeffs, keep_datum_ambiguity):
    datum_ambiguities = [v for v in datum_coeffs if v.para == Parameter.AMBIGUITY]
    datum_amb = max(datum_ambiguities) if datum_ambiguities else None

    result: dict[Variable, float] = {}
    used: set[Variable] = set()
    for var, coeff in coeffs.items():
        if var.para in _COORDINATES:
            result[var] = coeff - datum_coeffs[var]
            used.add(var)
        elif var.para == Parameter.AMBIGUITY:
            if keep_datum_ambiguity and datum_amb is not None:
                result[datum_amb] = -datum_coeffs[datum_amb]
                used.add(datum_amb)
            result[var] = coeff
            used.add(var)
    return result, used


def _datum_equation(var: Variable, value: float) -> tuple[EquID, EquData]:
    equ_id = EquID(sat=var.sat, obs_type=f"{var.para.label}{var.obs_id}")
    return equ_id, EquData(prefit=value, var_coeff={var: 1.0}, weight=_DATUM_WEIGHT)


def ambiguity_datum(
    first_epoch: bool,
    datum_sat: SatID,
    fixed_amb_data: Mapping[Variable, float],
    equ_sys_dd: EquSys,
) -> EquSys:
    """Add heavily weighted pseudo-observations fixing the datum ambiguities.

    On the first epoch the datum satellite's ambiguities are tied to zero;
    afterwards they are tied to their previously fixed values.
    """
    equations = dict(equ_sys_dd.equations)
    if first_epoch:
        pairs = ((var, 0.0) for var in sorted(equ_sys_dd.var_set))
    else:
        pairs = fixed_amb_data.items()
    for var, value in pairs:
        if var.sat == datum_sat:
            equ_id, equation = _datum_equation(var, value)
            equations[equ_id] = equation
    return EquSys(
        station=equ_sys_dd.station,
        equations=equations,
        var_set=set(equ_sys_dd.var_set),
    )


def _vector(values: Sequence[float]) -> str:
    return " ".join(f"{float(v):.3f}" for v in values)


def format_solution(
    epoch: Epoch,
    xyz_rover: Sequence[float],
    xyz_float: Sequence[float] | None = None,
    ratio: float | None = None,
    xyz_fixed: Sequence[float] | None = None,
) -> str:
    """Format one line of a solution file.

    Gives the single-point solution alone, with a float RTK solution, or
    with float and fixed RTK solutions and the ratio test value.
    """
    yds = epoch.to_yds()
    head = f"{yds.year:04d} {yds.doy:03d} {yds.sod:.3f}"
    if xyz_float is None:
        if xyz_fixed is not None or ratio is not None:
            raise ValueError("a fixed solution needs a float solution")
        return f"{head} {_vector(xyz_rover)}"
    if xyz_fixed is None:
        return f"{head} spp: {_vector(xyz_rover)} rtk: {_vector(xyz_float)}"
    if ratio is None:
        raise ValueError("a fixed solution needs its ratio")
    return (
        f"{head} spp: {_vector(xyz_rover)} float-rtk: {_vector(xyz_float)}"
        f" ratio:{ratio:.3f} fixed-rtk:{_vector(xyz_fixed)}"
    )