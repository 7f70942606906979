from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ductbank.errors import InvalidConductorSize
from ductbank.model.conductors import CMIL_TO_M2, ConductorPropertyTable
from ductbank.model.ductbank import Cable, Conduit
from ductbank.model.materials import (
    CONCRETE_FALLBACK_RDUCT,
    DEFAULT_SOIL_TABLE,
    RDUCT_TABLE,
    SoilResistivityTable,
    conductor_material,
    duct_wall_material,
)

from .model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams

INCH_TO_M = 0.0254
# Inner radius used for the conductor's own path, relative to its outer radius.
_CONDUCTOR_INNER_RATIO = 0.001
# Reference radius (m) for the radial conduction term of ``neher_mcgrath_temp``.
_REFERENCE_RADIUS_M = 0.05


@dataclass(frozen=True)
class CableThermalResistance:
    conductor: float
    insulation: float


def effective_soil_resistivity(
    resistivity: float,
    moisture_percent: float,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
) -> float:
    """Clamp to the reference table span, then de-rate for moisture (°C·cm/W)."""
    clamped = soil_table.clamp(resistivity)
    moisture = 0.0 if math.isnan(moisture_percent) else max(moisture_percent, 0.0)
    return clamped * (1.0 - min(moisture, 100.0) / 200.0)


def soil_conductivity_w_per_mk(effective_resistivity: float) -> float:
    return 100.0 / effective_resistivity


def conductor_thermal_resistance(
    cable: Cable,
    table: Optional[ConductorPropertyTable] = None,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
) -> CableThermalResistance:
    """
    Conductor and insulation thermal resistances (°C·m/W) of one cable.

    Raises:
        InvalidConductorSize: the size has no entry in the property table.
    """
    props = (table or ConductorPropertyTable.default()).get(cable.conductor_size)
    if props is None:
        raise InvalidConductorSize(cable.conductor_size, cable.tag)

    r_i = math.sqrt(props.area_cm * CMIL_TO_M2 / math.pi)
    thickness_in = cable.insulation_thickness_in or props.insulation_thickness_in or 0.0
    r_o = r_i + thickness_in * INCH_TO_M
    k_cond = conductor_material(cable.conductor_material).thermal_conductivity_w_per_mk
    k_ins = model.insulation_thermal_conductivity

    r_cond = math.log(r_i / (r_i * _CONDUCTOR_INNER_RATIO)) / (2.0 * math.pi * k_cond)
    r_ins = math.log(r_o / r_i) / (2.0 * math.pi * k_ins)
    return CableThermalResistance(conductor=r_cond, insulation=r_ins)


def duct_thermal_resistance(
    conduit: Optional[Conduit],
    concrete_encasement: bool = False,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
) -> float:
    """Conduit wall resistance (°C·m/W), including the concrete encasement term when enabled."""
    if conduit is None or not conduit.conduit_type:
        return 0.1 if concrete_encasement else 0.08

    wall = duct_wall_material(conduit.conduit_type)
    size = str(conduit.trade_size).strip()
    base = RDUCT_TABLE[wall].get(size)
    if base is None:
        base = model.default_duct_rth_pvc if wall == "PVC" else model.default_duct_rth_steel
    if concrete_encasement:
        base += RDUCT_TABLE["concrete"].get(size, CONCRETE_FALLBACK_RDUCT)
    return base


def soil_thermal_resistance(
    effective_resistivity: float,
    burial_depth_in: float,
    conduit_diameter_in: float,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
) -> float:
    """Logarithmic earth resistance (°C·m/W) between a buried conduit and grade."""
    burial_m = burial_depth_in * INCH_TO_M
    diameter_m = conduit_diameter_in * INCH_TO_M
    if burial_m <= 0.0 or diameter_m <= 0.0:
        return 0.0
    rho_m = effective_resistivity / 100.0
    return model.soil_resistance_factor * (rho_m / (2.0 * math.pi)) * math.log(4.0 * burial_m / diameter_m)


def neher_mcgrath_temp(power: float, rth: float, ambient: float, k: float, r: float) -> float:
    """
    Conductor temperature for ``power`` W/m through ``rth`` plus radial conduction.

    The radial term covers conduction from a 0.05 m reference radius out to ``r``
    in a medium of conductivity ``k`` W/m·K.
    """
    radius = max(r, _REFERENCE_RADIUS_M)
    radial = math.log(radius / _REFERENCE_RADIUS_M) / (2.0 * math.pi * k)
    return ambient + power * (rth + radial)
