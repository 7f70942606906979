from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ductbank.errors import InvalidConductorSize
from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import Cable, Conduit, InstallationMedium, ThermalParameters
from ductbank.model.materials import DEFAULT_SOIL_TABLE, SoilResistivityTable

from .electrical import dc_resistance, dielectric_rise, skin_effect
from .model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams
from .thermal_resistance import (
    conductor_thermal_resistance,
    duct_thermal_resistance,
    effective_soil_resistivity,
    soil_thermal_resistance,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RcaComponents:
    """Thermal resistances (°C·m/W) between conductor and ambient."""

    r_cond: float
    r_ins: float
    r_duct: float
    r_soil: float

    @property
    def r_ca(self) -> float:
        return self.r_cond + self.r_ins + self.r_duct + self.r_soil


@dataclass(frozen=True)
class AmpacityBreakdown:
    """Every intermediate term of one analytical rating, for audit and reporting."""

    rdc: float
    yc: float
    delta_td: float
    r_cond: float
    r_ins: float
    r_duct: float
    r_soil: float
    r_ca: float
    ampacity: float
    feasible: bool = True
    unavailable_reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return not math.isnan(self.ampacity)

    def to_dict(self) -> dict:
        return {
            "Rdc": self.rdc,
            "Yc": self.yc,
            "deltaTd": self.delta_td,
            "Rcond": self.r_cond,
            "Rins": self.r_ins,
            "Rduct": self.r_duct,
            "Rsoil": self.r_soil,
            "Rca": self.r_ca,
            "ampacity": self.ampacity,
        }


def calc_rca_components(
    cable: Cable,
    conduit: Optional[Conduit],
    params: ThermalParameters,
    *,
    table: Optional[ConductorPropertyTable] = None,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
) -> RcaComponents:
    """
    Resolve the four series resistances for ``cable`` installed in ``conduit``.

    Raises:
        InvalidConductorSize: propagated from the conductor/insulation term.
    """
    cable_rth = conductor_thermal_resistance(cable, table, model)
    r_soil = 0.0
    if params.medium is InstallationMedium.AIR:
        r_duct = model.air_thermal_resistance
    else:
        r_duct = duct_thermal_resistance(conduit, params.concrete_encasement, model)
        rho = effective_soil_resistivity(params.soil_resistivity, params.moisture_percent, soil_table)
        diameter_in = conduit.diameter_in if conduit is not None else 0.0
        r_soil = soil_thermal_resistance(rho, params.ductbank_depth_in, diameter_in, model)
    return RcaComponents(
        r_cond=cable_rth.conductor,
        r_ins=cable_rth.insulation,
        r_duct=r_duct,
        r_soil=r_soil,
    )


def ampacity_details(
    cable: Cable,
    conduit: Optional[Conduit],
    params: ThermalParameters,
    *,
    table: Optional[ConductorPropertyTable] = None,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
) -> AmpacityBreakdown:
    """
    Neher-McGrath ampacity of ``cable`` at ``params.conductor_rating_c``.

    Never raises for bad data: an unknown conductor size or a non-physical
    resistance yields ``ampacity = nan``, a rating below the ambient plus
    dielectric rise yields ``ampacity = 0`` with ``feasible = False``.
    """
    table = table or ConductorPropertyTable.default()
    rating = params.conductor_rating_c
    rdc = dc_resistance(cable.conductor_size, cable.conductor_material, rating, table)
    yc = skin_effect(cable.conductor_size, table)
    delta_td = dielectric_rise(cable.voltage_rating)

    try:
        comps = calc_rca_components(cable, conduit, params, table=table, model=model, soil_table=soil_table)
    except InvalidConductorSize as exc:
        logger.info("Ampacity unavailable for %s: %s", cable.tag, exc)
        nan = math.nan
        return AmpacityBreakdown(
            rdc=rdc, yc=yc, delta_td=delta_td,
            r_cond=nan, r_ins=nan, r_duct=nan, r_soil=nan, r_ca=nan,
            ampacity=nan, feasible=False, unavailable_reason=str(exc),
        )

    r_ca = comps.r_ca
    reason: Optional[str] = None
    feasible = True
    if not math.isfinite(r_ca) or r_ca <= 0.0:
        ampacity = math.nan
        feasible = False
        reason = f"Non-physical thermal resistance Rca={r_ca}"
    elif rdc <= 0.0:
        ampacity = math.nan
        feasible = False
        reason = f"No DC resistance for conductor size {cable.conductor_size!r}"
    else:
        margin = rating - (params.ambient_temp_c + delta_td)
        if margin < 0.0:
            ampacity = 0.0
            feasible = False
            reason = "Ambient plus dielectric rise exceeds the conductor rating"
        else:
            ampacity = math.sqrt(margin / (rdc * (1.0 + yc) * r_ca))

    return AmpacityBreakdown(
        rdc=rdc,
        yc=yc,
        delta_td=delta_td,
        r_cond=comps.r_cond,
        r_ins=comps.r_ins,
        r_duct=comps.r_duct,
        r_soil=comps.r_soil,
        r_ca=r_ca,
        ampacity=ampacity,
        feasible=feasible,
        unavailable_reason=reason,
    )


def neher_mcgrath_ampacity(
    cable: Cable,
    conduit: Optional[Conduit],
    params: ThermalParameters,
    **kwargs,
) -> float:
    return ampacity_details(cable, conduit, params, **kwargs).ampacity
