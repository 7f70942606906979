from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class ConductorMaterial:
    """Electrical and thermal constants of a conductor metal."""

    name: str
    key: str
    electrical_resistivity_ohm_mm2_per_m: float
    temp_coefficient_per_c: float
    thermal_conductivity_w_per_mk: float


COPPER = ConductorMaterial(
    name="Copper",
    key="cu",
    electrical_resistivity_ohm_mm2_per_m=0.017241,
    temp_coefficient_per_c=0.00393,
    thermal_conductivity_w_per_mk=401.0,
)

ALUMINIUM = ConductorMaterial(
    name="Aluminum",
    key="al",
    electrical_resistivity_ohm_mm2_per_m=0.028264,
    temp_coefficient_per_c=0.00403,
    thermal_conductivity_w_per_mk=237.0,
)


def conductor_material(name: Optional[str]) -> ConductorMaterial:
    """Resolve a free-form material label; anything mentioning "al" is aluminum."""
    if name and "al" in name.lower():
        return ALUMINIUM
    return COPPER


# Internal cross-sectional area (in²) per conduit type and trade size.
CONDUIT_SPECS: Dict[str, Dict[str, float]] = {
    "EMT": {
        "1/2": 0.304, "3/4": 0.533, "1": 0.864, "1-1/4": 1.496, "1-1/2": 2.036,
        "2": 3.356, "2-1/2": 5.858, "3": 8.846, "3-1/2": 11.545, "4": 14.753,
    },
    "RMC": {
        "1/2": 0.314, "3/4": 0.549, "1": 0.887, "1-1/4": 1.526, "1-1/2": 2.071,
        "2": 3.408, "2-1/2": 4.866, "3": 7.499, "3-1/2": 10.01, "4": 12.882,
        "5": 20.212, "6": 29.158,
    },
    "PVC Sch 40": {
        "1/2": 0.285, "3/4": 0.508, "1": 0.832, "1-1/4": 1.453, "1-1/2": 1.986,
        "2": 3.291, "2-1/2": 4.695, "3": 7.268, "3-1/2": 9.737, "4": 12.554,
        "5": 19.761, "6": 28.567,
    },
}


def conduit_area_in2(conduit_type: str, trade_size: str) -> float:
    """Return the internal area of a conduit, or 0.0 when the pair is unknown."""
    sizes = CONDUIT_SPECS.get(conduit_type)
    if sizes is None:
        return 0.0
    return sizes.get(str(trade_size).strip(), 0.0)


# Conduit wall thermal resistance (°C·m/W) per wall material and trade size,
# plus the additive term for concrete encasement.
RDUCT_TABLE: Dict[str, Dict[str, float]] = {
    "PVC": {
        "1/2": 0.12, "3/4": 0.115, "1": 0.11, "1-1/4": 0.105, "1-1/2": 0.10,
        "2": 0.095, "2-1/2": 0.09, "3": 0.085, "3-1/2": 0.082, "4": 0.08,
        "5": 0.078, "6": 0.075,
    },
    "steel": {
        "1/2": 0.09, "3/4": 0.085, "1": 0.08, "1-1/4": 0.075, "1-1/2": 0.07,
        "2": 0.065, "2-1/2": 0.06, "3": 0.058, "3-1/2": 0.056, "4": 0.055,
        "5": 0.053, "6": 0.05,
    },
    "concrete": {
        "1/2": 0.10, "3/4": 0.10, "1": 0.095, "1-1/4": 0.09, "1-1/2": 0.088,
        "2": 0.085, "2-1/2": 0.082, "3": 0.08, "3-1/2": 0.078, "4": 0.075,
        "5": 0.072, "6": 0.07,
    },
}

CONCRETE_FALLBACK_RDUCT = 0.05


def duct_wall_material(conduit_type: Optional[str]) -> str:
    if conduit_type and "PVC" in conduit_type:
        return "PVC"
    return "steel"


# Maximum continuous conductor temperature (°C) per insulation type.
INSULATION_TEMP_LIMIT_C: Dict[str, float] = {
    "THHN": 90.0,
    "XLPE": 90.0,
    "PVC": 75.0,
    "XHHW": 90.0,
    "XHHW-2": 90.0,
    "THWN-2": 90.0,
    "THW": 75.0,
    "THWN": 75.0,
    "TW": 60.0,
    "UF": 60.0,
}


def insulation_temp_limit(insulation_type: Optional[str]) -> Optional[float]:
    if not insulation_type:
        return None
    return INSULATION_TEMP_LIMIT_C.get(insulation_type.strip().upper())


DEFAULT_SOIL_RESISTIVITY = 90.0

_DEFAULT_SOIL_OPTIONS: Dict[str, float] = {
    "Saturated clay/silt": 40.0,
    "Moist clay": 60.0,
    "Moist sand": 70.0,
    "Typical native soil": 90.0,
    "Dry sand": 120.0,
    "Very dry sandy soil": 150.0,
}


@dataclass(frozen=True)
class SoilResistivityTable:
    """Reference soil thermal resistivities (°C·cm/W); the span bounds accepted inputs."""

    options: Mapping[str, float] = field(default_factory=lambda: dict(_DEFAULT_SOIL_OPTIONS))

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError("Soil resistivity table must contain at least one entry.")

    @property
    def minimum(self) -> float:
        return min(self.options.values())

    @property
    def maximum(self) -> float:
        return max(self.options.values())

    def clamp(self, resistivity: float) -> float:
        if math.isnan(resistivity):
            resistivity = DEFAULT_SOIL_RESISTIVITY
        return min(max(resistivity, self.minimum), self.maximum)


DEFAULT_SOIL_TABLE = SoilResistivityTable()
