from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AmpacityModelParams:
    """Tunable constants of the analytical model; see ``calibrate_model``."""

    air_thermal_resistance: float = 3.4
    insulation_thermal_conductivity: float = 0.3
    default_duct_rth_pvc: float = 0.1
    default_duct_rth_steel: float = 0.08
    soil_resistance_factor: float = 1.0

    def to_dict(self) -> dict:
        return {
            "air_thermal_resistance": self.air_thermal_resistance,
            "insulation_thermal_conductivity": self.insulation_thermal_conductivity,
            "default_duct_rth_pvc": self.default_duct_rth_pvc,
            "default_duct_rth_steel": self.default_duct_rth_steel,
            "soil_resistance_factor": self.soil_resistance_factor,
        }


DEFAULT_MODEL_PARAMS = AmpacityModelParams()
