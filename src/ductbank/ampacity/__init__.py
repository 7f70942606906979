"""
Closed-form Neher-McGrath ampacity for cables in buried conduits.

The analytical path is the fast first estimate; the finite-difference solver in
``ductbank.thermal`` is the cross-check.
"""

from .calibration import CalibrationResult, CalibrationTarget, calibrate_model
from .electrical import dc_resistance, dielectric_rise, skin_effect
from .model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams
from .neher_mcgrath import (
    AmpacityBreakdown,
    RcaComponents,
    ampacity_details,
    calc_rca_components,
    neher_mcgrath_ampacity,
)
from .thermal_resistance import (
    conductor_thermal_resistance,
    duct_thermal_resistance,
    effective_soil_resistivity,
    neher_mcgrath_temp,
    soil_thermal_resistance,
)

__all__ = [
    "AmpacityBreakdown",
    "AmpacityModelParams",
    "CalibrationResult",
    "CalibrationTarget",
    "DEFAULT_MODEL_PARAMS",
    "RcaComponents",
    "ampacity_details",
    "calc_rca_components",
    "calibrate_model",
    "conductor_thermal_resistance",
    "dc_resistance",
    "dielectric_rise",
    "duct_thermal_resistance",
    "effective_soil_resistivity",
    "neher_mcgrath_ampacity",
    "neher_mcgrath_temp",
    "skin_effect",
    "soil_thermal_resistance",
]
