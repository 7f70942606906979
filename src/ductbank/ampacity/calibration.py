from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import Cable, InstallationMedium, ThermalParameters

from .model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams
from .neher_mcgrath import ampacity_details

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationTarget:
    """Published ampacity for a cable in free air."""

    cable: Cable
    conductor_rating_c: float
    reference_a: float
    ambient_c: float = 30.0


@dataclass(frozen=True)
class CalibrationResult:
    params: AmpacityModelParams
    max_error: float
    errors: Sequence[float] = field(default_factory=tuple)


DEFAULT_TARGETS: Sequence[CalibrationTarget] = (
    CalibrationTarget(
        cable=Cable(tag="4/0 Cu", conduit_id=None, conductor_size="4/0 AWG", conductor_material="Copper"),
        conductor_rating_c=90.0,
        reference_a=260.0,
    ),
    CalibrationTarget(
        cable=Cable(tag="500 Cu", conduit_id=None, conductor_size="500 kcmil", conductor_material="Copper"),
        conductor_rating_c=90.0,
        reference_a=430.0,
    ),
    CalibrationTarget(
        cable=Cable(
            tag="250 Al",
            conduit_id=None,
            conductor_size="250 kcmil",
            conductor_material="Aluminum",
            insulation_rating_c=75.0,
        ),
        conductor_rating_c=75.0,
        reference_a=215.0,
    ),
)


def _grid(start: float, stop: float, step: float) -> list[float]:
    count = int(round((stop - start) / step)) + 1
    return [round(start + idx * step, 6) for idx in range(count)]


def _target_errors(
    targets: Sequence[CalibrationTarget],
    model: AmpacityModelParams,
    table: ConductorPropertyTable,
) -> list[float]:
    errors = []
    for target in targets:
        params = ThermalParameters(
            earth_temp_c=target.ambient_c,
            conductor_rating_c=target.conductor_rating_c,
            medium=InstallationMedium.AIR,
        )
        amps = ampacity_details(target.cable, None, params, table=table, model=model).ampacity
        if math.isnan(amps):
            errors.append(math.inf)
        else:
            errors.append(abs(amps - target.reference_a) / target.reference_a)
    return errors


def calibrate_model(
    targets: Sequence[CalibrationTarget] = DEFAULT_TARGETS,
    *,
    table: Optional[ConductorPropertyTable] = None,
    base: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
) -> CalibrationResult:
    """
    Grid-search the free-air model constants against reference ampacities.

    Minimises the worst relative error over ``targets`` and returns new
    parameters; ``base`` is left untouched. The steel duct default tracks the
    PVC one at 0.02 °C·m/W lower.
    """
    table = table or ConductorPropertyTable.default()
    best = base
    best_errors = _target_errors(targets, base, table)
    best_error = max(best_errors, default=0.0)

    for air in _grid(3.0, 3.8, 0.1):
        for k_ins in _grid(0.26, 0.34, 0.01):
            for duct in _grid(0.08, 0.12, 0.01):
                candidate = AmpacityModelParams(
                    air_thermal_resistance=air,
                    insulation_thermal_conductivity=k_ins,
                    default_duct_rth_pvc=duct,
                    default_duct_rth_steel=round(duct - 0.02, 6),
                    soil_resistance_factor=base.soil_resistance_factor,
                )
                errors = _target_errors(targets, candidate, table)
                worst = max(errors, default=0.0)
                if worst < best_error:
                    best, best_error, best_errors = candidate, worst, errors

    logger.debug("Calibrated model %s with max relative error %.4f", best, best_error)
    return CalibrationResult(params=best, max_error=best_error, errors=tuple(best_errors))
