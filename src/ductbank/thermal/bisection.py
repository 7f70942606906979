from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ductbank.model.conductors import size_to_area
from ductbank.model.ductbank import DuctbankSnapshot

from .solver import DuctbankFieldSolver

logger = logging.getLogger(__name__)

MAX_EXPANSIONS = 6
MAX_BISECTIONS = 12
LOAD_CAP_A = 2000.0
TEMPERATURE_BAND_C = 0.5


@dataclass(frozen=True)
class FiniteAmpacityResult:
    """Load at which the field solver puts the cable's conduit at the conductor rating."""

    cable_tag: str
    ampacity: float
    conduit_temp_c: float
    bracketed: bool
    converged: bool
    solves: int

    @property
    def available(self) -> bool:
        return not math.isnan(self.ampacity)


def finite_ampacity(
    snapshot: DuctbankSnapshot,
    cable_tag: str,
    solver: Optional[DuctbankFieldSolver] = None,
) -> FiniteAmpacityResult:
    """
    Bisect the cable's load against repeated field solves.

    The upper bound starts at the estimated load (at least 1 A) and doubles
    up to six times, capped at 2000 A, until the rating is reached; twelve
    midpoint solves then narrow the bracket, stopping early once the conduit
    temperature is within 0.5 °C of the rating. Trial loads go into copies
    of ``snapshot`` so the caller's records are never touched.
    """
    solver = solver or DuctbankFieldSolver()
    cable = snapshot.cable(cable_tag)
    conduit = snapshot.conduit(cable.conduit_id) if cable is not None else None
    if cable is None or conduit is None or not conduit.is_valid():
        return FiniteAmpacityResult(cable_tag, math.nan, math.nan, False, False, 0)
    if size_to_area(cable.conductor_size, solver.table) <= 0.0:
        return FiniteAmpacityResult(cable_tag, math.nan, math.nan, False, False, 0)

    rating = snapshot.params.conductor_rating_c
    solves = 0
    temp = snapshot.params.earth_temp_c

    def evaluate(load: float) -> float:
        nonlocal solves
        solves += 1
        trial = snapshot.with_cable_load(cable_tag, load)
        result = solver.solve(trial)
        return result.conduit_temps.get(conduit.conduit_id, temp)

    low = 0.0
    high = max(cable.estimated_load_a or 1.0, 1.0)
    bracketed = False
    for _ in range(MAX_EXPANSIONS):
        temp = evaluate(high)
        if temp >= rating:
            bracketed = True
            break
        if high >= LOAD_CAP_A:
            break
        low = high
        high = min(high * 2.0, LOAD_CAP_A)

    converged = False
    for _ in range(MAX_BISECTIONS):
        mid = (low + high) / 2.0
        temp = evaluate(mid)
        if abs(temp - rating) <= TEMPERATURE_BAND_C:
            low = high = mid
            converged = True
            break
        if temp > rating:
            high = mid
        else:
            low = mid

    ampacity = (low + high) / 2.0
    if not bracketed:
        logger.info("Rating of %s not reached below %.0f A", cable_tag, high)
    logger.debug("Finite ampacity of %s: %.1f A after %d solves", cable_tag, ampacity, solves)
    return FiniteAmpacityResult(
        cable_tag=cable_tag,
        ampacity=ampacity,
        conduit_temp_c=temp,
        bracketed=bracketed,
        converged=converged,
        solves=solves,
    )
