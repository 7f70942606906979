from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ductbank.ampacity.model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams
from ductbank.ampacity.neher_mcgrath import AmpacityBreakdown, ampacity_details
from ductbank.errors import Issue, warning
from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import DuctbankSnapshot
from ductbank.model.layout import ConduitFill, conduit_fill
from ductbank.model.materials import DEFAULT_SOIL_TABLE, SoilResistivityTable
from ductbank.thermal.bisection import finite_ampacity
from ductbank.thermal.config import DEFAULT_SOLVER_CONFIG, SolverConfig
from ductbank.thermal.solver import DuctbankFieldSolver, FieldSolveResult, ProgressCallback
from ductbank.validation import sanitize_snapshot

logger = logging.getLogger(__name__)


def over_limit(load_a: float, analytical_a: float, finite_a: float) -> bool:
    """True when the load exceeds either rating that is actually available."""
    return (math.isfinite(analytical_a) and load_a > analytical_a) or (
        math.isfinite(finite_a) and load_a > finite_a
    )


@dataclass
class CableReportRow:
    tag: str
    conduit_id: Optional[str]
    estimated_load_a: float
    breakdown: Optional[AmpacityBreakdown]
    finite_ampacity: float = math.nan
    over_limit: bool = False

    @property
    def ampacity(self) -> float:
        return self.breakdown.ampacity if self.breakdown is not None else math.nan

    def to_dict(self) -> dict:
        payload = {
            "tag": self.tag,
            "conduitId": self.conduit_id,
            "estimatedLoad": self.estimated_load_a,
            "ampacity": self.ampacity,
            "finiteAmpacity": self.finite_ampacity,
            "overLimit": self.over_limit,
        }
        if self.breakdown is not None:
            payload["breakdown"] = self.breakdown.to_dict()
        return payload


@dataclass
class DuctbankReport:
    rows: List[CableReportRow]
    field_result: Optional[FieldSolveResult]
    fill: Dict[str, ConduitFill]
    issues: List[Issue] = field(default_factory=list)

    def row(self, tag: str) -> Optional[CableReportRow]:
        for row in self.rows:
            if row.tag == tag:
                return row
        return None

    def to_dict(self) -> dict:
        return {
            "cables": [row.to_dict() for row in self.rows],
            "field": self.field_result.to_dict() if self.field_result is not None else None,
            "fill": {cid: entry.fill_percent for cid, entry in self.fill.items()},
            "warnings": [issue.to_dict() for issue in self.issues],
        }


def analyze_ductbank(
    snapshot: DuctbankSnapshot,
    *,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
    table: Optional[ConductorPropertyTable] = None,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
    run_field: bool = True,
    run_finite: bool = True,
    progress_callback: Optional[ProgressCallback] = None,
) -> DuctbankReport:
    """
    Rate every cable analytically and, optionally, against the field solver.

    Each cable is processed independently: a bad record yields NaN entries
    and a warning while the rest of the batch carries on.
    """
    table = table or ConductorPropertyTable.default()
    clean, issues = sanitize_snapshot(snapshot, table=table, soil_table=soil_table)
    params = clean.params

    rows: List[CableReportRow] = []
    for cable in clean.cables:
        conduit = clean.conduit(cable.conduit_id)
        if conduit is None or not conduit.is_valid():
            rows.append(CableReportRow(cable.tag, cable.conduit_id, cable.estimated_load_a, None))
            continue
        breakdown = ampacity_details(cable, conduit, params, table=table, model=model, soil_table=soil_table)
        if breakdown.unavailable_reason:
            code = "ampacity-unavailable" if not breakdown.available else "ampacity-infeasible"
            issues.append(warning(code, f"cables.{cable.tag}", breakdown.unavailable_reason))
        rows.append(CableReportRow(cable.tag, cable.conduit_id, cable.estimated_load_a, breakdown))

    field_result: Optional[FieldSolveResult] = None
    solver = DuctbankFieldSolver(config=config, table=table, model=model, soil_table=soil_table)
    if run_field and clean.conduits:
        field_result = solver.solve(clean, progress_callback=progress_callback)
        if not field_result.converged:
            issues.append(
                warning(
                    "solver-not-converged",
                    "field",
                    f"Residual {field_result.residual:.4g} °C after {field_result.iterations} sweeps.",
                )
            )

    if run_finite:
        for row in rows:
            if row.breakdown is None:
                continue
            result = finite_ampacity(clean, row.tag, solver)
            row.finite_ampacity = result.ampacity
            if result.available and not result.bracketed:
                issues.append(
                    warning(
                        "finite-not-bracketed",
                        f"cables.{row.tag}",
                        "Conduit temperature stayed below the rating up to the search limit.",
                    )
                )

    for row in rows:
        row.over_limit = over_limit(row.estimated_load_a, row.ampacity, row.finite_ampacity)

    logger.debug("Analysed %d cable(s) with %d warning(s)", len(rows), len(issues))
    return DuctbankReport(
        rows=rows,
        field_result=field_result,
        fill=conduit_fill(clean.conduits, clean.cables),
        issues=issues,
    )
