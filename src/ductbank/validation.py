"""Range clamping and data-quality checks applied before any solve."""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import List, Optional, Tuple

from ductbank.errors import Issue, warning
from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import Cable, DuctbankSnapshot
from ductbank.model.layout import conduit_fill
from ductbank.model.materials import (
    DEFAULT_SOIL_RESISTIVITY,
    DEFAULT_SOIL_TABLE,
    SoilResistivityTable,
    insulation_temp_limit,
)

logger = logging.getLogger(__name__)

MOISTURE_RANGE = (0.0, 100.0)
DEPTH_RANGE_IN = (0.0, 120.0)
SPACING_RANGE_IN = (1.0, 24.0)
LOAD_RANGE_A = (0.0, 2000.0)
MIN_GRID_SIZE = 4


def _clamp(
    value: float,
    bounds: Tuple[float, float],
    code: str,
    path: str,
    label: str,
    issues: List[Issue],
    default: Optional[float] = None,
) -> float:
    low, high = bounds
    if math.isnan(value):
        fallback = low if default is None else default
        issues.append(warning(code, path, f"{label} is not a number; using {fallback:g}."))
        return fallback
    if value < low or value > high:
        clamped = min(max(value, low), high)
        issues.append(warning(code, path, f"{label} {value:g} outside [{low:g}, {high:g}]; using {clamped:g}."))
        logger.info("Clamped %s from %g to %g", path, value, clamped)
        return clamped
    return value


def sanitize_snapshot(
    snapshot: DuctbankSnapshot,
    *,
    table: Optional[ConductorPropertyTable] = None,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
) -> Tuple[DuctbankSnapshot, List[Issue]]:
    """
    Return a copy of ``snapshot`` with out-of-range inputs clamped, plus warnings.

    Nothing here raises: unresolved conduit references, unknown conductor sizes
    and rating mismatches are reported and left for the calculators to skip.
    """
    table = table or ConductorPropertyTable.default()
    issues: List[Issue] = []
    params = snapshot.params
    layout = snapshot.layout

    soil = _clamp(
        params.soil_resistivity,
        (soil_table.minimum, soil_table.maximum),
        "soil-resistivity-range",
        "params.soil_resistivity",
        "Soil resistivity",
        issues,
        default=soil_table.clamp(DEFAULT_SOIL_RESISTIVITY),
    )
    moisture = _clamp(
        params.moisture_percent, MOISTURE_RANGE, "moisture-range", "params.moisture_percent", "Moisture", issues
    )
    depth = _clamp(
        params.ductbank_depth_in, DEPTH_RANGE_IN, "depth-range", "params.ductbank_depth_in", "Ductbank depth", issues
    )
    grid_size = params.grid_size
    if grid_size < MIN_GRID_SIZE:
        issues.append(
            warning("grid-size-range", "params.grid_size", f"Grid size {grid_size} raised to {MIN_GRID_SIZE}.")
        )
        grid_size = MIN_GRID_SIZE
    h_spacing = _clamp(
        layout.h_spacing_in, SPACING_RANGE_IN, "spacing-range", "layout.h_spacing_in", "Horizontal spacing", issues
    )
    v_spacing = _clamp(
        layout.v_spacing_in, SPACING_RANGE_IN, "spacing-range", "layout.v_spacing_in", "Vertical spacing", issues
    )

    for conduit in snapshot.conduits:
        if not conduit.is_valid():
            issues.append(
                warning(
                    "unknown-conduit-size",
                    f"conduits.{conduit.conduit_id}",
                    f"No area for {conduit.conduit_type} {conduit.trade_size}; conduit is ignored.",
                )
            )

    cables = [_check_cable(cable, snapshot, params.conductor_rating_c, table, issues) for cable in snapshot.cables]

    for fill in conduit_fill(snapshot.conduits, snapshot.cables).values():
        if fill.over_limit:
            issues.append(
                warning(
                    "conduit-overfill",
                    f"conduits.{fill.conduit_id}",
                    f"Fill {fill.fill_percent:.1f}% exceeds the {fill.limit_percent:g}% limit.",
                )
            )

    sanitized = replace(
        snapshot,
        cables=tuple(cables),
        params=replace(
            params,
            soil_resistivity=soil,
            moisture_percent=moisture,
            ductbank_depth_in=depth,
            grid_size=grid_size,
        ),
        layout=replace(layout, h_spacing_in=h_spacing, v_spacing_in=v_spacing),
    )
    return sanitized, issues


def _check_cable(
    cable: Cable,
    snapshot: DuctbankSnapshot,
    rating_c: float,
    table: ConductorPropertyTable,
    issues: List[Issue],
) -> Cable:
    path = f"cables.{cable.tag}"
    load = _clamp(cable.estimated_load_a, LOAD_RANGE_A, "load-range", f"{path}.estimated_load_a", "Load", issues)

    if snapshot.conduit(cable.conduit_id) is None:
        issues.append(
            warning(
                "unresolved-conduit",
                f"{path}.conduit_id",
                f"Conduit {cable.conduit_id!r} not found; cable excluded from the thermal model.",
            )
        )

    props = table.get(cable.conductor_size)
    if props is None:
        issues.append(
            warning("invalid-conductor-size", f"{path}.conductor_size", f"Invalid conductor size: {cable.conductor_size!r}")
        )
    elif not cable.insulation_thickness_in:
        issues.append(
            warning(
                "missing-insulation-thickness",
                f"{path}.insulation_thickness_in",
                f"No insulation thickness; using {props.insulation_thickness_in or 0.0:g} in from the conductor table.",
            )
        )

    if cable.insulation_rating_c is not None and cable.insulation_rating_c != rating_c:
        issues.append(
            warning(
                "rating-mismatch",
                f"{path}.insulation_rating_c",
                f"Insulation rated {cable.insulation_rating_c:g} °C but the conductor rating is {rating_c:g} °C.",
            )
        )
    limit = insulation_temp_limit(cable.insulation_type)
    if limit is not None and rating_c > limit:
        issues.append(
            warning(
                "insulation-limit",
                f"{path}.insulation_type",
                f"{cable.insulation_type} is limited to {limit:g} °C, below the {rating_c:g} °C rating.",
            )
        )

    if load != cable.estimated_load_a:
        return cable.with_load(load)
    return cable
