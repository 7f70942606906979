from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ductbank.ampacity.electrical import dc_resistance
from ductbank.ampacity.thermal_resistance import (
    INCH_TO_M,
    effective_soil_resistivity,
    soil_conductivity_w_per_mk,
)
from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import Cable, Conduit, DuctbankSnapshot, HeatSource, HeatSourceShape
from ductbank.model.layout import drawing_extents, half_up
from ductbank.model.materials import DEFAULT_SOIL_TABLE, SoilResistivityTable

from .config import DEFAULT_SOLVER_CONFIG, SolverConfig

Cell = Tuple[int, int]

_MIN_CELLS = 3


@dataclass(frozen=True)
class GridLayout:
    """Cell-centred grid laid over the ductbank drawing; row 0 is grade."""

    nx: int
    ny: int
    step_px: int
    dx_m: float
    width_px: int
    height_px: int
    scale_px_per_in: float
    margin_px: float

    def cell_index(self, value_in: float) -> int:
        """Grid index of a drawing coordinate (inches)."""
        return half_up((value_in * self.scale_px_per_in + self.margin_px) / self.step_px)

    def cell_radius(self, radius_in: float) -> int:
        return max(1, half_up(radius_in * self.scale_px_per_in / self.step_px))


@dataclass
class ConduitHeat:
    """Loss and footprint of one loaded conduit on the grid."""

    conduit: Conduit
    power_w_per_m: float
    centre: Cell
    radius_cells: int
    cells: List[Cell] = field(default_factory=list)


@dataclass
class FieldProblem:
    """Everything the relaxation needs, resolved once before the first sweep."""

    layout: GridLayout
    generation: NDArray[np.float64]
    source_mask: NDArray[np.bool_]
    source_temp_c: NDArray[np.float64]
    conduits: Dict[str, ConduitHeat]
    earth_temp_c: float
    air_temp_c: float
    soil_conductivity_w_per_mk: float
    effective_resistivity: float
    biot: float

    def initial_grid(self) -> NDArray[np.float64]:
        grid = np.full((self.layout.ny, self.layout.nx), self.earth_temp_c, dtype=float)
        grid[self.source_mask] = self.source_temp_c[self.source_mask]
        return grid


def build_grid_layout(snapshot: DuctbankSnapshot, config: SolverConfig = DEFAULT_SOLVER_CONFIG) -> GridLayout:
    conduits = [conduit for conduit in snapshot.conduits if conduit.is_valid()]
    extents = drawing_extents(conduits, snapshot.heat_sources, snapshot.layout)
    width_px = extents.width_px(config.scale_px_per_in, config.margin_px)
    height_px = extents.height_px(config.scale_px_per_in, config.margin_px)

    grid_size = max(1, int(snapshot.params.grid_size))
    step = max(1, math.ceil(max(width_px, height_px) / grid_size))
    return GridLayout(
        nx=max(_MIN_CELLS, math.ceil(width_px / step)),
        ny=max(_MIN_CELLS, math.ceil(height_px / step)),
        step_px=step,
        dx_m=INCH_TO_M / config.scale_px_per_in * step,
        width_px=width_px,
        height_px=height_px,
        scale_px_per_in=config.scale_px_per_in,
        margin_px=config.margin_px,
    )


def conduit_power(
    cables: Sequence[Cable],
    rating_c: float,
    table: Optional[ConductorPropertyTable] = None,
) -> float:
    """Joule loss (W/m) of every conductor in a conduit at the rating temperature."""
    total = 0.0
    for cable in cables:
        rdc = dc_resistance(cable.conductor_size, cable.conductor_material, rating_c, table)
        current = max(cable.estimated_load_a, 0.0)
        total += current * current * rdc * max(cable.conductor_count, 1)
    return total


def _disk_cells(layout: GridLayout, centre: Cell, radius: int) -> List[Cell]:
    cj, ci = centre
    cells = []
    for j in range(max(0, cj - radius), min(layout.ny - 1, cj + radius) + 1):
        for i in range(max(0, ci - radius), min(layout.nx - 1, ci + radius) + 1):
            if (i - ci) ** 2 + (j - cj) ** 2 <= radius * radius:
                cells.append((j, i))
    return cells


def _heat_source_cells(layout: GridLayout, source: HeatSource) -> List[Cell]:
    if source.shape is HeatSourceShape.CIRCLE:
        radius = max(source.width_in, source.height_in) / 2.0
        centre = (layout.cell_index(source.y_in + radius), layout.cell_index(source.x_in + radius))
        return _disk_cells(layout, centre, layout.cell_radius(radius))
    x1 = layout.cell_index(source.x_in)
    y1 = layout.cell_index(source.y_in)
    x2 = layout.cell_index(source.x_in + source.width_in)
    y2 = layout.cell_index(source.y_in + source.height_in)
    return [
        (j, i)
        for j in range(max(0, y1), min(layout.ny - 1, y2) + 1)
        for i in range(max(0, x1), min(layout.nx - 1, x2) + 1)
    ]


def build_field_problem(
    snapshot: DuctbankSnapshot,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
    *,
    table: Optional[ConductorPropertyTable] = None,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
) -> FieldProblem:
    """
    Rasterise conduit losses and heat sources onto the solver grid.

    Soil clamping and moisture de-rating happen here, once per solve. Cables
    whose conduit reference does not resolve contribute nothing.
    """
    params = snapshot.params
    layout = build_grid_layout(snapshot, config)
    rho = effective_soil_resistivity(params.soil_resistivity, params.moisture_percent, soil_table)
    k_soil = soil_conductivity_w_per_mk(rho)
    biot = config.surface_convection_w_per_m2k * layout.dx_m / k_soil
    earth = params.earth_temp_c

    generation = np.zeros((layout.ny, layout.nx), dtype=float)
    conduits: Dict[str, ConduitHeat] = {}
    for conduit_id, cables in snapshot.cables_by_conduit().items():
        conduit = snapshot.conduit(conduit_id)
        if conduit is None or not conduit.is_valid():
            continue
        radius_in = conduit.inner_radius_in
        power = conduit_power(cables, params.conductor_rating_c, table)
        centre = (layout.cell_index(conduit.y_in + radius_in), layout.cell_index(conduit.x_in + radius_in))
        heat = ConduitHeat(
            conduit=conduit,
            power_w_per_m=power,
            centre=centre,
            radius_cells=layout.cell_radius(radius_in),
        )
        heat.cells = _disk_cells(layout, centre, heat.radius_cells)
        radius_m = radius_in * INCH_TO_M
        q = power / (math.pi * radius_m * radius_m) * layout.dx_m * layout.dx_m / k_soil
        for j, i in heat.cells:
            generation[j, i] += q
        conduits[conduit_id] = heat

    source_mask = np.zeros((layout.ny, layout.nx), dtype=bool)
    source_temp = np.full((layout.ny, layout.nx), earth, dtype=float)
    for source in snapshot.heat_sources:
        temp_c = source.temperature_c(earth)
        for j, i in _heat_source_cells(layout, source):
            source_mask[j, i] = True
            source_temp[j, i] = temp_c

    return FieldProblem(
        layout=layout,
        generation=generation,
        source_mask=source_mask,
        source_temp_c=source_temp,
        conduits=conduits,
        earth_temp_c=earth,
        air_temp_c=params.surface_air_temp_c,
        soil_conductivity_w_per_mk=k_soil,
        effective_resistivity=rho,
        biot=biot,
    )
