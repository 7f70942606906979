from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

import numpy as np
from numpy.typing import NDArray
from scipy.sparse import csr_matrix
from scipy.sparse.linalg import spsolve

from ductbank.ampacity.model_params import DEFAULT_MODEL_PARAMS, AmpacityModelParams
from ductbank.ampacity.thermal_resistance import duct_thermal_resistance
from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import DuctbankSnapshot
from ductbank.model.materials import DEFAULT_SOIL_TABLE, SoilResistivityTable

from .config import DEFAULT_SOLVER_CONFIG, SolveMethod, SolverConfig
from .grid_builder import FieldProblem, GridLayout, build_field_problem

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class SweepProgress:
    iteration: int
    residual: float


@dataclass
class FieldSolveResult:
    """Steady-state temperature field and per-conduit temperatures (°C)."""

    grid: List[List[float]]
    conduit_temps: Dict[str, float]
    iterations: int
    residual: float
    ambient: float
    converged: bool
    layout: GridLayout
    conduit_power_w_per_m: Dict[str, float] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def max_temp_c(self) -> float:
        return max(max(row) for row in self.grid)

    @property
    def min_temp_c(self) -> float:
        return min(min(row) for row in self.grid)

    def to_dict(self) -> dict:
        return {
            "grid": self.grid,
            "conduitTemps": dict(self.conduit_temps),
            "iterations": self.iterations,
            "residual": self.residual,
            "ambient": self.ambient,
            "converged": self.converged,
        }


def relaxation_sweep(grid: NDArray[np.float64], problem: FieldProblem) -> NDArray[np.float64]:
    """
    One synchronous update of every cell from ``grid``.

    Precedence per cell: pinned heat source, then the earth-temperature
    bottom/left/right boundary, then the Robin top row, then the stencil.
    """
    updated = np.empty_like(grid)
    updated[1:-1, 1:-1] = 0.25 * (
        grid[1:-1, :-2]
        + grid[1:-1, 2:]
        + grid[:-2, 1:-1]
        + grid[2:, 1:-1]
        + problem.generation[1:-1, 1:-1]
    )
    updated[0, :] = (grid[1, :] + problem.biot * problem.air_temp_c) / (1.0 + problem.biot)
    updated[-1, :] = problem.earth_temp_c
    updated[:, 0] = problem.earth_temp_c
    updated[:, -1] = problem.earth_temp_c
    mask = problem.source_mask
    updated[mask] = problem.source_temp_c[mask]
    return updated


class RelaxationRun:
    """
    A field solve advanced one sweep at a time.

    Iterating yields a :class:`SweepProgress` after every sweep until the
    residual drops to the tolerance, the iteration cap is reached or
    :meth:`cancel` is called. :meth:`result` finishes the run if needed.
    """

    def __init__(
        self,
        problem: FieldProblem,
        snapshot: DuctbankSnapshot,
        config: SolverConfig,
        model: AmpacityModelParams,
    ) -> None:
        self._problem = problem
        self._snapshot = snapshot
        self._config = config
        self._model = model
        self._grid = problem.initial_grid()
        self._iteration = 0
        self._residual = math.inf
        self._cancel = threading.Event()

    @property
    def problem(self) -> FieldProblem:
        return self._problem

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def residual(self) -> float:
        return self._residual

    @property
    def converged(self) -> bool:
        return self._residual <= self._config.tolerance_c

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        return self.cancelled or self.converged or self._iteration >= self._config.max_iterations

    def cancel(self) -> None:
        self._cancel.set()

    def step(self) -> SweepProgress:
        updated = relaxation_sweep(self._grid, self._problem)
        self._residual = float(np.max(np.abs(updated - self._grid)))
        self._grid = updated
        self._iteration += 1
        return SweepProgress(self._iteration, self._residual)

    def __iter__(self) -> Iterator[SweepProgress]:
        while not self.done:
            yield self.step()

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> "FieldSolveResult":
        cap = self._config.max_iterations
        interval = self._config.progress_interval
        for progress in self:
            if progress_callback and progress.iteration % interval == 0:
                progress_callback(progress.iteration, cap)
        if progress_callback and (self._iteration == 0 or self._iteration % interval):
            progress_callback(self._iteration, cap)
        return self.result()

    def result(self) -> FieldSolveResult:
        if not self.done:
            for _ in self:
                pass
        if not self.converged and not self.cancelled:
            logger.warning(
                "Field solve stopped at the %d-iteration cap with residual %.4g °C",
                self._iteration,
                self._residual,
            )
        return _build_result(
            self._grid,
            self._problem,
            self._snapshot,
            self._model,
            iterations=self._iteration,
            residual=self._residual,
            converged=self.converged,
            cancelled=self.cancelled,
        )


class DuctbankFieldSolver:
    """Finite-difference steady-state conduction solver for a ductbank cross-section."""

    def __init__(
        self,
        *,
        config: SolverConfig = DEFAULT_SOLVER_CONFIG,
        table: Optional[ConductorPropertyTable] = None,
        model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
        soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
    ) -> None:
        self._config = config
        self._table = table or ConductorPropertyTable.default()
        self._model = model
        self._soil_table = soil_table

    @property
    def config(self) -> SolverConfig:
        return self._config

    @property
    def table(self) -> ConductorPropertyTable:
        return self._table

    @property
    def model(self) -> AmpacityModelParams:
        return self._model

    def prepare(self, snapshot: DuctbankSnapshot) -> FieldProblem:
        problem = build_field_problem(
            snapshot,
            self._config,
            table=self._table,
            soil_table=self._soil_table,
        )
        layout = problem.layout
        logger.debug(
            "Field grid %dx%d (step %d px, dx %.5f m, Bi %.4f) with %d loaded conduit(s)",
            layout.nx,
            layout.ny,
            layout.step_px,
            layout.dx_m,
            problem.biot,
            len(problem.conduits),
        )
        return problem

    def start(self, snapshot: DuctbankSnapshot) -> RelaxationRun:
        return RelaxationRun(self.prepare(snapshot), snapshot, self._config, self._model)

    def solve(
        self,
        snapshot: DuctbankSnapshot,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> FieldSolveResult:
        if self._config.method is SolveMethod.DIRECT:
            return self._solve_direct(snapshot, progress_callback)
        result = self.start(snapshot).run(progress_callback)
        logger.debug("Field solve finished after %d sweeps (residual %.4g)", result.iterations, result.residual)
        return result

    def _solve_direct(
        self,
        snapshot: DuctbankSnapshot,
        progress_callback: Optional[ProgressCallback],
    ) -> FieldSolveResult:
        problem = self.prepare(snapshot)
        matrix, rhs = assemble_system(problem)
        solution = np.asarray(spsolve(matrix, rhs), dtype=float)
        grid = solution.reshape((problem.layout.ny, problem.layout.nx))
        residual = float(np.max(np.abs(relaxation_sweep(grid, problem) - grid)))
        if progress_callback:
            progress_callback(1, 1)
        return _build_result(
            grid,
            problem,
            snapshot,
            self._model,
            iterations=1,
            residual=residual,
            converged=residual <= self._config.tolerance_c,
            cancelled=False,
        )


def assemble_system(problem: FieldProblem) -> tuple[csr_matrix, NDArray[np.float64]]:
    """
    Sparse linear system whose solution is the fixed point of :func:`relaxation_sweep`.

    Rows follow the same precedence as the sweep: pinned sources and the
    earth boundary are identity rows, the top row is the Robin relation and
    the interior carries the five-point stencil.
    """
    ny, nx = problem.layout.ny, problem.layout.nx
    index = np.arange(ny * nx).reshape((ny, nx))
    rows: List[NDArray[np.int64]] = []
    cols: List[NDArray[np.int64]] = []
    data: List[NDArray[np.float64]] = []
    rhs = np.zeros(ny * nx, dtype=float)

    fixed = np.zeros((ny, nx), dtype=bool)
    fixed[-1, :] = True
    fixed[:, 0] = True
    fixed[:, -1] = True
    fixed |= problem.source_mask
    top = np.zeros((ny, nx), dtype=bool)
    top[0, :] = True
    top &= ~fixed
    interior = ~(fixed | top)

    fixed_idx = index[fixed]
    rows.append(fixed_idx)
    cols.append(fixed_idx)
    data.append(np.ones(fixed_idx.size))
    rhs[fixed_idx] = np.where(problem.source_mask[fixed], problem.source_temp_c[fixed], problem.earth_temp_c)

    top_idx = index[top]
    below_idx = top_idx + nx
    rows.extend((top_idx, top_idx))
    cols.extend((top_idx, below_idx))
    data.extend((np.full(top_idx.size, 1.0 + problem.biot), np.full(top_idx.size, -1.0)))
    rhs[top_idx] = problem.biot * problem.air_temp_c

    interior_idx = index[interior]
    rows.append(interior_idx)
    cols.append(interior_idx)
    data.append(np.full(interior_idx.size, 4.0))
    for offset in (-1, 1, -nx, nx):
        rows.append(interior_idx)
        cols.append(interior_idx + offset)
        data.append(np.full(interior_idx.size, -1.0))
    rhs[interior_idx] = problem.generation[interior]

    matrix = csr_matrix(
        (np.concatenate(data), (np.concatenate(rows), np.concatenate(cols))),
        shape=(ny * nx, ny * nx),
    )
    return matrix, rhs


def _build_result(
    grid: NDArray[np.float64],
    problem: FieldProblem,
    snapshot: DuctbankSnapshot,
    model: AmpacityModelParams,
    *,
    iterations: int,
    residual: float,
    converged: bool,
    cancelled: bool,
) -> FieldSolveResult:
    params = snapshot.params
    temps: Dict[str, float] = {}
    powers: Dict[str, float] = {}
    for conduit_id, heat in problem.conduits.items():
        powers[conduit_id] = heat.power_w_per_m
        if not heat.cells:
            temps[conduit_id] = math.nan
            continue
        js, is_ = zip(*heat.cells)
        base = float(np.mean(grid[list(js), list(is_)]))
        wall = duct_thermal_resistance(heat.conduit, params.concrete_encasement, model)
        temps[conduit_id] = base + heat.power_w_per_m * (wall + params.duct_thermal_resistance_adder)
    return FieldSolveResult(
        grid=grid.tolist(),
        conduit_temps=temps,
        iterations=iterations,
        residual=residual,
        ambient=problem.earth_temp_c,
        converged=converged,
        layout=problem.layout,
        conduit_power_w_per_m=powers,
        cancelled=cancelled,
    )


def solve_field(
    snapshot: DuctbankSnapshot,
    *,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
    table: Optional[ConductorPropertyTable] = None,
    model: AmpacityModelParams = DEFAULT_MODEL_PARAMS,
    soil_table: SoilResistivityTable = DEFAULT_SOIL_TABLE,
    progress_callback: Optional[ProgressCallback] = None,
) -> FieldSolveResult:
    solver = DuctbankFieldSolver(config=config, table=table, model=model, soil_table=soil_table)
    return solver.solve(snapshot, progress_callback=progress_callback)
