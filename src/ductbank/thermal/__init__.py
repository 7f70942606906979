"""
Finite-difference thermal field for ductbank cross-sections.

The solver relaxes a cell-centred grid laid over the ductbank drawing, with
earth temperature on the bottom and sides and a convective top surface. The
Qt worker (:mod:`ductbank.thermal.worker`) and the heat-map renderer
(:mod:`ductbank.thermal.field_preview`) are imported separately so batch use
does not load PySide6 or matplotlib.
"""

from .bisection import FiniteAmpacityResult, finite_ampacity
from .config import DEFAULT_SOLVER_CONFIG, SolveMethod, SolverConfig
from .grid_builder import FieldProblem, GridLayout, build_field_problem, build_grid_layout
from .solver import (
    DuctbankFieldSolver,
    FieldSolveResult,
    RelaxationRun,
    SweepProgress,
    assemble_system,
    relaxation_sweep,
    solve_field,
)

__all__ = [
    "DEFAULT_SOLVER_CONFIG",
    "DuctbankFieldSolver",
    "FieldProblem",
    "FieldSolveResult",
    "FiniteAmpacityResult",
    "GridLayout",
    "RelaxationRun",
    "SolveMethod",
    "SolverConfig",
    "SweepProgress",
    "assemble_system",
    "build_field_problem",
    "build_grid_layout",
    "finite_ampacity",
    "relaxation_sweep",
    "solve_field",
]
