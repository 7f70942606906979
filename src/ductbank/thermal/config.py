from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SolveMethod(Enum):
    """How the steady-state field is obtained."""

    RELAXATION = "relaxation"
    DIRECT = "direct"


@dataclass(frozen=True)
class SolverConfig:
    """Numerical settings for the finite-difference field solve."""

    max_iterations: int = 500
    tolerance_c: float = 0.01
    surface_convection_w_per_m2k: float = 10.0
    scale_px_per_in: float = 40.0
    margin_px: float = 20.0
    progress_interval: int = 25
    method: SolveMethod = SolveMethod.RELAXATION

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_iterations", max(1, int(self.max_iterations)))
        object.__setattr__(self, "tolerance_c", max(float(self.tolerance_c), 0.0))
        object.__setattr__(self, "progress_interval", max(1, int(self.progress_interval)))
        if self.scale_px_per_in <= 0.0:
            raise ValueError("Drawing scale must be positive.")


DEFAULT_SOLVER_CONFIG = SolverConfig()
