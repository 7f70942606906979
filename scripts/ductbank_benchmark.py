#!/usr/bin/env python3

"""Standalone benchmark for the ductbank thermal engine.

Builds a single 4" PVC conduit and a 2x2 concrete-encased bank of 500 kcmil
copper feeders, prints the Neher-McGrath terms for every cable, runs the
finite-difference field through the Qt worker and bisects the finite-difference
ampacity, so the numbers can be tracked outside any GUI. A heat map of each
field is written to the working directory and shown.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sys

from PySide6.QtCore import QCoreApplication
import matplotlib.image as mpimg
import matplotlib.pyplot as plt

from ductbank import analyze_ductbank, configure_logging
from ductbank.model import DuctbankSnapshot, ThermalParameters
from ductbank.thermal import DuctbankFieldSolver, FieldSolveResult, SolverConfig
from ductbank.thermal.field_preview import save_field_preview
from ductbank.thermal.worker import FieldSolveWorker, SolveRequest

if __package__:
    from ._benchmark_utils import make_benchmark_snapshot, make_conduit_bank, make_power_cable
else:  # Allow execution via `python ductbank_benchmark.py`
    script_dir = Path(__file__).resolve().parent
    if str(script_dir) not in sys.path:
        sys.path.insert(0, str(script_dir))
    from _benchmark_utils import make_benchmark_snapshot, make_conduit_bank, make_power_cable  # type: ignore  # noqa: E402


@dataclass
class Scenario:
    name: str
    snapshot: DuctbankSnapshot


def solve_with_worker(snapshot: DuctbankSnapshot, solver: DuctbankFieldSolver) -> FieldSolveResult:
    """Drive a worker synchronously and collect what it emits."""
    outcome = {}
    worker = FieldSolveWorker(SolveRequest(snapshot), solver)
    worker.progress.connect(lambda iteration, cap: print(f"  sweep {iteration}/{cap}"))
    worker.finished.connect(lambda result: outcome.setdefault("result", result))
    worker.error.connect(lambda message: outcome.setdefault("error", message))
    worker.run()
    if "error" in outcome:
        raise RuntimeError(outcome["error"])
    return outcome["result"]


def run_scenario(scenario: Scenario) -> None:
    config = SolverConfig(max_iterations=2000, tolerance_c=0.005, progress_interval=250)
    solver = DuctbankFieldSolver(config=config)

    print(f"\n=== {scenario.name} ===")
    report = analyze_ductbank(scenario.snapshot, config=config, run_field=False)
    for row in report.rows:
        terms = row.breakdown
        print(f"{row.tag} in {row.conduit_id} (load {row.estimated_load_a:.0f} A):")
        if terms is None:
            print("  no usable conduit, skipped")
            continue
        print(f"  Rdc   = {terms.rdc:.6e} Ω/m   Yc = {terms.yc:.3f}   ΔTd = {terms.delta_td:.2f} °C")
        print(f"  Rcond = {terms.r_cond:.6f}  Rins = {terms.r_ins:.6f}  Rduct = {terms.r_duct:.6f}  Rsoil = {terms.r_soil:.6f} °C·m/W")
        print(f"  Rca   = {terms.r_ca:.6f} °C·m/W -> analytical ampacity {terms.ampacity:.1f} A")
        print(f"  Finite ampacity {row.finite_ampacity:.1f} A, over limit: {row.over_limit}")
    for issue in report.issues:
        print(f"  warning {issue}")

    result = solve_with_worker(scenario.snapshot, solver)
    layout = result.layout
    print(f"Grid: {layout.nx} x {layout.ny} cells of {layout.dx_m * 1000:.2f} mm, iterations: {result.iterations}, converged={result.converged}")
    for conduit_id, temp in result.conduit_temps.items():
        power = result.conduit_power_w_per_m.get(conduit_id, 0.0)
        print(f"  {conduit_id}: {power:.2f} W/m -> {temp:.2f} °C")
    print(f"  Field extremes: min={result.min_temp_c:.2f} °C, max={result.max_temp_c:.2f} °C")

    preview_path = save_field_preview(
        result,
        Path.cwd() / f"ductbank_field_{scenario.name.replace(' ', '_').lower()}.png",
        snapshot=scenario.snapshot,
        title=f"Temperature field: {scenario.name}",
    )
    print(f"Field preview saved to {preview_path}")
    image = mpimg.imread(preview_path)
    plt.figure(figsize=(8, 6))
    plt.imshow(image)
    plt.axis("off")
    plt.title(f"Temperature field: {scenario.name}")
    plt.show()


def main() -> None:
    configure_logging()
    app = QCoreApplication([])

    single = Scenario(
        name="Single 4in PVC",
        snapshot=make_benchmark_snapshot(
            make_conduit_bank(1),
            [make_power_cable("F1", "C1", load_a=400.0)],
        ),
    )

    bank = Scenario(
        name="2x2 concrete encased bank",
        snapshot=make_benchmark_snapshot(
            make_conduit_bank(4),
            [make_power_cable(f"F{idx}", f"C{idx}", load_a=300.0) for idx in range(1, 5)],
            params=ThermalParameters(
                soil_resistivity=90.0,
                earth_temp_c=20.0,
                ductbank_depth_in=36.0,
                concrete_encasement=True,
            ),
        ),
    )

    for scenario in (single, bank):
        run_scenario(scenario)

    app.quit()


if __name__ == "__main__":
    main()
