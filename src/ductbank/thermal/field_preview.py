from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.patches import Circle
import numpy as np

from ductbank.model.ductbank import DuctbankSnapshot

from .grid_builder import GridLayout
from .solver import FieldSolveResult


def save_field_preview(
    result: FieldSolveResult,
    output_path: str | Path,
    *,
    snapshot: Optional[DuctbankSnapshot] = None,
    title: str | None = None,
    dpi: int = 150,
) -> Path:
    """
    Render a solved temperature field to an image for inspection.

    Args:
        result: Field returned by the solver.
        output_path: Target path for the PNG file.
        snapshot: When given, conduit outlines and temperatures are drawn on top.
        title: Optional title to add to the plot.
        dpi: Resolution for the output image.

    Returns:
        Path to the written image.
    """
    path = Path(output_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    grid = np.asarray(result.grid, dtype=float)
    layout = result.layout
    extent_mm = (0.0, layout.nx * layout.dx_m * 1000.0, layout.ny * layout.dx_m * 1000.0, 0.0)

    fig, ax = plt.subplots(figsize=(8, 6))
    image = ax.imshow(grid, cmap="inferno", extent=extent_mm, origin="upper", interpolation="bilinear")
    fig.colorbar(image, ax=ax, label="Temperature [°C]")
    if snapshot is not None:
        _draw_conduits(ax, snapshot, result, layout)

    if title:
        ax.set_title(title)
    ax.set_xlabel("x [mm]")
    ax.set_ylabel("depth below grade [mm]")
    ax.set_aspect("equal", adjustable="box")
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def _draw_conduits(ax, snapshot: DuctbankSnapshot, result: FieldSolveResult, layout: GridLayout) -> None:
    cell_mm = layout.dx_m * 1000.0
    for conduit in snapshot.conduits:
        if not conduit.is_valid():
            continue
        radius_in = conduit.inner_radius_in
        # Cell centres sit on integer indices, so shift by half a cell into image coordinates.
        cx = ((conduit.x_in + radius_in) * layout.scale_px_per_in + layout.margin_px) / layout.step_px + 0.5
        cy = ((conduit.y_in + radius_in) * layout.scale_px_per_in + layout.margin_px) / layout.step_px + 0.5
        radius = radius_in * layout.scale_px_per_in / layout.step_px
        ax.add_patch(
            Circle((cx * cell_mm, cy * cell_mm), radius * cell_mm, fill=False, edgecolor="#4fc3f7", linewidth=1.2)
        )
        temp = result.conduit_temps.get(conduit.conduit_id)
        label = conduit.conduit_id if temp is None else f"{conduit.conduit_id}\n{temp:.1f} °C"
        ax.annotate(label, (cx * cell_mm, cy * cell_mm), color="white", ha="center", va="center", fontsize=8)
