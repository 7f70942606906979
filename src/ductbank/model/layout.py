from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence

from .ductbank import Cable, Conduit, HeatSource, LayoutSettings


@dataclass(frozen=True)
class DrawingExtents:
    """Bounding box of the ductbank drawing, in inches from the drawing origin."""

    max_x_in: float
    max_y_in: float

    def width_px(self, scale_px_per_in: float, margin_px: float) -> int:
        # Room on the right for dimension labels.
        return half_up(self.max_x_in * scale_px_per_in + 2.0 * margin_px + 80.0)

    def height_px(self, scale_px_per_in: float, margin_px: float) -> int:
        return half_up(self.max_y_in * scale_px_per_in + 2.0 * margin_px + 20.0)


def half_up(value: float) -> int:
    """Round halves towards positive infinity, as the drawing canvas does."""
    return int(math.floor(value + 0.5))


def drawing_extents(
    conduits: Sequence[Conduit],
    heat_sources: Sequence[HeatSource] = (),
    settings: LayoutSettings = LayoutSettings(),
) -> DrawingExtents:
    max_x = 0.0
    max_y = 0.0
    for conduit in conduits:
        radius = conduit.inner_radius_in
        max_x = max(max_x, conduit.x_in + 2.0 * radius)
        max_y = max(max_y, conduit.y_in + 2.0 * radius)
    max_x += settings.right_pad_in
    max_y += settings.top_pad_in
    for source in heat_sources:
        right, bottom = source.extent_in
        max_x = max(max_x, right)
        max_y = max(max_y, bottom)
    return DrawingExtents(max_x_in=max_x, max_y_in=max_y)


def auto_place_conduits(conduits: Sequence[Conduit], settings: LayoutSettings = LayoutSettings()) -> List[Conduit]:
    """
    Arrange conduits in rows, returning repositioned copies.

    Each row is ``per_row`` conduits wide (default ``ceil(sqrt(n))``). Columns and
    rows are sized by their largest conduit so smaller conduits are centred on
    the same axes as their neighbours.
    """
    count = len(conduits)
    if count == 0:
        return []
    per_row = settings.per_row or max(1, math.ceil(math.sqrt(count)))
    num_rows = math.ceil(count / per_row)

    row_max = [0.0] * num_rows
    col_max = [0.0] * per_row
    for idx, conduit in enumerate(conduits):
        row, col = divmod(idx, per_row)
        radius = conduit.inner_radius_in
        row_max[row] = max(row_max[row], radius)
        col_max[col] = max(col_max[col], radius)

    placed: List[Conduit] = []
    y_cursor = settings.bottom_pad_in
    for row in range(num_rows):
        x_cursor = settings.left_pad_in
        for col in range(per_row):
            idx = row * per_row + col
            if idx >= count:
                break
            conduit = conduits[idx]
            radius = conduit.inner_radius_in
            placed.append(
                replace(
                    conduit,
                    x_in=x_cursor + (col_max[col] - radius),
                    y_in=y_cursor + (row_max[row] - radius),
                )
            )
            x_cursor += 2.0 * col_max[col] + settings.h_spacing_in
        y_cursor += 2.0 * row_max[row]
        if row < num_rows - 1:
            y_cursor += settings.v_spacing_in
    return placed


@dataclass(frozen=True)
class ConduitFill:
    conduit_id: str
    conduit_area_in2: float
    cable_area_in2: float
    cable_count: int

    @property
    def fill_percent(self) -> float:
        if self.conduit_area_in2 <= 0.0:
            return math.inf if self.cable_area_in2 > 0.0 else 0.0
        return self.cable_area_in2 / self.conduit_area_in2 * 100.0

    @property
    def limit_percent(self) -> float:
        # NEC Chapter 9 Table 1
        if self.cable_count == 1:
            return 53.0
        if self.cable_count == 2:
            return 31.0
        return 40.0

    @property
    def over_limit(self) -> bool:
        return self.cable_count > 0 and self.fill_percent > self.limit_percent

    @property
    def near_limit(self) -> bool:
        return not self.over_limit and self.cable_count > 0 and self.fill_percent > 0.8 * self.limit_percent


def conduit_fill(conduits: Sequence[Conduit], cables: Sequence[Cable]) -> Dict[str, ConduitFill]:
    areas: Dict[str, float] = {conduit.conduit_id: 0.0 for conduit in conduits}
    counts: Dict[str, int] = {conduit.conduit_id: 0 for conduit in conduits}
    for cable in cables:
        if cable.conduit_id not in areas:
            continue
        areas[cable.conduit_id] += math.pi * (cable.diameter_in / 2.0) ** 2
        counts[cable.conduit_id] += 1
    return {
        conduit.conduit_id: ConduitFill(
            conduit_id=conduit.conduit_id,
            conduit_area_in2=conduit.area_in2,
            cable_area_in2=areas[conduit.conduit_id],
            cable_count=counts[conduit.conduit_id],
        )
        for conduit in conduits
    }
