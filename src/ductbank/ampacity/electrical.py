from __future__ import annotations

import re
from typing import Any, Optional, Sequence, Tuple

from ductbank.model.conductors import CMIL_TO_MM2, ConductorPropertyTable, size_to_area
from ductbank.model.materials import ConductorMaterial, conductor_material

# (kcmil, Yc) knots for the AC/DC resistance ratio increment.
SKIN_EFFECT_KNOTS: Sequence[Tuple[float, float]] = (
    (0.0, 0.0),
    (100.0, 0.0),
    (250.0, 0.05),
    (500.0, 0.1),
    (1000.0, 0.15),
    (2000.0, 0.2),
)

# (kV, °C) knots for the insulation dielectric-loss temperature rise.
DIELECTRIC_RISE_KNOTS: Sequence[Tuple[float, float]] = (
    (0.0, 0.0),
    (2.0, 0.0),
    (5.0, 5.0),
    (15.0, 10.0),
    (25.0, 15.0),
    (35.0, 20.0),
)

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d*\.?\d+(?:[eE][-+]?\d+)?)\s*(k?)", re.IGNORECASE)


def dc_resistance(
    size: Any,
    material: Optional[str],
    temp_c: float = 20.0,
    table: Optional[ConductorPropertyTable] = None,
) -> float:
    """
    DC resistance of one conductor in Ω/m at ``temp_c``.

    The property table's 20 °C value wins over the resistivity/area estimate.
    An unrecognised size yields 0.0, which callers treat as "unavailable".
    """
    metal = conductor_material(material)
    base = _table_resistance(size, metal, table)
    if base is None:
        area_cm = size_to_area(size, table)
        if area_cm <= 0.0:
            return 0.0
        base = metal.electrical_resistivity_ohm_mm2_per_m / (area_cm * CMIL_TO_MM2)
    return base * (1.0 + metal.temp_coefficient_per_c * (temp_c - 20.0))


def _table_resistance(
    size: Any,
    metal: ConductorMaterial,
    table: Optional[ConductorPropertyTable],
) -> Optional[float]:
    if table is None:
        return None
    entry = table.get(size)
    if entry is None:
        return None
    value = entry.rdc_for(metal)
    if value is None or value <= 0.0:
        return None
    return value


def skin_effect(size: Any, table: Optional[ConductorPropertyTable] = None) -> float:
    """Skin-effect factor Yc for a conductor size."""
    area_kcmil = size_to_area(size, table) / 1000.0
    if area_kcmil <= 0.0:
        return 0.0
    return interpolate(SKIN_EFFECT_KNOTS, area_kcmil)


def dielectric_rise(voltage: Any) -> float:
    """Dielectric-loss temperature rise (°C) for a voltage rating such as ``"600V"`` or ``"15 kV"``."""
    return interpolate(DIELECTRIC_RISE_KNOTS, parse_voltage(voltage) / 1000.0)


def parse_voltage(voltage: Any) -> float:
    """Volts from a rating; only the leading number is read, 0.0 when there is none."""
    if voltage is None:
        return 0.0
    if isinstance(voltage, (int, float)):
        return float(voltage)
    match = _LEADING_NUMBER.match(str(voltage))
    if not match:
        return 0.0
    value = float(match.group(1))
    if match.group(2):
        value *= 1000.0
    return value


def interpolate(knots: Sequence[Tuple[float, float]], x: float) -> float:
    """Piecewise-linear lookup, clamped to the first and last knot values."""
    if x <= knots[0][0]:
        return knots[0][1]
    for (x0, y0), (x1, y1) in zip(knots, knots[1:]):
        if x == x1:
            return y1
        if x < x1:
            t = (x - x0) / (x1 - x0)
            return y0 + t * (y1 - y0)
    return knots[-1][1]
