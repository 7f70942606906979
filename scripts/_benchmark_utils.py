from __future__ import annotations

from typing import List, Optional, Sequence

from ductbank.model import (
    Cable,
    Conduit,
    DuctbankSnapshot,
    HeatSource,
    LayoutSettings,
    ThermalParameters,
    auto_place_conduits,
)


def make_power_cable(
    tag: str,
    conduit_id: str,
    *,
    size: str = "500 kcmil",
    material: str = "Copper",
    conductors: int = 3,
    load_a: float = 400.0,
    voltage: str = "600V",
) -> Cable:
    """Return a THHN power cable with table insulation thickness."""
    return Cable(
        tag=tag,
        conduit_id=conduit_id,
        conductor_size=size,
        conductor_material=material,
        conductor_count=conductors,
        diameter_in=1.1,
        insulation_type="THHN",
        insulation_rating_c=90.0,
        voltage_rating=voltage,
        estimated_load_a=load_a,
    )


def make_conduit_bank(
    count: int,
    *,
    conduit_type: str = "PVC Sch 40",
    trade_size: str = "4",
    layout: Optional[LayoutSettings] = None,
) -> List[Conduit]:
    conduits = [Conduit(f"C{idx + 1}", conduit_type, trade_size) for idx in range(count)]
    return auto_place_conduits(conduits, layout or LayoutSettings())


def make_benchmark_snapshot(
    conduits: Sequence[Conduit],
    cables: Sequence[Cable],
    *,
    params: Optional[ThermalParameters] = None,
    heat_sources: Sequence[HeatSource] = (),
    layout: Optional[LayoutSettings] = None,
) -> DuctbankSnapshot:
    return DuctbankSnapshot.build(
        conduits=conduits,
        cables=cables,
        heat_sources=heat_sources,
        params=params or ThermalParameters(soil_resistivity=90.0, earth_temp_c=20.0, ductbank_depth_in=36.0),
        layout=layout,
    )
