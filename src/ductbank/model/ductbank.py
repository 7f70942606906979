from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .materials import conduit_area_in2


class HeatSourceShape(Enum):
    """Footprint of an external fixed-temperature region."""

    CIRCLE = "circle"
    SQUARE = "square"


class InstallationMedium(Enum):
    """Surroundings assumed by the analytical model."""

    DUCTBANK = "ductbank"
    AIR = "air"


@dataclass(frozen=True)
class Conduit:
    """Conduit placed in the ductbank; ``x_in``/``y_in`` locate its bounding square's corner."""

    conduit_id: str
    conduit_type: str
    trade_size: str
    x_in: float = 0.0
    y_in: float = 0.0

    @property
    def area_in2(self) -> float:
        return conduit_area_in2(self.conduit_type, self.trade_size)

    @property
    def inner_radius_in(self) -> float:
        area = self.area_in2
        return math.sqrt(area / math.pi) if area > 0.0 else 0.0

    @property
    def diameter_in(self) -> float:
        return 2.0 * self.inner_radius_in

    def is_valid(self) -> bool:
        return self.area_in2 > 0.0


@dataclass(frozen=True)
class Cable:
    tag: str
    conduit_id: Optional[str]
    conductor_size: str
    conductor_material: str = "Copper"
    conductor_count: int = 1
    cable_type: str = "Power"
    diameter_in: float = 0.0
    insulation_type: str = "THHN"
    insulation_rating_c: Optional[float] = 90.0
    insulation_thickness_in: Optional[float] = None
    voltage_rating: str = "600V"
    estimated_load_a: float = 0.0

    def with_load(self, load_a: float) -> "Cable":
        return replace(self, estimated_load_a=load_a)


@dataclass(frozen=True)
class HeatSource:
    """Region held at a fixed temperature (°F) throughout a field solve."""

    tag: str
    shape: HeatSourceShape
    width_in: float
    height_in: float
    x_in: float
    y_in: float
    temperature_f: Optional[float] = None

    def temperature_c(self, fallback_c: float) -> float:
        if self.temperature_f is None or math.isnan(self.temperature_f):
            return fallback_c
        return (self.temperature_f - 32.0) / 1.8

    @property
    def extent_in(self) -> Tuple[float, float]:
        """Right and bottom edge of the footprint in drawing coordinates."""
        if self.shape is HeatSourceShape.CIRCLE:
            radius = max(self.width_in, self.height_in) / 2.0
            return self.x_in + 2.0 * radius, self.y_in + 2.0 * radius
        return self.x_in + self.width_in, self.y_in + self.height_in


@dataclass(frozen=True)
class ThermalParameters:
    """Site and solver inputs shared by the analytical and finite-difference paths."""

    soil_resistivity: float = 90.0
    moisture_percent: float = 0.0
    earth_temp_c: float = 20.0
    air_temp_c: float = math.nan
    ductbank_depth_in: float = 36.0
    concrete_encasement: bool = False
    grid_size: int = 20
    duct_thermal_resistance_adder: float = 0.0
    conductor_rating_c: float = 90.0
    medium: InstallationMedium = InstallationMedium.DUCTBANK

    @property
    def ambient_temp_c(self) -> float:
        if math.isnan(self.air_temp_c):
            return self.earth_temp_c
        return max(self.earth_temp_c, self.air_temp_c)

    @property
    def surface_air_temp_c(self) -> float:
        return self.earth_temp_c if math.isnan(self.air_temp_c) else self.air_temp_c


@dataclass(frozen=True)
class LayoutSettings:
    """Spacing and padding (inches) used for automatic placement and drawing extents."""

    h_spacing_in: float = 3.0
    v_spacing_in: float = 4.0
    top_pad_in: float = 0.0
    bottom_pad_in: float = 0.0
    left_pad_in: float = 0.0
    right_pad_in: float = 0.0
    per_row: Optional[int] = None


@dataclass(frozen=True)
class DuctbankSnapshot:
    """Immutable view of a ductbank handed to a single solve."""

    conduits: Tuple[Conduit, ...] = ()
    cables: Tuple[Cable, ...] = ()
    heat_sources: Tuple[HeatSource, ...] = ()
    params: ThermalParameters = field(default_factory=ThermalParameters)
    layout: LayoutSettings = field(default_factory=LayoutSettings)

    @classmethod
    def build(
        cls,
        conduits: Iterable[Conduit] = (),
        cables: Iterable[Cable] = (),
        heat_sources: Iterable[HeatSource] = (),
        params: Optional[ThermalParameters] = None,
        layout: Optional[LayoutSettings] = None,
    ) -> "DuctbankSnapshot":
        return cls(
            conduits=tuple(conduits),
            cables=tuple(cables),
            heat_sources=tuple(heat_sources),
            params=params or ThermalParameters(),
            layout=layout or LayoutSettings(),
        )

    def conduit(self, conduit_id: Optional[str]) -> Optional[Conduit]:
        if conduit_id is None:
            return None
        for conduit in self.conduits:
            if conduit.conduit_id == conduit_id:
                return conduit
        return None

    def cable(self, tag: str) -> Optional[Cable]:
        for cable in self.cables:
            if cable.tag == tag:
                return cable
        return None

    def cables_by_conduit(self) -> Dict[str, List[Cable]]:
        """Group cables whose conduit reference resolves; orphans are omitted."""
        known = {conduit.conduit_id for conduit in self.conduits}
        grouped: Dict[str, List[Cable]] = {}
        for cable in self.cables:
            if cable.conduit_id in known:
                grouped.setdefault(cable.conduit_id, []).append(cable)
        return grouped

    def with_cable_load(self, tag: str, load_a: float) -> "DuctbankSnapshot":
        cables = tuple(cable.with_load(load_a) if cable.tag == tag else cable for cable in self.cables)
        return replace(self, cables=cables)

    def with_params(self, **changes) -> "DuctbankSnapshot":
        return replace(self, params=replace(self.params, **changes))
