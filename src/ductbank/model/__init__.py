"""Domain models for underground ductbank thermal design."""

from .conductors import (
    AWG_AREA,
    ConductorProperties,
    ConductorPropertyTable,
    normalize_size,
    size_to_area,
)
from .ductbank import (
    Cable,
    Conduit,
    DuctbankSnapshot,
    HeatSource,
    HeatSourceShape,
    InstallationMedium,
    LayoutSettings,
    ThermalParameters,
)
from .layout import ConduitFill, DrawingExtents, auto_place_conduits, conduit_fill, drawing_extents
from . import materials

__all__ = [
    "AWG_AREA",
    "Cable",
    "ConductorProperties",
    "ConductorPropertyTable",
    "Conduit",
    "ConduitFill",
    "DrawingExtents",
    "DuctbankSnapshot",
    "HeatSource",
    "HeatSourceShape",
    "InstallationMedium",
    "LayoutSettings",
    "ThermalParameters",
    "auto_place_conduits",
    "conduit_fill",
    "drawing_extents",
    "materials",
    "normalize_size",
    "size_to_area",
]
