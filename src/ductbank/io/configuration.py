from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ductbank.model.conductors import ConductorPropertyTable
from ductbank.model.ductbank import (
    Cable,
    Conduit,
    DuctbankSnapshot,
    HeatSource,
    HeatSourceShape,
    InstallationMedium,
    LayoutSettings,
    ThermalParameters,
)


def save_snapshot(snapshot: DuctbankSnapshot, path: Path) -> None:
    """Persist ``snapshot`` to ``path`` in JSON format."""
    path.write_text(json.dumps(snapshot_to_payload(snapshot), indent=2))


def load_snapshot(path: Path) -> DuctbankSnapshot:
    """Load a snapshot previously written by :func:`save_snapshot` or exported by the ductbank tables."""
    return snapshot_from_payload(json.loads(path.read_text()))


def load_conductor_table(path: Path) -> ConductorPropertyTable:
    """Read a ``size -> {rdc_cu, rdc_al, area_cm, insulation_thickness}`` JSON file."""
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Conductor property file must contain an object: {path}")
    return ConductorPropertyTable.from_records(data)


def save_conductor_table(table: ConductorPropertyTable, path: Path) -> None:
    path.write_text(json.dumps(table.to_records(), indent=2))


# ---------------------------------------------------------------------------
# Serialisation helpers


def snapshot_to_payload(snapshot: DuctbankSnapshot) -> Dict[str, Any]:
    return {
        "conduits": [_conduit_to_payload(conduit) for conduit in snapshot.conduits],
        "cables": [_cable_to_payload(cable) for cable in snapshot.cables],
        "heatSources": [_heat_source_to_payload(source) for source in snapshot.heat_sources],
        "params": _params_to_payload(snapshot.params),
        "layout": _layout_to_payload(snapshot.layout),
    }


def snapshot_from_payload(payload: Mapping[str, Any]) -> DuctbankSnapshot:
    if not isinstance(payload, Mapping):
        raise ValueError("Ductbank payload must be an object.")
    conduits = [_conduit_from_payload(entry) for entry in _entries(payload, "conduits")]
    cables = [_cable_from_payload(entry) for entry in _entries(payload, "cables")]
    sources = [
        _heat_source_from_payload(entry)
        for entry in _entries(payload, "heatSources", "heat_sources")
    ]
    params_payload = payload.get("params") or {}
    layout_payload = payload.get("layout") or params_payload
    return DuctbankSnapshot.build(
        conduits=conduits,
        cables=cables,
        heat_sources=sources,
        params=_params_from_payload(params_payload),
        layout=_layout_from_payload(layout_payload),
    )


def _entries(payload: Mapping[str, Any], *keys: str) -> List[Mapping[str, Any]]:
    value = _pick(payload, *keys, default=[])
    if not isinstance(value, list):
        raise ValueError(f"{keys[0]} payload must be a list.")
    for entry in value:
        if not isinstance(entry, Mapping):
            raise ValueError(f"Invalid {keys[0]} entry: {entry}")
    return value


def _conduit_to_payload(conduit: Conduit) -> Dict[str, Any]:
    return {
        "id": conduit.conduit_id,
        "materialType": conduit.conduit_type,
        "tradeSize": conduit.trade_size,
        "x": conduit.x_in,
        "y": conduit.y_in,
    }


def _conduit_from_payload(payload: Mapping[str, Any]) -> Conduit:
    try:
        conduit_id = str(_require(payload, "id", "conduit_id", "conduitId"))
        conduit_type = str(_require(payload, "materialType", "conduit_type", "type"))
        trade_size = str(_require(payload, "tradeSize", "trade_size"))
    except KeyError as exc:
        raise ValueError(f"Invalid conduit payload: {payload}") from exc
    return Conduit(
        conduit_id=conduit_id,
        conduit_type=conduit_type,
        trade_size=trade_size,
        x_in=_float(payload.get("x"), 0.0),
        y_in=_float(payload.get("y"), 0.0),
    )


def _cable_to_payload(cable: Cable) -> Dict[str, Any]:
    return {
        "tag": cable.tag,
        "cableType": cable.cable_type,
        "diameterIn": cable.diameter_in,
        "conductorCount": cable.conductor_count,
        "conductorSize": cable.conductor_size,
        "conductorMaterial": cable.conductor_material,
        "insulationType": cable.insulation_type,
        "insulationRating": cable.insulation_rating_c,
        "insulationThicknessIn": cable.insulation_thickness_in,
        "voltageRating": cable.voltage_rating,
        "estimatedLoadAmps": cable.estimated_load_a,
        "conduitId": cable.conduit_id,
    }


def _cable_from_payload(payload: Mapping[str, Any]) -> Cable:
    try:
        tag = str(_require(payload, "tag"))
        size = str(_require(payload, "conductorSize", "conductor_size"))
    except KeyError as exc:
        raise ValueError(f"Invalid cable payload: {payload}") from exc
    conduit_id = _pick(payload, "conduitId", "conduit_id")
    count = _float(_pick(payload, "conductorCount", "conductors"), 1.0)
    return Cable(
        tag=tag,
        conduit_id=str(conduit_id) if conduit_id not in (None, "") else None,
        conductor_size=size,
        conductor_material=str(_pick(payload, "conductorMaterial", "conductor_material", default="Copper")),
        conductor_count=max(1, int(count)) if math.isfinite(count) else 1,
        cable_type=str(_pick(payload, "cableType", "cable_type", default="Power")),
        diameter_in=_float(_pick(payload, "diameterIn", "diameter"), 0.0),
        insulation_type=str(_pick(payload, "insulationType", "insulation_type", default="THHN")),
        insulation_rating_c=_maybe_float(_pick(payload, "insulationRating", "insulation_rating")),
        insulation_thickness_in=_maybe_float(_pick(payload, "insulationThicknessIn", "insulation_thickness")),
        voltage_rating=str(_pick(payload, "voltageRating", "voltage_rating", default="600V")),
        estimated_load_a=_float(_pick(payload, "estimatedLoadAmps", "est_load"), 0.0),
    )


def _heat_source_to_payload(source: HeatSource) -> Dict[str, Any]:
    return {
        "tag": source.tag,
        "shape": source.shape.value,
        "width": source.width_in,
        "height": source.height_in,
        "x": source.x_in,
        "y": source.y_in,
        "temperatureF": source.temperature_f,
    }


def _heat_source_from_payload(payload: Mapping[str, Any]) -> HeatSource:
    shape_value = str(payload.get("shape") or HeatSourceShape.SQUARE.value).lower()
    try:
        shape = HeatSourceShape(shape_value)
    except ValueError as exc:
        raise ValueError(f"Unknown heat source shape '{shape_value}'.") from exc
    return HeatSource(
        tag=str(payload.get("tag", "")),
        shape=shape,
        width_in=_float(payload.get("width"), 0.0),
        height_in=_float(payload.get("height"), 0.0),
        x_in=_float(payload.get("x"), 0.0),
        y_in=_float(payload.get("y"), 0.0),
        temperature_f=_maybe_float(_pick(payload, "temperatureF", "temperature")),
    )


def _params_to_payload(params: ThermalParameters) -> Dict[str, Any]:
    return {
        "soilResistivity": params.soil_resistivity,
        "moisturePercent": params.moisture_percent,
        "earthTempC": params.earth_temp_c,
        "airTempC": None if math.isnan(params.air_temp_c) else params.air_temp_c,
        "ductbankDepthIn": params.ductbank_depth_in,
        "concreteEncasement": params.concrete_encasement,
        "gridSize": params.grid_size,
        "ductThermalResistanceAdder": params.duct_thermal_resistance_adder,
        "conductorRatingC": params.conductor_rating_c,
        "medium": params.medium.value,
    }


def _params_from_payload(payload: Mapping[str, Any]) -> ThermalParameters:
    defaults = ThermalParameters()
    medium_value = str(payload.get("medium") or InstallationMedium.DUCTBANK.value).lower()
    try:
        medium = InstallationMedium(medium_value)
    except ValueError as exc:
        raise ValueError(f"Unknown installation medium '{medium_value}'.") from exc
    grid_size = _float(payload.get("gridSize"), float(defaults.grid_size))
    return ThermalParameters(
        soil_resistivity=_float(payload.get("soilResistivity"), defaults.soil_resistivity),
        moisture_percent=_float(_pick(payload, "moisturePercent", "moistureContent"), defaults.moisture_percent),
        earth_temp_c=_float(_pick(payload, "earthTempC", "earthTemp"), defaults.earth_temp_c),
        air_temp_c=_float(_pick(payload, "airTempC", "airTemp"), math.nan),
        ductbank_depth_in=_float(_pick(payload, "ductbankDepthIn", "ductbankDepth"), defaults.ductbank_depth_in),
        concrete_encasement=bool(payload.get("concreteEncasement", defaults.concrete_encasement)),
        grid_size=int(grid_size) if math.isfinite(grid_size) else defaults.grid_size,
        duct_thermal_resistance_adder=_float(
            _pick(payload, "ductThermalResistanceAdder", "ductThermRes"),
            defaults.duct_thermal_resistance_adder,
        ),
        conductor_rating_c=_float(_pick(payload, "conductorRatingC", "conductorRating"), defaults.conductor_rating_c),
        medium=medium,
    )


def _layout_to_payload(layout: LayoutSettings) -> Dict[str, Any]:
    return {
        "hSpacing": layout.h_spacing_in,
        "vSpacing": layout.v_spacing_in,
        "topPad": layout.top_pad_in,
        "bottomPad": layout.bottom_pad_in,
        "leftPad": layout.left_pad_in,
        "rightPad": layout.right_pad_in,
        "perRow": layout.per_row,
    }


def _layout_from_payload(payload: Mapping[str, Any]) -> LayoutSettings:
    defaults = LayoutSettings()
    per_row = _maybe_float(payload.get("perRow"))
    return LayoutSettings(
        h_spacing_in=_float(payload.get("hSpacing"), defaults.h_spacing_in),
        v_spacing_in=_float(payload.get("vSpacing"), defaults.v_spacing_in),
        top_pad_in=_float(payload.get("topPad"), defaults.top_pad_in),
        bottom_pad_in=_float(payload.get("bottomPad"), defaults.bottom_pad_in),
        left_pad_in=_float(payload.get("leftPad"), defaults.left_pad_in),
        right_pad_in=_float(payload.get("rightPad"), defaults.right_pad_in),
        per_row=int(per_row) if per_row and per_row > 0 else None,
    )


def _pick(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _require(payload: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(payload, *keys)
    if value is None or value == "":
        raise KeyError(keys[0])
    return value


def _maybe_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _float(value: Any, default: float) -> float:
    result = _maybe_float(value)
    return default if result is None else result
