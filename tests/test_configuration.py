import json
import math

import pytest

from ductbank.io import (
    load_conductor_table,
    load_snapshot,
    save_conductor_table,
    save_snapshot,
    snapshot_from_payload,
)
from ductbank.model import (
    Cable,
    ConductorPropertyTable,
    Conduit,
    DuctbankSnapshot,
    HeatSource,
    HeatSourceShape,
    InstallationMedium,
    LayoutSettings,
    ThermalParameters,
)


def test_snapshot_round_trip(tmp_path):
    snapshot = DuctbankSnapshot.build(
        conduits=[Conduit("C1", "PVC Sch 40", "4", 0.0, 0.0), Conduit("C2", "RMC", "3", 7.0, 0.0)],
        cables=[
            Cable(tag="F1", conduit_id="C1", conductor_size="500 kcmil", conductor_count=3, estimated_load_a=400.0),
            Cable(tag="F2", conduit_id=None, conductor_size="4/0 AWG", conductor_material="Aluminum"),
        ],
        heat_sources=[HeatSource("HS1", HeatSourceShape.CIRCLE, 2.0, 2.0, 12.0, 4.0, temperature_f=150.0)],
        params=ThermalParameters(air_temp_c=25.0, concrete_encasement=True, medium=InstallationMedium.AIR),
        layout=LayoutSettings(per_row=2, right_pad_in=1.5),
    )
    path = tmp_path / "ductbank.json"
    save_snapshot(snapshot, path)
    assert load_snapshot(path) == snapshot


def test_payload_accepts_exported_field_names():
    payload = {
        "conduits": [{"conduit_id": "C1", "type": "PVC Sch 40", "trade_size": "4", "x": "1.5", "y": 0}],
        "cables": [
            {"tag": "F1", "conductor_size": "#4/0", "conduit_id": "C1", "est_load": "250", "conductors": 3},
        ],
        "params": {"soilResistivity": 120, "ductbankDepth": 48, "earthTemp": 15, "moistureContent": 10},
    }
    snapshot = snapshot_from_payload(payload)
    assert snapshot.conduit("C1").x_in == 1.5
    cable = snapshot.cable("F1")
    assert cable.estimated_load_a == 250.0
    assert cable.conductor_count == 3
    assert snapshot.params.ductbank_depth_in == 48.0
    assert snapshot.params.earth_temp_c == 15.0
    assert math.isnan(snapshot.params.air_temp_c)


def test_invalid_payloads_raise_value_error():
    with pytest.raises(ValueError):
        snapshot_from_payload({"conduits": "C1"})
    with pytest.raises(ValueError):
        snapshot_from_payload({"conduits": [{"id": "C1"}]})
    with pytest.raises(ValueError):
        snapshot_from_payload({"heatSources": [{"shape": "hexagon"}]})
    with pytest.raises(ValueError):
        snapshot_from_payload({"params": {"medium": "water"}})


def test_conductor_table_file_round_trip(tmp_path):
    path = tmp_path / "conductors.json"
    path.write_text(json.dumps({"500 MCM": {"area_cm": 500000, "rdc_cu": 7.0e-5, "insulation_thickness": 0.1}}))
    table = load_conductor_table(path)
    entry = table.get("500 kcmil")
    assert entry.rdc_cu == 7.0e-5
    assert entry.rdc_al is None

    out = tmp_path / "out.json"
    save_conductor_table(table, out)
    assert load_conductor_table(out).get("500").area_cm == 500000


def test_conductor_table_requires_area(tmp_path):
    path = tmp_path / "conductors.json"
    path.write_text(json.dumps({"4/0": {"rdc_cu": 1.0e-4}}))
    with pytest.raises(ValueError):
        load_conductor_table(path)


def test_default_table_covers_common_sizes():
    table = ConductorPropertyTable.default()
    for size in ("12 AWG", "#4/0", "500 kcmil", "1000"):
        assert size in table
    assert "22 AWG" not in table
