from dataclasses import replace

from ductbank.model import Cable, Conduit, DuctbankSnapshot, LayoutSettings, ThermalParameters
from ductbank.validation import sanitize_snapshot


def _codes(issues):
    return {issue.code for issue in issues}


def test_clean_snapshot_only_notes_table_insulation(single_conduit_snapshot):
    clean, issues = sanitize_snapshot(single_conduit_snapshot)
    assert _codes(issues) == {"missing-insulation-thickness"}
    assert clean.params == single_conduit_snapshot.params


def test_out_of_range_inputs_are_clamped(single_conduit_snapshot):
    params = ThermalParameters(soil_resistivity=500.0, moisture_percent=-5.0, ductbank_depth_in=400.0, grid_size=2)
    snapshot = replace(single_conduit_snapshot, params=params, layout=LayoutSettings(h_spacing_in=0.2, v_spacing_in=40))
    clean, issues = sanitize_snapshot(snapshot)
    assert clean.params.soil_resistivity == 150.0
    assert clean.params.moisture_percent == 0.0
    assert clean.params.ductbank_depth_in == 120.0
    assert clean.params.grid_size == 4
    assert clean.layout.h_spacing_in == 1.0
    assert clean.layout.v_spacing_in == 24.0
    assert {
        "soil-resistivity-range",
        "moisture-range",
        "depth-range",
        "grid-size-range",
        "spacing-range",
    } <= _codes(issues)
    assert snapshot.params.soil_resistivity == 500.0


def test_cable_problems_are_reported_not_raised():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    cables = [
        Cable(tag="A", conduit_id="C9", conductor_size="500 kcmil", insulation_thickness_in=0.1),
        Cable(tag="B", conduit_id="C1", conductor_size="22 AWG"),
        Cable(tag="C", conduit_id="C1", conductor_size="4/0", insulation_rating_c=75.0, insulation_thickness_in=0.08),
        Cable(tag="D", conduit_id="C1", conductor_size="4/0", insulation_type="TW", insulation_thickness_in=0.08),
        Cable(tag="E", conduit_id="C1", conductor_size="4/0", estimated_load_a=5000.0, insulation_thickness_in=0.08),
    ]
    clean, issues = sanitize_snapshot(DuctbankSnapshot.build(conduits=[conduit], cables=cables))
    by_path = {issue.path: issue.code for issue in issues}
    assert by_path["cables.A.conduit_id"] == "unresolved-conduit"
    assert by_path["cables.B.conductor_size"] == "invalid-conductor-size"
    assert by_path["cables.C.insulation_rating_c"] == "rating-mismatch"
    assert by_path["cables.D.insulation_type"] == "insulation-limit"
    assert by_path["cables.E.estimated_load_a"] == "load-range"
    assert clean.cable("E").estimated_load_a == 2000.0
    assert [cable.tag for cable in clean.cables] == ["A", "B", "C", "D", "E"]


def test_unknown_conduit_and_overfill_are_flagged():
    conduits = [Conduit("C1", "PVC Sch 40", "4"), Conduit("C2", "Clay tile", "4")]
    fat = Cable(tag="F1", conduit_id="C1", conductor_size="500", diameter_in=3.5, insulation_thickness_in=0.1)
    _, issues = sanitize_snapshot(DuctbankSnapshot.build(conduits=conduits, cables=[fat]))
    codes = _codes(issues)
    assert "unknown-conduit-size" in codes
    assert "conduit-overfill" in codes


def test_issue_string_is_readable():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    cable = Cable(tag="F1", conduit_id="C1", conductor_size="22 AWG")
    _, issues = sanitize_snapshot(DuctbankSnapshot.build(conduits=[conduit], cables=[cable]))
    assert str(issues[0]).startswith("[warning] cables.F1")
    assert issues[0].to_dict()["severity"] == "warning"


def test_missing_soil_resistivity_falls_back_to_default(single_conduit_snapshot):
    snapshot = single_conduit_snapshot.with_params(soil_resistivity=float("nan"))
    clean, issues = sanitize_snapshot(snapshot)
    assert clean.params.soil_resistivity == 90.0
    soil_issues = [issue for issue in issues if issue.code == "soil-resistivity-range"]
    assert len(soil_issues) == 1
    assert "using 90" in soil_issues[0].message
