import math
from dataclasses import replace

import pytest

from ductbank import analyze_ductbank, over_limit
from ductbank.model import Cable, Conduit, DuctbankSnapshot, ThermalParameters
from ductbank.thermal import SolverConfig

QUICK = SolverConfig(max_iterations=300, tolerance_c=0.01)


@pytest.mark.parametrize(
    "load, analytical, finite, expected",
    [
        (100.0, math.nan, math.nan, False),
        (100.0, 90.0, math.nan, True),
        (100.0, math.nan, 95.0, True),
        (100.0, 200.0, 150.0, False),
        (100.0, 200.0, 99.0, True),
    ],
)
def test_over_limit(load, analytical, finite, expected):
    assert over_limit(load, analytical, finite) is expected


@pytest.fixture
def mixed_snapshot():
    conduits = [Conduit("C1", "PVC Sch 40", "4", 0.0, 0.0), Conduit("C2", "PVC Sch 40", "4", 7.0, 0.0)]
    cables = [
        Cable(tag="GOOD", conduit_id="C1", conductor_size="500 kcmil", conductor_count=3, estimated_load_a=400.0),
        Cable(tag="BAD", conduit_id="C2", conductor_size="22 AWG", estimated_load_a=10.0),
        Cable(tag="LOST", conduit_id="C9", conductor_size="4/0", estimated_load_a=100.0),
    ]
    return DuctbankSnapshot.build(conduits=conduits, cables=cables, params=ThermalParameters())


def test_batch_continues_past_bad_records(mixed_snapshot):
    report = analyze_ductbank(mixed_snapshot, config=QUICK, run_finite=False)
    good, bad, lost = (report.row(tag) for tag in ("GOOD", "BAD", "LOST"))

    assert good.ampacity > 0
    assert not good.over_limit
    assert math.isnan(bad.ampacity)
    assert bad.breakdown is not None
    assert lost.breakdown is None
    assert math.isnan(lost.ampacity)

    codes = {issue.code for issue in report.issues}
    assert {"invalid-conductor-size", "ampacity-unavailable", "unresolved-conduit"} <= codes
    assert report.field_result is not None
    assert set(report.field_result.conduit_temps) == {"C1", "C2"}
    assert set(report.fill) == {"C1", "C2"}


def test_field_and_finite_can_be_skipped(mixed_snapshot):
    report = analyze_ductbank(mixed_snapshot, run_field=False, run_finite=False)
    assert report.field_result is None
    assert all(math.isnan(row.finite_ampacity) for row in report.rows)


def test_finite_ampacity_flags_overload(single_conduit_snapshot):
    hot = single_conduit_snapshot.with_params(conductor_rating_c=45.0).with_cable_load("F1", 1500.0)
    report = analyze_ductbank(hot, config=QUICK, run_field=False)
    row = report.row("F1")
    assert row.finite_ampacity < 1500.0
    assert row.over_limit
    assert "rating-mismatch" in {issue.code for issue in report.issues}


def test_report_dict(single_conduit_snapshot):
    payload = analyze_ductbank(single_conduit_snapshot, config=QUICK, run_finite=False).to_dict()
    assert payload["cables"][0]["tag"] == "F1"
    assert "breakdown" in payload["cables"][0]
    assert "C1" in payload["field"]["conduitTemps"]
    assert payload["fill"]["C1"] > 0


def test_conduit_without_area_is_excluded(single_conduit_snapshot):
    clay = replace(single_conduit_snapshot, conduits=(Conduit("C1", "Clay tile", "4"),))
    report = analyze_ductbank(clay, config=QUICK)
    row = report.row("F1")
    assert row.breakdown is None
    assert math.isnan(row.ampacity)
    assert math.isnan(row.finite_ampacity)
    assert not row.over_limit
    assert "unknown-conduit-size" in {issue.code for issue in report.issues}


def test_missing_soil_resistivity_rates_like_default_soil(single_conduit_snapshot):
    unknown = analyze_ductbank(
        single_conduit_snapshot.with_params(soil_resistivity=math.nan), run_field=False, run_finite=False
    )
    default = analyze_ductbank(
        single_conduit_snapshot.with_params(soil_resistivity=90.0), run_field=False, run_finite=False
    )
    assert unknown.row("F1").ampacity == pytest.approx(default.row("F1").ampacity)
    assert unknown.row("F1").ampacity < 1000
