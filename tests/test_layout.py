import math

import pytest

from ductbank.model import (
    Cable,
    Conduit,
    HeatSource,
    HeatSourceShape,
    LayoutSettings,
    auto_place_conduits,
    conduit_fill,
    drawing_extents,
)

RADIUS_4IN_PVC = math.sqrt(12.554 / math.pi)


def test_auto_place_square_bank():
    conduits = [Conduit(f"C{idx}", "PVC Sch 40", "4") for idx in range(1, 5)]
    placed = auto_place_conduits(conduits, LayoutSettings(h_spacing_in=3.0, v_spacing_in=4.0))
    pitch_x = 2 * RADIUS_4IN_PVC + 3.0
    pitch_y = 2 * RADIUS_4IN_PVC + 4.0
    positions = [(c.x_in, c.y_in) for c in placed]
    assert positions == [
        pytest.approx((0.0, 0.0)),
        pytest.approx((pitch_x, 0.0)),
        pytest.approx((0.0, pitch_y)),
        pytest.approx((pitch_x, pitch_y)),
    ]
    assert all(c.x_in == 0.0 for c in conduits)


def test_auto_place_centres_smaller_conduits():
    conduits = [Conduit("C1", "PVC Sch 40", "4"), Conduit("C2", "PVC Sch 40", "2")]
    placed = auto_place_conduits(conduits, LayoutSettings(per_row=1, left_pad_in=1.0, bottom_pad_in=2.0))
    small = placed[1]
    assert small.x_in + small.inner_radius_in == pytest.approx(1.0 + RADIUS_4IN_PVC)
    assert small.y_in == pytest.approx(2.0 + 2 * RADIUS_4IN_PVC + 4.0)


def test_auto_place_empty():
    assert auto_place_conduits([]) == []


def test_drawing_extents_include_pads_and_heat_sources():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    extents = drawing_extents([conduit], (), LayoutSettings(right_pad_in=2.0, top_pad_in=1.0))
    assert extents.max_x_in == pytest.approx(2 * RADIUS_4IN_PVC + 2.0)
    assert extents.max_y_in == pytest.approx(2 * RADIUS_4IN_PVC + 1.0)

    source = HeatSource("HS", HeatSourceShape.CIRCLE, 2.0, 4.0, 10.0, 0.0)
    extents = drawing_extents([conduit], [source])
    assert extents.max_x_in == pytest.approx(14.0)
    assert extents.max_y_in == pytest.approx(4.0)


def test_single_cable_fill_limit():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    fat = Cable(tag="F1", conduit_id="C1", conductor_size="500", diameter_in=3.0)
    fill = conduit_fill([conduit], [fat])["C1"]
    assert fill.limit_percent == 53.0
    assert fill.fill_percent == pytest.approx(math.pi * 1.5 ** 2 / 12.554 * 100)
    assert fill.over_limit


def test_fill_limits_by_cable_count():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    cables = [Cable(tag=f"F{idx}", conduit_id="C1", conductor_size="500", diameter_in=1.1) for idx in range(2)]
    fill = conduit_fill([conduit], cables)["C1"]
    assert fill.limit_percent == 31.0
    assert not fill.over_limit
    assert not fill.near_limit

    cables.append(Cable(tag="F3", conduit_id="C1", conductor_size="500", diameter_in=1.8))
    fill = conduit_fill([conduit], cables)["C1"]
    assert fill.limit_percent == 40.0
    assert fill.near_limit


def test_fill_ignores_orphan_cables():
    conduit = Conduit("C1", "PVC Sch 40", "4")
    orphan = Cable(tag="F1", conduit_id="C7", conductor_size="500", diameter_in=1.0)
    fill = conduit_fill([conduit], [orphan])["C1"]
    assert fill.cable_count == 0
    assert fill.fill_percent == 0.0
