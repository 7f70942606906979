import math
from dataclasses import replace

import pytest

from ductbank.model import Cable, Conduit, DuctbankSnapshot
from ductbank.thermal import DuctbankFieldSolver, SolverConfig, finite_ampacity
from ductbank.thermal.bisection import TEMPERATURE_BAND_C


@pytest.fixture
def quick_solver():
    return DuctbankFieldSolver(config=SolverConfig(max_iterations=400, tolerance_c=0.01))


@pytest.fixture
def low_rating_snapshot(single_conduit_snapshot):
    return single_conduit_snapshot.with_params(conductor_rating_c=45.0)


def test_finite_ampacity_reproduces_rating(low_rating_snapshot, quick_solver):
    result = finite_ampacity(low_rating_snapshot, "F1", quick_solver)
    assert result.available
    assert result.bracketed
    assert result.converged
    assert 0 < result.ampacity < 2000

    check = quick_solver.solve(low_rating_snapshot.with_cable_load("F1", result.ampacity))
    assert abs(check.conduit_temps["C1"] - 45.0) <= TEMPERATURE_BAND_C + 1e-9


def test_finite_ampacity_leaves_snapshot_untouched(low_rating_snapshot, quick_solver):
    before = low_rating_snapshot.cable("F1")
    finite_ampacity(low_rating_snapshot, "F1", quick_solver)
    assert low_rating_snapshot.cable("F1") == before
    assert low_rating_snapshot.cable("F1").estimated_load_a == 400.0


def test_missing_conduit_gives_nan(single_conduit_snapshot, quick_solver):
    orphan = Cable(tag="F9", conduit_id="C9", conductor_size="500 kcmil")
    snapshot = DuctbankSnapshot.build(
        conduits=single_conduit_snapshot.conduits,
        cables=single_conduit_snapshot.cables + (orphan,),
        params=single_conduit_snapshot.params,
    )
    result = finite_ampacity(snapshot, "F9", quick_solver)
    assert math.isnan(result.ampacity)
    assert not result.available
    assert result.solves == 0


def test_unknown_cable_or_size_gives_nan(single_conduit_snapshot, quick_solver):
    assert not finite_ampacity(single_conduit_snapshot, "nope", quick_solver).available
    bad = replace(single_conduit_snapshot, cables=(Cable(tag="F1", conduit_id="C1", conductor_size="banana"),))
    assert not finite_ampacity(bad, "F1", quick_solver).available


def test_unreachable_rating_is_not_bracketed(single_conduit_snapshot, quick_solver):
    hot = single_conduit_snapshot.with_params(conductor_rating_c=5000.0)
    result = finite_ampacity(hot, "F1", quick_solver)
    assert result.available
    assert not result.bracketed
    assert result.ampacity <= 2000.0


def test_conduit_without_area_gives_nan(single_conduit_snapshot, quick_solver):
    clay = Conduit("C1", "Clay tile", "4")
    assert not clay.is_valid()
    snapshot = replace(single_conduit_snapshot, conduits=(clay,))
    result = finite_ampacity(snapshot, "F1", quick_solver)
    assert math.isnan(result.ampacity)
    assert not result.available
    assert result.solves == 0
