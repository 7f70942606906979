import pytest

from ductbank.model import Cable, Conduit, DuctbankSnapshot, ThermalParameters
from ductbank.thermal import DuctbankFieldSolver, SolverConfig


@pytest.fixture
def pvc_conduit():
    return Conduit("C1", "PVC Sch 40", "4", 0.0, 0.0)


@pytest.fixture
def feeder_cable():
    return Cable(
        tag="F1",
        conduit_id="C1",
        conductor_size="500 kcmil",
        conductor_material="Copper",
        conductor_count=3,
        diameter_in=1.1,
        voltage_rating="600V",
        estimated_load_a=400.0,
    )


@pytest.fixture
def base_params():
    return ThermalParameters(soil_resistivity=90.0, earth_temp_c=20.0, ductbank_depth_in=36.0, grid_size=20)


@pytest.fixture
def single_conduit_snapshot(pvc_conduit, feeder_cable, base_params):
    return DuctbankSnapshot.build(conduits=[pvc_conduit], cables=[feeder_cable], params=base_params)


@pytest.fixture
def tight_solver():
    return DuctbankFieldSolver(config=SolverConfig(max_iterations=20000, tolerance_c=1e-7))
