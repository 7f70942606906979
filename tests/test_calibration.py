import pytest

from ductbank.ampacity import DEFAULT_MODEL_PARAMS, AmpacityModelParams, calibrate_model
from ductbank.ampacity.calibration import DEFAULT_TARGETS, CalibrationTarget, _target_errors
from ductbank.model import Cable, ConductorPropertyTable


def test_calibration_never_worse_than_starting_point():
    table = ConductorPropertyTable.default()
    start = max(_target_errors(DEFAULT_TARGETS, DEFAULT_MODEL_PARAMS, table))
    result = calibrate_model()
    assert result.max_error <= start
    assert len(result.errors) == len(DEFAULT_TARGETS)
    assert max(result.errors) == pytest.approx(result.max_error)


def test_calibrated_steel_default_tracks_pvc():
    result = calibrate_model()
    params = result.params
    if params != DEFAULT_MODEL_PARAMS:
        assert params.default_duct_rth_steel == pytest.approx(params.default_duct_rth_pvc - 0.02)
        assert 3.0 <= params.air_thermal_resistance <= 3.8
        assert 0.26 <= params.insulation_thermal_conductivity <= 0.34


def test_calibration_leaves_base_untouched():
    base = AmpacityModelParams(soil_resistance_factor=1.5)
    result = calibrate_model(base=base)
    assert base.soil_resistance_factor == 1.5
    assert result.params.soil_resistance_factor == 1.5


def test_unknown_target_size_counts_as_infinite_error():
    target = CalibrationTarget(
        cable=Cable(tag="X", conduit_id=None, conductor_size="22 AWG"),
        conductor_rating_c=90.0,
        reference_a=20.0,
    )
    errors = _target_errors([target], DEFAULT_MODEL_PARAMS, ConductorPropertyTable.default())
    assert errors == [float("inf")]
