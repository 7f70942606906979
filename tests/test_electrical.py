import pytest

from ductbank.ampacity.electrical import (
    DIELECTRIC_RISE_KNOTS,
    dc_resistance,
    dielectric_rise,
    interpolate,
    parse_voltage,
    skin_effect,
)
from ductbank.model.conductors import ConductorProperties, ConductorPropertyTable, normalize_size, size_to_area


def test_skin_effect_hits_knots_exactly():
    assert skin_effect("250 kcmil") == 0.05
    assert skin_effect("500 kcmil") == 0.1
    assert skin_effect("2000 kcmil") == 0.2
    assert skin_effect("2500 kcmil") == 0.2


def test_skin_effect_is_zero_for_small_conductors():
    assert skin_effect("4/0 AWG") == 0.0
    assert skin_effect("#12") == 0.0
    assert skin_effect("not a size") == 0.0


def test_skin_effect_interpolates_between_knots():
    assert skin_effect("750 kcmil") == pytest.approx(0.125)


def test_dielectric_rise_from_voltage_rating():
    assert dielectric_rise("600V") == 0.0
    assert dielectric_rise("5 kV") == 5.0
    assert dielectric_rise("15kV") == 10.0
    assert dielectric_rise("10 kV") == pytest.approx(7.5)
    assert dielectric_rise("69 kV") == DIELECTRIC_RISE_KNOTS[-1][1]
    assert dielectric_rise(None) == 0.0


def test_parse_voltage_reads_leading_number_only():
    assert parse_voltage("480/277V") == 480.0
    assert parse_voltage("15kV") == 15000.0
    assert parse_voltage("rated") == 0.0
    assert parse_voltage(4160) == 4160.0


def test_interpolate_clamps_outside_range():
    knots = ((1.0, 10.0), (2.0, 20.0))
    assert interpolate(knots, 0.0) == 10.0
    assert interpolate(knots, 3.0) == 20.0
    assert interpolate(knots, 1.5) == pytest.approx(15.0)


def test_normalize_size_variants():
    assert normalize_size("#4/0") == "4/0 AWG"
    assert normalize_size("500") == "500 kcmil"
    assert normalize_size("500 MCM") == "500 kcmil"
    assert normalize_size("12 AWG") == "12 AWG"


def test_dc_resistance_prefers_table_value():
    table = ConductorPropertyTable.default()
    expected = 0.0258 / (1.0 + 0.00393 * 55.0) / 304.8
    assert dc_resistance("500 kcmil", "Copper", 20.0, table) == pytest.approx(expected)


def test_dc_resistance_falls_back_to_resistivity_and_area():
    expected = 0.017241 / (500000 * 0.0005067)
    assert dc_resistance("500 kcmil", "Copper", 20.0) == pytest.approx(expected)


def test_dc_resistance_scales_with_temperature():
    table = ConductorPropertyTable.default()
    r20 = dc_resistance("4/0", "Aluminum", 20.0, table)
    r90 = dc_resistance("4/0", "Aluminum", 90.0, table)
    assert r90 == pytest.approx(r20 * (1.0 + 0.00403 * 70.0))
    assert r20 > dc_resistance("4/0", "Copper", 20.0, table)


def test_unknown_size_has_no_resistance():
    assert dc_resistance("banana", "Copper", 90.0) == 0.0
    assert size_to_area("banana") == 0.0


def test_override_entry_takes_precedence():
    table = ConductorPropertyTable.default().with_entry(
        ConductorProperties(size="500 MCM", area_cm=500000, rdc_cu=1.0e-4, insulation_thickness_in=0.12)
    )
    assert dc_resistance("500 kcmil", "Copper", 20.0, table) == pytest.approx(1.0e-4)
    assert table.get("500").insulation_thickness_in == 0.12
    assert len(table) == len(ConductorPropertyTable.default())
    assert ConductorPropertyTable.default().get("500").rdc_cu != pytest.approx(1.0e-4)
