# =============================================================================
# tests/test_data_validation.py - Zootechnical Cross-Validation Tests
# =============================================================================
# Tests for agroinsight/data_validation.py.
# Covers:
#   - Daily gain, feed conversion and IEP consistency checks
#   - Biological plausibility bounds per species
#   - Row-wise cross-validation reports
# =============================================================================

import pytest

from agroinsight.config import Config
from agroinsight.data_validation import (
    DataValidator,
    get_plausibility_rule,
    perform_cross_validation,
    validate_biological_plausibility,
    validate_fcr,
    validate_gpd,
    validate_iep,
)


# =============================================================================
# Derived metric checks
# =============================================================================

class TestValidateGPD:

    def test_consistent(self):
        result = validate_gpd(300, 450, 100, 1.5)
        assert result.valid
        assert result.errors == ()
        assert result.warnings == ()
        assert result.calculated == pytest.approx(1.5)

    def test_weight_loss(self):
        result = validate_gpd(450, 300, 100)
        assert not result.valid
        assert "lower than initial weight" in result.errors[0]

    def test_large_mismatch(self):
        result = validate_gpd(300, 450, 100, 3.0)
        assert not result.valid
        assert result.errors[0].startswith("Significant mismatch")
        assert result.suggestions

    def test_small_mismatch_warns(self):
        # 10% off: above half the tolerance, below the tolerance
        result = validate_gpd(300, 450, 100, 1.65)
        assert result.valid
        assert len(result.warnings) == 1

    def test_suggests_calculated_value(self):
        result = validate_gpd(300, 450, 100)
        assert result.valid
        assert result.suggestions == ("Calculated daily gain: 1.500 kg/day",)

    def test_tolerance(self):
        assert validate_gpd(300, 450, 100, 1.65, tolerance=0.05).valid is False

    @pytest.mark.parametrize("args", [(None, 450, 100), (300, None, 100), (300, 450, 0)])
    def test_missing_inputs(self, args):
        result = validate_gpd(*args, 1.5)
        assert result.valid
        assert result.to_dict() == {
            "valid": True, "warnings": [], "errors": [], "suggestions": [], "calculated": None,
        }

    def test_zero_gain(self):
        assert validate_gpd(300, 300, 100, 0).valid
        assert not validate_gpd(300, 300, 100, 0.5).valid


class TestValidateFCR:

    def test_consistent(self):
        result = validate_fcr(300, 100, 3.0)
        assert result.valid
        assert result.errors == ()

    @pytest.mark.parametrize("gain", [-10, 0])
    def test_gain_must_be_positive(self, gain):
        result = validate_fcr(300, gain)
        assert not result.valid
        assert result.errors == ("Total weight gain must be positive",)

    def test_large_mismatch(self):
        assert not validate_fcr(300, 100, 5.0).valid

    def test_small_mismatch_warns(self):
        result = validate_fcr(300, 100, 3.3)
        assert result.valid
        assert len(result.warnings) == 1

    def test_missing_inputs(self):
        assert validate_fcr(None, 100, 3.0).valid


class TestValidateIEP:

    def test_calculated(self):
        # viability in percent
        result = validate_iep(95, 2.5, 42, 1.8)
        assert result.calculated == pytest.approx(314.15, abs=0.01)
        assert result.suggestions == ("Calculated IEP: 314 points",)

    def test_consistent(self):
        assert validate_iep(95, 2.5, 42, 1.8, 314).valid

    def test_large_mismatch(self):
        result = validate_iep(95, 2.5, 42, 1.8, 500)
        assert not result.valid
        assert result.errors

    def test_small_mismatch_warns(self):
        result = validate_iep(95, 2.5, 42, 1.8, 335)
        assert result.valid
        assert len(result.warnings) == 1

    def test_missing_inputs(self):
        assert validate_iep(95, 2.5, 0, 1.8, 314).calculated is None


# =============================================================================
# Biological plausibility
# =============================================================================

class TestBiologicalPlausibility:

    def test_normal_value(self):
        result = validate_biological_plausibility("gpd", 1.2, "bovine")
        assert result.valid
        assert result.warnings == ()
        assert result.suggestions == ()

    @pytest.mark.parametrize("value", [5.0, -1])
    def test_outside_limits(self, value):
        result = validate_biological_plausibility("gpd", value, "bovine")
        assert not result.valid
        assert "outside the biologically plausible range" in result.errors[0]

    def test_unusually_high(self):
        result = validate_biological_plausibility("gpd", 2.5, "bovine")
        assert result.valid
        assert "unusually high" in result.warnings[0]
        assert result.suggestions

    def test_unusually_low(self):
        result = validate_biological_plausibility("gpd", 0.1, "bovine")
        assert result.valid
        assert "unusually low" in result.warnings[0]

    def test_species_specific_rules(self):
        assert validate_biological_plausibility("conversao", 2.5, "swine").valid
        assert not validate_biological_plausibility("conversao", 2.5, "bovine").valid
        assert not validate_biological_plausibility("gpd", 0.5, "poultry").valid

    def test_species_alias(self):
        assert get_plausibility_rule("gpd", "suino") == get_plausibility_rule("gpd", "swine")

    def test_species_independent_rule(self):
        assert not validate_biological_plausibility("mortalidade", 150, "bovine").valid
        assert validate_biological_plausibility("mortalidade", 15).warnings

    def test_unknown_metric(self):
        result = validate_biological_plausibility("altura_cernelha", 9999, "bovine")
        assert result.valid
        assert result.errors == ()
        assert result.warnings == ()

    def test_gpd_without_species_rule(self):
        assert get_plausibility_rule("gpd", "sheep") is None


# =============================================================================
# Row-wise cross-validation
# =============================================================================

@pytest.fixture
def feedlot_rows():
    return [
        {"animal": "1", "peso_inicial": 300, "peso_final": 450, "dias": 100, "gpd": 1.5},
        {"animal": "2", "peso_inicial": 280, "peso_final": 420, "dias": 100, "gpd": 1.4},
        {"animal": "3", "peso_inicial": 320, "peso_final": 480, "dias": 100, "gpd": 1.6},
    ]


class TestCrossValidation:

    def test_consistent_dataset(self, feedlot_rows):
        report = perform_cross_validation(feedlot_rows, "bovine")
        assert report.overall_valid
        assert report.total_errors == 0
        assert report.total_warnings == 0
        assert [r.row for r in report.rows] == [1, 2, 3]
        assert set(report.rows[0].validations) == {"gpd", "gpd_plausibility"}

    def test_inconsistent_row(self, feedlot_rows):
        feedlot_rows[1]["gpd"] = 3.5
        report = perform_cross_validation(feedlot_rows, "bovine")
        assert not report.overall_valid
        # mismatch plus a value above the bovine maximum
        assert report.total_errors == 2
        row = report.rows[1]
        assert row.row == 2
        assert not row.validations["gpd"].valid
        assert not row.validations["gpd_plausibility"].valid

    def test_rows_without_checks_are_omitted(self, feedlot_rows):
        rows = [{"animal": "0", "raca": "Nelore"}] + feedlot_rows
        report = perform_cross_validation(rows, "bovine")
        assert [r.row for r in report.rows] == [2, 3, 4]

    def test_locale_numbers(self):
        rows = [{"Peso_Inicial": "300,0", "Peso_Final": "450,0", "Dias": "100", "GPD": "1,5"}]
        report = perform_cross_validation(rows, "gado")
        assert report.overall_valid
        assert report.rows[0].validations["gpd"].calculated == pytest.approx(1.5)

    def test_feed_conversion(self):
        rows = [{"consumo_total": 300, "ganho_total": 100, "conversao_alimentar": 5.0}]
        report = perform_cross_validation(rows, "bovine")
        assert not report.rows[0].validations["fcr"].valid
        assert report.rows[0].validations["conversao_alimentar_plausibility"].valid

    def test_iep_only_for_poultry(self):
        rows = [{"viabilidade": 95, "peso_medio": 2.5, "idade": 42, "conversao": 1.8, "iep": 314}]
        assert "iep" in perform_cross_validation(rows, "poultry").rows[0].validations
        swine = perform_cross_validation(rows, "swine").rows[0].validations
        assert "iep" not in swine
        assert "conversao_plausibility" in swine

    def test_tolerances_from_config(self, feedlot_rows):
        config = Config()
        config.validation.gpd_tolerance = 0.01
        feedlot_rows[0]["gpd"] = 1.55
        report = DataValidator(config).cross_validate(feedlot_rows, "bovine")
        assert not report.overall_valid

    def test_dataframe_input(self, feedlot_rows):
        import pandas as pd
        from_rows = perform_cross_validation(feedlot_rows, "bovine").to_dict()
        from_frame = perform_cross_validation(pd.DataFrame(feedlot_rows), "bovine").to_dict()
        assert from_rows == from_frame

    def test_to_dict(self, feedlot_rows):
        data = perform_cross_validation(feedlot_rows, "bovine").to_dict()
        assert data["overall_valid"] is True
        assert data["rows"][0]["row"] == 1
        assert data["rows"][0]["validations"]["gpd"]["valid"] is True

    def test_empty_dataset(self):
        report = perform_cross_validation([], "bovine")
        assert report.overall_valid
        assert report.rows == ()
