# =============================================================================
# tests/test_config.py - Configuration Tests
# =============================================================================
# Tests for agroinsight/config.py: defaults, JSON persistence, validation of
# unknown settings and the exception hierarchy.
# =============================================================================

import json

import pytest

from agroinsight.config import (
    AgroInsightError,
    Config,
    ConfigurationError,
    DataProcessingError,
    InsufficientDataError,
    StatisticalInputError,
)


class TestDefaults:

    def test_correlation_defaults(self, config):
        c = config.correlation
        assert c.max_correlations == 20
        assert c.min_relevance_score == 5
        assert c.min_data_points == 10
        assert c.significance_level == 0.05
        assert c.allow_unknown_species_fallback is False
        assert c.exploratory_min_abs_r == 0.4
        assert c.exploratory_relevance_score == 3
        assert c.n_jobs == 1

    def test_classifier_thresholds(self, config):
        assert config.classifier.temporal_ratio == 0.8
        assert config.classifier.numeric_ratio == 0.9
        assert config.classifier.discrete_unique_ratio == 0.1
        assert config.classifier.identifier_numeric_ratio == 0.5

    def test_to_dict_sections(self, config):
        data = config.to_dict()
        for section in ("parsing", "classifier", "statistics", "correlation", "validation", "logging"):
            assert section in data
        assert data["version"] == "1.0.0"
        json.dumps(data)  # serializable

    def test_summary_mentions_settings(self, config):
        summary = config.get_summary()
        assert "Max correlations: 20" in summary
        assert "Rotation: 10 MB x 5" in summary
        assert "GPD / FCR / IEP tolerance: 0.15 / 0.15 / 0.1" in summary

    def test_validation_defaults(self, config):
        v = config.validation
        assert v.enabled is True
        assert (v.gpd_tolerance, v.fcr_tolerance, v.iep_tolerance) == (0.15, 0.15, 0.10)

    def test_logging_defaults(self, config):
        assert config.logging.file_output is False
        assert config.logging.log_dir is None
        assert config.logging.backup_count == 5


class TestPersistence:

    def test_save_and_load(self, tmp_path, config):
        path = tmp_path / "settings.json"
        config.correlation.max_correlations = 7
        config.parsing.decimal_comma = False
        config.save_config(path)

        loaded = Config(path)
        assert loaded.correlation.max_correlations == 7
        assert loaded.parsing.decimal_comma is False

    def test_logging_round_trip(self, tmp_path, config):
        path = tmp_path / "settings.json"
        config.logging.log_dir = tmp_path / "logs"
        config.logging.file_output = True
        config.logging.backup_count = 2
        config.validation.gpd_tolerance = 0.2
        config.save_config(path)

        loaded = Config(path)
        assert loaded.logging.log_dir == tmp_path / "logs"
        assert loaded.logging.file_output is True
        assert loaded.logging.backup_count == 2
        assert loaded.validation.gpd_tolerance == 0.2

    def test_default_log_dir_round_trip(self, tmp_path, config):
        path = tmp_path / "settings.json"
        config.save_config(path)
        assert Config(path).logging.log_dir is None

    def test_save_without_path(self, config):
        with pytest.raises(ConfigurationError):
            config.save_config()

    def test_load_missing_file(self, tmp_path, config):
        with pytest.raises(ConfigurationError, match="not found"):
            config.load_config(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path, config):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid"):
            config.load_config(path)

    def test_unknown_setting_rejected(self, tmp_path, config):
        path = tmp_path / "typo.json"
        path.write_text(json.dumps({"correlation": {"max_corelations": 3}}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="max_corelations"):
            config.load_config(path)

    def test_unknown_logging_setting_rejected(self, tmp_path, config):
        path = tmp_path / "typo.json"
        path.write_text(json.dumps({"logging": {"file_path": "agro.log"}}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="file_path"):
            config.load_config(path)


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, AgroInsightError)
        assert issubclass(StatisticalInputError, AgroInsightError)
        assert issubclass(StatisticalInputError, ValueError)
        assert issubclass(InsufficientDataError, DataProcessingError)
        assert issubclass(InsufficientDataError, ValueError)
