"""
Configuration Module for AgroInsight v1.0
=========================================
Central configuration management for the analysis engine.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Any, Optional
from pathlib import Path
import json
from datetime import datetime


# Custom Exception Classes
class AgroInsightError(Exception):
    """Base exception for the AgroInsight engine"""
    pass


class ConfigurationError(AgroInsightError):
    """Exception raised for configuration errors"""
    pass


class DataProcessingError(AgroInsightError):
    """Exception raised for data processing errors"""
    pass


class StatisticalInputError(AgroInsightError, ValueError):
    """Exception raised when a statistical routine receives malformed input
    (mismatched lengths, too few observations, fewer than two groups)."""
    pass


class InsufficientDataError(DataProcessingError, ValueError):
    """Exception raised when a column or dataset has no usable values"""
    pass


@dataclass
class ParsingConfig:
    """Value parsing settings shared by classifier, statistics and correlations"""
    # Brazilian spreadsheets export "10,5" for 10.5
    decimal_comma: bool = True
    # "1.234,56" and "1,234.56" are both accepted when True
    allow_thousands_separator: bool = True
    null_tokens: List[str] = field(default_factory=lambda: [
        "null", "undefined", "none", "nan", "na", "n/a", "-"
    ])


@dataclass
class ClassifierConfig:
    """Variable type detection thresholds"""
    temporal_ratio: float = 0.8
    numeric_ratio: float = 0.9
    discrete_unique_ratio: float = 0.1
    identifier_numeric_ratio: float = 0.5


@dataclass
class StatisticsConfig:
    """Descriptive statistics settings"""
    outlier_iqr_multiplier: float = 1.5
    high_cv_threshold: float = 30.0  # CV (%) flagged as high variability


@dataclass
class CorrelationConfig:
    """Correlation discovery settings"""
    max_correlations: int = 20
    min_relevance_score: int = 5
    min_data_points: int = 10
    significance_level: float = 0.05
    allow_unknown_species_fallback: bool = False

    # Numeric column detection
    numeric_sample_rows: int = 10
    numeric_sample_ratio: float = 0.8

    # Exploratory pass
    exploratory_min_abs_r: float = 0.4
    exploratory_relevance_score: int = 3
    exploratory_category: str = "Outros"

    # Reporting thresholds
    high_relevance_threshold: int = 8
    strong_correlation_threshold: float = 0.6
    few_significant_threshold: int = 3

    # Parallel pair evaluation (1 = sequential)
    n_jobs: int = 1


@dataclass
class ValidationConfig:
    """Zootechnical cross-validation settings"""
    # Relative difference between reported and recomputed metrics; half of
    # it already raises a warning
    gpd_tolerance: float = 0.15
    fcr_tolerance: float = 0.15
    iep_tolerance: float = 0.10
    enabled: bool = True


@dataclass
class LoggingConfig:
    """Logging settings"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Rotating log files
    file_output: bool = False
    log_dir: Optional[Path] = None
    max_file_size_mb: int = 10
    backup_count: int = 5

    # Console output
    console_output: bool = True
    structured_logs: bool = False


class Config:
    """Main configuration class for AgroInsight"""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration"""
        self.config_path = Path(config_path) if config_path else None

        # Initialize sub-configurations
        self.parsing = ParsingConfig()
        self.classifier = ClassifierConfig()
        self.statistics = StatisticsConfig()
        self.correlation = CorrelationConfig()
        self.validation = ValidationConfig()
        self.logging = LoggingConfig()

        # Metadata
        self.version = "1.0.0"
        self.created_at = datetime.now()

        # Load custom config if given
        if self.config_path is not None and self.config_path.exists():
            self.load_config()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "parsing": dict(self.parsing.__dict__),
            "classifier": dict(self.classifier.__dict__),
            "statistics": dict(self.statistics.__dict__),
            "correlation": dict(self.correlation.__dict__),
            "validation": dict(self.validation.__dict__),
            "logging": {k: str(v) if isinstance(v, Path) else v for k, v in self.logging.__dict__.items()},
            "version": self.version,
            "created_at": self.created_at.isoformat()
        }

    def save_config(self, path: Optional[Path] = None):
        """Save configuration to JSON file"""
        save_path = Path(path) if path else self.config_path
        if save_path is None:
            raise ConfigurationError("No path given to save configuration")

        with open(save_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)

    def load_config(self, path: Optional[Path] = None):
        """Load configuration from JSON file"""
        load_path = Path(path) if path else self.config_path

        if load_path is None or not load_path.exists():
            raise ConfigurationError(f"Config file not found: {load_path}")

        try:
            with open(load_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid config file {load_path}: {e}") from e

        # Update sub-configurations
        self._update_section(self.parsing, config_dict.get("parsing", {}))
        self._update_section(self.classifier, config_dict.get("classifier", {}))
        self._update_section(self.statistics, config_dict.get("statistics", {}))
        self._update_section(self.correlation, config_dict.get("correlation", {}))
        self._update_section(self.validation, config_dict.get("validation", {}))

        logging_values = dict(config_dict.get("logging", {}))
        if "log_dir" in logging_values:
            log_dir = logging_values["log_dir"]
            logging_values["log_dir"] = Path(log_dir) if log_dir not in (None, "None") else None
        self._update_section(self.logging, logging_values)

    @staticmethod
    def _update_section(section, values: Dict[str, Any]):
        """Copy known keys into a settings dataclass, rejecting unknown ones"""
        known = {f.name for f in fields(section)}
        for key, value in values.items():
            if key not in known:
                raise ConfigurationError(
                    f"Unknown setting '{key}' for {type(section).__name__}"
                )
            setattr(section, key, value)

    def get_summary(self) -> str:
        """Get configuration summary"""
        return f"""
    AgroInsight Configuration Summary
    =================================
    Version: {self.version}

    Parsing:
    - Decimal comma: {self.parsing.decimal_comma}
    - Thousands separator: {self.parsing.allow_thousands_separator}

    Correlation Settings:
    - Max correlations: {self.correlation.max_correlations}
    - Min relevance score: {self.correlation.min_relevance_score}
    - Min data points: {self.correlation.min_data_points}
    - Significance level: {self.correlation.significance_level}
    - Unknown species fallback: {self.correlation.allow_unknown_species_fallback}
    - Parallel jobs: {self.correlation.n_jobs}

    Validation:
    - Enabled: {self.validation.enabled}
    - GPD / FCR / IEP tolerance: {self.validation.gpd_tolerance} / {self.validation.fcr_tolerance} / {self.validation.iep_tolerance}

    Logging:
    - Level: {self.logging.level}
    - File output: {self.logging.file_output} ({self.logging.log_dir})
    - Rotation: {self.logging.max_file_size_mb} MB x {self.logging.backup_count}
    """
