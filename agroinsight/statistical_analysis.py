"""
Statistical Analysis Module for AgroInsight v1.0
================================================
Runs the complete analysis of one dataset: variable classification,
descriptive statistics, species correlation discovery, zootechnical
cross-validation of the rows and insights.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agroinsight.config import AgroInsightError, Config, InsufficientDataError
from agroinsight.correlation_analysis import CorrelationAnalysisReport, CorrelationDiscoveryEngine
from agroinsight.data_validation import CrossValidationReport, DataValidator
from agroinsight.descriptive_stats import CategoricalSummary, DescriptiveStatsEngine, NumericSummary
from agroinsight.logging_config import LogContext, create_audit_log, get_logger, log_function_call
from agroinsight.species_mapping import normalize_species
from agroinsight.tabular import Dataset, column_names, column_values, to_records
from agroinsight.variable_classifier import VariableClassifier, VariableDescriptor

logger = get_logger(__name__)


@dataclass(frozen=True)
class DatasetAnalysis:
    """Result of a complete dataset analysis"""
    variables: Dict[str, VariableDescriptor]
    numeric_stats: Dict[str, NumericSummary]
    categorical_stats: Dict[str, CategoricalSummary]
    total_rows: int
    total_columns: int
    column_errors: Dict[str, str] = field(default_factory=dict)
    correlations: Optional[CorrelationAnalysisReport] = None
    validation: Optional[CrossValidationReport] = None
    insights: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'variables': {k: v.to_dict() for k, v in self.variables.items()},
            'numeric_stats': {k: v.to_dict() for k, v in self.numeric_stats.items()},
            'categorical_stats': {k: v.to_dict() for k, v in self.categorical_stats.items()},
            'total_rows': self.total_rows,
            'total_columns': self.total_columns,
            'column_errors': dict(self.column_errors),
            'correlations': self.correlations.to_dict() if self.correlations else None,
            'validation': self.validation.to_dict() if self.validation else None,
            'insights': list(self.insights),
        }


class StatisticalAnalysis:
    """Complete statistical analysis for zootechnical datasets"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.classifier = VariableClassifier(self.config)
        self.stats_engine = DescriptiveStatsEngine(self.config)
        self.correlation_engine = CorrelationDiscoveryEngine(self.config)
        self.validator = DataValidator(self.config)

    @log_function_call
    def run_complete_analysis(self, data: Dataset, species: Optional[str] = None,
                              dataset_name: Optional[str] = None) -> DatasetAnalysis:
        """Run the full analysis on one dataset.

        Raises:
            InsufficientDataError: when the dataset has no rows
        """
        records = to_records(data)
        if not records:
            raise InsufficientDataError("Dataset is empty")

        normalized_species = normalize_species(species) if species else None

        with LogContext(species=normalized_species, dataset_name=dataset_name):
            logger.info(f"Starting statistical analysis of {len(records)} rows")

            columns = column_names(records)
            variables = self.classifier.classify_dataset(records)

            numeric_stats: Dict[str, NumericSummary] = {}
            categorical_stats: Dict[str, CategoricalSummary] = {}
            column_errors: Dict[str, str] = {}

            for name in columns:
                descriptor = variables[name]
                values = column_values(records, name)
                try:
                    if descriptor.is_numeric:
                        numeric_stats[name] = self.stats_engine.numeric_summary(values)
                    elif descriptor.is_categorical:
                        categorical_stats[name] = self.stats_engine.categorical_summary(values)
                except (AgroInsightError, ValueError) as e:
                    logger.warning(f"Could not summarize column '{name}': {e}")
                    column_errors[name] = str(e)

            correlations = None
            if normalized_species:
                correlations = self.correlation_engine.analyze(records, normalized_species)

            validation = None
            if self.config.validation.enabled:
                validation = self.validator.cross_validate(records, normalized_species)

            insights = self.generate_insights(variables, numeric_stats, correlations, validation)

            analysis = DatasetAnalysis(
                variables=variables,
                numeric_stats=numeric_stats,
                categorical_stats=categorical_stats,
                total_rows=len(records),
                total_columns=len(columns),
                column_errors=column_errors,
                correlations=correlations,
                validation=validation,
                insights=insights,
            )

            create_audit_log(
                'dataset_analysis',
                details={
                    'dataset_name': dataset_name,
                    'species': normalized_species,
                    'rows': len(records),
                    'columns': len(columns),
                    'column_errors': len(column_errors),
                    'validation_errors': validation.total_errors if validation else 0,
                },
                status='warning' if column_errors else 'success',
            )
            logger.info("Statistical analysis complete")

        return analysis

    def generate_insights(self, variables: Dict[str, VariableDescriptor],
                          numeric_stats: Dict[str, NumericSummary],
                          correlations: Optional[CorrelationAnalysisReport],
                          validation: Optional[CrossValidationReport] = None) -> List[str]:
        """Generate human-readable insights from the analysis"""

        insights = []

        zootechnical = [name for name, v in variables.items() if v.is_zootechnical]
        if zootechnical:
            insights.append(f"[◎] {len(zootechnical)} of {len(variables)} columns are zootechnical variables")

        constant = [name for name, s in numeric_stats.items() if s.is_constant]
        if constant:
            insights.append(f"[!] {len(constant)} constant numeric columns carry no information: {', '.join(constant)}")

        multiplier = self.config.statistics.outlier_iqr_multiplier
        with_outliers = [name for name, s in numeric_stats.items() if s.outliers]
        if with_outliers:
            insights.append(f"⚡ {len(with_outliers)} columns contain outliers ({multiplier}×IQR rule): {', '.join(with_outliers)}")

        high_cv = self.config.statistics.high_cv_threshold
        variable = [name for name, s in numeric_stats.items() if s.cv > high_cv]
        if variable:
            insights.append(f"[▲] {len(variable)} columns show high variability (CV > {high_cv:.0f}%): {', '.join(variable)}")

        if correlations is not None:
            if correlations.significant_correlations:
                insights.append(
                    f"🔗 {correlations.significant_correlations} significant correlations "
                    f"out of {correlations.total_correlations} tested"
                )
            mismatched = [
                c for c in correlations.all_correlations
                if c.significant and not c.matches_expectation
            ]
            if mismatched:
                insights.append(f"[!] {len(mismatched)} significant correlations contradict the expected direction")
            if correlations.top_correlations:
                best = correlations.top_correlations[0]
                insights.append(
                    f"[▊] Top correlation: {best.var1} vs {best.var2} "
                    f"(r = {best.coefficient:.3f}, {best.category})"
                )

        if validation is not None and validation.rows:
            marker = "[✓]" if validation.overall_valid else "[!]"
            insights.append(
                f"{marker} Cross-validation checked {len(validation.rows)} rows: "
                f"{validation.total_errors} errors, {validation.total_warnings} warnings"
            )

        return insights
