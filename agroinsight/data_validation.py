"""
Data Validation Module for AgroInsight v1.0
===========================================
Zootechnical cross-validation of dataset rows. Derived metrics (average daily
gain, feed conversion and the poultry production efficiency index) are
recomputed from their inputs and compared with the reported values, and
single values are checked against per-species biological plausibility bounds.

The recomputing validators return a valid, empty result when an input they
need is missing or zero.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from agroinsight.config import Config
from agroinsight.logging_config import get_statistics_logger
from agroinsight.species_mapping import normalize_species
from agroinsight.tabular import Dataset, to_records
from agroinsight.value_parsing import NumberParsingRule

logger = get_statistics_logger()


@dataclass(frozen=True)
class CrossValidationResult:
    """Outcome of one consistency or plausibility check"""
    valid: bool = True
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    calculated: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'warnings': list(self.warnings),
            'errors': list(self.errors),
            'suggestions': list(self.suggestions),
            'calculated': self.calculated,
        }


@dataclass(frozen=True)
class PlausibilityRule:
    """Hard bounds plus an optional band of unusual-but-possible values"""
    min: float
    max: float
    warning_min: Optional[float] = None
    warning_max: Optional[float] = None


# (metric, species) -> rule; species None applies to every species
PLAUSIBILITY_RULES: Mapping[Tuple[str, Optional[str]], PlausibilityRule] = MappingProxyType({
    ('gpd', 'bovine'): PlausibilityRule(0, 3, 0.3, 2),
    ('gpd', 'swine'): PlausibilityRule(0, 1.5, 0.2, 1.2),
    ('gpd', 'poultry'): PlausibilityRule(0, 0.15, 0.03, 0.1),
    ('conversao', 'bovine'): PlausibilityRule(4, 15, 5, 12),
    ('conversao', 'swine'): PlausibilityRule(1.5, 4, 2, 3.5),
    ('conversao', 'poultry'): PlausibilityRule(1.3, 2.5, 1.5, 2.0),
    ('mortalidade', None): PlausibilityRule(0, 100, 0, 10),
    ('producao_leite', None): PlausibilityRule(0, 80, 5, 50),
})

# Dataset column -> plausibility metric
PLAUSIBILITY_COLUMNS = MappingProxyType({
    'gpd': 'gpd',
    'conversao_alimentar': 'conversao',
    'conversao': 'conversao',
    'mortalidade': 'mortalidade',
    'producao_leite': 'producao_leite',
})


def _compare_with_reported(label: str, calculated: float, reported: Optional[float],
                           tolerance: float, unit: str, decimals: int,
                           recheck: str) -> CrossValidationResult:
    if reported is None:
        return CrossValidationResult(
            suggestions=(f"Calculated {label}: {calculated:.{decimals}f}{unit}",),
            calculated=calculated,
        )

    if calculated == 0:
        percent_diff = 0.0 if reported == 0 else math.inf
    else:
        percent_diff = abs(calculated - reported) / abs(calculated) * 100

    comparison = (
        f"reported {label} ({reported:.{decimals}f}{unit}) and the calculated value "
        f"({calculated:.{decimals}f}{unit}) differ by {percent_diff:.1f}%"
    )
    if percent_diff > tolerance * 100:
        return CrossValidationResult(
            valid=False,
            errors=(f"Significant mismatch: {comparison}",),
            suggestions=(recheck,),
            calculated=calculated,
        )
    if percent_diff > tolerance / 2 * 100:
        return CrossValidationResult(warnings=(f"Mismatch: {comparison}",), calculated=calculated)
    return CrossValidationResult(calculated=calculated)


def validate_gpd(initial_weight: Optional[float], final_weight: Optional[float],
                 days: Optional[float], reported_gpd: Optional[float] = None,
                 tolerance: float = 0.15) -> CrossValidationResult:
    """Check a reported average daily gain (kg/day) against the weights and period.

    >>> validate_gpd(300, 450, 100, 1.5).valid
    True
    >>> validate_gpd(450, 300, 100).valid
    False
    """
    if not initial_weight or not final_weight or not days:
        return CrossValidationResult()

    calculated = (final_weight - initial_weight) / days
    if calculated < 0:
        return CrossValidationResult(
            valid=False,
            errors=("Final weight is lower than initial weight, possibly a typing error",),
            suggestions=("Check that the weights were entered in the right order",),
            calculated=calculated,
        )

    return _compare_with_reported(
        'daily gain', calculated, reported_gpd, tolerance, ' kg/day', 3,
        'Check the initial weight, final weight and number of days',
    )


def validate_fcr(total_intake: Optional[float], total_gain: Optional[float],
                 reported_fcr: Optional[float] = None,
                 tolerance: float = 0.15) -> CrossValidationResult:
    """Check a reported feed conversion ratio (kg feed per kg gain)"""
    if total_intake is None or total_gain is None:
        return CrossValidationResult()
    if total_gain <= 0:
        return CrossValidationResult(valid=False, errors=("Total weight gain must be positive",))

    return _compare_with_reported(
        'feed conversion', total_intake / total_gain, reported_fcr, tolerance, ' kg/kg', 2,
        'Check the total feed intake and total weight gain',
    )


def validate_iep(viability: Optional[float], mean_weight: Optional[float],
                 age_days: Optional[float], feed_conversion: Optional[float],
                 reported_iep: Optional[float] = None,
                 tolerance: float = 0.10) -> CrossValidationResult:
    """Check a reported poultry production efficiency index.

    IEP = viability (%) x mean weight (kg) / (age (days) x feed conversion) x 100
    """
    if not viability or not mean_weight or not age_days or not feed_conversion:
        return CrossValidationResult()

    calculated = viability * mean_weight / (age_days * feed_conversion) * 100
    return _compare_with_reported(
        'IEP', calculated, reported_iep, tolerance, ' points', 0,
        'Check viability, mean weight, age and feed conversion',
    )


def get_plausibility_rule(metric: str, species: Optional[str] = None) -> Optional[PlausibilityRule]:
    """Species-specific rule for a metric, falling back to the species-independent one"""
    metric = metric.strip().lower()
    normalized = normalize_species(species) if species else None
    return PLAUSIBILITY_RULES.get((metric, normalized)) or PLAUSIBILITY_RULES.get((metric, None))


def validate_biological_plausibility(metric: str, value: float,
                                     species: Optional[str] = None) -> CrossValidationResult:
    """Check a single value against the plausibility bounds of its metric.

    Metrics without a rule are always valid.
    """
    rule = get_plausibility_rule(metric, species)
    if rule is None:
        return CrossValidationResult()

    if value < rule.min or value > rule.max:
        return CrossValidationResult(
            valid=False,
            errors=(f"Value {value:g} is outside the biologically plausible range "
                    f"({rule.min:g} - {rule.max:g})",),
            suggestions=("Check that the value and its unit were entered correctly",),
        )

    warnings: List[str] = []
    if rule.warning_min is not None and value < rule.warning_min:
        warnings.append(f"Value {value:g} is unusually low (expected > {rule.warning_min:g})")
    if rule.warning_max is not None and value > rule.warning_max:
        warnings.append(f"Value {value:g} is unusually high (expected < {rule.warning_max:g})")

    return CrossValidationResult(
        warnings=tuple(warnings),
        suggestions=("Possible but unusual value, please double-check it",) if warnings else (),
    )


@dataclass(frozen=True)
class RowValidation:
    row: int  # 1-based
    validations: Dict[str, CrossValidationResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row,
            'validations': {name: v.to_dict() for name, v in self.validations.items()},
        }


@dataclass(frozen=True)
class CrossValidationReport:
    """Cross-validation of every row of a dataset"""
    overall_valid: bool = True
    total_warnings: int = 0
    total_errors: int = 0
    rows: Tuple[RowValidation, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_valid': self.overall_valid,
            'total_warnings': self.total_warnings,
            'total_errors': self.total_errors,
            'rows': [r.to_dict() for r in self.rows],
        }


class DataValidator:
    """Row-wise zootechnical cross-validation"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.settings = self.config.validation
        self.parsing_rule = NumberParsingRule.from_config(self.config.parsing)

    def _row_numbers(self, row: Mapping[str, Any]) -> Dict[str, Optional[float]]:
        return {str(key).strip().lower(): self.parsing_rule.parse_number(value) for key, value in row.items()}

    def validate_row(self, row: Mapping[str, Any], species: Optional[str] = None) -> Dict[str, CrossValidationResult]:
        """Run every check whose input columns are present in the row"""
        values = self._row_numbers(row)
        species = normalize_species(species) if species else None
        validations: Dict[str, CrossValidationResult] = {}

        if all(values.get(c) is not None for c in ('peso_inicial', 'peso_final', 'dias')):
            validations['gpd'] = validate_gpd(
                values['peso_inicial'], values['peso_final'], values['dias'],
                values.get('gpd'), tolerance=self.settings.gpd_tolerance,
            )

        if values.get('consumo_total') is not None and values.get('ganho_total') is not None:
            validations['fcr'] = validate_fcr(
                values['consumo_total'], values['ganho_total'],
                values.get('conversao_alimentar'), tolerance=self.settings.fcr_tolerance,
            )

        if species == 'poultry' and all(
                values.get(c) is not None for c in ('viabilidade', 'peso_medio', 'idade', 'conversao')):
            validations['iep'] = validate_iep(
                values['viabilidade'], values['peso_medio'], values['idade'], values['conversao'],
                values.get('iep'), tolerance=self.settings.iep_tolerance,
            )

        for column, metric in PLAUSIBILITY_COLUMNS.items():
            if values.get(column) is not None:
                validations[f'{column}_plausibility'] = validate_biological_plausibility(
                    metric, values[column], species,
                )

        return validations

    def cross_validate(self, data: Dataset, species: Optional[str] = None) -> CrossValidationReport:
        """Cross-validate every row; rows without any applicable check are omitted"""
        rows = []
        total_warnings = total_errors = 0
        for index, row in enumerate(to_records(data), start=1):
            validations = self.validate_row(row, species)
            if not validations:
                continue
            total_warnings += sum(len(v.warnings) for v in validations.values())
            total_errors += sum(len(v.errors) for v in validations.values())
            rows.append(RowValidation(row=index, validations=validations))

        if rows:
            logger.info(
                f"Cross-validation checked {len(rows)} rows: "
                f"{total_errors} errors, {total_warnings} warnings"
            )
        return CrossValidationReport(
            overall_valid=total_errors == 0,
            total_warnings=total_warnings,
            total_errors=total_errors,
            rows=tuple(rows),
        )


def perform_cross_validation(data: Dataset, species: Optional[str] = None,
                             config: Optional[Config] = None) -> CrossValidationReport:
    """Module-level shortcut for DataValidator(config).cross_validate"""
    return DataValidator(config).cross_validate(data, species)
