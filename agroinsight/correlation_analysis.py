"""
Correlation Analysis Module for AgroInsight v1.0
================================================
Discovers, tests and ranks correlations between numeric variables using the
species knowledge base, followed by an exploratory pass over every other
pair of numeric columns.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, FrozenSet

from joblib import Parallel, delayed

from agroinsight.config import AgroInsightError, Config, ConfigurationError
from agroinsight.hypothesis_tests import pearson_correlation
from agroinsight.logging_config import LogContext, get_correlations_logger, log_function_call
from agroinsight.species_correlations import (
    CorrelationPairSpec,
    IdealRange,
    find_matching_variables,
    get_species_correlation_config,
)
from agroinsight.species_mapping import normalize_species
from agroinsight.tabular import Dataset, column_names, to_records
from agroinsight.value_parsing import NumberParsingRule

logger = get_correlations_logger()

SOURCE_KNOWLEDGE_BASE = 'knowledge_base'
SOURCE_EXPLORATORY = 'exploratory'

EXPLORATORY_INTERPRETATION = 'Correlação detectada automaticamente entre variáveis'


@dataclass(frozen=True)
class CorrelationResult:
    """A tested correlation between two dataset columns"""
    var1: str
    var2: str
    coefficient: float
    p_value: float
    significant: bool
    strength: str
    direction: str
    relevance_score: int
    category: str
    interpretation: str
    expected_direction: str
    matches_expectation: bool
    data_points: Tuple[Tuple[float, float], ...]
    ideal_range: Optional[IdealRange] = None
    source: str = SOURCE_KNOWLEDGE_BASE
    within_ideal_range: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'var1': self.var1,
            'var2': self.var2,
            'coefficient': self.coefficient,
            'p_value': self.p_value,
            'significant': self.significant,
            'strength': self.strength,
            'direction': self.direction,
            'relevance_score': self.relevance_score,
            'category': self.category,
            'interpretation': self.interpretation,
            'expected_direction': self.expected_direction,
            'matches_expectation': self.matches_expectation,
            'data_points': [{'x': x, 'y': y} for x, y in self.data_points],
            'ideal_range': self.ideal_range.to_dict() if self.ideal_range else None,
            'source': self.source,
            'within_ideal_range': self.within_ideal_range,
        }


@dataclass(frozen=True)
class CorrelationAnalysisReport:
    """Outcome of one correlation discovery run"""
    species: str
    total_correlations: int = 0
    significant_correlations: int = 0
    high_relevance_correlations: int = 0
    correlations_by_category: Dict[str, int] = field(default_factory=dict)
    top_correlations: Tuple[CorrelationResult, ...] = ()
    all_correlations: Tuple[CorrelationResult, ...] = ()
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    exploratory_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'species': self.species,
            'total_correlations': self.total_correlations,
            'significant_correlations': self.significant_correlations,
            'high_relevance_correlations': self.high_relevance_correlations,
            'correlations_by_category': dict(self.correlations_by_category),
            'top_correlations': [c.to_dict() for c in self.top_correlations],
            'all_correlations': [c.to_dict() for c in self.all_correlations],
            'warnings': list(self.warnings),
            'recommendations': list(self.recommendations),
            'exploratory_only': self.exploratory_only,
        }


@dataclass(frozen=True)
class CorrelationProposal:
    var1: str
    var2: str
    reason: str
    priority: int

    def to_dict(self) -> Dict[str, Any]:
        return {'var1': self.var1, 'var2': self.var2, 'reason': self.reason, 'priority': self.priority}


@dataclass(frozen=True)
class MissingVariable:
    variable: str
    importance: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'variable': self.variable, 'importance': self.importance, 'reason': self.reason}


def matches_expected_direction(coefficient: float, expected: str) -> bool:
    if expected == 'positive':
        return coefficient > 0
    if expected == 'negative':
        return coefficient < 0
    return True


def _pair_key(var1: str, var2: str) -> FrozenSet[str]:
    return frozenset((var1, var2))


class CorrelationDiscoveryEngine:
    """Species-aware correlation discovery"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.settings = self.config.correlation
        self.parsing_rule = NumberParsingRule.from_config(self.config.parsing)

    # ------------------------------------------------------------------
    # Column and value extraction
    # ------------------------------------------------------------------

    def get_numeric_columns(self, records: Sequence[Dict[str, Any]]) -> List[str]:
        """Columns whose leading sample rows are mostly finite numbers"""
        if not records:
            return []

        sample = records[:self.settings.numeric_sample_rows]
        numeric = []
        for column in column_names(records):
            count = sum(1 for row in sample if self.parsing_rule.is_number(row.get(column)))
            if count / len(sample) >= self.settings.numeric_sample_ratio:
                numeric.append(column)
        return numeric

    def extract_data_points(self, records: Sequence[Dict[str, Any]],
                            var1: str, var2: str) -> Tuple[Tuple[float, float], ...]:
        """Paired values, skipping rows where either side is not a number"""
        points = []
        for row in records:
            x = self.parsing_rule.parse_number(row.get(var1))
            y = self.parsing_rule.parse_number(row.get(var2))
            if x is not None and y is not None:
                points.append((x, y))
        return tuple(points)

    # ------------------------------------------------------------------
    # Pair evaluation
    # ------------------------------------------------------------------

    def _correlate(self, var1: str, var2: str, points: Tuple[Tuple[float, float], ...],
                   significance_level: float):
        try:
            return pearson_correlation(
                [p[0] for p in points], [p[1] for p in points], alpha=significance_level
            )
        except (AgroInsightError, ValueError) as e:
            logger.warning(f"Could not correlate {var1} vs {var2}: {e}")
            return None

    def _evaluate_pair(self, records, var1: str, var2: str, pair: CorrelationPairSpec,
                       min_data_points: int, significance_level: float) -> Optional[CorrelationResult]:
        points = self.extract_data_points(records, var1, var2)
        if len(points) < min_data_points:
            logger.debug(f"Skipping {var1} vs {var2}: {len(points)} paired values")
            return None

        pearson = self._correlate(var1, var2, points, significance_level)
        if pearson is None:
            return None

        return CorrelationResult(
            var1=var1,
            var2=var2,
            coefficient=pearson.coefficient,
            p_value=pearson.p_value,
            significant=pearson.significant,
            strength=pearson.strength,
            direction=pearson.direction,
            relevance_score=pair.relevance_score,
            category=pair.category,
            interpretation=pair.interpretation,
            expected_direction=pair.expected_direction,
            matches_expectation=matches_expected_direction(pearson.coefficient, pair.expected_direction),
            data_points=points,
            ideal_range=pair.ideal_range,
            source=SOURCE_KNOWLEDGE_BASE,
            within_ideal_range=pair.ideal_range.contains(pearson.coefficient) if pair.ideal_range else None,
        )

    def _evaluate_exploratory(self, records, var1: str, var2: str,
                              min_data_points: int, significance_level: float) -> Optional[CorrelationResult]:
        points = self.extract_data_points(records, var1, var2)
        if len(points) < min_data_points:
            return None

        pearson = self._correlate(var1, var2, points, significance_level)
        if pearson is None or abs(pearson.coefficient) < self.settings.exploratory_min_abs_r:
            return None

        return CorrelationResult(
            var1=var1,
            var2=var2,
            coefficient=pearson.coefficient,
            p_value=pearson.p_value,
            significant=pearson.significant,
            strength=pearson.strength,
            direction=pearson.direction,
            relevance_score=self.settings.exploratory_relevance_score,
            category=self.settings.exploratory_category,
            interpretation=EXPLORATORY_INTERPRETATION,
            expected_direction='either',
            matches_expectation=True,
            data_points=points,
            source=SOURCE_EXPLORATORY,
        )

    def _knowledge_base_pass(self, records, numeric_columns: List[str], pairs: Sequence[CorrelationPairSpec],
                             min_data_points: int, significance_level: float,
                             covered: Set[FrozenSet[str]], warnings: List[str],
                             recommendations: List[str]) -> List[CorrelationResult]:
        results = []
        for pair in pairs:
            matched = find_matching_variables(numeric_columns, pair)
            if matched is None:
                continue
            var1, var2 = matched
            if _pair_key(var1, var2) in covered:
                continue

            result = self._evaluate_pair(records, var1, var2, pair, min_data_points, significance_level)
            if result is None:
                continue

            covered.add(_pair_key(var1, var2))
            results.append(result)

            if result.significant and not result.matches_expectation:
                warnings.append(
                    f"Unexpected correlation: {var1} vs {var2} - expected {pair.expected_direction}, "
                    f"found {result.direction}"
                )

            if (result.significant
                    and pair.relevance_score >= self.settings.high_relevance_threshold
                    and abs(result.coefficient) > self.settings.strong_correlation_threshold):
                recommendations.append(
                    f"{pair.category}: {var1} and {var2} show a {result.strength} correlation "
                    f"(r = {result.coefficient:.3f}). {pair.interpretation}"
                )
        return results

    def _exploratory_pass(self, records, numeric_columns: List[str], min_data_points: int,
                          significance_level: float, covered: Set[FrozenSet[str]]) -> List[CorrelationResult]:
        candidates = [
            (numeric_columns[i], numeric_columns[j])
            for i in range(len(numeric_columns))
            for j in range(i + 1, len(numeric_columns))
            if _pair_key(numeric_columns[i], numeric_columns[j]) not in covered
        ]
        if not candidates:
            return []

        n_jobs = self.settings.n_jobs
        if n_jobs == 1:
            evaluated = [
                self._evaluate_exploratory(records, var1, var2, min_data_points, significance_level)
                for var1, var2 in candidates
            ]
        else:
            # results come back in submission order
            evaluated = Parallel(n_jobs=n_jobs, backend='threading')(
                delayed(self._evaluate_exploratory)(records, var1, var2, min_data_points, significance_level)
                for var1, var2 in candidates
            )

        logger.debug(f"Exploratory pass evaluated {len(candidates)} column pairs")
        return [result for result in evaluated if result is not None]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @log_function_call
    def analyze(self, data: Dataset, species: str,
                max_correlations: Optional[int] = None,
                min_relevance_score: Optional[int] = None,
                min_data_points: Optional[int] = None,
                significance_level: Optional[float] = None,
                allow_unknown_species_fallback: Optional[bool] = None) -> CorrelationAnalysisReport:
        """Discover and rank correlations in a dataset.

        Args:
            data: list of row mappings or a DataFrame
            species: species id (free-form names are normalized)
            max_correlations: length cap of ``top_correlations``
            min_relevance_score: correlations below this score are not reported
            min_data_points: paired values needed to test a pair
            significance_level: alpha for the Pearson test
            allow_unknown_species_fallback: run the exploratory pass alone
                when the species has no knowledge base entry

        Unset options fall back to ``CorrelationConfig``.
        """
        s = self.settings
        max_correlations = s.max_correlations if max_correlations is None else max_correlations
        min_relevance_score = s.min_relevance_score if min_relevance_score is None else min_relevance_score
        min_data_points = s.min_data_points if min_data_points is None else min_data_points
        significance_level = s.significance_level if significance_level is None else significance_level
        if allow_unknown_species_fallback is None:
            allow_unknown_species_fallback = s.allow_unknown_species_fallback

        if max_correlations < 0:
            raise ConfigurationError("max_correlations must not be negative")
        if not 0 < significance_level < 1:
            raise ConfigurationError("significance_level must be between 0 and 1")

        normalized = normalize_species(species)
        records = to_records(data)

        with LogContext(species=normalized):
            numeric_columns = self.get_numeric_columns(records)
            if len(numeric_columns) < 2:
                logger.info(f"Only {len(numeric_columns)} numeric columns, nothing to correlate")
                return CorrelationAnalysisReport(
                    species=normalized,
                    warnings=("Insufficient data: at least 2 numeric variables are required",),
                )

            warnings: List[str] = []
            recommendations: List[str] = []
            species_config = get_species_correlation_config(normalized)

            if species_config is None:
                if not allow_unknown_species_fallback:
                    logger.warning(f"No correlation configuration for species '{species}'")
                    return CorrelationAnalysisReport(
                        species=normalized,
                        warnings=(f"No correlation configuration found for species: {species}",),
                    )
                warnings.append(
                    f"No specific configuration found for '{species}'. "
                    f"Running automatic correlation analysis only."
                )

            covered: Set[FrozenSet[str]] = set()
            merged: List[CorrelationResult] = []
            if species_config is not None:
                merged.extend(self._knowledge_base_pass(
                    records, numeric_columns, species_config.correlation_pairs,
                    min_data_points, significance_level, covered, warnings, recommendations,
                ))
            merged.extend(self._exploratory_pass(
                records, numeric_columns, min_data_points, significance_level, covered,
            ))

            ranked = sorted(
                (c for c in merged if c.relevance_score >= min_relevance_score),
                key=lambda c: (-c.relevance_score, -abs(c.coefficient)),
            )

            significant = sum(1 for c in merged if c.significant)
            high_relevance = sum(1 for c in merged if c.relevance_score >= s.high_relevance_threshold)
            by_category: Dict[str, int] = {}
            for c in merged:
                by_category[c.category] = by_category.get(c.category, 0) + 1

            if significant == 0:
                recommendations.append(
                    "No significant correlations found. Check data quality and variability."
                )
            elif significant < s.few_significant_threshold:
                recommendations.append(
                    "Few significant correlations. Consider collecting more data or additional variables."
                )

            logger.info(
                f"Correlation analysis for '{normalized}': {len(merged)} tested, "
                f"{significant} significant, {len(ranked)} reported"
            )

            return CorrelationAnalysisReport(
                species=normalized,
                total_correlations=len(merged),
                significant_correlations=significant,
                high_relevance_correlations=high_relevance,
                correlations_by_category=by_category,
                top_correlations=tuple(ranked[:max_correlations]),
                all_correlations=tuple(ranked),
                warnings=tuple(warnings),
                recommendations=tuple(recommendations),
                exploratory_only=species_config is None,
            )


def analyze_correlations(data: Dataset, species: str, config: Optional[Config] = None,
                         **options) -> CorrelationAnalysisReport:
    """Module-level shortcut for CorrelationDiscoveryEngine(config).analyze"""
    return CorrelationDiscoveryEngine(config).analyze(data, species, **options)


def propose_correlations(columns: Sequence[str], species: str) -> List[CorrelationProposal]:
    """Pairs the knowledge base would test given only column names"""
    species_config = get_species_correlation_config(normalize_species(species))
    if species_config is None:
        return []

    proposals = []
    for pair in species_config.correlation_pairs:
        matched = find_matching_variables(columns, pair)
        if matched:
            proposals.append(CorrelationProposal(
                var1=matched[0],
                var2=matched[1],
                reason=f"{pair.category}: {pair.interpretation}",
                priority=pair.relevance_score,
            ))
    return sorted(proposals, key=lambda p: -p.priority)


def get_missing_variables(columns: Sequence[str], species: str,
                          min_relevance: int = 8, limit: int = 10) -> List[MissingVariable]:
    """Expected variables of high-relevance pairs that the dataset lacks"""
    species_config = get_species_correlation_config(normalize_species(species))
    if species_config is None:
        return []

    lowered = [c.lower() for c in columns]

    def present(keywords: Sequence[str]) -> bool:
        return any(keyword.lower() in column for keyword in keywords for column in lowered)

    missing: Dict[str, MissingVariable] = {}
    for pair in species_config.correlation_pairs:
        if pair.relevance_score < min_relevance:
            continue
        for keywords in (pair.var1_keywords, pair.var2_keywords):
            variable = keywords[0]
            if not present(keywords) and variable not in missing:
                missing[variable] = MissingVariable(
                    variable=variable,
                    importance='high',
                    reason=f"Required for {pair.category} analysis: {pair.interpretation}",
                )
    return list(missing.values())[:limit]
