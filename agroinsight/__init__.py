"""
AgroInsight v1.0 Analysis Package
=================================
Statistical analysis and correlation discovery for zootechnical datasets

This package contains the core modules of the AgroInsight engine:
- Configuration management and error types
- Value parsing rules
- Variable classification
- Descriptive statistics
- Hypothesis testing
- Species correlation knowledge base
- Correlation discovery
- Zootechnical cross-validation and plausibility checks
- Report text generation
- Dataset analysis pipeline
- Logging utilities

Version: 1.0.0
"""

# Version information
__version__ = '1.0.0'
__author__ = 'AgroInsight Team'

# Package metadata
__all__ = [
    # Core modules
    'config',
    'logging_config',
    'value_parsing',
    'tabular',
    'variable_classifier',
    'descriptive_stats',
    'hypothesis_tests',
    'species_correlations',
    'species_mapping',
    'correlation_analysis',
    'data_validation',
    'report_generator',
    'statistical_analysis',

    # Version info
    '__version__',
    '__author__',
]

# Module descriptions for documentation
MODULE_DESCRIPTIONS = {
    'config': 'Configuration management, settings and exception types',
    'logging_config': 'Logging configuration and utilities',
    'value_parsing': 'Locale-aware number parsing and missing-value rules',
    'tabular': 'Normalization of row lists and DataFrames',
    'variable_classifier': 'Variable type detection and zootechnical flags',
    'descriptive_stats': 'Numeric and categorical column summaries',
    'hypothesis_tests': 't-tests, ANOVA, Pearson correlation and regression',
    'species_correlations': 'Species-specific correlation knowledge base',
    'species_mapping': 'Species name normalization',
    'correlation_analysis': 'Correlation discovery and ranking',
    'data_validation': 'Derived-metric cross-validation and biological plausibility',
    'report_generator': 'Markdown correlation reports',
    'statistical_analysis': 'Complete dataset analysis pipeline',
}


def get_info():
    """Get package information"""
    return {
        'name': 'AgroInsight',
        'version': __version__,
        'author': __author__,
        'modules': MODULE_DESCRIPTIONS
    }

# Modules are imported at the point of use to keep package import light.
