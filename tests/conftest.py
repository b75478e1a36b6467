# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Shared fixtures for the AgroInsight test suite.
#
# Key features:
# - Default and customized Config objects
# - Deterministic zootechnical datasets (bovine herd, growth pairs)
# - Root logger isolation for tests that call setup_logging()
# =============================================================================

import logging

import pytest

from agroinsight.config import Config
from agroinsight.logging_config import AUDIT_LOGGER, CORRELATIONS_LOGGER, STATISTICS_LOGGER


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config() -> Config:
    """Fresh default configuration."""
    return Config()


# =============================================================================
# Datasets
# =============================================================================

@pytest.fixture
def growth_rows():
    """Twelve calves where weaning weight is a linear function of birth weight."""
    return [
        {"peso_nascimento": 30 + i, "peso_desmame": 180 + 5 * i}
        for i in range(12)
    ]


@pytest.fixture
def herd_rows():
    """Thirty bovine records with identifier, breed and correlated measures."""
    rows = []
    for i in range(30):
        idade = 6 + i
        peso = 150 + 12 * idade + ((i * 7) % 5 - 2) * 3
        rows.append({
            "animal_id": f"A{i:03d}",
            "raca": "Nelore" if i % 3 else "Angus",
            "idade_meses": idade,
            "peso": peso,
            "altura_cernelha": round(90 + 0.08 * peso + ((i * 3) % 4 - 1.5), 2),
            "perimetro_toracico": round(100 + 0.15 * peso + ((i * 5) % 3 - 1), 2),
            "gpd": round(0.5 + 0.002 * peso + ((i * 11) % 7 - 3) * 0.01, 3),
            "consumo_ms": round(4 + 0.015 * peso + ((i * 13) % 6 - 2.5) * 0.1, 3),
        })
    return rows


@pytest.fixture
def unknown_species_rows():
    """Two strongly related columns with names outside every knowledge base."""
    return [{"a": float(i), "b": 3.0 * i + (i % 2)} for i in range(15)]


# =============================================================================
# Logging isolation
# =============================================================================

@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    for name in (STATISTICS_LOGGER, CORRELATIONS_LOGGER, AUDIT_LOGGER):
        logging.getLogger(name).setLevel(logging.NOTSET)
