"""
Species Mapping Utilities for AgroInsight v1.0
==============================================
Maps free-form Portuguese/English species names and the Portuguese backend
ids onto the species vocabulary of the correlation knowledge base.
"""

import unicodedata
from types import MappingProxyType
from typing import Optional

from agroinsight.species_correlations import Species

# Knowledge-base id -> Portuguese backend id
BACKEND_SPECIES_IDS = MappingProxyType({
    Species.BOVINE.value: 'bovino',
    Species.SWINE.value: 'suino',
    Species.POULTRY.value: 'avicultura',
    Species.SHEEP.value: 'ovino',
    Species.GOAT.value: 'caprino',
    Species.AQUACULTURE.value: 'piscicultura',
    Species.FORAGE.value: 'forragem',
})

# Accent-free aliases -> knowledge-base id
SPECIES_ALIASES = MappingProxyType({
    # bovine
    'bovino': 'bovine', 'bovinos': 'bovine', 'gado': 'bovine', 'boi': 'bovine',
    'bois': 'bovine', 'vaca': 'bovine', 'vacas': 'bovine', 'novilho': 'bovine',
    'cattle': 'bovine', 'cow': 'bovine', 'beef': 'bovine', 'dairy': 'bovine',
    # swine
    'suino': 'swine', 'suinos': 'swine', 'porco': 'swine', 'porcos': 'swine',
    'pig': 'swine', 'pigs': 'swine', 'hog': 'swine', 'suinocultura': 'swine',
    # poultry
    'avicultura': 'poultry', 'aves': 'poultry', 'ave': 'poultry', 'frango': 'poultry',
    'frangos': 'poultry', 'galinha': 'poultry', 'galinhas': 'poultry',
    'chicken': 'poultry', 'broiler': 'poultry', 'poedeira': 'poultry',
    # sheep
    'ovino': 'sheep', 'ovinos': 'sheep', 'ovelha': 'sheep', 'ovelhas': 'sheep',
    'carneiro': 'sheep', 'cordeiro': 'sheep', 'ovinocultura': 'sheep',
    # goat
    'caprino': 'goat', 'caprinos': 'goat', 'cabra': 'goat', 'cabras': 'goat',
    'bode': 'goat', 'cabrito': 'goat', 'caprinocultura': 'goat', 'goats': 'goat',
    # aquaculture
    'piscicultura': 'aquaculture', 'aquicultura': 'aquaculture', 'peixe': 'aquaculture',
    'peixes': 'aquaculture', 'tilapia': 'aquaculture', 'camarao': 'aquaculture',
    'fish': 'aquaculture', 'shrimp': 'aquaculture',
    # forage
    'forragem': 'forage', 'forragens': 'forage', 'pastagem': 'forage',
    'pastagens': 'forage', 'capim': 'forage', 'pasto': 'forage',
    'grass': 'forage', 'pasture': 'forage',
})


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_species(name: Optional[str]) -> str:
    """Map a species name onto the knowledge-base vocabulary.

    Unknown names come back lower-cased and stripped.

    >>> normalize_species('Gado')
    'bovine'
    >>> normalize_species('Tilápia')
    'aquaculture'
    """
    if name is None:
        return ''
    cleaned = str(name).strip().lower()
    if Species.from_name(cleaned) is not None:
        return cleaned
    return SPECIES_ALIASES.get(_strip_accents(cleaned), cleaned)


def is_known_species(name: Optional[str]) -> bool:
    """True when the name maps onto a knowledge-base species"""
    return Species.from_name(normalize_species(name)) is not None


def to_backend_species_id(name: Optional[str]) -> str:
    """Portuguese backend id (bovino, suino, ...) for any known species name"""
    normalized = normalize_species(name)
    return BACKEND_SPECIES_IDS.get(normalized, normalized)
