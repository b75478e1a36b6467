"""
Variable Classifier Module for AgroInsight v1.0
===============================================
Detects the statistical type of each dataset column (continuous, discrete,
nominal, ordinal, temporal, identifier), flags zootechnical variables and
looks up their unit and description.

Identifier columns are recognized by name only when "id" is a whole token of
the column name (split on underscores, spaces, hyphens and camelCase
boundaries), as in "id", "id_animal" or "animalId", or when the name contains
"codigo", "código" or "code". A plain substring match on "id" would turn
"idade" (age) and "umidade" (moisture) into identifiers, so those stay
numeric measures.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence, Tuple

from agroinsight.config import Config
from agroinsight.logging_config import get_logger
from agroinsight.tabular import Dataset, column_names, column_values, to_records
from agroinsight.value_parsing import NumberParsingRule, is_date_value

logger = get_logger(__name__)


class VariableType(str, Enum):
    """Statistical type of a column"""
    CONTINUOUS = "continuous"
    DISCRETE = "discrete"
    NOMINAL = "nominal"
    ORDINAL = "ordinal"
    TEMPORAL = "temporal"
    IDENTIFIER = "identifier"


class RawDataKind(str, Enum):
    """Storage kind observed in the raw values"""
    NUMERIC = "numeric"
    STRING = "string"
    DATE = "date"
    MIXED = "mixed"


NUMERIC_TYPES = frozenset({VariableType.CONTINUOUS, VariableType.DISCRETE})
CATEGORICAL_TYPES = frozenset({VariableType.NOMINAL, VariableType.ORDINAL})


# Zootechnical keyword dictionary, grouped by concept
ZOOTECHNICAL_KEYWORDS = MappingProxyType({
    'raca': ('raca', 'raça', 'breed', 'race'),
    'sexo': ('sexo', 'genero', 'gênero', 'sex', 'gender'),
    'idade': ('idade', 'era', 'age', 'meses', 'months', 'dias', 'days'),
    'peso': ('peso', 'weight', 'kg', 'quilos', 'kilos'),
    'altura': ('altura', 'height', 'cm', 'centimetros'),
    'perimetro': ('perimetro', 'perímetro', 'perimeter', 'toracico', 'torácico'),
    'gpd': ('gpd', 'gmd', 'ganho', 'gain', 'diario', 'diário', 'daily'),
    'conversao': ('conversao', 'conversão', 'alimentar', 'feed', 'conversion'),
    'rendimento': ('rendimento', 'yield', 'carcaca', 'carcaça', 'carcass'),
    'aol': ('aol', 'olho', 'lombo', 'ribeye', 'eye'),
    'escore': ('escore', 'score', 'corporal', 'body', 'condicao', 'condição'),
    'gordura': ('gordura', 'fat', 'acabamento', 'finishing', 'marbling'),
    'classificacao': ('classificacao', 'classificação', 'classification', 'grade'),
    'vacinacao': ('vacinacao', 'vacinação', 'vaccination', 'vaccine'),
    'vermifugacao': ('vermifugacao', 'vermifugação', 'deworming'),
    'sistema': ('sistema', 'system', 'producao', 'produção', 'production'),
    'dieta': ('dieta', 'diet', 'alimentacao', 'alimentação', 'feed'),
    'consumo': ('consumo', 'consumption', 'intake'),
    'valor': ('valor', 'value', 'preco', 'preço', 'price', 'custo', 'cost'),
    'arroba': ('arroba', '@'),
    'ano': ('ano', 'year'),
    'mes': ('mes', 'mês', 'month'),
    'trimestre': ('trimestre', 'quarter'),
    'estado': ('estado', 'state', 'uf'),
    'regiao': ('regiao', 'região', 'region'),
    'quantidade': ('quantidade', 'quantity', 'numero', 'número', 'number', 'animais', 'animals'),
})

# First key contained in the column name wins
VARIABLE_DESCRIPTIONS = MappingProxyType({
    'peso': 'Peso do animal',
    'weight': 'Peso do animal',
    'idade': 'Idade do animal',
    'age': 'Idade do animal',
    'altura': 'Altura do animal',
    'height': 'Altura do animal',
    'rendimento': 'Rendimento de carcaça',
    'yield': 'Rendimento de carcaça',
    'gpd': 'Ganho de peso diário',
    'gmd': 'Ganho médio diário',
    'conversao': 'Conversão alimentar',
    'raca': 'Raça do animal',
    'breed': 'Raça do animal',
    'sexo': 'Sexo do animal',
    'sex': 'Sexo do animal',
})

VARIABLE_UNITS = MappingProxyType({
    'peso': 'kg',
    'weight': 'kg',
    'altura': 'cm',
    'height': 'cm',
    'rendimento': '%',
    'yield': '%',
    'gpd': 'kg/dia',
    'gmd': 'kg/dia',
    'temperatura': '°C',
    'temperature': '°C',
    'valor': 'R$',
    'preco': 'R$',
    'price': 'R$',
    'custo': 'R$',
    'cost': 'R$',
})

TEMPORAL_NAME_HINTS = ('ano', 'year', 'data', 'date')
IDENTIFIER_NAME_TOKENS = frozenset({'id', 'codigo', 'código', 'code'})
ORDINAL_NAME_HINTS = ('escore', 'score', 'classificacao', 'classification', 'grade', 'nivel', 'level')


@dataclass(frozen=True)
class VariableDescriptor:
    """Classification of one dataset column"""
    name: str
    type: VariableType
    raw_type: RawDataKind
    is_zootechnical: bool
    unit: Optional[str] = None
    description: Optional[str] = None
    zootechnical_groups: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    @property
    def is_categorical(self) -> bool:
        return self.type in CATEGORICAL_TYPES

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.type.value,
            'raw_type': self.raw_type.value,
            'is_zootechnical': self.is_zootechnical,
            'unit': self.unit,
            'description': self.description,
            'zootechnical_groups': list(self.zootechnical_groups),
        }


def zootechnical_groups(name: str) -> Tuple[str, ...]:
    """Keyword groups whose keywords occur in the column name"""
    lowered = name.lower()
    return tuple(
        group for group, keywords in ZOOTECHNICAL_KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    )


def lookup_unit(name: str) -> Optional[str]:
    lowered = name.lower()
    for key, unit in VARIABLE_UNITS.items():
        if key in lowered:
            return unit
    if '%' in lowered or 'percent' in lowered:
        return '%'
    return None


def lookup_description(name: str) -> Optional[str]:
    lowered = name.lower()
    for key, description in VARIABLE_DESCRIPTIONS.items():
        if key in lowered:
            return description
    return None


def _name_tokens(name: str) -> List[str]:
    # animalId -> animal_Id before splitting on separators
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    return [token for token in re.split(r'[^0-9a-zà-ÿ]+', spaced.lower()) if token]


def has_identifier_name(name: str) -> bool:
    """True for names such as 'id', 'id_animal', 'animalId' or 'codigo_lote'.

    'id' must be a whole name token so that 'idade' stays an age column.
    """
    tokens = _name_tokens(name)
    if any(token in IDENTIFIER_NAME_TOKENS for token in tokens):
        return True
    lowered = name.lower()
    return any(hint in lowered for hint in ('codigo', 'código', 'code'))


def _distinct_count(values: Sequence[Any]) -> int:
    try:
        return len(set(values))
    except TypeError:
        # unhashable cells (lists, dicts) compare by their text
        return len({repr(v) for v in values})


class VariableClassifier:
    """Classifies dataset columns into statistical variable types"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.thresholds = self.config.classifier
        self.parsing_rule = NumberParsingRule.from_config(self.config.parsing)

    def classify(self, name: str, values: Sequence[Any]) -> VariableDescriptor:
        """Classify a single column from its name and raw values"""
        groups = zootechnical_groups(name)
        base = dict(
            name=name,
            is_zootechnical=bool(groups),
            unit=lookup_unit(name),
            description=lookup_description(name),
            zootechnical_groups=groups,
        )

        clean = [v for v in values if not self.parsing_rule.is_missing(v)]
        total = len(clean)
        if total == 0:
            logger.debug(f"Column '{name}' has no values, classified as nominal")
            return VariableDescriptor(type=VariableType.NOMINAL, raw_type=RawDataKind.STRING, **base)

        numbers = [n for n in (self.parsing_rule.parse_number(v) for v in clean) if n is not None]
        numeric_ratio = len(numbers) / total
        date_ratio = sum(1 for v in clean if is_date_value(v)) / total
        lowered = name.lower()

        if date_ratio > self.thresholds.temporal_ratio or any(h in lowered for h in TEMPORAL_NAME_HINTS):
            variable_type, raw_type = VariableType.TEMPORAL, RawDataKind.DATE

        elif has_identifier_name(name) or (
            _distinct_count(clean) == total and numeric_ratio < self.thresholds.identifier_numeric_ratio
        ):
            variable_type, raw_type = VariableType.IDENTIFIER, RawDataKind.STRING

        elif numeric_ratio >= self.thresholds.numeric_ratio:
            unique_ratio = _distinct_count(numbers) / len(numbers)
            all_integral = all(n.is_integer() for n in numbers)
            if unique_ratio < self.thresholds.discrete_unique_ratio and all_integral:
                variable_type = VariableType.DISCRETE
            else:
                variable_type = VariableType.CONTINUOUS
            raw_type = RawDataKind.NUMERIC

        else:
            if any(h in lowered for h in ORDINAL_NAME_HINTS):
                variable_type = VariableType.ORDINAL
            else:
                variable_type = VariableType.NOMINAL
            raw_type = RawDataKind.MIXED if numbers else RawDataKind.STRING

        return VariableDescriptor(type=variable_type, raw_type=raw_type, **base)

    def classify_dataset(self, data: Dataset) -> Dict[str, VariableDescriptor]:
        """Classify every column of a dataset, preserving column order"""
        records = to_records(data)
        columns = column_names(records)

        variables = {
            name: self.classify(name, column_values(records, name))
            for name in columns
        }

        logger.info(
            f"Classified {len(variables)} columns "
            f"({sum(1 for v in variables.values() if v.is_zootechnical)} zootechnical)"
        )
        return variables
