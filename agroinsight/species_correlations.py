"""
Species Correlation Knowledge Base for AgroInsight v1.0
=======================================================
Biologically expected correlations per species, with relevance scores,
expected directions, ideal coefficient ranges and zootechnical
interpretations.

Column resolution is purely positional: for each side of a pair, the first
column (in dataset order) whose lower-cased name contains any of the side's
keywords is used. A dataset with both ``peso`` and ``peso_final`` therefore
resolves the keyword ``peso`` to whichever of the two comes first.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

EXPECTED_DIRECTIONS = ('positive', 'negative', 'either')


class Species(str, Enum):
    """Species covered by the knowledge base"""
    BOVINE = "bovine"
    SWINE = "swine"
    POULTRY = "poultry"
    SHEEP = "sheep"
    GOAT = "goat"
    FORAGE = "forage"
    AQUACULTURE = "aquaculture"

    @classmethod
    def from_name(cls, name: Union[str, 'Species']) -> Optional['Species']:
        """Case-insensitive lookup, None when the species is unknown"""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class IdealRange:
    """Expected interval for the correlation coefficient"""
    min: float
    max: float

    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(f"IdealRange min {self.min} is greater than max {self.max}")

    def contains(self, coefficient: float) -> bool:
        return self.min <= coefficient <= self.max

    def to_dict(self) -> Dict[str, float]:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class CorrelationPairSpec:
    """An expected relationship between two kinds of variables"""
    var1_keywords: Tuple[str, ...]
    var2_keywords: Tuple[str, ...]
    category: str
    relevance_score: int
    expected_direction: str
    interpretation: str
    ideal_range: Optional[IdealRange] = None

    def __post_init__(self):
        if not 0 <= self.relevance_score <= 10:
            raise ValueError(f"relevance_score must be within 0-10, got {self.relevance_score}")
        if self.expected_direction not in EXPECTED_DIRECTIONS:
            raise ValueError(f"Unknown expected_direction: {self.expected_direction}")
        if not self.var1_keywords or not self.var2_keywords:
            raise ValueError("Both sides of a correlation pair need at least one keyword")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'var1_keywords': list(self.var1_keywords),
            'var2_keywords': list(self.var2_keywords),
            'category': self.category,
            'relevance_score': self.relevance_score,
            'expected_direction': self.expected_direction,
            'interpretation': self.interpretation,
            'ideal_range': self.ideal_range.to_dict() if self.ideal_range else None,
        }


@dataclass(frozen=True)
class SpeciesCorrelationConfig:
    species: Species
    expected_fields: Tuple[str, ...]
    correlation_pairs: Tuple[CorrelationPairSpec, ...]
    additional_metrics: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'species': self.species.value,
            'expected_fields': list(self.expected_fields),
            'correlation_pairs': [pair.to_dict() for pair in self.correlation_pairs],
            'additional_metrics': list(self.additional_metrics),
        }


def _pair(var1_keywords, var2_keywords, category, relevance_score,
          expected_direction, interpretation, ideal_range=None) -> CorrelationPairSpec:
    return CorrelationPairSpec(
        var1_keywords=tuple(var1_keywords),
        var2_keywords=tuple(var2_keywords),
        category=category,
        relevance_score=relevance_score,
        expected_direction=expected_direction,
        interpretation=interpretation,
        ideal_range=IdealRange(*ideal_range) if ideal_range else None,
    )


# ---------------------------------------------------------------------------
# Knowledge base tables
# ---------------------------------------------------------------------------

_BOVINE_PAIRS = (
    _pair(('peso_nascimento', 'birth_weight', 'peso_nasc'),
          ('peso_desmame', 'weaning_weight', 'peso_desm'),
          'Crescimento', 10, 'positive',
          'Animais mais pesados ao nascer tendem a ter maior peso ao desmame, indicando vigor e viabilidade',
          (0.4, 0.8)),
    _pair(('peso_desmame', 'weaning_weight', 'peso_desm'),
          ('peso_atual', 'current_weight', 'peso_final'),
          'Crescimento', 10, 'positive',
          'Continuidade do crescimento - animais com melhor desempenho ao desmame mantêm vantagem',
          (0.5, 0.85)),
    _pair(('peso_nascimento', 'birth_weight'),
          ('peso_atual', 'current_weight', 'peso_final'),
          'Crescimento', 9, 'positive',
          'Persistência do peso inicial ao longo do crescimento',
          (0.3, 0.7)),
    _pair(('peso', 'weight', 'peso_atual'),
          ('altura_cernelha', 'height', 'cernelha'),
          'Morfometria', 9, 'positive',
          'Proporcionalidade corporal - indica conformação adequada e desenvolvimento harmônico',
          (0.6, 0.85)),
    _pair(('peso', 'weight', 'peso_atual'),
          ('perimetro_toracico', 'perimeter', 'toracico', 'chest'),
          'Morfometria', 9, 'positive',
          'Capacidade cardiorrespiratória e desenvolvimento muscular',
          (0.7, 0.9)),
    _pair(('altura_cernelha', 'height'),
          ('perimetro_toracico', 'perimeter'),
          'Morfometria', 7, 'positive',
          'Harmonia corporal e tipo racial',
          (0.5, 0.8)),
    _pair(('peso', 'weight'),
          ('comprimento_corporal', 'body_length', 'comprimento'),
          'Morfometria', 8, 'positive',
          'Desenvolvimento longitudinal proporcional ao peso',
          (0.6, 0.85)),
    _pair(('gpd', 'gmd', 'ganho', 'gain', 'ganho_peso'),
          ('peso', 'weight', 'peso_atual'),
          'Performance', 9, 'positive',
          'Eficiência de crescimento - animais mais pesados tendem a ganhar mais peso',
          (0.4, 0.75)),
    _pair(('consumo', 'intake', 'feed', 'consumo_ms'),
          ('ganho', 'gain', 'gpd', 'gmd'),
          'Eficiência', 10, 'positive',
          'Relação fundamental para conversão alimentar - maior consumo deve resultar em maior ganho',
          (0.5, 0.8)),
    _pair(('conversao_alimentar', 'conversion', 'ca', 'feed_conversion'),
          ('ganho', 'gain', 'gpd'),
          'Eficiência', 9, 'negative',
          'Menor conversão alimentar (melhor eficiência) com maior ganho de peso',
          (-0.6, -0.3)),
    _pair(('consumo', 'intake', 'consumo_ms'),
          ('peso', 'weight', 'peso_atual'),
          'Eficiência', 8, 'positive',
          'Animais mais pesados consomem mais matéria seca',
          (0.6, 0.9)),
    _pair(('producao_leite', 'milk_production', 'leite'),
          ('peso', 'weight', 'peso_atual'),
          'Produção', 8, 'positive',
          'Vacas mais pesadas tendem a produzir mais leite (maior capacidade corporal)',
          (0.3, 0.7)),
    _pair(('gordura', 'fat', 'gordura_leite'),
          ('proteina', 'protein', 'proteina_leite'),
          'Qualidade', 7, 'positive',
          'Componentes do leite geralmente variam juntos, indicando qualidade nutricional',
          (0.4, 0.75)),
    _pair(('producao_leite', 'milk_production'),
          ('consumo', 'intake', 'consumo_ms'),
          'Produção', 9, 'positive',
          'Maior produção requer maior consumo para atender demandas energéticas',
          (0.6, 0.85)),
    _pair(('idade', 'age', 'meses', 'months', 'idade_meses'),
          ('peso', 'weight', 'peso_atual'),
          'Desenvolvimento', 10, 'positive',
          'Curva de crescimento - peso aumenta com a idade',
          (0.7, 0.95)),
    _pair(('idade', 'age', 'meses'),
          ('altura', 'height', 'altura_cernelha'),
          'Desenvolvimento', 9, 'positive',
          'Desenvolvimento esquelético ao longo do tempo',
          (0.6, 0.9)),
    _pair(('ecc', 'escore_corporal', 'bcs', 'body_condition'),
          ('peso', 'weight'),
          'Condição', 8, 'positive',
          'Escore corporal reflete reservas energéticas e peso',
          (0.5, 0.8)),
    _pair(('ecc', 'escore_corporal', 'bcs'),
          ('producao_leite', 'milk_production'),
          'Produção', 7, 'negative',
          'Vacas em alta produção podem ter menor ECC devido à mobilização de reservas',
          (-0.5, -0.2)),
)

_SWINE_PAIRS = (
    _pair(('peso_nascimento', 'birth_weight'),
          ('peso_desmame', 'weaning_weight'),
          'Crescimento', 10, 'positive',
          'Leitões mais pesados ao nascer têm melhor desempenho ao desmame',
          (0.5, 0.8)),
    _pair(('peso_desmame', 'weaning_weight'),
          ('peso_final', 'final_weight', 'peso_abate'),
          'Crescimento', 10, 'positive',
          'Peso ao desmame prediz desempenho na fase de terminação',
          (0.4, 0.75)),
    _pair(('idade', 'age', 'dias', 'idade_dias'),
          ('peso', 'weight', 'peso_final'),
          'Crescimento', 10, 'positive',
          'Curva de crescimento suína - peso aumenta linearmente com idade',
          (0.8, 0.95)),
    _pair(('consumo', 'feed', 'consumo_racao'),
          ('ganho', 'gain', 'gpd'),
          'Eficiência', 10, 'positive',
          'Base da conversão alimentar - consumo deve resultar em ganho',
          (0.6, 0.85)),
    _pair(('conversao_alimentar', 'ca', 'feed_conversion'),
          ('gpd', 'ganho', 'gain'),
          'Eficiência', 10, 'negative',
          'Melhor conversão (menor CA) com maior ganho de peso',
          (-0.7, -0.4)),
    _pair(('consumo', 'feed', 'consumo_racao'),
          ('peso', 'weight'),
          'Eficiência', 9, 'positive',
          'Animais mais pesados consomem mais ração',
          (0.7, 0.9)),
    _pair(('espessura_toucinho', 'backfat', 'toucinho'),
          ('peso', 'weight', 'peso_final'),
          'Carcaça', 8, 'positive',
          'Animais mais pesados tendem a ter maior deposição de gordura',
          (0.4, 0.7)),
    _pair(('profundidade_lombo', 'loin_depth', 'lombo'),
          ('peso', 'weight'),
          'Carcaça', 8, 'positive',
          'Desenvolvimento muscular proporcional ao peso',
          (0.5, 0.8)),
    _pair(('espessura_toucinho', 'backfat'),
          ('percentual_carne_magra', 'lean_meat', 'carne_magra'),
          'Carcaça', 9, 'negative',
          'Maior toucinho resulta em menor percentual de carne magra',
          (-0.8, -0.5)),
    _pair(('rendimento_carcaca', 'carcass_yield', 'rendimento'),
          ('peso', 'weight', 'peso_final'),
          'Carcaça', 7, 'positive',
          'Animais mais pesados tendem a ter melhor rendimento de carcaça',
          (0.3, 0.6)),
    _pair(('gpd', 'ganho', 'gain'),
          ('idade_abate', 'days_to_market', 'dias_abate'),
          'Performance', 9, 'negative',
          'Maior ganho diário reduz idade ao abate (precocidade)',
          (-0.7, -0.4)),
    _pair(('numero_leitoes', 'litter_size', 'tamanho_leitegada'),
          ('peso_nascimento', 'birth_weight'),
          'Reprodução', 7, 'negative',
          'Leitegadas maiores tendem a ter leitões mais leves ao nascer',
          (-0.6, -0.3)),
)

_POULTRY_PAIRS = (
    _pair(('peso_7d', 'peso_7', 'weight_7d'),
          ('peso_14d', 'peso_14', 'weight_14d'),
          'Crescimento', 10, 'positive',
          'Continuidade do crescimento - desempenho na primeira semana prediz segunda semana',
          (0.6, 0.85)),
    _pair(('peso_14d', 'peso_14', 'weight_14d'),
          ('peso_21d', 'peso_21', 'weight_21d'),
          'Crescimento', 10, 'positive',
          'Persistência do crescimento nas primeiras três semanas',
          (0.7, 0.9)),
    _pair(('peso_inicial', 'initial_weight', 'peso_1d'),
          ('peso_final', 'final_weight', 'peso_abate'),
          'Crescimento', 9, 'positive',
          'Peso inicial influencia peso final em frangos de corte',
          (0.4, 0.7)),
    _pair(('idade', 'age', 'dias', 'idade_dias'),
          ('peso', 'weight'),
          'Crescimento', 10, 'positive',
          'Curva de crescimento aviária - crescimento rápido e linear',
          (0.85, 0.98)),
    _pair(('consumo', 'feed', 'consumo_racao'),
          ('ganho', 'gain', 'gpd', 'peso_ganho'),
          'Eficiência', 10, 'positive',
          'Relação consumo-ganho fundamental para CA',
          (0.7, 0.9)),
    _pair(('conversao_alimentar', 'ca', 'feed_conversion'),
          ('gpd', 'ganho', 'gain'),
          'Eficiência', 10, 'negative',
          'Melhor conversão com maior ganho de peso',
          (-0.8, -0.5)),
    _pair(('consumo', 'feed'),
          ('peso', 'weight'),
          'Eficiência', 9, 'positive',
          'Aves mais pesadas consomem mais ração',
          (0.8, 0.95)),
    _pair(('iep', 'eficiencia_produtiva', 'production_efficiency'),
          ('conversao_alimentar', 'ca'),
          'Performance', 9, 'negative',
          'Melhor IEP com menor conversão alimentar',
          (-0.7, -0.4)),
    _pair(('iep', 'eficiencia_produtiva'),
          ('viabilidade', 'viability', 'sobrevivencia'),
          'Performance', 10, 'positive',
          'IEP aumenta com maior viabilidade do lote',
          (0.6, 0.9)),
    _pair(('iep', 'eficiencia_produtiva'),
          ('peso', 'weight', 'peso_final'),
          'Performance', 9, 'positive',
          'Maior peso final contribui para melhor IEP',
          (0.5, 0.8)),
    _pair(('mortalidade', 'mortality'),
          ('iep', 'eficiencia_produtiva'),
          'Performance', 10, 'negative',
          'Maior mortalidade reduz drasticamente o IEP',
          (-0.8, -0.5)),
    _pair(('producao_ovos', 'egg_production', 'ovos'),
          ('peso_ovos', 'egg_weight'),
          'Produção', 7, 'either',
          'Relação entre quantidade e peso dos ovos (pode ser inversa)',
          (-0.4, 0.4)),
    _pair(('peso_ovos', 'egg_weight'),
          ('peso', 'weight', 'peso_corporal'),
          'Produção', 8, 'positive',
          'Aves mais pesadas tendem a produzir ovos maiores',
          (0.4, 0.7)),
    _pair(('massa_ovos', 'egg_mass'),
          ('consumo', 'feed', 'consumo_racao'),
          'Produção', 9, 'positive',
          'Maior produção de massa de ovos requer maior consumo',
          (0.6, 0.85)),
)

_SHEEP_PAIRS = (
    _pair(('peso_nascimento', 'birth_weight'),
          ('peso_desmame', 'weaning_weight'),
          'Crescimento', 10, 'positive',
          'Cordeiros mais pesados ao nascer têm melhor desempenho ao desmame',
          (0.5, 0.8)),
    _pair(('peso_desmame', 'weaning_weight'),
          ('peso_atual', 'current_weight'),
          'Crescimento', 9, 'positive',
          'Continuidade do crescimento pós-desmame',
          (0.6, 0.85)),
    _pair(('idade', 'age', 'meses', 'idade_meses'),
          ('peso', 'weight'),
          'Crescimento', 10, 'positive',
          'Curva de crescimento ovina',
          (0.7, 0.9)),
    _pair(('peso', 'weight'),
          ('altura_cernelha', 'height'),
          'Morfometria', 8, 'positive',
          'Proporcionalidade corporal em ovinos',
          (0.6, 0.85)),
    _pair(('peso', 'weight'),
          ('perimetro_toracico', 'chest_girth'),
          'Morfometria', 9, 'positive',
          'Perímetro torácico é excelente preditor de peso em ovinos',
          (0.75, 0.95)),
    _pair(('ecc', 'escore_corporal', 'bcs'),
          ('peso', 'weight'),
          'Condição', 8, 'positive',
          'ECC reflete reservas corporais e peso',
          (0.6, 0.85)),
    _pair(('producao_la', 'wool_production', 'la'),
          ('peso', 'weight'),
          'Produção', 7, 'positive',
          'Animais maiores tendem a produzir mais lã',
          (0.4, 0.7)),
    _pair(('diametro_fibra', 'fiber_diameter', 'finura'),
          ('producao_la', 'wool_production'),
          'Qualidade', 6, 'negative',
          'Fibras mais finas (menor diâmetro) podem ter menor produção total',
          (-0.5, -0.2)),
    _pair(('numero_cordeiros', 'litter_size', 'prolificidade'),
          ('peso_nascimento', 'birth_weight'),
          'Reprodução', 7, 'negative',
          'Partos múltiplos resultam em cordeiros mais leves',
          (-0.6, -0.3)),
    _pair(('ecc', 'escore_corporal'),
          ('numero_cordeiros', 'prolificidade'),
          'Reprodução', 8, 'positive',
          'Melhor condição corporal favorece prolificidade',
          (0.3, 0.6)),
)

_GOAT_PAIRS = (
    _pair(('peso_nascimento', 'birth_weight'),
          ('peso_desmame', 'weaning_weight'),
          'Crescimento', 10, 'positive',
          'Cabritos mais pesados ao nascer têm melhor desempenho',
          (0.5, 0.8)),
    _pair(('peso_desmame', 'weaning_weight'),
          ('peso_atual', 'current_weight'),
          'Crescimento', 9, 'positive',
          'Continuidade do crescimento em caprinos',
          (0.6, 0.85)),
    _pair(('idade', 'age', 'meses'),
          ('peso', 'weight'),
          'Crescimento', 10, 'positive',
          'Curva de crescimento caprina',
          (0.7, 0.9)),
    _pair(('peso', 'weight'),
          ('altura_cernelha', 'height'),
          'Morfometria', 8, 'positive',
          'Proporcionalidade corporal em caprinos',
          (0.6, 0.85)),
    _pair(('peso', 'weight'),
          ('perimetro_toracico', 'chest_girth'),
          'Morfometria', 9, 'positive',
          'Perímetro torácico prediz peso em caprinos',
          (0.75, 0.95)),
    _pair(('producao_leite', 'milk_production'),
          ('peso', 'weight'),
          'Produção', 8, 'positive',
          'Cabras maiores tendem a produzir mais leite',
          (0.4, 0.7)),
    _pair(('gordura_leite', 'milk_fat'),
          ('proteina_leite', 'milk_protein'),
          'Qualidade', 7, 'positive',
          'Componentes do leite variam juntos',
          (0.4, 0.75)),
    _pair(('producao_leite', 'milk_production'),
          ('ecc', 'escore_corporal'),
          'Produção', 8, 'negative',
          'Alta produção pode reduzir ECC por mobilização de reservas',
          (-0.5, -0.2)),
    _pair(('ecc', 'escore_corporal', 'bcs'),
          ('peso', 'weight'),
          'Condição', 8, 'positive',
          'ECC reflete condição nutricional e peso',
          (0.6, 0.85)),
    _pair(('numero_cabritos', 'litter_size', 'prolificidade'),
          ('peso_nascimento', 'birth_weight'),
          'Reprodução', 7, 'negative',
          'Partos múltiplos resultam em cabritos mais leves',
          (-0.6, -0.3)),
    _pair(('ecc', 'escore_corporal'),
          ('numero_cabritos', 'prolificidade'),
          'Reprodução', 8, 'positive',
          'Melhor condição corporal favorece prolificidade',
          (0.3, 0.6)),
)

_FORAGE_PAIRS = (
    _pair(('altura', 'height', 'altura_planta'),
          ('massa_verde', 'green_mass', 'producao'),
          'Produção', 9, 'positive',
          'Maior altura geralmente indica maior produção de massa',
          (0.6, 0.85)),
    _pair(('massa_verde', 'green_mass'),
          ('massa_seca', 'dry_matter', 'ms'),
          'Produção', 10, 'positive',
          'Massa verde e seca são altamente correlacionadas',
          (0.8, 0.95)),
    _pair(('densidade', 'density', 'densidade_forragem'),
          ('massa', 'mass', 'producao'),
          'Produção', 9, 'positive',
          'Maior densidade resulta em maior produção por área',
          (0.7, 0.9)),
    _pair(('proteina', 'protein', 'proteina_bruta', 'pb'),
          ('digestibilidade', 'digestibility', 'divms'),
          'Qualidade', 8, 'positive',
          'Maior teor proteico geralmente associado a melhor digestibilidade',
          (0.5, 0.8)),
    _pair(('fdn', 'ndf', 'fibra_detergente_neutro'),
          ('digestibilidade', 'digestibility'),
          'Qualidade', 9, 'negative',
          'Maior FDN reduz digestibilidade da forragem',
          (-0.8, -0.5)),
    _pair(('fda', 'adf', 'fibra_detergente_acido'),
          ('digestibilidade', 'digestibility'),
          'Qualidade', 9, 'negative',
          'FDA é inversamente relacionada à digestibilidade',
          (-0.85, -0.6)),
    _pair(('fdn', 'ndf'),
          ('fda', 'adf'),
          'Qualidade', 8, 'positive',
          'Frações fibrosas são correlacionadas',
          (0.7, 0.9)),
    _pair(('proteina', 'protein', 'pb'),
          ('energia', 'energy', 'energia_metabolizavel'),
          'Qualidade', 7, 'positive',
          'Forragens com mais proteína tendem a ter mais energia',
          (0.5, 0.8)),
    _pair(('altura', 'height'),
          ('cobertura', 'coverage', 'cobertura_solo'),
          'Estrutura', 7, 'positive',
          'Maior altura associada a melhor cobertura do solo',
          (0.5, 0.8)),
    _pair(('numero_perfilhos', 'tiller_number', 'perfilhos'),
          ('massa', 'mass', 'producao'),
          'Estrutura', 8, 'positive',
          'Maior perfilhamento resulta em maior produção',
          (0.6, 0.85)),
    _pair(('taxa_acumulo', 'accumulation_rate', 'acumulo'),
          ('massa', 'mass', 'producao'),
          'Produção', 9, 'positive',
          'Taxa de acúmulo determina produção de forragem',
          (0.7, 0.9)),
    _pair(('altura', 'height', 'idade'),
          ('proteina', 'protein', 'pb'),
          'Maturidade', 7, 'negative',
          'Forragens mais maduras (altas) têm menor teor proteico',
          (-0.6, -0.3)),
    _pair(('altura', 'height', 'idade'),
          ('fdn', 'ndf', 'fibra'),
          'Maturidade', 8, 'positive',
          'Maturidade aumenta teor de fibra',
          (0.5, 0.8)),
)

_AQUACULTURE_PAIRS = (
    _pair(('peso_inicial', 'initial_weight'),
          ('peso_final', 'final_weight'),
          'Crescimento', 9, 'positive',
          'Peixes maiores no início tendem a manter vantagem',
          (0.5, 0.8)),
    _pair(('idade', 'age', 'dias', 'tempo_cultivo'),
          ('peso', 'weight'),
          'Crescimento', 10, 'positive',
          'Curva de crescimento em aquicultura',
          (0.8, 0.95)),
    _pair(('comprimento', 'length', 'comprimento_total'),
          ('peso', 'weight'),
          'Morfometria', 10, 'positive',
          'Relação peso-comprimento fundamental em peixes',
          (0.85, 0.98)),
    _pair(('consumo', 'feed', 'consumo_racao'),
          ('ganho', 'gain', 'gpd'),
          'Eficiência', 10, 'positive',
          'Base da conversão alimentar em aquicultura',
          (0.7, 0.9)),
    _pair(('conversao_alimentar', 'ca', 'fcr'),
          ('gpd', 'ganho', 'gain'),
          'Eficiência', 10, 'negative',
          'Melhor conversão com maior ganho de peso',
          (-0.7, -0.4)),
    _pair(('densidade', 'density', 'densidade_estocagem'),
          ('peso', 'weight', 'peso_final'),
          'Manejo', 8, 'negative',
          'Maior densidade pode reduzir crescimento individual',
          (-0.6, -0.3)),
    _pair(('densidade', 'density'),
          ('sobrevivencia', 'survival', 'viabilidade'),
          'Manejo', 9, 'negative',
          'Alta densidade pode aumentar mortalidade',
          (-0.7, -0.4)),
    _pair(('biomassa', 'biomass'),
          ('oxigenio', 'oxygen', 'oxigenio_dissolvido'),
          'Qualidade Água', 9, 'negative',
          'Maior biomassa consome mais oxigênio',
          (-0.6, -0.3)),
    _pair(('temperatura', 'temperature', 'temperatura_agua'),
          ('gpd', 'ganho', 'crescimento'),
          'Qualidade Água', 8, 'either',
          'Temperatura ótima maximiza crescimento (relação não-linear)',
          (-0.5, 0.7)),
    _pair(('oxigenio', 'oxygen', 'oxigenio_dissolvido'),
          ('sobrevivencia', 'survival'),
          'Qualidade Água', 10, 'positive',
          'Oxigênio adequado é crítico para sobrevivência',
          (0.5, 0.8)),
    _pair(('oxigenio', 'oxygen'),
          ('conversao_alimentar', 'ca', 'fcr'),
          'Qualidade Água', 8, 'negative',
          'Melhor oxigenação melhora conversão alimentar',
          (-0.6, -0.3)),
    _pair(('ph',),
          ('sobrevivencia', 'survival'),
          'Qualidade Água', 7, 'either',
          'pH fora da faixa ideal reduz sobrevivência',
          (-0.5, 0.5)),
    _pair(('gpd', 'ganho', 'gain'),
          ('tempo_cultivo', 'culture_time', 'dias'),
          'Performance', 8, 'negative',
          'Maior ganho diário reduz tempo de cultivo',
          (-0.7, -0.4)),
)

_BOVINE_FIELDS = (
    'peso_nascimento', 'peso_desmame', 'peso_atual', 'peso_final', 'idade',
    'idade_meses', 'idade_dias', 'gpd', 'gmd', 'ganho_peso_diario',
    'altura_cernelha', 'perimetro_toracico', 'comprimento_corporal',
    'consumo_ms', 'consumo_diario', 'conversao_alimentar', 'producao_leite',
    'gordura_leite', 'proteina_leite', 'ecc', 'escore_corporal', 'bcs',
)

_BOVINE_METRICS = (
    'taxa_prenhez', 'intervalo_partos', 'numero_partos', 'idade_primeiro_parto',
    'dias_lactacao',
)

_SWINE_FIELDS = (
    'peso_nascimento', 'peso_desmame', 'peso_final', 'idade_dias',
    'idade_abate', 'gpd', 'ganho_peso_diario', 'consumo_racao',
    'conversao_alimentar', 'espessura_toucinho', 'profundidade_lombo',
    'rendimento_carcaca', 'percentual_carne_magra', 'mortalidade',
    'numero_leitoes',
)

_SWINE_METRICS = (
    'taxa_sobrevivencia', 'uniformidade_lote', 'idade_primeiro_cio',
)

_POULTRY_FIELDS = (
    'peso_inicial', 'peso_7d', 'peso_14d', 'peso_21d', 'peso_final',
    'idade_dias', 'idade_abate', 'gpd', 'ganho_peso', 'consumo_racao',
    'conversao_alimentar', 'mortalidade', 'viabilidade', 'iep',
    'eficiencia_produtiva', 'producao_ovos', 'peso_ovos', 'massa_ovos',
)

_POULTRY_METRICS = (
    'uniformidade_lote', 'taxa_eclosao', 'fertilidade',
    'conversao_alimentar_residual', 'ganho_compensatorio',
)

_SHEEP_FIELDS = (
    'peso_nascimento', 'peso_desmame', 'peso_atual', 'idade_meses',
    'idade_dias', 'gpd', 'ganho_peso', 'altura_cernelha', 'perimetro_toracico',
    'ecc', 'escore_corporal', 'producao_la', 'diametro_fibra',
    'numero_cordeiros', 'tipo_parto',
)

_SHEEP_METRICS = (
    'taxa_desmame', 'intervalo_partos', 'peso_velo',
)

_GOAT_FIELDS = (
    'peso_nascimento', 'peso_desmame', 'peso_atual', 'idade_meses',
    'idade_dias', 'gpd', 'ganho_peso', 'altura_cernelha', 'perimetro_toracico',
    'producao_leite', 'gordura_leite', 'proteina_leite', 'ecc',
    'escore_corporal', 'numero_cabritos',
)

_GOAT_METRICS = (
    'taxa_desmame', 'intervalo_partos', 'dias_lactacao',
)

_FORAGE_FIELDS = (
    'altura_planta', 'massa_verde', 'massa_seca', 'proteina_bruta', 'fdn',
    'fda', 'digestibilidade', 'energia_metabolizavel', 'densidade_forragem',
    'taxa_acumulo', 'cobertura_solo', 'numero_perfilhos',
)

_FORAGE_METRICS = (
    'relacao_folha_colmo', 'material_morto', 'taxa_crescimento',
    'capacidade_suporte', 'lotacao_animal',
)

_AQUACULTURE_FIELDS = (
    'peso_inicial', 'peso_final', 'comprimento_total', 'comprimento_padrao',
    'idade_dias', 'tempo_cultivo', 'gpd', 'ganho_peso', 'consumo_racao',
    'conversao_alimentar', 'densidade_estocagem', 'biomassa',
    'temperatura_agua', 'oxigenio_dissolvido', 'ph', 'sobrevivencia',
    'mortalidade',
)

_AQUACULTURE_METRICS = (
    'fator_condicao', 'uniformidade_lote', 'taxa_alimentacao', 'amonia',
    'nitrito', 'alcalinidade',
)


SPECIES_CORRELATIONS: Mapping[Species, SpeciesCorrelationConfig] = MappingProxyType({
    Species.BOVINE: SpeciesCorrelationConfig(
        Species.BOVINE, _BOVINE_FIELDS, _BOVINE_PAIRS, _BOVINE_METRICS),
    Species.SWINE: SpeciesCorrelationConfig(
        Species.SWINE, _SWINE_FIELDS, _SWINE_PAIRS, _SWINE_METRICS),
    Species.POULTRY: SpeciesCorrelationConfig(
        Species.POULTRY, _POULTRY_FIELDS, _POULTRY_PAIRS, _POULTRY_METRICS),
    Species.SHEEP: SpeciesCorrelationConfig(
        Species.SHEEP, _SHEEP_FIELDS, _SHEEP_PAIRS, _SHEEP_METRICS),
    Species.GOAT: SpeciesCorrelationConfig(
        Species.GOAT, _GOAT_FIELDS, _GOAT_PAIRS, _GOAT_METRICS),
    Species.FORAGE: SpeciesCorrelationConfig(
        Species.FORAGE, _FORAGE_FIELDS, _FORAGE_PAIRS, _FORAGE_METRICS),
    Species.AQUACULTURE: SpeciesCorrelationConfig(
        Species.AQUACULTURE, _AQUACULTURE_FIELDS, _AQUACULTURE_PAIRS, _AQUACULTURE_METRICS),
})


def get_species_correlation_config(species: Union[str, Species]) -> Optional[SpeciesCorrelationConfig]:
    """Knowledge base entry for a species id (case-insensitive), None when unknown"""
    key = Species.from_name(species)
    if key is None:
        return None
    return SPECIES_CORRELATIONS[key]


def get_all_species_correlation_configs() -> Mapping[str, SpeciesCorrelationConfig]:
    """Read-only view of every species configuration keyed by species id"""
    return MappingProxyType({species.value: cfg for species, cfg in SPECIES_CORRELATIONS.items()})


def find_first_matching_column(columns: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    """First column (in input order) whose name contains any keyword"""
    lowered_keywords = [k.lower() for k in keywords]
    for column in columns:
        name = column.lower()
        if any(keyword in name for keyword in lowered_keywords):
            return column
    return None


def find_matching_variables(columns: Sequence[str],
                            pair: CorrelationPairSpec) -> Optional[Tuple[str, str]]:
    """Resolve both sides of a pair to dataset columns.

    Returns None unless both sides resolve and they resolve to different
    columns.
    """
    var1 = find_first_matching_column(columns, pair.var1_keywords)
    if var1 is None:
        return None
    var2 = find_first_matching_column(columns, pair.var2_keywords)
    if var2 is None or var2 == var1:
        return None
    return var1, var2
