"""
Report Generator Module for AgroInsight v1.0
============================================
Generates Markdown text from correlation results. Report text is written in
Portuguese for the producers and technicians who read it.
"""

from typing import Dict, List, Optional

from agroinsight.config import Config
from agroinsight.correlation_analysis import CorrelationAnalysisReport, CorrelationResult
from agroinsight.logging_config import get_logger

logger = get_logger(__name__)

STRENGTH_LABELS_PT = {
    'very weak': 'muito fraca',
    'weak': 'fraca',
    'moderate': 'moderada',
    'strong': 'forte',
    'very strong': 'muito forte',
}

EXPECTED_DIRECTION_PT = {
    'positive': 'positiva',
    'negative': 'negativa',
    'either': 'qualquer',
}

CATEGORY_RECOMMENDATIONS = {
    'Crescimento': [
        'Utilize esta correlação forte para predição de desempenho',
        'Considere para seleção genética e melhoramento',
    ],
    'Eficiência': [
        'Monitore estas variáveis para otimização econômica',
        'Ajuste manejo nutricional baseado nesta relação',
    ],
    'Qualidade': [
        'Use como indicador de qualidade do produto',
        'Considere para estratificação de preços',
    ],
    'Produção': [
        'Importante para planejamento produtivo',
        'Considere para estimativas de produção',
    ],
}


def strength_label_pt(strength: str) -> str:
    return STRENGTH_LABELS_PT.get(strength, strength)


class ReportGenerator:
    """Generates correlation reports for AgroInsight"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def correlation_interpretation(self, result: CorrelationResult) -> str:
        """Markdown interpretation of a single correlation"""
        direction = 'positiva' if result.coefficient > 0 else 'negativa'
        strong_threshold = self.config.correlation.strong_correlation_threshold

        text = []
        text.append(f"**{result.var1} vs {result.var2}** ({result.category})\n")
        text.append(f"📊 **Coeficiente de Pearson:** r = {result.coefficient:.3f}")
        text.append(f"📈 **Força:** {strength_label_pt(result.strength)} {direction}")
        text.append(f"🎯 **Relevância Biológica:** {result.relevance_score}/10")
        text.append(
            f"📉 **Significância:** {'Sim' if result.significant else 'Não'} "
            f"(p = {result.p_value:.4f})\n"
        )

        if result.ideal_range is not None:
            position = 'dentro' if result.within_ideal_range else 'fora'
            text.append(
                f"📐 **Faixa ideal:** {result.ideal_range.min:.2f} a {result.ideal_range.max:.2f} "
                f"(coeficiente {position} da faixa)\n"
            )

        if not result.matches_expectation:
            expected = EXPECTED_DIRECTION_PT.get(result.expected_direction, result.expected_direction)
            text.append(
                f"⚠️ **Atenção:** Esta correlação não corresponde ao padrão esperado ({expected}). "
                f"Isso pode indicar problemas nos dados ou condições atípicas no manejo.\n"
            )

        text.append(f"**Interpretação Zootécnica:**\n{result.interpretation}\n")

        if result.significant and abs(result.coefficient) > strong_threshold:
            suggestions = CATEGORY_RECOMMENDATIONS.get(result.category)
            if suggestions:
                text.append("**Recomendações:**")
                text.extend(f"- {s}" for s in suggestions)
        elif not result.significant:
            text.append(
                "**Nota:** Correlação não significativa estatisticamente. "
                "Pode ser necessário mais dados ou as variáveis podem ser independentes."
            )

        return "\n".join(text) + "\n"

    def correlation_summary(self, report: CorrelationAnalysisReport, top_n: int = 5) -> str:
        """Compact Markdown summary of a correlation report"""
        lines: List[str] = []
        lines.append(f"## Análise de Correlações ({report.species})\n")

        if report.exploratory_only:
            lines.append("_Sem configuração específica para a espécie: apenas análise exploratória._\n")

        lines.append(f"- Correlações testadas: {report.total_correlations}")
        lines.append(f"- Significativas: {report.significant_correlations}")
        lines.append(f"- Alta relevância biológica: {report.high_relevance_correlations}")

        if report.correlations_by_category:
            lines.append("\n### Por categoria")
            for category, count in self._sorted_categories(report.correlations_by_category):
                lines.append(f"- {category}: {count}")

        if report.top_correlations:
            lines.append("\n### Principais achados")
            for result in report.top_correlations[:top_n]:
                marker = '✅' if result.significant else '▫️'
                lines.append(
                    f"- {marker} {result.var1} vs {result.var2} ({result.category}): "
                    f"r = {result.coefficient:.3f}, {strength_label_pt(result.strength)}, "
                    f"p = {result.p_value:.4f}, relevância {result.relevance_score}/10"
                )

        if report.warnings:
            lines.append("\n### Avisos")
            lines.extend(f"- {w}" for w in report.warnings)

        if report.recommendations:
            lines.append("\n### Recomendações")
            lines.extend(f"- {r}" for r in report.recommendations)

        logger.debug(f"Built correlation summary with {len(report.top_correlations)} top correlations")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _sorted_categories(histogram: Dict[str, int]):
        return sorted(histogram.items(), key=lambda item: (-item[1], item[0]))
