from __future__ import annotations

from typing import Any, Dict, List

import pytest

from feedback360.core.engine import AggregationParameters

STRENGTH_TECH = "Pontos fortes >> Excelente domínio técnico da área"


@pytest.fixture
def params() -> AggregationParameters:
    # Explicit scale so FEEDBACK360_* environment overrides never leak into tests.
    return AggregationParameters(tier_scores={1: 1.0, 2: 2.0, 3: 3.0}, drop_zero_averages=True)


@pytest.fixture
def survey_rows() -> List[Dict[str, Any]]:
    """Three submissions shaped like a real export after CSV parsing."""
    return [
        {
            "Submission Date": "2025-04-16 09:57:24",
            "Comunicação clara >> Ana": "🎉 Parabéns! Supera as expectativas.",
            "Compromisso com prazos >> Ana": "🆗 Como esperado. Atende às expectativas.",
            "Comunicação clara >> Bruno": "Não se aplica",
            "Resolução de problemas >> Carla_1": "❗ Pode melhorar: Precisa de ajustes.",
            STRENGTH_TECH: True,
        },
        {
            "Submission Date": "2025-04-16 10:02:11",
            "Comunicação clara >> Ana": "Atende às expectativas",
            "Compromisso com prazos >> Ana": "N/A",
            "Comunicação clara >> Bruno": None,
            "Resolução de problemas >> Carla": "Supera as expectativas",
            STRENGTH_TECH: False,
        },
        {
            "Submission Date": "2025-04-16 10:15:40",
            "Comunicação clara >> Ana": "texto sem relação",
            "Compromisso com prazos >> Ana": "Supera",
            "Comunicação clara >> Bruno": "NA",
            "Resolução de problemas >> Carla": "Resolve problemas complexos sozinha",
            STRENGTH_TECH: True,
        },
    ]
