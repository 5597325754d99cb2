"""
Keyword tables for competencies (radar) and strength categories (bar chart).

Keyword sets must stay disjoint across categories: classification returns the
first match in CLASSIFICATION_ORDER, so an overlapping keyword would silently
move columns between categories. tests/test_categories.py checks this.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, TypeVar

from feedback360.core.text import fold

E = TypeVar("E", bound=Enum)


class Competency(Enum):
    COOPERATION = "Cooperação"
    COMMUNICATION = "Comunicação"
    COMMITMENT = "Comprometimento"
    TECHNICAL_MASTERY = "Domínio Técnico"
    PROBLEM_SOLVING = "Resolução de Problemas"

    @property
    def label(self) -> str:
        return self.value


class StrengthCategory(Enum):
    TECHNICAL_MASTERY = "Domínio técnico"
    ADAPTABILITY = "Adaptabilidade"
    COMMITMENT = "Comprometimento"
    PROBLEM_SOLVING = "Resolução de problemas"
    COMMUNICATION = "Comunicação"

    @property
    def label(self) -> str:
        return self.value

    @property
    def phrase(self) -> str:
        return STRENGTH_PHRASES[self]


COMPETENCY_KEYWORDS: Dict[Competency, Sequence[str]] = {
    Competency.PROBLEM_SOLVING: ("resolução de problemas", "resolver problemas", "problemas"),
    Competency.COMMUNICATION: ("comunicação", "comunica"),
    Competency.COOPERATION: ("cooperação", "coopera", "colaboração", "trabalho em equipe"),
    Competency.COMMITMENT: ("compromisso", "comprometimento", "comprometid"),
    Competency.TECHNICAL_MASTERY: ("domínio técnico", "conhecimento técnico", "habilidade técnica"),
}

# Problem solving first: its questions often mention other skills in passing.
CLASSIFICATION_ORDER: Tuple[Competency, ...] = (
    Competency.PROBLEM_SOLVING,
    Competency.COMMUNICATION,
    Competency.COOPERATION,
    Competency.COMMITMENT,
    Competency.TECHNICAL_MASTERY,
)

# One canonical survey option per strength category.
STRENGTH_PHRASES: Dict[StrengthCategory, str] = {
    StrengthCategory.TECHNICAL_MASTERY: "Excelente domínio técnico da área",
    StrengthCategory.ADAPTABILITY: "Facilidade de adaptação a mudanças e novas demandas",
    StrengthCategory.COMMITMENT: "Dedicação, comprometimento e foco em resultados",
    StrengthCategory.PROBLEM_SOLVING: "Criatividade e inovação na resolução de problemas",
    StrengthCategory.COMMUNICATION: "Excelente comunicação e habilidade de apresentação",
}


def _fold_table(table: Dict[E, Sequence[str]], order: Sequence[E]) -> Tuple[Tuple[E, Tuple[str, ...]], ...]:
    return tuple((cat, tuple(fold(k) for k in table[cat])) for cat in order)


_COMPETENCY_TABLE = _fold_table(COMPETENCY_KEYWORDS, CLASSIFICATION_ORDER)
_STRENGTH_TABLE = tuple((cat, (fold(STRENGTH_PHRASES[cat]),)) for cat in StrengthCategory)


def match_category(text: str, table: Sequence[Tuple[E, Sequence[str]]]) -> Optional[E]:
    """First category in `table` with a keyword contained in folded `text`."""
    folded = fold(text or "")
    if not folded:
        return None
    for category, keywords in table:
        if any(k in folded for k in keywords):
            return category
    return None


def classify_competency(question: str) -> Optional[Competency]:
    return match_category(question, _COMPETENCY_TABLE)


def classify_strength(header: str) -> Optional[StrengthCategory]:
    return match_category(header, _STRENGTH_TABLE)


def competency_keywords() -> Tuple[Tuple[Competency, Tuple[str, ...]], ...]:
    """Folded keyword table in classification order."""
    return _COMPETENCY_TABLE
