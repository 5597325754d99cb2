import pytest

from feedback360.core.aggregators import (
    aggregate_radar,
    aggregate_rating_distribution,
    aggregate_strengths,
    index_columns,
)
from feedback360.core.categories import Competency, StrengthCategory
from feedback360.core.diagnostics import Diagnostics
from feedback360.core.normalizer import Tier

STRENGTH_TECH = "Pontos fortes >> Excelente domínio técnico da área"
SCALE = {1: 1.0, 2: 2.0, 3: 3.0}


def _radar(rows, **kwargs):
    kwargs.setdefault("tier_scores", SCALE)
    kwargs.setdefault("drop_zero_averages", True)
    return aggregate_radar(rows, **kwargs)


def _bar(bars, category):
    return next(b for b in bars if b.category is category)


# ---------------------------------------------------------------------------
# Radar
# ---------------------------------------------------------------------------

def test_radar_averages_tier_values():
    rows = [
        {"Comunicação clara >> Ana": "Supera as expectativas"},
        {"Comunicação clara >> Ana": "Atende às expectativas"},
    ]
    radar = _radar(rows)
    assert radar.point_for(Competency.COMMUNICATION).collaborator_scores == {"Ana": 2.5}
    assert radar.members_with_no_ratings == []


def test_radar_full_survey(survey_rows):
    radar = _radar(survey_rows)
    assert [p.competency for p in radar.points] == list(Competency)
    assert radar.point_for(Competency.COMMUNICATION).collaborator_scores == {"Ana": 2.5}
    assert radar.point_for(Competency.COMMITMENT).collaborator_scores == {"Ana": 2.5}
    assert radar.point_for(Competency.PROBLEM_SOLVING).collaborator_scores == {"Carla": 2.33}
    assert radar.point_for(Competency.COOPERATION).collaborator_scores == {}
    assert radar.members_with_no_ratings == ["Bruno"]


def test_not_applicable_only_member_listed_without_scores():
    rows = [
        {"Comunicação clara >> Bruno": "Não se aplica", "Compromisso com prazos >> Bruno": "N/A"},
        {"Comunicação clara >> Bruno": "NA", "Compromisso com prazos >> Bruno": None},
    ]
    radar = _radar(rows)
    assert radar.members_with_no_ratings == ["Bruno"]
    assert all("Bruno" not in p.collaborator_scores for p in radar.points)


def test_suffix_and_accent_variants_merge():
    rows = [
        {"Comunicação >> José": "Supera as expectativas", "Comunicação >> Jose_1": "Pode melhorar"},
    ]
    radar = _radar(rows)
    assert radar.point_for(Competency.COMMUNICATION).collaborator_scores == {"José": 2.0}


def test_inline_answer_from_header():
    rows = [
        {"Comunicação >> Ana >> Supera as expectativas": True, "Comunicação >> Ana >> Pode melhorar": False},
        {"Comunicação >> Ana >> Supera as expectativas": False, "Comunicação >> Ana >> Pode melhorar": True},
    ]
    radar = _radar(rows)
    assert radar.point_for(Competency.COMMUNICATION).collaborator_scores == {"Ana": 2.0}


def test_unclassified_and_metadata_columns_are_ignored():
    rows = [
        {
            "Submission Date": "Supera as expectativas",
            "Comentário geral": "Supera as expectativas",
            "Pergunta sem categoria >> Ana": "Supera as expectativas",
        }
    ]
    radar = _radar(rows)
    assert all(not p.collaborator_scores for p in radar.points)
    assert radar.members_with_no_ratings == []


def test_zero_average_rule_is_configurable():
    rows = [{"Comunicação >> Ana": "Pode melhorar"}]
    zero_scale = {1: 0.0, 2: 1.0, 3: 2.0}

    dropped = _radar(rows, tier_scores=zero_scale, drop_zero_averages=True)
    assert dropped.point_for(Competency.COMMUNICATION).collaborator_scores == {}
    assert dropped.members_with_no_ratings == ["Ana"]

    kept = _radar(rows, tier_scores=zero_scale, drop_zero_averages=False)
    assert kept.point_for(Competency.COMMUNICATION).collaborator_scores == {"Ana": 0.0}
    assert kept.members_with_no_ratings == []


def test_alternate_scale():
    rows = [{"Comunicação >> Ana": "Supera"}, {"Comunicação >> Ana": "Atende"}]
    radar = _radar(rows, tier_scores={1: 1.0, 2: 3.0, 3: 5.0})
    assert radar.point_for(Competency.COMMUNICATION).collaborator_scores == {"Ana": 4.0}


def test_radar_empty_input():
    radar = _radar([])
    assert len(radar.points) == len(Competency)
    assert all(p.collaborator_scores == {} for p in radar.points)
    assert radar.members_with_no_ratings == []


# ---------------------------------------------------------------------------
# Strengths
# ---------------------------------------------------------------------------

def test_strength_counts_truthy_rows():
    rows = [{STRENGTH_TECH: True}, {STRENGTH_TECH: "sim"}, {STRENGTH_TECH: 1}, {STRENGTH_TECH: False}]
    first = aggregate_strengths(rows)
    again = aggregate_strengths(rows)

    tech = _bar(first, StrengthCategory.TECHNICAL_MASTERY)
    assert (tech.needs_improvement, tech.as_expected, tech.exceeds) == (0, 0, 3)
    assert [b.to_dict() for b in first] == [b.to_dict() for b in again]


def test_strength_text_answers_use_normalizer():
    header = "Pontos fortes >> Facilidade de adaptação a mudanças e novas demandas"
    rows = [
        {header: "Atende às expectativas"},
        {header: "Pode melhorar"},
        {header: "N/A"},
        {header: None},
        {header: "Não se aplica"},
    ]
    bar = _bar(aggregate_strengths(rows), StrengthCategory.ADAPTABILITY)
    assert (bar.needs_improvement, bar.as_expected, bar.exceeds) == (1, 1, 0)
    assert bar.total == 2


def test_strength_cell_with_own_phrase_counts():
    header = "Pontos fortes >> Dedicação, comprometimento e foco em resultados"
    rows = [{header: "Dedicação, comprometimento e foco em resultados"}]
    assert _bar(aggregate_strengths(rows), StrengthCategory.COMMITMENT).exceeds == 1


def test_strength_one_entry_per_category_on_empty_input():
    bars = aggregate_strengths([])
    assert [b.category for b in bars] == list(StrengthCategory)
    assert all(b.total == 0 for b in bars)


def test_strength_header_without_collaborator_segment_is_ignored():
    rows = [{"Excelente domínio técnico da área": True}]
    assert all(b.total == 0 for b in aggregate_strengths(rows))


# ---------------------------------------------------------------------------
# Rating distribution
# ---------------------------------------------------------------------------

def test_pie_percentages(survey_rows):
    pie = aggregate_rating_distribution(survey_rows)
    by_tier = {p.tier: p.percentage for p in pie}
    assert [p.tier for p in pie] == [Tier.EXCEEDS, Tier.AS_EXPECTED, Tier.NEEDS_IMPROVEMENT]
    assert by_tier[Tier.EXCEEDS] == pytest.approx(57.14)
    assert by_tier[Tier.AS_EXPECTED] == pytest.approx(28.57)
    assert by_tier[Tier.NEEDS_IMPROVEMENT] == pytest.approx(14.29)
    assert sum(by_tier.values()) == pytest.approx(100.0, abs=0.05)


def test_pie_thirds_sum_close_to_hundred():
    rows = [{"A >> X": "Supera", "B >> X": "Atende", "C >> X": "Pode melhorar"}]
    pie = aggregate_rating_distribution(rows)
    assert sum(p.percentage for p in pie) == pytest.approx(100.0, abs=0.05)


def test_pie_is_global_across_columns():
    rows = [{"Pergunta sem categoria >> Ana": "Supera as expectativas", "Comentário geral": "Pode melhorar"}]
    pie = {p.tier: p.percentage for p in aggregate_rating_distribution(rows)}
    assert pie[Tier.EXCEEDS] == 100.0
    assert pie[Tier.NEEDS_IMPROVEMENT] == 0.0


def test_pie_no_valid_answers_is_all_zero():
    rows = [{"Comunicação >> Ana": "Não se aplica", "Pontos fortes >> Ana": True}]
    pie = aggregate_rating_distribution(rows)
    assert [p.percentage for p in pie] == [0.0, 0.0, 0.0]
    assert [p.color for p in pie] == ["#4CAF50", "#2196F3", "#FFC107"]


# ---------------------------------------------------------------------------
# Column index / diagnostics
# ---------------------------------------------------------------------------

def test_index_columns_is_union_of_headers():
    rows = [{"Comunicação >> Ana": "x"}, {"Compromisso >> Bruno": "y", "Submission Date": "z"}]
    diag = Diagnostics()
    columns = index_columns(rows, diag)
    assert list(columns) == ["Comunicação >> Ana", "Compromisso >> Bruno", "Submission Date"]
    assert columns["Compromisso >> Bruno"].competency is Competency.COMMITMENT
    assert not columns["Submission Date"].is_evaluation
    assert diag.skipped_headers == {"Submission Date"}


def test_unrecognized_cell_counted_once_across_aggregators():
    rows = [{"Comunicação >> Ana": "texto aleatório"}]
    diag = Diagnostics()
    columns = index_columns(rows, diag)
    _radar(rows, columns=columns, diagnostics=diag)
    aggregate_rating_distribution(rows, columns, diagnostics=diag)
    assert diag.unrecognized_values == {"texto aleatório": 1}
