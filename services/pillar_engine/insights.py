# services/pillar_engine/insights.py
# Classifies pillar answers into critical/strong areas and surfaces narrative answers.

import logging
from typing import Any, Dict, List, Mapping

from .models import InsightResult, PillarDefinition, Question, TierStep
from .scorer import calculate_open_track_components, numeric_answer, round_score

logger = logging.getLogger(__name__)

# --- Thresholds ---

# Percent of a slider's range, inclusive on both ends
CRITICAL_PERCENT = 30
STRONG_PERCENT = 80

# Raw legacy barrier values (1-10, high is bad)
BARRIER_CRITICAL_MIN = 8
BARRIER_STRONG_MAX = 3

STATUS_STRONG_MIN = 7.0
STATUS_MODERATE_MIN = 5.0


def overall_status(score: float) -> str:
    if score >= STATUS_STRONG_MIN:
        return 'strong'
    if score >= STATUS_MODERATE_MIN:
        return 'moderate'
    return 'needs_attention'


def tier_label(steps: List[TierStep], score: float) -> str:
    """Picks the first rung the score reaches; scores below every rung get the last label."""
    for step in steps:
        if score >= step.min_score:
            return step.label
    return steps[-1].label


def slider_thresholds(question: Question) -> tuple:
    span = question.max - question.min
    critical = question.min + span * CRITICAL_PERCENT / 100
    strong = question.min + span * STRONG_PERCENT / 100
    return critical, strong


def classify_answers(definition: PillarDefinition, answers: Mapping[str, Any]) -> Dict[str, List[str]]:
    """
    Thresholds raw answers of every numeric question.

    Sliders use the 30/80 percent cut-offs of their own range. Legacy barrier
    scale items are inverted: a high value is a critical area.
    """
    critical_areas: List[str] = []
    strong_areas: List[str] = []

    for question in definition.questions:
        if not question.is_numeric:
            continue
        value = numeric_answer(question, answers)
        if value is None:
            continue

        if question.type == 'scale':
            if value >= BARRIER_CRITICAL_MIN:
                critical_areas.append(question.key)
            elif value <= BARRIER_STRONG_MAX:
                strong_areas.append(question.key)
            continue

        critical, strong = slider_thresholds(question)
        if value <= critical:
            critical_areas.append(question.key)
        elif value >= strong:
            strong_areas.append(question.key)

    return {'critical_areas': critical_areas, 'strong_areas': strong_areas}


def extract_narratives(definition: PillarDefinition, answers: Mapping[str, Any]) -> Dict[str, str]:
    narratives = {}
    for field_name, question_key in definition.narrative_fields.items():
        value = answers.get(question_key)
        narratives[field_name] = value if isinstance(value, str) else ''
    return narratives


def generate_insights(
    definition: PillarDefinition,
    answers: Mapping[str, Any],
    score: float,
) -> InsightResult:
    """Builds the insight record for one pillar from its answers and final score."""
    answers = answers or {}
    buckets = classify_answers(definition, answers)
    tiers = {name: tier_label(steps, score) for name, steps in definition.tiers.items()}

    components: Dict[str, float] = {}
    if definition.strategy == 'open_track':
        components = {
            name: round_score(value)
            for name, value in calculate_open_track_components(definition, answers).items()
        }

    result = InsightResult(
        pillar_key=definition.key,
        critical_areas=buckets['critical_areas'],
        strong_areas=buckets['strong_areas'],
        overall_status=overall_status(score),
        tiers=tiers,
        narratives=extract_narratives(definition, answers),
        components=components,
    )
    logger.debug(
        f"Insights for '{definition.key}': status={result.overall_status}, "
        f"critical={len(result.critical_areas)}, strong={len(result.strong_areas)}"
    )
    return result
