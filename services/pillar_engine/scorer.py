# services/pillar_engine/scorer.py
# Reduces a pillar answer map to a single 0-10 score.

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping

from .models import PillarDefinition, Question

logger = logging.getLogger(__name__)

# --- Constants ---

NEUTRAL_SCORE = 5.0
MIN_SCORE = 0.0
MAX_SCORE = 10.0
SCORE_PRECISION = Decimal('0.1')

# Open track component weights, as fractions of the 0-10 score
OPEN_TRACK_WEIGHTS = {
    'goal_clarity': 0.30,
    'motivation': 0.25,
    'capacity': 0.25,
    'preparation': 0.20,
}

# (question key, minimum length exclusive, points when longer, points otherwise)
GOAL_CLARITY_RULES = [
    ('change_goal', 10, 7, 3),
    ('goal_importance', 20, 7, 3),
    ('success_vision', 30, 8, 4),
]
PREPARATION_RULES = [
    ('current_situation', 15, 5, 2),
    ('main_challenges', 15, 5, 2),
]
MOTIVATION_KEYS = ('motivation_level', 'confidence_level')
MOTIVATION_DEFAULT = 5.0
BALANCED_URGENCY = (3, 8)


# --- Helpers ---

def is_number(value: Any) -> bool:
    """
    True for real numeric answers. Booleans, NaN, infinities and integers too
    large for a float are not answers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and value != ''


def is_answered(question: Question, value: Any) -> bool:
    """Numeric questions need a number; text and choice questions a non-empty string."""
    if question.is_numeric:
        return is_number(value)
    return _has_text(value)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_score(value: float) -> float:
    """Rounds to one decimal, halves away from zero (0.25 -> 0.3)."""
    return float(Decimal(repr(value)).quantize(SCORE_PRECISION, rounding=ROUND_HALF_UP))


def normalize_slider(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """
    Maps a slider answer onto the 0-10 score space relative to its own bounds.

    The midpoint maps to 5.0 and the bounds to 0.0 and 10.0; anything outside
    the bounds is clamped by the signed ratio.
    """
    midpoint = (low + high) / 2
    half_range = (high - low) / 2
    ratio = clamp((value - midpoint) / half_range, -1.0, 1.0)
    return ratio * 5 + 5


def barrier_block_score(values: Iterable[float], clamp_result: bool = True) -> float:
    """Inverts the mean of legacy 1-10 barrier answers: a high barrier is a low score."""
    values = list(values)
    average = sum(values) / len(values)
    score = (10 - average) / 10 * 10
    if clamp_result:
        score = clamp(score, MIN_SCORE, MAX_SCORE)
    return score


def functional_access_score(answers: Iterable[Any], positive_option: str) -> float:
    answers = list(answers)
    positives = sum(1 for answer in answers if answer == positive_option)
    return positives / len(answers) * 10


def _text_length(value: Any) -> int:
    return len(value) if isinstance(value, str) else 0


def _length_points(answers: Mapping[str, Any], rules: List[tuple]) -> float:
    points = 0.0
    for key, min_length, long_points, short_points in rules:
        points += long_points if _text_length(answers.get(key)) > min_length else short_points
    return points


def _has_any_answer(definition: PillarDefinition, answers: Mapping[str, Any]) -> bool:
    return any(is_answered(q, answers.get(q.key)) for q in definition.questions)


# --- Weighted strategy ---

def calculate_weighted_score(
    definition: PillarDefinition,
    answers: Mapping[str, Any],
    clamp_barrier_block: bool = True,
) -> float:
    """
    Weighted average of normalized slider answers, blended with the legacy
    barrier and functional access blocks when those were answered.
    """
    total_score = 0.0
    total_weight = 0.0

    for question in definition.questions_of_type('slider'):
        value = answers.get(question.key)
        if not is_number(value):
            continue
        final_score = normalize_slider(value, question.min, question.max)
        total_score += final_score * question.weight
        total_weight += question.weight

    barrier_values = [
        answers[q.key] for q in definition.questions_of_type('scale')
        if is_number(answers.get(q.key))
    ]
    if barrier_values:
        block_score = barrier_block_score(barrier_values, clamp_result=clamp_barrier_block)
        total_score += block_score * definition.barrier_block_weight
        total_weight += definition.barrier_block_weight

    access_answers = [
        answers[q.key] for q in definition.questions
        if q.block == 'functional_access' and is_answered(q, answers.get(q.key))
    ]
    if access_answers:
        block_score = functional_access_score(access_answers, definition.positive_option)
        total_score += block_score * definition.functional_access_weight
        total_weight += definition.functional_access_weight

    if total_weight <= 0:
        logger.debug(f"No numeric answers for pillar '{definition.key}', using neutral score")
        return NEUTRAL_SCORE

    return round_score(total_score / total_weight)


# --- Open track strategy ---

def calculate_open_track_components(
    definition: PillarDefinition,
    answers: Mapping[str, Any],
) -> Dict[str, float]:
    """
    Returns each open track component on its own 0-10 scale.

    Goal clarity and preparation are judged on answer length only.
    """
    max_clarity = sum(long_points for _, _, long_points, _ in GOAL_CLARITY_RULES)
    goal_clarity = _length_points(answers, GOAL_CLARITY_RULES) / max_clarity

    motivation_values = []
    for key in MOTIVATION_KEYS:
        value = answers.get(key)
        question = definition.question(key)
        upper = question.max if question is not None and question.max else MAX_SCORE
        raw = value if is_number(value) else MOTIVATION_DEFAULT
        motivation_values.append(clamp(raw / upper, 0.0, 1.0))
    motivation = sum(motivation_values) / len(motivation_values)

    has_timeframe = all(_has_text(answers.get(key)) for key in ('total_timeframe', 'daily_time_commitment'))
    urgency = answers.get('urgency_level')
    balanced_urgency = is_number(urgency) and BALANCED_URGENCY[0] <= urgency <= BALANCED_URGENCY[1]
    capacity = ((6 if has_timeframe else 3) + (4 if balanced_urgency else 2)) / 10

    max_preparation = sum(long_points for _, _, long_points, _ in PREPARATION_RULES)
    preparation = _length_points(answers, PREPARATION_RULES) / max_preparation

    return {
        'goal_clarity': goal_clarity * 10,
        'motivation': motivation * 10,
        'capacity': capacity * 10,
        'preparation': preparation * 10,
    }


def calculate_open_track_score(definition: PillarDefinition, answers: Mapping[str, Any]) -> float:
    if not _has_any_answer(definition, answers):
        logger.debug("No open track answers, using neutral score")
        return NEUTRAL_SCORE

    components = calculate_open_track_components(definition, answers)
    total = sum(components[name] * weight for name, weight in OPEN_TRACK_WEIGHTS.items())
    return round_score(total)


# --- Entry point ---

def calculate_score(
    definition: PillarDefinition,
    answers: Mapping[str, Any],
    clamp_barrier_block: bool = True,
) -> float:
    """Scores one pillar. Never raises for incomplete or malformed answers."""
    answers = answers or {}
    if definition.strategy == 'open_track':
        return calculate_open_track_score(definition, answers)
    return calculate_weighted_score(definition, answers, clamp_barrier_block=clamp_barrier_block)


def numeric_answer(question: Question, answers: Mapping[str, Any]):
    """Returns the answer for a numeric question, or None when missing or not a number."""
    value = answers.get(question.key)
    return value if is_number(value) else None
