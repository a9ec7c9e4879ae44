# services/pillar_engine/history.py
# Trend and heatmap views over previously scored assessments.

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from .models import AssessmentRecord
from .registry import PillarRegistry

logger = logging.getLogger(__name__)

DEFAULT_TREND_THRESHOLD = 0.5
DEFAULT_TREND_WINDOW = 3


class HeatmapEntry(BaseModel):
    pillar_key: str
    name: str
    icon: str
    color: str
    score: float
    band: str
    trend: str
    last_assessment: Optional[datetime] = None
    is_active: bool = True


def _pillar_history(records: Iterable[AssessmentRecord], pillar_key: str) -> List[AssessmentRecord]:
    """Records for one pillar, newest first."""
    return sorted(
        (r for r in records if r.pillar_key == pillar_key),
        key=lambda r: r.created_at,
        reverse=True,
    )


def calculate_trend(
    records: Iterable[AssessmentRecord],
    pillar_key: str,
    threshold: float = DEFAULT_TREND_THRESHOLD,
    window: int = DEFAULT_TREND_WINDOW,
) -> str:
    """Compares the two newest scores of a pillar: 'up', 'down' or 'stable'."""
    recent = _pillar_history(records, pillar_key)[:window]
    if len(recent) < 2:
        return 'stable'

    difference = recent[0].score - recent[1].score
    if difference > threshold:
        return 'up'
    if difference < -threshold:
        return 'down'
    return 'stable'


def score_band(score: float) -> str:
    if score == 0:
        return 'unassessed'
    if score <= 3:
        return 'critical'
    if score <= 6:
        return 'challenge'
    return 'strong'


def build_heatmap(
    registry: PillarRegistry,
    records: Iterable[AssessmentRecord],
    active_keys: Optional[Iterable[str]] = None,
    threshold: float = DEFAULT_TREND_THRESHOLD,
    window: int = DEFAULT_TREND_WINDOW,
) -> List[HeatmapEntry]:
    """
    One entry per registered pillar in priority order, using its latest score.
    Pillars never assessed get a score of 0 and the 'unassessed' band.
    """
    records = list(records)
    active = set(active_keys) if active_keys is not None else None

    entries = []
    for definition in registry.definitions():
        history = _pillar_history(records, definition.key)
        latest = history[0] if history else None
        score = latest.score if latest else 0.0
        entries.append(HeatmapEntry(
            pillar_key=definition.key,
            name=definition.name,
            icon=definition.icon,
            color=definition.color,
            score=score,
            band=score_band(score),
            trend=calculate_trend(history, definition.key, threshold=threshold, window=window),
            last_assessment=latest.created_at if latest else None,
            is_active=active is None or definition.key in active,
        ))
    return entries


def summarize_heatmap(entries: Iterable[HeatmapEntry], include_inactive: bool = False) -> Dict[str, int]:
    summary = {'strong': 0, 'moderate': 0, 'low': 0, 'unassessed': 0}
    for entry in entries:
        if not include_inactive and not entry.is_active:
            continue
        if entry.score == 0:
            summary['unassessed'] += 1
        elif entry.score >= 7:
            summary['strong'] += 1
        elif entry.score >= 4:
            summary['moderate'] += 1
        else:
            summary['low'] += 1
    return summary
