from .engine import PillarScoringEngine
from .models import (
    AssessmentRecord,
    InsightResult,
    PillarDefinition,
    PillarEngineError,
    PillarSpecError,
    Question,
    UnknownPillarKey,
)
from .registry import PillarRegistry, get_default_registry

__all__ = [
    'AssessmentRecord',
    'InsightResult',
    'PillarDefinition',
    'PillarEngineError',
    'PillarRegistry',
    'PillarScoringEngine',
    'PillarSpecError',
    'Question',
    'UnknownPillarKey',
    'get_default_registry',
]
