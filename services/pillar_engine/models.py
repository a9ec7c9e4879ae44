from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PillarKey = Literal['self_care', 'skills', 'talent', 'brand', 'economy', 'open_track']
QuestionType = Literal['scale', 'slider', 'text', 'multiple_choice']
OverallStatus = Literal['strong', 'moderate', 'needs_attention']

NUMERIC_TYPES = ('slider', 'scale')

# Default bounds per numeric question type
DEFAULT_BOUNDS = {
    'scale': (1.0, 10.0),
    'slider': (0.0, 100.0),
}


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    text: str
    type: QuestionType
    min: Optional[float] = None
    max: Optional[float] = None
    weight: float = Field(default=1.0, gt=0)
    options: Optional[List[str]] = None
    block: Optional[Literal['functional_access']] = None

    @model_validator(mode='before')
    @classmethod
    def _fill_bounds(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get('type') in DEFAULT_BOUNDS:
            default_min, default_max = DEFAULT_BOUNDS[data['type']]
            data = dict(data)
            if data.get('min') is None:
                data['min'] = default_min
            if data.get('max') is None:
                data['max'] = default_max
        return data

    @model_validator(mode='after')
    def _check_question(self) -> 'Question':
        if self.is_numeric and self.min >= self.max:
            raise ValueError(f"Question '{self.key}' has min {self.min} >= max {self.max}")
        if self.type == 'multiple_choice' and not self.options:
            raise ValueError(f"Multiple choice question '{self.key}' must declare options")
        return self

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES


class TierStep(BaseModel):
    """One rung of a score ladder: the label applies from `min_score` upwards."""
    model_config = ConfigDict(frozen=True)

    min_score: float
    label: str


class PillarDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: PillarKey
    name: str
    description: str
    icon: str
    color: str
    questions: List[Question]
    strategy: Literal['weighted', 'open_track'] = 'weighted'
    barrier_block_weight: float = Field(default=0.3, gt=0)
    functional_access_weight: float = Field(default=0.2, gt=0)
    positive_option: str = 'yes'
    tiers: Dict[str, List[TierStep]] = Field(default_factory=dict)
    narrative_fields: Dict[str, str] = Field(default_factory=dict)

    @property
    def scored_keys(self) -> List[str]:
        """Keys of the numeric questions, in declaration order."""
        return [q.key for q in self.questions if q.is_numeric]

    def question(self, key: str) -> Optional[Question]:
        for q in self.questions:
            if q.key == key:
                return q
        return None

    def questions_of_type(self, question_type: str) -> List[Question]:
        return [q for q in self.questions if q.type == question_type]


class PillarSpec(BaseModel):
    """Top-level layout of the pillar definitions asset."""
    version: str
    priority_order: List[PillarKey]
    pillars: List[PillarDefinition]


class InsightResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    pillar_key: PillarKey
    critical_areas: List[str] = Field(default_factory=list)
    strong_areas: List[str] = Field(default_factory=list)
    overall_status: OverallStatus
    tiers: Dict[str, str] = Field(default_factory=dict)
    narratives: Dict[str, str] = Field(default_factory=dict)
    components: Dict[str, float] = Field(default_factory=dict)

    def as_record(self) -> Dict[str, Any]:
        """Flattens tiers and narratives next to the classification buckets."""
        record: Dict[str, Any] = {
            'critical_areas': list(self.critical_areas),
            'strong_areas': list(self.strong_areas),
            'overall_status': self.overall_status,
        }
        record.update(self.tiers)
        record.update(self.narratives)
        if self.components:
            record['components'] = dict(self.components)
        return record


class AssessmentRecord(BaseModel):
    """What the surrounding application hands to its persistence sink."""
    user_id: str
    pillar_key: PillarKey
    score: float
    insights: Optional[InsightResult] = None
    created_at: datetime


# Custom Error Classes
class PillarEngineError(ValueError):
    """Base class for pillar engine errors."""
    pass


class UnknownPillarKey(PillarEngineError):
    """Raised when a pillar key is not part of the registry."""

    def __init__(self, pillar_key: Any):
        self.pillar_key = pillar_key
        super().__init__(f"Unknown pillar key: {pillar_key!r}")


class PillarSpecError(PillarEngineError):
    """Raised when the pillar definitions asset is invalid."""
    pass
