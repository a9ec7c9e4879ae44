import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .core.config import PillarEngineSettings
from .history import HeatmapEntry, build_heatmap, calculate_trend
from .insights import generate_insights
from .models import AssessmentRecord, InsightResult, PillarDefinition
from .registry import PillarRegistry, get_default_registry
from .reliability import generate_reliability_report
from .scorer import calculate_score

logger = logging.getLogger(__name__)


class PillarScoringEngine:
    """
    Scores pillar self-assessments against an immutable PillarRegistry.

    The engine holds no state besides the registry and its settings, so the
    same instance can score any number of assessments concurrently.
    """

    def __init__(
        self,
        registry: Optional[PillarRegistry] = None,
        settings: Optional[PillarEngineSettings] = None,
    ):
        """
        Args:
            registry: Pillar definitions to score against. Defaults to the
                      bundled definitions.
            settings: Engine settings. Defaults to values read from the
                      PILLAR_ENGINE_* environment.
        """
        self.settings = settings or PillarEngineSettings()
        if registry is None:
            if self.settings.definitions_path:
                registry = PillarRegistry.from_file(self.settings.definitions_path)
            else:
                registry = get_default_registry()
        self.registry = registry

    def get_pillar_definition(self, pillar_key: str) -> PillarDefinition:
        return self.registry.get_definition(pillar_key)

    def list_pillar_keys(self) -> List[str]:
        return self.registry.priority_order()

    def calculate_score(self, pillar_key: str, answers: Mapping[str, Any]) -> float:
        """
        Calculates the 0-10 score for one pillar.

        Raises:
            UnknownPillarKey: If the pillar key is not registered. Nothing is
                              read from the answers in that case.
        """
        definition = self.registry.get_definition(pillar_key)
        return calculate_score(
            definition,
            answers,
            clamp_barrier_block=self.settings.clamp_barrier_block,
        )

    def generate_insights(self, pillar_key: str, answers: Mapping[str, Any], score: float) -> InsightResult:
        definition = self.registry.get_definition(pillar_key)
        return generate_insights(definition, answers, score)

    def evaluate(self, pillar_key: str, answers: Mapping[str, Any]) -> Tuple[float, InsightResult]:
        """Scores and classifies in one call, so insights always match the score."""
        score = self.calculate_score(pillar_key, answers)
        return score, self.generate_insights(pillar_key, answers, score)

    def assess(
        self,
        user_id: str,
        pillar_key: str,
        answers: Mapping[str, Any],
        created_at: Optional[datetime] = None,
    ) -> AssessmentRecord:
        """Packages a scored assessment for the caller's persistence layer."""
        score, insights = self.evaluate(pillar_key, answers)
        record = AssessmentRecord(
            user_id=user_id,
            pillar_key=pillar_key,
            score=score,
            insights=insights,
            created_at=created_at or datetime.now(timezone.utc),
        )
        logger.info(
            "Pillar assessment scored",
            extra={'user_id': user_id, 'pillar_key': pillar_key, 'score': score,
                   'overall_status': insights.overall_status},
        )
        return record

    # --- History and reliability views ---

    def calculate_trend(self, records: Iterable[AssessmentRecord], pillar_key: str) -> str:
        self.registry.get_definition(pillar_key)
        return calculate_trend(
            records,
            pillar_key,
            threshold=self.settings.trend_threshold,
            window=self.settings.trend_window,
        )

    def build_heatmap(
        self,
        records: Iterable[AssessmentRecord],
        active_keys: Optional[Iterable[str]] = None,
    ) -> List[HeatmapEntry]:
        return build_heatmap(
            self.registry,
            records,
            active_keys=active_keys,
            threshold=self.settings.trend_threshold,
            window=self.settings.trend_window,
        )

    def reliability_report(self, answer_maps: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
        return generate_reliability_report(
            answer_maps,
            self.registry,
            alpha_threshold=self.settings.reliability_alpha_threshold,
        )
