import argparse
import json
import logging
import sys
from typing import Optional

from .core.config import PillarEngineSettings, settings as default_settings
from .core.logging_config import setup_logging
from .engine import PillarScoringEngine
from .models import PillarEngineError
from .registry import PillarRegistry

logger = logging.getLogger(__name__)


def create_engine(settings: Optional[PillarEngineSettings] = None) -> PillarScoringEngine:
    """Configures logging and builds the engine once at process start."""
    settings = settings or default_settings
    setup_logging(settings.log_level, json_logs=settings.json_logs)
    registry = PillarRegistry.from_file(settings.definitions_path)
    return PillarScoringEngine(registry=registry, settings=settings)


def _read_answers(source: str):
    if source == '-':
        return json.load(sys.stdin)
    with open(source, 'r', encoding='utf-8') as f:
        return json.load(f)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Score a pillar self-assessment")
    parser.add_argument("pillar_key", help="Pillar to score, e.g. self_care")
    parser.add_argument("answers", help="Path to a JSON file holding the answer map, or '-' for stdin")
    parser.add_argument("--user-id", default="local")
    args = parser.parse_args(argv)

    engine = create_engine()
    try:
        answers = _read_answers(args.answers)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read answers from {args.answers}: {e}")
        return 1
    if not isinstance(answers, dict):
        logger.error(f"Answers in {args.answers} must be a JSON object, got {type(answers).__name__}")
        return 1

    try:
        record = engine.assess(args.user_id, args.pillar_key, answers)
    except PillarEngineError as e:
        logger.error(f"Could not score assessment: {e}")
        return 1

    print(record.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
