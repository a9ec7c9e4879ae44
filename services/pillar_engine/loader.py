import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from services.pillar_engine.models import PillarSpec, PillarSpecError

logger = logging.getLogger(__name__)

DEFAULT_SPEC_PATH = Path(__file__).parent / "assets" / "pillars.yml"


def load_pillar_spec_data(data: Dict[str, Any]) -> PillarSpec:
    """
    Validates the raw dictionary data against the PillarSpec model
    and performs the cross-reference checks pydantic cannot express.
    """
    try:
        spec = PillarSpec.model_validate(data)
    except ValidationError as e:
        raise PillarSpecError(f"Pillar specification failed schema validation: {e}") from e

    pillar_keys = set()
    for pillar in spec.pillars:
        if pillar.key in pillar_keys:
            raise PillarSpecError(f"Duplicate pillar key found: {pillar.key}")
        pillar_keys.add(pillar.key)

        question_keys = set()
        for question in pillar.questions:
            if question.key in question_keys:
                raise PillarSpecError(f"Duplicate question key '{question.key}' in pillar '{pillar.key}'")
            question_keys.add(question.key)

        for field_name, question_key in pillar.narrative_fields.items():
            if question_key not in question_keys:
                raise PillarSpecError(
                    f"Narrative field '{field_name}' in pillar '{pillar.key}' "
                    f"references unknown question '{question_key}'"
                )

        for tier_name, steps in pillar.tiers.items():
            if not steps:
                raise PillarSpecError(f"Tier ladder '{tier_name}' in pillar '{pillar.key}' is empty")
            thresholds = [step.min_score for step in steps]
            if thresholds != sorted(thresholds, reverse=True):
                raise PillarSpecError(
                    f"Tier ladder '{tier_name}' in pillar '{pillar.key}' must be ordered from highest to lowest"
                )

        if pillar.strategy == 'weighted' and not pillar.questions_of_type('slider') and not pillar.questions_of_type('scale'):
            raise PillarSpecError(f"Weighted pillar '{pillar.key}' declares no numeric questions")

    if len(spec.priority_order) != len(set(spec.priority_order)):
        raise PillarSpecError("Duplicate pillar key in priority_order")
    if set(spec.priority_order) != pillar_keys:
        raise PillarSpecError(
            f"priority_order {spec.priority_order} does not match the defined pillars {sorted(pillar_keys)}"
        )

    logger.debug(f"Loaded pillar spec version {spec.version} with {len(spec.pillars)} pillars")
    return spec


def load_pillar_spec_from_file(file_path: Union[str, Path] = DEFAULT_SPEC_PATH) -> PillarSpec:
    """
    Loads a pillar specification from a YAML file, validates it,
    and returns a PillarSpec object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise PillarSpecError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise PillarSpecError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise PillarSpecError(f"YAML file is empty or invalid: {file_path}")

    return load_pillar_spec_data(data)
