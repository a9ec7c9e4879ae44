import copy

import pytest

from services.pillar_engine.core.config import PillarEngineSettings
from services.pillar_engine.engine import PillarScoringEngine
from services.pillar_engine.loader import load_pillar_spec_data
from services.pillar_engine.registry import PillarRegistry

# Minimal valid structure for testing: one weighted pillar with two sliders
MINIMAL_VALID_SPEC = {
    "version": "0.0.1",
    "priority_order": ["skills"],
    "pillars": [
        {
            "key": "skills",
            "name": "Skills",
            "description": "Test pillar",
            "icon": "x",
            "color": "#000000",
            "questions": [
                {"key": "a", "text": "Question A", "type": "slider", "weight": 1.0},
                {"key": "b", "text": "Question B", "type": "slider", "weight": 3.0},
                {"key": "notes", "text": "Anything else?", "type": "text"},
            ],
            "tiers": {
                "level": [
                    {"min_score": 5, "label": "high"},
                    {"min_score": 0, "label": "low"},
                ]
            },
            "narrative_fields": {"notes_text": "notes"},
        }
    ],
}


@pytest.fixture
def minimal_spec_data():
    """A fresh deep copy so tests can break it freely."""
    return copy.deepcopy(MINIMAL_VALID_SPEC)


@pytest.fixture(scope="module")
def registry():
    """Registry built from the bundled pillar definitions."""
    try:
        return PillarRegistry.from_file()
    except Exception as e:
        pytest.fail(f"Failed to load bundled pillar definitions: {e}")


@pytest.fixture(scope="module")
def engine(registry):
    return PillarScoringEngine(registry=registry, settings=PillarEngineSettings())


@pytest.fixture
def minimal_engine(minimal_spec_data):
    registry = PillarRegistry(load_pillar_spec_data(minimal_spec_data))
    return PillarScoringEngine(registry=registry, settings=PillarEngineSettings())
