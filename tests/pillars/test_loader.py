import pytest
import yaml

from services.pillar_engine.loader import (
    DEFAULT_SPEC_PATH,
    load_pillar_spec_data,
    load_pillar_spec_from_file,
)
from services.pillar_engine.models import PillarSpec, PillarSpecError


# --- Happy path ---

def test_load_bundled_spec():
    spec = load_pillar_spec_from_file(DEFAULT_SPEC_PATH)
    assert isinstance(spec, PillarSpec)
    assert [p.key for p in spec.pillars] == [
        'self_care', 'skills', 'talent', 'brand', 'economy', 'open_track'
    ]
    assert spec.priority_order[0] == 'self_care'


def test_load_minimal_spec(minimal_spec_data):
    spec = load_pillar_spec_data(minimal_spec_data)
    pillar = spec.pillars[0]
    assert pillar.key == 'skills'
    assert pillar.scored_keys == ['a', 'b']


def test_slider_bounds_default_to_percent(minimal_spec_data):
    question = load_pillar_spec_data(minimal_spec_data).pillars[0].questions[0]
    assert (question.min, question.max) == (0.0, 100.0)


def test_scale_bounds_default_to_one_to_ten(minimal_spec_data):
    minimal_spec_data["pillars"][0]["questions"].append(
        {"key": "barrier", "text": "Barrier?", "type": "scale"}
    )
    question = load_pillar_spec_data(minimal_spec_data).pillars[0].question("barrier")
    assert (question.min, question.max) == (1.0, 10.0)


def test_bundled_weights_within_observed_range(registry):
    weights = [
        q.weight for d in registry.definitions() for q in d.questions if q.type == 'slider'
    ]
    assert min(weights) >= 0.6
    assert max(weights) <= 2.0


def test_scored_keys_are_derived_from_questions(registry):
    for definition in registry.definitions():
        expected = [q.key for q in definition.questions if q.type in ('slider', 'scale')]
        assert definition.scored_keys == expected


# --- Validation failures ---

def test_duplicate_question_key(minimal_spec_data):
    minimal_spec_data["pillars"][0]["questions"].append(
        {"key": "a", "text": "Again", "type": "slider"}
    )
    with pytest.raises(PillarSpecError, match="Duplicate question key 'a'"):
        load_pillar_spec_data(minimal_spec_data)


def test_duplicate_pillar_key(minimal_spec_data):
    minimal_spec_data["pillars"].append(dict(minimal_spec_data["pillars"][0]))
    with pytest.raises(PillarSpecError, match="Duplicate pillar key"):
        load_pillar_spec_data(minimal_spec_data)


def test_unknown_pillar_key_in_spec(minimal_spec_data):
    minimal_spec_data["pillars"][0]["key"] = "wellbeing"
    with pytest.raises(PillarSpecError, match="schema validation"):
        load_pillar_spec_data(minimal_spec_data)


def test_priority_order_must_match_pillars(minimal_spec_data):
    minimal_spec_data["priority_order"] = ["skills", "brand"]
    with pytest.raises(PillarSpecError, match="priority_order"):
        load_pillar_spec_data(minimal_spec_data)


def test_narrative_field_must_reference_question(minimal_spec_data):
    minimal_spec_data["pillars"][0]["narrative_fields"] = {"vision": "missing_key"}
    with pytest.raises(PillarSpecError, match="unknown question 'missing_key'"):
        load_pillar_spec_data(minimal_spec_data)


def test_tier_ladder_must_descend(minimal_spec_data):
    minimal_spec_data["pillars"][0]["tiers"]["level"].reverse()
    with pytest.raises(PillarSpecError, match="highest to lowest"):
        load_pillar_spec_data(minimal_spec_data)


def test_multiple_choice_requires_options(minimal_spec_data):
    minimal_spec_data["pillars"][0]["questions"].append(
        {"key": "style", "text": "Style?", "type": "multiple_choice"}
    )
    with pytest.raises(PillarSpecError, match="must declare options"):
        load_pillar_spec_data(minimal_spec_data)


@pytest.mark.parametrize("weight", [0, -1.0])
def test_weight_must_be_positive(minimal_spec_data, weight):
    minimal_spec_data["pillars"][0]["questions"][0]["weight"] = weight
    with pytest.raises(PillarSpecError):
        load_pillar_spec_data(minimal_spec_data)


def test_min_must_be_below_max(minimal_spec_data):
    minimal_spec_data["pillars"][0]["questions"][0].update({"min": 10, "max": 10})
    with pytest.raises(PillarSpecError, match="min"):
        load_pillar_spec_data(minimal_spec_data)


def test_weighted_pillar_needs_numeric_question(minimal_spec_data):
    minimal_spec_data["pillars"][0]["questions"] = [
        {"key": "notes", "text": "Anything else?", "type": "text"}
    ]
    with pytest.raises(PillarSpecError, match="no numeric questions"):
        load_pillar_spec_data(minimal_spec_data)


# --- File handling ---

def test_file_not_found(tmp_path):
    with pytest.raises(PillarSpecError, match="File not found"):
        load_pillar_spec_from_file(tmp_path / "missing.yml")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    with pytest.raises(PillarSpecError, match="empty or invalid"):
        load_pillar_spec_from_file(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("pillars: [unclosed")
    with pytest.raises(PillarSpecError, match="Error parsing YAML"):
        load_pillar_spec_from_file(path)


def test_load_from_written_file(tmp_path, minimal_spec_data):
    path = tmp_path / "pillars.yml"
    path.write_text(yaml.safe_dump(minimal_spec_data))
    spec = load_pillar_spec_from_file(path)
    assert spec.version == "0.0.1"


def test_open_track_questions_use_default_weight(registry):
    definition = registry.get_definition('open_track')
    assert {q.weight for q in definition.questions} == {1.0}
