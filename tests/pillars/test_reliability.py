import json

import numpy as np
import pandas as pd
import pytest

from services.pillar_engine.reliability import calculate_cronbach_alpha, generate_reliability_report

SKILL_SLIDERS = [
    'skill_training_regularity',
    'feedback_quality',
    'technical_improvement_time',
    'development_feeling',
    'learning_structure',
]


def consistent_skills(value):
    return {key: value for key in SKILL_SLIDERS}


# --- Cronbach's alpha ---

def test_alpha_perfectly_consistent_items():
    data = pd.DataFrame({'a': [10, 50, 90], 'b': [10, 50, 90]})
    assert calculate_cronbach_alpha(data) == pytest.approx(1.0)


def test_alpha_known_value():
    data = pd.DataFrame({'a': [1, 2, 3, 4], 'b': [2, 1, 4, 3]})
    # item variances 5/3 each, total variance 16/3
    assert calculate_cronbach_alpha(data) == pytest.approx(0.75)


def test_alpha_single_item_is_nan():
    assert np.isnan(calculate_cronbach_alpha(pd.DataFrame({'a': [1, 2, 3]})))


def test_alpha_constant_answers():
    data = pd.DataFrame({'a': [5, 5, 5], 'b': [5, 5, 5]})
    assert calculate_cronbach_alpha(data) == 1.0


# --- Report ---

def test_report_for_consistent_pillar(registry):
    answer_maps = [consistent_skills(10), consistent_skills(50), consistent_skills(90)]
    report = generate_reliability_report(answer_maps, registry)

    skills = report['pillars']['skills']
    assert report['respondent_count'] == 3
    assert skills['cronbach_alpha'] == pytest.approx(1.0)
    assert skills['pass'] is True
    assert skills['item_count'] == 5
    assert skills['respondent_count_for_alpha'] == 3
    assert skills['item_statistics']['feedback_quality']['mean'] == pytest.approx(50.0)
    assert skills['item_statistics']['feedback_quality']['max'] == 90


def test_report_marks_unanswered_pillars(registry):
    report = generate_reliability_report([consistent_skills(10), consistent_skills(90)], registry)
    brand = report['pillars']['brand']
    assert brand['cronbach_alpha'] is None
    assert brand['pass'] is False
    assert brand['item_count'] == 0
    assert brand['item_statistics'] == {}
    assert report['overall_pass'] is False


def test_incomplete_respondents_are_dropped(registry):
    partial = consistent_skills(70)
    del partial['feedback_quality']
    answer_maps = [consistent_skills(10), consistent_skills(90), partial]
    skills = generate_reliability_report(answer_maps, registry)['pillars']['skills']
    assert skills['respondent_count_for_alpha'] == 2


def test_single_respondent_gets_no_alpha(registry):
    report = generate_reliability_report([consistent_skills(40)], registry)
    skills = report['pillars']['skills']
    assert skills['cronbach_alpha'] is None
    assert skills['item_statistics']['development_feeling']['stddev'] is None


def test_report_is_json_serializable(registry):
    answer_maps = [consistent_skills(10), consistent_skills(50), {'brand_clarity': 'n/a'}]
    report = generate_reliability_report(answer_maps, registry, alpha_threshold=0.9)
    assert report['cronbach_alpha_threshold'] == 0.9
    json.dumps(report)


def test_empty_batch(registry):
    report = generate_reliability_report([], registry)
    assert report['respondent_count'] == 0
    assert all(p['cronbach_alpha'] is None for p in report['pillars'].values())
