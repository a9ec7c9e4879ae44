# services/pillar_engine/recommendations.py
# Suggests which pillars a new client should start with, based on onboarding answers.

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# --- Constants ---

FIVE_PILLARS = ['self_care', 'skills', 'talent', 'brand', 'economy']

PILLAR_NAMES = {
    'self_care': 'Self Care',
    'skills': 'Skills',
    'talent': 'Talent',
    'brand': 'Brand',
    'economy': 'Economy',
}

PRIORITY_RANK = {'high': 3, 'medium': 2, 'low': 1}
MAX_HIGH_PRIORITY = 3

INTENTION_MAPPINGS = {
    'health_lifestyle': {
        'primary': ['self_care'],
        'secondary': ['skills'],
        'focus': ['nutrition', 'exercise', 'sleep', 'stress management', 'mental health'],
    },
    'career_skills': {
        'primary': ['skills'],
        'secondary': ['brand', 'economy'],
        'focus': ['professional development', 'technical skills', 'leadership', 'communication'],
    },
    'creative_talents': {
        'primary': ['talent'],
        'secondary': ['brand', 'skills'],
        'focus': ['artistic expression', 'creative skills', 'portfolio development', 'creative process'],
    },
    'personal_brand': {
        'primary': ['brand'],
        'secondary': ['skills', 'talent'],
        'focus': ['online presence', 'networking', 'content creation', 'visibility', 'reputation'],
    },
    'business_economy': {
        'primary': ['economy'],
        'secondary': ['skills', 'brand'],
        'focus': ['financial planning', 'business development', 'revenue streams', 'investments'],
    },
    'relationships': {
        'primary': ['self_care'],
        'secondary': ['skills', 'brand'],
        'focus': ['communication', 'emotional intelligence', 'networking', 'social skills'],
    },
    'life_balance': {
        'primary': ['self_care'],
        'secondary': ['skills'],
        'focus': ['time management', 'work-life balance', 'stress reduction', 'priorities'],
    },
    'performance': {
        'primary': ['skills', 'self_care'],
        'secondary': ['talent'],
        'focus': ['productivity', 'efficiency', 'goal achievement', 'optimization'],
    },
}

ROLE_MODIFIERS = {
    'Influencer': {'emphasize': ['brand', 'talent'], 'focus': ['social media', 'audience building']},
    'Content Creator': {'emphasize': ['brand', 'talent'], 'focus': ['content strategy', 'creativity']},
    'YouTuber': {'emphasize': ['brand', 'talent'], 'focus': ['video production', 'audience engagement']},
    'Podcaster': {'emphasize': ['brand', 'skills'], 'focus': ['audio production', 'interviewing']},
    'Blogger': {'emphasize': ['brand', 'skills'], 'focus': ['writing', 'SEO', 'content planning']},
    'Musician': {'emphasize': ['talent', 'brand'], 'focus': ['musical performance', 'music marketing']},
    'Actor': {'emphasize': ['talent', 'brand'], 'focus': ['acting skills', 'industry networking']},
    'Entrepreneur': {'emphasize': ['economy', 'skills'], 'focus': ['business strategy', 'leadership']},
    'Coach/Advisor': {'emphasize': ['skills', 'brand'], 'focus': ['coaching techniques', 'client acquisition']},
    'Expert/Specialist': {'emphasize': ['skills', 'brand'], 'focus': ['expertise development', 'thought leadership']},
    'Author': {'emphasize': ['talent', 'brand'], 'focus': ['writing craft', 'publishing']},
    'Artist': {'emphasize': ['talent', 'brand'], 'focus': ['artistic development', 'art marketing']},
}

FALLBACK_REASONS = {
    'self_care': ('Foundation for all development', ['basic wellbeing']),
    'skills': ('Important for personal growth', ['general skill development']),
    'talent': ('Develop your natural abilities', ['talent identification']),
    'brand': ('Build your personal identity', ['basic brand building']),
    'economy': ('Create financial stability', ['basic finances']),
}


class PillarRecommendation(BaseModel):
    pillar: str
    priority: str
    reason: str
    specific_focus: List[str] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    recommendations: List[PillarRecommendation]
    primary_focus: List[str]
    rationale: str
    estimated_timeframe: str


# --- Recommendation Functions ---

def _find(recommendations: List[PillarRecommendation], pillar: str) -> Optional[PillarRecommendation]:
    return next((r for r in recommendations if r.pillar == pillar), None)


def _fallback_result() -> RecommendationResult:
    recommendations = [
        PillarRecommendation(pillar=pillar, priority='medium', reason=reason, specific_focus=focus)
        for pillar, (reason, focus) in FALLBACK_REASONS.items()
    ]
    return RecommendationResult(
        recommendations=recommendations,
        primary_focus=['general development'],
        rationale='Without a specific intention we recommend a broad approach to find your development areas.',
        estimated_timeframe='6-12 months',
    )


def generate_pillar_recommendations(
    intention: Optional[str],
    role: Optional[str] = None,
    current_situation: Optional[str] = None,
    specific_area: Optional[str] = None,
) -> RecommendationResult:
    """
    Ranks the five pillars for a client from their onboarding intention and public role.

    Unknown or missing intentions fall back to recommending every pillar at
    medium priority.
    """
    mapping = INTENTION_MAPPINGS.get(intention) if intention else None
    if mapping is None:
        if intention:
            logger.warning(f"Unknown onboarding intention '{intention}', using broad recommendation")
        return _fallback_result()

    recommendations: List[PillarRecommendation] = []

    for pillar in mapping['primary']:
        recommendations.append(PillarRecommendation(
            pillar=pillar,
            priority='high',
            reason=f'Central to "{intention}" development',
            specific_focus=mapping['focus'][:3],
        ))

    for pillar in mapping['secondary']:
        if _find(recommendations, pillar) is None:
            recommendations.append(PillarRecommendation(
                pillar=pillar,
                priority='medium',
                reason=f'Supports your "{intention}" development',
                specific_focus=mapping['focus'][2:4],
            ))

    modifier = ROLE_MODIFIERS.get(role) if role else None
    if modifier:
        for pillar in modifier['emphasize']:
            existing = _find(recommendations, pillar)
            if existing is not None:
                if existing.priority == 'medium':
                    existing.priority = 'high'
                existing.specific_focus = (existing.specific_focus + modifier['focus'])[:4]
            else:
                recommendations.append(PillarRecommendation(
                    pillar=pillar,
                    priority='high',
                    reason=f'Essential for your role as {role}',
                    specific_focus=modifier['focus'][:3],
                ))

    for pillar in FIVE_PILLARS:
        if _find(recommendations, pillar) is None:
            recommendations.append(PillarRecommendation(
                pillar=pillar,
                priority='low',
                reason='Complementary development area',
                specific_focus=['basic development'],
            ))

    # sorted() is stable, so insertion order breaks ties
    recommendations = sorted(recommendations, key=lambda r: PRIORITY_RANK[r.priority], reverse=True)
    for rec in recommendations[MAX_HIGH_PRIORITY:]:
        if rec.priority == 'high':
            rec.priority = 'medium'

    return RecommendationResult(
        recommendations=recommendations,
        primary_focus=list(mapping['primary']),
        rationale=_build_rationale(mapping, role, current_situation, specific_area),
        estimated_timeframe=_estimate_timeframe(recommendations, current_situation),
    )


def _build_rationale(
    mapping: Dict[str, Any],
    role: Optional[str],
    current_situation: Optional[str],
    specific_area: Optional[str],
) -> str:
    area = specific_area or 'this area'
    role_text = f' and your role as {role}' if role else ''
    primary = ' and '.join(PILLAR_NAMES[p] for p in mapping['primary'])
    situation = f' Your current situation: "{current_situation}".' if current_situation else ''
    return (
        f'Based on your focus on "{area}"{role_text} we recommend starting with the {primary} '
        f'pillar(s).{situation} This gives you a strong foundation for reaching your goals.'
    )


def _estimate_timeframe(recommendations: List[PillarRecommendation], current_situation: Optional[str]) -> str:
    high_priority = sum(1 for r in recommendations if r.priority == 'high')
    complex_situation = len(current_situation or '') > 100

    if high_priority <= 2 and not complex_situation:
        return '3-6 months'
    if high_priority <= 2 and complex_situation:
        return '6-9 months'
    if high_priority <= 3:
        return '6-12 months'
    return '9-18 months'


def recommendation_summary(result: RecommendationResult) -> str:
    names = [PILLAR_NAMES[r.pillar] for r in result.recommendations if r.priority == 'high']
    if not names:
        return f'We recommend a broad start across all pillars within {result.estimated_timeframe}.'
    return f'We recommend starting with {", ".join(names)} for optimal development within {result.estimated_timeframe}.'
