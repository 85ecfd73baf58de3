"""
Match Maker: turns questionnaire answers into a listing query.

Skill level and goals are required answers but do not narrow the results;
tech stacks and the preferred format do.
"""
from typing import Dict, List

from classifier import CANONICAL_STACKS
from communities import ListingQuery
from errors import ValidationFailed, field_error
from schemas import MatchAnswers

SKILL_LEVELS = ("Beginner", "Intermediate", "Advanced")
GOALS = ("Learn new skills", "Build projects", "Network", "Get job help", "Mentorship")
FORMATS = ("Online", "Local/In-person", "Hybrid")
MATCH_LIMIT = 12

FORMAT_TO_LOCATION = {
    "Online": "Global/Online",
    "Local/In-person": "Offline",
    "Hybrid": "Hybrid",
}


def validate_answers(answers: MatchAnswers) -> None:
    errors: List[Dict[str, str]] = []
    if answers.skill_level not in SKILL_LEVELS:
        errors.append(field_error("skill_level", f"Choose one of: {', '.join(SKILL_LEVELS)}"))
    if not answers.goals or any(g not in GOALS for g in answers.goals):
        errors.append(field_error("goals", f"Choose at least one of: {', '.join(GOALS)}"))
    if answers.preferred_format not in FORMATS:
        errors.append(field_error("preferred_format", f"Choose one of: {', '.join(FORMATS)}"))
    if not answers.tech_stack or any(t not in CANONICAL_STACKS for t in answers.tech_stack):
        errors.append(field_error("tech_stack", f"Choose at least one of: {', '.join(CANONICAL_STACKS)}"))
    if errors:
        raise ValidationFailed(errors=errors)


def to_listing_query(answers: MatchAnswers) -> ListingQuery:
    validate_answers(answers)
    return ListingQuery(
        tech_stack=list(dict.fromkeys(answers.tech_stack)),
        location_mode=FORMAT_TO_LOCATION[answers.preferred_format],
        page=1,
        limit=MATCH_LIMIT,
    )
