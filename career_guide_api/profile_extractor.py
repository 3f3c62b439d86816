"""Map career quiz answers to a normalized career profile.

Each recognized question id feeds exactly one profile field:

- Q1  interests     (tags appended from INTEREST_TAGS)
- Q2  work_style    (answer copied verbatim)
- Q3  career_goals  (sentence looked up in CAREER_GOALS)
- Q4  industry      (answer copied verbatim)
- Q7  skills        (tags appended from SKILL_TAGS)
- Q10 experience    (answer copied verbatim)

All other ids are ignored. Extraction never raises: malformed keys or values are
skipped and the affected fields keep their empty default.
"""

import re
from collections.abc import Mapping
from typing import Any

from career_guide_api.models import CareerProfile

INTEREST_QUESTION = 1
WORK_STYLE_QUESTION = 2
GOALS_QUESTION = 3
INDUSTRY_QUESTION = 4
SKILLS_QUESTION = 7
EXPERIENCE_QUESTION = 10

# Leading optional sign and digits of a string key; trailing text is ignored
QUESTION_ID_PATTERN = re.compile(r"\s*([+-]?\d+)")

INTEREST_TAGS: dict[str, tuple[str, ...]] = {
    "analytical": ("Problem Solving", "Analysis"),
    "creative": ("Creative Work", "Design"),
    "people-oriented": ("People Management", "Communication"),
    "leadership": ("Leadership", "Management"),
}

SKILL_TAGS: dict[str, tuple[str, ...]] = {
    "technical": ("Technical Skills", "Programming"),
    "communication": ("Communication", "Presentation"),
    "leadership-skills": ("Leadership", "Management"),
    "creative-skills": ("Creative Skills", "Design"),
}

CAREER_GOALS: dict[str, str] = {
    "financial": "Financial success and stability",
    "impact": "Positive social impact",
    "growth": "Personal and professional growth",
    "recognition": "Achievement and recognition",
}

# Questions whose raw answer becomes a profile field as-is
VERBATIM_FIELDS: dict[int, str] = {
    WORK_STYLE_QUESTION: "work_style",
    INDUSTRY_QUESTION: "industry",
    EXPERIENCE_QUESTION: "experience",
}


def _question_id(key: Any) -> int | None:
    """Parse a question id from a JSON key or an int, None if unparseable.

    String keys are read from their leading digits, so ``"1.0"`` and ``"1a"``
    both name question 1.
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        match = QUESTION_ID_PATTERN.match(key)
        if not match:
            return None
        try:
            return int(match.group(1))
        except ValueError:
            # Beyond int()'s digit limit; no such question
            return None
    return None


def extract_profile(answers: Mapping[Any, Any] | None) -> CareerProfile:
    """Build a CareerProfile from quiz answers.

    Args:
        answers: Mapping of question id (int or numeric string) to answer code.

    Returns:
        The derived profile. Identical input always yields an identical profile.
    """
    interests: list[str] = []
    skills: list[str] = []
    fields: dict[str, str] = {}

    if not isinstance(answers, Mapping):
        return CareerProfile()

    for key, answer in answers.items():
        question = _question_id(key)
        if question is None or not isinstance(answer, str):
            continue

        if question == INTEREST_QUESTION:
            interests.extend(INTEREST_TAGS.get(answer, ()))
        elif question == SKILLS_QUESTION:
            skills.extend(SKILL_TAGS.get(answer, ()))
        elif question == GOALS_QUESTION:
            # Unrecognized codes leave an earlier goal in place
            if answer in CAREER_GOALS:
                fields["career_goals"] = CAREER_GOALS[answer]
        elif question in VERBATIM_FIELDS:
            fields[VERBATIM_FIELDS[question]] = answer

    return CareerProfile(interests=tuple(interests), skills=tuple(skills), **fields)
