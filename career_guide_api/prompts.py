"""Prompt templates sent to Gemini for each endpoint."""

from collections.abc import Mapping
from typing import Any

from career_guide_api.analysis_parser import (
    NEXT_STEPS_HEADER,
    PROFILE_HEADER,
    RECOMMENDATIONS_HEADER,
)
from career_guide_api.models import UserProfile

USER_PROFILE_TEMPLATE = """

USER PROFILE:
- Interests: {interests}
- Skills: {skills}
- Experience Level: {experience}
- Work Style: {work_style}
- Career Goals: {career_goals}
- Preferred Industry: {industry}"""

NO_PROFILE_NOTE = (
    "\n\nNOTE: The user hasn't completed the career quiz yet. "
    "Encourage them to take it for more personalized recommendations."
)

QUIZ_ANALYSIS_PROMPT = f"""As an expert career counselor, analyze these quiz responses and provide personalized career guidance:

QUIZ RESPONSES:
{{responses}}

Please provide:
{PROFILE_HEADER} (2-3 sentences)
{RECOMMENDATIONS_HEADER}
1. [Job Title] - [Brief description]. Match: [70-95]%
2. [Job Title] - [Brief description]. Match: [70-95]%
3. [Job Title] - [Brief description]. Match: [70-95]%

{NEXT_STEPS_HEADER} 5 practical actions.
"""

CAREER_ASSESSMENT_PROMPT = """Analyze this career profile and provide a structured assessment:

**Profile:**
- Experience Level: {experience}
- Work Style: {work_style}
- Skills/Interests: {skills}
- Career Goals: {goals}

Include:
1. Top 3 Career Recommendations
2. Skills Analysis
3. Learning Path
4. Market Outlook
5. Next Steps
"""

INDUSTRY_INSIGHTS_PROMPT = """Provide up-to-date insights for the {industry} industry:

1. Growth Trends
2. Hot Skills
3. Emerging Roles
4. Salary Ranges
5. Future Outlook
6. Entry Points
"""


def build_chat_prompt(
    system_prompt: str,
    message: str,
    user_profile: UserProfile | None = None,
) -> str:
    """Combine the counsellor persona, the user's quiz profile and their question."""
    prompt = system_prompt
    if user_profile and user_profile.quiz_completed:
        prompt += USER_PROFILE_TEMPLATE.format(
            interests=", ".join(user_profile.interests),
            skills=", ".join(user_profile.skills),
            experience=user_profile.experience,
            work_style=user_profile.work_style,
            career_goals=user_profile.career_goals,
            industry=user_profile.industry,
        )
    else:
        prompt += NO_PROFILE_NOTE
    return f"{prompt}\n\nUser Question: {message}"


def build_quiz_analysis_prompt(answers: Mapping[Any, Any]) -> str:
    responses = "\n".join(f"Q{question}: {answer}" for question, answer in answers.items())
    return QUIZ_ANALYSIS_PROMPT.format(responses=responses)


def build_assessment_prompt(
    experience: str | None,
    work_style: str | None,
    skills: str | list[str] | None,
    goals: str | None,
) -> str:
    if isinstance(skills, list):
        skills = ", ".join(skills)
    return CAREER_ASSESSMENT_PROMPT.format(
        experience=experience or "Not specified",
        work_style=work_style or "Not specified",
        skills=skills or "Not specified",
        goals=goals or "Not specified",
    )


def build_insights_prompt(industry: str) -> str:
    return INDUSTRY_INSIGHTS_PROMPT.format(industry=industry)
