"""Parse a generated career analysis into summary, recommendations and next steps.

The model is prompted to answer with three markdown section headers, in order::

    **CAREER PROFILE ANALYSIS:**
    <2-3 sentence summary>
    **TOP 3 CAREER RECOMMENDATIONS:**
    1. <title> - <description> Match: <percent>%
    **NEXT STEPS:**
    - <action>

Parsing is best-effort: a missing header empties the affected field, malformed
recommendation lines are skipped, and nothing here raises.
"""

import re

from career_guide_api.models import Recommendation, StructuredAnalysis

PROFILE_HEADER = "**CAREER PROFILE ANALYSIS:**"
RECOMMENDATIONS_HEADER = "**TOP 3 CAREER RECOMMENDATIONS:**"
NEXT_STEPS_HEADER = "**NEXT STEPS:**"

SECTION_HEADERS = (PROFILE_HEADER, RECOMMENDATIONS_HEADER, NEXT_STEPS_HEADER)

# "1. Data Scientist - Analyzes data. Match: 85%"
RECOMMENDATION_PATTERN = re.compile(r"^\d+\. (.*?) - (.*?) Match: (\d+)%")

BULLET_MARKERS = ("-", "•")


def _section(
    text: str,
    header: str,
    end_header: str | None = None,
    *,
    require_end: bool = True,
) -> str | None:
    """Return the text after the first ``header`` up to the next ``end_header``.

    The end header is searched for only after the start header. When it is
    absent the section is ``None`` if ``require_end`` is set, otherwise it runs
    to the end of the text. Returns ``None`` when ``header`` is absent.
    """
    start = text.find(header)
    if start == -1:
        return None
    start += len(header)

    if end_header is None:
        return text[start:]

    end = text.find(end_header, start)
    if end == -1:
        return None if require_end else text[start:]
    return text[start:end]


def parse_recommendation(line: str) -> Recommendation | None:
    """Parse one ``N. Title - Description Match: X%`` line, None if it doesn't fit."""
    match = RECOMMENDATION_PATTERN.match(line)
    if not match:
        return None

    digits = match.group(3).lstrip("0")
    if len(digits) > 3:
        return None

    percent = int(digits or "0")
    if percent > 100:
        return None

    return Recommendation(title=match.group(1), description=match.group(2), match=percent)


def strip_bullet(line: str) -> str:
    """Strip surrounding whitespace and one leading ``-`` or ``•`` marker."""
    line = line.strip()
    if line.startswith(BULLET_MARKERS):
        line = line[1:]
    return line.strip()


def parse_analysis(text: str | None) -> StructuredAnalysis:
    """Split generated analysis text into its three structured parts."""
    if not isinstance(text, str):
        return StructuredAnalysis()

    summary = ""
    recommendations: list[Recommendation] = []
    next_steps: list[str] = []

    summary_section = _section(text, PROFILE_HEADER, RECOMMENDATIONS_HEADER)
    if summary_section is not None:
        summary = summary_section.strip()

    recommendations_section = _section(
        text, RECOMMENDATIONS_HEADER, NEXT_STEPS_HEADER, require_end=False
    )
    if recommendations_section is not None:
        for line in recommendations_section.strip().split("\n"):
            recommendation = parse_recommendation(line)
            if recommendation is not None:
                recommendations.append(recommendation)

    next_steps_section = _section(text, NEXT_STEPS_HEADER)
    if next_steps_section is not None:
        # Blank lines are kept so the step list mirrors the generated text
        next_steps = [strip_bullet(line) for line in next_steps_section.strip().split("\n")]

    return StructuredAnalysis(
        summary=summary,
        recommendations=tuple(recommendations),
        next_steps=tuple(next_steps),
    )
