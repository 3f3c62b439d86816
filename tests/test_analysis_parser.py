"""Tests for parsing generated career analysis text."""

import textwrap

import pytest

from career_guide_api.analysis_parser import (
    NEXT_STEPS_HEADER,
    PROFILE_HEADER,
    RECOMMENDATIONS_HEADER,
    parse_analysis,
    parse_recommendation,
    strip_bullet,
)
from career_guide_api.models import Recommendation, StructuredAnalysis

FULL_ANALYSIS = textwrap.dedent("""
    **CAREER PROFILE ANALYSIS:**
    You are an analytical thinker who enjoys structured problems.

    **TOP 3 CAREER RECOMMENDATIONS:**
    1. Data Scientist - Analyzes data. Match: 85%
    2. Software Engineer - Builds software systems. Match: 80%
    3. Business Analyst - Bridges business and technology. Match: 72%

    **NEXT STEPS:**
    - Learn Python
    - Build a portfolio
    • Network with professionals
""").strip()


class TestFullTemplate:
    """Text following the template parses into all three fields."""

    def test_summary(self):
        result = parse_analysis(FULL_ANALYSIS)
        assert result.summary == "You are an analytical thinker who enjoys structured problems."

    def test_recommendations(self):
        result = parse_analysis(FULL_ANALYSIS)
        assert result.recommendations == (
            Recommendation(title="Data Scientist", description="Analyzes data.", match=85),
            Recommendation(
                title="Software Engineer", description="Builds software systems.", match=80
            ),
            Recommendation(
                title="Business Analyst",
                description="Bridges business and technology.",
                match=72,
            ),
        )

    def test_next_steps(self):
        result = parse_analysis(FULL_ANALYSIS)
        assert result.next_steps == (
            "Learn Python",
            "Build a portfolio",
            "Network with professionals",
        )

    def test_single_recommendation_record(self):
        text = (
            f"{PROFILE_HEADER} Summary. {RECOMMENDATIONS_HEADER}\n"
            "1. Data Scientist - Analyzes data. Match: 85%\n"
            f"{NEXT_STEPS_HEADER}\n- Step"
        )
        result = parse_analysis(text)
        assert len(result.recommendations) == 1
        record = result.recommendations[0]
        assert record.title == "Data Scientist"
        assert record.description == "Analyzes data."
        assert record.match == 85

    def test_round_trip_of_fixture_content(self):
        summary = "A thoughtful communicator."
        recommendations = [
            ("Teacher", "Educates students.", 90),
            ("Counselor", "Guides people through decisions.", 78),
        ]
        steps = ["Volunteer at a school", "Earn a certification"]

        text = "\n".join(
            [
                PROFILE_HEADER,
                f"  {summary}  ",
                RECOMMENDATIONS_HEADER,
                *(f"{i}. {t} - {d} Match: {m}%" for i, (t, d, m) in enumerate(recommendations, 1)),
                NEXT_STEPS_HEADER,
                *(f"- {s}" for s in steps),
            ]
        )
        result = parse_analysis(text)

        assert result.summary == summary
        assert [(r.title, r.description, r.match) for r in result.recommendations] == recommendations
        assert list(result.next_steps) == steps


class TestMissingSections:
    """Missing headers empty the affected fields only."""

    def test_empty_text(self):
        assert parse_analysis("") == StructuredAnalysis()

    def test_none_text(self):
        assert parse_analysis(None) == StructuredAnalysis()

    def test_free_text_without_headers(self):
        assert parse_analysis("You should become a chef.") == StructuredAnalysis()

    def test_missing_next_steps_header(self):
        text = FULL_ANALYSIS.split(NEXT_STEPS_HEADER)[0]
        result = parse_analysis(text)
        assert result.next_steps == ()
        assert result.summary.startswith("You are an analytical thinker")
        assert len(result.recommendations) == 3

    def test_missing_profile_header(self):
        text = FULL_ANALYSIS.replace(PROFILE_HEADER, "")
        result = parse_analysis(text)
        assert result.summary == ""
        assert len(result.recommendations) == 3
        assert len(result.next_steps) == 3

    def test_missing_recommendations_header(self):
        text = FULL_ANALYSIS.replace(RECOMMENDATIONS_HEADER, "")
        result = parse_analysis(text)
        # Summary needs both of its bounding headers
        assert result.summary == ""
        assert result.recommendations == ()
        assert len(result.next_steps) == 3

    def test_headers_out_of_order(self):
        text = f"{RECOMMENDATIONS_HEADER}\n1. A - B. Match: 70%\n{PROFILE_HEADER}\nSummary"
        result = parse_analysis(text)
        assert result.summary == ""
        assert result.recommendations[0].title == "A"

    def test_only_first_header_occurrence_counts(self):
        text = (
            f"{PROFILE_HEADER} First summary {RECOMMENDATIONS_HEADER}\n"
            "1. First - One. Match: 90%\n"
            f"{NEXT_STEPS_HEADER}\n- Step one\n"
            f"{PROFILE_HEADER} Second summary {RECOMMENDATIONS_HEADER}\n"
            "1. Second - Two. Match: 80%\n"
        )
        result = parse_analysis(text)
        assert result.summary == "First summary"
        assert [r.title for r in result.recommendations] == ["First"]


class TestRecommendationLines:
    """Malformed recommendation lines are dropped."""

    def test_malformed_line_dropped_neighbors_kept(self):
        text = textwrap.dedent(f"""
            {RECOMMENDATIONS_HEADER}
            1. Data Scientist - Analyzes data. Match: 85%
            2. UX Designer: designs interfaces (Match 80%)
            3. Analyst - Reads reports. Match: 70%
            {NEXT_STEPS_HEADER}
        """)
        result = parse_analysis(text)
        assert [r.title for r in result.recommendations] == ["Data Scientist", "Analyst"]

    @pytest.mark.parametrize(
        "line",
        [
            "Data Scientist - Analyzes data. Match: 85%",
            "1. Data Scientist Analyzes data. Match: 85%",
            "1. Data Scientist - Analyzes data. Match: high",
            "1. Data Scientist - Analyzes data. Match: 85",
            "1) Data Scientist - Analyzes data. Match: 85%",
            "   1. Data Scientist - Analyzes data. Match: 85%",
            "",
        ],
    )
    def test_non_matching_lines(self, line):
        assert parse_recommendation(line) is None

    def test_percentage_above_100_dropped(self):
        assert parse_recommendation("1. Astronaut - Goes to space. Match: 150%") is None

    def test_oversized_percentage_dropped_neighbor_kept(self):
        text = (
            f"{RECOMMENDATIONS_HEADER}\n"
            f"1. A - B. Match: {'9' * 5000}%\n"
            "2. C - D. Match: 80%\n"
            f"{NEXT_STEPS_HEADER}\n- x"
        )
        result = parse_analysis(text)
        assert [r.title for r in result.recommendations] == ["C"]

    def test_leading_zeros_in_percentage(self):
        assert parse_recommendation("1. A - B. Match: 0085%").match == 85

    def test_boundary_percentages(self):
        assert parse_recommendation("1. A - B. Match: 0%").match == 0
        assert parse_recommendation("1. A - B. Match: 100%").match == 100

    def test_title_is_shortest_prefix_before_dash(self):
        record = parse_recommendation("1. Full-Stack Dev - Front - and back end. Match: 77%")
        assert record.title == "Full-Stack Dev"
        assert record.description == "Front - and back end."

    def test_trailing_text_after_percentage_ignored(self):
        record = parse_recommendation("2. Nurse - Cares for patients. Match: 91% (strong)")
        assert record.match == 91

    def test_windows_line_endings(self):
        text = FULL_ANALYSIS.replace("\n", "\r\n")
        result = parse_analysis(text)
        assert len(result.recommendations) == 3
        assert result.next_steps[0] == "Learn Python"


class TestNextSteps:
    """Bullet markers are stripped; blank lines are preserved."""

    def test_blank_lines_preserved(self):
        text = f"{NEXT_STEPS_HEADER}\n- First\n\n- Second"
        assert parse_analysis(text).next_steps == ("First", "", "Second")

    def test_header_with_nothing_after_yields_single_blank(self):
        assert parse_analysis(NEXT_STEPS_HEADER).next_steps == ("",)

    def test_numbered_steps_kept_verbatim(self):
        text = f"{NEXT_STEPS_HEADER}\n1. Update resume\n2. Apply"
        assert parse_analysis(text).next_steps == ("1. Update resume", "2. Apply")

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("- Learn SQL", "Learn SQL"),
            ("• Learn SQL", "Learn SQL"),
            ("-Learn SQL", "Learn SQL"),
            ("   -   Learn SQL  ", "Learn SQL"),
            ("-- Learn SQL", "- Learn SQL"),
            ("Learn SQL", "Learn SQL"),
            ("   ", ""),
        ],
    )
    def test_strip_bullet(self, line, expected):
        assert strip_bullet(line) == expected
