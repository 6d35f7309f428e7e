"""Unit tests for keyword extraction, ATS scoring and match scoring."""

from jobpipe.scorer import (
    calculate_ats_score,
    calculate_match_score,
    extract_keywords,
    generate_suggestions,
    word_count,
)


def _scenario_cv() -> str:
    header = (
        "Experience\n"
        "- word word\n"
        "- word word\n"
        "- word word\n"
        "Skills\n"
        "python docker aws jira\n"
        "Education\n"
        "March 2022 June 2020\n"
        "1 2 3 4 5 6\n"
    )
    return header + " ".join(["word"] * 474)


class TestExtractKeywords:
    def test_case_insensitive_and_deduplicated(self):
        found = extract_keywords("PYTHON, python and Docker on AWS")
        assert sorted(found) == ["aws", "docker", "python"]

    def test_multi_word_terms(self):
        assert "project management" in extract_keywords("Strong Project Management skills")

    def test_empty(self):
        assert extract_keywords("") == []


class TestATSScore:
    def test_scenario_document_scores_71(self):
        cv = _scenario_cv()
        assert word_count(cv) == 500
        keywords = extract_keywords(cv)
        assert sorted(keywords) == ["aws", "docker", "jira", "python"]
        assert calculate_ats_score(cv, keywords) == 71

    def test_adding_section_never_lowers_score(self):
        cv = _scenario_cv()
        before = calculate_ats_score(cv, extract_keywords(cv))
        with_summary = cv.replace("Experience\n", "Experience Summary\n", 1)
        after = calculate_ats_score(with_summary, extract_keywords(with_summary))
        assert after >= before
        assert after == before + 5

    def test_keyword_points_capped_at_25(self):
        text = "word"
        assert calculate_ats_score(text, ["k"] * 40) == 25

    def test_length_bands(self):
        assert calculate_ats_score(" ".join(["word"] * 99), []) == 0
        assert calculate_ats_score(" ".join(["word"] * 100), []) == 5
        assert calculate_ats_score(" ".join(["word"] * 200), []) == 10
        assert calculate_ats_score(" ".join(["word"] * 400), []) == 15
        assert calculate_ats_score(" ".join(["word"] * 1600), []) == 5

    def test_never_exceeds_100(self):
        cv = (
            "Summary Experience Education Skills Achievements\n"
            "- led team of 10\n* 20 30 40 50 60 70\nJanuary 2021\n"
            + " ".join(["word"] * 500)
        )
        assert calculate_ats_score(cv, ["k"] * 30) == 100

    def test_half_point_rounds_up(self):
        assert calculate_ats_score("word", ["a", "b", "c"]) == 5

    def test_inline_bullets_count(self):
        assert calculate_ats_score("Skills: • Python • Docker • AWS", []) == 18

    def test_mid_line_dash_is_not_a_bullet(self):
        assert calculate_ats_score("Skills: Python - Docker * AWS", []) == 10
        assert calculate_ats_score("Skills:\n  * Python", []) == 18


class TestSuggestions:
    def test_low_score_gets_generic_and_targeted(self):
        suggestions = generate_suggestions("short cv", 20)
        assert "Include a professional summary section" in suggestions
        assert "Add quantifiable achievements and metrics" in suggestions
        assert "Include relevant projects section" in suggestions
        assert "CV is too short - add more detail about your experience" in suggestions
        assert "Use bullet points for better readability" in suggestions
        assert "Include more specific numbers and metrics" in suggestions

    def test_strong_cv_gets_few(self):
        cv = (
            "Achievements\nProjects\n- shipped 1 2 3 4\n" + " ".join(["word"] * 500)
        )
        assert generate_suggestions(cv, 90) == []

    def test_inline_bullets_satisfy_readability(self):
        text = "Skills: • Python • Docker • AWS"
        suggestions = generate_suggestions(text, calculate_ats_score(text, []))
        assert "Use bullet points for better readability" not in suggestions

    def test_long_cv(self):
        cv = " ".join(["word"] * 1300)
        assert "CV is too long - consider condensing to 1-2 pages" in generate_suggestions(cv, 90)


class TestMatchScore:
    def test_zero_when_nothing_to_match(self):
        assert calculate_match_score("python developer", [], []) == 0

    def test_weighted_keywords_and_requirements(self):
        cv = "Python and Docker developer"
        score = calculate_match_score(cv, ["python", "kubernetes"], ["docker", "5+ years experience"])
        assert score == 50

    def test_substring_match_either_direction(self):
        assert calculate_match_score("Node.js services", ["node"], []) == 100
        assert calculate_match_score("Java developer", ["javascript"], []) == 100

    def test_full_match(self):
        assert calculate_match_score("AWS and SQL", ["aws"], ["sql"]) == 100
