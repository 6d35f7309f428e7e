"""Deterministic keyword extraction and ATS / match scoring."""
from __future__ import annotations

import math
import re
from typing import Sequence

from jobpipe.log import get_logger

log = get_logger(__name__)

VOCABULARY: list[str] = [
    # frontend
    "react", "angular", "vue", "javascript", "typescript", "html", "css", "sass", "less",
    "jquery", "bootstrap", "tailwind", "webpack", "vite", "next.js", "nuxt.js",
    # backend
    "node.js", "express", "python", "django", "flask", "java", "spring", "c#", ".net",
    "php", "laravel", "ruby", "rails", "go", "rust", "scala",
    # databases
    "sql", "mysql", "postgresql", "mongodb", "redis", "elasticsearch", "oracle",
    "sqlite", "cassandra", "dynamodb",
    # cloud and devops
    "aws", "azure", "gcp", "docker", "kubernetes", "jenkins", "gitlab", "github",
    "terraform", "ansible", "ci/cd", "devops", "microservices",
    # tools and methodologies
    "git", "jira", "confluence", "agile", "scrum", "kanban", "rest", "graphql",
    "api", "testing", "jest", "cypress", "selenium",
    # soft skills
    "leadership", "communication", "problem-solving", "teamwork", "project management",
    "analytical", "creative", "adaptable", "detail-oriented",
]

GOOD_SCORE = 60
STRONG_SCORE = 75

# "•" anywhere; "-" and "*" only at the start of a line.
_BULLET_RE = re.compile(r"•|^\s*[\-*]\s", re.MULTILINE)
_NUMBER_RE = re.compile(r"\d+")
_MONTH_YEAR_RE = re.compile(
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.? \d{4}\b"
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def word_count(text: str) -> int:
    return len(text.split())


def has_bullets(text: str) -> bool:
    return bool(_BULLET_RE.search(text))


def extract_keywords(text: str, vocabulary: Sequence[str] = VOCABULARY) -> list[str]:
    """Vocabulary terms found in *text* (case-insensitive substring match)."""
    low = (text or "").lower()
    return list(dict.fromkeys(term for term in vocabulary if term.lower() in low))


def calculate_ats_score(text: str, keywords: Sequence[str]) -> int:
    low = text.lower()
    score = 0.0

    # Essential sections, up to 40
    if "experience" in low or "employment" in low:
        score += 15
    if "education" in low or "qualification" in low:
        score += 10
    if "skills" in low or "competencies" in low:
        score += 10
    if "summary" in low or "profile" in low:
        score += 5

    # Keyword density, up to 25
    score += min(1.5 * len(keywords), 25)

    # Length band, up to 15
    words = word_count(text)
    if 400 <= words <= 1000:
        score += 15
    elif 200 <= words <= 1500:
        score += 10
    elif words >= 100:
        score += 5

    # Formatting signals, up to 20
    if has_bullets(text):
        score += 8
    if "achievements" in low or "accomplishments" in low:
        score += 5
    if len(_NUMBER_RE.findall(text)) > 5:
        score += 4
    if _MONTH_YEAR_RE.search(text):
        score += 3

    return max(0, min(100, _round_half_up(score)))


def generate_suggestions(text: str, score: int) -> list[str]:
    suggestions: list[str] = []
    low = text.lower()

    if score < GOOD_SCORE:
        suggestions.append("Add more relevant keywords from job descriptions")
        suggestions.append("Include a professional summary section")
        suggestions.append("Use bullet points to improve readability")
        suggestions.append("Add quantifiable achievements with specific numbers")

    if "achievements" not in low and "accomplishments" not in low:
        suggestions.append("Add quantifiable achievements and metrics")

    if "projects" not in low and "portfolio" not in low:
        suggestions.append("Include relevant projects section")

    if score < STRONG_SCORE:
        suggestions.append("Use action verbs to start bullet points")
        suggestions.append("Tailor skills section to match job requirements")
        suggestions.append("Include relevant certifications and training")
        suggestions.append("Add contact information at the top")

    words = word_count(text)
    if words < 300:
        suggestions.append("CV is too short - add more detail about your experience")
    elif words > 1200:
        suggestions.append("CV is too long - consider condensing to 1-2 pages")

    if not has_bullets(text):
        suggestions.append("Use bullet points for better readability")

    if len(_NUMBER_RE.findall(text)) < 3:
        suggestions.append("Include more specific numbers and metrics")

    return suggestions


def calculate_match_score(
    cv_text: str,
    job_keywords: Sequence[str],
    job_requirements: Sequence[str],
) -> int:
    """Keyword overlap (3 points each) plus literal requirement hits (2 each)."""
    cv_keywords = [k.lower() for k in extract_keywords(cv_text)]
    low_cv = (cv_text or "").lower()

    matched = 0
    possible = 0
    for keyword in job_keywords:
        possible += 3
        kw = keyword.lower()
        if any(kw in ck or ck in kw for ck in cv_keywords):
            matched += 3

    for requirement in job_requirements:
        possible += 2
        if requirement.lower() in low_cv:
            matched += 2

    if possible == 0:
        return 0
    return _round_half_up(100 * matched / possible)
