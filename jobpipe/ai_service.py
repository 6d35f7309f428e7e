"""Optional generative-text collaborator (any OpenAI-compatible endpoint).

Replies are parsed into strict shapes. Anything off-shape raises AppError so
callers can fall back to the deterministic scorer.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from jobpipe.config import Settings
from jobpipe.errors import AppError
from jobpipe.log import get_logger
from jobpipe.models import JobPosting, UserProfile
from jobpipe.retry import retry

log = get_logger(__name__)

_ANALYZE_PROMPT = """\
Assess this CV for ATS compatibility. Return ONLY JSON:
{{"score": <0-100>, "keywords": [<strings>], "suggestions": [<strings>]}}

CV:
{cv}
"""

_KEYWORDS_PROMPT = """\
List up to 20 ATS keywords (skills, tools, qualifications) for this job.
Return ONLY a JSON array of strings.

Title: {title}
Description: {description}
"""

_TAILOR_PROMPT = """\
Rewrite the CV below for this job. Keep every claim truthful.
Return only the CV text.

Job: {title} at {company}
Requirements: {requirements}
Keywords: {keywords}

Candidate summary: {summary}

CV:
{cv}
"""

_COVER_LETTER_PROMPT = """\
Write a cover letter (3-4 short paragraphs) for {name} applying to
{title} at {company} ({location}).
Requirements: {requirements}
Candidate skills: {skills}
Candidate summary: {summary}
Sign it with the candidate's name. No placeholders.
"""


@dataclass(frozen=True)
class AIAnalysis:
    score: int
    keywords: list[str]
    suggestions: list[str]


def _string_list(value: Any, field_name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise AppError(f"AI reply field {field_name!r} is not a list of strings", 500, "AI_RESPONSE_ERROR")
    return [v.strip() for v in value if v.strip()]


def _extract_json(raw: str, opener: str, closer: str) -> Any:
    start = raw.find(opener)
    end = raw.rfind(closer) + 1
    if start == -1 or end == 0:
        raise AppError("AI reply did not contain JSON", 500, "AI_RESPONSE_ERROR")
    try:
        return json.loads(raw[start:end])
    except json.JSONDecodeError as exc:
        raise AppError(f"AI reply is not valid JSON: {exc}", 500, "AI_RESPONSE_ERROR") from exc


def parse_analysis(raw: str) -> AIAnalysis:
    data = _extract_json(raw, "{", "}")
    if not isinstance(data, dict):
        raise AppError("AI analysis is not a JSON object", 500, "AI_RESPONSE_ERROR")
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
        raise AppError(f"AI analysis score out of range: {score!r}", 500, "AI_RESPONSE_ERROR")
    return AIAnalysis(
        score=int(round(score)),
        keywords=_string_list(data.get("keywords"), "keywords"),
        suggestions=_string_list(data.get("suggestions"), "suggestions"),
    )


def parse_keywords(raw: str) -> list[str]:
    return list(dict.fromkeys(_string_list(_extract_json(raw, "[", "]"), "keywords")))[:20]


class AIService:
    def __init__(self, settings: Settings, client: Any = None) -> None:
        self.api_key = settings.openai_api_key
        self.base_url = settings.openai_base_url or None
        self.model = settings.openai_model
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise AppError(
                    "AI service not configured. Set OPENAI_API_KEY to enable it.",
                    500,
                    "AI_DISABLED",
                )
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    @retry(max_attempts=2, base_delay=2.0, retryable=(Exception,))
    def _call(self, client: Any, prompt: str, max_tokens: int, temperature: float) -> str:
        resp = client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return (resp.choices[0].message.content or "").strip()

    def _complete(self, prompt: str, *, max_tokens: int, temperature: float) -> str:
        client = self._get_client()
        try:
            text = self._call(client, prompt, max_tokens, temperature)
        except AppError:
            raise
        except Exception as exc:
            raise AppError(f"AI service error: {exc}", 500, "AI_SERVICE_ERROR") from exc
        if not text:
            raise AppError("AI service returned an empty reply", 500, "AI_RESPONSE_ERROR")
        return text

    def analyze_cv(self, cv_text: str) -> AIAnalysis:
        raw = self._complete(_ANALYZE_PROMPT.format(cv=cv_text[:8000]), max_tokens=1500, temperature=0.3)
        return parse_analysis(raw)

    def extract_job_keywords(self, description: str, title: str) -> list[str]:
        raw = self._complete(
            _KEYWORDS_PROMPT.format(title=title, description=description),
            max_tokens=500,
            temperature=0.2,
        )
        return parse_keywords(raw)

    def tailor_cv(self, cv_text: str, job: JobPosting, profile: UserProfile) -> str:
        return self._complete(
            _TAILOR_PROMPT.format(
                title=job.title,
                company=job.company,
                requirements=", ".join(job.requirements),
                keywords=", ".join(job.keywords),
                summary=profile.summary,
                cv=cv_text,
            ),
            max_tokens=2000,
            temperature=0.7,
        )

    def generate_cover_letter(self, job: JobPosting, profile: UserProfile) -> str:
        return self._complete(
            _COVER_LETTER_PROMPT.format(
                name=profile.name or "the candidate",
                title=job.title,
                company=job.company,
                location=job.location,
                requirements=", ".join(job.requirements),
                skills=", ".join(profile.skills[:8]),
                summary=profile.summary,
            ),
            max_tokens=2000,
            temperature=0.7,
        )
