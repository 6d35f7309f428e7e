"""CV analysis and per-posting enrichment.

CV results are cached under a SHA-256 of the raw text. Collaborator failures
never reach the caller: the deterministic scorer answers instead, in the same
shape.
"""
from __future__ import annotations

import hashlib
from typing import Sequence

from jobpipe.ai_service import AIService
from jobpipe.cache import CacheService
from jobpipe.errors import AppError
from jobpipe.log import get_logger
from jobpipe.models import CVAnalysisResult, JobPosting, UserProfile
from jobpipe.rate_limiter import RateLimiter
from jobpipe.scorer import (
    calculate_ats_score,
    calculate_match_score,
    extract_keywords,
    generate_suggestions,
)
from jobpipe.validation import validate_cv_text

log = get_logger(__name__)

DEFAULT_FILE_NAME = "uploaded-cv.pdf"


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def basic_analysis(text: str, file_name: str = DEFAULT_FILE_NAME) -> CVAnalysisResult:
    keywords = extract_keywords(text)
    score = calculate_ats_score(text, keywords)
    return CVAnalysisResult(
        file_name=file_name,
        content=text,
        keywords=keywords,
        ats_score=score,
        suggestions=generate_suggestions(text, score),
    )


class CVAnalyzer:
    def __init__(
        self,
        cache: CacheService,
        rate_limiter: RateLimiter,
        ai: AIService | None = None,
    ) -> None:
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.ai = ai

    def analyze_cv(self, text: str, file_name: str = DEFAULT_FILE_NAME) -> CVAnalysisResult:
        validate_cv_text(text)

        cv_hash = content_hash(text)
        cached = self.cache.get_cached_cv_analysis(cv_hash)
        if cached is not None:
            log.debug("CV analysis cache hit %s", cv_hash[:12])
            return cached

        # Only fresh analyses spend the budget.
        self.rate_limiter.check_limit("cvAnalysis")

        result = None
        if self.ai is not None and self.ai.enabled:
            try:
                analysis = self.ai.analyze_cv(text)
                result = CVAnalysisResult(
                    file_name=file_name,
                    content=text,
                    keywords=analysis.keywords,
                    ats_score=analysis.score,
                    suggestions=analysis.suggestions,
                )
            except AppError as exc:
                log.warning("AI CV analysis failed (%s), using deterministic scorer", exc.message)
        if result is None:
            result = basic_analysis(text, file_name)

        if not self.cache.cache_cv_analysis(cv_hash, result):
            log.warning("CV analysis for %s not cached", cv_hash[:12])
        log.info("Analysed CV %s: ats_score=%d, keywords=%d", cv_hash[:12], result.ats_score, len(result.keywords))
        return result

    def job_keywords(self, job: JobPosting) -> list[str]:
        if self.ai is not None and self.ai.enabled and job.description:
            try:
                keywords = self.ai.extract_job_keywords(job.description, job.title)
                if keywords:
                    return keywords
            except AppError as exc:
                log.warning("AI keyword extraction failed for %s (%s), using vocabulary", job.id, exc.message)
        return extract_keywords(f"{job.title}\n{job.description}")

    def enrich(self, jobs: Sequence[JobPosting], profile: UserProfile | None = None) -> list[JobPosting]:
        """Fill keywords and match score on each posting."""
        profile_text = profile.as_text() if profile is not None else ""
        for job in jobs:
            job.keywords = self.job_keywords(job)
            if profile_text:
                job.match_score = calculate_match_score(profile_text, job.keywords, job.requirements)
        return list(jobs)
