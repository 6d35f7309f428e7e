"""
Job discovery pipeline.

Builds the shared cache, rate limiter, HTTP client and sources once and hands
them to every component: search → dedupe → enrich → cache.
"""
from __future__ import annotations

import time
from typing import Callable, Sequence

from jobpipe.aggregator import JobAggregator
from jobpipe.ai_service import AIService
from jobpipe.analyzer import CVAnalyzer
from jobpipe.cache import CacheService, CacheStats, TTLCache
from jobpipe.config import Settings, load_profile, load_settings
from jobpipe.cover_letter import CoverLetterGenerator
from jobpipe.http_client import HttpClient
from jobpipe.log import get_logger
from jobpipe.models import (
    ApplicationStats,
    ApplicationStatus,
    CoverLetter,
    CVAnalysisResult,
    JobPosting,
    UserProfile,
    application_stats,
)
from jobpipe.rate_limiter import RateLimiter
from jobpipe.scorer import calculate_match_score
from jobpipe.sources import JobSearchBase, get_sources
from jobpipe.tailoring import CVTailor

log = get_logger(__name__)

DEFAULT_USER = "default"


class JobPipeline:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sources: Sequence[JobSearchBase] | None = None,
        http: HttpClient | None = None,
        ai: AIService | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or load_settings()
        s = self.settings

        self.cache = CacheService(
            TTLCache(default_ttl=s.cache_default_ttl, check_period=s.cache_check_period, clock=clock),
            job_search_ttl=s.job_search_ttl,
            cv_analysis_ttl=s.cv_analysis_ttl,
            user_profile_ttl=s.user_profile_ttl,
        )
        self.rate_limiter = RateLimiter(s.rate_limits)
        self.http = http or HttpClient(s)
        self.ai = ai if ai is not None else AIService(s)
        if not self.ai.enabled:
            log.info("No OPENAI_API_KEY, using deterministic scoring only")

        self.analyzer = CVAnalyzer(self.cache, self.rate_limiter, self.ai)
        self.aggregator = JobAggregator(
            sources if sources is not None else get_sources(s, self.http),
            self.cache,
            self.rate_limiter,
            self.analyzer,
            s,
        )
        self.tailor = CVTailor(self.rate_limiter, self.ai)
        self.cover_letters = CoverLetterGenerator(self.rate_limiter, self.ai)

    def __enter__(self) -> JobPipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def profile(self, user_id: str = DEFAULT_USER) -> UserProfile:
        """The candidate profile, read through the profile cache."""
        cached = self.cache.get_cached_user_profile(user_id)
        if cached is not None:
            return cached
        profile = UserProfile.from_dict(load_profile(self.settings.profile_path))
        self.cache.cache_user_profile(user_id, profile)
        return profile

    def search_jobs(self, keywords: Sequence[str], location: str) -> list[JobPosting]:
        profile = self.profile()
        return self.aggregator.search_jobs(keywords, location, None if profile.is_empty() else profile)

    def analyze_cv(self, text: str, file_name: str = "uploaded-cv.pdf") -> CVAnalysisResult:
        return self.analyzer.analyze_cv(text, file_name)

    def match_score(self, cv_text: str, job_keywords: Sequence[str], job_requirements: Sequence[str]) -> int:
        return calculate_match_score(cv_text, job_keywords, job_requirements)

    def tailor_cv(self, cv_text: str, job: JobPosting) -> str:
        return self.tailor.tailor(cv_text, job, self.profile())

    def generate_cover_letter(self, job: JobPosting) -> CoverLetter:
        return self.cover_letters.generate(job, self.profile())

    def update_job_status(self, job: JobPosting, status: ApplicationStatus | str) -> JobPosting:
        job.transition_to(status)
        return job

    def stats(self, jobs: Sequence[JobPosting]) -> ApplicationStats:
        return application_stats(jobs)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def close(self) -> None:
        self.cache.cache.close()
        self.http.close()
