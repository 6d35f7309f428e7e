"""Tailor a CV to one posting, driving the posting's application status."""
from __future__ import annotations

from typing import Sequence

from jobpipe.ai_service import AIService
from jobpipe.errors import AppError
from jobpipe.log import get_logger
from jobpipe.models import ApplicationStatus, JobPosting, UserProfile
from jobpipe.rate_limiter import RateLimiter
from jobpipe.scorer import extract_keywords
from jobpipe.validation import validate_cv_text

log = get_logger(__name__)

MAX_ADDED_SKILLS = 8


def basic_tailor_cv(cv_text: str, job_keywords: Sequence[str]) -> str:
    """Append the job keywords the CV does not already mention."""
    cv_keywords = {k.lower() for k in extract_keywords(cv_text)}
    missing = [k for k in job_keywords if k.lower() not in cv_keywords]
    if not missing:
        return cv_text
    skills = "\n• ".join(missing[:MAX_ADDED_SKILLS])
    return f"{cv_text}\n\nRELEVANT TECHNICAL SKILLS:\n• {skills}"


class CVTailor:
    def __init__(self, rate_limiter: RateLimiter, ai: AIService | None = None) -> None:
        self.rate_limiter = rate_limiter
        self.ai = ai

    def _tailor_text(self, cv_text: str, job: JobPosting, profile: UserProfile) -> str:
        if self.ai is not None and self.ai.enabled:
            try:
                return self.ai.tailor_cv(cv_text, job, profile)
            except AppError as exc:
                log.warning("AI tailoring failed for %s (%s), using keyword fallback", job.id, exc.message)
        return basic_tailor_cv(cv_text, job.keywords)

    def tailor(self, cv_text: str, job: JobPosting, profile: UserProfile | None = None) -> str:
        validate_cv_text(cv_text)
        self.rate_limiter.check_limit("cvTailoring")

        job.transition_to(ApplicationStatus.GENERATING)
        try:
            tailored = self._tailor_text(cv_text, job, profile or UserProfile())
        except Exception:
            job.transition_to(ApplicationStatus.NOT_APPLIED)
            raise
        job.transition_to(ApplicationStatus.TAILORED)
        log.info("Tailored CV for %s @ %s", job.title, job.company)
        return tailored
