"""Generate cover letters with the AI collaborator (or a fallback template)."""
from __future__ import annotations

from datetime import date

from jobpipe.ai_service import AIService
from jobpipe.errors import AppError
from jobpipe.log import get_logger
from jobpipe.models import CoverLetter, JobPosting, UserProfile
from jobpipe.rate_limiter import RateLimiter

log = get_logger(__name__)


def relevant_skills(job_keywords: list[str], skills: list[str], limit: int = 4) -> list[str]:
    matches = [
        s for s in skills
        if any(k.lower() in s.lower() or s.lower() in k.lower() for k in job_keywords)
    ]
    return matches[:limit]


def _fallback_letter(job: JobPosting, profile: UserProfile, today: date | None = None) -> str:
    today = today or date.today()
    name = profile.name or "Candidate"
    background = ", ".join(profile.skills[:3]) or "my field"
    matching = ", ".join(relevant_skills(job.keywords, profile.skills)) or background
    experience = "\n".join(f"• {exp}" for exp in profile.experience[:3])
    requirement = job.requirements[0] if job.requirements else "the skills you listed"
    contact = "\n".join(p for p in (profile.email, profile.phone) if p)

    body = f"""{today.day} {today.strftime('%B %Y')}

Dear Hiring Manager,

I am writing to express my strong interest in the {job.title} position at {job.company}. With my background in {background}, I am excited about the opportunity to contribute to your team's success.

In my previous roles, I have developed expertise in {matching}, which aligns with your requirements."""
    if experience:
        body += f" My experience includes:\n\n{experience}"
    body += f"""

Your requirement for {requirement} resonates with my professional goals, and I am confident my experience would be valuable to your team.

I would welcome the opportunity to discuss how my skills can contribute to {job.company}'s continued success. Thank you for considering my application.

Sincerely,
{name}"""
    if contact:
        body += f"\n{contact}"
    return body


class CoverLetterGenerator:
    def __init__(self, rate_limiter: RateLimiter, ai: AIService | None = None) -> None:
        self.rate_limiter = rate_limiter
        self.ai = ai

    def generate(self, job: JobPosting, profile: UserProfile) -> CoverLetter:
        self.rate_limiter.check_limit("coverLetterGeneration")

        content = ""
        if self.ai is not None and self.ai.enabled:
            try:
                content = self.ai.generate_cover_letter(job, profile)
                log.info("Cover letter generated for %s @ %s", job.title, job.company)
            except AppError as exc:
                log.warning("Cover letter generation failed (%s), using template", exc.message)
        if not content:
            log.debug("Using template cover letter for %s", job.id)
            content = _fallback_letter(job, profile)
        return CoverLetter(job_id=job.id, content=content)
