"""Data models for postings, CV analysis and the candidate profile."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable

from jobpipe.errors import ValidationError

NOT_SPECIFIED = "Not specified"
MAX_DESCRIPTION_LEN = 1000


class JobSource(str, Enum):
    SEEK = "seek"
    INDEED = "indeed"
    LINKEDIN = "linkedin"


class ApplicationStatus(str, Enum):
    NOT_APPLIED = "not_applied"
    APPLIED = "applied"
    TAILORED = "tailored"
    GENERATING = "generating"


# Re-entry after "applied" is allowed here; blocking it is a UI decision.
ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.NOT_APPLIED: frozenset(
        {ApplicationStatus.TAILORED, ApplicationStatus.GENERATING, ApplicationStatus.APPLIED}
    ),
    ApplicationStatus.GENERATING: frozenset(
        {ApplicationStatus.TAILORED, ApplicationStatus.NOT_APPLIED, ApplicationStatus.APPLIED}
    ),
    ApplicationStatus.TAILORED: frozenset(
        {ApplicationStatus.GENERATING, ApplicationStatus.APPLIED}
    ),
    ApplicationStatus.APPLIED: frozenset(
        {ApplicationStatus.GENERATING, ApplicationStatus.TAILORED}
    ),
}


def clamp_score(value: float) -> int:
    return max(0, min(100, int(value)))


@dataclass
class JobPosting:
    id: str
    title: str
    company: str
    location: str
    url: str
    source: JobSource
    salary: str = NOT_SPECIFIED
    description: str = ""
    requirements: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    date_posted: date = field(default_factory=date.today)
    application_status: ApplicationStatus = ApplicationStatus.NOT_APPLIED
    match_score: int = 0

    def __setattr__(self, name: str, value: Any) -> None:
        initialised = name in self.__dict__
        if name == "source":
            if initialised:
                raise AttributeError("JobPosting.source cannot be changed")
            value = JobSource(value)
        elif name == "match_score":
            value = clamp_score(value)
        elif name == "description":
            value = (value or "")[:MAX_DESCRIPTION_LEN]
        elif name == "application_status":
            value = ApplicationStatus(value)
            if initialised:
                current = self.__dict__[name]
                if value != current and value not in ALLOWED_TRANSITIONS[current]:
                    raise ValidationError(
                        f"Cannot move job {self.__dict__.get('id')} from "
                        f"{current.value} to {value.value}",
                        field="application_status",
                    )
        super().__setattr__(name, value)

    def transition_to(self, status: ApplicationStatus | str) -> None:
        self.application_status = status

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.title.lower(), self.company.lower())

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["application_status"] = self.application_status.value
        data["date_posted"] = self.date_posted.isoformat()
        return data


@dataclass(frozen=True)
class CVAnalysisResult:
    file_name: str
    content: str
    keywords: tuple[str, ...]
    ats_score: int
    suggestions: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keywords", tuple(self.keywords))
        object.__setattr__(self, "suggestions", tuple(self.suggestions))
        object.__setattr__(self, "ats_score", clamp_score(self.ats_score))


@dataclass
class UserProfile:
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    skills: list[str] = field(default_factory=list)
    experience: list[str] = field(default_factory=list)
    education: list[str] = field(default_factory=list)
    certifications: list[str] = field(default_factory=list)
    summary: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserProfile:
        data = data or {}

        def _list(key: str) -> list[str]:
            value = data.get(key) or []
            if isinstance(value, str):
                return [value]
            return [str(v) for v in value]

        return cls(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            location=str(data.get("location", "")),
            skills=_list("skills"),
            experience=_list("experience"),
            education=_list("education"),
            certifications=_list("certifications"),
            summary=str(data.get("summary", "")),
        )

    def as_text(self) -> str:
        """Flatten the profile into one document for keyword matching."""
        parts = [self.summary, *self.skills, *self.experience, *self.education, *self.certifications]
        return "\n".join(p for p in parts if p)

    def is_empty(self) -> bool:
        return not self.as_text().strip()


@dataclass(frozen=True)
class CoverLetter:
    job_id: str
    content: str
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )


@dataclass(frozen=True)
class ApplicationStats:
    total_jobs: int
    applied: int
    tailored: int
    average_match_score: int


def application_stats(jobs: Iterable[JobPosting]) -> ApplicationStats:
    jobs = list(jobs)
    applied = sum(1 for j in jobs if j.application_status == ApplicationStatus.APPLIED)
    tailored = sum(1 for j in jobs if j.application_status == ApplicationStatus.TAILORED)
    average = round(sum(j.match_score for j in jobs) / len(jobs)) if jobs else 0
    return ApplicationStats(
        total_jobs=len(jobs), applied=applied, tailored=tailored, average_match_score=average
    )
