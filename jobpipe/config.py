"""Load runtime settings from the environment and the user profile from YAML."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobpipe.errors import ValidationError
from jobpipe.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"

# operation name -> (points, duration seconds)
DEFAULT_RATE_LIMITS: dict[str, tuple[int, int]] = {
    "jobSearch": (10, 60),
    "cvTailoring": (5, 60),
    "coverLetterGeneration": (10, 60),
    "cvAnalysis": (10, 60),
}

# Politeness pause before each search page, per site.
DEFAULT_SITE_DELAYS_MS: dict[str, int] = {
    "seek": 1000,
    "indeed": 1500,
    "linkedin": 2000,
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring non-integer %s=%r, using %d", key, raw, default)
        return default


def _env_key(operation: str) -> str:
    # cvTailoring -> CV_TAILORING
    out = ""
    for ch in operation:
        if ch.isupper() and out:
            out += "_"
        out += ch.upper()
    return out


@dataclass(frozen=True)
class Settings:
    max_concurrent_requests: int = 5
    request_delay_ms: int = 2000
    request_timeout_ms: int = 30000
    retry_attempts: int = 3
    retry_delay_ms: int = 5000
    detail_retry_attempts: int = 2
    max_results_per_source: int = 10
    site_delays_ms: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SITE_DELAYS_MS))
    sources: tuple[str, ...] = ("seek", "indeed")

    cache_default_ttl: int = 600
    cache_check_period: int = 120
    job_search_ttl: int = 300
    cv_analysis_ttl: int = 3600
    user_profile_ttl: int = 86400

    rate_limits: dict[str, tuple[int, int]] = field(default_factory=lambda: dict(DEFAULT_RATE_LIMITS))

    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-4o-mini"

    profile_path: Path = PROFILE_PATH

    @property
    def request_delay(self) -> float:
        return self.request_delay_ms / 1000

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def retry_delay(self) -> float:
        return self.retry_delay_ms / 1000

    def site_delay(self, source: str) -> float:
        return self.site_delays_ms.get(source, 0) / 1000


def load_settings() -> Settings:
    """Build Settings from the environment; every value has a default."""
    rate_limits = {
        op: (
            _env_int(f"RATE_LIMIT_{_env_key(op)}_POINTS", points),
            _env_int(f"RATE_LIMIT_{_env_key(op)}_DURATION", duration),
        )
        for op, (points, duration) in DEFAULT_RATE_LIMITS.items()
    }
    site_delays = {
        site: _env_int(f"{site.upper()}_DELAY_MS", delay)
        for site, delay in DEFAULT_SITE_DELAYS_MS.items()
    }
    sources = tuple(
        s.strip().lower() for s in get_env("JOB_SOURCES", "seek,indeed").split(",") if s.strip()
    )
    profile_path = get_env("PROFILE_PATH")

    return Settings(
        max_concurrent_requests=_env_int("MAX_CONCURRENT_REQUESTS", 5),
        request_delay_ms=_env_int("REQUEST_DELAY_MS", 2000),
        request_timeout_ms=_env_int("REQUEST_TIMEOUT_MS", 30000),
        retry_attempts=_env_int("RETRY_ATTEMPTS", 3),
        retry_delay_ms=_env_int("RETRY_DELAY_MS", 5000),
        detail_retry_attempts=_env_int("DETAIL_RETRY_ATTEMPTS", 2),
        max_results_per_source=_env_int("MAX_RESULTS_PER_SOURCE", 10),
        site_delays_ms=site_delays,
        sources=sources,
        cache_default_ttl=_env_int("CACHE_DEFAULT_TTL", 600),
        cache_check_period=_env_int("CACHE_CHECK_PERIOD", 120),
        job_search_ttl=_env_int("JOB_SEARCH_TTL", 300),
        cv_analysis_ttl=_env_int("CV_ANALYSIS_TTL", 3600),
        user_profile_ttl=_env_int("USER_PROFILE_TTL", 86400),
        rate_limits=rate_limits,
        openai_api_key=get_env("OPENAI_API_KEY"),
        openai_base_url=get_env("OPENAI_BASE_URL"),
        openai_model=get_env("OPENAI_MODEL", "gpt-4o-mini"),
        profile_path=Path(profile_path) if profile_path else PROFILE_PATH,
    )


def load_profile(path: Path | None = None) -> dict[str, Any]:
    """Read the candidate profile YAML. A missing file yields an empty profile."""
    path = path or PROFILE_PATH
    if not path.exists():
        log.info("No profile at %s; match scores will be 0", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValidationError(f"Profile at {path} must be a mapping", field="profile")

    # Accept both a flat layout and candidate fields nested under "profile:"
    if "profile" in data and isinstance(data["profile"], dict):
        nested = data.pop("profile")
        for key, value in nested.items():
            data.setdefault(key, value)
    return data
