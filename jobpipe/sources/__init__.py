from .base import JobSearchBase, extract_requirements
from .indeed import IndeedSource
from .linkedin import LinkedInSource
from .seek import SeekSource

from jobpipe.config import Settings
from jobpipe.errors import AppError
from jobpipe.http_client import HttpClient
from jobpipe.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSearchBase", "SeekSource", "IndeedSource", "LinkedInSource",
    "extract_requirements", "get_sources", "SOURCE_CLASSES",
]

SOURCE_CLASSES: dict[str, type[JobSearchBase]] = {
    "seek": SeekSource,
    "indeed": IndeedSource,
    "linkedin": LinkedInSource,
}


def get_sources(settings: Settings, http: HttpClient) -> list[JobSearchBase]:
    sources: list[JobSearchBase] = []
    for name in settings.sources:
        cls = SOURCE_CLASSES.get(name)
        if cls is None:
            log.warning("Unknown job source %r ignored", name)
            continue
        sources.append(cls(http, settings))
        log.info("Registered source: %s", name)

    if not sources:
        raise AppError("No job sources configured (JOB_SOURCES)", 500, "CONFIG_ERROR")
    return sources
