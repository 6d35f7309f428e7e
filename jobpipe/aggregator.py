"""Fan a search out to every source, settle all, merge and deduplicate."""
from __future__ import annotations

from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from typing import Sequence

from jobpipe.analyzer import CVAnalyzer
from jobpipe.cache import CacheService
from jobpipe.config import Settings
from jobpipe.errors import ScrapingError
from jobpipe.log import get_logger
from jobpipe.models import JobPosting, UserProfile
from jobpipe.rate_limiter import RateLimiter
from jobpipe.sources import JobSearchBase
from jobpipe.validation import validate_search

log = get_logger(__name__)


def remove_duplicates(jobs: Sequence[JobPosting]) -> list[JobPosting]:
    """Keep the first posting for each lower-cased (title, company)."""
    seen: set[tuple[str, str]] = set()
    unique: list[JobPosting] = []
    for job in jobs:
        if job.dedup_key in seen:
            continue
        seen.add(job.dedup_key)
        unique.append(job)
    return unique


def _ensure_unique_ids(jobs: list[JobPosting]) -> None:
    used: set[str] = set()
    for job in jobs:
        if job.id in used:
            job.id = f"{job.id}_{len(used)}"
        used.add(job.id)


class JobAggregator:
    def __init__(
        self,
        sources: Sequence[JobSearchBase],
        cache: CacheService,
        rate_limiter: RateLimiter,
        analyzer: CVAnalyzer,
        settings: Settings,
    ) -> None:
        self.sources = list(sources)
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.analyzer = analyzer
        self.settings = settings

    def _search_source(self, source: JobSearchBase, keywords: list[str], location: str) -> list[JobPosting]:
        results = source.search(keywords, location)
        log.info("[%s] returned %d jobs", source.name, len(results))
        return results

    def fetch_all(self, keywords: list[str], location: str) -> list[JobPosting]:
        """Run every source concurrently; failed sources contribute nothing.

        Raises ScrapingError only when every source failed.
        """
        workers = max(1, min(len(self.sources), self.settings.max_concurrent_requests))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="jobpipe-source") as pool:
            futures = [
                (src, pool.submit(self._search_source, src, keywords, location))
                for src in self.sources
            ]
            wait([f for _, f in futures], return_when=ALL_COMPLETED)

        all_jobs: list[JobPosting] = []
        failed: list[str] = []
        for src, future in futures:
            exc = future.exception()
            if exc is not None:
                failed.append(src.name)
                log.error("[%s] FAILED: %s", src.name, exc)
                continue
            all_jobs.extend(future.result())

        if self.sources and len(failed) == len(self.sources):
            raise ScrapingError("Failed to scrape jobs from all sources", "all")
        if failed:
            log.warning("Partial results: %d/%d source(s) failed (%s)", len(failed), len(self.sources), ", ".join(failed))
        return all_jobs

    def search_jobs(
        self,
        keywords: Sequence[str],
        location: str,
        profile: UserProfile | None = None,
    ) -> list[JobPosting]:
        keywords, location = validate_search(keywords, location)
        self.rate_limiter.check_limit("jobSearch")

        query = ",".join(keywords)
        cached = self.cache.get_cached_job_search(query, location)
        if cached is not None:
            log.info("Job search cache hit for %r in %r", query, location)
            return cached

        all_jobs = self.fetch_all(keywords, location)
        unique = remove_duplicates(all_jobs)
        _ensure_unique_ids(unique)
        log.info("Total unique jobs: %d (from %d)", len(unique), len(all_jobs))

        enriched = self.analyzer.enrich(unique, profile)
        if not self.cache.cache_job_search(query, location, enriched):
            log.warning("Job search results for %r not cached", query)
        return enriched
