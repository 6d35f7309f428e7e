"""Common scraping flow for listing sites.

A source turns keywords and a location into a search URL, parses the listing
page into partial postings, then visits each posting's detail page to fill in
the description and requirements. Subclasses supply the URL and selectors.
"""
from __future__ import annotations

import hashlib
import re
import time
from abc import ABC, abstractmethod
from datetime import date
from typing import Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from jobpipe.config import Settings
from jobpipe.errors import ScrapingError
from jobpipe.http_client import HttpClient
from jobpipe.log import get_logger
from jobpipe.models import NOT_SPECIFIED, JobPosting, JobSource
from jobpipe.retry import RetryPolicy

log = get_logger(__name__)

MAX_REQUIREMENTS = 10

REQUIREMENT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?<!\w)(react|angular|vue|javascript|typescript|node\.?js|python|java|c#|php|ruby)(?!\w)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?<!\w)(aws|azure|gcp|docker|kubernetes|git|sql|mongodb|postgresql)(?!\w)",
        re.IGNORECASE,
    ),
    re.compile(r"(?<!\w)(agile|scrum|devops|ci/cd|rest|api|microservices)(?!\w)", re.IGNORECASE),
    re.compile(r"(?<!\w)(\d+\+?\s*years?\s*(?:of\s+)?experience)(?!\w)", re.IGNORECASE),
    re.compile(r"(?<!\w)(bachelor|degree|certification|diploma)(?!\w)", re.IGNORECASE),
]


def extract_requirements(description: str) -> list[str]:
    """Pull skill, experience and qualification phrases out of a description."""
    found: dict[str, str] = {}
    for pattern in REQUIREMENT_PATTERNS:
        for m in pattern.finditer(description or ""):
            phrase = m.group(0).strip()
            found.setdefault(phrase.lower(), phrase)
    return list(found.values())[:MAX_REQUIREMENTS]


def _text(el: Tag, selector: str) -> str:
    if not selector:
        return ""
    node = el.select_one(selector)
    return " ".join(node.get_text(" ").split()) if node else ""


def _pause(seconds: float) -> None:
    if seconds > 0:
        time.sleep(seconds)


class JobSearchBase(ABC):
    source: JobSource
    base_url: str

    # CSS selectors, relative to one listing element
    listing_selector: str
    title_selector: str
    company_selector: str
    location_selector: str
    salary_selector: str = ""
    link_selector: str = ""
    date_selector: str = ""
    detail_selector: str = ""

    def __init__(self, http: HttpClient, settings: Settings) -> None:
        self.http = http
        self.settings = settings
        self.detail_policy = RetryPolicy(
            max_attempts=settings.detail_retry_attempts,
            base_delay=settings.retry_delay,
            retryable=(ScrapingError,),
        )

    @property
    def name(self) -> str:
        return self.source.value

    @abstractmethod
    def build_search_query(self, keywords: Sequence[str], location: str) -> str:
        pass

    # ── listing page ────────────────────────────────────────────────────

    def parse_listing_page(self, html: str) -> list[JobPosting]:
        soup = BeautifulSoup(html, "lxml")
        jobs: list[JobPosting] = []
        for index, el in enumerate(soup.select(self.listing_selector)):
            try:
                job = self._parse_listing(el, index)
            except Exception as exc:
                log.warning("[%s] skipping malformed listing #%d: %s", self.name, index, exc)
                continue
            if job is not None:
                jobs.append(job)
        return jobs

    def _parse_listing(self, el: Tag, index: int) -> JobPosting | None:
        title = _text(el, self.title_selector)
        company = _text(el, self.company_selector)
        if not title or not company:
            return None

        url = ""
        if self.link_selector:
            anchor = el.select_one(self.link_selector)
            href = anchor.get("href") if anchor is not None else None
            if href:
                url = urljoin(self.base_url, str(href))

        return JobPosting(
            id=self._make_id(index, url or f"{title}|{company}"),
            title=title,
            company=company,
            location=_text(el, self.location_selector),
            salary=_text(el, self.salary_selector) or NOT_SPECIFIED,
            url=url,
            source=self.source,
            date_posted=self._parse_date(el),
        )

    def _parse_date(self, el: Tag) -> date:
        if self.date_selector:
            node = el.select_one(self.date_selector)
            raw = node.get("datetime") if node is not None else None
            if raw:
                try:
                    return date.fromisoformat(str(raw)[:10])
                except ValueError:
                    log.debug("[%s] unparseable date %r", self.name, raw)
        return date.today()

    def _make_id(self, index: int, seed: str) -> str:
        digest = hashlib.sha256(seed.encode()).hexdigest()[:10]
        return f"{self.name}_{digest}_{index}"

    # ── detail pages ────────────────────────────────────────────────────

    def parse_detail(self, html: str) -> str:
        soup = BeautifulSoup(html, "lxml")
        node = soup.select_one(self.detail_selector)
        if node is None:
            return ""
        return " ".join(node.get_text(" ").split())

    def _fetch_detail_once(self, job: JobPosting) -> JobPosting:
        html = self.http.get(job.url, source=self.name)
        description = self.parse_detail(html)
        if not description:
            raise ScrapingError(f"No description on detail page for {job.id}", self.name)
        job.description = description
        job.requirements = extract_requirements(job.description)
        return job

    def fetch_detail(self, job: JobPosting) -> JobPosting:
        """Fill description and requirements, retrying this one listing."""
        return self.detail_policy.call(self._fetch_detail_once, job)

    def get_job_details(self, jobs: list[JobPosting]) -> list[JobPosting]:
        # One detail request at a time per source.
        detailed: list[JobPosting] = []
        for job in jobs:
            if not job.url:
                log.debug("[%s] %s has no detail URL", self.name, job.id)
                detailed.append(job)
                continue
            _pause(self.settings.request_delay)
            try:
                detailed.append(self.fetch_detail(job))
            except Exception as exc:
                log.warning("[%s] keeping %s without details: %s", self.name, job.id, exc)
                detailed.append(job)
        return detailed

    # ── entry point ─────────────────────────────────────────────────────

    def search(self, keywords: Sequence[str], location: str) -> list[JobPosting]:
        try:
            _pause(self.settings.site_delay(self.name))
            url = self.build_search_query(keywords, location)
            html = self.http.get(url, source=self.name)
            jobs = self.parse_listing_page(html)
        except ScrapingError:
            raise
        except Exception as exc:
            raise ScrapingError(f"Failed to scrape {self.name}: {exc}", self.name) from exc

        jobs = jobs[: self.settings.max_results_per_source]
        log.info("[%s] parsed %d listing(s)", self.name, len(jobs))
        return self.get_job_details(jobs)
