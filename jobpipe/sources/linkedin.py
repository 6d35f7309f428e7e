"""LinkedIn public (guest) job search.

The guest endpoint returns bare listing cards without a login. It is
heavily throttled, so the source is opt-in through ``JOB_SOURCES``.
"""
from __future__ import annotations

from typing import Sequence
from urllib.parse import urlencode

from jobpipe.models import JobSource
from jobpipe.sources.base import JobSearchBase

SEARCH_PATH = "/jobs-guest/jobs/api/seeMoreJobPostings/search"


class LinkedInSource(JobSearchBase):
    source = JobSource.LINKEDIN
    base_url = "https://www.linkedin.com"

    listing_selector = ".base-search-card"
    title_selector = ".base-search-card__title"
    company_selector = ".base-search-card__subtitle"
    location_selector = ".job-search-card__location"
    salary_selector = ".job-search-card__salary-info"
    link_selector = "a.base-card__full-link"
    date_selector = "time"
    detail_selector = ".show-more-less-html__markup, .description__text"

    def build_search_query(self, keywords: Sequence[str], location: str) -> str:
        params = {"keywords": " ".join(keywords), "location": location, "sortBy": "DD"}
        return f"{self.base_url}{SEARCH_PATH}?{urlencode(params)}"
