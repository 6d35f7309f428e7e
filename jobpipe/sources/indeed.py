"""Indeed Australia (au.indeed.com) search results and job pages."""
from __future__ import annotations

from typing import Sequence
from urllib.parse import urlencode

from jobpipe.models import JobSource
from jobpipe.sources.base import JobSearchBase


class IndeedSource(JobSearchBase):
    source = JobSource.INDEED
    base_url = "https://au.indeed.com"

    listing_selector = ".job_seen_beacon"
    title_selector = ".jobTitle a span"
    company_selector = '.companyName, [data-testid="company-name"]'
    location_selector = '.companyLocation, [data-testid="text-location"]'
    salary_selector = ".salary-snippet, .salary-snippet-container"
    link_selector = ".jobTitle a"
    detail_selector = "#jobDescriptionText, .jobsearch-jobDescriptionText"

    def build_search_query(self, keywords: Sequence[str], location: str) -> str:
        params = {"q": " ".join(keywords), "l": location, "sort": "date"}
        return f"{self.base_url}/jobs?{urlencode(params)}"
