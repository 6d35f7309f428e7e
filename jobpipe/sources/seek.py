"""SEEK (seek.com.au) search results and job ad pages."""
from __future__ import annotations

from typing import Sequence
from urllib.parse import urlencode

from jobpipe.models import JobSource
from jobpipe.sources.base import JobSearchBase


class SeekSource(JobSearchBase):
    source = JobSource.SEEK
    base_url = "https://www.seek.com.au"

    listing_selector = '[data-automation="normalJob"]'
    title_selector = '[data-automation="jobTitle"]'
    company_selector = '[data-automation="jobCompany"]'
    location_selector = '[data-automation="jobLocation"]'
    salary_selector = '[data-automation="jobSalary"]'
    link_selector = 'a[data-automation="jobTitle"], [data-automation="jobTitle"] a'
    detail_selector = '[data-automation="jobAdDetails"]'

    def build_search_query(self, keywords: Sequence[str], location: str) -> str:
        params = {"q": " ".join(keywords), "where": location, "sortmode": "ListedDate"}
        return f"{self.base_url}/jobs?{urlencode(params)}"
