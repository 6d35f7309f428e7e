"""Source fetchers against canned HTML (no live HTTP)."""

from datetime import date

import pytest
import requests

from conftest import (
    INDEED_DETAIL,
    INDEED_LISTING,
    SEEK_DETAIL,
    SEEK_LISTING,
    FakeResponse,
    FakeSession,
    make_settings,
)
from jobpipe.errors import AppError, ScrapingError
from jobpipe.http_client import HttpClient
from jobpipe.models import NOT_SPECIFIED, JobSource
from jobpipe.sources import (
    IndeedSource,
    LinkedInSource,
    SeekSource,
    extract_requirements,
    get_sources,
)


def seek_handler(url):
    if "/jobs?" in url:
        return SEEK_LISTING
    return SEEK_DETAIL


class TestQueries:
    def test_seek_url(self, make_http, settings):
        http, _ = make_http(seek_handler)
        url = SeekSource(http, settings).build_search_query(["python", "developer"], "Sydney NSW")
        assert url == "https://www.seek.com.au/jobs?q=python+developer&where=Sydney+NSW&sortmode=ListedDate"

    def test_indeed_url(self, make_http, settings):
        http, _ = make_http(seek_handler)
        url = IndeedSource(http, settings).build_search_query(["java"], "Perth")
        assert url == "https://au.indeed.com/jobs?q=java&l=Perth&sort=date"

    def test_linkedin_url(self, make_http, settings):
        http, _ = make_http(seek_handler)
        url = LinkedInSource(http, settings).build_search_query(["go", "engineer"], "Remote")
        assert url.startswith("https://www.linkedin.com/jobs-guest/jobs/api/seeMoreJobPostings/search?")
        assert "keywords=go+engineer" in url


class TestListingParse:
    def test_seek_skips_bad_elements(self, make_http, settings):
        http, _ = make_http(seek_handler)
        jobs = SeekSource(http, settings).parse_listing_page(SEEK_LISTING)
        assert [j.title for j in jobs] == ["Python Developer", "Unlinked Listing", "Data Engineer"]
        first, _, second = jobs
        assert first.url == "https://www.seek.com.au/job/101"
        assert first.salary == "$120,000 - $140,000"
        assert second.salary == NOT_SPECIFIED
        assert first.source is JobSource.SEEK
        assert first.id.startswith("seek_")
        assert first.id != second.id
        assert first.description == "" and first.keywords == [] and first.match_score == 0

    def test_listing_without_href_is_kept(self, make_http, settings):
        http, _ = make_http(seek_handler)
        jobs = SeekSource(http, settings).parse_listing_page(SEEK_LISTING)
        unlinked = jobs[1]
        assert (unlinked.title, unlinked.company) == ("Unlinked Listing", "Nowhere Pty")
        assert unlinked.url == ""
        assert unlinked.id.startswith("seek_")
        assert unlinked.id not in {jobs[0].id, jobs[2].id}

    def test_indeed_listing(self, make_http, settings):
        http, _ = make_http(seek_handler)
        jobs = IndeedSource(http, settings).parse_listing_page(INDEED_LISTING)
        assert [(j.title, j.company) for j in jobs] == [
            ("Backend Engineer", "Initech"),
            ("python developer", "ACME CORP"),
        ]
        assert jobs[0].url == "https://au.indeed.com/rc/clk?jk=aaa"

    def test_linkedin_card_date(self, make_http, settings):
        html = """
        <ul><li><div class="base-search-card">
          <a class="base-card__full-link" href="https://www.linkedin.com/jobs/view/1"></a>
          <h3 class="base-search-card__title"> Site Reliability Engineer </h3>
          <h4 class="base-search-card__subtitle"><a>Umbrella</a></h4>
          <span class="job-search-card__location">Adelaide</span>
          <time datetime="2026-10-01">2 weeks ago</time>
        </div></li></ul>
        """
        http, _ = make_http(seek_handler)
        jobs = LinkedInSource(http, settings).parse_listing_page(html)
        assert len(jobs) == 1
        assert jobs[0].title == "Site Reliability Engineer"
        assert jobs[0].company == "Umbrella"
        assert jobs[0].date_posted == date(2026, 10, 1)


class TestRequirements:
    def test_extracts_categories(self):
        reqs = extract_requirements(
            "Python and React, AWS, Docker, Agile, 5+ years experience, Bachelor degree, C# a plus"
        )
        lowered = [r.lower() for r in reqs]
        assert "python" in lowered
        assert "aws" in lowered
        assert "agile" in lowered
        assert "5+ years experience" in lowered
        assert "bachelor" in lowered
        assert "c#" in lowered

    def test_deduplicates_and_caps(self):
        text = " ".join(
            ["python Python", "react angular vue javascript typescript nodejs java php ruby",
             "aws azure gcp docker"]
        )
        reqs = extract_requirements(text)
        assert len(reqs) == 10
        assert [r.lower() for r in reqs].count("python") == 1

    def test_word_boundaries(self):
        assert extract_requirements("javascript") == ["javascript"]


class TestSearch:
    def test_search_fills_details(self, make_http, settings):
        http, session = make_http(seek_handler)
        jobs = SeekSource(http, settings).search(["python"], "Sydney")
        assert len(jobs) == 3
        assert "Docker and AWS" in jobs[0].description
        assert "5+ years experience" in jobs[0].requirements
        assert jobs[1].description == "" and jobs[1].requirements == []
        # one search page + one detail page per listing with a URL
        assert len(session.calls) == 3

    def test_results_capped(self):
        capped = make_settings(max_results_per_source=1)
        session_calls = []

        def handler(url):
            session_calls.append(url)
            return seek_handler(url)

        http = HttpClient(capped, session=FakeSession(handler))
        jobs = SeekSource(http, capped).search(["python"], "Sydney")
        assert len(jobs) == 1
        assert len(session_calls) == 2

    def test_search_page_timeouts_raise_scraping_error(self, make_http, settings):
        http, session = make_http(lambda url: requests.Timeout("timed out"))
        with pytest.raises(ScrapingError) as exc:
            SeekSource(http, settings).search(["python"], "Sydney")
        assert exc.value.source == "seek"
        assert len(session.calls) == settings.retry_attempts

    def test_http_error_status_is_retried(self, make_http, settings):
        attempts = []

        def handler(url):
            if "/jobs?" in url:
                attempts.append(url)
                if len(attempts) < 3:
                    return FakeResponse("", status_code=503)
                return SEEK_LISTING
            return SEEK_DETAIL

        http, _ = make_http(handler)
        jobs = SeekSource(http, settings).search(["python"], "Sydney")
        assert len(attempts) == 3
        assert len(jobs) == 3

    def test_failed_detail_keeps_listing(self, make_http, settings):
        def handler(url):
            if "/jobs?" in url:
                return SEEK_LISTING
            if url.endswith("/job/101"):
                return requests.ConnectionError("reset")
            return SEEK_DETAIL

        http, session = make_http(handler)
        jobs = SeekSource(http, settings).search(["python"], "Sydney")
        assert [j.title for j in jobs] == ["Python Developer", "Unlinked Listing", "Data Engineer"]
        assert jobs[0].description == "" and jobs[0].requirements == []
        assert jobs[2].description
        detail_calls = [c for c in session.calls if c.endswith("/job/101")]
        assert len(detail_calls) == settings.detail_retry_attempts * settings.retry_attempts

    def test_detail_without_description_is_retried_per_listing(self, make_http, settings):
        def handler(url):
            if "/jobs?" in url:
                return SEEK_LISTING
            return "<html><body><p>Expired</p></body></html>"

        http, session = make_http(handler)
        jobs = SeekSource(http, settings).search(["python"], "Sydney")
        assert all(j.description == "" for j in jobs)
        assert len(session.calls) == 1 + 2 * settings.detail_retry_attempts

    def test_indeed_search(self, make_http, settings):
        def handler(url):
            return INDEED_LISTING if "/jobs?" in url else INDEED_DETAIL

        http, _ = make_http(handler)
        jobs = IndeedSource(http, settings).search(["backend"], "Brisbane")
        assert "postgresql" in [r.lower() for r in jobs[0].requirements]


class TestRegistry:
    def test_default_sources(self, make_http, settings):
        http, _ = make_http(seek_handler)
        names = [s.name for s in get_sources(settings, http)]
        assert names == ["seek", "indeed"]

    def test_unknown_names_skipped(self, make_http):
        http, _ = make_http(seek_handler)
        sources = get_sources(make_settings(sources=("linkedin", "monster")), http)
        assert [s.name for s in sources] == ["linkedin"]

    def test_no_sources_is_an_error(self, make_http):
        http, _ = make_http(seek_handler)
        with pytest.raises(AppError):
            get_sources(make_settings(sources=()), http)
