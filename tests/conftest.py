import os
import time

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
import requests

from jobpipe.config import Settings
from jobpipe.http_client import HttpClient


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Stands in for requests.Session. *handler(url)* returns HTML, a
    FakeResponse, or an exception instance to raise."""

    def __init__(self, handler):
        self.handler = handler
        self.headers = {}
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append(url)
        result = self.handler(url)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)

    def close(self):
        self.closed = True


def make_settings(**overrides) -> Settings:
    values = dict(
        request_delay_ms=0,
        retry_delay_ms=0,
        site_delays_ms={"seek": 0, "indeed": 0, "linkedin": 0},
        cache_check_period=0,
        retry_attempts=3,
        detail_retry_attempts=2,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock(monkeypatch, clock):
    """Pins time.time to the fake clock (the rate limiter windows run on it)."""
    monkeypatch.setattr(time, "time", clock)
    return clock


@pytest.fixture
def settings(tmp_path):
    return make_settings(profile_path=tmp_path / "profile.yaml")


@pytest.fixture
def make_http(settings):
    def _make(handler):
        session = FakeSession(handler)
        return HttpClient(settings, session=session), session
    return _make


SEEK_LISTING = """
<html><body>
  <article data-automation="normalJob">
    <a data-automation="jobTitle" href="/job/101">Python Developer</a>
    <a data-automation="jobCompany">Acme Corp</a>
    <span data-automation="jobLocation">Sydney NSW</span>
    <span data-automation="jobSalary">$120,000 - $140,000</span>
  </article>
  <article data-automation="normalJob">
    <a data-automation="jobTitle">Unlinked Listing</a>
    <a data-automation="jobCompany">Nowhere Pty</a>
  </article>
  <article data-automation="normalJob">
    <a data-automation="jobTitle" href="/job/102">No Company Here</a>
  </article>
  <article data-automation="normalJob">
    <a data-automation="jobTitle" href="/job/103">Data Engineer</a>
    <a data-automation="jobCompany">Globex</a>
    <span data-automation="jobLocation">Melbourne VIC</span>
  </article>
</body></html>
"""

SEEK_DETAIL = """
<html><body><div data-automation="jobAdDetails">
  <p>We need a Python engineer with Docker and AWS.</p>
  <ul><li>5+ years experience</li><li>Bachelor degree in CS</li><li>Agile team</li></ul>
</div></body></html>
"""

INDEED_LISTING = """
<html><body>
  <div class="job_seen_beacon">
    <h2 class="jobTitle"><a href="/rc/clk?jk=aaa"><span>Backend Engineer</span></a></h2>
    <span class="companyName">Initech</span>
    <div class="companyLocation">Brisbane QLD</div>
  </div>
  <div class="job_seen_beacon">
    <h2 class="jobTitle"><a href="/rc/clk?jk=bbb"><span>python developer</span></a></h2>
    <span class="companyName">ACME CORP</span>
    <div class="companyLocation">Sydney NSW</div>
  </div>
</body></html>
"""

INDEED_DETAIL = """
<html><body><div id="jobDescriptionText">
  Backend role using Java, Kubernetes and PostgreSQL. Scrum team.
</div></body></html>
"""
