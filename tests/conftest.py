"""Pytest configuration and shared fixtures."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from cupslog.api import create_app
from cupslog.config import Config
from cupslog.parser import JobRecord

SAMPLE_PAGE_LOG = (
    "HP-LaserJet alice 101 [01/Apr/2025:09:03:11] 2 3 - 10.0.0.1 "
    "doc.pdf A4 one-sided\n"
    "Canon-Pixma bob 102 [01/Apr/2025:10:15:00] 1 5 - 10.0.0.2 "
    "report.pdf A4 one-sided\n"
    "HP-LaserJet bob 103 [02/Apr/2025:14:30:00] 4 2 - 10.0.0.2 "
    "slides.pdf A4 two-sided-long-edge\n"
    "HP-LaserJet alice 104 [03/Apr/2025:23:59:59] 1 1 - 10.0.0.1 "
    "late.pdf A4 one-sided\n"
    "HP-LaserJet alice 105 [03/Apr/2025:12:00:00] total 5 - 10.0.0.1 "
    "doc.pdf - -\n"
    "broken line here\n"
    "\n"
)


@pytest.fixture
def sample_page_log(tmp_path):
    """Create a sample page_log file with four valid jobs."""
    log_file = tmp_path / "page_log"
    log_file.write_text(SAMPLE_PAGE_LOG)
    return log_file


@pytest.fixture
def sample_config(tmp_path):
    """Create a sample configuration file."""
    config_file = tmp_path / "cupslog.conf"
    config_file.write_text(
        f"""[core]
page_log_path={tmp_path / "page_log"}
costs_config_path={tmp_path / "costs.json"}
watch=no

[server]
port=8080
"""
    )
    return config_file


@pytest.fixture
def make_job():
    """Factory for job records with sensible defaults."""

    def factory(
        printer="HP-LaserJet",
        user="alice",
        copies=1,
        when=datetime(2025, 4, 1, 10, 0, 0),
        job_id="1",
        **extra,
    ):
        return JobRecord(
            printer=printer,
            user=user,
            job_id=job_id,
            date_time=when,
            num_copies=copies,
            **extra,
        )

    return factory


@pytest.fixture
def app_config(tmp_path, sample_page_log):
    return Config(
        page_log_path=sample_page_log,
        fallback_log_path=tmp_path / "missing_sample.log",
        costs_config_path=tmp_path / "costs.json",
        watch=False,
    )


@pytest.fixture
def client(app_config):
    with TestClient(create_app(app_config)) as test_client:
        yield test_client
