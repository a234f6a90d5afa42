"""
Fixtures for API integration tests.
"""

import pytest
from fastapi.testclient import TestClient

from catalog_importer.api.dependencies import get_governor, get_import_service
from catalog_importer.api.main import app
from catalog_importer.config import get_settings
from catalog_importer.services import ImportService


class StubScraper:
    def __init__(self):
        self.products = []
        self.error = None

    def preview(self, url):
        if self.error:
            raise self.error
        return self.products


@pytest.fixture
def scraper():
    return StubScraper()


@pytest.fixture
def queued():
    return []


@pytest.fixture
def import_service(governor, session_factory, scraper, queued):
    def enqueue(job_id, payload):
        queued.append((job_id, payload))
        return f"import-{job_id}"

    return ImportService(governor=governor, scraper=scraper, session_factory=session_factory, enqueue=enqueue)


@pytest.fixture
def client(governor, import_service, settings):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_governor] = lambda: governor
    app.dependency_overrides[get_import_service] = lambda: import_service
    yield TestClient(app)
    app.dependency_overrides.clear()
