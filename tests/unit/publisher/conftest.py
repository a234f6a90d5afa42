"""
Fixtures for destination publisher tests.
"""

import io

import pytest
from PIL import Image

from catalog_importer.publisher import GraphQLClient, RemotePublisher

SHOP = "destination.myshopify.com"


@pytest.fixture
def endpoint(settings):
    return f"https://{SHOP}/admin/api/{settings.destination_api_version}/graphql.json"


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(settings, sleeps):
    return GraphQLClient(SHOP, "shpat_test", settings=settings, sleep=sleeps.append)


@pytest.fixture
def publisher(client, settings):
    return RemotePublisher(client, settings=settings)


@pytest.fixture
def png_bytes():
    """Encode a solid-colour test image."""

    def build(size=(64, 32), mode="RGBA", color=(200, 30, 30, 128)):
        buffer = io.BytesIO()
        Image.new(mode, size, color).save(buffer, format="PNG")
        return buffer.getvalue()

    return build
