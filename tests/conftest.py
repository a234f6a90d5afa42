"""
Pytest configuration and shared fixtures
"""

import json
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_importer.billing import QuotaGovernor
from catalog_importer.config import Settings
from catalog_importer.db.session import build_engine, init_db

STORE_URL = "https://example-store.com"
SHOP = "destination.myshopify.com"


class FakeClock:
    """Naive-UTC clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="development",
        database_url="sqlite://",
        openai_api_key=None,
        scraper_page_size=250,
        throttle_max_attempts=5,
        throttle_base_delay=1.0,
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0))


@pytest.fixture
def governor(session_factory, settings, clock):
    return QuotaGovernor(session_factory=session_factory, settings=settings, clock=clock)


def make_raw_product(product_id=1, handle="linen-shirt", options=None, variants=None, **overrides):
    """Product as returned by the public storefront endpoints."""
    product = {
        "id": product_id,
        "title": "Linen Shirt",
        "handle": handle,
        "body_html": "<p>Breathable linen.</p>",
        "vendor": "Acme",
        "images": [{"src": "https://cdn.example-store.com/shirt-1.jpg"}],
        "options": options if options is not None else [{"name": "Title", "values": ["Default Title"]}],
        "variants": variants
        if variants is not None
        else [
            {
                "id": 100 + product_id,
                "title": "Default Title",
                "price": "19.99",
                "sku": "SHIRT-1",
                "inventory_quantity": 7,
                "option1": "Default Title",
                "option2": None,
                "option3": None,
            }
        ],
    }
    product.update(overrides)
    return product


@pytest.fixture
def raw_product():
    return make_raw_product()


@pytest.fixture
def sized_raw_product():
    """Product with two real options and three variants."""
    return make_raw_product(
        product_id=2,
        handle="linen-trousers",
        options=[
            {"name": "Size", "values": ["S", "M", "L"]},
            {"name": "Colour", "values": ["Sand"]},
        ],
        variants=[
            {
                "id": 201,
                "title": f"{size} / Sand",
                "price": "49.50",
                "sku": f"TROUSER-{size}",
                "inventory_quantity": qty,
                "option1": size,
                "option2": "Sand",
                "option3": None,
            }
            for size, qty in (("S", 3), ("M", 0), ("L", 12))
        ],
    )


@pytest.fixture
def catalog_page_body():
    """Serialize a listing page."""

    def build(products):
        return json.dumps({"products": products})

    return build


@pytest.fixture
def raw_product_factory():
    return make_raw_product
