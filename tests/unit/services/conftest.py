"""
Fixtures for import service and pipeline tests.
"""

import pytest

from catalog_importer.db.models import ImportJob, JobStatus
from catalog_importer.models.product import ProductOption, ScrapedProduct, ScrapedVariant

SHOP = "destination.myshopify.com"


def build_product(title="Linen Shirt", images=None, options=None, variants=None):
    return ScrapedProduct(
        title=title,
        description_html="<p>Breathable linen.</p>",
        vendor="Acme",
        source_url=f"https://example-store.com/products/{title.lower().replace(' ', '-')}",
        images=images if images is not None else ["https://cdn.example-store.com/a.jpg"],
        options=options if options is not None else [ProductOption(name="Title", values=["Default Title"])],
        variants=variants
        if variants is not None
        else [ScrapedVariant(title="Default Title", price="19.99", sku="SHIRT-1")],
    )


@pytest.fixture
def product_factory():
    return build_product


@pytest.fixture
def pending_job(session_factory):
    """Insert a PENDING job and return its id."""

    def create(title="Linen Shirt", status=JobStatus.PENDING.value, product_id=None):
        session = session_factory()
        job = ImportJob(
            shop=SHOP,
            product_title=title,
            status=status,
            source_url="https://example-store.com/products/linen-shirt",
            product_id=product_id,
        )
        session.add(job)
        session.commit()
        job_id = job.id
        session.close()
        return job_id

    return create


@pytest.fixture
def load_job(session_factory):
    def load(job_id):
        session = session_factory()
        try:
            job = session.get(ImportJob, job_id)
            session.expunge(job)
            return job
        finally:
            session.close()

    return load
