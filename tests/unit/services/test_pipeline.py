"""
Tests for the per-product import pipeline.
"""

import pytest

from catalog_importer.db.models import JobStatus
from catalog_importer.models.product import ProductOption, ScrapedVariant
from catalog_importer.publisher import DownloadFailed, ProductCreateFailed
from catalog_importer.services import ImportPipeline
from catalog_importer.services.pipeline import GENERIC_FAILURE_MESSAGE

SHOP = "destination.myshopify.com"
LOCATION = "gid://shopify/Location/1"
PRODUCT_ID = "gid://shopify/Product/9"


class FakePublisher:
    def __init__(self, failing_images=(), create_error=None, location_error=None):
        self.failing_images = set(failing_images)
        self.create_error = create_error
        self.location_error = location_error
        self.created = []
        self.variant_calls = []
        self.closed = False

    def get_primary_location(self):
        if self.location_error:
            raise self.location_error
        return LOCATION

    def upload_media(self, url):
        if url in self.failing_images:
            raise DownloadFailed(details={"url": url})
        return f"staged:{url}"

    def create_product(self, product, media_handles, location_id):
        if self.create_error:
            raise self.create_error
        self.created.append((product, list(media_handles), location_id))
        return PRODUCT_ID

    def create_variants(self, product_id, variants, location_id, option_names=()):
        self.variant_calls.append((product_id, list(variants), location_id, list(option_names)))
        return []

    def close(self):
        self.closed = True


class UppercaseRewriter:
    def rewrite(self, title, html):
        return html.upper()


class BrokenRewriter:
    def rewrite(self, title, html):
        raise RuntimeError("rewriter crashed")


@pytest.fixture
def make_pipeline(session_factory):
    def build(publisher, rewriter=None):
        return ImportPipeline(
            session_factory=session_factory,
            rewriter=rewriter or UppercaseRewriter(),
            publisher_factory=lambda shop, token: publisher,
        )

    return build


class TestImportPipeline:
    def test_completes_job(self, make_pipeline, pending_job, load_job, product_factory):
        publisher = FakePublisher()
        job_id = pending_job()
        progress = []

        product_id = make_pipeline(publisher).run(
            job_id, SHOP, "shpat_test", product_factory(), progress=progress.append
        )

        job = load_job(job_id)
        assert product_id == PRODUCT_ID
        assert job.status == JobStatus.COMPLETED.value
        assert job.product_id == PRODUCT_ID
        assert job.error_message is None
        assert progress == [10, 30, 70, 100]

    def test_rewritten_description_is_published(self, make_pipeline, pending_job, product_factory):
        publisher = FakePublisher()

        make_pipeline(publisher).run(pending_job(), SHOP, "shpat_test", product_factory())

        created, _, _ = publisher.created[0]
        assert created.description_html == "<P>BREATHABLE LINEN.</P>"

    def test_failed_images_are_skipped(self, make_pipeline, pending_job, load_job, product_factory):
        images = ["https://cdn/a.jpg", "https://cdn/b.jpg", "https://cdn/c.jpg"]
        publisher = FakePublisher(failing_images=["https://cdn/b.jpg"])
        job_id = pending_job()

        make_pipeline(publisher).run(job_id, SHOP, "shpat_test", product_factory(images=images))

        _, handles, _ = publisher.created[0]
        assert handles == ["staged:https://cdn/a.jpg", "staged:https://cdn/c.jpg"]
        assert load_job(job_id).status == JobStatus.COMPLETED.value

    def test_all_images_failing_still_completes(self, make_pipeline, pending_job, load_job, product_factory):
        images = ["https://cdn/a.jpg", "https://cdn/b.jpg"]
        publisher = FakePublisher(failing_images=images)
        job_id = pending_job()

        make_pipeline(publisher).run(job_id, SHOP, "shpat_test", product_factory(images=images))

        _, handles, _ = publisher.created[0]
        assert handles == []
        assert load_job(job_id).status == JobStatus.COMPLETED.value

    def test_create_error_fails_job(self, make_pipeline, pending_job, load_job, product_factory):
        publisher = FakePublisher(create_error=ProductCreateFailed("Title can't be blank"))
        job_id = pending_job()

        with pytest.raises(ProductCreateFailed):
            make_pipeline(publisher).run(job_id, SHOP, "shpat_test", product_factory())

        job = load_job(job_id)
        assert job.status == JobStatus.FAILED.value
        assert job.error_message == "Title can't be blank"
        assert job.product_id is None

    def test_unexpected_error_stores_generic_message(self, make_pipeline, pending_job, load_job, product_factory):
        publisher = FakePublisher(location_error=KeyError("edges"))
        job_id = pending_job()

        with pytest.raises(KeyError):
            make_pipeline(publisher).run(job_id, SHOP, "shpat_test", product_factory())

        job = load_job(job_id)
        assert job.status == JobStatus.FAILED.value
        assert job.error_message == GENERIC_FAILURE_MESSAGE

    def test_default_option_products_skip_variants(self, make_pipeline, pending_job, product_factory):
        publisher = FakePublisher()

        make_pipeline(publisher).run(pending_job(), SHOP, "shpat_test", product_factory())

        assert publisher.variant_calls == []

    def test_real_options_create_variants(self, make_pipeline, pending_job, product_factory):
        variants = [
            ScrapedVariant(title="S", price="49.50", sku="T-S", selected_options=["S"]),
            ScrapedVariant(title="M", price="49.50", sku="T-M", selected_options=["M"]),
        ]
        product = product_factory(
            options=[ProductOption(name="Size", values=["S", "M"])], variants=variants
        )
        publisher = FakePublisher()

        make_pipeline(publisher).run(pending_job(), SHOP, "shpat_test", product)

        product_id, sent, location_id, option_names = publisher.variant_calls[0]
        assert product_id == PRODUCT_ID
        assert [v.sku for v in sent] == ["T-S", "T-M"]
        assert location_id == LOCATION
        assert option_names == ["Size"]

    def test_redelivered_completed_job_is_not_reimported(
        self, make_pipeline, pending_job, product_factory
    ):
        publisher = FakePublisher()
        job_id = pending_job(status=JobStatus.COMPLETED.value, product_id="gid://shopify/Product/1")

        result = make_pipeline(publisher).run(job_id, SHOP, "shpat_test", product_factory())

        assert result == "gid://shopify/Product/1"
        assert publisher.created == []

    def test_rewriter_crash_keeps_original_copy(
        self, make_pipeline, pending_job, load_job, product_factory
    ):
        publisher = FakePublisher()
        job_id = pending_job()

        make_pipeline(publisher, rewriter=BrokenRewriter()).run(
            job_id, SHOP, "shpat_test", product_factory()
        )

        created, _, _ = publisher.created[0]
        assert created.description_html == "<p>Breathable linen.</p>"
        assert load_job(job_id).status == JobStatus.COMPLETED.value

    def test_progress_failure_does_not_strand_job(
        self, make_pipeline, pending_job, load_job, product_factory
    ):
        def broken_progress(percent):
            raise ConnectionError("result backend down")

        job_id = pending_job()

        make_pipeline(FakePublisher()).run(
            job_id, SHOP, "shpat_test", product_factory(), progress=broken_progress
        )

        assert load_job(job_id).status == JobStatus.COMPLETED.value

    def test_publisher_closed_after_success(self, make_pipeline, pending_job, product_factory):
        publisher = FakePublisher()

        make_pipeline(publisher).run(pending_job(), SHOP, "shpat_test", product_factory())

        assert publisher.closed

    def test_publisher_closed_after_failure(self, make_pipeline, pending_job, product_factory):
        publisher = FakePublisher(create_error=ProductCreateFailed("Title can't be blank"))

        with pytest.raises(ProductCreateFailed):
            make_pipeline(publisher).run(pending_job(), SHOP, "shpat_test", product_factory())

        assert publisher.closed
