"""
Import Pipeline
Per-product import executed by the queue worker:

1. Rewrite the description (never fails the job)
2. Resolve the inventory location
3. Upload images (each independently; failures are skipped)
4. Create the product and, when it has real options, its variants
5. Persist COMPLETED with the remote product id

Any exception from stages 2-4 marks the job FAILED and is re-raised
to the queue.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from ..db.models import ImportJob, JobStatus, utcnow
from ..db.session import get_session_factory, session_scope
from ..models.product import ScrapedProduct
from ..publisher import GraphQLClient, PublisherError, RemotePublisher
from .rewriter import CopyRewriter
from .settle import attempt_all

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "The product could not be imported. Please try again."

# Coarse progress checkpoints reported to the queue
PROGRESS_REWRITE = 10
PROGRESS_MEDIA = 30
PROGRESS_CREATE = 70
PROGRESS_DONE = 100


def default_publisher_factory(shop: str, access_token: str) -> RemotePublisher:
    return RemotePublisher(GraphQLClient(shop, access_token))


def failure_message(error: Exception) -> str:
    """Plain-language reason stored on a FAILED job; internal exception text is never stored."""
    if isinstance(error, PublisherError):
        return error.message
    return GENERIC_FAILURE_MESSAGE


class ImportPipeline:
    """
    Runs one import job end to end and records its terminal status.

    Shared by every task in a worker process.
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        rewriter: Optional[CopyRewriter] = None,
        publisher_factory: Callable[[str, str], RemotePublisher] = default_publisher_factory,
    ):
        """
        Initialize the pipeline.

        Args:
            session_factory: SQLAlchemy session factory for job records
            rewriter: Description rewriter
            publisher_factory: Builds a publisher for (shop, access_token)
        """
        self.session_factory = session_factory or get_session_factory()
        self.rewriter = rewriter or CopyRewriter()
        self.publisher_factory = publisher_factory

    def _update_job(self, job_id: str, **values) -> None:
        with session_scope(self.session_factory) as session:
            session.execute(
                update(ImportJob)
                .where(ImportJob.id == job_id)
                .values(updated_at=utcnow(), **values)
            )

    def _finished_product_id(self, job_id: str) -> Optional[str]:
        """Product id of an already-COMPLETED job (redelivered message), else None."""
        session = self.session_factory()
        try:
            job = session.get(ImportJob, job_id)
            if job is not None and job.status == JobStatus.COMPLETED.value:
                return job.product_id
            return None
        finally:
            session.close()

    def mark_completed(self, job_id: str, product_id: str) -> None:
        self._update_job(
            job_id, status=JobStatus.COMPLETED.value, product_id=product_id, error_message=None
        )

    def mark_failed(self, job_id: str, error: Exception) -> None:
        self._update_job(job_id, status=JobStatus.FAILED.value, error_message=failure_message(error))

    def _report(self, progress: Callable[[int], None], percent: int, job_id: str) -> None:
        """Progress is advisory; a broken result backend never affects the job."""
        try:
            progress(percent)
        except Exception as e:
            logger.warning(f"Progress report failed for job {job_id}: {e}", extra={"job_id": job_id})

    def _rewrite(self, product: ScrapedProduct, job_id: str) -> ScrapedProduct:
        try:
            description = self.rewriter.rewrite(product.title, product.description_html)
        except Exception as e:
            logger.error(
                f"Rewrite failed for job {job_id}, keeping original copy: {e}",
                extra={"job_id": job_id},
            )
            return product
        return product.with_description(description)

    def run(
        self,
        job_id: str,
        shop: str,
        access_token: str,
        product: ScrapedProduct,
        progress: Callable[[int], None] = lambda percent: None,
    ) -> str:
        """
        Import one product.

        Args:
            job_id: ImportJob id this run settles
            shop: Destination shop domain
            access_token: Admin API token for the shop
            product: Product to create
            progress: Receives coarse progress percentages
                (best effort; failures are logged)

        Returns:
            Remote product id

        Raises:
            Exception: Whatever aborted stages 2-4, after the job is marked FAILED
        """
        existing = self._finished_product_id(job_id)
        if existing:
            logger.info(f"Job {job_id} already completed, skipping", extra={"job_id": job_id})
            return existing

        # Stage 1: rewrite copy (falls back to the original)
        self._report(progress, PROGRESS_REWRITE, job_id)
        product = self._rewrite(product, job_id)

        publisher = None
        try:
            publisher = self.publisher_factory(shop, access_token)

            # Stage 2: inventory location
            location_id = publisher.get_primary_location()

            # Stage 3: media, tolerating per-image failures
            self._report(progress, PROGRESS_MEDIA, job_id)
            uploads = attempt_all(publisher.upload_media, product.images, label="image")
            if product.images:
                logger.info(
                    f"Uploaded {len(uploads.successes)}/{len(product.images)} images",
                    extra={"job_id": job_id, "shop": shop},
                )

            # Stage 4: product and variants
            self._report(progress, PROGRESS_CREATE, job_id)
            product_id = publisher.create_product(product, uploads.successes, location_id)
            if product.has_real_options and product.variants:
                publisher.create_variants(
                    product_id,
                    product.variants,
                    location_id,
                    [option.name for option in product.options],
                )
        except Exception as e:
            logger.error(
                f"Import job {job_id} failed: {e}",
                exc_info=not isinstance(e, PublisherError),
                extra={"job_id": job_id, "shop": shop},
            )
            self.mark_failed(job_id, e)
            raise
        finally:
            if publisher is not None:
                publisher.close()

        # Stage 5: persist
        self._report(progress, PROGRESS_DONE, job_id)
        self.mark_completed(job_id, product_id)
        logger.info(f"Import job {job_id} completed: {product_id}", extra={"job_id": job_id})
        return product_id
