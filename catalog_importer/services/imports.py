"""
Import Service
Entry points behind the preview and start-import actions, plus job
listing and account erasure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from ..billing import QuotaExceeded, QuotaGovernor, remaining_imports
from ..db.models import ImportJob, JobStatus, ShopSubscription, utcnow
from ..db.session import get_session_factory, session_scope
from ..models.plans import Plan, get_plan_config
from ..models.product import ScrapedProduct
from ..scraper import CatalogScraper

logger = logging.getLogger(__name__)

RECENT_JOBS_LIMIT = 100

# (import_job_id, payload) -> queue message id
Enqueue = Callable[[str, Dict[str, Any]], str]


@dataclass(frozen=True)
class ImportResult:
    queued: int
    truncated: bool


@dataclass(frozen=True)
class JobSummary:
    pending: int
    completed: int
    failed: int
    total: int

    @property
    def percent_complete(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 0

    @property
    def is_importing(self) -> bool:
        return self.pending > 0


def summarize_jobs(jobs: Sequence[ImportJob]) -> JobSummary:
    statuses = [job.status for job in jobs]
    return JobSummary(
        pending=statuses.count(JobStatus.PENDING.value),
        completed=statuses.count(JobStatus.COMPLETED.value),
        failed=statuses.count(JobStatus.FAILED.value),
        total=len(statuses),
    )


def _default_enqueue(import_job_id: str, payload: Dict[str, Any]) -> str:
    # Import here to avoid loading Celery in the API process until needed
    from ..tasks.imports import enqueue_import

    return enqueue_import(import_job_id, payload)


class ImportService:
    """
    Coordinates scraping, quota reservation and job queueing.

    Construct once and share; it holds the shared scraper and governor.
    """

    def __init__(
        self,
        governor: QuotaGovernor,
        scraper: Optional[CatalogScraper] = None,
        session_factory: Optional[sessionmaker] = None,
        enqueue: Enqueue = _default_enqueue,
    ):
        self.governor = governor
        self.scraper = scraper or CatalogScraper()
        self.session_factory = session_factory or get_session_factory()
        self.enqueue = enqueue

    def preview(self, url: str) -> List[ScrapedProduct]:
        """
        Scrape a store or a single product page.

        Raises:
            ScrapeError: Classified, user-facing failure
        """
        return self.scraper.preview(url)

    def start_import(
        self, shop: str, access_token: str, products: Sequence[ScrapedProduct]
    ) -> ImportResult:
        """
        Reserve quota and queue one job per accepted product.

        A batch larger than the remaining quota is truncated to fit;
        with no quota left the whole batch is rejected.

        Args:
            shop: Destination shop domain
            access_token: Admin API token for the shop
            products: Products accepted from the preview

        Returns:
            How many jobs were queued and whether the batch was truncated

        Raises:
            QuotaExceeded: If no quota remains (or a concurrent request used it up)
        """
        if not products:
            return ImportResult(queued=0, truncated=False)

        subscription = self.governor.get_or_create_subscription(shop)
        remaining = remaining_imports(subscription)
        accepted = list(products)

        if remaining is not None:
            if remaining == 0:
                plan = Plan(subscription.plan)
                limit = 0 if plan == Plan.TRIAL_EXPIRED else get_plan_config(plan).limit
                raise QuotaExceeded(plan, limit, subscription.import_count, len(products))
            accepted = accepted[:remaining]

        self.governor.reserve_imports(shop, len(accepted))

        session = self.session_factory()
        try:
            jobs = [
                ImportJob(
                    shop=shop,
                    product_title=product.title,
                    status=JobStatus.PENDING.value,
                    source_url=product.source_url,
                )
                for product in accepted
            ]
            session.add_all(jobs)
            session.flush()
            job_ids = [job.id for job in jobs]
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        queued = 0
        for job_id, product in zip(job_ids, accepted):
            payload = {
                "product": product.model_dump(mode="json"),
                "shop": shop,
                "access_token": access_token,
                "import_job_id": job_id,
            }
            try:
                self.enqueue(job_id, payload)
                queued += 1
            except Exception as e:
                logger.error(f"Failed to queue import job {job_id}: {e}", extra={"shop": shop})
                self._fail_unqueued(job_id)

        truncated = len(accepted) < len(products)
        logger.info(
            f"Queued {queued} import(s) for {shop}" + (" (truncated to quota)" if truncated else ""),
            extra={"shop": shop, "queued": queued, "requested": len(products)},
        )
        return ImportResult(queued=queued, truncated=truncated)

    def _fail_unqueued(self, job_id: str) -> None:
        with session_scope(self.session_factory) as session:
            job = session.get(ImportJob, job_id)
            if job is not None:
                job.status = JobStatus.FAILED.value
                job.error_message = "The import could not be started. Please try again."
                job.updated_at = utcnow()

    def list_jobs(self, shop: str, limit: int = RECENT_JOBS_LIMIT) -> List[ImportJob]:
        """Most recent jobs for a shop, newest first."""
        session = self.session_factory()
        try:
            jobs = list(
                session.execute(
                    select(ImportJob)
                    .where(ImportJob.shop == shop)
                    .order_by(ImportJob.created_at.desc())
                    .limit(limit)
                ).scalars()
            )
            for job in jobs:
                session.expunge(job)
            return jobs
        finally:
            session.close()

    def erase_shop(self, shop: str) -> Dict[str, int]:
        """Delete every job and the subscription for a shop (account erasure)."""
        with session_scope(self.session_factory) as session:
            jobs = session.execute(delete(ImportJob).where(ImportJob.shop == shop)).rowcount
            subscriptions = session.execute(
                delete(ShopSubscription).where(ShopSubscription.shop == shop)
            ).rowcount

        logger.info(f"Erased data for {shop}: {jobs} job(s)", extra={"shop": shop})
        return {"import_jobs": jobs, "subscriptions": subscriptions}
