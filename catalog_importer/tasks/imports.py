"""
Product Import Tasks
Queue worker for per-product import jobs
"""

import logging
from typing import Any, Dict, Optional

from .celery_app import app

logger = logging.getLogger(__name__)

IMPORT_TASK_NAME = "tasks.import_product"

# One pipeline per worker process, shared by every task it runs
_pipeline = None


def get_pipeline():
    """Get the process-wide import pipeline (lazy singleton)."""
    global _pipeline
    if _pipeline is None:
        from ..services.pipeline import ImportPipeline

        _pipeline = ImportPipeline()
    return _pipeline


def set_pipeline(pipeline: Optional[Any]) -> None:
    """Replace the shared pipeline (useful for testing)."""
    global _pipeline
    _pipeline = pipeline


def enqueue_import(import_job_id: str, payload: Dict[str, Any]) -> str:
    """
    Queue one import job.

    The message is named after the job so redeliveries are easy to trace.

    Returns:
        Celery task id
    """
    result = import_product.apply_async(kwargs={"payload": payload}, task_id=f"import-{import_job_id}")
    logger.info(f"Queued import job {import_job_id}", extra={"task_id": result.id})
    return result.id


@app.task(bind=True, name=IMPORT_TASK_NAME)
def import_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Import one product into the destination shop.

    Args:
        payload: {"product": ScrapedProduct JSON, "shop": str,
                  "access_token": str, "import_job_id": str}

    Returns:
        Dictionary with the job id and remote product id

    Raises:
        Exception: Pipeline failures propagate so Celery records the task as failed;
            the job row has already been marked FAILED.
    """
    from ..models.product import ScrapedProduct

    import_job_id = payload["import_job_id"]
    shop = payload["shop"]
    product = ScrapedProduct.model_validate(payload["product"])

    def report_progress(percent: int) -> None:
        if self.request.called_directly:
            return
        self.update_state(
            state="PROGRESS", meta={"percent": percent, "import_job_id": import_job_id}
        )

    logger.info(f"Starting import job {import_job_id} for {shop}: {product.title!r}")

    product_id = get_pipeline().run(
        import_job_id,
        shop,
        payload["access_token"],
        product,
        progress=report_progress,
    )

    return {
        "status": "success",
        "import_job_id": import_job_id,
        "product_id": product_id,
    }
