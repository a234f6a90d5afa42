"""
Services Package
Import orchestration, the per-product pipeline and the copy rewriter.
"""

from .imports import ImportResult, ImportService, JobSummary, summarize_jobs
from .pipeline import ImportPipeline
from .rewriter import CopyRewriter
from .settle import Settled, attempt_all

__all__ = [
    "ImportResult",
    "ImportService",
    "JobSummary",
    "summarize_jobs",
    "ImportPipeline",
    "CopyRewriter",
    "Settled",
    "attempt_all",
]
