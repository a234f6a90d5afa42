"""
Background Tasks
Celery app and the product import worker.
"""
