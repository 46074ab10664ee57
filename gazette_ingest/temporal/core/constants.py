"""Shared constants for Temporal workflows."""

from gazette_ingest.core.config import settings

GAZETTE_TASK_QUEUE = settings.temporal_task_queue

# The activity may use the whole job budget plus time to persist the timeout outcome
ACTIVITY_GRACE_SECONDS = 60
PROCESS_GAZETTE_TIMEOUT_SECONDS = settings.pipeline.job_timeout + ACTIVITY_GRACE_SECONDS
PROCESS_GAZETTE_MAX_ATTEMPTS = settings.pipeline.job_max_attempts
BOOKKEEPING_TIMEOUT_SECONDS = 60

WORKFLOW_ID_PREFIX = "gazette-job"

__all__ = [
    "GAZETTE_TASK_QUEUE",
    "ACTIVITY_GRACE_SECONDS",
    "PROCESS_GAZETTE_TIMEOUT_SECONDS",
    "PROCESS_GAZETTE_MAX_ATTEMPTS",
    "BOOKKEEPING_TIMEOUT_SECONDS",
    "WORKFLOW_ID_PREFIX",
]
