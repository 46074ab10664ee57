"""Workflow wrapping one gazette ingestion job with retries and a dead-letter step."""

from datetime import timedelta
from typing import Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError, FailureError

from gazette_ingest.temporal.core.constants import (
    BOOKKEEPING_TIMEOUT_SECONDS,
    PROCESS_GAZETTE_MAX_ATTEMPTS,
    PROCESS_GAZETTE_TIMEOUT_SECONDS,
)
from gazette_ingest.temporal.core.workflow_registry import WorkflowRegistry, WorkflowType


@WorkflowRegistry.register(category=WorkflowType.INGESTION)
@workflow.defn
class ProcessGazetteWorkflow:
    """Runs the ``process_gazette`` activity until it succeeds or its attempts run out."""

    def __init__(self):
        self._status = "initialized"
        self._final_status: Optional[str] = None
        self._error: Optional[str] = None

    @workflow.query
    def get_status(self) -> dict:
        """Query handler for real-time status updates."""
        return {
            "status": self._status,
            "final_status": self._final_status,
            "error": self._error,
        }

    @workflow.run
    async def run(self, payload: Dict) -> dict:
        job_id = payload["job_id"]
        document_id = payload["document_id"]
        self._status = "processing"

        try:
            outcome = await workflow.execute_activity(
                "process_gazette",
                args=[job_id, document_id, payload["pdf_path"], payload.get("user_id")],
                start_to_close_timeout=timedelta(seconds=PROCESS_GAZETTE_TIMEOUT_SECONDS),
                retry_policy=RetryPolicy(
                    maximum_attempts=PROCESS_GAZETTE_MAX_ATTEMPTS,
                    non_retryable_error_types=["DocumentNotFoundError"],
                ),
            )
        except ActivityError as e:
            self._status = "dead_lettered"
            # Message only, without the failure type prefix
            self._error = e.cause.message if isinstance(e.cause, FailureError) else str(e)
            workflow.logger.error(f"Gazette job {job_id} exhausted its retries: {self._error}")
            await workflow.execute_activity(
                "dead_letter_gazette_job",
                args=[job_id, self._error],
                start_to_close_timeout=timedelta(seconds=BOOKKEEPING_TIMEOUT_SECONDS),
            )
            raise ApplicationError(
                f"Gazette job {job_id} failed: {self._error}", non_retryable=True
            ) from e

        self._status = "completed"
        self._final_status = outcome.get("status")
        return {
            "status": self._status,
            "job_id": job_id,
            "document_id": document_id,
            "outcome": outcome,
        }
