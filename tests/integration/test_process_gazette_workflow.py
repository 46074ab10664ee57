"""Tests for ProcessGazetteWorkflow with the Temporal workflow API patched out."""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, patch

from temporalio.exceptions import ActivityError, ApplicationError, RetryState

from gazette_ingest.temporal.workflows.process_gazette import ProcessGazetteWorkflow

WORKFLOW_MODULE = "gazette_ingest.temporal.workflows.process_gazette.workflow"


@pytest.fixture
def payload():
    return {"job_id": 7, "document_id": 1, "pdf_path": "/uploads/gazette-45.pdf", "user_id": 3}


def activity_error(cause_message: str) -> ActivityError:
    error = ActivityError(
        "Activity task failed",
        scheduled_event_id=5,
        started_event_id=6,
        identity="worker-1",
        activity_type="process_gazette",
        activity_id="1",
        retry_state=RetryState.MAXIMUM_ATTEMPTS_REACHED,
    )
    error.__cause__ = ApplicationError(cause_message, type="OuterTimeoutError")
    return error


@pytest.mark.asyncio
async def test_workflow_runs_process_gazette_with_retry_policy(payload):
    workflow_instance = ProcessGazetteWorkflow()
    outcome = {"document_id": 1, "status": "success", "sections_created": 3}

    with patch(WORKFLOW_MODULE) as mock_workflow:
        mock_workflow.execute_activity = AsyncMock(return_value=outcome)

        result = await workflow_instance.run(payload)

        mock_workflow.execute_activity.assert_awaited_once()
        args, kwargs = mock_workflow.execute_activity.call_args
        assert args[0] == "process_gazette"
        assert kwargs["args"] == [7, 1, "/uploads/gazette-45.pdf", 3]
        assert kwargs["start_to_close_timeout"] == timedelta(seconds=1860)
        assert kwargs["retry_policy"].maximum_attempts == 2
        assert kwargs["retry_policy"].non_retryable_error_types == ["DocumentNotFoundError"]

    assert result["status"] == "completed"
    assert result["outcome"] == outcome
    assert workflow_instance.get_status() == {"status": "completed", "final_status": "success", "error": None}


@pytest.mark.asyncio
async def test_workflow_dead_letters_after_retries_are_exhausted(payload):
    workflow_instance = ProcessGazetteWorkflow()
    calls = []

    async def mock_execute_activity(activity_name, *args, **kwargs):
        calls.append((activity_name, kwargs.get("args")))
        if activity_name == "process_gazette":
            raise activity_error("Error: Document processing timed out after 30 minutes")
        return None

    with patch(WORKFLOW_MODULE) as mock_workflow:
        mock_workflow.execute_activity = mock_execute_activity

        with pytest.raises(ApplicationError, match="Gazette job 7 failed"):
            await workflow_instance.run(payload)

    assert calls == [
        ("process_gazette", [7, 1, "/uploads/gazette-45.pdf", 3]),
        ("dead_letter_gazette_job", [7, "Error: Document processing timed out after 30 minutes"]),
    ]
    assert workflow_instance.get_status()["status"] == "dead_lettered"


@pytest.mark.asyncio
async def test_dead_letter_error_falls_back_to_activity_error_text(payload):
    workflow_instance = ProcessGazetteWorkflow()
    calls = []
    error = activity_error("unused")
    error.__cause__ = None

    async def mock_execute_activity(activity_name, *args, **kwargs):
        calls.append((activity_name, kwargs.get("args")))
        if activity_name == "process_gazette":
            raise error
        return None

    with patch(WORKFLOW_MODULE) as mock_workflow:
        mock_workflow.execute_activity = mock_execute_activity

        with pytest.raises(ApplicationError):
            await workflow_instance.run(payload)

    assert calls[-1] == ("dead_letter_gazette_job", [7, str(error)])
    assert workflow_instance.get_status()["error"] == str(error)
