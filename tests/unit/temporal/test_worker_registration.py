import pytest
from unittest.mock import MagicMock, patch

from gazette_ingest.temporal.core import ActivityRegistry, WorkflowRegistry, WorkflowType
from gazette_ingest.temporal.core.discovery import discover_all
from gazette_ingest.temporal.worker import build_workers


@pytest.fixture(scope="module", autouse=True)
def discovered():
    discover_all()


def test_gazette_activities_are_registered():
    activities = ActivityRegistry.get_all_activities()

    assert {"process_gazette", "dead_letter_gazette_job"} <= set(activities)
    assert activities["process_gazette"].key == "gazette:process_gazette"


def test_process_gazette_workflow_is_registered():
    metadata = WorkflowRegistry.get_all_workflows()["ProcessGazetteWorkflow"]

    assert metadata.category is WorkflowType.INGESTION
    assert metadata.task_queue == "gazettes-queue"


def test_activity_name_cannot_be_taken_twice():
    async def process_gazette():
        return None

    with pytest.raises(ValueError, match="already registered"):
        ActivityRegistry.register("other")(process_gazette)

    assert ActivityRegistry.get_all_activities()["process_gazette"].activity_func is not process_gazette


def test_build_workers_polls_the_gazette_queue():
    client = MagicMock()

    with patch("gazette_ingest.temporal.worker.Worker") as mock_worker:
        workers = build_workers(client)

    assert len(workers) == 1
    kwargs = mock_worker.call_args.kwargs
    assert kwargs["task_queue"] == "gazettes-queue"
    assert kwargs["max_concurrent_activities"] == 4
    assert [wf.__name__ for wf in kwargs["workflows"]] == ["ProcessGazetteWorkflow"]
    assert {fn.__name__ for fn in kwargs["activities"]} >= {"process_gazette", "dead_letter_gazette_job"}
