"""Temporal worker for gazette processing.

Discovers every registered workflow and activity and polls the task queue
each workflow is registered for. Run with ``python -m gazette_ingest.temporal.worker``.
"""

import asyncio
from typing import Dict, List, Type

from temporalio.client import Client
from temporalio.worker import Worker
from temporalio.worker.workflow_sandbox import SandboxedWorkflowRunner, SandboxRestrictions

from gazette_ingest.core.config import settings
from gazette_ingest.temporal.core.activity_registry import ActivityRegistry
from gazette_ingest.temporal.core.constants import GAZETTE_TASK_QUEUE
from gazette_ingest.temporal.core.discovery import discover_all
from gazette_ingest.temporal.core.workflow_registry import WorkflowRegistry
from gazette_ingest.utils.logging import get_logger

logger = get_logger(__name__)

CONNECT_MAX_RETRIES = 5
CONNECT_RETRY_DELAY_SECONDS = 5


async def connect_with_retries() -> Client:
    """Connect to Temporal, retrying while the server comes up."""
    target = f"{settings.temporal_host}:{settings.temporal_port}"
    for attempt in range(CONNECT_MAX_RETRIES):
        try:
            logger.info(
                f"Connecting to Temporal server at {target} (Attempt {attempt + 1}/{CONNECT_MAX_RETRIES})"
            )
            return await Client.connect(target_host=target, namespace=settings.temporal_namespace)
        except Exception as e:
            if attempt == CONNECT_MAX_RETRIES - 1:
                logger.error(f"Failed to connect to Temporal server after {CONNECT_MAX_RETRIES} attempts: {e}")
                raise
            logger.warning(
                f"Connection attempt {attempt + 1} failed: {e}. Retrying in {CONNECT_RETRY_DELAY_SECONDS}s..."
            )
            await asyncio.sleep(CONNECT_RETRY_DELAY_SECONDS)


def build_workers(client: Client) -> List[Worker]:
    """Create one worker per task queue used by the registered workflows."""
    all_workflows = WorkflowRegistry.get_all_workflows()
    all_activities = ActivityRegistry.get_all_activities()
    logger.info(f"Registered {len(all_workflows)} workflows and {len(all_activities)} activities")

    queues: Dict[str, List[Type]] = {}
    for wf_name, metadata in all_workflows.items():
        queue = metadata.task_queue or GAZETTE_TASK_QUEUE
        queues.setdefault(queue, []).append(metadata.workflow_class)
        logger.debug(f"Workflow '{wf_name}' assigned to queue '{queue}'")

    logger.info(f"Queues: {list(queues)}")
    return [
        Worker(
            client,
            task_queue=queue_name,
            workflows=workflows,
            activities=ActivityRegistry.activity_functions(),
            # Each gazette job holds up to two external processes
            max_concurrent_activities=4,
            max_concurrent_workflow_tasks=20,
            workflow_runner=SandboxedWorkflowRunner(
                restrictions=SandboxRestrictions.default.with_passthrough_all_modules()
            ),
        )
        for queue_name, workflows in queues.items()
    ]


async def main():
    """Start the Temporal worker(s)."""
    discover_all()
    client = await connect_with_retries()
    workers = build_workers(client)

    logger.info("=" * 60)
    logger.info("Gazette workers initialized")
    logger.info(f"Connected to: {settings.temporal_host}:{settings.temporal_port}")
    logger.info("=" * 60)

    await asyncio.gather(*(worker.run() for worker in workers))


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Workers stopped by user")
    except Exception as e:
        logger.error(f"Worker failed: {e}", exc_info=True)
        raise
