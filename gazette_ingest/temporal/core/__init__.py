from .activity_registry import ActivityRegistry
from .workflow_registry import WorkflowRegistry, WorkflowType
from .constants import *

__all__ = [
    "ActivityRegistry",
    "WorkflowRegistry",
    "WorkflowType",
]
