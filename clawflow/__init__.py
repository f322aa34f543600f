"""clawflow: workflow execution engine and agent/task matching."""

from .config import ClawflowConfig, load_config
from .contracts import Step, Workflow
from .dispatch import BaseAgentDispatcher, get_dispatcher
from .executor import WorkflowExecutor
from .persistence import WorkflowRun, WorkflowStore, get_store
from .steps import StepResult

__version__ = "0.1.0"
__all__ = [
    "BaseAgentDispatcher",
    "ClawflowConfig",
    "Step",
    "StepResult",
    "Workflow",
    "WorkflowExecutor",
    "WorkflowRun",
    "WorkflowStore",
    "get_dispatcher",
    "get_store",
    "load_config",
]
