"""Exception types raised by clawflow."""

from __future__ import annotations


class ClawflowError(Exception):
    """Base class for all clawflow errors."""


class WorkflowNotFoundError(ClawflowError):
    """Raised when a workflow id does not resolve to a stored definition."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class RunNotFoundError(ClawflowError):
    """Raised when a run id does not resolve to a stored run."""

    def __init__(self, run_id: str) -> None:
        super().__init__(f"Run not found: {run_id}")
        self.run_id = run_id


class WorkflowDisabledError(ClawflowError):
    """Raised when a disabled workflow is triggered."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow is disabled: {workflow_id}")
        self.workflow_id = workflow_id


class InvalidWorkflowError(ClawflowError):
    """Raised when a workflow definition fails validation."""


class AgentDispatchError(ClawflowError):
    """Raised by agent dispatchers when a call fails or times out."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
