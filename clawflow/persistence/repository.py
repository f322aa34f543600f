"""Store abstraction for workflow definitions and run state."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ..contracts import Workflow
from .models import WorkflowRun


class WorkflowStore(Protocol):
    """Protocol for workflow and run persistence backends."""

    async def get_workflow(self, workflow_id: str) -> Workflow | None:
        """Retrieve a workflow definition by id."""

    async def save_workflow(self, workflow: Workflow) -> None:
        """Insert or replace a workflow definition."""

    async def create_run(
        self, workflow_id: str, context: dict[str, Any] | None = None
    ) -> WorkflowRun:
        """Persist a new ``running`` run at step 0 and return it."""

    async def update_run(
        self,
        run_id: str,
        fields: dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> bool:
        """Apply a partial update to a run.

        When ``expected_status`` is given the update only happens if the stored
        status still equals it. Returns whether a row was updated.
        """

    async def get_run(self, run_id: str) -> WorkflowRun | None:
        """Retrieve a run by id."""

    async def list_runs(self, workflow_id: str) -> list[WorkflowRun]:
        """Return the runs of a workflow, newest first."""

    async def dispose(self) -> None:
        """Release connections held by the backend."""
