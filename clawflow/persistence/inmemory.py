"""In-memory implementation of the workflow store."""

from __future__ import annotations

import asyncio
import copy
import uuid
from typing import Any, Dict, Optional

from ..contracts import Workflow
from .models import WorkflowRun
from .repository import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Store workflows and runs in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Runs are copied on the way in and out
    so callers never hold a reference to the stored row.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, Workflow] = {}
        self._runs: Dict[str, WorkflowRun] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    async def get_workflow(self, workflow_id: str) -> Workflow | None:
        return self._workflows.get(workflow_id)

    async def save_workflow(self, workflow: Workflow) -> None:
        self._workflows[workflow.id] = workflow

    async def create_run(
        self, workflow_id: str, context: dict[str, Any] | None = None
    ) -> WorkflowRun:
        run = WorkflowRun(
            id=str(uuid.uuid4()),
            workflow_id=workflow_id,
            status="running",
            current_step=0,
            context=dict(context or {}),
        )
        async with self._lock:
            self._runs[run.id] = run
        return run.model_copy(deep=True)

    async def update_run(
        self,
        run_id: str,
        fields: dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> bool:
        async with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                return False
            if expected_status is not None and run.status != expected_status:
                return False
            self._runs[run_id] = run.model_copy(update=copy.deepcopy(fields))
            return True

    async def get_run(self, run_id: str) -> WorkflowRun | None:
        run = self._runs.get(run_id)
        return run.model_copy(deep=True) if run else None

    async def list_runs(self, workflow_id: str) -> list[WorkflowRun]:
        runs = [r for r in self._runs.values() if r.workflow_id == workflow_id]
        runs.sort(key=lambda r: r.started_at, reverse=True)
        return [r.model_copy(deep=True) for r in runs]

    async def dispose(self) -> None:
        pass
