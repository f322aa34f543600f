"""Workflow run driver.

Runs a workflow's steps one at a time against an accumulating context,
checkpointing progress to the store before each step so external readers can
follow a run in flight.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import ClawflowConfig, load_config
from .constants import LAST_OUTPUT_KEY, TRIGGER_KEY
from .contracts import Step, Workflow
from .dispatch import BaseAgentDispatcher
from .exceptions import RunNotFoundError, WorkflowDisabledError, WorkflowNotFoundError
from .persistence import RunStats, WorkflowRun, WorkflowStore
from .persistence.models import utcnow
from .steps import BaseStepExecutor, StepResult, build_executors

logger = logging.getLogger(__name__)


class WorkflowExecutor:
    """Executes workflow runs and manages their lifecycle.

    Args:
        store: Durable store for workflow definitions and runs.
        dispatcher: Channel used by ``agent_call`` steps.
        http_client: Optional shared client for ``webhook`` steps.
        config: Loaded configuration; read from disk when omitted.
        executors: Override of the step executor registry, keyed by step type.
    """

    def __init__(
        self,
        store: WorkflowStore,
        dispatcher: Optional[BaseAgentDispatcher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[ClawflowConfig] = None,
        executors: Optional[Dict[str, BaseStepExecutor]] = None,
    ) -> None:
        self._store = store
        self._config = config or load_config()
        self._executors = executors or build_executors(
            dispatcher,
            http_client,
            webhook_timeout_s=self._config.executor.webhook_timeout_s,
        )

    @property
    def store(self) -> WorkflowStore:
        return self._store

    # ------------------------------------------------------------------
    async def execute_step(self, step: Step, context: Dict[str, Any]) -> StepResult:
        """Run ``step`` through its executor, converting exceptions to failures."""
        executor = self._executors.get(step.type)
        if executor is None:
            return StepResult.fail(f"Unknown step type: {step.type}")
        try:
            return await executor.execute(step, context)
        except Exception as e:
            logger.warning(f"Step {step.id} ({step.type}) raised: {e!r}")
            return StepResult.fail(str(e) or type(e).__name__)

    async def execute_workflow(
        self, workflow_id: str, initial_context: Optional[Dict[str, Any]] = None
    ) -> WorkflowRun:
        """Create a run for ``workflow_id`` and drive it to a terminal state.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist. No run is
                created in that case.
        """
        workflow = await self._load_workflow(workflow_id)
        return await self._run(workflow, dict(initial_context or {}))

    async def trigger_workflow(
        self,
        workflow_id: str,
        context: Optional[Dict[str, Any]] = None,
        trigger_type: str = "manual",
        triggered_by: Optional[str] = None,
    ) -> WorkflowRun:
        """Run an enabled workflow with trigger metadata added to its context."""
        workflow = await self._load_workflow(workflow_id)
        if not workflow.enabled:
            raise WorkflowDisabledError(workflow_id)

        initial_context = dict(context or {})
        initial_context[TRIGGER_KEY] = {
            "type": trigger_type,
            "triggered_by": triggered_by,
            "triggered_at": utcnow().isoformat(),
        }
        return await self._run(workflow, initial_context)

    async def cancel_run(self, run_id: str) -> bool:
        """Mark a running run as cancelled.

        Does not interrupt a step already in flight; the driver stops at its
        next checkpoint. Returns ``False`` if the run had already finished.
        """
        await self.get_run(run_id)
        cancelled = await self._store.update_run(
            run_id,
            {"status": "cancelled", "completed_at": utcnow()},
            expected_status="running",
        )
        if cancelled:
            logger.info(f"Run {run_id} cancelled")
        return cancelled

    async def get_run(self, run_id: str) -> WorkflowRun:
        run = await self._store.get_run(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        return run

    async def list_runs(self, workflow_id: str) -> list[WorkflowRun]:
        return await self._store.list_runs(workflow_id)

    async def run_stats(self, workflow_id: str) -> RunStats:
        """Count the runs of ``workflow_id`` by status."""
        stats = RunStats()
        for run in await self._store.list_runs(workflow_id):
            stats.total += 1
            setattr(stats, run.status, getattr(stats, run.status) + 1)
        return stats

    # ------------------------------------------------------------------
    async def _load_workflow(self, workflow_id: str) -> Workflow:
        workflow = await self._store.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    async def _run(self, workflow: Workflow, context: Dict[str, Any]) -> WorkflowRun:
        run = await self._store.create_run(workflow.id, context)
        logger.info(f"Started run {run.id} for workflow {workflow.id}")

        steps = workflow.steps
        positions = {step.id: index for index, step in enumerate(steps)}
        max_executions = self._config.executor.max_step_executions
        index = 0
        executions = 0
        error: Optional[str] = None

        try:
            while index < len(steps):
                if executions >= max_executions:
                    error = f"Exceeded maximum of {max_executions} step executions"
                    break

                step = steps[index]
                checkpointed = await self._store.update_run(
                    run.id,
                    {"current_step": index, "context": context},
                    expected_status="running",
                )
                if not checkpointed:
                    logger.warning(
                        f"Run {run.id} is no longer running; stopping before step {step.id}"
                    )
                    return await self.get_run(run.id)

                result = await self.execute_step(step, context)
                executions += 1

                if not result.success:
                    error = result.error or "Step failed"
                    logger.warning(f"Run {run.id} failed at step {step.id}: {error}")
                    break

                if result.output is not None:
                    context = {
                        **context,
                        step.id: result.output,
                        LAST_OUTPUT_KEY: result.output,
                    }
                logger.debug(f"Run {run.id} completed step {step.id}")

                index = self._next_index(index, result.next_step, positions, run.id)
        except Exception as e:
            logger.exception(f"Run {run.id} aborted by unexpected error")
            error = str(e) or "Execution error"

        status = "failed" if error else "completed"
        final_fields = {
            "status": status,
            "current_step": index,
            "context": context,
            "error": error,
            "completed_at": utcnow(),
        }
        try:
            updated = await self._store.update_run(
                run.id, final_fields, expected_status="running"
            )
        except Exception:
            logger.exception(f"Failed to persist final state of run {run.id}")
            return run.model_copy(update=final_fields)

        if not updated:
            logger.warning(f"Run {run.id} was cancelled before it could finish")
        else:
            logger.info(f"Run {run.id} {status}")
        stored = await self._store.get_run(run.id)
        return stored or run.model_copy(update=final_fields)

    @staticmethod
    def _next_index(
        index: int, next_step: Optional[str], positions: Dict[str, int], run_id: str
    ) -> int:
        if not next_step:
            return index + 1
        target = positions.get(next_step)
        if target is None:
            logger.warning(
                f"Run {run_id}: branch target {next_step!r} not found; continuing linearly"
            )
            return index + 1
        return target
