"""Command line interface for clawflow workflows, runs and agent matching."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Optional, TypeVar

import typer
import yaml

from clawflow import WorkflowExecutor, get_dispatcher, get_store, load_config
from clawflow.agents import AgentProfile, match_agents_to_task, suggest_capabilities
from clawflow.cli_utils.workflow import format_run, load_workflow_file
from clawflow.exceptions import ClawflowError
from clawflow.persistence import WorkflowStore

T = TypeVar("T")

app = typer.Typer(help="CLI for clawflow workflows")

# Command groups
workflow_app = typer.Typer(help="Commands for managing workflows")
run_app = typer.Typer(help="Commands for inspecting and cancelling runs")
agent_app = typer.Typer(help="Commands for matching agents to tasks")

app.add_typer(workflow_app, name="workflow")
app.add_typer(run_app, name="run")
app.add_typer(agent_app, name="agent")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level, e.g. INFO or DEBUG"),
) -> None:
    """clawflow CLI entry point."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _executor() -> WorkflowExecutor:
    config = load_config()
    return WorkflowExecutor(
        get_store(config=config), dispatcher=get_dispatcher(config), config=config
    )


def _run_async(store: WorkflowStore, coro: Awaitable[T]) -> T:
    """Run ``coro`` on a fresh event loop and release the store afterwards."""

    async def runner() -> T:
        try:
            return await coro
        finally:
            await store.dispose()

    return asyncio.run(runner())


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@workflow_app.command("register")
def workflow_register(path: Path) -> None:
    """
    Validate a workflow file (YAML or JSON) and save it to the configured store.

    Example:
        clawflow workflow register ./workflows/onboarding.yaml
    """
    if not path.exists():
        _fail("Specified path does not exist")
    try:
        workflow = load_workflow_file(path)
    except ClawflowError as exc:
        _fail(f"Invalid workflow: {exc}")
        return

    store = get_store()
    _run_async(store, store.save_workflow(workflow))
    typer.echo(f"Registered workflow {workflow.id} ({len(workflow.steps)} steps)")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """Show a workflow definition and its steps."""
    store = get_store()
    workflow = _run_async(store, store.get_workflow(workflow_id))
    if workflow is None:
        _fail("Workflow not found")
        return
    state = "enabled" if workflow.enabled else "disabled"
    typer.echo(f"Workflow {workflow.id}: {workflow.name} [{workflow.trigger_type}, {state}]")
    for index, step in enumerate(workflow.steps):
        typer.echo(f"  {index}. {step.id} ({step.type}) {step.name}")


@workflow_app.command("run")
def workflow_run(
    workflow_id: str,
    context: Optional[str] = typer.Option(
        None, help="JSON object used as the initial run context"
    ),
    triggered_by: Optional[str] = None,
) -> None:
    """
    Run a workflow to completion and print the resulting run.

    Example:
        clawflow workflow run onboarding --context '{"name": "Ada"}'
    """
    initial_context = {}
    if context:
        try:
            initial_context = json.loads(context)
        except json.JSONDecodeError as exc:
            _fail(f"Invalid --context JSON: {exc}")
        if not isinstance(initial_context, dict):
            _fail("--context must be a JSON object")

    executor = _executor()
    try:
        run = _run_async(
            executor.store,
            executor.trigger_workflow(
                workflow_id, initial_context, triggered_by=triggered_by
            ),
        )
    except ClawflowError as exc:
        _fail(str(exc))
        return

    for line in format_run(run):
        typer.echo(line)
    if run.status == "failed":
        raise typer.Exit(code=1)


@workflow_app.command("runs")
def workflow_runs(workflow_id: str) -> None:
    """List runs of a workflow, newest first."""
    executor = _executor()
    runs = _run_async(executor.store, executor.list_runs(workflow_id))
    if not runs:
        typer.echo("No runs found")
        return
    for run in runs:
        typer.echo(f"{run.id}\t{run.status}\t{run.started_at}")


@workflow_app.command("stats")
def workflow_stats(workflow_id: str) -> None:
    """Show run counts by status for a workflow."""
    executor = _executor()
    stats = _run_async(executor.store, executor.run_stats(workflow_id))
    for key, value in stats.model_dump().items():
        typer.echo(f"{key}: {value}")


@run_app.command("show")
def run_show(run_id: str) -> None:
    """Show status, position and context of a run."""
    executor = _executor()
    try:
        run = _run_async(executor.store, executor.get_run(run_id))
    except ClawflowError as exc:
        _fail(str(exc))
        return
    for line in format_run(run):
        typer.echo(line)


@run_app.command("cancel")
def run_cancel(run_id: str) -> None:
    """Mark a running run as cancelled."""
    executor = _executor()
    try:
        cancelled = _run_async(executor.store, executor.cancel_run(run_id))
    except ClawflowError as exc:
        _fail(str(exc))
        return
    if cancelled:
        typer.echo(f"Run {run_id} cancelled")
    else:
        typer.echo(f"Run {run_id} already finished; nothing to cancel")


@agent_app.command("match")
def agent_match(
    description: str,
    agents_file: Path = typer.Option(..., "--agents", help="YAML/JSON list of agents"),
    online_only: bool = False,
    limit: Optional[int] = None,
) -> None:
    """
    Rank agents from a file against a task description.

    Example:
        clawflow agent match "write a blog post" --agents agents.yaml
    """
    if not agents_file.exists():
        _fail("Specified agents file does not exist")
    raw = yaml.safe_load(agents_file.read_text()) or []
    agents = [AgentProfile.model_validate(item) for item in raw]

    matcher_config = load_config().matcher
    results = match_agents_to_task(
        description,
        agents,
        online_only=online_only,
        limit=limit or matcher_config.limit,
        availability_weight=matcher_config.availability_weight,
        experience_weight=matcher_config.experience_weight,
    )
    if not results:
        typer.echo("No matching agents")
        return
    for result in results:
        typer.echo(f"{result.agent.id}\t{result.score:.2f}\t{result.reason}")


@agent_app.command("suggest")
def agent_suggest(description: str) -> None:
    """Suggest capability tags for a task description."""
    suggestions = suggest_capabilities(description)
    typer.echo(", ".join(suggestions) if suggestions else "No suggestions")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
