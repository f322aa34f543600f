"""Utility functions to load workflow definitions and format runs for the CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from clawflow.contracts import Workflow
from clawflow.exceptions import InvalidWorkflowError
from clawflow.persistence import WorkflowRun


def parse_workflow(data: Any) -> Workflow:
    """Validate a raw mapping as a workflow definition."""
    try:
        return Workflow.model_validate(data)
    except ValidationError as exc:
        raise InvalidWorkflowError(str(exc)) from exc


def load_workflow_file(path: Path) -> Workflow:
    """Load a workflow definition from a YAML or JSON file."""
    text = path.read_text()
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidWorkflowError(f"{path} could not be parsed: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidWorkflowError(f"{path} does not contain a workflow mapping")
    return parse_workflow(data)


def format_run(run: WorkflowRun) -> list[str]:
    lines = [f"Run {run.id}: {run.status} (step {run.current_step})"]
    if run.error:
        lines.append(f"Error: {run.error}")
    lines.append(f"Started: {run.started_at}")
    if run.completed_at:
        lines.append(f"Completed: {run.completed_at}")
    lines.append(f"Context: {json.dumps(run.context, default=str)}")
    return lines
