import pytest

from clawflow import ClawflowConfig, Workflow, WorkflowExecutor
from clawflow.persistence import InMemoryWorkflowStore


def _make_workflow(steps, workflow_id="wf", **kwargs) -> Workflow:
    data = {"id": workflow_id, "user_id": "user-1", "name": "Test workflow", "steps": steps}
    data.update(kwargs)
    return Workflow.model_validate(data)


@pytest.fixture
def make_workflow():
    return _make_workflow


@pytest.fixture
def config():
    return ClawflowConfig()


@pytest.fixture
def store():
    return InMemoryWorkflowStore()


@pytest.fixture
def executor(store, config):
    return WorkflowExecutor(store, config=config)
