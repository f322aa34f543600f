"""Tests for workflow definition validation."""

import pytest
from pydantic import ValidationError

from clawflow.contracts import (
    ConditionStep,
    DelayStep,
    TransformStep,
    WebhookStep,
    Workflow,
)


def _workflow(steps, **kwargs):
    data = {"id": "wf", "user_id": "u1", "name": "Test", "steps": steps}
    data.update(kwargs)
    return Workflow.model_validate(data)


def test_steps_are_parsed_into_typed_variants():
    wf = _workflow(
        [
            {"id": "t", "type": "transform", "config": {"mappings": {"x": "a.b"}}},
            {"id": "d", "type": "delay"},
            {"id": "w", "type": "webhook", "config": {"url": "https://example.com"}},
        ]
    )
    assert isinstance(wf.steps[0], TransformStep)
    assert wf.steps[0].config.mappings == {"x": "a.b"}
    assert isinstance(wf.steps[1], DelayStep)
    assert wf.steps[1].config.duration_ms == 1000
    assert isinstance(wf.steps[2], WebhookStep)
    assert wf.steps[2].config.method == "POST"


def test_unknown_step_type_is_rejected():
    with pytest.raises(ValidationError):
        _workflow([{"id": "x", "type": "launch_rockets"}])


def test_unknown_trigger_type_is_rejected():
    with pytest.raises(ValidationError):
        _workflow([], trigger_type="cron")


def test_duplicate_step_ids_are_rejected():
    with pytest.raises(ValidationError, match="Duplicate step id"):
        _workflow(
            [
                {"id": "s", "type": "delay"},
                {"id": "s", "type": "transform"},
            ]
        )


def test_missing_required_config_is_accepted_at_load():
    wf = _workflow([{"id": "a", "type": "agent_call", "config": {}}])
    assert wf.steps[0].config.message is None


def test_condition_step_level_branches_fold_into_config():
    wf = _workflow(
        [
            {
                "id": "check",
                "type": "condition",
                "config": {"expression": "ok"},
                "on_success": "yes",
                "on_failure": "no",
            }
        ]
    )
    step = wf.steps[0]
    assert isinstance(step, ConditionStep)
    assert step.config.on_true == "yes"
    assert step.config.on_false == "no"


def test_condition_config_branches_take_precedence():
    wf = _workflow(
        [
            {
                "id": "check",
                "type": "condition",
                "config": {"expression": "ok", "on_true": "config-target"},
                "on_success": "legacy-target",
            }
        ]
    )
    assert wf.steps[0].config.on_true == "config-target"


def test_step_level_branches_rejected_on_other_step_types():
    with pytest.raises(ValidationError, match="only supported on condition steps"):
        _workflow([{"id": "t", "type": "transform", "on_success": "next"}])


def test_step_index_lookup():
    wf = _workflow([{"id": "a", "type": "delay"}, {"id": "b", "type": "delay"}])
    assert wf.step_index("b") == 1
    assert wf.step_index("missing") is None


def test_delay_accepts_fractional_duration():
    wf = _workflow([{"id": "d", "type": "delay", "config": {"duration_ms": 50.5}}])
    assert wf.steps[0].config.duration_ms == 50.5

    with pytest.raises(ValidationError):
        _workflow([{"id": "d", "type": "delay", "config": {"duration_ms": -1}}])
