"""Workflow definition contracts.

A workflow is an ordered list of typed steps. Each step type carries its own
config model; ``Step`` is a discriminated union keyed on ``type`` so a
definition is fully validated when it is loaded rather than when it runs.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import DEFAULT_AGENT_TIMEOUT_MS, DEFAULT_DELAY_MS, DEFAULT_WEBHOOK_METHOD

logger = logging.getLogger(__name__)

TriggerType = Literal["manual", "schedule", "webhook", "task_complete", "message"]
StepType = Literal[
    "agent_call", "condition", "transform", "delay", "webhook", "set_context"
]

TRIGGER_TYPES: tuple[str, ...] = TriggerType.__args__
STEP_TYPES: tuple[str, ...] = StepType.__args__


class AgentCallConfig(BaseModel):
    agent_id: Optional[str] = None
    session_key: Optional[str] = None
    message: Optional[str] = None
    timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS


class ConditionConfig(BaseModel):
    expression: Optional[str] = None
    on_true: Optional[str] = None
    on_false: Optional[str] = None


class TransformConfig(BaseModel):
    mappings: Optional[Dict[str, str]] = None


class DelayConfig(BaseModel):
    duration_ms: float = Field(default=DEFAULT_DELAY_MS, ge=0)


class WebhookConfig(BaseModel):
    url: Optional[str] = None
    method: str = DEFAULT_WEBHOOK_METHOD
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None


class SetContextConfig(BaseModel):
    values: Optional[Dict[str, Any]] = None


class BaseStep(BaseModel):
    """Fields shared by every step type."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _check_branch_fields(cls, data: Any) -> Any:
        if isinstance(data, dict) and (
            data.get("on_success") is not None or data.get("on_failure") is not None
        ):
            raise ValueError(
                "on_success/on_failure are only supported on condition steps; "
                "use config.on_true/config.on_false"
            )
        return data


class AgentCallStep(BaseStep):
    type: Literal["agent_call"]
    config: AgentCallConfig = Field(default_factory=AgentCallConfig)


class ConditionStep(BaseStep):
    type: Literal["condition"]
    config: ConditionConfig = Field(default_factory=ConditionConfig)

    @model_validator(mode="before")
    @classmethod
    def _check_branch_fields(cls, data: Any) -> Any:
        """Fold legacy ``on_success``/``on_failure`` into the condition config."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        on_success = data.pop("on_success", None)
        on_failure = data.pop("on_failure", None)
        if on_success is None and on_failure is None:
            return data

        config = data.get("config")
        config = dict(config) if isinstance(config, dict) else {}
        if on_success is not None and config.get("on_true") is None:
            config["on_true"] = on_success
        if on_failure is not None and config.get("on_false") is None:
            config["on_false"] = on_failure
        data["config"] = config
        logger.debug(f"Folded step-level branch targets into condition {data.get('id')}")
        return data


class TransformStep(BaseStep):
    type: Literal["transform"]
    config: TransformConfig = Field(default_factory=TransformConfig)


class DelayStep(BaseStep):
    type: Literal["delay"]
    config: DelayConfig = Field(default_factory=DelayConfig)


class WebhookStep(BaseStep):
    type: Literal["webhook"]
    config: WebhookConfig = Field(default_factory=WebhookConfig)


class SetContextStep(BaseStep):
    type: Literal["set_context"]
    config: SetContextConfig = Field(default_factory=SetContextConfig)


Step = Annotated[
    Union[
        AgentCallStep,
        ConditionStep,
        TransformStep,
        DelayStep,
        WebhookStep,
        SetContextStep,
    ],
    Field(discriminator="type"),
]


class Workflow(BaseModel):
    """User-authored workflow definition. Read-only to the executor."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    trigger_type: TriggerType = "manual"
    trigger_config: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True
    steps: List[Step] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_step_ids(self) -> "Workflow":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id: {step.id}")
            seen.add(step.id)
        return self

    def step_index(self, step_id: str) -> Optional[int]:
        """Return the position of ``step_id`` in ``steps`` or ``None``."""
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        return None
