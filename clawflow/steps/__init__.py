"""Step executors, one per step type."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from ..dispatch import BaseAgentDispatcher, SimulatedAgentDispatcher
from .agent_call import AgentCallExecutor
from .base import BaseStepExecutor, StepResult
from .condition import ConditionExecutor
from .delay import DelayExecutor
from .set_context import SetContextExecutor
from .transform import TransformExecutor
from .webhook import WebhookExecutor


def build_executors(
    dispatcher: Optional[BaseAgentDispatcher] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    webhook_timeout_s: float = 30.0,
) -> Dict[str, BaseStepExecutor]:
    """Return the executor registry keyed by step type."""

    executors: list[BaseStepExecutor] = [
        AgentCallExecutor(dispatcher or SimulatedAgentDispatcher()),
        ConditionExecutor(),
        TransformExecutor(),
        DelayExecutor(),
        WebhookExecutor(http_client, timeout_s=webhook_timeout_s),
        SetContextExecutor(),
    ]
    return {executor.step_type: executor for executor in executors}


__all__ = [
    "AgentCallExecutor",
    "BaseStepExecutor",
    "ConditionExecutor",
    "DelayExecutor",
    "SetContextExecutor",
    "StepResult",
    "TransformExecutor",
    "WebhookExecutor",
    "build_executors",
]
