from __future__ import annotations

import logging
from typing import Any, Mapping

from ..contracts import AgentCallStep
from ..dispatch import BaseAgentDispatcher
from ..exceptions import AgentDispatchError
from ..expressions import interpolate_string
from .base import BaseStepExecutor, StepResult

logger = logging.getLogger(__name__)


class AgentCallExecutor(BaseStepExecutor[AgentCallStep]):
    """Sends an interpolated message to an agent through the dispatcher."""

    step_type = "agent_call"

    def __init__(self, dispatcher: BaseAgentDispatcher) -> None:
        self._dispatcher = dispatcher

    async def execute(
        self, step: AgentCallStep, context: Mapping[str, Any]
    ) -> StepResult:
        config = step.config
        if not config.message:
            return StepResult.fail("agent_call requires a message")

        message = interpolate_string(config.message, context)
        logger.debug(f"Agent call from step {step.id}: {message}")
        try:
            response = await self._dispatcher.send(
                config.agent_id, config.session_key, message, config.timeout_ms
            )
        except AgentDispatchError as exc:
            return StepResult.fail(str(exc))

        return StepResult.ok(
            {
                "response": response,
                "agent_id": config.agent_id,
                "session_key": config.session_key,
            }
        )
