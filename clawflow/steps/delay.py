from __future__ import annotations

import asyncio
from typing import Any, Mapping

from ..contracts import DelayStep
from .base import BaseStepExecutor, StepResult


class DelayExecutor(BaseStepExecutor[DelayStep]):
    """Suspends the run for ``duration_ms`` without blocking the event loop."""

    step_type = "delay"

    async def execute(self, step: DelayStep, context: Mapping[str, Any]) -> StepResult:
        duration_ms = step.config.duration_ms
        await asyncio.sleep(duration_ms / 1000)
        return StepResult.ok({"delayed_ms": duration_ms})
