from __future__ import annotations

from typing import Any, Mapping

from ..contracts import TransformStep
from ..expressions import get_nested_value
from .base import BaseStepExecutor, StepResult


class TransformExecutor(BaseStepExecutor[TransformStep]):
    """Copies context values into the step output under new keys."""

    step_type = "transform"

    async def execute(
        self, step: TransformStep, context: Mapping[str, Any]
    ) -> StepResult:
        mappings = step.config.mappings or {}
        output = {key: get_nested_value(context, path) for key, path in mappings.items()}
        return StepResult.ok(output)
