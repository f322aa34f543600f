from __future__ import annotations

from typing import Any, Mapping

from ..contracts import SetContextStep
from ..expressions import interpolate_string
from .base import BaseStepExecutor, StepResult


class SetContextExecutor(BaseStepExecutor[SetContextStep]):
    """Produces literal or templated values as the step output.

    Templates are resolved against the context as it was before this step,
    never against values produced earlier in the same step.
    """

    step_type = "set_context"

    async def execute(
        self, step: SetContextStep, context: Mapping[str, Any]
    ) -> StepResult:
        values = step.config.values or {}
        output = {
            key: interpolate_string(value, context) if isinstance(value, str) else value
            for key, value in values.items()
        }
        return StepResult.ok(output)
