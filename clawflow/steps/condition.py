from __future__ import annotations

from typing import Any, Mapping

from ..contracts import ConditionStep
from ..expressions import evaluate_expression
from .base import BaseStepExecutor, StepResult


class ConditionExecutor(BaseStepExecutor[ConditionStep]):
    """Evaluates an expression and names the branch to follow."""

    step_type = "condition"

    async def execute(
        self, step: ConditionStep, context: Mapping[str, Any]
    ) -> StepResult:
        config = step.config
        if not config.expression:
            return StepResult.fail("condition requires an expression")

        result = evaluate_expression(config.expression, context)
        return StepResult.ok(
            {"condition_result": result},
            next_step=config.on_true if result else config.on_false,
        )
