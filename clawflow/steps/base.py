"""Base step executor interface."""

from __future__ import annotations

import abc
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel

StepT = TypeVar("StepT")


class StepResult(BaseModel):
    """Outcome of executing one step.

    ``output`` is merged into the run context when ``success`` is true.
    ``next_step`` names the id of the step to jump to, if any.
    """

    success: bool
    output: Optional[Any] = None
    error: Optional[str] = None
    next_step: Optional[str] = None

    @classmethod
    def ok(cls, output: Any = None, next_step: Optional[str] = None) -> "StepResult":
        return cls(success=True, output=output, next_step=next_step)

    @classmethod
    def fail(cls, error: str, output: Any = None) -> "StepResult":
        return cls(success=False, error=error, output=output)


class BaseStepExecutor(Generic[StepT], metaclass=abc.ABCMeta):
    """Executes a single step type.

    Executors receive only the step and the current context. They must not
    mutate ``context`` or keep a reference to it after returning.
    """

    step_type: ClassVar[str]

    @abc.abstractmethod
    async def execute(self, step: StepT, context: Mapping[str, Any]) -> StepResult:
        raise NotImplementedError
