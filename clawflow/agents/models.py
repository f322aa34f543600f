"""Pydantic models used by the agent/task matcher."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Availability = Literal["online", "busy", "away", "offline"]


class AgentProfile(BaseModel):
    """Matcher view of an agent, supplied by the caller on every call."""

    id: str
    name: str
    capabilities: List[str] = Field(default_factory=list)
    availability: Availability = "online"
    total_tasks_completed: int = 0
    avg_task_duration_seconds: Optional[float] = None
    hourly_rate_limit: Optional[int] = None

    @field_validator("capabilities", mode="before")
    @classmethod
    def _default_capabilities(cls, v):
        return v or []

    @field_validator("total_tasks_completed", mode="before")
    @classmethod
    def _default_tasks(cls, v):
        return v or 0


class MatchResult(BaseModel):
    """Ranked match of one agent against a task description."""

    agent: AgentProfile
    score: float
    matched_capabilities: List[str] = Field(default_factory=list)
    availability_bonus: float = 0.0
    experience_bonus: float = 0.0
    reason: str
