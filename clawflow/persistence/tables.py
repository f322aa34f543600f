from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, DateTime

from .models import utcnow


class WorkflowRow(SQLModel, table=True):
    """Stored workflow definition. Steps are kept as their JSON form."""

    __tablename__ = "workflows"

    id: str = Field(primary_key=True)
    user_id: str = Field(index=True)
    name: str
    description: Optional[str] = None
    trigger_type: str = Field(default="manual")
    trigger_config: dict = Field(default_factory=dict, sa_column=Column(JSON))
    enabled: bool = True
    steps: list = Field(default_factory=list, sa_column=Column(JSON))


class WorkflowRunRow(SQLModel, table=True):
    """Represents an instance of a workflow execution."""

    __tablename__ = "workflow_runs"

    id: str = Field(primary_key=True)
    workflow_id: str = Field(foreign_key="workflows.id", index=True)
    status: str = Field(default="running")
    current_step: int = 0
    context: dict = Field(default_factory=dict, sa_column=Column(JSON))
    error: Optional[str] = None
    started_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True))
    )
    completed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
