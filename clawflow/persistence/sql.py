"""SQL implementation of the workflow store (SQLite or PostgreSQL)."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel import SQLModel

from ..contracts import Workflow
from .models import WorkflowRun
from .repository import WorkflowStore
from .tables import WorkflowRow, WorkflowRunRow


class SQLWorkflowStore(WorkflowStore):
    """Persist workflows and runs through an async SQLAlchemy engine.

    ``database_url`` must name an async driver, e.g.
    ``sqlite+aiosqlite:///runs.db`` or ``postgresql+asyncpg://...``.
    """

    def __init__(self, database_url: str) -> None:
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.database_url = database_url
        self.engine = create_async_engine(
            database_url, echo=False, future=True, connect_args=connect_args
        )
        self._initialized = False

    async def init_db(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        self._initialized = True

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if not self._initialized:
            await self.init_db()
        async with AsyncSession(self.engine, expire_on_commit=False) as session:
            yield session

    # ------------------------------------------------------------------
    async def get_workflow(self, workflow_id: str) -> Workflow | None:
        async with self.session() as session:
            row = await session.get(WorkflowRow, workflow_id)
            if row is None:
                return None
            return Workflow.model_validate(row.model_dump())

    async def save_workflow(self, workflow: Workflow) -> None:
        row = WorkflowRow(**workflow.model_dump(mode="json"))
        async with self.session() as session:
            await session.merge(row)
            await session.commit()

    async def create_run(
        self, workflow_id: str, context: dict[str, Any] | None = None
    ) -> WorkflowRun:
        row = WorkflowRunRow(
            id=str(uuid.uuid4()),
            workflow_id=workflow_id,
            status="running",
            current_step=0,
            context=dict(context or {}),
        )
        async with self.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return WorkflowRun.model_validate(row.model_dump())

    async def update_run(
        self,
        run_id: str,
        fields: dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> bool:
        stmt = update(WorkflowRunRow).where(WorkflowRunRow.id == run_id)
        if expected_status is not None:
            stmt = stmt.where(WorkflowRunRow.status == expected_status)
        stmt = stmt.values(**fields)
        async with self.session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def get_run(self, run_id: str) -> WorkflowRun | None:
        async with self.session() as session:
            row = await session.get(WorkflowRunRow, run_id)
            if row is None:
                return None
            return WorkflowRun.model_validate(row.model_dump())

    async def list_runs(self, workflow_id: str) -> list[WorkflowRun]:
        stmt = (
            select(WorkflowRunRow)
            .where(WorkflowRunRow.workflow_id == workflow_id)
            .order_by(WorkflowRunRow.started_at.desc())
        )
        async with self.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [WorkflowRun.model_validate(row.model_dump()) for row in rows]
