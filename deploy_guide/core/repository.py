"""Workflow storage.

The engine only talks to ``WorkflowRepository`` so that a persistent store
can replace the in-memory one without touching engine logic.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from deploy_guide.models.deployment import DeploymentStatus, DeploymentWorkflow


class WorkflowRepository(ABC):
    """Persistence contract for workflows."""

    @abstractmethod
    async def get(self, workflow_id: str) -> DeploymentWorkflow | None:
        """Fetch a workflow by ID. Returns None if not found."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, workflow: DeploymentWorkflow) -> None:
        """Insert or replace a workflow."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, workflow_id: str) -> bool:
        """Remove a workflow. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    async def list_workflows(
        self,
        status: DeploymentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[DeploymentWorkflow], int]:
        """List workflows newest first, with the unpaginated total."""
        raise NotImplementedError

    @abstractmethod
    def lock(self, workflow_id: str) -> AbstractAsyncContextManager[None]:
        """Exclusive lock scoped to a single workflow entry."""
        raise NotImplementedError


class InMemoryWorkflowRepository(WorkflowRepository):
    """Keeps workflows in a dict for the lifetime of the process."""

    def __init__(self):
        self._workflows: dict[str, DeploymentWorkflow] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, workflow_id: str) -> DeploymentWorkflow | None:
        return self._workflows.get(workflow_id)

    async def put(self, workflow: DeploymentWorkflow) -> None:
        self._workflows[workflow.id] = workflow

    async def delete(self, workflow_id: str) -> bool:
        self._locks.pop(workflow_id, None)
        return self._workflows.pop(workflow_id, None) is not None

    async def list_workflows(
        self,
        status: DeploymentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[DeploymentWorkflow], int]:
        workflows = list(self._workflows.values())

        if status:
            workflows = [w for w in workflows if w.status == status]

        workflows.sort(key=lambda w: w.created_at, reverse=True)

        total = len(workflows)
        return workflows[offset : offset + limit], total

    @asynccontextmanager
    async def lock(self, workflow_id: str) -> AsyncIterator[None]:
        entry_lock = self._locks.setdefault(workflow_id, asyncio.Lock())
        async with entry_lock:
            yield

    def clear(self) -> None:
        self._workflows.clear()
        self._locks.clear()


@lru_cache
def get_workflow_repository() -> InMemoryWorkflowRepository:
    """Get the process-wide workflow repository."""
    return InMemoryWorkflowRepository()
