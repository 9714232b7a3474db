"""Workflow lifecycle events and their publish/subscribe channel."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from deploy_guide.models.deployment import DeploymentStep, DeploymentWorkflow


class WorkflowEventType(str, Enum):
    """Lifecycle events published by the workflow engine."""

    WORKFLOW_CREATED = "workflowCreated"
    WORKFLOW_STARTED = "workflowStarted"
    STEP_STARTED = "stepStarted"
    STEP_COMPLETED = "stepCompleted"
    STEP_FAILED = "stepFailed"
    WORKFLOW_COMPLETED = "workflowCompleted"
    WORKFLOW_FAILED = "workflowFailed"
    WORKFLOW_CANCELLED = "workflowCancelled"


TERMINAL_EVENTS = frozenset(
    {
        WorkflowEventType.WORKFLOW_COMPLETED,
        WorkflowEventType.WORKFLOW_FAILED,
        WorkflowEventType.WORKFLOW_CANCELLED,
    }
)


@dataclass
class Event:
    """A lifecycle event carrying JSON-ready snapshots."""

    event_type: str
    workflow_id: str
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.event_type in {e.value for e in TERMINAL_EVENTS}

    def to_sse(self) -> str:
        """Convert to SSE format."""
        data_json = json.dumps(
            {**self.data, "timestamp": self.timestamp.isoformat()}, default=str
        )
        return f"event: {self.event_type}\ndata: {data_json}\n\n"


class EventBus:
    """Fan-out of workflow events to any number of subscriber queues.

    Subscribers either follow one workflow or pass ``None`` to receive every
    event. Delivery uses ``put_nowait`` so a slow subscriber never blocks the
    engine, and payloads are serialised copies so handlers cannot reach back
    into engine state.
    """

    def __init__(self):
        self._subscribers: dict[str | None, list[asyncio.Queue[Event]]] = {}

    def subscribe(self, workflow_id: str | None = None) -> asyncio.Queue[Event]:
        """Subscribe to events for one workflow, or all workflows."""
        queue: asyncio.Queue[Event] = asyncio.Queue()
        self._subscribers.setdefault(workflow_id, []).append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Event]) -> None:
        """Detach a queue returned by ``subscribe``."""
        for key, queues in list(self._subscribers.items()):
            if queue in queues:
                queues.remove(queue)
            if not queues:
                del self._subscribers[key]

    def subscriber_count(self, workflow_id: str | None = None) -> int:
        return len(self._subscribers.get(workflow_id, []))

    async def publish(self, event: Event) -> None:
        """Deliver an event to workflow and global subscribers."""
        targets = [
            *self._subscribers.get(event.workflow_id, []),
            *self._subscribers.get(None, []),
        ]
        for queue in targets:
            queue.put_nowait(event)

    async def publish_workflow_event(
        self,
        event_type: WorkflowEventType,
        workflow: DeploymentWorkflow,
        step: DeploymentStep | None = None,
        error: str | None = None,
    ) -> None:
        """Publish a lifecycle event with workflow and step snapshots."""
        data: dict[str, Any] = {
            "workflow_id": workflow.id,
            "status": workflow.status.value,
            "workflow": workflow.model_dump(mode="json"),
        }
        if step is not None:
            data["step"] = step.model_dump(mode="json")
        if error is not None:
            data["error"] = error

        await self.publish(
            Event(event_type=event_type.value, workflow_id=workflow.id, data=data)
        )


# Singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the event bus singleton."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus
