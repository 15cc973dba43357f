"""
Pipeline Context for Routeflow.

The context carries request-scoped state and provider access to every
node handler. The executor hands each node a copy whose ``input`` is the
previous node's output; everything else is shared.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from routeflow.errors import ConfigurationError

if TYPE_CHECKING:
    from routeflow.flows.store import FlowStore
    from routeflow.models import Flow
    from routeflow.providers.registry import ProviderRegistry

    from .cancellation import CancellationToken
    from .sink import Sink


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PipelineContext:
    """
    Request-scoped context passed through the pipeline.

    Provides:
    - Unique execution ID for tracing
    - The run's agent, thread and flow identity
    - The current node input
    - Provider and store access for node handlers
    - Per-node timings
    """

    # Execution identification
    execution_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=_utc_now)
    run_id: str = ""

    # Run identity
    agent_id: str = ""
    thread_id: str = ""
    route: str = ""
    flow: Flow | None = None

    # Current node input
    input: str = ""

    # Collaborators (injected by the orchestrator)
    providers: ProviderRegistry | None = None
    store: FlowStore | None = None
    sink: Sink | None = None
    cancel: CancellationToken | None = None

    # Audit trail
    node_timings: dict[str, float] = field(default_factory=dict)

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since the run started."""
        delta = datetime.now(timezone.utc) - self.started_at
        return delta.total_seconds() * 1000

    def with_input(self, input: str) -> PipelineContext:
        """Context for the next node. Timings stay shared."""
        return dataclasses.replace(self, input=input)

    def record_timing(self, node_name: str, duration_ms: float) -> None:
        self.node_timings[node_name] = duration_ms

    def require_providers(self) -> ProviderRegistry:
        if self.providers is None:
            raise ConfigurationError("Pipeline context has no provider registry")
        return self.providers

    def require_store(self) -> FlowStore:
        if self.store is None:
            raise ConfigurationError("Pipeline context has no flow store")
        return self.store

    def to_audit_dict(self) -> dict[str, Any]:
        return {
            "execution_id": str(self.execution_id),
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "duration_ms": self.elapsed_ms,
            "agent_id": self.agent_id,
            "thread_id": self.thread_id,
            "route": self.route,
            "flow": self.flow.name if self.flow else None,
            "node_timings": self.node_timings,
        }


__all__ = ["PipelineContext"]
