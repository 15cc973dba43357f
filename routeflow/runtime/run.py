"""
Runs and their lifecycle.

A Run is one execution request: an agent answering input on a thread. It
is created by the caller and mutated only by Orchestrator.trigger, which
records the route, binds the resolved flow and advances the state:

    CREATED -> ROUTED -> EXECUTING       -> COMPLETED
    CREATED -> ROUTED -> SHORT_CIRCUITED -> COMPLETED
    any non-terminal -> FAILED | CANCELLED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from routeflow.errors import RouteflowError

if TYPE_CHECKING:
    from routeflow.models import Flow, RouteLabel


class RunState(str, Enum):
    CREATED = "created"
    ROUTED = "routed"
    EXECUTING = "executing"
    SHORT_CIRCUITED = "short_circuited"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED, RunState.CANCELLED)


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.CREATED: frozenset({RunState.ROUTED}),
    RunState.ROUTED: frozenset({RunState.EXECUTING, RunState.SHORT_CIRCUITED}),
    RunState.EXECUTING: frozenset({RunState.COMPLETED}),
    RunState.SHORT_CIRCUITED: frozenset({RunState.COMPLETED}),
}


class InvalidTransitionError(RouteflowError):
    """Raised on a state change the run lifecycle does not allow."""


@dataclass(frozen=True)
class Agent:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Thread:
    id: str
    title: str = ""


@dataclass
class Run:
    """One execution request."""

    agent: Agent
    thread: Thread
    input: str
    flow: Flow | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    state: RunState = RunState.CREATED
    route: RouteLabel | None = None
    error: str | None = None

    def transition(self, target: RunState) -> None:
        """Move to ``target`` or raise InvalidTransitionError."""
        if self.state.is_terminal:
            raise InvalidTransitionError(f"Run {self.id} is already {self.state.value}")
        if target in (RunState.FAILED, RunState.CANCELLED):
            self.state = target
            return
        if target not in _TRANSITIONS.get(self.state, frozenset()):
            raise InvalidTransitionError(
                f"Run {self.id} cannot go from {self.state.value} to {target.value}"
            )
        self.state = target

    def __repr__(self) -> str:
        route = self.route.value if self.route else None
        return f"Run(id='{self.id[:8]}', state={self.state.value}, route={route})"


__all__ = ["Agent", "InvalidTransitionError", "Run", "RunState", "Thread"]
