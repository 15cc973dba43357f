"""
Routeflow - semantic request routing and typed flow execution.

Routeflow takes free-text input and:

- **Routes** it: literal shortcut rules first, then an embedding-based
  semantic router over reference utterances
- **Resolves** the route to a Flow, creating the route's canonical flow on
  first use (idempotent under concurrent runs)
- **Executes** the flow's typed nodes in order, threading each output into
  the next node's input
- **Streams** every node's output to a sink while returning the aggregate

Quick Start:
    >>> from routeflow import Agent, Orchestrator, Run, Thread
    >>> orchestrator = await Orchestrator.create(table, providers, store)
    >>> run = Run(agent=Agent("a-1"), thread=Thread("t-1"), input="Where is 90210?")
    >>> answer = await orchestrator.trigger(run, sink=print)
"""

__version__ = "0.1.0"

from routeflow.config import get_settings, load_routing_table
from routeflow.errors import RouteflowError
from routeflow.flows import FlowResolver, InMemoryFlowStore
from routeflow.models import Flow, Node, NodeType, Plugin, RouteLabel
from routeflow.pipeline import CancellationToken, PipelineContext, PipelineExecutor, QueueSink
from routeflow.providers import ProviderRegistry
from routeflow.routing import SemanticRouter, ShortcutClassifier
from routeflow.runtime import Agent, Orchestrator, Run, RunState, Thread

__all__ = [
    # Version info
    "__version__",
    # Entry point
    "Orchestrator",
    "Run",
    "RunState",
    "Agent",
    "Thread",
    # Domain
    "Flow",
    "Node",
    "NodeType",
    "Plugin",
    "RouteLabel",
    "RouteflowError",
    # Building blocks
    "CancellationToken",
    "FlowResolver",
    "InMemoryFlowStore",
    "PipelineContext",
    "PipelineExecutor",
    "ProviderRegistry",
    "QueueSink",
    "SemanticRouter",
    "ShortcutClassifier",
    # Configuration
    "get_settings",
    "load_routing_table",
]
