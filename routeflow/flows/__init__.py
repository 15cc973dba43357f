"""
Routeflow Flows

Flow persistence and route-to-flow resolution.
"""

from .resolver import FlowResolver
from .store import FlowStore, InMemoryFlowStore

__all__ = ["FlowResolver", "FlowStore", "InMemoryFlowStore"]
