"""
Routeflow Runtime

Runs, their lifecycle, and the orchestrator that triggers them.
"""

from .orchestrator import Orchestrator
from .run import Agent, InvalidTransitionError, Run, RunState, Thread

__all__ = ["Agent", "InvalidTransitionError", "Orchestrator", "Run", "RunState", "Thread"]
