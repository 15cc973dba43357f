"""
Routeflow Pipeline

Sequential execution of a flow's nodes with streaming sinks, cooperative
cancellation, retry helpers and structured run logging.
"""

from .cancellation import CancellationToken
from .context import PipelineContext
from .executor import PipelineExecutor
from .nodes import NodeHandler, NodeRegistry
from .observability import JSONLogger, RunLogger, configure_logging
from .retry import (
    ExponentialBackoff,
    RetryPolicy,
    RetryResult,
    with_retry,
)
from .sink import QueueSink, Sink, SinkWriter, deliver

__all__ = [
    "CancellationToken",
    "ExponentialBackoff",
    "JSONLogger",
    "NodeHandler",
    "NodeRegistry",
    "PipelineContext",
    "PipelineExecutor",
    "QueueSink",
    "RetryPolicy",
    "RetryResult",
    "RunLogger",
    "Sink",
    "SinkWriter",
    "configure_logging",
    "deliver",
    "with_retry",
]
