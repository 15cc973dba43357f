"""
Pipeline Executor for Routeflow.

Runs a flow's nodes strictly in stored order:

    for node in flow.nodes:
        check cancellation
        output = handler(node, ctx.with_input(current))
        sink(output)            # bounded, failures ignored
        aggregate += output
        current = output

Any handler failure aborts the rest of the flow and is raised as
NodeExecutionError carrying the aggregate so far. An unknown node type is
raised as UnknownNodeTypeError before that node runs.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, AsyncIterator

from routeflow.errors import NodeExecutionError, RunCancelled

from .nodes.registry import NodeRegistry
from .sink import SinkWriter

if TYPE_CHECKING:
    from routeflow.models import Flow, Node

    from .context import PipelineContext
    from .observability import RunLogger
    from .sink import Sink

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """
    Sequential node executor with streaming and cancellation.

    Example:
        executor = PipelineExecutor(NodeRegistry.default(), sink_timeout=5.0)
        answer = await executor.run(flow, ctx, sink=print)

        # Or consume outputs directly
        async for node, output in executor.iter_outputs(flow, ctx):
            ...
    """

    def __init__(self, nodes: NodeRegistry | None = None, *, sink_timeout: float = 5.0):
        self._nodes = nodes or NodeRegistry.default()
        self._sink_timeout = sink_timeout

    @property
    def nodes(self) -> NodeRegistry:
        return self._nodes

    async def iter_outputs(
        self,
        flow: Flow,
        ctx: PipelineContext,
        *,
        run_log: RunLogger | None = None,
    ) -> AsyncIterator[tuple[Node, str]]:
        """
        Execute ``flow`` and yield ``(node, output)`` after each node.

        Raises:
            RunCancelled: If ctx.cancel is set before a node starts
            UnknownNodeTypeError: If a node's tag has no handler
            NodeExecutionError: If a handler raises
        """
        nodes = tuple(flow.nodes)
        current = ctx.input
        aggregate: list[str] = []

        for index, node in enumerate(nodes):
            if ctx.cancel is not None:
                ctx.cancel.raise_if_cancelled(ctx.run_id, f"node:{node.name}")

            handler = self._nodes.handler_for(node)
            start = time.perf_counter()

            try:
                output = await handler.execute(node, ctx.with_input(current))
            except RunCancelled:
                raise
            except Exception as e:
                logger.error(
                    f"Node '{node.name}' ({node.type}) failed at step {index + 1}/{len(nodes)}: {e}",
                    exc_info=True,
                )
                raise NodeExecutionError(
                    node.name,
                    node.type,
                    e,
                    partial_output="".join(aggregate),
                    flow_name=flow.name,
                ) from e

            if not isinstance(output, str):
                raise NodeExecutionError(
                    node.name,
                    node.type,
                    TypeError(f"handler returned {type(output).__name__}, expected str"),
                    partial_output="".join(aggregate),
                    flow_name=flow.name,
                )

            duration_ms = (time.perf_counter() - start) * 1000
            ctx.record_timing(node.name, duration_ms)
            if run_log is not None:
                run_log.node_completed(node.name, node.type, duration_ms, len(output))

            aggregate.append(output)
            current = output
            yield node, output

    async def run(
        self,
        flow: Flow,
        ctx: PipelineContext,
        sink: Sink | None = None,
        *,
        run_log: RunLogger | None = None,
    ) -> str:
        """
        Execute ``flow`` and return the concatenation of all node outputs.

        Each output is delivered to ``sink`` (or ctx.sink) once, in order,
        before the next node starts. Sink failures never change the result.
        """
        sink = sink if sink is not None else ctx.sink
        writer = SinkWriter(sink, timeout=self._sink_timeout) if sink is not None else None
        aggregate: list[str] = []

        logger.info(
            f"Flow starting: '{flow.name}', execution_id={str(ctx.execution_id)[:8]}..., "
            f"nodes={flow.node_names}"
        )

        async for node, output in self.iter_outputs(flow, ctx, run_log=run_log):
            aggregate.append(output)
            if writer is not None:
                delivered = await writer.write(output)
                if not delivered:
                    logger.warning(f"Output of node '{node.name}' not delivered to sink")

        result = "".join(aggregate)
        logger.info(
            f"Flow complete: '{flow.name}', nodes={len(aggregate)}, "
            f"output_length={len(result)}, duration={ctx.elapsed_ms:.1f}ms"
        )
        return result

    def __repr__(self) -> str:
        return f"PipelineExecutor(nodes={self._nodes!r}, sink_timeout={self._sink_timeout})"


__all__ = ["PipelineExecutor"]
