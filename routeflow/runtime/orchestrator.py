"""
Run Orchestrator for Routeflow.

``Orchestrator.trigger`` is the single entry point of the core:

    shortcut rules ──match──────────────────────┐
         │ no match                              ▼
    embed input -> SemanticRouter.route -> RouteLabel
                                                 │
                     canned response? ──yes──> return it (no store, no sink)
                                                 │ no
                     FlowResolver.resolve -> Flow (bound to the run)
                                                 │
                     PipelineExecutor.run -> aggregated output

The orchestrator records the run's state and logs each stage. Errors are
re-raised unchanged; retrying a whole run is the caller's decision.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from routeflow.errors import RunCancelled
from routeflow.flows.resolver import FlowResolver
from routeflow.pipeline.context import PipelineContext
from routeflow.pipeline.executor import PipelineExecutor
from routeflow.pipeline.observability import RunLogger
from routeflow.routing.semantic import SemanticRouter
from routeflow.routing.shortcuts import ShortcutClassifier

from .run import RunState

if TYPE_CHECKING:
    from routeflow.config.routing import RoutingTable
    from routeflow.flows.store import FlowStore
    from routeflow.models import RouteLabel
    from routeflow.pipeline.cancellation import CancellationToken
    from routeflow.pipeline.nodes import NodeRegistry
    from routeflow.pipeline.sink import Sink
    from routeflow.providers.embedding import EmbeddingProvider
    from routeflow.providers.registry import ProviderRegistry

    from .run import Run

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Routes runs and executes their flows.

    Example:
        orchestrator = await Orchestrator.create(table, providers, store)
        run = Run(agent=Agent("a-1"), thread=Thread("t-1"), input="Where is 90210?")
        answer = await orchestrator.trigger(run, sink=print)
    """

    def __init__(
        self,
        *,
        table: RoutingTable,
        router: SemanticRouter,
        embedder: EmbeddingProvider,
        providers: ProviderRegistry,
        store: FlowStore,
        shortcuts: ShortcutClassifier | None = None,
        resolver: FlowResolver | None = None,
        executor: PipelineExecutor | None = None,
    ):
        self._table = table
        self._router = router
        self._embedder = embedder
        self._providers = providers
        self._store = store
        self._shortcuts = shortcuts or ShortcutClassifier.from_table(table)
        self._resolver = resolver or FlowResolver(store, table)
        self._executor = executor or PipelineExecutor()

    @classmethod
    async def create(
        cls,
        table: RoutingTable,
        providers: ProviderRegistry,
        store: FlowStore,
        *,
        nodes: NodeRegistry | None = None,
        sink_timeout: float = 5.0,
    ) -> Orchestrator:
        """Build the semantic router from ``table`` and wire everything up."""
        embedder = providers.get_embedding()
        router = await SemanticRouter.build(table, embedder)
        return cls(
            table=table,
            router=router,
            embedder=embedder,
            providers=providers,
            store=store,
            executor=PipelineExecutor(nodes, sink_timeout=sink_timeout),
        )

    @property
    def router(self) -> SemanticRouter:
        return self._router

    @property
    def table(self) -> RoutingTable:
        return self._table

    @property
    def store(self) -> FlowStore:
        return self._store

    async def trigger(
        self,
        run: Run,
        sink: Sink | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> str:
        """
        Route ``run``, execute its flow and return the aggregated output.

        Raises:
            RunCancelled: If ``cancel`` was set at a checkpoint
            InvalidVectorError, UnresolvedFlowError, UnknownNodeTypeError,
            NodeExecutionError, GatewayTimeoutError, GatewayUnavailableError
        """
        run_log = RunLogger(run_id=run.id)
        start = time.perf_counter()
        run_log.run_started(agent=run.agent.id, thread=run.thread.id, input_length=len(run.input))

        try:
            route = await self._route(run, run_log, cancel)

            canned = self._table.canned_response(route)
            if canned is not None:
                run.transition(RunState.SHORT_CIRCUITED)
                run_log.short_circuited(route.value)
                run.transition(RunState.COMPLETED)
                run_log.run_completed(run.state.value, self._elapsed(start), len(canned))
                return canned

            if cancel is not None:
                cancel.raise_if_cancelled(run.id, "resolution")

            flow = await self._resolver.resolve(route, run.flow)
            run.flow = flow
            run_log.flow_resolved(flow.name, flow.node_names)

            run.transition(RunState.EXECUTING)
            ctx = PipelineContext(
                run_id=run.id,
                agent_id=run.agent.id,
                thread_id=run.thread.id,
                route=route.value,
                flow=flow,
                input=run.input,
                providers=self._providers,
                store=self._store,
                sink=sink,
                cancel=cancel,
            )
            result = await self._executor.run(flow, ctx, sink, run_log=run_log)

            run.transition(RunState.COMPLETED)
            run_log.run_completed(run.state.value, self._elapsed(start), len(result))
            return result

        except RunCancelled as e:
            self._abort(run, RunState.CANCELLED)
            run_log.run_cancelled(e.stage, self._elapsed(start))
            raise
        except asyncio.CancelledError:
            self._abort(run, RunState.CANCELLED)
            run_log.run_cancelled("task cancelled", self._elapsed(start))
            raise
        except Exception as e:
            run.error = str(e)
            self._abort(run, RunState.FAILED)
            run_log.run_failed(
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=self._elapsed(start),
                node=getattr(e, "node_name", None),
            )
            raise

    async def _route(
        self,
        run: Run,
        run_log: RunLogger,
        cancel: CancellationToken | None,
    ) -> RouteLabel:
        """
        Classify the run's input and record the route on the run.

        Shortcut rules are checked before the input is embedded, and a hit
        skips the embedding call entirely. Shortcut runs therefore still
        succeed while the embedding backend is down; embedding first and
        checking shortcuts afterwards would fail them at this stage.
        """
        shortcut = self._shortcuts.match(run.input)
        if shortcut is not None:
            route, via, score = shortcut, "shortcut", None
        else:
            if cancel is not None:
                cancel.raise_if_cancelled(run.id, "embedding")
            vector = await self._embedder.embed(run.input)
            match = self._router.match(vector)
            route = match.route
            via = "default" if match.fell_back else "semantic"
            score = match.score

        run.route = route
        run.transition(RunState.ROUTED)
        run_log.routed(route.value, via, score)
        return route

    @staticmethod
    def _abort(run: Run, state: RunState) -> None:
        if not run.state.is_terminal:
            run.transition(state)

    @staticmethod
    def _elapsed(start: float) -> float:
        return (time.perf_counter() - start) * 1000

    def __repr__(self) -> str:
        return f"Orchestrator(router={self._router!r}, executor={self._executor!r})"


__all__ = ["Orchestrator"]
