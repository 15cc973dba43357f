"""
Runs API for Routeflow.

POST /api/v1/runs triggers a run. By default the response is a
server-sent event stream:

    event: chunk     data: {"node_index": 0, "output": "..."}   (one per node)
    event: result    data: {"run_id", "route", "state", "output"}
    event: error     data: {"run_id", "state", "error", "error_type", "node"}
    event: cancelled data: {"run_id", "stage"}

With ``"stream": false`` the run is awaited and returned as JSON.
Client disconnect cancels the run before its next node.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from routeflow.app.dependencies import get_orchestrator
from routeflow.errors import (
    GatewayTimeoutError,
    GatewayUnavailableError,
    InvalidVectorError,
    NodeExecutionError,
    RouteflowError,
    RunCancelled,
    UnknownNodeTypeError,
    UnresolvedFlowError,
)
from routeflow.pipeline.cancellation import CancellationToken
from routeflow.pipeline.sink import QueueSink
from routeflow.runtime import Agent, Orchestrator, Run, Thread

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/runs", tags=["runs"])


class RunRequest(BaseModel):
    """Body of POST /runs."""

    input: str = Field(..., min_length=1)
    agent_id: str = "default"
    agent_name: str = ""
    thread_id: str = "default"
    thread_title: str = ""
    flow_name: str | None = Field(
        None, description="Flow bound to the run, used by the default route"
    )
    stream: bool = True


class RunResponse(BaseModel):
    run_id: str
    route: str | None
    state: str
    output: str


def _sse(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def _error_payload(run: Run, error: Exception) -> dict[str, Any]:
    return {
        "run_id": run.id,
        "state": run.state.value,
        "error": str(error),
        "error_type": type(error).__name__,
        "node": getattr(error, "node_name", None),
    }


def _status_for(error: RouteflowError) -> int:
    if isinstance(error, GatewayTimeoutError):
        return 504
    if isinstance(error, (GatewayUnavailableError, NodeExecutionError)):
        return 502
    if isinstance(error, (InvalidVectorError, UnresolvedFlowError, UnknownNodeTypeError)):
        return 422
    return 500


async def _build_run(request: RunRequest, orchestrator: Orchestrator) -> Run:
    flow = None
    if request.flow_name:
        flow = await orchestrator.store.find_by_name(request.flow_name)
        if flow is None:
            raise HTTPException(status_code=404, detail=f"Flow '{request.flow_name}' not found")

    return Run(
        agent=Agent(id=request.agent_id, name=request.agent_name),
        thread=Thread(id=request.thread_id, title=request.thread_title),
        input=request.input,
        flow=flow,
    )


async def _stream_run(
    orchestrator: Orchestrator,
    run: Run,
    maxsize: int = 16,
) -> AsyncIterator[str]:
    sink = QueueSink(maxsize=maxsize)
    cancel = CancellationToken()
    task = asyncio.create_task(orchestrator.trigger(run, sink, cancel=cancel))

    def _finished(done: asyncio.Task) -> None:
        sink.close()
        if not done.cancelled():
            # Mark the exception retrieved; it is reported through the stream
            done.exception()

    task.add_done_callback(_finished)

    try:
        index = 0
        async for chunk in sink:
            yield _sse("chunk", {"node_index": index, "output": chunk})
            index += 1

        try:
            output = await task
        except RunCancelled as e:
            yield _sse("cancelled", {"run_id": run.id, "stage": e.stage})
        except RouteflowError as e:
            yield _sse("error", _error_payload(run, e))
        except Exception as e:
            logger.error(f"Run {run.id} crashed: {e}", exc_info=True)
            yield _sse("error", _error_payload(run, e))
        else:
            yield _sse(
                "result",
                {
                    "run_id": run.id,
                    "route": run.route.value if run.route else None,
                    "state": run.state.value,
                    "output": output,
                },
            )
    finally:
        if not task.done():
            logger.info(f"Client disconnected, cancelling run {run.id}")
            cancel.cancel("client disconnected")


@router.post("")
async def create_run(
    request: RunRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Trigger a run and stream node outputs, or return the result as JSON."""
    run = await _build_run(request, orchestrator)

    if request.stream:
        return StreamingResponse(
            _stream_run(orchestrator, run),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    try:
        output = await orchestrator.trigger(run)
    except RunCancelled as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except RouteflowError as e:
        logger.error(f"Run {run.id} failed: {e}")
        raise HTTPException(status_code=_status_for(e), detail=_error_payload(run, e)) from e

    return RunResponse(
        run_id=run.id,
        route=run.route.value if run.route else None,
        state=run.state.value,
        output=output,
    )


__all__ = ["RunRequest", "RunResponse", "router"]
