"""
Cooperative cancellation for runs.

A CancellationToken is checked at every suspension point the pipeline
controls: before embedding, before flow resolution and before each node.
A node already running is allowed to finish.
"""

from __future__ import annotations

import asyncio
import logging

from routeflow.errors import RunCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    One-shot cancellation signal.

    Example:
        token = CancellationToken()
        task = asyncio.create_task(orchestrator.trigger(run, sink, cancel=token))
        ...
        token.cancel("client disconnected")
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()
            logger.debug(f"Cancellation requested: {reason or 'no reason given'}")

    def raise_if_cancelled(self, run_id: str = "", stage: str = "") -> None:
        """Raise RunCancelled if the token has been cancelled."""
        if self._event.is_set():
            raise RunCancelled(run_id, stage)

    async def wait(self) -> None:
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


__all__ = ["CancellationToken"]
