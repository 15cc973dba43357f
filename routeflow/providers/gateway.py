"""
Function-Calling Gateway.

Runs a bounded tool-calling loop against an LLM provider:

1. Send system prompt + user input with the tool schemas
2. If the model asks for tools, execute them and append the results
3. Repeat until the model answers in text or max_rounds is reached

The final text answer is the node's output.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from routeflow.errors import RouteflowError

from .llm.base import LLMConfig, Message, ToolCall

if TYPE_CHECKING:
    from routeflow.tools import ToolRegistry

    from .llm.base import LLMProvider

logger = logging.getLogger(__name__)

FINANCIAL_ANALYST_PROMPT = (
    "You are a concise financial analyst. Use the available tools to look up "
    "live market data before answering questions about prices or companies. "
    "Answer in plain text and cite the figures you used."
)


class FunctionCallError(RouteflowError):
    """Raised when the model never produces a final answer."""


class FunctionCallingGateway:
    """
    Model gateway with a tool-calling loop.

    Implements the FunctionCallGateway protocol: ``call(model, input) -> str``.

    Example:
        gateway = FunctionCallingGateway(
            llm=MistralLLMProvider(client),
            tools=create_finnhub_tools(finnhub),
        )
        answer = await gateway.call("mistral-large-latest", "What's AAPL at?")
    """

    def __init__(
        self,
        llm: LLMProvider,
        tools: ToolRegistry,
        *,
        system_prompt: str = FINANCIAL_ANALYST_PROMPT,
        max_rounds: int = 4,
        temperature: float = 0.2,
    ):
        self._llm = llm
        self._tools = tools
        self._system_prompt = system_prompt
        self._max_rounds = max_rounds
        self._temperature = temperature

    @property
    def name(self) -> str:
        return self._llm.name

    async def call(self, model: str | None, input: str) -> str:
        """
        Answer ``input`` with ``model``, letting it call tools.

        Raises:
            FunctionCallError: If no text answer arrives within max_rounds
        """
        messages = [Message.system(self._system_prompt), Message.user(input)]
        schemas = self._tools.to_llm_schemas()
        config = LLMConfig(model=model, temperature=self._temperature)

        for round_number in range(1, self._max_rounds + 1):
            response = await self._llm.complete(messages, config, tools=schemas or None)

            if not response.wants_tools:
                logger.info(
                    f"[gateway:{self.name}] Answered after {round_number} round(s), "
                    f"tokens={response.total_tokens}"
                )
                return response.content

            messages.append(Message.assistant(response.content, response.tool_calls))
            for call in response.tool_calls:
                messages.append(Message.tool(call, await self._execute_tool(call)))

        raise FunctionCallError(
            f"Model '{model}' did not produce an answer within {self._max_rounds} rounds"
        )

    async def _execute_tool(self, call: ToolCall) -> str:
        tool = self._tools.get(call.name)
        if tool is None:
            logger.error(f"[gateway:{self.name}] Unknown tool requested: {call.name}")
            return f"Error: unknown tool '{call.name}'"

        start = time.perf_counter()
        result = await tool.execute(call.arguments)
        duration_ms = (time.perf_counter() - start) * 1000

        if result.is_error:
            logger.warning(f"[gateway:{self.name}] Tool {call.name} failed: {result.text}")
            return f"Error: {result.text}"

        logger.info(f"[gateway:{self.name}] Tool {call.name} succeeded in {duration_ms:.1f}ms")
        return result.text

    def __repr__(self) -> str:
        return f"FunctionCallingGateway(llm={self._llm!r}, tools={self._tools.names})"


__all__ = ["FINANCIAL_ANALYST_PROMPT", "FunctionCallError", "FunctionCallingGateway"]
