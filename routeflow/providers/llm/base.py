"""
LLM Provider Protocol for Routeflow.

Defines the interface for model gateways used by function-calling nodes.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class MessageRole(str, Enum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A function call requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ToolCall:
        """Parse an OpenAI/Mistral style ``tool_calls`` entry."""
        function = payload.get("function") or {}
        raw_args = function.get("arguments") or {}
        if isinstance(raw_args, str):
            try:
                raw_args = json.loads(raw_args) if raw_args.strip() else {}
            except json.JSONDecodeError:
                raw_args = {"_raw": raw_args}
        return cls(
            id=payload.get("id") or "",
            name=function.get("name") or "",
            arguments=raw_args if isinstance(raw_args, dict) else {"_raw": raw_args},
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(self.arguments)},
        }


@dataclass
class Message:
    """
    A message in the LLM conversation.

    Attributes:
        role: Role of the message sender
        content: Text content of the message
        name: Tool name for tool messages
        tool_call_id: Call being answered, for tool messages
        tool_calls: Calls requested by an assistant message
    """

    role: MessageRole
    content: str
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name:
            result["name"] = self.name
        if self.tool_call_id:
            result["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            result["tool_calls"] = [c.to_api() for c in self.tool_calls]
        return result

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls: list[ToolCall] | None = None) -> Message:
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content, tool_calls=list(tool_calls or []))

    @classmethod
    def tool(cls, call: ToolCall, content: str) -> Message:
        """Create a tool result message answering ``call``."""
        return cls(role=MessageRole.TOOL, content=content, name=call.name, tool_call_id=call.id)


@dataclass
class LLMResponse:
    """
    Response from LLM completion.

    Attributes:
        content: The generated text content
        model: Model used for generation
        usage: Token usage statistics
        finish_reason: Why generation stopped
        provider: Name of the provider
        tool_calls: Function calls requested by the model
    """

    content: str
    model: str = ""
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"
    provider: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)

    @property
    def total_tokens(self) -> int:
        return self.usage.get("input_tokens", 0) + self.usage.get("output_tokens", 0)


@dataclass
class LLMConfig:
    """
    Configuration for LLM requests.

    Attributes:
        model: Model identifier (e.g., "mistral-large-latest")
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate
    """

    model: str | None = None  # Use provider default if None
    temperature: float = 0.3
    max_tokens: int = 1024


@runtime_checkable
class LLMProvider(Protocol):
    """
    Protocol for LLM providers.

    Implementations must provide:
    - complete(): Generate text (or tool calls) from messages
    - name: Provider identifier
    """

    @property
    def name(self) -> str:
        """Provider name for logging and configuration."""
        ...

    async def complete(
        self,
        messages: list[Message],
        config: LLMConfig | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """
        Generate a completion from messages.

        Args:
            messages: List of conversation messages
            config: Optional configuration overrides
            tools: Function schemas the model may call

        Returns:
            LLMResponse with generated content or tool calls
        """
        ...


class BaseLLMProvider(ABC):
    """
    Base class for LLM provider implementations.

    Provides common functionality and enforces interface.
    """

    def __init__(self, default_model: str = ""):
        self.default_model = default_model

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        config: LLMConfig | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> LLMResponse:
        """Generate a completion from messages."""
        pass

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        return [msg.to_dict() for msg in messages]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.default_model}')"
