"""
Tool Base Classes.

Tools are the functions a model gateway may call while answering a
function-calling node. A tool has a name, a description and a JSON schema
for its arguments, and returns a ToolResult.

Error Handling:
    Tool failures are reported IN the result (is_error=True), not raised,
    so the model can read the error and answer accordingly.

Usage:
    class MyTool(Tool):
        @property
        def name(self) -> str:
            return "my_tool"

        @property
        def description(self) -> str:
            return "Does something useful"

        @property
        def input_schema(self) -> dict:
            return {
                "type": "object",
                "properties": {"input": {"type": "string"}},
                "required": ["input"],
            }

        async def execute(self, arguments: dict) -> ToolResult:
            return ToolResult.success(f"Processed: {arguments['input']}")
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Result from tool execution."""

    text: str
    is_error: bool = False
    structured_content: dict[str, Any] | None = None

    @classmethod
    def success(cls, text: str, *, structured: dict[str, Any] | None = None) -> ToolResult:
        return cls(text=text, structured_content=structured)

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> ToolResult:
        """Successful result carrying JSON data as its text."""
        return cls(text=json.dumps(data, default=str), structured_content=data)

    @classmethod
    def error(cls, message: str) -> ToolResult:
        return cls(text=message, is_error=True)


class Tool(ABC):
    """Base class for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name, as the model sees it."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """What the tool does, for the model."""
        ...

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the arguments object."""
        ...

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> ToolResult:
        """Run the tool."""
        ...

    def to_llm_schema(self) -> dict[str, Any]:
        """Function schema in the OpenAI/Mistral ``tools`` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
