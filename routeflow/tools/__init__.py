"""
Routeflow Tools

Functions a model gateway may call during function-calling nodes.
"""

from .base import Tool, ToolResult
from .finnhub import FinnhubCompanyProfileTool, FinnhubQuoteTool, create_finnhub_tools
from .registry import ToolRegistry, ToolRegistryError

__all__ = [
    "FinnhubCompanyProfileTool",
    "FinnhubQuoteTool",
    "Tool",
    "ToolRegistry",
    "ToolRegistryError",
    "ToolResult",
    "create_finnhub_tools",
]
