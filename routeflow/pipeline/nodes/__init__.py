"""
Node variants.

One handler per NodeType, looked up through NodeRegistry.
"""

from .base import NodeHandler
from .function_call import FunctionCallNodeHandler
from .image import TextToImageNodeHandler
from .plugin import PluginNodeHandler
from .registry import NodeRegistry

__all__ = [
    "FunctionCallNodeHandler",
    "NodeHandler",
    "NodeRegistry",
    "PluginNodeHandler",
    "TextToImageNodeHandler",
]
