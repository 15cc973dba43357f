"""Text-to-image node."""

from __future__ import annotations

from typing import TYPE_CHECKING

from routeflow.models import NodeType

from .base import NodeHandler

if TYPE_CHECKING:
    from routeflow.models import Node

    from ..context import PipelineContext


class TextToImageNodeHandler(NodeHandler):
    """Uses the input as the prompt and returns an image reference."""

    @property
    def node_type(self) -> NodeType:
        return NodeType.STABILITY_TEXT_TO_IMAGE

    async def execute(self, node: Node, ctx: PipelineContext) -> str:
        generator = ctx.require_providers().get_image(node.config.get("generator"))
        return await generator.generate(ctx.input)


__all__ = ["TextToImageNodeHandler"]
