"""
Literal shortcut rules checked before semantic routing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from routeflow.models import RouteLabel

if TYPE_CHECKING:
    from routeflow.config.routing import RoutingTable, ShortcutRule

logger = logging.getLogger(__name__)


class ShortcutClassifier:
    """
    Ordered, case-sensitive substring rules.

    The first rule whose phrase occurs in the input wins.
    """

    def __init__(self, rules: Sequence[ShortcutRule] = ()):
        self._rules = list(rules)

    @classmethod
    def from_table(cls, table: RoutingTable) -> ShortcutClassifier:
        return cls(table.shortcuts)

    def match(self, text: str) -> RouteLabel | None:
        for rule in self._rules:
            if rule.phrase in text:
                logger.debug(f"[shortcuts] '{rule.phrase}' -> {rule.route.value}")
                return rule.route
        return None

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"ShortcutClassifier(phrases={[r.phrase for r in self._rules]})"


__all__ = ["ShortcutClassifier"]
