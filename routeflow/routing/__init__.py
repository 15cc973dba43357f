"""
Routeflow Routing

Input classification: literal shortcut rules first, then the
embedding-based semantic router.
"""

from .semantic import RouteMatch, SemanticRouter
from .shortcuts import ShortcutClassifier

__all__ = ["RouteMatch", "SemanticRouter", "ShortcutClassifier"]
