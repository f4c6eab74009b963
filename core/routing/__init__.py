"""
Routing Layer

Exposes request classification and freshness-aware routing.
"""

from .router import classify_request
from .classifier import ClassificationParseError, ClassificationUnavailable
from .freshness import UnknownTemplateReadiness
from .pre_router import PatternTableError

__all__ = [
    "classify_request",
    "ClassificationParseError",
    "ClassificationUnavailable",
    "UnknownTemplateReadiness",
    "PatternTableError",
]
