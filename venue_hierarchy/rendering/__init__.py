"""Hierarchy rendering for published output and the authoring preview."""

from .links import TermArchiveLinker, is_safe_url
from .preview import HierarchyPreview, PreviewState
from .renderer import HierarchyRenderer

__all__ = [
    "HierarchyPreview",
    "HierarchyRenderer",
    "PreviewState",
    "TermArchiveLinker",
    "is_safe_url",
]
