"""
Term graph construction and path reconstruction.

This package provides:
- SlugGenerator: deterministic, locale-aware slugs
- TermGraphBuilder: find-or-create term chains with parent repair
- HierarchyPathResolver: root-to-leaf paths from linked terms
- LevelWindowFilter: clip paths to a display window
- CanonicalLinker: single-child shortcut targets for archive pages
"""

from .builder import TermGraphBuilder
from .canonical import CanonicalLinker
from .paths import HierarchyPathResolver, build_term_path, find_leaf_terms
from .slugs import SlugGenerator
from .window import LevelWindowFilter

__all__ = [
    "CanonicalLinker",
    "HierarchyPathResolver",
    "LevelWindowFilter",
    "SlugGenerator",
    "TermGraphBuilder",
    "build_term_path",
    "find_leaf_terms",
]
