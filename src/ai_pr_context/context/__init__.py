"""
Review Context Builder

This module provides scope grouping, scope excerpt building,
margin expansion and per-file strategy selection.
"""

from .grouper import ScopeGrouping, ScopeHunkGrouper
from .builder import ScopeContextBuilder
from .expander import FallbackExpander
from .strategy import (
    StrategySelector,
    UnexpectedPipelineError,
    expanded_patch_strategy,
    raw_patch_strategy,
    smarter_context_patch_strategy,
)

__all__ = [
    'ScopeGrouping',
    'ScopeHunkGrouper',
    'ScopeContextBuilder',
    'FallbackExpander',
    'StrategySelector',
    'UnexpectedPipelineError',
    'expanded_patch_strategy',
    'raw_patch_strategy',
    'smarter_context_patch_strategy',
]
