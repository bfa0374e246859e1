"""
Diff Processing Layer

This module provides unified diff parsing, hunk trimming
and hunk merging for scope-aware context extraction.
"""

from .parser import MalformedDiffError, UnifiedDiffParser, parse_patch
from .hunks import combine_hunks, edit_span, split_file_lines, trim_hunk

__all__ = [
    'MalformedDiffError',
    'UnifiedDiffParser',
    'parse_patch',
    'combine_hunks',
    'edit_span',
    'split_file_lines',
    'trim_hunk',
]
