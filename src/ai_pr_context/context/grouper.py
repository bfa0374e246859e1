"""
Scope Hunk Grouper

Resolves the enclosing scope of every hunk and buckets hunks that land
in the same (or a nested) scope. Hunks without a scope are set aside
for margin expansion.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..diff.hunks import edit_span, trim_hunk
from ..diff.parser import MalformedDiffError
from ..languages.base import ParseFailure, SyntaxContextResolver
from ..models.context import EnclosingContext
from ..models.patch import Hunk


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_MARGIN = 50


@dataclass
class ScopeGrouping:
    """Hunks bucketed by scope key plus the hunks left for fallback."""
    scope_hunks: Dict[str, List[Hunk]] = field(default_factory=dict)
    scope_nodes: Dict[str, EnclosingContext] = field(default_factory=dict)
    fallback_hunks: List[Hunk] = field(default_factory=list)


class ScopeHunkGrouper:
    """
    Groups hunks by the syntactic scope that encloses them.

    Each hunk is first looked up with a window widened by ``search_margin``
    lines around its edit span (clamped to the file). When no scope
    contains the widened window, the exact edit span is tried. A scope
    nested inside an already recorded one joins the outer group; a scope
    enclosing recorded ones absorbs them.
    """

    def __init__(self, resolver: SyntaxContextResolver, search_margin: int = DEFAULT_SEARCH_MARGIN):
        """
        Initialize scope hunk grouper.

        Args:
            resolver: Syntax context resolver for the file's language
            search_margin: Lines added above and below the edit span
        """
        if search_margin < 0:
            raise ValueError("Search margin must be non-negative")
        self.resolver = resolver
        self.search_margin = search_margin

    def group(self, file_text: str, hunks: Sequence[Hunk]) -> ScopeGrouping:
        """
        Bucket hunks by enclosing scope.

        Args:
            file_text: Full new-file text
            hunks: Hunks in diff order

        Returns:
            ScopeGrouping with scope buckets in discovery order
        """
        grouping = ScopeGrouping()
        line_count = len(file_text.split('\n'))

        for hunk in hunks:
            try:
                context = self.resolve_hunk(file_text, hunk, line_count)
            except (MalformedDiffError, ParseFailure) as e:
                logger.debug(f"Scope lookup failed for {hunk.header}: {e}")
                context = None

            if context is None:
                logger.debug(f"No enclosing scope for {hunk.header}, using margin expansion")
                grouping.fallback_hunks.append(hunk)
                continue

            logger.debug(
                f"Found enclosing {context.node_type} at lines "
                f"{context.start_line}-{context.end_line} for {hunk.header}"
            )
            self._add_to_group(grouping, context, hunk)

        return grouping

    def resolve_hunk(self, file_text: str, hunk: Hunk, line_count: Optional[int] = None) -> Optional[EnclosingContext]:
        """
        Find the enclosing scope for one hunk.

        Args:
            file_text: Full new-file text
            hunk: Original (untrimmed) hunk
            line_count: Number of lines in file_text, if already known

        Returns:
            EnclosingContext or None
        """
        if line_count is None:
            line_count = len(file_text.split('\n'))
        last_line = max(line_count, 1)

        start, end = edit_span(trim_hunk(hunk))
        start = min(start, last_line)
        end = min(end, last_line)

        wide_start = max(1, start - self.search_margin)
        wide_end = min(last_line, end + self.search_margin)

        context = self.resolver.find_enclosing_context(file_text, wide_start - 1, wide_end - 1)
        if context is None and (wide_start, wide_end) != (start, end):
            context = self.resolver.find_enclosing_context(file_text, start - 1, end - 1)
        return context

    def _add_to_group(self, grouping: ScopeGrouping, context: EnclosingContext, hunk: Hunk) -> None:
        key = context.key
        if key in grouping.scope_hunks:
            grouping.scope_hunks[key].append(hunk)
            return

        for existing_key, existing in grouping.scope_nodes.items():
            if existing.contains(context):
                grouping.scope_hunks[existing_key].append(hunk)
                return

        inner_keys = {
            existing_key
            for existing_key, existing in grouping.scope_nodes.items()
            if context.contains(existing)
        }
        if not inner_keys:
            grouping.scope_hunks[key] = [hunk]
            grouping.scope_nodes[key] = context
            return

        # Fold nested scopes into the new outer one, keeping the earliest position
        scope_hunks: Dict[str, List[Hunk]] = {}
        scope_nodes: Dict[str, EnclosingContext] = {}
        for existing_key, existing_hunks in grouping.scope_hunks.items():
            if existing_key in inner_keys:
                if key not in scope_hunks:
                    scope_hunks[key] = []
                    scope_nodes[key] = context
                scope_hunks[key].extend(existing_hunks)
            else:
                scope_hunks[existing_key] = existing_hunks
                scope_nodes[existing_key] = grouping.scope_nodes[existing_key]
        scope_hunks[key].append(hunk)

        logger.debug(f"Scope {key} absorbed nested scopes {sorted(inner_keys)}")
        grouping.scope_hunks = scope_hunks
        grouping.scope_nodes = scope_nodes
