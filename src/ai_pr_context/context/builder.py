"""
Scope Context Builder

Rebuilds the source of an enclosing scope with a combined hunk's edit
lines shown in place, under a synthetic hunk header.
"""

import logging
from typing import List

from ..diff.hunks import split_file_lines, trim_hunk
from ..models.context import EnclosingContext
from ..models.patch import Hunk


logger = logging.getLogger(__name__)


class ScopeContextBuilder:
    """
    Builds the display string for one scope.

    The scope's lines come from the new file. The trimmed edit block
    replaces the new-file lines it covers (every non-removed line), so
    removed lines appear next to the lines that replaced them.
    """

    def build(self, file_text: str, context: EnclosingContext, combined: Hunk) -> str:
        """
        Build the scope excerpt for a combined hunk.

        Args:
            file_text: Full new-file text
            context: Enclosing scope of the combined hunk
            combined: Hunk merged from every hunk in the scope

        Returns:
            Header line followed by the scope text with edits injected
        """
        return '\n'.join(self.build_lines(file_text, context, combined))

    def build_lines(self, file_text: str, context: EnclosingContext, combined: Hunk) -> List[str]:
        """Same as build(), returning the list of output lines."""
        trimmed = trim_hunk(combined)
        file_lines = split_file_lines(file_text)
        scope_lines = file_lines[context.start_line - 1:context.end_line]

        injection_idx = combined.new_start - context.start_line + combined.first_edit_index
        if injection_idx < 0:
            raise ValueError(
                f"Edits of {combined.header} start before scope {context.key}"
            )

        drop_count = sum(1 for line in trimmed.lines if line.type != 'removed')
        scope_lines[injection_idx:injection_idx + drop_count] = trimmed.raw_lines

        logger.debug(
            f"Injected {len(trimmed.lines)} lines into {context.node_type} "
            f"{context.key} at offset {injection_idx}"
        )
        return [combined.header] + scope_lines
