"""
Fallback Expander

Fixed-window context for hunks without a resolvable scope, taken
from the pre-change file.
"""

from typing import List

from ..diff.hunks import split_file_lines
from ..models.patch import Hunk


DEFAULT_LINES_ABOVE = 5
DEFAULT_LINES_BELOW = 5


class FallbackExpander:
    """Expands a hunk by a fixed number of old-file lines on each side."""

    def __init__(self, lines_above: int = DEFAULT_LINES_ABOVE, lines_below: int = DEFAULT_LINES_BELOW):
        if lines_above < 0 or lines_below < 0:
            raise ValueError("Margins must be non-negative")
        self.lines_above = lines_above
        self.lines_below = lines_below

    def expand(self, old_text: str, hunk: Hunk) -> str:
        """
        Render a hunk with surrounding old-file lines.

        Args:
            old_text: Pre-change file text
            hunk: Hunk to expand

        Returns:
            Leading lines, hunk header, hunk lines and trailing lines joined by newlines

        Raises:
            ValueError: If the hunk's old range lies outside the file
        """
        file_lines = split_file_lines(old_text)
        hunk_begin = hunk.old_start - 1
        hunk_end = hunk_begin + hunk.old_lines
        if hunk_begin < 0 or hunk_end > len(file_lines):
            raise ValueError(
                f"Hunk {hunk.header} lies outside the {len(file_lines)}-line file"
            )

        start = max(0, hunk_begin - self.lines_above)
        end = min(len(file_lines), hunk_end + self.lines_below)

        expansion: List[str] = file_lines[start:hunk_begin]
        expansion.append(hunk.header)
        for line in hunk.raw_lines:
            # margins can overlap the hunk body when they are small
            if line not in expansion:
                expansion.append(line)
        expansion.extend(file_lines[hunk_end:end])

        return '\n'.join(expansion)
