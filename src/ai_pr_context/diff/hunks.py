"""
Hunk Operations

Trimming hunks down to their edit span and merging hunks that belong
to the same scope into one contiguous hunk.
"""

import logging
from typing import List, Sequence, Tuple

from ..models.patch import DiffLine, Hunk
from .parser import MalformedDiffError


logger = logging.getLogger(__name__)


def split_file_lines(file_text: str) -> List[str]:
    """
    Split file text into lines without their line endings.

    Only ``\\n`` breaks a line (matching parser rows); a ``\\r`` left by a
    CRLF ending is dropped.
    """
    return [line[:-1] if line.endswith('\r') else line for line in file_text.split('\n')]


def trim_hunk(hunk: Hunk) -> Hunk:
    """
    Reduce a hunk to the span between its first and last edit line.

    Leading lines before the first edit are all context, so both start
    offsets advance by the first-edit index. Line counts are recomputed
    from the remaining lines. Trimming a trimmed hunk returns an equal hunk.

    Args:
        hunk: Hunk to trim

    Returns:
        New trimmed Hunk

    Raises:
        MalformedDiffError: If the hunk has no added or removed lines
    """
    start_idx = hunk.first_edit_index
    if start_idx < 0:
        raise MalformedDiffError(
            f"Hunk {hunk.header} has no added or removed lines"
        )
    end_idx = hunk.last_edit_index

    trimmed = Hunk(
        old_start=hunk.old_start + start_idx,
        old_lines=0,
        new_start=hunk.new_start + start_idx,
        new_lines=0,
        lines=hunk.lines[start_idx:end_idx + 1],
        line_delimiters=hunk.line_delimiters[start_idx:end_idx + 1],
    )
    trimmed.old_lines, trimmed.new_lines = trimmed.counted_lines()
    return trimmed


def edit_span(trimmed: Hunk) -> Tuple[int, int]:
    """1-indexed inclusive new-file span covered by a trimmed hunk."""
    start = trimmed.new_start
    end = start + max(trimmed.new_lines, 1) - 1
    return start, end


def combine_hunks(file_text: str, hunks: Sequence[Hunk]) -> Hunk:
    """
    Merge hunks of one scope into a single contiguous hunk.

    Hunks are ordered by new-file start. Any unchanged new-file lines
    between two hunks are spliced in as context lines, so the combined
    hunk covers one gapless region of the new file.

    Gap lines count on both the old and the new side, so the combined
    header is ``@@ -4,20 +4,20 @@`` where a new-side-only gap count
    would give ``@@ -4,14 +4,20 @@``; the header always agrees with its lines.

    Args:
        file_text: Full new-file text
        hunks: Hunks grouped under the same scope

    Returns:
        Combined Hunk

    Raises:
        ValueError: If no hunks are given
    """
    if not hunks:
        raise ValueError("Overlapping hunks are empty, this should never happen.")

    sorted_hunks: List[Hunk] = sorted(hunks, key=lambda h: h.new_start)
    file_lines = split_file_lines(file_text)

    combined = sorted_hunks[0].copy()
    last_hunk_end = combined.new_start + combined.new_lines

    for hunk in sorted_hunks[1:]:
        if hunk.new_start > last_hunk_end:
            gap_lines = file_lines[last_hunk_end - 1:hunk.new_start - 1]
            combined.lines.extend(DiffLine('context', line) for line in gap_lines)
            combined.line_delimiters.extend('\n' for _ in gap_lines)
            # gap lines are unchanged, so they count on both sides
            combined.new_lines += len(gap_lines)
            combined.old_lines += len(gap_lines)

        combined.old_lines += hunk.old_lines
        combined.new_lines += hunk.new_lines
        combined.lines.extend(hunk.lines)
        combined.line_delimiters.extend(hunk.line_delimiters)

        last_hunk_end = max(last_hunk_end, hunk.new_start + hunk.new_lines)

    logger.debug(f"Combined {len(sorted_hunks)} hunks into {combined.header}")
    return combined
