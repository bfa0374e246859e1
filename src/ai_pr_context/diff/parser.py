"""
Unified Diff Parser

Parses unified diff text (git output or GitHub ``patch`` fields) into
structured patches and hunks for context extraction.
"""

import re
import logging
from typing import List, Optional, Tuple

from ..models.patch import DiffLine, Hunk, Patch, PatchSet


logger = logging.getLogger(__name__)


class MalformedDiffError(Exception):
    """Diff text could not be parsed into headers and hunks"""
    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class UnifiedDiffParser:
    """
    Parser for unified diff text.

    Accepts full git diffs (``diff --git`` / ``---`` / ``+++`` headers) as well
    as bare GitHub patches that start directly with a hunk header. Hunk bodies
    are consumed until the counts declared in the header are satisfied; a body
    cut short by the end of input or the next header keeps the lines seen and
    takes its counts from them.
    """

    def __init__(self):
        """Initialize unified diff parser."""
        self.hunk_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.git_header_pattern = re.compile(r'^diff --git (?:"?a/)?(\S+?)"? (?:"?b/)?(\S+?)"?$')

    def parse(self, diff_text: str) -> PatchSet:
        """
        Parse diff text into a PatchSet.

        Args:
            diff_text: Unified diff text

        Returns:
            Immutable PatchSet with one Patch per file section

        Raises:
            MalformedDiffError: If no hunk can be parsed or a hunk is inconsistent
        """
        if not diff_text or not diff_text.strip():
            raise MalformedDiffError("Diff text is empty")

        lines, delimiters = self._split_lines(diff_text)
        patches: List[Patch] = []
        current: Optional[Patch] = None
        i = 0

        while i < len(lines):
            line = lines[i]

            if line.startswith('diff --git ') or line.startswith('Index: '):
                current = Patch()
                match = self.git_header_pattern.match(line)
                if match:
                    current.old_filename = match.group(1)
                    current.new_filename = match.group(2)
                patches.append(current)
                i += 1
                continue

            if line.startswith('--- ') and i + 1 < len(lines) and lines[i + 1].startswith('+++ '):
                # A second file header without a preceding "diff --git" opens a new patch
                if current is None or current.hunks or current.old_header is not None:
                    current = Patch()
                    patches.append(current)
                current.old_header = line[4:]
                current.new_header = lines[i + 1][4:]
                current.old_filename = self._strip_prefix(line[4:]) or current.old_filename
                current.new_filename = self._strip_prefix(lines[i + 1][4:]) or current.new_filename
                i += 2
                continue

            if line.startswith('@@'):
                if current is None:
                    current = Patch()
                    patches.append(current)
                hunk, i = self._parse_hunk(lines, delimiters, i)
                current.hunks.append(hunk)
                continue

            # index lines, mode lines, binary notices and other headers
            i += 1

        hunk_count = sum(len(patch.hunks) for patch in patches)
        if hunk_count == 0:
            raise MalformedDiffError("Diff contains no hunks")

        logger.debug(f"Parsed {len(patches)} patches with {hunk_count} hunks")
        return PatchSet(patches=tuple(patches))

    def _parse_hunk(self, lines: List[str], delimiters: List[str], index: int) -> Tuple[Hunk, int]:
        """
        Parse one hunk starting at its header line.

        Args:
            lines: All diff lines without delimiters
            delimiters: Line delimiters parallel to lines
            index: Index of the hunk header

        Returns:
            Tuple of (parsed Hunk, index of the first line after the hunk)
        """
        header_match = self.hunk_header_pattern.match(lines[index])
        if not header_match:
            raise MalformedDiffError(f"Unknown hunk header {lines[index]!r}", line_number=index + 1)

        old_start = int(header_match.group(1))
        old_lines = int(header_match.group(2) or 1)
        new_start = int(header_match.group(3))
        new_lines = int(header_match.group(4) or 1)

        # A zero-length range names the line *before* the change
        if old_lines == 0:
            old_start += 1
        if new_lines == 0:
            new_start += 1

        hunk = Hunk(
            old_start=old_start,
            old_lines=old_lines,
            new_start=new_start,
            new_lines=new_lines,
        )

        old_seen = 0
        new_seen = 0
        i = index + 1
        while i < len(lines) and (
            old_seen < old_lines or new_seen < new_lines or lines[i].startswith('\\')
        ):
            line = lines[i]
            if line.startswith('\\'):
                # "\ No newline at end of file"
                i += 1
                continue
            if self._starts_section(lines, i):
                break

            marker = line[:1] if line else ' '
            if marker == ' ':
                line_type = 'context'
                old_seen += 1
                new_seen += 1
            elif marker == '+':
                line_type = 'added'
                new_seen += 1
            elif marker == '-':
                line_type = 'removed'
                old_seen += 1
            else:
                raise MalformedDiffError(f"Unknown line {line!r} inside hunk", line_number=i + 1)

            if old_seen > old_lines or new_seen > new_lines:
                raise MalformedDiffError(
                    f"Hunk body overruns its header counts "
                    f"(expected -{old_lines} +{new_lines}, got -{old_seen} +{new_seen})",
                    line_number=i + 1,
                )

            hunk.lines.append(DiffLine(line_type, line[1:]))
            hunk.line_delimiters.append(delimiters[i])
            i += 1

        if (old_seen, new_seen) != (old_lines, new_lines):
            # Short body, e.g. a stripped patch without its trailing blank context
            logger.debug(
                f"Hunk at line {index + 1} ended early "
                f"(expected -{old_lines} +{new_lines}, got -{old_seen} +{new_seen})"
            )
            hunk.old_lines, hunk.new_lines = hunk.counted_lines()

        return hunk, i

    def _starts_section(self, lines: List[str], index: int) -> bool:
        """Check whether a line opens a new hunk or file section."""
        line = lines[index]
        if line.startswith('@@') or line.startswith('diff --git ') or line.startswith('Index: '):
            return True
        return (
            line.startswith('--- ')
            and index + 1 < len(lines)
            and lines[index + 1].startswith('+++ ')
        )

    def _split_lines(self, diff_text: str) -> Tuple[List[str], List[str]]:
        """Split diff text into lines and their delimiters."""
        pieces = diff_text.split('\n')
        if pieces and pieces[-1] == '':
            pieces.pop()

        lines = []
        delimiters = []
        for piece in pieces:
            if piece.endswith('\r'):
                lines.append(piece[:-1])
                delimiters.append('\r\n')
            else:
                lines.append(piece)
                delimiters.append('\n')
        return lines, delimiters

    def _strip_prefix(self, path: str) -> Optional[str]:
        path = path.split('\t', 1)[0].strip()
        if path in ('/dev/null', 'dev/null'):
            return None
        if path.startswith('a/') or path.startswith('b/'):
            path = path[2:]
        return path or None


_default_parser = UnifiedDiffParser()


def parse_patch(diff_text: str) -> PatchSet:
    """Parse unified diff text with the shared parser instance."""
    return _default_parser.parse(diff_text)
