"""
Unit tests for the unified diff parser and hunk operations.
"""

import pytest

from ai_pr_context.diff.parser import MalformedDiffError, UnifiedDiffParser, parse_patch
from ai_pr_context.diff.hunks import combine_hunks, edit_span, split_file_lines, trim_hunk
from ai_pr_context.models.patch import DiffLine, Hunk, PatchSet


GIT_DIFF = """diff --git a/src/app.py b/src/app.py
index 83db48f..bf269f4 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,4 +1,4 @@ import os
 import os
-import sys
+import re

 def main():
@@ -10,3 +10,4 @@ def main():
     run()
+    stop()
     return 0

diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-old title
+new title
"""


def make_hunk(new_start, lines, old_start=None):
    """Build a hunk from marker-prefixed strings."""
    types = {' ': 'context', '+': 'added', '-': 'removed'}
    diff_lines = [DiffLine(types[raw[0]], raw[1:]) for raw in lines]
    hunk = Hunk(
        old_start=old_start if old_start is not None else new_start,
        old_lines=0,
        new_start=new_start,
        new_lines=0,
        lines=diff_lines,
        line_delimiters=['\n'] * len(diff_lines),
    )
    hunk.old_lines, hunk.new_lines = hunk.counted_lines()
    return hunk


class TestUnifiedDiffParser:
    """Unit tests for UnifiedDiffParser class."""

    def setup_method(self):
        self.parser = UnifiedDiffParser()

    def test_parse_git_diff_with_multiple_patches(self):
        """Test parsing a git diff touching two files."""
        patch_set = self.parser.parse(GIT_DIFF)

        assert isinstance(patch_set, PatchSet)
        assert len(patch_set) == 2

        first, second = patch_set.patches
        assert first.old_filename == "src/app.py"
        assert first.new_filename == "src/app.py"
        assert len(first.hunks) == 2
        assert second.filename == "README.md"
        assert len(second.hunks) == 1

    def test_hunk_coordinates_and_lines(self):
        """Test hunk header values and tagged lines."""
        hunk = self.parser.parse(GIT_DIFF).patches[0].hunks[0]

        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 4, 1, 4)
        assert [line.type for line in hunk.lines] == ['context', 'removed', 'added', 'context', 'context']
        assert hunk.raw_lines == [' import os', '-import sys', '+import re', ' ', ' def main():']
        assert hunk.line_delimiters == ['\n'] * 5

    def test_omitted_counts_default_to_one(self):
        """Test '@@ -1 +1 @@' headers."""
        hunk = self.parser.parse(GIT_DIFF).patches[1].hunks[0]

        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 1, 1, 1)

    def test_bare_github_patch(self):
        """Test a GitHub-style patch without file headers."""
        patch = "@@ -1,3 +1,3 @@\n line1\n-old line\n+new line\n line3"
        patch_set = parse_patch(patch)

        assert len(patch_set) == 1
        assert patch_set.patches[0].filename is None
        assert len(patch_set.hunks) == 1
        assert patch_set.hunks[0].added_count == 1
        assert patch_set.hunks[0].removed_count == 1

    def test_zero_length_range_points_after_previous_line(self):
        """Test that an empty old range is shifted to the inserted position."""
        patch = "@@ -3,0 +4,2 @@\n+added one\n+added two\n"
        hunk = parse_patch(patch).hunks[0]

        assert hunk.old_start == 4
        assert hunk.old_lines == 0
        assert hunk.new_start == 4
        assert hunk.new_lines == 2

    def test_new_file_patch(self):
        """Test a patch creating a file."""
        patch = (
            "--- /dev/null\n"
            "+++ b/new.py\n"
            "@@ -0,0 +1,2 @@\n"
            "+def f():\n"
            "+    return 1\n"
        )
        patch_set = parse_patch(patch)
        patch_obj = patch_set.patches[0]

        assert patch_obj.old_filename is None
        assert patch_obj.new_filename == "new.py"
        assert patch_obj.hunks[0].old_start == 1
        assert patch_obj.hunks[0].new_start == 1

    def test_no_newline_marker_is_skipped(self):
        """Test '\\ No newline at end of file' handling."""
        patch = "@@ -1,2 +1,2 @@\n a\n-b\n\\ No newline at end of file\n+c\n\\ No newline at end of file\n"
        hunk = parse_patch(patch).hunks[0]

        assert hunk.raw_lines == [' a', '-b', '+c']

    def test_empty_line_inside_hunk_is_context(self):
        """Test that a bare empty line inside a hunk counts as context."""
        patch = "@@ -1,3 +1,3 @@\n a\n\n-b\n+c\n"
        hunk = parse_patch(patch).hunks[0]

        assert [line.type for line in hunk.lines] == ['context', 'context', 'removed', 'added']
        assert hunk.lines[1].content == ''

    def test_crlf_delimiters_are_recorded(self):
        """Test CRLF line endings."""
        patch = "@@ -1,2 +1,2 @@\r\n a\r\n-b\r\n+c\r\n"
        hunk = parse_patch(patch).hunks[0]

        assert hunk.raw_lines == [' a', '-b', '+c']
        assert hunk.line_delimiters == ['\r\n', '\r\n', '\r\n']

    def test_removed_line_resembling_file_header(self):
        """Test that '--- ' inside a hunk body is a removed line."""
        patch = "@@ -1,2 +1,1 @@\n keep\n--- not a header\n"
        hunk = parse_patch(patch).hunks[0]

        assert hunk.lines[1].type == 'removed'
        assert hunk.lines[1].content == '-- not a header'

    @pytest.mark.parametrize("text", [
        "",
        "   \n",
        "just some text\nwithout hunks\n",
        "diff --git a/x b/x\nindex 1..2 100644\n",
    ])
    def test_text_without_hunks_is_malformed(self, text):
        """Test MalformedDiffError for diffs without hunks."""
        with pytest.raises(MalformedDiffError):
            parse_patch(text)

    def test_stripped_patch_without_trailing_blank_context(self):
        """Test a patch whose trailing blank context lines were stripped."""
        patch = (
            "--- a/m.py\n"
            "+++ b/m.py\n"
            "@@ -1,5 +1,5 @@\n"
            " def f(a):\n"
            "-    return a\n"
            "+    return a + 1\n"
            " \n"
            " \n"
        ).strip()

        hunk = parse_patch(patch).hunks[0]

        assert hunk.raw_lines == [' def f(a):', '-    return a', '+    return a + 1']
        assert (hunk.old_start, hunk.old_lines, hunk.new_start, hunk.new_lines) == (1, 2, 1, 2)

    def test_short_hunk_closed_by_next_header(self):
        """Test a short hunk body followed by another hunk."""
        patch_set = parse_patch("@@ -1,3 +1,3 @@\n a\n-b\n+c\n@@ -10,2 +10,2 @@\n-x\n+y\n")

        first, second = patch_set.hunks
        assert (first.old_lines, first.new_lines) == (2, 2)
        assert first.raw_lines == [' a', '-b', '+c']
        assert (second.old_start, second.old_lines, second.new_lines) == (10, 1, 1)
        assert second.raw_lines == ['-x', '+y']

    def test_short_hunk_closed_by_next_file(self):
        """Test a short hunk body followed by another file section."""
        patch = (
            "diff --git a/a.py b/a.py\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1,4 +1,4 @@\n"
            "-a\n"
            "+b\n"
            "diff --git a/c.py b/c.py\n"
            "--- a/c.py\n"
            "+++ b/c.py\n"
            "@@ -1 +1 @@\n"
            "-c\n"
            "+d\n"
        )

        patch_set = parse_patch(patch)

        assert [p.filename for p in patch_set] == ["a.py", "c.py"]
        assert patch_set.patches[0].hunks[0].raw_lines == ['-a', '+b']

    def test_count_overrun_is_malformed(self):
        """Test a hunk body with more removed lines than declared."""
        with pytest.raises(MalformedDiffError) as exc_info:
            parse_patch("@@ -1,1 +1,1 @@\n-a\n-b\n+c\n")

        assert exc_info.value.line_number == 3

    def test_unknown_line_inside_hunk_is_malformed(self):
        """Test a stray line inside a hunk body."""
        with pytest.raises(MalformedDiffError):
            parse_patch("@@ -1,2 +1,2 @@\n a\n*b\n+c\n")

    def test_bad_hunk_header_is_malformed(self):
        """Test an unparsable hunk header."""
        with pytest.raises(MalformedDiffError):
            parse_patch("@@ -x +y @@\n a\n")


class TestTrimHunk:
    """Unit tests for trim_hunk."""

    def test_trim_drops_leading_and_trailing_context(self):
        hunk = make_hunk(8, [' a', ' b', ' c', '-d', '+D', ' e', '+f', ' g', ' h'])

        trimmed = trim_hunk(hunk)

        assert trimmed.raw_lines == ['-d', '+D', ' e', '+f']
        assert trimmed.new_start == 11
        assert trimmed.old_start == 11
        assert trimmed.old_lines == 2
        assert trimmed.new_lines == 3

    def test_trim_keeps_original_untouched(self):
        hunk = make_hunk(1, [' a', '+b', ' c'])
        before = hunk.copy()

        trim_hunk(hunk)

        assert hunk == before

    def test_trim_is_idempotent(self):
        hunk = make_hunk(3, [' a', '-b', ' c', '+d', ' e'])

        once = trim_hunk(hunk)
        twice = trim_hunk(once)

        assert once == twice

    def test_trim_without_edits_raises(self):
        hunk = make_hunk(1, [' a', ' b'])

        with pytest.raises(MalformedDiffError):
            trim_hunk(hunk)

    def test_edit_span_for_pure_deletion(self):
        trimmed = trim_hunk(make_hunk(5, [' a', '-b', ' c']))

        assert edit_span(trimmed) == (6, 6)

    def test_edit_span_covers_context_between_edits(self):
        trimmed = trim_hunk(make_hunk(5, [' a', '+b', ' c', ' d', '+e', ' f']))

        assert edit_span(trimmed) == (6, 9)


class TestCombineHunks:
    """Unit tests for combine_hunks."""

    def setup_method(self):
        self.file_text = "\n".join(f"line {i}" for i in range(1, 31))

    def test_gap_is_filled_from_new_file(self):
        first = make_hunk(2, [' line 2', '+line 3', ' line 4'])
        second = make_hunk(8, [' line 8', '+line 9', ' line 10'])

        combined = combine_hunks(self.file_text, [second, first])

        assert combined.new_start == 2
        assert combined.raw_lines == [
            ' line 2', '+line 3', ' line 4',
            ' line 5', ' line 6', ' line 7',
            ' line 8', '+line 9', ' line 10',
        ]
        assert combined.new_lines == 9
        assert combined.old_lines == 7
        assert combined.header == "@@ -2,7 +2,9 @@"
        assert len(combined.line_delimiters) == len(combined.lines)

    def test_adjacent_hunks_need_no_gap(self):
        first = make_hunk(2, [' line 2', '+line 3'])
        second = make_hunk(4, [' line 4', '+line 5'])

        combined = combine_hunks(self.file_text, [first, second])

        assert len(combined.lines) == 4
        assert combined.new_lines == 4

    def test_single_hunk_is_copied(self):
        hunk = make_hunk(2, [' line 2', '+line 3'])

        combined = combine_hunks(self.file_text, [hunk])
        combined.lines.append(DiffLine('context', 'extra'))

        assert len(hunk.lines) == 2

    def test_empty_input_raises(self):
        with pytest.raises(ValueError):
            combine_hunks(self.file_text, [])

    def test_gap_lines_from_crlf_file_have_no_carriage_return(self):
        crlf_text = self.file_text.replace('\n', '\r\n')
        first = make_hunk(2, [' line 2', '+line 3'])
        second = make_hunk(6, [' line 6', '+line 7'])

        combined = combine_hunks(crlf_text, [first, second])

        assert combined.raw_lines[2:4] == [' line 4', ' line 5']

    def test_split_file_lines(self):
        assert split_file_lines("a\r\nb\nc\r\n") == ["a", "b", "c", ""]
        assert split_file_lines("a\rb") == ["a\rb"]
