"""
Syntax Context Resolver

Capability contract for per-language scope lookup plus the tree-sitter
backed resolver that serves every supported language from a profile.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Protocol, Tuple

from tree_sitter import Node, Parser, Tree

from ..models.context import EnclosingContext, ScopeKind, ValidityResult


logger = logging.getLogger(__name__)


class ParseFailure(Exception):
    """Grammar could not be loaded or rejected the input outright"""
    def __init__(self, message: str, language: Optional[str] = None):
        super().__init__(message)
        self.language = language


class SyntaxContextResolver(Protocol):
    """
    Capability every supported language provides.

    Rows are 0-indexed parser rows; returned contexts carry 1-indexed
    file lines.
    """

    language: str

    def find_enclosing_context(
        self, file_text: str, row_start: int, row_end: int
    ) -> Optional[EnclosingContext]:
        ...

    def check_validity(self, file_text: str) -> ValidityResult:
        ...


@dataclass(frozen=True)
class LanguageProfile:
    """Grammar loader and scope node types for one language."""
    name: str
    display_name: str
    load_language: Callable[[], Any]
    definition_types: FrozenSet[str]
    block_types: FrozenSet[str]
    # nodes that attach leading lines (decorators) to a definition
    wrapper_types: FrozenSet[str] = frozenset()


class GrammarCache:
    """
    Per-language memo of loaded tree-sitter grammars.

    The first caller for a language loads it under that language's lock;
    concurrent callers wait on the same lock and reuse the result.
    """

    def __init__(self):
        self._languages: Dict[str, Any] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self.load_counts: Dict[str, int] = {}

    def get(self, profile: LanguageProfile) -> Any:
        """
        Return the grammar for a profile, loading it once.

        Raises:
            ParseFailure: If the grammar cannot be loaded
        """
        language = self._languages.get(profile.name)
        if language is not None:
            return language

        with self._locks_guard:
            lock = self._locks.setdefault(profile.name, threading.Lock())

        with lock:
            language = self._languages.get(profile.name)
            if language is None:
                logger.debug(f"Loading {profile.display_name} grammar")
                try:
                    language = profile.load_language()
                except Exception as e:
                    raise ParseFailure(
                        f"Could not load {profile.display_name} grammar: {e}",
                        language=profile.name,
                    ) from e
                self._languages[profile.name] = language
                self.load_counts[profile.name] = self.load_counts.get(profile.name, 0) + 1
        return language

    def is_loaded(self, name: str) -> bool:
        return name in self._languages

    def reset(self) -> None:
        """Forget every loaded grammar (test hook)."""
        with self._locks_guard:
            self._languages.clear()
            self._locks.clear()
            self.load_counts.clear()


grammar_cache = GrammarCache()


def reset_grammar_cache() -> None:
    """Reset the shared grammar cache."""
    grammar_cache.reset()


class TreeSitterContextResolver:
    """
    Scope resolver backed by a tree-sitter grammar.

    Selection policy: the smallest definition node whose rows contain the
    requested range wins; when no definition contains it, the smallest
    block node does. A node qualifies only if it spans at least two rows
    and its text is not blank. Nodes are visited in pre-order (document
    order), and a later node replaces the current pick only when strictly
    smaller, so among equal sizes the first discovered node wins. A chosen
    definition is widened to an enclosing wrapper node (such as a Python
    ``decorated_definition``) so its decorators stay in the scope.
    """

    def __init__(self, profile: LanguageProfile, cache: Optional[GrammarCache] = None):
        """
        Initialize resolver.

        Args:
            profile: Language profile with grammar loader and node types
            cache: Grammar cache (default: shared module cache)
        """
        self.profile = profile
        self.language = profile.name
        self.cache = cache or grammar_cache

    def find_enclosing_context(
        self, file_text: str, row_start: int, row_end: int
    ) -> Optional[EnclosingContext]:
        """
        Find the smallest scope node containing a row range.

        Args:
            file_text: Full file text
            row_start: First row of the range (0-indexed, inclusive)
            row_end: Last row of the range (0-indexed, inclusive)

        Returns:
            EnclosingContext or None when nothing qualifies

        Raises:
            ParseFailure: If the grammar cannot parse the text
        """
        if row_start > row_end:
            raise ValueError(f"Invalid row range {row_start}-{row_end}")

        source = file_text.encode('utf-8', errors='surrogatepass')
        tree = self._parse(source)

        best_definition: Optional[Tuple[Node, int]] = None
        best_block: Optional[Tuple[Node, int]] = None

        stack: List[Node] = [tree.root_node]
        while stack:
            node = stack.pop()
            start_row = node.start_point[0]
            end_row = node.end_point[0]
            if not (start_row <= row_start and row_end <= end_row):
                # no descendant can contain it either
                continue

            size = end_row - start_row
            if size >= 1 and node.type in self.profile.definition_types:
                if (best_definition is None or size < best_definition[1]) and self._has_text(node, source):
                    best_definition = (node, size)
            elif size >= 1 and node.type in self.profile.block_types:
                if (best_block is None or size < best_block[1]) and self._has_text(node, source):
                    best_block = (node, size)

            stack.extend(reversed(node.children))

        if best_definition is not None:
            return self._to_context(best_definition[0], ScopeKind.DEFINITION, source)
        if best_block is not None:
            return self._to_context(best_block[0], ScopeKind.BLOCK, source)
        return None

    def check_validity(self, file_text: str) -> ValidityResult:
        """
        Check whether text parses without error or missing nodes.

        Args:
            file_text: Full file text

        Returns:
            ValidityResult with a message naming the first error location

        Raises:
            ParseFailure: If the grammar cannot parse the text
        """
        tree = self._parse(file_text.encode('utf-8', errors='surrogatepass'))
        root = tree.root_node
        if not root.has_error:
            return ValidityResult(valid=True, error="")

        error_node = self._first_error_node(root)
        if error_node is None:
            return ValidityResult(valid=False, error=f"Syntax error in {self.profile.display_name} code")

        row, column = error_node.start_point[0], error_node.start_point[1]
        what = f"Missing {error_node.type}" if error_node.is_missing else "Syntax error"
        return ValidityResult(
            valid=False,
            error=f"{what} in {self.profile.display_name} code at line {row + 1}, column {column + 1}",
        )

    def _parse(self, source: bytes) -> Tree:
        language = self.cache.get(self.profile)
        try:
            tree = Parser(language).parse(source)
        except Exception as e:
            raise ParseFailure(
                f"{self.profile.display_name} parser rejected input: {e}",
                language=self.language,
            ) from e
        if tree is None:
            raise ParseFailure(
                f"{self.profile.display_name} parser returned no tree",
                language=self.language,
            )
        return tree

    def _first_error_node(self, root: Node) -> Optional[Node]:
        stack: List[Node] = [root]
        while stack:
            node = stack.pop()
            if node.is_error or node.is_missing:
                return node
            if node.has_error:
                stack.extend(reversed(node.children))
        return None

    def _has_text(self, node: Node, source: bytes) -> bool:
        return bool(self._node_text(node, source).strip())

    def _node_text(self, node: Node, source: bytes) -> str:
        return source[node.start_byte:node.end_byte].decode('utf-8', errors='replace')

    def _to_context(self, node: Node, kind: ScopeKind, source: bytes) -> EnclosingContext:
        if kind == ScopeKind.DEFINITION:
            while node.parent is not None and node.parent.type in self.profile.wrapper_types:
                node = node.parent

        # a wrapper carries the name on its inner definition
        named = node
        while named.type in self.profile.wrapper_types:
            inner = named.child_by_field_name('definition')
            if inner is None:
                break
            named = inner

        name_node = named.child_by_field_name('name')
        return EnclosingContext(
            kind=kind,
            node_type=node.type,
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
            text=self._node_text(node, source),
            name=self._node_text(name_node, source) if name_node is not None else None,
        )
