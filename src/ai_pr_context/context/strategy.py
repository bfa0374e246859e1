"""
Strategy Selector

Per-file entry point: picks a parser by extension and builds scope
contexts, degrading to margin expansion (and finally to the raw patch)
when scope extraction is unavailable or fails.
"""

import logging
from typing import Iterable, List, Optional

from ..diff.hunks import combine_hunks
from ..diff.parser import MalformedDiffError, UnifiedDiffParser
from ..languages.base import GrammarCache, ParseFailure, SyntaxContextResolver
from ..languages.registry import get_parser_for_extension
from ..models.context import ContextStrategy, FileContext, PRFile
from .builder import ScopeContextBuilder
from .expander import DEFAULT_LINES_ABOVE, DEFAULT_LINES_BELOW, FallbackExpander
from .grouper import DEFAULT_SEARCH_MARGIN, ScopeHunkGrouper


logger = logging.getLogger(__name__)


class UnexpectedPipelineError(Exception):
    """Unexpected failure inside the scope pipeline for one file"""
    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class StrategySelector:
    """
    Chooses and runs the context strategy for each changed file.

    Scope contexts are assembled completely before anything is returned,
    so a file yields either its full scope rendering or its full margin
    expansion, never a mix.
    """

    def __init__(
        self,
        search_margin: int = DEFAULT_SEARCH_MARGIN,
        lines_above: int = DEFAULT_LINES_ABOVE,
        lines_below: int = DEFAULT_LINES_BELOW,
        enabled_languages: Optional[Iterable[str]] = None,
        chars_per_token: int = 4,
        grammar_cache: Optional[GrammarCache] = None,
    ):
        """
        Initialize strategy selector.

        Args:
            search_margin: Lines added around each edit span for scope lookup
            lines_above: Old-file lines shown above a fallback hunk
            lines_below: Old-file lines shown below a fallback hunk
            enabled_languages: Languages with scope support (None = all known)
            chars_per_token: Characters per token for size estimates
            grammar_cache: Grammar cache override (default: shared cache)
        """
        self.search_margin = search_margin
        self.enabled_languages = list(enabled_languages) if enabled_languages is not None else None
        self.chars_per_token = chars_per_token
        self.grammar_cache = grammar_cache

        self.diff_parser = UnifiedDiffParser()
        self.expander = FallbackExpander(lines_above=lines_above, lines_below=lines_below)
        self.builder = ScopeContextBuilder()

    @classmethod
    def from_config(cls, config) -> "StrategySelector":
        """Create a selector from an AppConfig."""
        return cls(
            search_margin=config.context.scope_search_margin,
            lines_above=config.context.lines_above,
            lines_below=config.context.lines_below,
            enabled_languages=config.parsers.enabled_languages,
            chars_per_token=config.context.chars_per_token,
        )

    def smarter_context(self, pr_file: PRFile) -> FileContext:
        """
        Build review context for one file with the best available strategy.

        Args:
            pr_file: Changed file with patch and both file versions

        Returns:
            FileContext whose content starts with "## <filename>"
        """
        resolver = get_parser_for_extension(
            pr_file.filename, self.enabled_languages, cache=self.grammar_cache
        )
        if resolver is None:
            logger.info(f"No parser for {pr_file.filename}, using expanded patch strategy")
            return self.expanded_patch(pr_file)

        logger.info(f"Using {resolver.language} scope context for {pr_file.filename}")
        try:
            return self.scope_context(pr_file, resolver)
        except (MalformedDiffError, ParseFailure) as e:
            error = str(e)
        except Exception as e:
            error = str(UnexpectedPipelineError(
                f"Scope context failed for {pr_file.filename}: {e}",
                filename=pr_file.filename,
            ))
            logger.exception(error)

        logger.warning(f"Falling back to expanded patch strategy for {pr_file.filename}: {error}")
        result = self.expanded_patch(pr_file)
        result.error = error
        return result

    def scope_context(self, pr_file: PRFile, resolver: SyntaxContextResolver) -> FileContext:
        """
        Run the scope pipeline for one file.

        Args:
            pr_file: Changed file
            resolver: Syntax context resolver for the file's language

        Returns:
            FileContext with scope blocks first, then fallback blocks
        """
        updated_file = pr_file.current_contents
        patch_set = self.diff_parser.parse(pr_file.patch)
        hunks = patch_set.hunks
        logger.debug(f"Processing {len(hunks)} hunks for {pr_file.filename}")

        grouper = ScopeHunkGrouper(resolver, search_margin=self.search_margin)
        grouping = grouper.group(updated_file, hunks)

        chunks: List[str] = []
        for key, scope_hunks in grouping.scope_hunks.items():
            combined = combine_hunks(updated_file, scope_hunks)
            chunks.append(self.builder.build(updated_file, grouping.scope_nodes[key], combined))
        for hunk in grouping.fallback_hunks:
            chunks.append(self.expander.expand(pr_file.old_contents, hunk))

        return self._file_context(
            pr_file,
            ContextStrategy.SCOPE,
            chunks,
            scope_blocks=len(grouping.scope_hunks),
            fallback_blocks=len(grouping.fallback_hunks),
        )

    def expanded_patch(self, pr_file: PRFile) -> FileContext:
        """
        Expand every hunk by fixed old-file margins.

        Falls back to the raw patch when the patch cannot be parsed.
        """
        try:
            patch_set = self.diff_parser.parse(pr_file.patch)
        except MalformedDiffError as e:
            logger.warning(f"Cannot parse patch for {pr_file.filename}, using raw patch: {e}")
            result = self.raw_patch(pr_file)
            result.error = str(e)
            return result

        chunks = [self.expander.expand(pr_file.old_contents, hunk) for hunk in patch_set.hunks]
        return self._file_context(
            pr_file,
            ContextStrategy.EXPANDED,
            chunks,
            fallback_blocks=len(chunks),
        )

    def raw_patch(self, pr_file: PRFile) -> FileContext:
        """Render the bare patch under the file heading."""
        content = f"## {pr_file.filename}\n\n{pr_file.patch}"
        return FileContext(
            filename=pr_file.filename,
            strategy=ContextStrategy.RAW,
            content=content,
            estimated_tokens=self._estimate_tokens(content),
        )

    def _file_context(
        self,
        pr_file: PRFile,
        strategy: ContextStrategy,
        chunks: List[str],
        scope_blocks: int = 0,
        fallback_blocks: int = 0,
    ) -> FileContext:
        content = f"## {pr_file.filename}\n\n" + "\n\n".join(chunks)
        return FileContext(
            filename=pr_file.filename,
            strategy=strategy,
            content=content,
            scope_blocks=scope_blocks,
            fallback_blocks=fallback_blocks,
            estimated_tokens=self._estimate_tokens(content),
        )

    def _estimate_tokens(self, text: str) -> int:
        """Estimate token count (rough approximation)."""
        return len(text) // max(self.chars_per_token, 1)


_default_selector = StrategySelector()


def smarter_context_patch_strategy(pr_file: PRFile) -> str:
    """Scope-aware context string for a file, with fallbacks."""
    return _default_selector.smarter_context(pr_file).content


def expanded_patch_strategy(pr_file: PRFile) -> str:
    """Margin-expanded context string for a file."""
    return _default_selector.expanded_patch(pr_file).content


def raw_patch_strategy(pr_file: PRFile) -> str:
    """Bare patch under the file heading."""
    return _default_selector.raw_patch(pr_file).content
