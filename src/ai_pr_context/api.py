"""
Main Context API

Main interface that turns the changed files of a pull request into
scope-aware review context, one file per worker thread.
"""

import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Union
from datetime import datetime
from dataclasses import dataclass, field

from .config import AppConfig, get_config
from .context.strategy import StrategySelector
from .languages.base import ParseFailure
from .languages.registry import get_parser_for_extension
from .models.context import ContextStrategy, FileContext, PRFile, PRFileRequest, ValidityResult


logger = logging.getLogger(__name__)


FileInput = Union[PRFile, PRFileRequest, Dict]


@dataclass
class ContextResult:
    """Result of context generation for a batch of files."""
    result_id: str
    status: str
    file_contexts: List[FileContext]
    processing_time: float
    metadata: Dict
    created_at: datetime = field(default_factory=datetime.now)

    def to_prompt(self) -> str:
        """Join every file context into one prompt section."""
        return "\n\n".join(fc.content for fc in self.file_contexts)


class ContextAPI:
    """
    Main Context API interface.

    Orchestrates context generation:
    1. Validate incoming file payloads
    2. Dispatch each file to the strategy selector on a thread pool
    3. Collect per-file contexts in input order with summary metadata
    """

    def __init__(self, config: Optional[AppConfig] = None):
        """
        Initialize Context API.

        Args:
            config: Optional configuration object
        """
        self.config = config or get_config()
        self.config.validate()

        logger.info("Initializing Context API components...")
        self.selector = StrategySelector.from_config(self.config)
        logger.info("Context API initialized successfully")

    async def generate_contexts(self, files: Sequence[FileInput]) -> ContextResult:
        """
        Generate review context for every changed file.

        Args:
            files: PRFile objects, PRFileRequest models or plain dicts

        Returns:
            ContextResult with one FileContext per input file
        """
        start_time = datetime.now()
        result_id = f"context_{int(start_time.timestamp() * 1000)}"

        logger.info(f"Starting context generation: {result_id} ({len(files)} files)")

        try:
            pr_files = [self._to_pr_file(item) for item in files]

            loop = asyncio.get_running_loop()
            with ThreadPoolExecutor(max_workers=self.config.context.max_workers) as executor:
                file_contexts = await asyncio.gather(*[
                    loop.run_in_executor(executor, self.build_file_context, pr_file)
                    for pr_file in pr_files
                ])

            processing_time = (datetime.now() - start_time).total_seconds()
            result = ContextResult(
                result_id=result_id,
                status="completed",
                file_contexts=list(file_contexts),
                processing_time=processing_time,
                metadata=self._create_metadata(file_contexts),
                created_at=start_time,
            )

            logger.info(f"Context generation completed: {result_id} ({processing_time:.2f}s)")
            return result

        except Exception as e:
            logger.error(f"Context generation failed: {result_id} - {e}")

            processing_time = (datetime.now() - start_time).total_seconds()
            return ContextResult(
                result_id=result_id,
                status="failed",
                file_contexts=[],
                processing_time=processing_time,
                metadata={"error": str(e)},
                created_at=start_time,
            )

    def generate_contexts_sync(self, files: Sequence[FileInput]) -> ContextResult:
        """Synchronous wrapper around generate_contexts."""
        return asyncio.run(self.generate_contexts(files))

    def build_file_context(self, pr_file: PRFile) -> FileContext:
        """
        Build context for a single file.

        A failure in one file never affects the others; the worst case is
        the raw patch under the file heading.
        """
        try:
            return self.selector.smarter_context(pr_file)
        except Exception as e:
            logger.error(f"Context strategies failed for {pr_file.filename}: {e}")
            result = self.selector.raw_patch(pr_file)
            result.error = str(e)
            return result

    def check_validity(self, filename: str, text: str) -> ValidityResult:
        """
        Check whether code parses cleanly with the file's grammar.

        Args:
            filename: Path used to pick the language
            text: Source text to check

        Returns:
            ValidityResult (valid when no parser exists for the extension)
        """
        resolver = get_parser_for_extension(filename, self.config.parsers.enabled_languages)
        if resolver is None:
            return ValidityResult(valid=True, error=f"No parser available for {filename}")
        try:
            return resolver.check_validity(text)
        except ParseFailure as e:
            return ValidityResult(valid=False, error=str(e))

    def _to_pr_file(self, item: FileInput) -> PRFile:
        if isinstance(item, PRFile):
            return item
        if isinstance(item, PRFileRequest):
            return item.to_pr_file()
        return PRFileRequest(**item).to_pr_file()

    def _create_metadata(self, file_contexts: Sequence[FileContext]) -> Dict:
        """Create summary metadata for a batch."""
        strategy_counts = {strategy.value: 0 for strategy in ContextStrategy}
        for fc in file_contexts:
            strategy_counts[fc.strategy.value] += 1

        return {
            "files_processed": len(file_contexts),
            "strategies": strategy_counts,
            "scope_blocks": sum(fc.scope_blocks for fc in file_contexts),
            "fallback_blocks": sum(fc.fallback_blocks for fc in file_contexts),
            "estimated_tokens": sum(fc.estimated_tokens for fc in file_contexts),
            "files_with_errors": [fc.filename for fc in file_contexts if fc.error],
        }
