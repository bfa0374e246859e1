"""
Resolver Registry

Table-driven lookup from file extension to syntax context resolver.
Unknown extensions resolve to None rather than raising.
"""

import logging
from typing import Dict, Iterable, Optional

from .base import GrammarCache, LanguageProfile, SyntaxContextResolver, TreeSitterContextResolver
from .javascript import JAVASCRIPT_PROFILE, TSX_PROFILE, TYPESCRIPT_PROFILE
from .python import PYTHON_PROFILE


logger = logging.getLogger(__name__)


LANGUAGE_PROFILES: Dict[str, LanguageProfile] = {
    profile.name: profile
    for profile in (PYTHON_PROFILE, JAVASCRIPT_PROFILE, TYPESCRIPT_PROFILE, TSX_PROFILE)
}

EXTENSION_LANGUAGES: Dict[str, str] = {
    '.py': 'python',
    '.pyi': 'python',
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.mjs': 'javascript',
    '.cjs': 'javascript',
    '.ts': 'typescript',
    '.mts': 'typescript',
    '.cts': 'typescript',
    '.tsx': 'tsx',
}


def get_file_extension(filename: str) -> Optional[str]:
    """
    Get lowercase extension (with dot) from a file path.

    Args:
        filename: Path to file

    Returns:
        Extension such as '.py', or None
    """
    base = filename.rsplit('/', 1)[-1]
    if '.' not in base:
        return None
    return '.' + base.rsplit('.', 1)[-1].lower()


def detect_language(filename: str, enabled_languages: Optional[Iterable[str]] = None) -> Optional[str]:
    """Map a file path to an enabled language name."""
    extension = get_file_extension(filename)
    if extension is None:
        return None

    language = EXTENSION_LANGUAGES.get(extension)
    if language is None:
        return None
    if enabled_languages is not None and language not in set(enabled_languages):
        return None
    return language


def get_parser_for_extension(
    filename: str,
    enabled_languages: Optional[Iterable[str]] = None,
    cache: Optional[GrammarCache] = None,
) -> Optional[SyntaxContextResolver]:
    """
    Select a syntax context resolver for a file.

    Args:
        filename: Path of the changed file
        enabled_languages: Languages allowed (None = all known)
        cache: Grammar cache override

    Returns:
        Resolver for the file's language, or None if unsupported
    """
    language = detect_language(filename, enabled_languages)
    if language is None:
        logger.debug(f"No parser registered for {filename}")
        return None
    return TreeSitterContextResolver(LANGUAGE_PROFILES[language], cache=cache)
