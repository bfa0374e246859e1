"""
Language Support Layer

This module provides the syntax context resolver contract and
tree-sitter backed implementations for supported languages.
"""

from .base import (
    GrammarCache,
    LanguageProfile,
    ParseFailure,
    SyntaxContextResolver,
    TreeSitterContextResolver,
    grammar_cache,
    reset_grammar_cache,
)
from .registry import (
    EXTENSION_LANGUAGES,
    LANGUAGE_PROFILES,
    detect_language,
    get_file_extension,
    get_parser_for_extension,
)

__all__ = [
    'GrammarCache',
    'LanguageProfile',
    'ParseFailure',
    'SyntaxContextResolver',
    'TreeSitterContextResolver',
    'grammar_cache',
    'reset_grammar_cache',
    'EXTENSION_LANGUAGES',
    'LANGUAGE_PROFILES',
    'detect_language',
    'get_file_extension',
    'get_parser_for_extension',
]
