"""
JavaScript / TypeScript Language Profiles

Scope node types for the tree-sitter JavaScript, TypeScript and TSX grammars.
"""

from tree_sitter import Language

from .base import LanguageProfile


JS_DEFINITION_TYPES = frozenset({
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'arrow_function',
    'method_definition',
    'class_declaration',
    'class',
})

JS_BLOCK_TYPES = frozenset({
    'if_statement',
    'for_statement',
    'for_in_statement',
    'while_statement',
    'do_statement',
    'try_statement',
    'catch_clause',
    'switch_statement',
})

TS_DEFINITION_TYPES = JS_DEFINITION_TYPES | frozenset({
    'interface_declaration',
    'abstract_class_declaration',
    'enum_declaration',
})


def _load_javascript():
    import tree_sitter_javascript
    return Language(tree_sitter_javascript.language())


def _load_typescript():
    import tree_sitter_typescript
    return Language(tree_sitter_typescript.language_typescript())


def _load_tsx():
    import tree_sitter_typescript
    return Language(tree_sitter_typescript.language_tsx())


JAVASCRIPT_PROFILE = LanguageProfile(
    name="javascript",
    display_name="JavaScript",
    load_language=_load_javascript,
    definition_types=JS_DEFINITION_TYPES,
    block_types=JS_BLOCK_TYPES,
)

TYPESCRIPT_PROFILE = LanguageProfile(
    name="typescript",
    display_name="TypeScript",
    load_language=_load_typescript,
    definition_types=TS_DEFINITION_TYPES,
    block_types=JS_BLOCK_TYPES,
)

TSX_PROFILE = LanguageProfile(
    name="tsx",
    display_name="TSX",
    load_language=_load_tsx,
    definition_types=TS_DEFINITION_TYPES,
    block_types=JS_BLOCK_TYPES,
)
