"""
Python Language Profile

Scope node types for the tree-sitter Python grammar.
"""

from tree_sitter import Language

from .base import LanguageProfile


def _load_python():
    import tree_sitter_python
    return Language(tree_sitter_python.language())


PYTHON_PROFILE = LanguageProfile(
    name="python",
    display_name="Python",
    load_language=_load_python,
    definition_types=frozenset({
        'function_definition',
        'class_definition',
        'decorated_definition',
    }),
    block_types=frozenset({
        'if_statement',
        'for_statement',
        'while_statement',
        'try_statement',
        'except_clause',
        'with_statement',
        'match_statement',
    }),
    wrapper_types=frozenset({'decorated_definition'}),
)
