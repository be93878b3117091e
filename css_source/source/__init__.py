"""
Source code model: traversal, parent relation, custom property indexes and
``var()`` resolution for one parsed stylesheet.
"""

from .source_code import CSSSourceCode, CustomPropertyUses, Phase, TraversalStep, is_var_function
from .substitution import (
    Lexer, MatchResult, SubstitutedValue, SyntaxMatchError, SyntaxReferenceError,
    is_syntax_match_error, is_syntax_reference_error, replace_variables_in_value,
    substitute_declaration
)
from .visitor_keys import VISITOR_KEYS, NodeShapeError, child_nodes, get_visitor_keys

__all__ = [
    "CSSSourceCode",
    "CustomPropertyUses",
    "Phase",
    "TraversalStep",
    "is_var_function",
    "Lexer",
    "MatchResult",
    "SubstitutedValue",
    "SyntaxMatchError",
    "SyntaxReferenceError",
    "is_syntax_match_error",
    "is_syntax_reference_error",
    "replace_variables_in_value",
    "substitute_declaration",
    "VISITOR_KEYS",
    "NodeShapeError",
    "child_nodes",
    "get_visitor_keys"
]
