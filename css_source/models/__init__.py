"""
Core data models for css-source

Syntax tree nodes, source positions and configuration models.
"""

from .nodes import (
    CSSNode, NodeType, Position, SourceLocation, CUSTOM_PROPERTY_PREFIX,
    is_custom_property_name,
    StyleSheet, Rule, Atrule, AtrulePrelude, Block, Declaration,
    Value, Raw, Function, Parentheses, Brackets, Identifier, Number,
    Dimension, Percentage, Hash, String, Operator,
    SelectorList, Selector, TypeSelector, ClassSelector, IdSelector,
    AttributeSelector, PseudoClassSelector, PseudoElementSelector,
    NestingSelector, Combinator, Comment
)
from .config import LanguageOptions, GlobalSettings

__all__ = [
    # Nodes
    "CSSNode",
    "NodeType",
    "Position",
    "SourceLocation",
    "CUSTOM_PROPERTY_PREFIX",
    "is_custom_property_name",
    "StyleSheet",
    "Rule",
    "Atrule",
    "AtrulePrelude",
    "Block",
    "Declaration",
    "Value",
    "Raw",
    "Function",
    "Parentheses",
    "Brackets",
    "Identifier",
    "Number",
    "Dimension",
    "Percentage",
    "Hash",
    "String",
    "Operator",
    "SelectorList",
    "Selector",
    "TypeSelector",
    "ClassSelector",
    "IdSelector",
    "AttributeSelector",
    "PseudoClassSelector",
    "PseudoElementSelector",
    "NestingSelector",
    "Combinator",
    "Comment",

    # Configuration
    "LanguageOptions",
    "GlobalSettings"
]
