"""
css-source: CSS source code model with custom property resolution.

Parses stylesheets with Tree-sitter into an immutable syntax tree, walks it
once per session to build the parent relation and custom property indexes,
and resolves ``var()`` references against them.
"""

__version__ = "1.0.0"

from .language import CSSLanguage
from .models.config import GlobalSettings, LanguageOptions
from .parser import CSSParser, ParseError, ParseResult, TreeSitterError
from .source import CSSSourceCode, NodeShapeError

__all__ = [
    "CSSLanguage",
    "CSSParser",
    "CSSSourceCode",
    "GlobalSettings",
    "LanguageOptions",
    "NodeShapeError",
    "ParseError",
    "ParseResult",
    "TreeSitterError"
]
