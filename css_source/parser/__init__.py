"""
Tree-sitter based stylesheet parser.

Parses CSS text with the tree-sitter-css grammar and converts the concrete
syntax tree into the immutable node model used by the source code layer.

Example:
    from css_source.parser import CSSParser

    parser = CSSParser()
    result = parser.parse_text(":root { --gap: 4px; }")
    if result.ok:
        print(f"Parsed {len(result.ast.children)} top-level nodes")
"""

from .base import ParseError, ParseResult, TreeSitterError, read_source_file
from .css_parser import CSSParser

__all__ = [
    "CSSParser",
    "ParseResult",
    "ParseError",
    "TreeSitterError",
    "read_source_file"
]

__version__ = "1.0.0"
__tree_sitter_version__ = ">=0.23.0"
