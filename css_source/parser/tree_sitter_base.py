"""
Base Tree-sitter functionality for stylesheet parsing.

Provides grammar loading, CST walking helpers, byte to character position
mapping and syntax error extraction shared by the stylesheet parsers.
"""

import importlib
import logging
import re
import time
from bisect import bisect_left, bisect_right
from typing import Any, Dict, Iterator, List, Optional

import tree_sitter

from ..models.nodes import Position, SourceLocation
from .base import TreeSitterError

logger = logging.getLogger(__name__)

LINE_ENDING_PATTERN = re.compile(r'\r\n|[\r\n\f]')


class PositionMap:
    """
    Converts Tree-sitter byte offsets into character positions.

    Lines are split on ``\\r\\n``, ``\\r``, ``\\n`` and ``\\f``; lines and
    columns are 1-based, offsets 0-based.
    """

    def __init__(self, content: str):
        self.content = content
        self._line_starts = [0] + [m.end() for m in LINE_ENDING_PATTERN.finditer(content)]

        # Byte offset of every character, only needed for non-ASCII text
        self._byte_offsets: Optional[List[int]] = None
        if not content.isascii():
            offsets = []
            byte_offset = 0
            for char in content:
                offsets.append(byte_offset)
                byte_offset += len(char.encode('utf-8'))
            offsets.append(byte_offset)
            self._byte_offsets = offsets

    def char_offset(self, byte_offset: int) -> int:
        if self._byte_offsets is None:
            return byte_offset
        return bisect_left(self._byte_offsets, byte_offset)

    def position(self, byte_offset: int) -> Position:
        offset = self.char_offset(byte_offset)
        line_index = bisect_right(self._line_starts, offset) - 1
        return Position(
            offset=offset,
            line=line_index + 1,
            column=offset - self._line_starts[line_index] + 1
        )

    def location(self, start_byte: int, end_byte: int) -> SourceLocation:
        return SourceLocation(start=self.position(start_byte), end=self.position(end_byte))


class TreeSitterBase:
    """
    Base class for Tree-sitter parsers with common functionality.

    Loads the grammar for a language and offers CST traversal and
    error reporting helpers to subclasses.
    """

    LANGUAGE_MODULES = {
        "css": "tree_sitter_css",
    }

    MAX_SYNTAX_ERRORS = 50

    def __init__(self, language: str):
        self.language = language
        self.parser = tree_sitter.Parser()
        self._parser_start_time = 0.0

        try:
            self._setup_language()
        except TreeSitterError:
            raise
        except Exception as e:
            logger.error(f"Failed to setup {language} parser: {e}")
            raise TreeSitterError(f"Cannot initialize {language} parser: {e}") from e

    def _setup_language(self) -> None:
        """Initialize Tree-sitter language for this parser"""
        if self.language not in self.LANGUAGE_MODULES:
            raise TreeSitterError(f"Unsupported language: {self.language}")

        module_name = self.LANGUAGE_MODULES[self.language]

        try:
            language_module = importlib.import_module(module_name)
        except ImportError as e:
            raise TreeSitterError(
                f"Tree-sitter language module '{module_name}' not installed. "
                f"Install with: pip install {module_name.replace('_', '-')}"
            ) from e

        self.tree_sitter_language = tree_sitter.Language(language_module.language())
        self.parser.language = self.tree_sitter_language
        logger.debug(f"Successfully loaded {self.language} Tree-sitter language")

    def _start_timing(self) -> None:
        """Start timing for performance measurement"""
        self._parser_start_time = time.perf_counter()

    def _get_elapsed_time(self) -> float:
        """Get elapsed time since timing started"""
        return time.perf_counter() - self._parser_start_time

    def walk_tree(self, tree: tree_sitter.Tree) -> Iterator[tree_sitter.Node]:
        """
        Walk Tree-sitter CST depth-first.

        Args:
            tree: Tree-sitter CST

        Yields:
            CST nodes in depth-first order
        """
        def walk_node(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
            yield node
            for child in node.children:
                yield from walk_node(child)

        if tree.root_node:
            yield from walk_node(tree.root_node)

    def find_nodes_by_type(
        self,
        tree: tree_sitter.Tree,
        node_types: List[str]
    ) -> List[tree_sitter.Node]:
        """Find all nodes of specified types in source order"""
        return [node for node in self.walk_tree(tree) if node.type in node_types]

    def get_node_text(self, node: tree_sitter.Node, content_bytes: bytes) -> str:
        """
        Get text content of a Tree-sitter node.

        Args:
            node: Tree-sitter node
            content_bytes: UTF-8 encoded source the tree was parsed from

        Returns:
            Text content of the node
        """
        return content_bytes[node.start_byte:node.end_byte].decode('utf-8', errors='replace')

    def find_child_by_type(
        self,
        node: tree_sitter.Node,
        child_type: str
    ) -> Optional[tree_sitter.Node]:
        """Find first child node of specified type"""
        for child in node.children:
            if child.type == child_type:
                return child
        return None

    def _extract_syntax_errors(
        self,
        tree: tree_sitter.Tree,
        content_bytes: bytes,
        positions: PositionMap
    ) -> List[Dict[str, Any]]:
        """
        Extract syntax errors from Tree-sitter CST.

        Args:
            tree: Tree-sitter CST
            content_bytes: UTF-8 encoded source
            positions: Position map for the same source

        Returns:
            List of syntax error dictionaries in source order
        """
        errors = []

        def find_errors(node: tree_sitter.Node) -> None:
            if len(errors) >= self.MAX_SYNTAX_ERRORS:
                return

            if node.type == "ERROR" or node.is_missing:
                error_text = self._safe_extract_text(node, content_bytes)
                position = positions.position(node.start_byte)

                errors.append({
                    "type": "SYNTAX_ERROR" if node.type == "ERROR" else "MISSING_NODE",
                    "severity": self._classify_error_severity(node),
                    "message": self._generate_error_message(node, error_text),
                    "line": position.line,
                    "column": position.column,
                    "offset": position.offset,
                    "text": error_text,
                    "parent_type": node.parent.type if node.parent else None
                })

                # Nested errors repeat the same region
                if node.type == "ERROR":
                    return

            for child in node.children:
                find_errors(child)

        if tree.root_node and tree.root_node.has_error:
            find_errors(tree.root_node)

        return errors

    def _safe_extract_text(
        self,
        node: tree_sitter.Node,
        content_bytes: bytes,
        max_length: int = 50
    ) -> str:
        """Extract a short single-line excerpt of a node's text"""
        node_text = self.get_node_text(node, content_bytes)

        if len(node_text) > max_length:
            node_text = node_text[:max_length] + "..."

        return node_text.replace('\r\n', '\\n').replace('\n', '\\n')

    def _classify_error_severity(self, node: tree_sitter.Node) -> str:
        """
        Classify syntax error severity based on context.

        Returns:
            Severity level: 'high' for top-level errors, 'low' otherwise
        """
        if node.parent is None or node.parent.type == "stylesheet":
            return "high"
        return "low"

    def _generate_error_message(self, node: tree_sitter.Node, error_text: str) -> str:
        """Generate descriptive error message based on node context"""
        if node.is_missing:
            parent_type = node.parent.type if node.parent else "unknown"
            return f"Missing {node.type} in {parent_type}"

        if not error_text.strip():
            return "Unexpected empty syntax error"

        return f"Syntax error in {self.language}: '{error_text}'"
