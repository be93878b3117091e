"""
CSS parser using Tree-sitter.

Parses stylesheet text with the tree-sitter-css grammar and converts the
concrete syntax tree into the immutable node model in one recursive pass.
"""

import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import tree_sitter

from ..models.nodes import (
    Atrule, AtrulePrelude, AttributeSelector, Block, Brackets, ClassSelector,
    Combinator, Comment, CSSNode, Declaration, Dimension, Function, Hash,
    Identifier, IdSelector, NestingSelector, Number, Operator, Parentheses,
    Percentage, PseudoClassSelector, PseudoElementSelector, Raw, Rule,
    Selector, SelectorList, SourceLocation, String, StyleSheet, TypeSelector,
    Value, is_custom_property_name
)
from .base import ParseResult, TreeSitterError
from .tree_sitter_base import PositionMap, TreeSitterBase

logger = logging.getLogger(__name__)

COMMENT_TYPES = {"comment", "js_comment"}

AT_STATEMENT_TYPES = {
    "at_rule", "media_statement", "supports_statement", "import_statement",
    "charset_statement", "namespace_statement", "keyframes_statement",
    "postcss_statement", "scope_statement"
}

COMBINATORS = {
    "child_selector": ">",
    "descendant_selector": " ",
    "sibling_selector": "~",
    "adjacent_sibling_selector": "+",
}

SELECTOR_MARKERS = {".", "#", ":", "::", "["}
ATTRIBUTE_MATCHERS = {"=", "~=", "^=", "|=", "*=", "$="}
BRACKET_TOKENS = {"(", ")", "[", "]"}


class CSSParser(TreeSitterBase):
    """
    Stylesheet parser built on the tree-sitter-css grammar.

    Produces a ``StyleSheet`` tree, the comments found in the source and any
    syntax errors the grammar reported. Error regions are kept in the tree as
    ``Raw`` nodes.
    """

    SUPPORTED_EXTENSIONS = [".css"]

    def __init__(self):
        super().__init__("css")
        self.__version__ = "1.0.0"

        logger.debug("CSS parser initialized")

    def get_supported_extensions(self) -> List[str]:
        return list(self.SUPPORTED_EXTENSIONS)

    def can_parse(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.SUPPORTED_EXTENSIONS

    def parse_text(self, content: str, file_path: Optional[Path] = None) -> ParseResult:
        """
        Parse stylesheet text.

        Args:
            content: Source text, byte order mark already removed
            file_path: Path reported in the result, if any

        Returns:
            ParseResult with the tree, comments and syntax errors
        """
        self._start_timing()

        content_bytes = content.encode('utf-8')
        tree = self.parser.parse(content_bytes)
        if tree is None:
            raise TreeSitterError("Tree-sitter parsing failed")

        positions = PositionMap(content)
        builder = _TreeBuilder(self, content_bytes, positions)

        ast = builder.build_stylesheet(tree.root_node)
        comments = [
            builder.build_comment(node)
            for node in self.find_nodes_by_type(tree, ["comment"])
        ]
        syntax_errors = self._extract_syntax_errors(tree, content_bytes, positions)

        result = ParseResult(
            file_path=file_path,
            language=self.language,
            text=content,
            ast=ast,
            comments=comments,
            parse_time=self._get_elapsed_time(),
            file_size=len(content_bytes),
            file_hash=hashlib.sha256(content_bytes).hexdigest()[:16],
            tree_sitter_version=getattr(tree_sitter, '__version__', 'unknown'),
            parser_version=self.__version__,
            syntax_errors=syntax_errors
        )

        logger.debug(
            f"Parsed {file_path or '<text>'}: {len(ast.children)} top-level nodes, "
            f"{len(comments)} comments, {len(syntax_errors)} syntax errors "
            f"in {result.parse_time*1000:.1f}ms"
        )

        return result


class _TreeBuilder:
    """Converts one Tree-sitter CST into syntax tree nodes"""

    def __init__(self, parser: CSSParser, content_bytes: bytes, positions: PositionMap):
        self.parser = parser
        self.content_bytes = content_bytes
        self.positions = positions

    # Helpers

    def text(self, node: tree_sitter.Node) -> str:
        return self.parser.get_node_text(node, self.content_bytes)

    def loc(self, node: tree_sitter.Node) -> SourceLocation:
        return self.positions.location(node.start_byte, node.end_byte)

    def span_loc(self, start_byte: int, end_byte: int) -> SourceLocation:
        return self.positions.location(start_byte, end_byte)

    def span_text(self, start_byte: int, end_byte: int) -> str:
        return self.content_bytes[start_byte:end_byte].decode('utf-8', errors='replace')

    @staticmethod
    def significant(children: Sequence[tree_sitter.Node]) -> List[tree_sitter.Node]:
        """Children without comments and zero-width recovery nodes"""
        return [
            child for child in children
            if child.type not in COMMENT_TYPES and not child.is_missing
        ]

    def inner(self, node: tree_sitter.Node) -> List[tree_sitter.Node]:
        """Significant children of a bracketed node, without the brackets"""
        return [
            child for child in self.significant(node.children)
            if child.is_named or child.type not in BRACKET_TOKENS
        ]

    def raw(self, node: tree_sitter.Node) -> Raw:
        return Raw(value=self.text(node), loc=self.loc(node))

    def raw_span(self, nodes: Sequence[tree_sitter.Node], at_byte: int) -> Raw:
        """Raw text covering ``nodes``, or an empty Raw at ``at_byte``"""
        if not nodes:
            return Raw(value="", loc=self.span_loc(at_byte, at_byte))
        start, end = nodes[0].start_byte, nodes[-1].end_byte
        return Raw(value=self.span_text(start, end), loc=self.span_loc(start, end))

    # Structure

    def build_stylesheet(self, node: tree_sitter.Node) -> StyleSheet:
        children = [self.build_item(child) for child in self.significant(node.children)]
        return StyleSheet(
            children=tuple(child for child in children if child is not None),
            loc=self.span_loc(0, len(self.content_bytes))
        )

    def build_item(self, node: tree_sitter.Node) -> Optional[CSSNode]:
        """Build a stylesheet or block item"""
        node_type = node.type

        if node_type == "rule_set":
            return self.build_rule(node)
        if node_type == "declaration":
            return self.build_declaration(node)
        if node_type in AT_STATEMENT_TYPES:
            return self.build_atrule(node)
        if not node.is_named:
            return None

        if node_type != "ERROR":
            logger.debug(f"Keeping unexpected {node_type} node as raw text")
        return self.raw(node)

    def build_rule(self, node: tree_sitter.Node) -> Rule:
        selectors = self.parser.find_child_by_type(node, "selectors")
        block = self.parser.find_child_by_type(node, "block")

        if selectors is not None:
            prelude = self.build_selector_list(selectors)
        else:
            prelude = Raw(value="", loc=self.span_loc(node.start_byte, node.start_byte))

        return Rule(
            prelude=prelude,
            block=self.build_block(block) if block is not None else self.empty_block(node.end_byte),
            loc=self.loc(node)
        )

    def build_block(self, node: tree_sitter.Node) -> Block:
        children = [
            self.build_item(child) for child in self.significant(node.children)
            if child.is_named
        ]
        return Block(
            children=tuple(child for child in children if child is not None),
            loc=self.loc(node)
        )

    def empty_block(self, at_byte: int) -> Block:
        return Block(children=(), loc=self.span_loc(at_byte, at_byte))

    def build_declaration(self, node: tree_sitter.Node) -> Declaration:
        children = self.significant(node.children)

        name_node = next((c for c in children if c.type == "property_name"), None)
        property_name = self.text(name_node) if name_node is not None else ""

        colon_index = next((i for i, c in enumerate(children) if c.type == ":"), None)
        value_nodes = []
        if colon_index is not None:
            value_nodes = [
                c for c in children[colon_index + 1:]
                if c.type not in (";", "important")
            ]

        important = any(c.type == "important" for c in children)
        value_start = children[colon_index].end_byte if colon_index is not None else node.end_byte

        if is_custom_property_name(property_name):
            value = self.raw_span(value_nodes, value_start)
        else:
            value = self.build_value_node(value_nodes, value_start)

        # The trailing semicolon is not part of the declaration
        last = next((c for c in reversed(children) if c.type != ";"), None)
        end_byte = last.end_byte if last is not None else node.end_byte

        return Declaration(
            property=property_name,
            value=value,
            important=important,
            loc=self.span_loc(node.start_byte, end_byte)
        )

    def build_atrule(self, node: tree_sitter.Node) -> Atrule:
        name = ""
        block = None
        prelude_nodes = []

        for child in self.significant(node.children):
            child_type = child.type

            if not name and (child_type == "at_keyword" or
                             (not child.is_named and child_type.startswith("@"))):
                name = self.text(child)[1:]
            elif child_type == "block":
                block = self.build_block(child)
            elif child_type == "keyframe_block_list":
                block = self.build_keyframe_blocks(child)
            elif child_type != ";":
                prelude_nodes.append(child)

        prelude = None
        if prelude_nodes:
            items = []
            for child in prelude_nodes:
                items.extend(self.build_prelude_item(child))
            prelude = AtrulePrelude(
                children=tuple(items),
                loc=self.span_loc(prelude_nodes[0].start_byte, prelude_nodes[-1].end_byte)
            )

        return Atrule(name=name, prelude=prelude, block=block, loc=self.loc(node))

    def build_prelude_item(self, node: tree_sitter.Node) -> List[CSSNode]:
        if node.type in ("keyword_query", "keyframes_name", "namespace_name"):
            return [Identifier(name=self.text(node), loc=self.loc(node))]
        return self.build_value(node)

    def build_keyframe_blocks(self, node: tree_sitter.Node) -> Block:
        rules = []
        for child in self.significant(node.children):
            if child.type != "keyframe_block":
                if child.is_named:
                    rules.append(self.raw(child))
                continue

            parts = self.significant(child.children)
            selector = next((p for p in parts if p.is_named and p.type != "block"), None)
            block = next((p for p in parts if p.type == "block"), None)

            if selector is not None:
                prelude = self.raw(selector)
            else:
                prelude = Raw(value="", loc=self.span_loc(child.start_byte, child.start_byte))

            rules.append(Rule(
                prelude=prelude,
                block=self.build_block(block) if block is not None else self.empty_block(child.end_byte),
                loc=self.loc(child)
            ))

        return Block(children=tuple(rules), loc=self.loc(node))

    def build_comment(self, node: tree_sitter.Node) -> Comment:
        text = self.text(node)
        if text.startswith("/*"):
            text = text[2:]
        if text.endswith("*/"):
            text = text[:-2]
        return Comment(value=text, loc=self.loc(node))

    # Values

    def build_value_node(self, nodes: Sequence[tree_sitter.Node], at_byte: int) -> Value:
        children = []
        for node in nodes:
            children.extend(self.build_value(node))

        if nodes:
            loc = self.span_loc(nodes[0].start_byte, nodes[-1].end_byte)
        else:
            loc = self.span_loc(at_byte, at_byte)

        return Value(children=tuple(children), loc=loc)

    def build_value(self, node: tree_sitter.Node) -> List[CSSNode]:
        """Build the value nodes for one CST value (binary expressions flatten)"""
        node_type = node.type

        if node_type == "plain_value":
            return [Identifier(name=self.text(node), loc=self.loc(node))]
        if node_type in ("integer_value", "float_value"):
            return [self.build_number(node)]
        if node_type == "color_value":
            return [Hash(value=self.text(node)[1:], loc=self.loc(node))]
        if node_type == "string_value":
            return [String(value=self.text(node)[1:-1], loc=self.loc(node))]
        if node_type == "call_expression":
            return [self.build_function(node)]
        if node_type == "binary_expression":
            result = []
            for child in self.significant(node.children):
                result.extend(self.build_value(child))
            return result
        if node_type == "parenthesized_value":
            return [Parentheses(children=self.build_values(self.inner(node)), loc=self.loc(node))]
        if node_type == "grid_value":
            return [Brackets(children=self.build_values(self.inner(node)), loc=self.loc(node))]
        if not node.is_named:
            return [Operator(value=self.text(node), loc=self.loc(node))]

        return [self.raw(node)]

    def build_values(self, nodes: Sequence[tree_sitter.Node]) -> Tuple[CSSNode, ...]:
        values = []
        for node in nodes:
            values.extend(self.build_value(node))
        return tuple(values)

    def build_number(self, node: tree_sitter.Node) -> CSSNode:
        text = self.text(node)
        unit_node = self.parser.find_child_by_type(node, "unit")
        if unit_node is None:
            return Number(value=text, loc=self.loc(node))

        unit = self.text(unit_node)
        number = text[:len(text) - len(unit)]
        if unit == "%":
            return Percentage(value=number, loc=self.loc(node))
        return Dimension(value=number, unit=unit, loc=self.loc(node))

    def build_function(self, node: tree_sitter.Node) -> Function:
        name_node = self.parser.find_child_by_type(node, "function_name")
        arguments = self.parser.find_child_by_type(node, "arguments")

        name = self.text(name_node) if name_node is not None else ""
        args = self.inner(arguments) if arguments is not None else []

        if name.lower() == "var":
            children = self.build_var_arguments(args)
        else:
            children = self.build_values(args)

        return Function(name=name, children=children, loc=self.loc(node))

    def build_var_arguments(self, args: List[tree_sitter.Node]) -> Tuple[CSSNode, ...]:
        """
        Build ``var()`` arguments.

        Everything after the first comma becomes a single ``Raw`` fallback.
        """
        comma_index = next((i for i, arg in enumerate(args) if arg.type == ","), None)
        if comma_index is None:
            return self.build_values(args)

        comma = args[comma_index]
        return (
            *self.build_values(args[:comma_index]),
            Operator(value=",", loc=self.loc(comma)),
            self.raw_span(args[comma_index + 1:], comma.end_byte),
        )

    # Selectors

    def build_selector_list(self, node: tree_sitter.Node) -> SelectorList:
        selectors = []
        for child in self.significant(node.children):
            if not child.is_named:
                continue
            selectors.append(Selector(
                children=tuple(self.flatten_selector(child)),
                loc=self.loc(child)
            ))
        return SelectorList(children=tuple(selectors), loc=self.loc(node))

    def flatten_selector(self, node: tree_sitter.Node) -> List[CSSNode]:
        """Flatten a nested CST selector into compound parts and combinators"""
        node_type = node.type

        if node_type == "tag_name":
            return [TypeSelector(name=self.text(node), loc=self.loc(node))]
        if node_type == "universal_selector":
            return [TypeSelector(name="*", loc=self.loc(node))]
        if node_type == "nesting_selector":
            return [NestingSelector(loc=self.loc(node))]

        if node_type in COMBINATORS:
            return self.flatten_combinator(node)

        if node_type in ("class_selector", "id_selector", "pseudo_class_selector",
                         "pseudo_element_selector", "attribute_selector"):
            return self.flatten_compound(node)

        return [self.raw(node)]

    def flatten_combinator(self, node: tree_sitter.Node) -> List[CSSNode]:
        children = self.significant(node.children)
        operands = [child for child in children if child.is_named]
        if len(operands) != 2:
            return [self.raw(node)]

        left, right = operands
        token = next((child for child in children if not child.is_named), None)
        if token is not None:
            loc = self.loc(token)
        else:
            loc = self.span_loc(left.end_byte, right.start_byte)

        return [
            *self.flatten_selector(left),
            Combinator(name=COMBINATORS[node.type], loc=loc),
            *self.flatten_selector(right),
        ]

    def flatten_compound(self, node: tree_sitter.Node) -> List[CSSNode]:
        children = self.significant(node.children)

        marker_index = next(
            (i for i, child in enumerate(children)
             if not child.is_named and child.type in SELECTOR_MARKERS),
            None
        )
        if marker_index is None:
            prefix, rest, start_byte = [], children, node.start_byte
        else:
            prefix = children[:marker_index]
            rest = children[marker_index + 1:]
            start_byte = children[marker_index].start_byte

        parts = []
        for child in prefix:
            if child.is_named:
                parts.extend(self.flatten_selector(child))

        loc = self.span_loc(start_byte, node.end_byte)
        named = [child for child in rest if child.is_named]
        node_type = node.type

        if node_type == "class_selector":
            name_node = next((c for c in named if c.type == "class_name"), None)
            if name_node is None:
                return parts + [self.raw(node)]
            parts.append(ClassSelector(name=self.text(name_node), loc=loc))

        elif node_type == "id_selector":
            name_node = next((c for c in named if c.type == "id_name"), None)
            if name_node is None:
                return parts + [self.raw(node)]
            parts.append(IdSelector(name=self.text(name_node), loc=loc))

        elif node_type in ("pseudo_class_selector", "pseudo_element_selector"):
            if not named:
                return parts + [self.raw(node)]
            arguments = next((c for c in named if c.type == "arguments"), None)
            selector_class = (
                PseudoClassSelector if node_type == "pseudo_class_selector"
                else PseudoElementSelector
            )
            parts.append(selector_class(
                name=self.text(named[0]),
                children=(self.build_selector_arguments(arguments),) if arguments is not None else (),
                loc=loc
            ))

        else:
            parts.append(self.build_attribute_selector(rest, loc))

        return parts

    def build_selector_arguments(self, node: tree_sitter.Node) -> Raw:
        """Pseudo selector arguments are kept as raw text"""
        children = self.significant(node.children)
        opening = next((c for c in children if c.type == "("), None)
        closing = next((c for c in reversed(children) if c.type == ")"), None)
        if opening is None or closing is None:
            return self.raw(node)
        return Raw(
            value=self.span_text(opening.end_byte, closing.start_byte),
            loc=self.span_loc(opening.end_byte, closing.start_byte)
        )

    def build_attribute_selector(
        self,
        rest: List[tree_sitter.Node],
        loc: SourceLocation
    ) -> AttributeSelector:
        name_node = next((c for c in rest if c.type == "attribute_name"), None)
        matcher_node = next((c for c in rest if c.type in ATTRIBUTE_MATCHERS), None)

        value = None
        if matcher_node is not None:
            value_node = next(
                (c for c in rest if c.is_named and c.start_byte >= matcher_node.end_byte),
                None
            )
            if value_node is not None:
                value = self.build_value(value_node)[0]

        if name_node is not None:
            name = Identifier(name=self.text(name_node), loc=self.loc(name_node))
        else:
            name = Identifier(name="", loc=loc)

        return AttributeSelector(
            name=name,
            matcher=matcher_node.type if matcher_node is not None else None,
            value=value,
            loc=loc
        )
