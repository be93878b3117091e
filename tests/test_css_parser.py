"""
Unit tests for CSS parser.

Tests conversion of the Tree-sitter CST into syntax tree nodes, positions,
comments and syntax error reporting.
"""

import pytest
from pathlib import Path

from css_source.models.nodes import NodeType
from css_source.parser.css_parser import CSSParser
from css_source.parser.tree_sitter_base import PositionMap


class TestCSSParser:
    """Test CSS parser functionality"""

    def setup_method(self):
        """Setup test instance"""
        self.parser = CSSParser()

    def first_declaration(self, content: str):
        result = self.parser.parse_text(content)
        rule = result.ast.children[0]
        return rule.block.children[0]

    def test_supported_extensions(self):
        """Test parser reports the extensions it handles"""
        assert ".css" in self.parser.get_supported_extensions()
        assert self.parser.can_parse(Path("styles/site.CSS"))
        assert not self.parser.can_parse(Path("styles/site.scss"))

    def test_parse_simple_rule(self):
        """Test rule, selector, block and declaration structure"""
        result = self.parser.parse_text("a { color: red; }")

        assert result.ok
        assert result.ast.type is NodeType.STYLESHEET
        assert len(result.ast.children) == 1

        rule = result.ast.children[0]
        assert rule.type is NodeType.RULE
        assert rule.prelude.type is NodeType.SELECTOR_LIST
        assert rule.prelude.children[0].children[0].name == "a"

        declaration = rule.block.children[0]
        assert declaration.type is NodeType.DECLARATION
        assert declaration.property == "color"
        assert declaration.value.type is NodeType.VALUE
        assert declaration.value.children[0].type is NodeType.IDENTIFIER
        assert declaration.value.children[0].name == "red"

    def test_result_metadata(self):
        """Test size, hash and version information"""
        content = "a { color: red; }"
        result = self.parser.parse_text(content, Path("site.css"))

        assert result.file_path == Path("site.css")
        assert result.text == content
        assert result.file_size == len(content)
        assert len(result.file_hash) == 16
        assert result.parser_version == "1.0.0"
        assert result.parse_time >= 0

    def test_custom_property_value_is_raw(self):
        """Test custom property values are kept as raw text"""
        declaration = self.first_declaration(":root { --gap: 4px 8px; }")

        assert declaration.property == "--gap"
        assert declaration.value.type is NodeType.RAW
        assert declaration.value.value == "4px 8px"

    def test_var_with_fallback(self):
        """Test var() children are identifier, comma and raw fallback"""
        declaration = self.first_declaration("a { margin: var(--gap, 1px 2px); }")
        function = declaration.value.children[0]

        assert function.type is NodeType.FUNCTION
        assert function.name == "var"
        assert [child.type for child in function.children] == [
            NodeType.IDENTIFIER, NodeType.OPERATOR, NodeType.RAW
        ]
        assert function.children[0].name == "--gap"
        assert function.children[2].value == "1px 2px"

    def test_var_without_fallback(self):
        """Test var() with only a name"""
        declaration = self.first_declaration("a { color: var(--main); }")
        function = declaration.value.children[0]

        assert len(function.children) == 1
        assert function.children[0].name == "--main"

    def test_nested_functions(self):
        """Test function arguments are converted recursively"""
        declaration = self.first_declaration("a { width: calc(max(var(--x), 1px)); }")
        calc = declaration.value.children[0]
        inner = calc.children[0]

        assert calc.name == "calc"
        assert inner.name == "max"
        assert inner.children[0].name == "var"
        assert inner.children[1].type is NodeType.OPERATOR
        assert inner.children[2].type is NodeType.DIMENSION

    def test_numeric_values(self):
        """Test numbers, dimensions and percentages"""
        result = self.parser.parse_text("a { width: 50%; height: 10px; z-index: 2; color: #fff; }")
        width, height, z_index, color = result.ast.children[0].block.children

        assert width.value.children[0].type is NodeType.PERCENTAGE
        assert width.value.children[0].value == "50"

        assert height.value.children[0].type is NodeType.DIMENSION
        assert height.value.children[0].value == "10"
        assert height.value.children[0].unit == "px"

        assert z_index.value.children[0].type is NodeType.NUMBER
        assert z_index.value.children[0].value == "2"

        assert color.value.children[0].type is NodeType.HASH
        assert color.value.children[0].value == "fff"

    def test_string_value(self):
        """Test strings drop their quotes"""
        declaration = self.first_declaration('a::before { content: "hi"; }')

        assert declaration.value.children[0].type is NodeType.STRING
        assert declaration.value.children[0].value == "hi"

    def test_important(self):
        """Test !important sets the flag and stays out of the value"""
        declaration = self.first_declaration("a { color: red !important; }")

        assert declaration.important
        assert len(declaration.value.children) == 1

    def test_comments_collected_separately(self):
        """Test comments are returned beside the tree"""
        result = self.parser.parse_text("/* header */\na { /* inner */ color: red; }")

        assert [comment.value for comment in result.comments] == [" header ", " inner "]
        assert len(result.ast.children) == 1
        assert len(result.ast.children[0].block.children) == 1

    def test_compound_selectors(self):
        """Test nested CST selectors are flattened"""
        result = self.parser.parse_text(".btn.primary > a:hover { color: red; }")
        selector = result.ast.children[0].prelude.children[0]

        assert [part.type for part in selector.children] == [
            NodeType.CLASS_SELECTOR,
            NodeType.CLASS_SELECTOR,
            NodeType.COMBINATOR,
            NodeType.TYPE_SELECTOR,
            NodeType.PSEUDO_CLASS_SELECTOR,
        ]
        assert [getattr(part, "name") for part in selector.children] == [
            "btn", "primary", ">", "a", "hover"
        ]

    def test_selector_list(self):
        """Test comma separated selectors"""
        result = self.parser.parse_text("h1, #main { margin: 0; }")
        selectors = result.ast.children[0].prelude.children

        assert len(selectors) == 2
        assert selectors[0].children[0].type is NodeType.TYPE_SELECTOR
        assert selectors[1].children[0].type is NodeType.ID_SELECTOR
        assert selectors[1].children[0].name == "main"

    def test_media_rule(self):
        """Test at-rules keep name, prelude and block"""
        result = self.parser.parse_text("@media screen { a { color: red; } }")
        atrule = result.ast.children[0]

        assert atrule.type is NodeType.ATRULE
        assert atrule.name == "media"
        assert atrule.prelude.children[0].type is NodeType.IDENTIFIER
        assert atrule.prelude.children[0].name == "screen"
        assert atrule.block.children[0].type is NodeType.RULE

    def test_property_rule(self):
        """Test @property keeps the custom property name in its prelude"""
        result = self.parser.parse_text(
            '@property --x { syntax: "<color>"; inherits: false; initial-value: green; }'
        )
        atrule = result.ast.children[0]

        assert atrule.name == "property"
        assert atrule.prelude.children[0].name == "--x"
        properties = [child.property for child in atrule.block.children]
        assert properties == ["syntax", "inherits", "initial-value"]

    def test_keyframes(self):
        """Test keyframe blocks become rules with raw preludes"""
        result = self.parser.parse_text(
            "@keyframes spin { from { opacity: 0; } to { opacity: 1; } }"
        )
        atrule = result.ast.children[0]

        assert atrule.name == "keyframes"
        assert atrule.prelude.children[0].name == "spin"
        assert [rule.prelude.value for rule in atrule.block.children] == ["from", "to"]

    def test_declaration_location(self):
        """Test locations exclude the trailing semicolon"""
        declaration = self.first_declaration("a { color: red; }")

        assert declaration.loc.start.offset == 4
        assert declaration.loc.start.line == 1
        assert declaration.loc.start.column == 5
        assert declaration.loc.end.offset == 14

    def test_multiline_location(self):
        """Test lines and columns are 1-based"""
        declaration = self.first_declaration("a {\n  color: red;\n}")

        assert declaration.loc.start.line == 2
        assert declaration.loc.start.column == 3

    def test_non_ascii_offsets(self):
        """Test offsets count characters, not bytes"""
        result = self.parser.parse_text('a { content: "é"; color: red; }')
        color = result.ast.children[0].block.children[1]

        assert color.property == "color"
        assert color.loc.start.offset == 18

    def test_syntax_errors_reported(self):
        """Test grammar errors are returned with positions"""
        result = self.parser.parse_text("a { color: red;")

        assert not result.ok
        assert len(result.syntax_errors) > 0
        error = result.syntax_errors[0]
        assert error["line"] >= 1
        assert error["column"] >= 1
        assert "message" in error

    def test_empty_stylesheet(self):
        """Test empty input"""
        result = self.parser.parse_text("")

        assert result.ok
        assert result.ast.children == ()
        assert result.comments == []


class TestPositionMap:
    """Test byte to character position conversion"""

    def test_ascii(self):
        """Test ASCII offsets are unchanged"""
        positions = PositionMap("ab\ncd")

        position = positions.position(4)
        assert position.offset == 4
        assert position.line == 2
        assert position.column == 2

    def test_multibyte(self):
        """Test multi-byte characters count once"""
        positions = PositionMap("é\nx")

        # 'é' is two bytes, '\n' one, so 'x' starts at byte 3
        position = positions.position(3)
        assert position.offset == 2
        assert position.line == 2
        assert position.column == 1

    @pytest.mark.parametrize("content", ["a\r\nb", "a\rb", "a\nb", "a\fb"])
    def test_line_endings(self, content):
        """Test every line terminator starts a new line"""
        positions = PositionMap(content)

        position = positions.position(len(content.encode('utf-8')) - 1)
        assert position.line == 2
        assert position.column == 1
