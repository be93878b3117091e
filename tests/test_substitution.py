"""
Unit tests for variable substitution and the lexer boundary types.
"""

from css_source.language import CSSLanguage
from css_source.models.nodes import NodeType
from css_source.source.source_code import CSSSourceCode, Phase
from css_source.source.substitution import (
    Lexer, MatchResult, SyntaxMatchError, SyntaxReferenceError,
    is_syntax_match_error, is_syntax_reference_error,
    replace_variables_in_value, substitute_declaration
)


def source_for(text: str) -> CSSSourceCode:
    language = CSSLanguage()
    return language.create_source_code(language.parse(text))


def declaration_named(source_code: CSSSourceCode, property_name: str):
    return next(
        step.target for step in source_code.traverse()
        if step.phase is Phase.ENTER
        and step.target.type is NodeType.DECLARATION
        and step.target.property == property_name
    )


class TestReplaceVariables:
    """Test var() replacement in declaration values"""

    def test_single_variable(self):
        """Test a reference is replaced with its closest value"""
        source_code = source_for(":root { --main: red; }\na { color: var(--main); }")
        declaration = declaration_named(source_code, "color")
        reference = source_code.get_declaration_variables(declaration)[0]

        result = substitute_declaration(declaration, source_code)

        assert result.text == "red"
        assert result.offsets == {0: reference.loc}
        assert result.unknown_vars == []
        assert result.substituted

    def test_offsets_shift_after_replacement(self):
        """Test later replacement offsets account for earlier ones"""
        source_code = source_for(
            ":root { --a: 1px; --b: 22px; }\n"
            "a { margin: var(--a) var(--b); }"
        )
        declaration = declaration_named(source_code, "margin")

        result = substitute_declaration(declaration, source_code)

        assert result.text == "1px 22px"
        assert sorted(result.offsets) == [0, 4]
        assert result.location_at(4).start.offset > result.location_at(0).start.offset

    def test_value_text_is_trimmed(self):
        """Test surrounding whitespace of the replacement is dropped"""
        source_code = source_for(
            ":root { --pad:   4px   ; }\n"
            "a { padding: var(--pad) 0; }"
        )
        declaration = declaration_named(source_code, "padding")

        assert substitute_declaration(declaration, source_code).text == "4px 0"

    def test_fallback_used(self):
        """Test the fallback text replaces an undeclared variable"""
        source_code = source_for("a { width: var(--w, 10px); }")
        declaration = declaration_named(source_code, "width")

        assert substitute_declaration(declaration, source_code).text == "10px"

    def test_unknown_variable_left_in_place(self):
        """Test unresolved references are reported and kept"""
        source_code = source_for("a { color: var(--nope); }")
        declaration = declaration_named(source_code, "color")

        result = substitute_declaration(declaration, source_code)

        assert result.text == "var(--nope)"
        assert result.unknown_vars == ["--nope"]
        assert not result.substituted

    def test_no_references(self):
        """Test values without var() come back unchanged"""
        source_code = source_for("a { color: red; }")
        declaration = declaration_named(source_code, "color")

        result = replace_variables_in_value(declaration.value, [], source_code)

        assert result.text == "red"
        assert result.offsets == {}


class TestLexerBoundary:
    """Test lexer interface and error predicates"""

    def test_error_predicates(self):
        """Test the two error kinds are told apart"""
        match_error = SyntaxMatchError(mismatch_offset=0, mismatch_length=3, syntax="<color>", css="foo")
        reference_error = SyntaxReferenceError(reference="colr")

        assert is_syntax_match_error(match_error)
        assert not is_syntax_reference_error(match_error)
        assert is_syntax_reference_error(reference_error)
        assert not is_syntax_match_error(reference_error)

    def test_lexer_on_substituted_text(self):
        """Test a lexer receives the substituted value"""

        class RecordingLexer(Lexer):
            def __init__(self):
                self.calls = []

            def match_property(self, name, value):
                self.calls.append((name, value))
                if value == "red":
                    return MatchResult(matched=value)
                return MatchResult(error=SyntaxMatchError(
                    mismatch_offset=0, mismatch_length=len(value), syntax="<color>", css=value
                ))

        lexer = RecordingLexer()
        language = CSSLanguage()
        source_code = language.create_source_code(
            language.parse(":root { --c: red; }\na { color: var(--c); }"),
            lexer=lexer
        )
        declaration = declaration_named(source_code, "color")

        result = source_code.lexer.match_property(
            declaration.property,
            substitute_declaration(declaration, source_code).text
        )

        assert result.ok
        assert lexer.calls == [("color", "red")]
