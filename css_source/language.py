"""
CSS language definition.

Ties the parse step, the child layout table and the source code model
together: parse text or files, honour the ``tolerant`` option and create the
``CSSSourceCode`` session for a successful parse.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .models.config import LanguageOptions
from .parser.base import ParseResult, read_source_file
from .parser.css_parser import CSSParser
from .source.source_code import CSSSourceCode
from .source.visitor_keys import VISITOR_KEYS

logger = logging.getLogger(__name__)

OptionsInput = Union[LanguageOptions, Dict[str, Any], None]


class CSSLanguage:
    """
    Language object for CSS.

    One instance can parse any number of files; each successful parse is
    turned into its own ``CSSSourceCode`` session.
    """

    file_type = "text"
    line_start = 1
    column_start = 1
    node_type_key = "type"
    visitor_keys = VISITOR_KEYS

    def __init__(self, options: OptionsInput = None):
        self.default_language_options = self.validate_language_options(options)
        self._parser: Optional[CSSParser] = None

    @property
    def parser(self) -> CSSParser:
        """Tree-sitter parser, created on first use"""
        if self._parser is None:
            self._parser = CSSParser()
        return self._parser

    def validate_language_options(self, options: OptionsInput) -> LanguageOptions:
        """
        Validate language options.

        Args:
            options: Mapping of option names to values, or LanguageOptions

        Returns:
            Validated LanguageOptions

        Raises:
            TypeError: If ``tolerant`` is not a boolean
            pydantic.ValidationError: If any other option is invalid
        """
        if isinstance(options, LanguageOptions):
            return options
        if options is None:
            return LanguageOptions()

        if "tolerant" in options and not isinstance(options["tolerant"], bool):
            raise TypeError("Expected a boolean value for 'tolerant' option.")

        return LanguageOptions.from_dict(dict(options))

    def _resolve_options(self, language_options: OptionsInput) -> LanguageOptions:
        if language_options is None:
            return self.default_language_options
        options = self.validate_language_options(language_options)
        merged = {**self.default_language_options.to_dict(), **options.model_dump(exclude_unset=True)}
        return LanguageOptions.from_dict(merged)

    def parse(
        self,
        text: str,
        path: Optional[Path] = None,
        language_options: OptionsInput = None
    ) -> ParseResult:
        """
        Parse stylesheet text.

        In strict mode any syntax error makes the result not ok: the tree is
        dropped and the errors are returned. In tolerant mode the errors are
        downgraded to warnings and the recovered tree is kept.

        Args:
            text: Stylesheet text with the byte order mark removed
            path: File path reported in the result
            language_options: Options overriding the defaults

        Returns:
            ParseResult
        """
        options = self._resolve_options(language_options)
        result = self.parser.parse_text(text, path)

        if not result.syntax_errors:
            return result

        if options.tolerant:
            for error in result.syntax_errors:
                result.add_warning(
                    f"{error['message']} at {error['line']}:{error['column']}"
                )
            logger.warning(
                f"Recovered from {len(result.syntax_errors)} syntax errors "
                f"in {path or '<text>'}"
            )
            result.syntax_errors = []
            result.error_recovery_applied = True
        else:
            logger.debug(
                f"Parse of {path or '<text>'} failed with "
                f"{len(result.syntax_errors)} syntax errors"
            )
            result.ast = None

        return result

    def parse_file(self, path: Path, language_options: OptionsInput = None) -> ParseResult:
        """
        Read and parse a stylesheet file.

        Unreadable or oversized files produce a not-ok result carrying the
        read error, not an exception.
        """
        options = self._resolve_options(language_options)

        try:
            content, file_hash, file_size = read_source_file(path, options.max_file_size_bytes)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return ParseResult(
                file_path=path,
                syntax_errors=[{
                    "type": "READ_ERROR",
                    "severity": "high",
                    "message": str(e),
                    "line": self.line_start,
                    "column": self.column_start,
                    "offset": 0,
                    "text": "",
                    "parent_type": None
                }]
            )

        result = self.parse(content, path, options)
        result.file_hash = file_hash
        result.file_size = file_size
        return result

    def create_source_code(self, parse_result: ParseResult, lexer: Any = None) -> CSSSourceCode:
        """
        Create the source code session for a successful parse.

        Raises:
            ValueError: If the parse result holds no tree
        """
        if parse_result.ast is None:
            raise ValueError("Cannot create source code from a failed parse")

        return CSSSourceCode(
            text=parse_result.text,
            ast=parse_result.ast,
            comments=parse_result.comments,
            lexer=lexer
        )
