"""
Value substitution for property validation.

Replaces the ``var()`` references in a declaration value with the text of
their closest values so a property grammar matcher can check the result.
The matcher itself lives behind the ``Lexer`` interface and is supplied by
the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..models.nodes import CSSNode, Declaration, Function, NodeType, SourceLocation
from .source_code import CSSSourceCode

logger = logging.getLogger(__name__)


@dataclass
class SyntaxMatchError:
    """A value that does not match the property grammar"""
    mismatch_offset: int
    mismatch_length: int
    syntax: str
    css: str
    loc: Optional[SourceLocation] = None


@dataclass
class SyntaxReferenceError:
    """A property name the grammar does not know"""
    reference: str
    loc: Optional[SourceLocation] = None


@dataclass
class MatchResult:
    """Outcome of matching a value against a property grammar"""
    matched: Any = None
    error: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_syntax_match_error(error: Any) -> bool:
    return isinstance(getattr(error, "syntax", None), str)


def is_syntax_reference_error(error: Any) -> bool:
    return isinstance(getattr(error, "reference", None), str)


class Lexer(ABC):
    """Property grammar matcher used to validate declaration values"""

    @abstractmethod
    def match_property(self, name: str, value: Any) -> MatchResult:
        """
        Match a value against the grammar of a property.

        Args:
            name: Property name
            value: Value node or substituted value text

        Returns:
            MatchResult whose ``error`` is a ``SyntaxMatchError`` for a
            mismatching value or a ``SyntaxReferenceError`` for an unknown
            property
        """
        pass


@dataclass
class SubstitutedValue:
    """
    Declaration value text with ``var()`` references replaced.

    ``offsets`` maps the start of each replacement in ``text`` to the source
    location of the reference it replaced. References that could not be
    resolved stay in the text and are listed in ``unknown_vars``.
    """
    text: str
    offsets: Dict[int, SourceLocation] = field(default_factory=dict)
    unknown_vars: List[str] = field(default_factory=list)

    @property
    def substituted(self) -> bool:
        return bool(self.offsets)

    def location_at(self, offset: int) -> Optional[SourceLocation]:
        """Source location of the reference replaced at ``offset``, if any"""
        return self.offsets.get(offset)


def replace_variables_in_value(
    value_node: CSSNode,
    references: Sequence[Function],
    source_code: CSSSourceCode
) -> SubstitutedValue:
    """
    Replace ``var()`` references in a value with their closest values.

    Args:
        value_node: Value node of a declaration
        references: The value's ``var()`` functions in source order
        source_code: Session used for text access and resolution

    Returns:
        SubstitutedValue with the rewritten text
    """
    value_text = source_code.get_text(value_node)
    if not references:
        return SubstitutedValue(text=value_text)

    if value_node.loc is None:
        logger.debug("Value has no location, skipping variable substitution")
        return SubstitutedValue(text=value_text)

    result = SubstitutedValue(text=value_text)
    value_start = value_node.loc.start.offset
    adjustment = 0

    for reference in references:
        identifier = reference.children[0] if reference.children else None
        name = identifier.name if identifier is not None and identifier.type is NodeType.IDENTIFIER else ""

        replacement = source_code.get_closest_variable_value(reference)
        if replacement is None:
            result.unknown_vars.append(name)
            continue

        if reference.loc is None:
            continue

        replacement_text = source_code.get_text(replacement).strip()

        relative_start = reference.loc.start.offset - value_start
        relative_end = reference.loc.end.offset - value_start

        # References outside the value's own span are left alone
        if relative_start < 0 or relative_end > len(value_text):
            continue

        start = relative_start + adjustment
        end = relative_end + adjustment
        result.text = result.text[:start] + replacement_text + result.text[end:]
        result.offsets[start] = reference.loc

        adjustment += len(replacement_text) - (relative_end - relative_start)

    if result.unknown_vars:
        logger.debug(f"Unresolved variables in value: {', '.join(result.unknown_vars)}")

    return result


def substitute_declaration(
    declaration: Declaration,
    source_code: CSSSourceCode
) -> SubstitutedValue:
    """Substitute the variables of one declaration's value"""
    return replace_variables_in_value(
        declaration.value,
        source_code.get_declaration_variables(declaration),
        source_code
    )
