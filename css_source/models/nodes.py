"""
Syntax tree models for parsed stylesheets.

Defines the node tags, source positions and the immutable node classes
produced by the parse step and consumed by the traversal engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


CUSTOM_PROPERTY_PREFIX = "--"


class NodeType(Enum):
    """Tags of stylesheet syntax tree nodes"""
    # Structure
    STYLESHEET = "StyleSheet"
    RULE = "Rule"
    ATRULE = "Atrule"
    ATRULE_PRELUDE = "AtrulePrelude"
    BLOCK = "Block"
    DECLARATION = "Declaration"

    # Values
    VALUE = "Value"
    RAW = "Raw"
    FUNCTION = "Function"
    PARENTHESES = "Parentheses"
    BRACKETS = "Brackets"
    IDENTIFIER = "Identifier"
    NUMBER = "Number"
    DIMENSION = "Dimension"
    PERCENTAGE = "Percentage"
    HASH = "Hash"
    STRING = "String"
    OPERATOR = "Operator"

    # Selectors
    SELECTOR_LIST = "SelectorList"
    SELECTOR = "Selector"
    TYPE_SELECTOR = "TypeSelector"
    CLASS_SELECTOR = "ClassSelector"
    ID_SELECTOR = "IdSelector"
    ATTRIBUTE_SELECTOR = "AttributeSelector"
    PSEUDO_CLASS_SELECTOR = "PseudoClassSelector"
    PSEUDO_ELEMENT_SELECTOR = "PseudoElementSelector"
    NESTING_SELECTOR = "NestingSelector"
    COMBINATOR = "Combinator"

    # Kept beside the tree, never inside it
    COMMENT = "Comment"


@dataclass(frozen=True)
class Position:
    """A point in the source text (0-based offset, 1-based line and column)"""
    offset: int
    line: int
    column: int


@dataclass(frozen=True)
class SourceLocation:
    """Start and end positions of a node"""
    start: Position
    end: Position

    def __post_init__(self):
        """Validate location data"""
        if self.start.offset > self.end.offset:
            raise ValueError("start offset cannot be greater than end offset")
        if self.start.line > self.end.line:
            raise ValueError("start line cannot be greater than end line")

    @property
    def length(self) -> int:
        return self.end.offset - self.start.offset


def is_custom_property_name(name: str) -> bool:
    """Check if a property or identifier name is a custom property name"""
    return name.startswith(CUSTOM_PROPERTY_PREFIX)


class CSSNode:
    """
    Base class for syntax tree nodes.

    Subclasses are frozen dataclasses declared with ``eq=False`` so nodes hash
    and compare by identity. Two declarations with identical text are still
    distinct keys in every lookup table.
    """
    type: ClassVar[NodeType]
    loc: Optional[SourceLocation]

    @property
    def range(self) -> Optional[Tuple[int, int]]:
        if self.loc is None:
            return None
        return self.loc.start.offset, self.loc.end.offset


Children = Tuple[CSSNode, ...]


# Values

@dataclass(frozen=True, eq=False)
class Identifier(CSSNode):
    type: ClassVar[NodeType] = NodeType.IDENTIFIER
    name: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Raw(CSSNode):
    """Unparsed text, used for custom property values and var() fallbacks"""
    type: ClassVar[NodeType] = NodeType.RAW
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Number(CSSNode):
    type: ClassVar[NodeType] = NodeType.NUMBER
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Dimension(CSSNode):
    type: ClassVar[NodeType] = NodeType.DIMENSION
    value: str
    unit: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Percentage(CSSNode):
    type: ClassVar[NodeType] = NodeType.PERCENTAGE
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Hash(CSSNode):
    type: ClassVar[NodeType] = NodeType.HASH
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class String(CSSNode):
    type: ClassVar[NodeType] = NodeType.STRING
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Operator(CSSNode):
    type: ClassVar[NodeType] = NodeType.OPERATOR
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Function(CSSNode):
    """
    A function call in a value.

    For ``var()`` the children are ``(Identifier,)`` or, when a fallback is
    given, ``(Identifier, Operator(","), Raw)``.
    """
    type: ClassVar[NodeType] = NodeType.FUNCTION
    name: str
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Parentheses(CSSNode):
    type: ClassVar[NodeType] = NodeType.PARENTHESES
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Brackets(CSSNode):
    type: ClassVar[NodeType] = NodeType.BRACKETS
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Value(CSSNode):
    type: ClassVar[NodeType] = NodeType.VALUE
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


# Selectors

@dataclass(frozen=True, eq=False)
class TypeSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.TYPE_SELECTOR
    name: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class ClassSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.CLASS_SELECTOR
    name: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class IdSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.ID_SELECTOR
    name: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class AttributeSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.ATTRIBUTE_SELECTOR
    name: Identifier
    matcher: Optional[str] = None
    value: Optional[CSSNode] = None
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class PseudoClassSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.PSEUDO_CLASS_SELECTOR
    name: str
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class PseudoElementSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.PSEUDO_ELEMENT_SELECTOR
    name: str
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class NestingSelector(CSSNode):
    type: ClassVar[NodeType] = NodeType.NESTING_SELECTOR
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Combinator(CSSNode):
    type: ClassVar[NodeType] = NodeType.COMBINATOR
    name: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Selector(CSSNode):
    type: ClassVar[NodeType] = NodeType.SELECTOR
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class SelectorList(CSSNode):
    type: ClassVar[NodeType] = NodeType.SELECTOR_LIST
    children: Tuple[Selector, ...] = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


# Structure

@dataclass(frozen=True, eq=False)
class Declaration(CSSNode):
    """
    A ``property: value`` pair.

    ``value`` is a ``Raw`` node for custom properties and a ``Value`` node
    for every other property.
    """
    type: ClassVar[NodeType] = NodeType.DECLARATION
    property: str
    value: Union[Value, Raw]
    important: bool = False
    loc: Optional[SourceLocation] = field(default=None, repr=False)

    @property
    def is_custom_property(self) -> bool:
        return is_custom_property_name(self.property)


@dataclass(frozen=True, eq=False)
class Block(CSSNode):
    type: ClassVar[NodeType] = NodeType.BLOCK
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Rule(CSSNode):
    type: ClassVar[NodeType] = NodeType.RULE
    prelude: Union[SelectorList, Raw]
    block: Block
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class AtrulePrelude(CSSNode):
    type: ClassVar[NodeType] = NodeType.ATRULE_PRELUDE
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Atrule(CSSNode):
    type: ClassVar[NodeType] = NodeType.ATRULE
    name: str
    prelude: Optional[AtrulePrelude] = None
    block: Optional[Block] = None
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class StyleSheet(CSSNode):
    type: ClassVar[NodeType] = NodeType.STYLESHEET
    children: Children = ()
    loc: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(frozen=True, eq=False)
class Comment(CSSNode):
    type: ClassVar[NodeType] = NodeType.COMMENT
    value: str
    loc: Optional[SourceLocation] = field(default=None, repr=False)
