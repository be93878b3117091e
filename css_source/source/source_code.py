"""
Source code model for a parsed stylesheet.

A ``CSSSourceCode`` instance is the analysis session for one file. It walks
the immutable syntax tree once, caching the traversal steps together with the
parent relation and the custom property indexes built during that walk, and
answers ``var()`` resolution queries from those indexes.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..models.nodes import (
    Atrule, CSSNode, Comment, Declaration, Function, Identifier, NodeType,
    Raw, Rule, SourceLocation, StyleSheet, Value, is_custom_property_name
)
from .visitor_keys import child_nodes

logger = logging.getLogger(__name__)

VariableValue = Union[Value, Raw]


class Phase(IntEnum):
    """Direction of a traversal step"""
    ENTER = 1
    EXIT = 2


@dataclass(frozen=True)
class TraversalStep:
    """
    One step of the depth-first walk.

    Steps compare equal when they point at the same node (by identity)
    in the same phase.
    """
    target: CSSNode
    phase: Phase
    parent: Optional[CSSNode] = None

    @property
    def args(self) -> Tuple[CSSNode, Optional[CSSNode]]:
        return self.target, self.parent


@dataclass(frozen=True)
class CustomPropertyUses:
    """Every site where one custom property is declared, defined or read"""
    declarations: Tuple[Declaration, ...] = ()
    definitions: Tuple[Atrule, ...] = ()
    references: Tuple[Function, ...] = ()


def is_var_function(node: CSSNode) -> bool:
    return node.type is NodeType.FUNCTION and node.name.lower() == "var"


def _custom_property_identifier(children: Tuple[CSSNode, ...]) -> Optional[str]:
    """Name of a leading custom property identifier, if any"""
    if not children:
        return None
    first = children[0]
    if first.type is NodeType.IDENTIFIER and is_custom_property_name(first.name):
        return first.name
    return None


def _start_offset(node: CSSNode, default: float) -> float:
    if node.loc is None:
        return default
    return node.loc.start.offset


class CSSSourceCode:
    """
    CSS source code object for one analysis session.

    Rules share a single instance per file. The first call to ``traverse()``
    (or to any query that needs the indexes) performs the walk; every later
    call reads the cached results.
    """

    def __init__(
        self,
        text: str,
        ast: StyleSheet,
        comments: Optional[List[Comment]] = None,
        lexer: Any = None
    ):
        self.text = text
        self.ast = ast
        self.comments = comments if comments is not None else []
        self.lexer = lexer

        self._steps: Optional[Tuple[TraversalStep, ...]] = None
        self._parents: Dict[CSSNode, CSSNode] = {}
        self._custom_properties: Dict[str, CustomPropertyUses] = {}
        self._declaration_variables: Dict[Declaration, Tuple[Function, ...]] = {}

    # Text access

    def get_text(self, node: Optional[CSSNode] = None, before: int = 0, after: int = 0) -> str:
        """
        Get the source text of a node, or the whole text.

        Args:
            node: Node to slice out, None for the whole source
            before: Extra characters to include before the node
            after: Extra characters to include after the node
        """
        if node is None:
            return self.text

        node_range = self.get_range(node)
        if node_range is None:
            return node.value if node.type is NodeType.RAW else ""

        start, end = node_range
        return self.text[max(start - before, 0):end + after]

    def get_range(self, node: CSSNode) -> Optional[Tuple[int, int]]:
        """Start and end offsets of a node"""
        return node.range

    def get_loc(self, node: CSSNode) -> Optional[SourceLocation]:
        return node.loc

    # Traversal

    def traverse(self) -> Tuple[TraversalStep, ...]:
        """
        Walk the tree depth-first and return the enter/exit steps.

        The tree never changes during a session, so the steps are computed
        once and the same sequence is returned on every call.
        """
        if self._steps is not None:
            return self._steps

        steps: List[TraversalStep] = []
        parents: Dict[CSSNode, CSSNode] = {}
        declarations = defaultdict(list)
        definitions = defaultdict(list)
        references = defaultdict(list)
        declaration_variables: Dict[Declaration, List[Function]] = {}

        # Declarations whose value is currently being walked
        declaration_stack: List[Declaration] = []

        def visit(node: CSSNode, parent: Optional[CSSNode]) -> None:
            if parent is not None and node not in parents:
                parents[node] = parent

            node_type = node.type

            if node_type is NodeType.DECLARATION:
                if is_custom_property_name(node.property):
                    declarations[node.property].append(node)
                declaration_stack.append(node)
                declaration_variables[node] = []

            elif node_type is NodeType.ATRULE and node.name.lower() == "property":
                name = _custom_property_identifier(node.prelude.children) if node.prelude else None
                if name is not None:
                    definitions[name].append(node)

            elif is_var_function(node):
                name = _custom_property_identifier(node.children)
                if name is not None:
                    references[name].append(node)
                if declaration_stack:
                    declaration_variables[declaration_stack[-1]].append(node)

            steps.append(TraversalStep(target=node, phase=Phase.ENTER, parent=parent))

            for child in child_nodes(node):
                visit(child, node)

            if node_type is NodeType.DECLARATION:
                declaration_stack.pop()

            steps.append(TraversalStep(target=node, phase=Phase.EXIT, parent=parent))

        visit(self.ast, None)

        names = list(dict.fromkeys([*declarations, *definitions, *references]))
        self._custom_properties = {
            name: CustomPropertyUses(
                declarations=tuple(declarations.get(name, ())),
                definitions=tuple(definitions.get(name, ())),
                references=tuple(references.get(name, ()))
            )
            for name in names
        }
        self._declaration_variables = {
            declaration: tuple(functions)
            for declaration, functions in declaration_variables.items()
        }
        self._parents = parents
        self._steps = tuple(steps)

        logger.debug(
            f"Traversed {len(self._steps) // 2} nodes, "
            f"found {len(self._custom_properties)} custom properties"
        )

        return self._steps

    def _ensure_traversed(self) -> None:
        if self._steps is None:
            self.traverse()

    # Parent relation

    def get_parent(self, node: CSSNode) -> Optional[CSSNode]:
        """Immediate parent of a node, None for the root or an unknown node"""
        self._ensure_traversed()
        return self._parents.get(node)

    def get_ancestors(self, node: CSSNode) -> List[CSSNode]:
        """Ancestors of a node ordered from the root down to its parent"""
        ancestors = []
        parent = self.get_parent(node)
        while parent is not None:
            ancestors.append(parent)
            parent = self._parents.get(parent)
        ancestors.reverse()
        return ancestors

    # Custom property index

    def get_custom_property_uses(self, name: str) -> Optional[CustomPropertyUses]:
        self._ensure_traversed()
        return self._custom_properties.get(name)

    def get_custom_property_names(self) -> List[str]:
        """Custom property names in order of first appearance"""
        self._ensure_traversed()
        return list(self._custom_properties)

    def get_declaration_variables(self, declaration: CSSNode) -> List[Function]:
        """
        Get the ``var()`` functions used in a declaration's value.

        Args:
            declaration: Declaration node from this session's tree

        Returns:
            The functions in source order, or an empty list for a declaration
            without references or a node this session never visited
        """
        self._ensure_traversed()
        return list(self._declaration_variables.get(declaration, ()))

    # Resolution

    def get_property_initial_value(self, name: str) -> Optional[Value]:
        """``initial-value`` of the first ``@property`` rule that declares one"""
        uses = self.get_custom_property_uses(name)
        if uses is None:
            return None
        return next(self._initial_values(uses), None)

    def get_closest_variable_value(
        self,
        reference: Union[Function, str]
    ) -> Optional[VariableValue]:
        """
        Get the value a ``var()`` function most likely resolves to.

        With a ``var()`` node the lookup order is:

        1. the last declaration of the property inside the reference's own
           rule block
        2. the reference's fallback value
        3. the last declaration before the reference in any other rule
        4. the ``initial-value`` of a ``@property`` definition

        With a custom property name the lookup is the last declaration
        anywhere, then the ``@property`` initial value.

        Returns:
            A ``Value`` or ``Raw`` node, or None when nothing applies
        """
        self._ensure_traversed()

        if isinstance(reference, str):
            return self._closest_value_for_name(reference)

        name = self._reference_name(reference)
        if name is None:
            return None

        uses = self._custom_properties.get(name)
        rule = self._enclosing_rule(reference)

        if rule is not None and uses is not None:
            in_rule = [
                declaration for declaration in uses.declarations
                if self._belongs_to_rule(declaration, rule)
            ]
            if in_rule:
                return in_rule[-1].value

        fallback = self._fallback(reference)
        if fallback is not None:
            return fallback

        if uses is not None:
            reference_offset = _start_offset(reference, float("inf"))
            previous = [
                declaration for declaration in uses.declarations
                if not self._belongs_to_rule(declaration, rule)
                and _start_offset(declaration, 0) < reference_offset
            ]
            if previous:
                return previous[-1].value

            return next(self._initial_values(uses), None)

        return None

    def get_variable_values(self, reference: Function) -> List[VariableValue]:
        """
        Get every value a ``var()`` function could resolve to.

        The list holds ``@property`` initial values first, then the value of
        every declaration of the property in source order, then the
        reference's fallback.
        """
        self._ensure_traversed()

        name = self._reference_name(reference)
        if name is None:
            return []

        values: List[VariableValue] = []
        uses = self._custom_properties.get(name)

        if uses is not None:
            values.extend(self._initial_values(uses))
            values.extend(declaration.value for declaration in uses.declarations)

        fallback = self._fallback(reference)
        if fallback is not None:
            values.append(fallback)

        return values

    def _closest_value_for_name(self, name: str) -> Optional[VariableValue]:
        uses = self._custom_properties.get(name)
        if uses is None:
            return None
        if uses.declarations:
            return uses.declarations[-1].value
        return next(self._initial_values(uses), None)

    @staticmethod
    def _reference_name(reference: CSSNode) -> Optional[str]:
        children = getattr(reference, "children", None)
        if not children or children[0].type is not NodeType.IDENTIFIER:
            return None
        return children[0].name

    @staticmethod
    def _fallback(reference: Function) -> Optional[Raw]:
        if len(reference.children) >= 3:
            return reference.children[2]
        return None

    @staticmethod
    def _initial_values(uses: CustomPropertyUses) -> Iterator[Value]:
        for definition in uses.definitions:
            if definition.block is None:
                continue
            for child in definition.block.children:
                if child.type is NodeType.DECLARATION and child.property == "initial-value":
                    yield child.value

    def _enclosing_rule(self, node: CSSNode) -> Optional[Rule]:
        ancestor = self._parents.get(node)
        while ancestor is not None:
            if ancestor.type is NodeType.RULE:
                return ancestor
            ancestor = self._parents.get(ancestor)
        return None

    def _belongs_to_rule(self, declaration: Declaration, rule: Optional[Rule]) -> bool:
        """Check if a declaration's nearest enclosing rule is ``rule``"""
        if rule is None:
            return False
        return self._enclosing_rule(declaration) is rule
