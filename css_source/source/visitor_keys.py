"""
Child layout of every syntax tree node tag.

The traversal engine visits a node's children strictly through this table,
in the listed field order. A tag missing from the table is a malformed tree.
"""

from typing import Dict, Iterator, Tuple

from ..models.nodes import CSSNode, NodeType


class NodeShapeError(Exception):
    """Raised when a node's tag has no defined child layout"""
    pass


VISITOR_KEYS: Dict[NodeType, Tuple[str, ...]] = {
    # Structure
    NodeType.STYLESHEET: ("children",),
    NodeType.RULE: ("prelude", "block"),
    NodeType.ATRULE: ("prelude", "block"),
    NodeType.ATRULE_PRELUDE: ("children",),
    NodeType.BLOCK: ("children",),
    NodeType.DECLARATION: ("value",),

    # Values
    NodeType.VALUE: ("children",),
    NodeType.RAW: (),
    NodeType.FUNCTION: ("children",),
    NodeType.PARENTHESES: ("children",),
    NodeType.BRACKETS: ("children",),
    NodeType.IDENTIFIER: (),
    NodeType.NUMBER: (),
    NodeType.DIMENSION: (),
    NodeType.PERCENTAGE: (),
    NodeType.HASH: (),
    NodeType.STRING: (),
    NodeType.OPERATOR: (),

    # Selectors
    NodeType.SELECTOR_LIST: ("children",),
    NodeType.SELECTOR: ("children",),
    NodeType.TYPE_SELECTOR: (),
    NodeType.CLASS_SELECTOR: (),
    NodeType.ID_SELECTOR: (),
    NodeType.ATTRIBUTE_SELECTOR: ("name", "value"),
    NodeType.PSEUDO_CLASS_SELECTOR: ("children",),
    NodeType.PSEUDO_ELEMENT_SELECTOR: ("children",),
    NodeType.NESTING_SELECTOR: (),
    NodeType.COMBINATOR: (),
}


def get_visitor_keys(node: CSSNode) -> Tuple[str, ...]:
    """
    Get the child field names of a node.

    Raises:
        NodeShapeError: If the node's tag has no defined layout
    """
    node_type = getattr(node, "type", None)
    try:
        return VISITOR_KEYS[node_type]
    except (KeyError, TypeError):
        raise NodeShapeError(f"No child layout defined for node type {node_type!r}") from None


def child_nodes(node: CSSNode) -> Iterator[CSSNode]:
    """Yield a node's children in visiting order"""
    for key in get_visitor_keys(node):
        child = getattr(node, key)
        if child is None:
            continue
        if isinstance(child, tuple):
            yield from child
        else:
            yield child
