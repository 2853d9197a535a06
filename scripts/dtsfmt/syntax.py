"""Concrete syntax tree for devicetree sources.

The tree-sitter devicetree grammar does the parsing. Its tree is copied into
plain SyntaxNode objects that keep their parent and position, so the printer
can look at neighbouring nodes without re-scanning the parent.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cache

import tree_sitter_devicetree
from tree_sitter import Language, Node, Parser

from .errors import ParseError


class NodeKind(str, Enum):
    """Grammar node kinds the printer knows about."""

    DOCUMENT = "document"
    COMMENT = "comment"

    # Header statements
    FILE_VERSION = "file_version"
    PLUGIN = "plugin"
    MEMORY_RESERVATION = "memory_reservation"
    DTSI_INCLUDE = "dtsi_include"
    DELETE_NODE = "delete_node"
    DELETE_PROPERTY = "delete_property"
    OMIT_IF_NO_REF = "omit_if_no_ref"

    # Preprocessor
    PREPROC_INCLUDE = "preproc_include"
    PREPROC_DEF = "preproc_def"
    PREPROC_FUNCTION_DEF = "preproc_function_def"
    PREPROC_CALL = "preproc_call"
    PREPROC_IF = "preproc_if"
    PREPROC_IFDEF = "preproc_ifdef"
    PREPROC_ELSE = "preproc_else"
    PREPROC_ELIF = "preproc_elif"
    PREPROC_ELIFDEF = "preproc_elifdef"
    PREPROC_PARAMS = "preproc_params"
    PREPROC_ARG = "preproc_arg"

    # Structure
    LABELED_ITEM = "labeled_item"
    NODE = "node"
    PROPERTY = "property"

    # Values
    IDENTIFIER = "identifier"
    REFERENCE = "reference"
    PATH = "path"
    UNIT_ADDRESS = "unit_address"
    STRING_LITERAL = "string_literal"
    SYSTEM_LIB_STRING = "system_lib_string"
    INTEGER_LITERAL = "integer_literal"
    CHAR_LITERAL = "char_literal"
    INTEGER_CELLS = "integer_cells"
    BYTE_STRING_LITERAL = "byte_string_literal"
    CALL_EXPRESSION = "call_expression"
    PARENTHESIZED_EXPRESSION = "parenthesized_expression"
    BINARY_EXPRESSION = "binary_expression"
    UNARY_EXPRESSION = "unary_expression"
    CONDITIONAL_EXPRESSION = "conditional_expression"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    SEMICOLON = ";"
    COMMA = ","
    EQUALS = "="
    COLON = ":"
    AMPERSAND = "&"
    AT = "@"
    REF_PATH_OPEN = "&{"
    LANGLE = "<"
    RANGLE = ">"
    LBRACKET = "["
    RBRACKET = "]"

    UNKNOWN = "<unknown>"

    @classmethod
    def of(cls, type_name: str) -> "NodeKind":
        """Map a grammar kind to its member, or UNKNOWN."""
        type_name = _ALIASES.get(type_name, type_name)
        try:
            return cls(type_name)
        except ValueError:
            return cls.UNKNOWN


_ALIASES = {
    "byte_string": "byte_string_literal",
    "property_identifier": "identifier",
    "label_identifier": "identifier",
    "node_identifier": "identifier",
}

PREPROC_KINDS = frozenset(
    {
        NodeKind.PREPROC_INCLUDE,
        NodeKind.PREPROC_DEF,
        NodeKind.PREPROC_FUNCTION_DEF,
        NodeKind.PREPROC_CALL,
        NodeKind.PREPROC_IF,
        NodeKind.PREPROC_IFDEF,
    }
)


@dataclass(eq=False)
class SyntaxNode:
    """One node of the concrete syntax tree."""

    type: str
    text: str
    children: list["SyntaxNode"] = field(default_factory=list)
    is_named: bool = True
    start_byte: int = 0
    end_byte: int = 0
    kind: NodeKind = field(init=False)
    parent: "SyntaxNode | None" = field(default=None, init=False, repr=False)
    index: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.kind = NodeKind.of(self.type)
        for index, child in enumerate(self.children):
            child.parent = self
            child.index = index

    @property
    def prev_sibling(self) -> "SyntaxNode | None":
        if self.parent is None or self.index == 0:
            return None
        return self.parent.children[self.index - 1]

    @property
    def next_sibling(self) -> "SyntaxNode | None":
        if self.parent is None or self.index + 1 >= len(self.parent.children):
            return None
        return self.parent.children[self.index + 1]

    @property
    def child_count(self) -> int:
        return len(self.children)

    @property
    def named_children(self) -> list["SyntaxNode"]:
        return [child for child in self.children if child.is_named]

    @property
    def token(self) -> str:
        """Source text without surrounding whitespace."""
        return self.text.strip()

    def is_kind(self, *kinds: NodeKind) -> bool:
        return self.kind in kinds


@cache
def devicetree_language() -> Language:
    return Language(tree_sitter_devicetree.language())


def parse(source: str) -> SyntaxNode:
    """Parse devicetree source into a SyntaxNode tree.

    Args:
        source: Full text of a .dts, .dtsi, .overlay or .keymap file

    Returns:
        The root node, of kind DOCUMENT

    Raises:
        ParseError: If the grammar could not parse the whole source
    """
    source_bytes = source.encode("utf-8")
    tree = Parser(devicetree_language()).parse(source_bytes)

    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        row, column = bad.start_point[0], bad.start_point[1]
        reason = f"missing '{bad.type}'" if bad.is_missing else "syntax error"
        raise ParseError(reason, row + 1, column + 1)

    return _convert(tree.root_node, source_bytes)


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _convert(node: Node, source: bytes) -> SyntaxNode:
    children = []
    for child in node.children:
        # Line terminators of preprocessor directives are tokens of their own
        if not child.is_named and not source[child.start_byte:child.end_byte].strip():
            continue
        children.append(_convert(child, source))

    return SyntaxNode(
        type=node.type,
        text=source[node.start_byte:node.end_byte].decode("utf-8"),
        children=children,
        is_named=node.is_named,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )
