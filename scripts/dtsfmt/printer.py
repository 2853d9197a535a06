"""Devicetree printer.

Walks the syntax tree depth-first and writes canonical text. Each node kind
has its own handler; kinds without one fall back to a generic walk over their
children, so grammar additions degrade to odd indentation instead of errors.
"""

import re
import sys
from collections.abc import Callable
from typing import TextIO

from .bindings import format_comment, render_bindings
from .config import Config
from .context import FormatContext
from .syntax import PREPROC_KINDS, NodeKind, SyntaxNode, parse

# Byte strings longer than this wrap onto one line per chunk
BYTES_PER_LINE = 16

BRANCH_KINDS = frozenset({NodeKind.PREPROC_ELSE, NodeKind.PREPROC_ELIF, NodeKind.PREPROC_ELIFDEF})
HEADER_KINDS = frozenset({NodeKind.FILE_VERSION, NodeKind.PLUGIN})
WRAPPER_KINDS = frozenset({NodeKind.LABELED_ITEM, NodeKind.OMIT_IF_NO_REF})

VERBATIM_KINDS = (
    NodeKind.IDENTIFIER,
    NodeKind.REFERENCE,
    NodeKind.PATH,
    NodeKind.UNIT_ADDRESS,
    NodeKind.STRING_LITERAL,
    NodeKind.SYSTEM_LIB_STRING,
    NodeKind.INTEGER_LITERAL,
    NodeKind.CHAR_LITERAL,
    NodeKind.CALL_EXPRESSION,
    NodeKind.PARENTHESIZED_EXPRESSION,
    NodeKind.BINARY_EXPRESSION,
    NodeKind.UNARY_EXPRESSION,
    NodeKind.CONDITIONAL_EXPRESSION,
    NodeKind.PREPROC_PARAMS,
    NodeKind.PREPROC_ARG,
    NodeKind.AMPERSAND,
    NodeKind.AT,
    NodeKind.REF_PATH_OPEN,
    NodeKind.LANGLE,
    NodeKind.RANGLE,
    NodeKind.LBRACKET,
    NodeKind.RBRACKET,
)

PUNCTUATION = {
    NodeKind.LBRACE: " {\n",
    NodeKind.SEMICOLON: ";\n",
    NodeKind.COMMA: ", ",
    NodeKind.EQUALS: " = ",
    NodeKind.COLON: ": ",
}


def directive_keyword(text: str) -> str:
    """Normalize a preprocessor keyword, e.g. `#  define` to `#define`."""
    return re.sub(r"^#\s*", "#", text.strip())


class Printer:
    """Formats one syntax tree. Create a new printer for every file."""

    def __init__(self, config: Config, diagnostics: TextIO | None = None):
        self._config = config
        self._layout = config.get_layout()
        self._diagnostics = diagnostics
        self._out: list[str] = []
        self._handlers: dict[NodeKind, Callable[[SyntaxNode, FormatContext], None]] = {
            NodeKind.COMMENT: self._comment,
            NodeKind.FILE_VERSION: self._header,
            NodeKind.PLUGIN: self._header,
            NodeKind.DTSI_INCLUDE: self._dtsi_include,
            NodeKind.MEMORY_RESERVATION: self._statement,
            NodeKind.DELETE_NODE: self._statement,
            NodeKind.DELETE_PROPERTY: self._statement,
            NodeKind.OMIT_IF_NO_REF: self._prefix,
            NodeKind.LABELED_ITEM: self._prefix,
            NodeKind.PREPROC_INCLUDE: self._directive,
            NodeKind.PREPROC_DEF: self._directive,
            NodeKind.PREPROC_FUNCTION_DEF: self._directive,
            NodeKind.PREPROC_CALL: self._directive,
            NodeKind.PREPROC_IF: self._conditional,
            NodeKind.PREPROC_IFDEF: self._conditional,
            NodeKind.NODE: self._node,
            NodeKind.PROPERTY: self._property,
            NodeKind.INTEGER_CELLS: self._integer_cells,
            NodeKind.BYTE_STRING_LITERAL: self._byte_string,
            NodeKind.RBRACE: self._close_brace,
        }
        for kind in VERBATIM_KINDS:
            self._handlers[kind] = self._verbatim
        for kind in PUNCTUATION:
            self._handlers[kind] = self._punctuation

    def print_document(self, root: SyntaxNode) -> str:
        """Format every top-level item of the document and return the text."""
        ctx = FormatContext(config=self._config)
        for child in root.children:
            self._visit(child, ctx)
        return "".join(self._out)

    # --- output helpers ---

    def _write(self, *parts: str) -> None:
        self._out.extend(parts)

    def _tail(self, size: int) -> str:
        tail = ""
        for part in reversed(self._out):
            tail = part + tail
            if len(tail) >= size:
                break
        return tail[-size:]

    def _separate(self) -> None:
        """Start a blank line unless the output already ends with one."""
        if self._out and self._tail(2) != "\n\n":
            self._write("\n")

    def _end_run(self, node: SyntaxNode, run_kinds: frozenset[NodeKind]) -> None:
        """Write a blank line after the last item of a run of similar items."""
        following = node.next_sibling
        if following is not None and following.is_named and following.kind not in run_kinds:
            self._write("\n")

    def _diagnose(self, message: str) -> None:
        print(message, file=self._diagnostics or sys.stderr)

    # --- dispatch ---

    def _visit(self, node: SyntaxNode, ctx: FormatContext) -> None:
        handler = self._handlers.get(node.kind, self._unhandled)
        handler(node, ctx)

    def _unhandled(self, node: SyntaxNode, ctx: FormatContext) -> None:
        if self._config.warn_on_unhandled_tokens:
            noun = "child" if node.child_count == 1 else "children"
            self._diagnose(f"unhandled type '{node.type}' ({node.child_count} {noun}): {node.token}")

        if not node.children:
            self._write(node.token)
            return

        first, *rest = node.children
        self._visit(first, ctx)
        for child in rest:
            self._visit(child, ctx.inc())

    # --- comments and top-level statements ---

    def _comment(self, node: SyntaxNode, ctx: FormatContext) -> None:
        previous = node.prev_sibling
        if previous is not None and previous.kind is not NodeKind.COMMENT:
            self._separate()
        self._write(ctx.indentation, format_comment(node.text), "\n")

    def _header(self, node: SyntaxNode, ctx: FormatContext) -> None:
        self._write(ctx.indentation, "".join(child.token for child in node.children), "\n")
        self._end_run(node, HEADER_KINDS)

    def _statement(self, node: SyntaxNode, ctx: FormatContext) -> None:
        parts: list[str] = []
        for child in node.children:
            if child.kind is NodeKind.SEMICOLON:
                break
            if child.kind is NodeKind.COLON and parts:
                parts[-1] += ":"
            elif parts and (child.kind is NodeKind.AT or parts[-1].endswith("@")):
                # node@address is a single name
                parts[-1] += child.token
            else:
                parts.append(child.token)
        self._write(ctx.indentation, " ".join(parts), ";\n")

    def _prefix(self, node: SyntaxNode, ctx: FormatContext) -> None:
        """Labels and `/omit-if-no-ref/` written on the line of the item they wrap."""
        if not self._is_prefixed(node):
            self._write(ctx.indentation)
        for child in node.children:
            if child.kind is NodeKind.COLON:
                self._write(": ")
            elif child.is_kind(NodeKind.NODE, NodeKind.PROPERTY, *WRAPPER_KINDS):
                self._visit(child, ctx)
            else:
                following = child.next_sibling
                is_label = following is not None and following.kind is NodeKind.COLON
                self._write(child.token if is_label else child.token + " ")

    def _inline_comment(self, node: SyntaxNode, ctx: FormatContext) -> None:
        """A comment inside a statement, kept on the statement line."""
        text = format_comment(node.text)
        if not self._tail(1).isspace():
            self._write(" ")
        if text.startswith("//"):
            self._write(text, "\n", ctx.inc().indentation)
            return
        self._write(text)
        following = node.next_sibling
        if following is not None and not following.is_kind(NodeKind.COMMA, NodeKind.SEMICOLON, NodeKind.EQUALS):
            self._write(" ")

    def _dtsi_include(self, node: SyntaxNode, ctx: FormatContext) -> None:
        path = node.named_children[-1] if node.named_children else node.children[-1]
        self._write(ctx.indentation, "/include/ ", path.token, "\n")
        self._end_run(node, frozenset({NodeKind.DTSI_INCLUDE}))

    # --- preprocessor ---

    def _directive(self, node: SyntaxNode, ctx: FormatContext) -> None:
        head, *rest = node.children
        operands = [child.token for child in rest if child.token]
        if node.kind is NodeKind.PREPROC_FUNCTION_DEF and len(operands) >= 2:
            # NAME(args) stays glued together
            operands = [operands[0] + operands[1], *operands[2:]]
        self._write(ctx.indentation, " ".join([directive_keyword(head.text), *operands]), "\n")
        self._end_run(node, PREPROC_KINDS | BRANCH_KINDS)

    def _conditional(self, node: SyntaxNode, ctx: FormatContext) -> None:
        self._branch(node, ctx)
        self._write(ctx.indentation, "#endif\n")
        self._end_run(node, PREPROC_KINDS)

    def _branch(self, node: SyntaxNode, ctx: FormatContext) -> None:
        head, *body = node.children
        keyword = directive_keyword(head.text)
        if node.kind is not NodeKind.PREPROC_ELSE and body:
            condition, *body = body
            self._write(ctx.indentation, keyword, " ", condition.token, "\n")
        else:
            self._write(ctx.indentation, keyword, "\n")

        for child in body:
            if child.kind in BRANCH_KINDS:
                self._branch(child, ctx)
            elif not child.is_named and directive_keyword(child.text) == "#endif":
                continue
            else:
                self._visit(child, ctx)

    # --- nodes and properties ---

    def _is_prefixed(self, node: SyntaxNode) -> bool:
        """True when a label or keyword wrapping the node is already written."""
        return node.parent is not None and node.parent.kind in WRAPPER_KINDS and node.prev_sibling is not None

    def _outermost(self, node: SyntaxNode) -> SyntaxNode:
        while self._is_prefixed(node):
            node = node.parent
        return node

    @staticmethod
    def _innermost(node: SyntaxNode) -> SyntaxNode:
        while node.kind in WRAPPER_KINDS and node.children:
            node = node.children[-1]
        return node

    @staticmethod
    def _name_of(node: SyntaxNode) -> str:
        """Name token of a node or property, skipping any labels."""
        for child in node.children:
            if child.is_kind(NodeKind.COLON, NodeKind.LBRACE, NodeKind.EQUALS, NodeKind.SEMICOLON):
                continue
            following = child.next_sibling
            if following is not None and following.kind is NodeKind.COLON:
                continue
            return child.token
        return ""

    def _node(self, node: SyntaxNode, ctx: FormatContext) -> None:
        if not self._is_prefixed(node):
            self._write(ctx.indentation)

        body_ctx = ctx.inc()
        if self._name_of(node) == "keymap":
            body_ctx = body_ctx.in_keymap()

        in_header = True
        for child in node.children:
            if in_header:
                if child.kind is NodeKind.LBRACE:
                    in_header = False
                    self._visit(child, body_ctx)
                elif child.kind is NodeKind.COLON:
                    self._write(": ")
                else:
                    self._write(child.token)
                continue
            self._visit(child, body_ctx)

    def _property(self, node: SyntaxNode, ctx: FormatContext) -> None:
        if not self._is_prefixed(node):
            self._write(ctx.indentation)

        if self._name_of(node) == "bindings":
            value_ctx = ctx.inc().in_bindings()
        else:
            value_ctx = ctx

        in_value = False
        for child in node.children:
            if child.kind is NodeKind.SEMICOLON:
                break
            if child.kind is NodeKind.COMMENT:
                self._inline_comment(child, ctx)
            elif child.is_kind(NodeKind.EQUALS, NodeKind.COMMA, NodeKind.COLON):
                in_value = in_value or child.kind is NodeKind.EQUALS
                self._visit(child, value_ctx)
            elif in_value:
                self._visit(child, value_ctx)
            else:
                self._write(child.token)
        self._write(";\n")

        following = self._outermost(node).next_sibling
        if following is not None and self._innermost(following).kind is NodeKind.NODE:
            self._write("\n")

    # --- values ---

    def _integer_cells(self, node: SyntaxNode, ctx: FormatContext) -> None:
        if ctx.aligns_bindings:
            self._write(render_bindings(node.children, self._layout, ctx, report=self._diagnose))
            return

        text = "<"
        separator = ""
        for child in node.children:
            if child.is_kind(NodeKind.LANGLE, NodeKind.RANGLE):
                continue
            if child.kind is NodeKind.COMMENT:
                token = format_comment(child.text)
            else:
                token = child.token
            if separator == " " and (token == ")" or text.endswith("(")):
                separator = ""
            text += separator + token
            # a line comment runs to the end of the line
            separator = "\n" + ctx.inc().indentation if token.startswith("//") else " "
        if separator.startswith("\n"):
            text += "\n" + ctx.indentation
        self._write(text + ">")

    def _byte_string(self, node: SyntaxNode, ctx: FormatContext) -> None:
        tokens = [
            child.token
            for child in node.children
            if not child.is_kind(NodeKind.LBRACKET, NodeKind.RBRACKET, NodeKind.COMMENT)
        ]
        digits = "".join("".join(tokens).split()) if tokens else "".join(node.token[1:-1].split())
        data = [digits[i:i + 2] for i in range(0, len(digits), 2)]

        if len(data) <= BYTES_PER_LINE:
            self._write("[", " ".join(data), "]")
            return

        lines = ["["]
        for start in range(0, len(data), BYTES_PER_LINE):
            lines.append(ctx.inc().indentation + " ".join(data[start:start + BYTES_PER_LINE]))
        lines.append(ctx.indentation + "]")
        self._write("\n".join(lines))

    def _verbatim(self, node: SyntaxNode, ctx: FormatContext) -> None:
        self._write(node.token)

    def _punctuation(self, node: SyntaxNode, ctx: FormatContext) -> None:
        self._write(PUNCTUATION[node.kind])

    def _close_brace(self, node: SyntaxNode, ctx: FormatContext) -> None:
        self._write(ctx.dec().indentation, "}")


def format_tree(root: SyntaxNode, config: Config, *, diagnostics: TextIO | None = None) -> str:
    """Format an already parsed document."""
    return Printer(config, diagnostics).print_document(root)


def format_source(source: str, config: Config, *, diagnostics: TextIO | None = None) -> str:
    """Format devicetree source text.

    Args:
        source: Text of the file to format
        config: Formatting options
        diagnostics: Stream for advisory messages; defaults to stderr

    Returns:
        The formatted text

    Raises:
        ParseError: If the source does not parse
    """
    return format_tree(parse(source), config, diagnostics=diagnostics)
