"""
Devicetree and ZMK keymap formatter.

Parses .dts/.dtsi/.overlay/.keymap files with the tree-sitter devicetree
grammar and prints them back with canonical indentation and spacing. Keymap
bindings are aligned into a table shaped like the physical keyboard.

Usage:
    python -m dtsfmt boards/shields/my_board/my_board.keymap
    python -m dtsfmt --check config/
    cat my_board.keymap | python -m dtsfmt --layout corne
"""

from .config import (
    Config,
    build_config,
    discover_config,
    find_rc_file,
    load_config,
    load_yaml,
)
from .context import FormatContext
from .errors import ConfigError, DtsfmtError, LayoutError, ParseError
from .layouts import KeyboardLayout, get_layout, list_layouts
from .printer import format_source, format_tree
from .bindings import render_bindings
from .syntax import NodeKind, SyntaxNode, parse

__all__ = [
    # Config
    "Config",
    "build_config",
    "discover_config",
    "find_rc_file",
    "load_config",
    "load_yaml",
    # Errors
    "ConfigError",
    "DtsfmtError",
    "LayoutError",
    "ParseError",
    # Layouts
    "KeyboardLayout",
    "get_layout",
    "list_layouts",
    # Printing
    "FormatContext",
    "NodeKind",
    "SyntaxNode",
    "format_source",
    "format_tree",
    "parse",
    "render_bindings",
]
