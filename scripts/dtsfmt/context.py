"""Formatting state threaded through the printer."""

from dataclasses import dataclass, replace

from .config import Config


@dataclass(frozen=True)
class FormatContext:
    """Indentation depth and keymap mode flags for one subtree.

    Contexts are values: every method returns a new context and leaves the
    receiver untouched, so a flag set inside one subtree is never seen by its
    siblings.
    """

    config: Config
    indent: int = 0
    keymap: bool = False
    bindings: bool = False

    def with_indent(self, indent: int) -> "FormatContext":
        return replace(self, indent=indent)

    def inc(self, levels: int = 1) -> "FormatContext":
        return replace(self, indent=self.indent + levels)

    def dec(self, levels: int = 1) -> "FormatContext":
        return replace(self, indent=max(self.indent - levels, 0))

    def in_keymap(self) -> "FormatContext":
        return replace(self, keymap=True)

    def in_bindings(self) -> "FormatContext":
        return replace(self, bindings=True)

    @property
    def aligns_bindings(self) -> bool:
        """True inside a bindings property of a keymap node."""
        return self.keymap and self.bindings

    @property
    def indentation(self) -> str:
        return self.config.indent_unit * self.indent
