"""Column-aligned rendering of keymap bindings.

A `bindings` property inside a `keymap` node is printed as a table that
mirrors the physical keyboard: one binding expression per key, blank cells
for gaps, and every column padded to its widest entry.
"""

from collections.abc import Callable, Iterable, Sequence

from .context import FormatContext
from .layouts import KeyboardLayout
from .syntax import NodeKind, SyntaxNode

# Spaces between the widest cell of a column and the next column
COLUMN_GAP = 3


def collect_bindings(cells: Iterable[SyntaxNode]) -> list[str]:
    """Group the tokens of an integer-cell list into binding expressions.

    Every binding starts with a `&` reference and runs until the next one,
    so `<&kp A &mt LSHIFT B>` gives `["&kp A", "&mt LSHIFT B"]`.

    Args:
        cells: Children of the integer-cell list

    Returns:
        Binding expressions, tokens joined by single spaces
    """
    bindings = []
    current: list[str] = []

    for cell in cells:
        if cell.is_kind(NodeKind.LANGLE, NodeKind.RANGLE, NodeKind.COMMENT):
            continue
        text = cell.token
        if not text:
            continue
        if current and text.startswith("&"):
            bindings.append(" ".join(current))
            current = []
        current.append(text)

    if current:
        bindings.append(" ".join(current))
    return bindings


def place_bindings(bindings: Sequence[str], layout: KeyboardLayout) -> tuple[list[str], list[str]]:
    """Lay bindings out on the layout grid.

    Each key cell takes the next binding, or stays blank once they run out.
    Gap cells are always blank and take nothing.

    Returns:
        (grid, dropped): the grid cells in row-major order, and the bindings
        left over after every key cell was filled
    """
    remaining = iter(bindings)
    grid = [next(remaining, "") if is_key else "" for is_key in layout.bindings]
    return grid, list(remaining)


def column_widths(grid: Sequence[str], row_size: int) -> list[int]:
    """Widest cell of every column."""
    return [max(len(cell) for cell in grid[col::row_size]) for col in range(row_size)]


def format_row(row: Sequence[str], widths: Sequence[int], indentation: str) -> str:
    """Render one table row; only the last cell is left unpadded."""
    padded = [cell.ljust(widths[col] + COLUMN_GAP) for col, cell in enumerate(row[:-1])]
    return (indentation + "".join(padded) + row[-1]).rstrip()


def format_comment(text: str) -> str:
    """Normalize a `//` comment to `// text`; block comments are unchanged."""
    text = text.strip()
    if not text.startswith("//"):
        return text
    body = text[2:].strip()
    return f"// {body}" if body else "//"


def render_bindings(
    cells: Sequence[SyntaxNode],
    layout: KeyboardLayout,
    ctx: FormatContext,
    report: Callable[[str], None] | None = None,
) -> str:
    """Render an integer-cell list as a binding table.

    Args:
        cells: Children of the integer-cell list, brackets included
        layout: Physical layout that decides rows and gaps
        ctx: Context of the bindings values; rows print at its indent and the
            closing `>` one level out
        report: Receives a message when bindings do not fit the layout

    Returns:
        The table, from `<` to `>`
    """
    bindings = collect_bindings(cells)
    grid, dropped = place_bindings(bindings, layout)
    if dropped and report is not None:
        report(
            f"{len(dropped)} binding(s) exceed the {layout.key_count} keys of layout "
            f"'{layout.name}' and were not printed: {' '.join(dropped)}"
        )

    row_size = layout.row_size
    widths = column_widths(grid, row_size)

    lines = ["<"]
    for cell in cells:
        if cell.is_kind(NodeKind.COMMENT):
            lines.append(ctx.indentation + format_comment(cell.text))
    for start in range(0, len(grid), row_size):
        lines.append(format_row(grid[start:start + row_size], widths, ctx.indentation))
    lines.append(ctx.dec().indentation + ">")
    return "\n".join(lines)
