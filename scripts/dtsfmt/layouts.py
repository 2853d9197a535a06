"""Physical keyboard layouts used to align keymap bindings.

A layout is a flat grid in row-major order. Every cell is either a key (1),
which takes one binding expression, or a gap (0), which stays blank and takes
nothing. Rows all have the same length, so the grid size must divide evenly
by the row count.
"""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import LayoutError


class KeyboardLayout(BaseModel):
    """Key/gap grid of a physical keyboard."""

    model_config = ConfigDict(frozen=True)

    name: str = Field("custom", description="Layout identifier")
    bindings: tuple[int, ...] = Field(..., description="Grid cells, 1 for a key and 0 for a gap")
    row_count: int = Field(1, ge=1, description="Number of physical rows")

    @field_validator("bindings")
    @classmethod
    def _check_cells(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise LayoutError("layout grid is empty")
        invalid = sorted({cell for cell in value if cell not in (0, 1)})
        if invalid:
            raise LayoutError(f"layout cells must be 0 or 1, got {invalid}")
        return value

    @model_validator(mode="after")
    def _check_rows(self) -> "KeyboardLayout":
        if len(self.bindings) % self.row_count:
            raise LayoutError(
                f"layout '{self.name}' has {len(self.bindings)} cells, "
                f"which is not divisible by {self.row_count} rows"
            )
        return self

    @property
    def row_size(self) -> int:
        """Number of grid cells in each row."""
        return len(self.bindings) // self.row_count

    @property
    def key_count(self) -> int:
        """Number of cells that take a binding."""
        return sum(self.bindings)


# fmt: off
ADV360 = KeyboardLayout(
    name="adv360",
    row_count=5,
    bindings=(
        1, 1, 1, 1, 1, 1, 1,   0, 0, 0, 0,   1, 1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1, 1,   0, 0, 0, 0,   1, 1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1, 1,   1, 1, 1, 1,   1, 1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1, 0,   0, 1, 1, 0,   0, 1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 0, 1,   1, 1, 1, 1,   1, 0, 1, 1, 1, 1, 1,
    ),
)

CORNE = KeyboardLayout(
    name="corne",
    row_count=4,
    bindings=(
        1, 1, 1, 1, 1, 1,   1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1,   1, 1, 1, 1, 1, 1,
        1, 1, 1, 1, 1, 1,   1, 1, 1, 1, 1, 1,
        0, 0, 0, 1, 1, 1,   1, 1, 1, 0, 0, 0,
    ),
)
# fmt: on

LAYOUTS: dict[str, KeyboardLayout] = {layout.name: layout for layout in (ADV360, CORNE)}

DEFAULT_LAYOUT = ADV360.name


def list_layouts(custom: Mapping[str, KeyboardLayout] | None = None) -> list[str]:
    """Return the ids of all builtin and custom layouts, sorted."""
    return sorted(set(LAYOUTS) | set(custom or {}))


def get_layout(name: str, custom: Mapping[str, KeyboardLayout] | None = None) -> KeyboardLayout:
    """Look up a layout by id.

    Args:
        name: Layout id, e.g. "adv360"
        custom: Layouts declared in the configuration file; these shadow
            builtin layouts with the same id

    Returns:
        The matching KeyboardLayout

    Raises:
        LayoutError: If no layout has that id
    """
    if custom and name in custom:
        return custom[name]
    if name in LAYOUTS:
        return LAYOUTS[name]
    raise LayoutError(f"unknown layout '{name}' (available: {', '.join(list_layouts(custom))})")
