"""Responsive column geometry for carousel frames."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Geometry:
    """Derived layout for one observed container width.

    Attributes:
        column_width: Width of a single column (never below the variant floor).
        frame_width: Width of the visible frame including gaps and padding.
    """

    column_width: int
    frame_width: int

    def step(self, gap: int) -> int:
        """Distance the track moves for one column step."""
        return self.column_width + gap


@dataclass(frozen=True)
class GeometrySpec:
    """Layout inputs that do not depend on the observed width."""

    columns: int
    gap: int = 0
    padding_x: int = 0
    min_column_width: int = 0


def resolve_geometry(
    container_width: float,
    columns: int,
    gap: int = 0,
    padding_x: int = 0,
    min_column_width: int = 0,
) -> Geometry:
    """Compute column and frame width for a container.

    Args:
        container_width: Observed width of the carousel viewport.
        columns: Number of columns visible at once (clamped to >= 1).
        gap: Space between adjacent columns.
        padding_x: Horizontal padding on each side of the frame.
        min_column_width: Floor that keeps narrow viewports from collapsing
            columns to zero or negative widths.

    Returns:
        The resulting Geometry.
    """
    columns = max(1, int(columns))
    gap = max(0, gap)
    padding_x = max(0, padding_x)
    usable = max(0, container_width) - 2 * padding_x - gap * (columns - 1)
    column_width = max(max(0, min_column_width), int(usable // columns))
    frame_width = columns * column_width + gap * (columns - 1) + 2 * padding_x
    return Geometry(column_width=column_width, frame_width=frame_width)


class GeometryResolver:
    """Recomputes geometry every time the container width is observed."""

    def __init__(self, spec: GeometrySpec, unmeasured_width: int | None = None):
        """Initialize the resolver.

        Args:
            spec: Column count, gap, padding and width floor.
            unmeasured_width: Width assumed while the container reports 0
                (not laid out yet). None keeps 0.
        """
        self._spec = spec
        self._unmeasured_width = unmeasured_width
        self._width = 0.0
        self._geometry = self._compute()

    @property
    def spec(self) -> GeometrySpec:
        return self._spec

    @property
    def width(self) -> float:
        return self._width

    @property
    def geometry(self) -> Geometry:
        return self._geometry

    def observe(self, container_width: float) -> Geometry:
        """Record a new container width and return the fresh geometry."""
        self._width = max(0.0, container_width)
        self._geometry = self._compute()
        return self._geometry

    def set_columns(self, columns: int) -> Geometry:
        """Change the visible column count and recompute."""
        self._spec = GeometrySpec(
            columns=columns,
            gap=self._spec.gap,
            padding_x=self._spec.padding_x,
            min_column_width=self._spec.min_column_width,
        )
        self._geometry = self._compute()
        return self._geometry

    def _compute(self) -> Geometry:
        width = self._width
        if width <= 0 and self._unmeasured_width is not None:
            width = self._unmeasured_width
        return resolve_geometry(
            width,
            self._spec.columns,
            self._spec.gap,
            self._spec.padding_x,
            self._spec.min_column_width,
        )
