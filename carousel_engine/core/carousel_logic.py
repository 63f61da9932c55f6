"""Carousel window logic - platform agnostic."""

from dataclasses import dataclass


@dataclass
class WindowState:
    """Visible slice of columns within the bucketed item set."""

    start_index: int = 0
    visible_columns: int = 1
    total_columns: int = 0

    @property
    def max_start(self) -> int:
        return max(0, self.total_columns - self.visible_columns)

    @property
    def end_index(self) -> int:
        """Index one past the last visible column."""
        return min(self.total_columns, self.start_index + self.visible_columns)

    @property
    def can_step_forward(self) -> bool:
        return self.start_index + self.visible_columns < self.total_columns

    @property
    def can_step_back(self) -> bool:
        return self.start_index > 0

    @property
    def columns_remaining(self) -> int:
        """Columns left to reveal before the window hits the local end."""
        return self.max_start - self.start_index

    def clamped(self) -> "WindowState":
        """Return a copy whose start index lies within bounds."""
        visible = max(1, self.visible_columns)
        total = max(0, self.total_columns)
        start = min(max(0, self.start_index), max(0, total - visible))
        return WindowState(
            start_index=start,
            visible_columns=visible,
            total_columns=total,
        )


class WindowCursor:
    """Controls window navigation. Every operation returns a new state."""

    def __init__(self, loop: bool = False) -> None:
        self.loop = loop

    def step_forward(self, state: WindowState) -> WindowState:
        """Move one column forward, wrapping to the start in loop mode."""
        state = state.clamped()
        if state.can_step_forward:
            return WindowState(
                start_index=state.start_index + 1,
                visible_columns=state.visible_columns,
                total_columns=state.total_columns,
            )
        if self.loop and state.total_columns > 0:
            return WindowState(
                start_index=0,
                visible_columns=state.visible_columns,
                total_columns=state.total_columns,
            )
        return state

    def step_backward(self, state: WindowState) -> WindowState:
        """Move one column back, returns new state."""
        state = state.clamped()
        if state.can_step_back:
            return WindowState(
                start_index=state.start_index - 1,
                visible_columns=state.visible_columns,
                total_columns=state.total_columns,
            )
        return state

    def resize(
        self,
        state: WindowState,
        total_columns: int,
        visible_columns: int | None = None,
    ) -> WindowState:
        """Adopt a new column count, keeping the position where possible.

        Resizes and append-only growth only clamp; they never rewind the
        user to the first column.
        """
        return WindowState(
            start_index=state.start_index,
            visible_columns=(
                state.visible_columns if visible_columns is None else visible_columns
            ),
            total_columns=total_columns,
        ).clamped()

    def reset(self, state: WindowState, total_columns: int | None = None) -> WindowState:
        """Rewind to the first column, e.g. after the item set is replaced."""
        return WindowState(
            start_index=0,
            visible_columns=state.visible_columns,
            total_columns=(
                state.total_columns if total_columns is None else total_columns
            ),
        ).clamped()

    def translate_offset(self, state: WindowState, column_width: int, gap: int) -> int:
        """Track offset along the primary axis for the current window."""
        return -state.start_index * (column_width + gap)
