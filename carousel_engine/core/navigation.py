"""Translation of raw input events into carousel steps."""

from enum import Enum

WHEEL_DEADZONE = 4.0


class Step(Enum):
    """A single navigation step."""

    BACKWARD = -1
    FORWARD = 1


_KEY_STEPS = {
    "ArrowLeft": Step.BACKWARD,
    "ArrowRight": Step.FORWARD,
}


def key_to_step(key: str) -> Step | None:
    """Map a keyboard key name to a step; other keys map to None."""
    return _KEY_STEPS.get(key)


def wheel_to_step(
    delta_x: float,
    delta_y: float,
    deadzone: float = WHEEL_DEADZONE,
) -> Step | None:
    """Map a pointer-wheel event to one step.

    The dominant axis wins. Deltas smaller than the deadzone are ignored so
    trackpad jitter does not move the carousel.
    """
    delta = delta_y if abs(delta_y) > abs(delta_x) else delta_x
    if abs(delta) < deadzone:
        return None
    return Step.FORWARD if delta > 0 else Step.BACKWARD
