"""
Push-direction heuristic for canvas-layout.

Given a *pusher* and a *pushed* rectangle that overlap, decide which axis
to separate them on and by how much:

  - Axis: the one with the larger center-to-center distance (the two
    objects are already "more apart" there).  Ties fall back to the axis
    with the smaller overlap, then to x.
  - Sign: away from the pusher's center.
  - Magnitude: just enough for the pushed rectangle to clear the pusher's
    edge, plus a small gap.

Axis memory
-----------
While two rectangles slide past each other the center distances can swap
order, which would flip the axis from one call to the next and make the
pushed object jitter.  ``DirectionMemory`` pins the first axis chosen for
an ordered ``(pusher_id, pushed_id)`` pair until that pair stops
overlapping.  The memory belongs to one drag gesture and is cleared when
the gesture ends.
"""

from __future__ import annotations

import math
from typing import Optional

from .config import PUSH_GAP
from .models import Bounds, Delta, ZERO_DELTA


AXIS_X = "x"
AXIS_Y = "y"


class DirectionMemory:
    """Remembered push axis per ordered (pusher, pushed) id pair."""

    def __init__(self):
        self._axes: dict[tuple[str, str], str] = {}

    def get(self, pair: tuple[str, str]) -> Optional[str]:
        return self._axes.get(pair)

    def remember(self, pair: tuple[str, str], axis: str) -> None:
        self._axes[pair] = axis

    def forget(self, pair: tuple[str, str]) -> None:
        self._axes.pop(pair, None)

    def clear(self) -> None:
        self._axes.clear()

    def __len__(self) -> int:
        return len(self._axes)

    def __contains__(self, pair: tuple[str, str]) -> bool:
        return pair in self._axes


def _choose_axis(pusher: Bounds, pushed: Bounds, overlap_x: float, overlap_y: float) -> str:
    distance_x = abs(pushed.center_x - pusher.center_x)
    distance_y = abs(pushed.center_y - pusher.center_y)
    if distance_x > distance_y:
        return AXIS_X
    if distance_y > distance_x:
        return AXIS_Y
    return AXIS_Y if overlap_y < overlap_x else AXIS_X


def push_direction(
    pusher: Bounds,
    pushed: Bounds,
    pusher_id: Optional[str] = None,
    pushed_id: Optional[str] = None,
    memory: Optional[DirectionMemory] = None,
    gap: float = PUSH_GAP,
) -> Delta:
    """Compute how far ``pushed`` must move to stop overlapping ``pusher``.

    Returns a zero delta when the rectangles do not overlap (touching edges
    count as apart); the remembered axis for the pair is dropped in that
    case.  Only one component of a non-zero result is ever set.

    Memory is consulted only when both ids and a ``memory`` are given.
    """
    overlap_x = max(0.0, min(pusher.right, pushed.right) - max(pusher.x, pushed.x))
    overlap_y = max(0.0, min(pusher.bottom, pushed.bottom) - max(pusher.y, pushed.y))

    pair = (pusher_id, pushed_id) if pusher_id is not None and pushed_id is not None else None

    if overlap_x == 0 or overlap_y == 0:
        if memory is not None and pair:
            memory.forget(pair)
        return ZERO_DELTA

    axis = memory.get(pair) if memory is not None and pair else None
    if axis is None:
        axis = _choose_axis(pusher, pushed, overlap_x, overlap_y)
        if memory is not None and pair:
            memory.remember(pair, axis)

    if axis == AXIS_X:
        if pushed.center_x >= pusher.center_x:
            return Delta(x=pusher.right - pushed.x + gap)
        return Delta(x=pusher.x - pushed.right - gap)

    if pushed.center_y >= pusher.center_y:
        return Delta(y=pusher.bottom - pushed.y + gap)
    return Delta(y=pusher.y - pushed.bottom - gap)


def clamp_to_frame(push: Delta, frame_delta: Delta) -> Delta:
    """Limit a push to the mover's per-frame displacement on each axis.

    The sign of the push is kept; the magnitude becomes
    ``min(|push|, |frame_delta|)`` per axis.
    """
    return Delta(
        x=math.copysign(min(abs(push.x), abs(frame_delta.x)), push.x) if push.x else 0.0,
        y=math.copysign(min(abs(push.y), abs(frame_delta.y)), push.y) if push.y else 0.0,
    )
