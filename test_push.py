"""Tests for the push-direction heuristic and per-gesture axis memory."""

from canvas_layout.models import Bounds, Delta, ZERO_DELTA
from canvas_layout.push import (
    AXIS_X,
    AXIS_Y,
    DirectionMemory,
    clamp_to_frame,
    push_direction,
)


def test_no_overlap_returns_zero():
    assert push_direction(Bounds(0, 0, 100, 100), Bounds(200, 0, 100, 100)) == ZERO_DELTA
    # Touching edges count as apart
    assert push_direction(Bounds(0, 0, 100, 100), Bounds(100, 0, 100, 100)) == ZERO_DELTA


def test_larger_center_distance_picks_axis():
    """The category-area geometry of two neighbouring root categories.

    X area (-20,-20)-(220,115), Y area (170,105)-(410,240): overlap is
    50 on x and 10 on y, centers are 190 apart on x and 125 on y.
    """
    x_area = Bounds(-20, -20, 240, 135)
    y_area = Bounds(170, 105, 240, 135)

    push = push_direction(x_area, y_area)

    assert push == Delta(x=51)
    assert push.x >= 50 + 1


def test_push_points_away_from_pusher():
    pusher = Bounds(100, 0, 100, 100)
    assert push_direction(pusher, Bounds(20, 10, 100, 100)) == Delta(x=-21)
    assert push_direction(pusher, Bounds(110, -80, 100, 100)) == Delta(y=-21)
    assert push_direction(pusher, Bounds(110, 70, 100, 100)) == Delta(y=31)


def test_exact_tie_pushes_positive_x():
    rect = Bounds(0, 0, 100, 100)
    assert push_direction(rect, rect) == Delta(x=101)


def test_spanning_rect_clears_the_far_edge():
    pusher = Bounds(0, 0, 300, 100)
    pushed = Bounds(200, 40, 50, 50)
    # Center distance: x 75, y 15 -> x; must clear pusher.right
    assert push_direction(pusher, pushed) == Delta(x=101)


def test_custom_gap():
    push = push_direction(Bounds(0, 0, 100, 100), Bounds(90, 0, 100, 100), gap=10)
    assert push == Delta(x=20)


def test_direction_stable_while_overlap_grows():
    memory = DirectionMemory()
    pusher = Bounds(0, 0, 100, 100)

    # Overlap grows step by step; without memory the last step would pick y
    steps = [Bounds(90, 60, 100, 100), Bounds(70, 55, 100, 100), Bounds(50, 50, 100, 100),
             Bounds(30, 50, 100, 100)]
    pushes = [push_direction(pusher, pushed, "a", "b", memory) for pushed in steps]

    assert all(p.y == 0 and p.x > 0 for p in pushes)
    assert memory.get(("a", "b")) == AXIS_X
    assert push_direction(pusher, steps[-1]) == Delta(y=51)


def test_memory_is_per_ordered_pair():
    memory = DirectionMemory()
    push_direction(Bounds(0, 0, 100, 100), Bounds(90, 60, 100, 100), "a", "b", memory)

    assert ("a", "b") in memory
    assert ("b", "a") not in memory
    assert len(memory) == 1


def test_memory_forgotten_once_apart():
    memory = DirectionMemory()
    pusher = Bounds(0, 0, 100, 100)
    push_direction(pusher, Bounds(90, 60, 100, 100), "a", "b", memory)
    assert len(memory) == 1

    push_direction(pusher, Bounds(300, 60, 100, 100), "a", "b", memory)
    assert len(memory) == 0

    # A new overlap decides afresh
    push = push_direction(pusher, Bounds(30, 50, 100, 100), "a", "b", memory)
    assert push == Delta(y=51)
    assert memory.get(("a", "b")) == AXIS_Y


def test_calls_without_ids_never_touch_memory():
    memory = DirectionMemory()
    push_direction(Bounds(0, 0, 100, 100), Bounds(90, 60, 100, 100), memory=memory)
    assert len(memory) == 0


def test_memory_clear():
    memory = DirectionMemory()
    memory.remember(("a", "b"), AXIS_X)
    memory.remember(("b", "c"), AXIS_Y)
    memory.clear()
    assert len(memory) == 0
    assert memory.get(("a", "b")) is None


def test_clamp_to_frame():
    assert clamp_to_frame(Delta(x=51), Delta(5, -3)) == Delta(x=5)
    assert clamp_to_frame(Delta(x=-21), Delta(30, 0)) == Delta(x=-21)
    # The push keeps its own sign even when the frame moved the other way
    assert clamp_to_frame(Delta(y=40), Delta(0, -8)) == Delta(y=8)
    assert clamp_to_frame(Delta(y=40), Delta(12, 0)).is_zero
