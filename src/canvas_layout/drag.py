"""
Drag position handlers for canvas-layout.

``DragController`` turns a stream of pointer positions for one dragged block
into updated page snapshots.  Per frame it:

  1. Starts a ``DragSession`` on the first movement of a gesture,
     snapshotting the start positions of the dragged block, the other
     selected blocks, and all their descendants.
  2. Computes the total delta (since the gesture started) and the frame
     delta (since the previous frame).
  3. Places every snapshotted block at ``start + total delta``.  Positions
     are absolute, so resolver adjustments from earlier frames never
     accumulate into drift.
  4. Unless collisions are skipped for this frame, ejects a root memo from
     any root area it was dropped onto, then runs the unified resolver with
     the frame delta so pushed siblings keep pace with the pointer.
  5. Finds the topmost ancestor whose area changed shape and re-runs the
     area resolver there, so outer-level categories stay apart too.

``end()`` discards the session: direction memory, snapshots and the
previous-frame position never leak into the next gesture.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from .area import block_rect, compute_area
from .config import DEFAULT_CONFIG, LayoutConfig
from .hierarchy import ancestor_ids, descendant_ids, translate_subtree
from .models import CategoryArea, Delta, Page, Position
from .push import DirectionMemory, push_direction
from .resolvers import resolve_area_collisions, resolve_unified_collisions

logger = logging.getLogger(__name__)


@dataclass
class DragSession:
    """Per-gesture state, created on the first movement and dropped at the end.

    Attributes:
        moving_id:         The block under the pointer.
        moving_ids:        Blocks seeded at priority 0 (multi-selection).
        start_positions:   Position of every block that follows the pointer,
                           captured when the gesture started.
        previous_position: Pointer-driven position of ``moving_id`` on the
                           previous frame.
        memory:            Push-axis memory shared by every resolver call of
                           the gesture.
    """
    moving_id: str
    moving_ids: list[str]
    start_positions: dict[str, Position] = field(default_factory=dict)
    previous_position: Optional[Position] = None
    memory: DirectionMemory = field(default_factory=DirectionMemory)

    @classmethod
    def start(
        cls,
        page: Page,
        moving_id: str,
        selected_ids: Optional[Iterable[str]] = None,
    ) -> "DragSession":
        """Snapshot the blocks that follow ``moving_id`` in ``page``.

        When ``moving_id`` belongs to ``selected_ids`` the whole selection
        moves together; otherwise only ``moving_id`` does.
        """
        selected = list(dict.fromkeys(selected_ids or []))
        if moving_id in selected:
            moving_ids = [moving_id, *[sid for sid in selected if sid != moving_id]]
        else:
            moving_ids = [moving_id]

        start_positions: dict[str, Position] = {}
        for block_id in moving_ids:
            for follower_id in [block_id, *descendant_ids(page, block_id)]:
                block = page.get(follower_id)
                if block is not None and follower_id not in start_positions:
                    start_positions[follower_id] = block.position.model_copy()

        logger.debug(f"Drag session started for {moving_id!r} with {len(start_positions)} followers")
        return cls(moving_id=moving_id, moving_ids=moving_ids, start_positions=start_positions)

    def frame(self, position: Position) -> tuple[Delta, Delta]:
        """Record ``position`` for this frame and return ``(total, frame)`` deltas.

        On the first frame the frame delta equals the total delta.
        """
        origin = self.start_positions[self.moving_id]
        total = Delta(position.x - origin.x, position.y - origin.y)
        if self.previous_position is None:
            frame = total
        else:
            frame = Delta(position.x - self.previous_position.x, position.y - self.previous_position.y)
        self.previous_position = position.model_copy()
        return total, frame

    def clear(self) -> None:
        self.start_positions.clear()
        self.previous_position = None
        self.memory.clear()


class DragController:
    """Applies drag frames to a caller-owned page snapshot.

    The controller holds the caller's current ``page`` and replaces it with
    a new snapshot after every frame; the previous snapshot object is never
    modified.

    ``skip_collision`` is called on every frame; pass a callable reading the
    live modifier-key state so toggling it mid-drag takes effect at once.
    """

    def __init__(
        self,
        page: Page,
        config: Optional[LayoutConfig] = None,
        skip_collision: Optional[Callable[[], bool]] = None,
    ):
        self.page = page
        self.config = config or DEFAULT_CONFIG
        self.skip_collision = skip_collision or (lambda: False)
        self.session: Optional[DragSession] = None

    @property
    def is_dragging(self) -> bool:
        return self.session is not None

    def drag(
        self,
        moving_id: str,
        position: Position,
        selected_ids: Optional[Iterable[str]] = None,
    ) -> Page:
        """Move ``moving_id`` to ``position`` for this frame.

        Returns (and stores as ``self.page``) the updated snapshot.  An
        unknown id leaves the page untouched.
        """
        if self.page.get(moving_id) is None:
            logger.debug(f"Drag ignored: {moving_id!r} is not on the page")
            return self.page

        if self.session is None or self.session.moving_id != moving_id:
            if self.session is not None:
                self.end()
            self.session = DragSession.start(self.page, moving_id, selected_ids)

        session = self.session
        total, frame = session.frame(position)

        before = self.page
        working = before.copy_snapshot()
        for block_id, origin in session.start_positions.items():
            block = working.get(block_id)
            if block is not None:
                block.position = Position(x=origin.x + total.x, y=origin.y + total.y)

        if self.skip_collision():
            logger.debug(f"Collision skipped for frame of {moving_id!r}")
            self.page = working
            return self.page

        self._eject_root_memo(working, moving_id, session.memory)

        result = resolve_unified_collisions(
            session.moving_ids,
            working,
            self.config.max_iterations,
            frame,
            memory=session.memory,
            config=self.config,
        )
        working = self._reflow_ancestors(before, result.page, moving_id, session.memory)

        self.page = working
        return self.page

    def end(self) -> Page:
        """Finish the current gesture and clear all per-gesture state."""
        if self.session is not None:
            logger.debug(f"Drag session ended for {self.session.moving_id!r}")
            self.session.clear()
            self.session = None
        return self.page

    # ------------------------------------------------------------------

    def _eject_root_memo(self, page: Page, moving_id: str, memory: DirectionMemory) -> None:
        """Push a root-level memo out of any root area it overlaps, in place.

        Areas never yield to root memos, so the memo itself gives way.
        """
        memo = page.get_memo(moving_id)
        if memo is None or memo.parent_id is not None:
            return

        for category in page.child_categories(None):
            if not category.is_expanded:
                continue
            area = compute_area(category, page, self.config)
            if area is None:
                continue
            push = push_direction(
                area,
                block_rect(memo, self.config),
                category.id,
                memo.id,
                memory,
                self.config.push_gap,
            )
            if not push.is_zero:
                logger.debug(f"Root memo {memo.id!r} ejected from area {category.id!r}")
                translate_subtree(page, memo.id, push)

    def _reflow_ancestors(
        self,
        before: Page,
        after: Page,
        moving_id: str,
        memory: DirectionMemory,
    ) -> Page:
        """Re-resolve around the topmost ancestor whose area changed."""
        topmost: Optional[str] = None
        for ancestor_id in ancestor_ids(after, moving_id):
            if _area_of(before, ancestor_id, self.config) != _area_of(after, ancestor_id, self.config):
                topmost = ancestor_id

        if topmost is None:
            return after

        logger.debug(f"Area of ancestor {topmost!r} changed; reflowing its siblings")
        result = resolve_area_collisions(
            topmost,
            after,
            self.config.max_iterations,
            memory=memory,
            config=self.config,
        )
        return result.page


def _area_of(page: Page, category_id: str, config: LayoutConfig) -> Optional[CategoryArea]:
    category = page.get_category(category_id)
    if category is None:
        return None
    return compute_area(category, page, config)


def drag_block(
    page: Page,
    moving_id: str,
    position: Position,
    config: Optional[LayoutConfig] = None,
) -> Page:
    """One-frame convenience: drag ``moving_id`` to ``position`` and release.

    Equivalent to a single ``DragController.drag`` followed by ``end``.
    """
    controller = DragController(page, config)
    controller.drag(moving_id, position)
    return controller.end()
