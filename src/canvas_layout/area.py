"""
Category area calculation for canvas-layout.

A category's **area** is the padded rectangle enclosing the category block
itself plus everything below it:

    ┌──────────────── area ────────────────┐
    │  padding                             │
    │   ┌─category─┐                       │
    │   └──────────┘   ┌─memo─┐            │
    │                  └──────┘            │
    │   ┌── child category area ──┐        │
    │   │  ┌─memo─┐               │        │
    │   │  └──────┘               │        │
    │   └─────────────────────────┘        │
    └──────────────────────────────────────┘

Child categories contribute their own (recursively computed) area, so
nesting padding accumulates level by level.  The result is clamped to a
minimum width/height so empty categories never collapse.

This module is also the single place where missing block sizes are
resolved to the configured defaults.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import DEFAULT_CONFIG, LayoutConfig
from .models import (
    AREA,
    BLOCK,
    MEMO,
    Block,
    Bounds,
    CategoryArea,
    CategoryBlock,
    Collidable,
    MemoBlock,
    Page,
    Position,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sizes and rectangles
# ---------------------------------------------------------------------------

def resolve_size(block: Block, config: Optional[LayoutConfig] = None) -> tuple[float, float]:
    """Return ``(width, height)`` for a block, substituting defaults.

    Absent sizes and non-positive dimensions fall back to the per-kind
    default independently for each axis.
    """
    cfg = config or DEFAULT_CONFIG
    if isinstance(block, MemoBlock):
        default_w, default_h = cfg.memo_width, cfg.memo_height
    else:
        default_w, default_h = cfg.category_width, cfg.category_height

    if block.size is None:
        return default_w, default_h
    width = block.size.width if block.size.width > 0 else default_w
    height = block.size.height if block.size.height > 0 else default_h
    return width, height


def block_rect(block: Block, config: Optional[LayoutConfig] = None) -> Bounds:
    """The block's own footprint (no descendants, no padding)."""
    width, height = resolve_size(block, config)
    return Bounds(block.position.x, block.position.y, width, height)


# ---------------------------------------------------------------------------
# Area
# ---------------------------------------------------------------------------

def compute_area(
    category: CategoryBlock,
    page: Page,
    config: Optional[LayoutConfig] = None,
    visited: Optional[set[str]] = None,
) -> Optional[CategoryArea]:
    """Compute the padded area of ``category`` within ``page``.

    Steps:
    1. Start from the category's own rectangle
    2. Fold in every direct child memo's rectangle
    3. Fold in every direct child category's area (recursively), or the
       child's own rectangle when no area can be computed for it
    4. Pad on all sides, then clamp to the minimum width/height

    ``visited`` holds the ids on the current recursion path.  Reaching an
    id already on the path means the parent graph has a cycle: that call
    returns ``None`` instead of recursing.
    """
    cfg = config or DEFAULT_CONFIG
    if visited is None:
        visited = set()

    if category.id in visited:
        logger.warning(f"Cycle in parent links at category {category.id!r}")
        return None
    visited.add(category.id)

    own = block_rect(category, cfg)
    min_x, min_y = own.x, own.y
    max_x, max_y = own.right, own.bottom

    for memo in page.child_memos(category.id):
        rect = block_rect(memo, cfg)
        min_x = min(min_x, rect.x)
        min_y = min(min_y, rect.y)
        max_x = max(max_x, rect.right)
        max_y = max(max_y, rect.bottom)

    for child in page.child_categories(category.id):
        rect = compute_area(child, page, cfg, visited)
        if rect is None:
            rect = block_rect(child, cfg)
        min_x = min(min_x, rect.x)
        min_y = min(min_y, rect.y)
        max_x = max(max_x, rect.right)
        max_y = max(max_y, rect.bottom)

    # Path set: other branches may legitimately reach this id again
    visited.discard(category.id)

    padding = cfg.area_padding
    return CategoryArea(
        x=min_x - padding,
        y=min_y - padding,
        width=max(cfg.area_min_width, max_x - min_x + padding * 2),
        height=max(cfg.area_min_height, max_y - min_y + padding * 2),
    )


class AreaCache:
    """Per-call cache of category area sizes.

    Stores each area's size and its offset from the category's position the
    first time it is requested.  Pushing a category moves its whole subtree
    by the same delta, so the offset stays valid for the rest of the call and
    later lookups only need the category's current position.
    """

    def __init__(self, page: Page, config: Optional[LayoutConfig] = None):
        self.page = page
        self.config = config or DEFAULT_CONFIG
        self._entries: dict[str, tuple[float, float, float, float]] = {}

    def area(self, category: CategoryBlock) -> Optional[CategoryArea]:
        cached = self._entries.get(category.id)
        if cached:
            offset_x, offset_y, width, height = cached
            return CategoryArea(
                category.position.x + offset_x,
                category.position.y + offset_y,
                width,
                height,
            )

        area = compute_area(category, self.page, self.config)
        if area:
            self._entries[category.id] = (
                area.x - category.position.x,
                area.y - category.position.y,
                area.width,
                area.height,
            )
        return area

    def invalidate(self, category_id: Optional[str] = None) -> None:
        """Drop one cached entry, or all of them."""
        if category_id is None:
            self._entries.clear()
        else:
            self._entries.pop(category_id, None)


def collision_bounds(
    block: Block,
    page: Page,
    config: Optional[LayoutConfig] = None,
    cache: Optional[AreaCache] = None,
) -> Collidable:
    """Wrap a block as a ``Collidable``.

    Memos collide with their rectangle, expanded categories with their
    area, collapsed categories with their own rectangle.
    """
    cfg = config or DEFAULT_CONFIG
    if isinstance(block, MemoBlock):
        return Collidable(block.id, MEMO, block.parent_id, block_rect(block, cfg))

    if not block.is_expanded:
        return Collidable(block.id, BLOCK, block.parent_id, block_rect(block, cfg))

    area = cache.area(block) if cache else compute_area(block, page, cfg)
    if area is None:
        area = block_rect(block, cfg)
    return Collidable(block.id, AREA, block.parent_id, area)


# ---------------------------------------------------------------------------
# Rectangle helpers
# ---------------------------------------------------------------------------

def overlap(a: Bounds, b: Bounds) -> tuple[float, float]:
    """Overlap extent of two rectangles on each axis (0 when apart)."""
    overlap_x = max(0.0, min(a.right, b.right) - max(a.x, b.x))
    overlap_y = max(0.0, min(a.bottom, b.bottom) - max(a.y, b.y))
    return overlap_x, overlap_y


def check_overlap(a: Bounds, b: Bounds) -> bool:
    """True when the rectangles share a region of positive area."""
    overlap_x, overlap_y = overlap(a, b)
    return overlap_x > 0 and overlap_y > 0


def is_area_contained(child: Bounds, parent: Bounds) -> bool:
    """True when ``child`` lies entirely within ``parent``."""
    return (
        child.x >= parent.x
        and child.y >= parent.y
        and child.right <= parent.right
        and child.bottom <= parent.bottom
    )


def constrain_area_within_parent(child: Bounds, parent: Bounds) -> Position:
    """Top-left corner that keeps ``child`` inside ``parent``.

    When the child is larger than the parent on an axis, its far edge wins
    (the child is aligned to the parent's right/bottom edge).
    """
    x, y = child.x, child.y
    if child.x < parent.x:
        x = parent.x
    if child.right > parent.right:
        x = parent.right - child.width
    if child.y < parent.y:
        y = parent.y
    if child.bottom > parent.bottom:
        y = parent.bottom - child.height
    return Position(x=x, y=y)
