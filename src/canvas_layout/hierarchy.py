"""
Hierarchy helpers for canvas-layout.

Traversal (ancestors, descendants), subtree translation, and the structural
edits that re-parent blocks.  Every traversal carries a visited set so a
malformed, cyclic parent graph ends the walk instead of looping.

Structural edits return a new ``Page``; the input is never modified.  An
edit that would create a cycle returns an unchanged copy.
"""

from __future__ import annotations

import logging

from .models import Delta, Page

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def ancestor_ids(page: Page, block_id: str) -> list[str]:
    """Ids of the categories above ``block_id``, nearest first."""
    ancestors: list[str] = []
    visited = {block_id}
    block = page.get(block_id)
    parent_id = block.parent_id if block else None

    while parent_id and parent_id not in visited:
        visited.add(parent_id)
        parent = page.get_category(parent_id)
        if parent is None:
            break
        ancestors.append(parent_id)
        parent_id = parent.parent_id
    return ancestors


def descendant_category_ids(page: Page, category_id: str) -> list[str]:
    """Ids of every category below ``category_id``, breadth first."""
    result: list[str] = []
    visited = {category_id}
    queue = [category_id]
    while queue:
        current = queue.pop(0)
        for child in page.child_categories(current):
            if child.id in visited:
                continue
            visited.add(child.id)
            result.append(child.id)
            queue.append(child.id)
    return result


def descendant_ids(page: Page, block_id: str) -> list[str]:
    """Ids of every memo and category below ``block_id``.

    Memos have no descendants; the result is empty for them.
    """
    if page.get_category(block_id) is None:
        return []
    result: list[str] = []
    for category_id in [block_id, *descendant_category_ids(page, block_id)]:
        result.extend(memo.id for memo in page.child_memos(category_id))
        if category_id != block_id:
            result.append(category_id)
    return result


def all_child_memo_ids(page: Page, category_id: str) -> list[str]:
    """Ids of every memo anywhere below ``category_id``."""
    return [
        block_id for block_id in descendant_ids(page, category_id)
        if page.get_memo(block_id) is not None
    ]


def is_ancestor(page: Page, potential_ancestor_id: str, block_id: str) -> bool:
    """True when ``potential_ancestor_id`` is ``block_id`` or lies above it."""
    if potential_ancestor_id == block_id:
        return True
    return potential_ancestor_id in ancestor_ids(page, block_id)


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------

def translate_subtree(page: Page, block_id: str, delta: Delta) -> list[str]:
    """Move a block and all its descendants by ``delta``, in place.

    Returns the ids that were moved.
    """
    block = page.get(block_id)
    if block is None or delta.is_zero:
        return []

    moved = [block_id, *descendant_ids(page, block_id)]
    for moved_id in moved:
        target = page.get(moved_id)
        target.position = target.position.model_copy(
            update={"x": target.position.x + delta.x, "y": target.position.y + delta.y}
        )
    return moved


# ---------------------------------------------------------------------------
# Structural edits
# ---------------------------------------------------------------------------

def can_add_category_as_child(page: Page, parent_id: str, child_id: str) -> bool:
    """Check that ``child_id`` may become a child of ``parent_id``.

    Refused when it is the same category, when the child is already an
    ancestor of the parent (cycle), when it is already a child, or when
    either id is not a category.
    """
    if parent_id == child_id:
        return False
    parent = page.get_category(parent_id)
    child = page.get_category(child_id)
    if parent is None or child is None:
        return False
    if is_ancestor(page, child_id, parent_id):
        return False
    if child.parent_id == parent_id:
        return False
    return True


def _detach(page: Page, block_id: str) -> None:
    for category in page.categories:
        if block_id in category.children:
            category.children = [cid for cid in category.children if cid != block_id]


def add_category_to_parent(page: Page, child_id: str, parent_id: str) -> Page:
    """Re-parent category ``child_id`` under ``parent_id``.

    The new parent is expanded so the moved category stays visible.
    """
    result = page.copy_snapshot()
    if not can_add_category_as_child(result, parent_id, child_id):
        logger.debug(f"Refused to move category {child_id!r} under {parent_id!r}")
        return result

    _detach(result, child_id)
    parent = result.get_category(parent_id)
    parent.children = [*parent.children, child_id]
    parent.is_expanded = True
    result.get_category(child_id).parent_id = parent_id
    result.reindex()
    return result


def remove_category_from_parent(page: Page, category_id: str) -> Page:
    """Move a category to the root level."""
    result = page.copy_snapshot()
    category = result.get_category(category_id)
    if category is None:
        return result
    _detach(result, category_id)
    category.parent_id = None
    result.reindex()
    return result


def add_memo_to_category(page: Page, memo_id: str, category_id: str) -> Page:
    """Re-parent memo ``memo_id`` under ``category_id`` (expanding it)."""
    result = page.copy_snapshot()
    memo = result.get_memo(memo_id)
    category = result.get_category(category_id)
    if memo is None or category is None:
        return result

    _detach(result, memo_id)
    category.children = [*category.children, memo_id]
    category.is_expanded = True
    memo.parent_id = category_id
    result.reindex()
    return result


def remove_memo_from_category(page: Page, memo_id: str) -> Page:
    """Move a memo to the root level."""
    result = page.copy_snapshot()
    memo = result.get_memo(memo_id)
    if memo is None:
        return result
    _detach(result, memo_id)
    memo.parent_id = None
    result.reindex()
    return result