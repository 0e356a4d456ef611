"""
Area reflow outside of drags.

Areas change shape for reasons other than a drag: a memo is added or
removed, a category is expanded, a block is resized.  ``AreaWatcher``
remembers the last area it saw for every expanded category and, when one
changes, re-runs the area resolver for that category and all of its
ancestors so the surrounding layout makes room.

``reflow_siblings`` is the one-shot form used after structural edits.
"""

from __future__ import annotations

import logging
from typing import Optional

from .area import compute_area
from .config import DEFAULT_CONFIG, LayoutConfig
from .hierarchy import ancestor_ids
from .models import CategoryArea, Page
from .resolvers import resolve_area_collisions

logger = logging.getLogger(__name__)


class AreaWatcher:
    """Tracks category areas between page updates and reflows on change."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.areas: dict[str, CategoryArea] = {}

    def changed_categories(self, page: Page) -> list[str]:
        """Ids of expanded categories whose area differs from the stored one,
        each followed by its ancestors (nearest first), without duplicates."""
        changed: list[str] = []
        for category in page.categories:
            if not category.is_expanded:
                continue
            area = compute_area(category, page, self.config)
            if area is None or self.areas.get(category.id) == area:
                continue
            for category_id in [category.id, *ancestor_ids(page, category.id)]:
                if category_id not in changed:
                    changed.append(category_id)
        return changed

    def update(self, page: Page, dragging: bool = False) -> Page:
        """Reflow ``page`` around every category whose area changed.

        Returns a new page when anything was resolved, else ``page`` itself.
        While a drag is in progress the drag controller owns collision
        handling, so nothing is done.
        """
        if dragging:
            return page

        changed = self.changed_categories(page)
        if not changed:
            self._remember(page)
            return page

        logger.debug(f"Areas changed for {changed!r}; reflowing")
        result_page = page
        for category_id in changed:
            if result_page.get_category(category_id) is None:
                continue
            result = resolve_area_collisions(category_id, result_page, config=self.config)
            result_page = result.page

        self._remember(result_page)
        return result_page

    def reset(self) -> None:
        """Forget every stored area."""
        self.areas.clear()

    def _remember(self, page: Page) -> None:
        """Replace the stored areas with those of ``page``.

        Deleted or collapsed categories drop out, so a category that comes
        back later is treated as changed.
        """
        areas: dict[str, CategoryArea] = {}
        for category in page.categories:
            if not category.is_expanded:
                continue
            area = compute_area(category, page, self.config)
            if area is not None:
                areas[category.id] = area
        self.areas = areas


def reflow_siblings(
    page: Page,
    parent_id: Optional[str] = None,
    config: Optional[LayoutConfig] = None,
) -> Page:
    """Separate the expanded categories directly under ``parent_id``.

    Each category in turn is resolved as the mover, in page order, so
    earlier categories keep their place and later ones give way.
    """
    cfg = config or DEFAULT_CONFIG
    result_page = page.copy_snapshot()
    for category in page.child_categories(parent_id):
        if not category.is_expanded:
            continue
        result = resolve_area_collisions(category.id, result_page, config=cfg)
        result_page = result.page
    return result_page
