"""Tests for area reflow outside of drags."""

from canvas_layout.models import CategoryBlock, MemoBlock, Page, Position
from canvas_layout.reflow import AreaWatcher, reflow_siblings


def memo(block_id, x, y, parent=None) -> MemoBlock:
    return MemoBlock(id=block_id, position=Position(x=x, y=y), parent_id=parent)


def category(block_id, x, y, parent=None, expanded=True) -> CategoryBlock:
    return CategoryBlock(id=block_id, position=Position(x=x, y=y), parent_id=parent, is_expanded=expanded)


def stacked_page(with_memo=False) -> Page:
    """K above L, 300 apart; optionally a memo in K that reaches down.

    K's area bottom is 115 when empty and 315 with the memo at y=200;
    L's area top is 280.
    """
    memos = [memo("m", 0, 200, parent="K")] if with_memo else []
    return Page(memos=memos, categories=[category("K", 0, 0), category("L", 0, 300)])


def test_first_update_then_no_op():
    watcher = AreaWatcher()
    page = stacked_page()

    first = watcher.update(page)
    assert first.positions() == page.positions()
    assert set(watcher.areas) == {"K", "L"}

    assert watcher.update(first) is first


def test_growing_area_pushes_neighbour():
    watcher = AreaWatcher()
    watcher.update(stacked_page())

    result = watcher.update(stacked_page(with_memo=True))

    assert result.get("K").position.y == 0
    assert result.get("L").position.y == 336
    # Stored areas reflect the resolved page
    assert watcher.update(result) is result


def test_changed_categories_include_ancestors():
    page = Page(
        memos=[memo("m", 0, 300, parent="Q")],
        categories=[category("P", 0, 0), category("Q", 0, 150, parent="P")],
    )
    watcher = AreaWatcher()
    watcher.update(page)

    moved = page.copy_snapshot()
    moved.get_memo("m").position = Position(x=0, y=500)

    assert watcher.changed_categories(moved) == ["P", "Q"]


def test_collapsed_categories_are_not_watched():
    page = Page(categories=[category("K", 0, 0, expanded=False)])
    watcher = AreaWatcher()
    assert watcher.update(page) is page
    assert watcher.areas == {}


def test_no_reflow_while_dragging():
    watcher = AreaWatcher()
    page = stacked_page(with_memo=True)
    assert watcher.update(page, dragging=True) is page
    assert watcher.areas == {}


def test_deleted_and_collapsed_categories_are_forgotten():
    watcher = AreaWatcher()
    watcher.update(Page(categories=[category("A", 0, 0), category("B", 0, 300)]))
    assert set(watcher.areas) == {"A", "B"}

    watcher.update(Page(categories=[category("B", 0, 300, expanded=False)]))
    assert watcher.areas == {}

    # A comes back and is treated as new
    returning = Page(categories=[category("A", 0, 0)])
    assert watcher.changed_categories(returning) == ["A"]


def test_reset_forgets_areas():
    watcher = AreaWatcher()
    page = watcher.update(stacked_page())
    watcher.reset()

    assert watcher.areas == {}
    assert watcher.update(page) is not page


def test_reflow_siblings_under_parent():
    page = Page(
        categories=[
            category("P", 0, 0),
            category("A", 0, 150, parent="P"),
            category("B", 150, 150, parent="P"),
            category("R", 150, 150),
        ]
    )
    result = reflow_siblings(page, "P")

    assert result.get("A").position.x == 0
    assert result.get("B").position.x == 241
    # Other levels are left alone
    assert result.get("R").position.x == 150
    assert page.get("B").position.x == 150


def test_reflow_siblings_skips_collapsed():
    page = Page(categories=[category("A", 0, 0, expanded=False), category("B", 150, 0)])
    result = reflow_siblings(page)
    # B is the only mover; the collapsed block in its way is pushed
    assert result.get("B").position.x == 150
    assert result.get("A").position.x == -71
