"""
Data models for canvas-layout — the block tree.

A page is a flat forest of blocks.  Each block is either a **memo** (a leaf
note) or a **category** (a container that may hold memos and further
categories):

    Page
    ├── Category        parent_id = None       (root level)
    │   ├── Memo        parent_id = category
    │   └── Category    parent_id = category
    │       └── Memo
    └── Memo            parent_id = None       (root level)

The hierarchy is expressed only through ``parent_id``; ``children`` on a
category is informational and never drives layout.

Derived geometry (rectangles, push vectors, the tagged ``Collidable`` used
by the resolvers) is kept in plain dataclasses — it is recomputed on demand
and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """Top-left corner of a block in canvas coordinates."""
    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    """Explicit block size.  Absent or non-positive values fall back to the
    configured defaults (see ``area.resolve_size``)."""
    width: float = 0.0
    height: float = 0.0


class MemoBlock(BaseModel):
    """A memo — a leaf note placed on the canvas."""
    kind: Literal["memo"] = "memo"
    id: str
    title: str = ""
    content: str = ""
    position: Position = Field(default_factory=Position)
    size: Optional[Size] = None
    parent_id: Optional[str] = None


class CategoryBlock(BaseModel):
    """A category — a container block whose area encloses its descendants.

    Only expanded categories own an area for collision purposes; a
    collapsed category collides as a plain block of its own size.
    """
    kind: Literal["category"] = "category"
    id: str
    title: str = ""
    position: Position = Field(default_factory=Position)
    size: Optional[Size] = None
    parent_id: Optional[str] = None
    is_expanded: bool = True
    children: list[str] = Field(default_factory=list)


Block = Union[MemoBlock, CategoryBlock]


class Page(BaseModel):
    """A tree snapshot — every memo and category on one canvas page.

    Index maps
    ----------
    ``reindex()`` builds an id → block map and a parent id → child ids map
    once, so lookups during resolution are O(1) instead of repeated scans.
    The maps hold references to the block objects, so position changes are
    visible through them; only a change of ``parent_id`` (a structural
    edit) requires calling ``reindex()`` again.
    """
    id: str = "page-1"
    name: str = ""
    memos: list[MemoBlock] = Field(default_factory=list)
    categories: list[CategoryBlock] = Field(default_factory=list)

    _blocks: dict[str, Block] = {}
    _children: dict[Optional[str], list[str]] = {}

    def model_post_init(self, __context):
        """Build lookup maps after initialization."""
        self.reindex()

    def reindex(self) -> None:
        """Rebuild the id and parent lookup maps."""
        self._blocks = {}
        self._children = {}
        for block in [*self.memos, *self.categories]:
            self._blocks[block.id] = block
            self._children.setdefault(block.parent_id, []).append(block.id)

    def copy_snapshot(self) -> "Page":
        """Return a deep, independently mutable copy of this page."""
        page = self.model_copy(deep=True)
        page.reindex()
        return page

    def get(self, block_id: Optional[str]) -> Optional[Block]:
        """Look up a memo or category by id."""
        if block_id is None:
            return None
        return self._blocks.get(block_id)

    def get_memo(self, block_id: Optional[str]) -> Optional[MemoBlock]:
        block = self.get(block_id)
        return block if isinstance(block, MemoBlock) else None

    def get_category(self, block_id: Optional[str]) -> Optional[CategoryBlock]:
        block = self.get(block_id)
        return block if isinstance(block, CategoryBlock) else None

    def children_of(self, parent_id: Optional[str]) -> list[Block]:
        """Direct children of ``parent_id`` (``None`` for the root level).

        Memos come first, then categories, each in page order.
        """
        return [self._blocks[child_id] for child_id in self._children.get(parent_id, [])]

    def child_memos(self, parent_id: Optional[str]) -> list[MemoBlock]:
        return [b for b in self.children_of(parent_id) if isinstance(b, MemoBlock)]

    def child_categories(self, parent_id: Optional[str]) -> list[CategoryBlock]:
        return [b for b in self.children_of(parent_id) if isinstance(b, CategoryBlock)]

    def all_blocks(self) -> list[Block]:
        """Every block on the page, memos first."""
        return [*self.memos, *self.categories]

    def positions(self) -> dict[str, tuple[float, float]]:
        """Map of block id to ``(x, y)`` — handy for comparing snapshots."""
        return {b.id: (b.position.x, b.position.y) for b in self.all_blocks()}


# ---------------------------------------------------------------------------
# Derived geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bounds:
    """An axis-aligned rectangle: top-left corner plus extent."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.x + dx, self.y + dy, self.width, self.height)


# A category's padded bounding rectangle
CategoryArea = Bounds


@dataclass(frozen=True)
class Delta:
    """A displacement in canvas coordinates."""
    x: float = 0.0
    y: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0


ZERO_DELTA = Delta()


# Collidable kinds
MEMO = "memo"     # a memo rectangle
AREA = "area"     # an expanded category, colliding with its whole area
BLOCK = "block"   # a collapsed category, colliding with its own rectangle

CATEGORY_KINDS = frozenset({AREA, BLOCK})
ALL_KINDS = frozenset({MEMO, AREA, BLOCK})


@dataclass
class Collidable:
    """One participant of a sibling collision check.

    Memos and categories are handled uniformly through ``bounds``; ``kind``
    only matters for the product rules (root memos never push areas).
    """
    id: str
    kind: str
    parent_id: Optional[str]
    bounds: Bounds

    @property
    def is_root_memo(self) -> bool:
        return self.kind == MEMO and self.parent_id is None
