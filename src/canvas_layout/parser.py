"""YAML snapshot parser for canvas-layout.

Supports two formats:
1. Rooted page YAML (everything under a ``page:`` key, with id and name)
2. Flat format (``memos:`` / ``categories:`` at the top level)

Block keys may be written in the application's camelCase (``parentId``,
``isExpanded``) or in snake_case.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional

import yaml

from .models import CategoryBlock, MemoBlock, Page, Position, Size


def parse_yaml(yaml_str: str) -> Page:
    """Parse a YAML string into a Page model."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("Snapshot YAML must be a mapping")

    # Check if it's a rooted page document
    if "page" in data:
        if not data["page"]:
            raise ValueError("Empty page in YAML input")
        return _parse_page(data["page"])

    # Otherwise, treat as flat format
    return _parse_page(data)


def parse_file(path: str) -> Page:
    """Parse a YAML file into a Page model."""
    content = Path(path).read_text()
    return parse_yaml(content)


def _parse_page(data: dict) -> Page:
    """Parse a page body.

    Example:
        id: page-1
        name: Planning
        categories:
          - id: work
            position: {x: 0, y: 0}
            isExpanded: true
        memos:
          - id: todo
            title: "Todo"
            position: {x: 40, y: 140}
            parentId: work
    """
    memos = [_parse_memo(m) for m in data.get("memos") or []]
    categories = [_parse_category(c) for c in data.get("categories") or []]

    seen: set[str] = set()
    for block in [*memos, *categories]:
        if block.id in seen:
            raise ValueError(f"Duplicate block id: {block.id!r}")
        seen.add(block.id)

    return Page(
        id=str(data.get("id", "page-1")),
        name=data.get("name", ""),
        memos=memos,
        categories=categories,
    )


def _get(data: dict, camel: str, snake: str, default=None):
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _require_id(data: dict, kind: str) -> str:
    if not isinstance(data, dict):
        raise ValueError(f"{kind} entry must be a mapping: {data!r}")
    if "id" not in data or data["id"] is None:
        raise ValueError(f"{kind} without an id: {data!r}")
    return str(data["id"])


def _parse_position(data: dict) -> Position:
    pos = data.get("position")
    if pos is None:
        # Allow x/y directly on the block
        return Position(x=float(data.get("x", 0)), y=float(data.get("y", 0)))
    if not isinstance(pos, dict):
        raise ValueError(f"Block {data.get('id')!r} has a malformed position: {pos!r}")
    return Position(x=float(pos.get("x", 0)), y=float(pos.get("y", 0)))


def _parse_size(data: dict) -> Optional[Size]:
    size = data.get("size")
    if size is None:
        return None
    if not isinstance(size, dict):
        raise ValueError(f"Block {data.get('id')!r} has a malformed size: {size!r}")
    return Size(width=float(size.get("width", 0)), height=float(size.get("height", 0)))


def _parse_parent(data: dict) -> Optional[str]:
    parent_id = _get(data, "parentId", "parent_id")
    return str(parent_id) if parent_id is not None else None


def _parse_memo(data: dict) -> MemoBlock:
    """Parse a single memo from YAML data."""
    return MemoBlock(
        id=_require_id(data, "Memo"),
        title=data.get("title", ""),
        content=data.get("content", ""),
        position=_parse_position(data),
        size=_parse_size(data),
        parent_id=_parse_parent(data),
    )


def _parse_category(data: dict) -> CategoryBlock:
    """Parse a single category from YAML data."""
    return CategoryBlock(
        id=_require_id(data, "Category"),
        title=data.get("title", ""),
        position=_parse_position(data),
        size=_parse_size(data),
        parent_id=_parse_parent(data),
        is_expanded=bool(_get(data, "isExpanded", "is_expanded", True)),
        children=[str(c) for c in data.get("children") or []],
    )


def page_to_yaml(page: Page) -> str:
    """Serialize a Page model back to YAML."""
    data = {
        "page": {
            "id": page.id,
            "name": page.name,
            "categories": [],
            "memos": [],
        }
    }

    for category in page.categories:
        cat_data = {
            "id": category.id,
            "title": category.title,
            "position": {"x": category.position.x, "y": category.position.y},
            "isExpanded": category.is_expanded,
        }
        if category.size is not None:
            cat_data["size"] = {"width": category.size.width, "height": category.size.height}
        if category.parent_id is not None:
            cat_data["parentId"] = category.parent_id
        if category.children:
            cat_data["children"] = list(category.children)
        data["page"]["categories"].append(cat_data)

    for memo in page.memos:
        memo_data = {
            "id": memo.id,
            "title": memo.title,
            "position": {"x": memo.position.x, "y": memo.position.y},
        }
        if memo.content:
            memo_data["content"] = memo.content
        if memo.size is not None:
            memo_data["size"] = {"width": memo.size.width, "height": memo.size.height}
        if memo.parent_id is not None:
            memo_data["parentId"] = memo.parent_id
        data["page"]["memos"].append(memo_data)

    return yaml.dump(data, default_flow_style=False, sort_keys=False)
