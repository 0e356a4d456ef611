"""Tests for YAML snapshot parsing and serialization."""

import pytest
import yaml

from canvas_layout.parser import page_to_yaml, parse_file, parse_yaml

ROOTED_YAML = """
page:
  id: planning
  name: Planning
  categories:
    - id: work
      title: Work
      position: {x: 0, y: 0}
      isExpanded: true
      children: [todo]
    - id: archive
      position: {x: 400, y: 0}
      is_expanded: false
  memos:
    - id: todo
      title: Todo
      content: ship it
      position: {x: 40, y: 140}
      size: {width: 180, height: 60}
      parentId: work
    - id: loose
      x: 700
      y: 50
"""

FLAT_YAML = """
memos:
  - id: a
    position: {x: 1, y: 2}
    parent_id: c
categories:
  - id: c
"""


def test_parse_rooted_page():
    page = parse_yaml(ROOTED_YAML)

    assert page.id == "planning"
    assert page.name == "Planning"
    work = page.get_category("work")
    assert work.is_expanded
    assert work.children == ["todo"]
    assert not page.get_category("archive").is_expanded

    todo = page.get_memo("todo")
    assert todo.parent_id == "work"
    assert (todo.size.width, todo.size.height) == (180, 60)
    assert todo.content == "ship it"
    assert [b.id for b in page.children_of("work")] == ["todo"]


def test_position_may_be_given_inline():
    page = parse_yaml(ROOTED_YAML)
    loose = page.get_memo("loose")
    assert (loose.position.x, loose.position.y) == (700, 50)
    assert loose.size is None
    assert loose.parent_id is None


def test_parse_flat_format_with_snake_case():
    page = parse_yaml(FLAT_YAML)

    assert page.id == "page-1"
    assert page.get_memo("a").parent_id == "c"
    assert page.get_category("c").is_expanded


def test_parse_file(tmp_path):
    path = tmp_path / "snapshot.yaml"
    path.write_text(FLAT_YAML)
    assert parse_file(str(path)).get_memo("a") is not None


@pytest.mark.parametrize("text", ["", "   \n", "page:\n"])
def test_empty_input_is_rejected(text):
    with pytest.raises(ValueError):
        parse_yaml(text)


def test_non_mapping_is_rejected():
    with pytest.raises(ValueError):
        parse_yaml("- a\n- b\n")


def test_missing_id_is_rejected():
    with pytest.raises(ValueError, match="without an id"):
        parse_yaml("memos:\n  - title: nameless\n")


@pytest.mark.parametrize(
    "text, match",
    [
        ("memos:\n  - id: x\n    position: 5\n", "malformed position"),
        ("memos:\n  - id: x\n    size: [1, 2]\n", "malformed size"),
        ("categories:\n  - just-a-name\n", "must be a mapping"),
    ],
)
def test_malformed_block_is_rejected(text, match):
    with pytest.raises(ValueError, match=match):
        parse_yaml(text)


def test_duplicate_id_is_rejected():
    text = "memos:\n  - id: x\ncategories:\n  - id: x\n"
    with pytest.raises(ValueError, match="Duplicate"):
        parse_yaml(text)


def test_page_to_yaml_writes_camel_case():
    page = parse_yaml(ROOTED_YAML)
    data = yaml.safe_load(page_to_yaml(page))["page"]

    todo = next(m for m in data["memos"] if m["id"] == "todo")
    loose = next(m for m in data["memos"] if m["id"] == "loose")
    archive = next(c for c in data["categories"] if c["id"] == "archive")

    assert todo["parentId"] == "work"
    assert todo["size"] == {"width": 180.0, "height": 60.0}
    assert "size" not in loose
    assert "parentId" not in loose
    assert archive["isExpanded"] is False

    assert parse_yaml(page_to_yaml(page)).positions() == page.positions()
