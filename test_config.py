"""Tests for layout configuration loading."""

import pytest
from pydantic import ValidationError

from canvas_layout.area import compute_area
from canvas_layout.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG,
    LayoutConfig,
    load_config,
)
from canvas_layout.models import CategoryBlock, MemoBlock, Page, Position
from canvas_layout.resolvers import resolve_unified_collisions


def test_defaults():
    assert DEFAULT_CONFIG.memo_width == 200
    assert DEFAULT_CONFIG.memo_height == 95
    assert DEFAULT_CONFIG.area_padding == 20
    assert DEFAULT_CONFIG.push_gap == 1
    assert DEFAULT_CONFIG.max_iterations == 10


def test_load_without_path_or_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert load_config() is DEFAULT_CONFIG


def test_load_partial_override(tmp_path):
    path = tmp_path / "layout.yaml"
    path.write_text("area_padding: 24\nmax_iterations: 16\n")

    config = load_config(str(path))
    assert config.area_padding == 24
    assert config.max_iterations == 16
    assert config.memo_width == 200


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "layout.yaml"
    path.write_text("push_gap: 4\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert load_config().push_gap == 4


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "layout.yaml"
    path.write_text("")
    assert load_config(str(path)) is DEFAULT_CONFIG


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "layout.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_unknown_and_invalid_fields_rejected():
    with pytest.raises(ValidationError):
        LayoutConfig(area_paddin=3)
    with pytest.raises(ValidationError):
        LayoutConfig(memo_width=0)
    with pytest.raises(ValidationError):
        LayoutConfig(max_iterations=0)


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_CONFIG.push_gap = 5


def test_config_flows_into_area_and_resolvers():
    config = LayoutConfig(area_padding=0, area_min_width=0, area_min_height=0, push_gap=10)

    page = Page(
        memos=[MemoBlock(id="a"), MemoBlock(id="b", position=Position(x=150, y=0))],
        categories=[CategoryBlock(id="c", position=Position(x=0, y=500))],
    )
    area = compute_area(page.get_category("c"), page, config)
    assert (area.x, area.y, area.width, area.height) == (0, 500, 200, 95)

    result = resolve_unified_collisions("a", page, config=config)
    assert result.page.get("b").position.x == 210
