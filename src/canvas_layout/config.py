"""
Layout configuration for canvas-layout.

Every tunable number the engine uses lives on ``LayoutConfig``.  The module
level constants below are the defaults; ``DEFAULT_CONFIG`` bundles them and
is used whenever a caller passes ``config=None``.

A YAML file can override any subset of the fields:

    area_padding: 24
    max_iterations: 16

``load_config()`` reads such a file from an explicit path, or from the path
in the ``CANVAS_LAYOUT_CONFIG`` environment variable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# --- Default block sizes ---

DEFAULT_MEMO_WIDTH = 200
DEFAULT_MEMO_HEIGHT = 95
DEFAULT_CATEGORY_WIDTH = 200
DEFAULT_CATEGORY_HEIGHT = 95

# Margin added on every side of a category area
AREA_PADDING = 20

# Floor for computed area dimensions (empty or tiny categories)
AREA_MIN_WIDTH = 120
AREA_MIN_HEIGHT = 80

# Extra distance left between two rectangles after a push
PUSH_GAP = 1

# Pass cap for the iterative resolvers
MAX_ITERATIONS = 10

CONFIG_ENV_VAR = "CANVAS_LAYOUT_CONFIG"


class LayoutConfig(BaseModel):
    """Tunables for area computation and collision resolution.

    Attributes:
        memo_width:      Width used for memos without a size.
        memo_height:     Height used for memos without a size.
        category_width:  Width used for category blocks without a size.
        category_height: Height used for category blocks without a size.
        area_padding:    Margin added around a category's content.
        area_min_width:  Smallest width a computed area may have.
        area_min_height: Smallest height a computed area may have.
        push_gap:        Distance left between rectangles after a push.
        max_iterations:  Pass cap for the resolvers.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    memo_width: float = Field(DEFAULT_MEMO_WIDTH, gt=0)
    memo_height: float = Field(DEFAULT_MEMO_HEIGHT, gt=0)
    category_width: float = Field(DEFAULT_CATEGORY_WIDTH, gt=0)
    category_height: float = Field(DEFAULT_CATEGORY_HEIGHT, gt=0)
    area_padding: float = Field(AREA_PADDING, ge=0)
    area_min_width: float = Field(AREA_MIN_WIDTH, ge=0)
    area_min_height: float = Field(AREA_MIN_HEIGHT, ge=0)
    push_gap: float = Field(PUSH_GAP, ge=0)
    max_iterations: int = Field(MAX_ITERATIONS, ge=1)


DEFAULT_CONFIG = LayoutConfig()


def load_config(path: Optional[str] = None) -> LayoutConfig:
    """Load a ``LayoutConfig`` from a YAML file.

    Without ``path`` the ``CANVAS_LAYOUT_CONFIG`` environment variable is
    consulted; when neither is set the defaults are returned.  An empty
    file also yields the defaults.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return DEFAULT_CONFIG

    data = yaml.safe_load(Path(path).read_text())
    if not data:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ValueError(f"Layout config must be a mapping: {path}")

    config = LayoutConfig(**data)
    logger.debug(f"Loaded layout config from {path}: {config}")
    return config
