"""
Priority-based collision resolvers for canvas-layout.

All resolvers share one propagation engine:

  1. The moving object(s) get priority 0 — they are never pushed.
     A sibling whose subtree holds a moving object is fixed the same way.
  2. Every other block in the same sibling set starts unprioritised.
  3. Each pass snapshots every sibling's rectangle and priority, then for
     every sibling looks for overlapping siblings of strictly lower
     priority number ("more senior").  Only the most senior pusher's
     vector is applied, and the pushed block takes ``pusher + 1`` as its
     priority if it had none.  Because pushes in a pass only see the
     pass-start snapshot, priority travels one hop per pass: A pushes B,
     next pass B pushes C, and so on.
  4. A pushed category carries its whole subtree along.
  5. Stop when a pass applies no push, or after ``max_iterations`` passes.

The cap is a best-effort bound: a pathological layout may still overlap
when it is reached.  The result then carries ``converged=False`` and a
warning is logged; nothing is raised.

Frame-delta mode
----------------
During a continuous drag each push is clamped to the mover's per-frame
displacement, so pushed blocks travel at the same visual speed as the
mover instead of jumping clear in one frame.  Without a frame delta the
full separating push is applied (one-shot reflows).

Product rule
------------
Root-level memos never push a category area; areas may push them.

Variants
--------
  - ``resolve_unified_collisions``       memos and categories together
  - ``resolve_area_collisions``          categories only, then the moving
                                         area pushes sibling memos
  - ``resolve_area_memo_collisions``     one area pushes sibling memos
  - ``resolve_memo_collisions``          memos only, with area blocking
  - ``resolve_memo_child_area_collisions``  a memo pushes the categories
                                         that share its parent
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from .area import AreaCache, block_rect, check_overlap, collision_bounds, compute_area
from .config import DEFAULT_CONFIG, LayoutConfig
from .hierarchy import descendant_ids, translate_subtree
from .models import (
    ALL_KINDS,
    AREA,
    CATEGORY_KINDS,
    MEMO,
    Collidable,
    Delta,
    Page,
)
from .push import DirectionMemory, clamp_to_frame, push_direction

logger = logging.getLogger(__name__)

UNASSIGNED = math.inf

MovingIds = Union[str, Iterable[str]]

# accept_push(page, collidable, push) -> False refuses the push
PushFilter = Callable[[Page, Collidable, Delta], bool]


@dataclass
class CollisionResult:
    """Outcome of one resolver call.

    Attributes:
        page:       The updated snapshot (a new object; the input is untouched).
        iterations: Passes run.
        converged:  False when the pass cap was hit with pushes still pending.
        blocked:    Ids whose push was refused (memo-vs-memo variant only).
    """
    page: Page
    iterations: int = 0
    converged: bool = True
    blocked: set[str] = field(default_factory=set)

    @property
    def blocked_by_area(self) -> bool:
        return bool(self.blocked)


def _as_ids(moving_ids: MovingIds) -> list[str]:
    if isinstance(moving_ids, str):
        return [moving_ids]
    return list(dict.fromkeys(moving_ids))


def _may_push(pusher: Collidable, pushed: Collidable) -> bool:
    """Root-level memos yield to areas: they never push one."""
    return not (pusher.is_root_memo and pushed.kind == AREA)


def _collect(
    page: Page,
    parent_id: Optional[str],
    kinds: frozenset,
    seeds: set[str],
    cache: AreaCache,
) -> list[Collidable]:
    """Sibling collidables under ``parent_id`` of the requested kinds.

    Seeds are always included whatever their kind.
    """
    collidables = []
    for block in page.children_of(parent_id):
        collidable = collision_bounds(block, page, cache.config, cache)
        if collidable.kind in kinds or collidable.id in seeds:
            collidables.append(collidable)
    return collidables


# ---------------------------------------------------------------------------
# Core propagation engine
# ---------------------------------------------------------------------------

def _propagate(
    page: Page,
    moving_ids: list[str],
    kinds: frozenset,
    *,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
    chain: bool = True,
    accept_push: Optional[PushFilter] = None,
    label: str = "resolve",
) -> CollisionResult:
    """Run priority passes over the sibling set of ``moving_ids[0]``.

    Args:
        page:           Snapshot to resolve; copied, never modified.
        moving_ids:     Seeds at priority 0.  The first one defines the
                        sibling set (its parent).
        kinds:          Collidable kinds taking part besides the seeds.
        max_iterations: Pass cap (config default when None).
        frame_delta:    Clamp every push to this per-frame displacement.
        memory:         Direction memory to reuse across calls (a fresh one
                        is used when None).
        chain:          When False only the seeds may push.
        accept_push:    Optional veto on a computed push; a vetoed block
                        becomes a fixed obstacle at priority 0.
        label:          Name used in log messages.
    """
    cfg = config or DEFAULT_CONFIG
    cap = max_iterations if max_iterations is not None else cfg.max_iterations
    memory = memory if memory is not None else DirectionMemory()

    working = page.copy_snapshot()
    primary = working.get(moving_ids[0]) if moving_ids else None
    if primary is None:
        logger.debug(f"[{label}] moving object {moving_ids!r} not found")
        return CollisionResult(page=working)

    parent_id = primary.parent_id
    seeds = set(moving_ids)
    cache = AreaCache(working, cfg)
    priorities: dict[str, float] = {seed: 0 for seed in seeds}
    # A sibling holding a seed deeper down would drag that seed along when pushed
    for block in working.children_of(parent_id):
        if block.id not in seeds and seeds.intersection(descendant_ids(working, block.id)):
            priorities[block.id] = 0
    blocked: set[str] = set()

    iterations = 0
    converged = False
    for iteration in range(cap):
        iterations = iteration + 1
        collidables = _collect(working, parent_id, kinds, seeds, cache)
        pass_priorities = dict(priorities)
        pushes: list[tuple[Collidable, Delta]] = []

        for current in collidables:
            current_priority = pass_priorities.get(current.id, UNASSIGNED)
            if current_priority == 0:
                continue

            best: Optional[Delta] = None
            best_priority = UNASSIGNED
            for other in collidables:
                if other.id == current.id:
                    continue
                other_priority = pass_priorities.get(other.id, UNASSIGNED)
                if other_priority >= current_priority:
                    continue
                if not chain and other.id not in seeds:
                    continue
                if not _may_push(other, current):
                    continue

                push = push_direction(
                    other.bounds, current.bounds, other.id, current.id, memory, cfg.push_gap
                )
                if push.is_zero:
                    continue
                if other_priority < best_priority:
                    best = push
                    best_priority = other_priority

            if best is None:
                continue

            if current.id not in priorities:
                priorities[current.id] = best_priority + 1

            if frame_delta is not None:
                best = clamp_to_frame(best, frame_delta)
            if best.is_zero:
                continue

            if accept_push is not None and not accept_push(working, current, best):
                blocked.add(current.id)
                priorities[current.id] = 0
                logger.debug(f"[{label}] push of {current.id!r} refused, now an obstacle")
                continue

            logger.debug(
                f"[{label}] pass {iteration}: {current.id!r} pushed by ({best.x}, {best.y}) "
                f"at priority {priorities[current.id]}"
            )
            pushes.append((current, best))

        if not pushes:
            converged = True
            break

        for current, delta in pushes:
            translate_subtree(working, current.id, delta)

    if not converged:
        # Clamped pushes catch up over later frames; only one-shot runs are suspicious
        log = logger.debug if frame_delta is not None else logger.warning
        log(
            f"[{label}] no fixed point after {cap} passes for {moving_ids!r}; "
            f"returning partial separation"
        )

    return CollisionResult(page=working, iterations=iterations, converged=converged, blocked=blocked)


# ---------------------------------------------------------------------------
# Public resolvers
# ---------------------------------------------------------------------------

def resolve_unified_collisions(
    moving_ids: MovingIds,
    page: Page,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    *,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
) -> CollisionResult:
    """Resolve overlaps among memos and categories sharing the mover's parent.

    ``moving_ids`` may be one id or a multi-selection; every id is seeded at
    priority 0 and the first one defines the sibling set.
    """
    return _propagate(
        page,
        _as_ids(moving_ids),
        ALL_KINDS,
        max_iterations=max_iterations,
        frame_delta=frame_delta,
        memory=memory,
        config=config,
        label="unified",
    )


def resolve_area_memo_collisions(
    category_id: str,
    page: Page,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    *,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
) -> CollisionResult:
    """Let one category's area push the memos that share its parent.

    Pushed memos cascade into other sibling memos; categories do not move.
    """
    return _propagate(
        page,
        [category_id],
        frozenset({MEMO}),
        max_iterations=max_iterations,
        frame_delta=frame_delta,
        memory=memory,
        config=config,
        label="area-memo",
    )


def resolve_area_collisions(
    category_id: str,
    page: Page,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    *,
    push_memos: bool = True,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
) -> CollisionResult:
    """Resolve overlaps among sibling categories of ``category_id``.

    Memos are ignored while the categories settle.  With ``push_memos`` the
    moving area then clears sibling memos out of its way.
    """
    if page.get_category(category_id) is None:
        logger.debug(f"[area] category {category_id!r} not found")
        return CollisionResult(page=page.copy_snapshot())

    memory = memory if memory is not None else DirectionMemory()
    result = _propagate(
        page,
        [category_id],
        CATEGORY_KINDS,
        max_iterations=max_iterations,
        frame_delta=frame_delta,
        memory=memory,
        config=config,
        label="area",
    )
    if not push_memos:
        return result

    memo_result = resolve_area_memo_collisions(
        category_id, result.page, max_iterations, frame_delta, memory=memory, config=config
    )
    return CollisionResult(
        page=memo_result.page,
        iterations=result.iterations + memo_result.iterations,
        converged=result.converged and memo_result.converged,
        blocked=result.blocked | memo_result.blocked,
    )


def check_memo_area_collision(
    memo_id: str,
    page: Page,
    config: Optional[LayoutConfig] = None,
) -> bool:
    """True when the memo overlaps the area of an expanded sibling category."""
    cfg = config or DEFAULT_CONFIG
    memo = page.get_memo(memo_id)
    if memo is None:
        return False

    memo_bounds = block_rect(memo, cfg)
    for category in page.child_categories(memo.parent_id):
        if not category.is_expanded:
            continue
        area = compute_area(category, page, cfg)
        if area and check_overlap(memo_bounds, area):
            return True
    return False


def resolve_memo_collisions(
    moving_ids: MovingIds,
    page: Page,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    *,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
) -> CollisionResult:
    """Resolve overlaps among memos sharing the moving memo's parent.

    A memo whose push would land it inside a sibling category area is not
    moved; it turns into a fixed obstacle and its id is reported in
    ``blocked``.
    """
    cfg = config or DEFAULT_CONFIG

    def lands_clear(working: Page, current: Collidable, push: Delta) -> bool:
        target = block_rect(working.get(current.id), cfg).translated(push.x, push.y)
        for category in working.child_categories(current.parent_id):
            if not category.is_expanded:
                continue
            area = compute_area(category, working, cfg)
            if area and check_overlap(target, area):
                return False
        return True

    return _propagate(
        page,
        _as_ids(moving_ids),
        frozenset({MEMO}),
        max_iterations=max_iterations,
        frame_delta=frame_delta,
        memory=memory,
        config=cfg,
        accept_push=lands_clear,
        label="memo",
    )


def resolve_memo_child_area_collisions(
    memo_id: str,
    page: Page,
    max_iterations: Optional[int] = None,
    frame_delta: Optional[Delta] = None,
    *,
    memory: Optional[DirectionMemory] = None,
    config: Optional[LayoutConfig] = None,
) -> CollisionResult:
    """Let a memo inside a category push that category's child categories.

    Only the memo pushes (no chain between the pushed categories).  Root
    memos never push areas, so for them this is a no-op.
    """
    return _propagate(
        page,
        [memo_id],
        CATEGORY_KINDS,
        max_iterations=max_iterations,
        frame_delta=frame_delta,
        memory=memory,
        config=config,
        chain=False,
        label="memo-child-area",
    )
