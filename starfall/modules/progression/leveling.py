"""
Level-up resolution.

Given the level table, the player's level before a reward and their total
experience after it, yield one `LevelUpEvent` per level gained. Levels are
climbed one at a time: every intermediate threshold must be met, and the
walk stops at the first missing or unmet level.

Pure and deterministic; no I/O.

Example
-------
With thresholds {1: 0, 2: 100, 3: 300} and a level-1 player:

- 250 total experience yields one event (level 2)
- 350 total experience yields two events (levels 2 and 3)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from starfall.domain.models.base import Number
from starfall.domain.models.reference import LevelDef


@dataclass(frozen=True)
class LevelUpEvent:
    new_level: int
    hit_points_granted: Number
    item_granted: Optional[str] = None


@dataclass(frozen=True)
class LevelUpSummary:
    final_level: int
    levels_gained: int
    hit_points_granted: Number
    items_granted: Tuple[str, ...]

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


def resolve_level_ups(
    level_table: Mapping[int, LevelDef],
    current_level: int,
    total_experience: Number,
) -> Iterator[LevelUpEvent]:
    level = current_level
    while True:
        next_def = level_table.get(level + 1)
        if next_def is None or total_experience < next_def.experience_required:
            return
        level = next_def.level
        yield LevelUpEvent(
            new_level=level,
            hit_points_granted=next_def.hit_points_granted,
            item_granted=next_def.item_granted,
        )


def summarize_level_ups(
    events: Iterable[LevelUpEvent], starting_level: int
) -> LevelUpSummary:
    """Fold events into the final level, total HP bonus and granted items in order."""
    final_level = starting_level
    gained = 0
    hit_points: Number = 0
    items = []

    for event in events:
        final_level = event.new_level
        gained += 1
        hit_points += event.hit_points_granted
        if event.item_granted:
            items.append(event.item_granted)

    return LevelUpSummary(
        final_level=final_level,
        levels_gained=gained,
        hit_points_granted=hit_points,
        items_granted=tuple(items),
    )
