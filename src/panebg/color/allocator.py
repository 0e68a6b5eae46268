"""色相分配器

两种分配槽位（同一个 allocate 函数的两个分支）：
1. PALETTE: 已分配色相少于调色板长度时，按顺序取第一个未被占用的调色板色相
2. SEARCH: 调色板耗尽后，在等间隔候选色相中选取与已有色相最小距离最大的一个

SEARCH 的并列（多个候选最小距离相同）由 TieBreak 策略决定，
默认按 seed 派生的伪随机排列中的名次取最前者。
"""

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from .. import config
from ..telemetry import get_logger, metrics
from .space import hue_distance, pastel_envelope

logger = get_logger(__name__)

# 无已有色相时的"最小距离"（色环上可能的最大距离）
_MAX_DISTANCE = 180.0


class AllocationSlot(Enum):
    """分配槽位类型"""

    PALETTE = "palette"
    SEARCH = "search"


class TieBreak(Enum):
    """SEARCH 并列决胜策略"""

    SEEDED_PERMUTATION = "seeded_permutation"  # seed 派生排列中名次最前
    LOWEST_HUE = "lowest_hue"  # 色相值最小


@dataclass(frozen=True)
class Allocation:
    """一次分配的结果

    Attributes:
        hue: 分配的色相
        slot: 来源槽位
        min_distance: 与已有色相的最小距离
        exhausted: SEARCH 结果低于最小距离策略（pane 数量过多）
    """

    hue: float
    slot: AllocationSlot
    min_distance: float
    exhausted: bool = False


@lru_cache(maxsize=16)
def _permutation_ranks(seed: int, count: int) -> tuple[int, ...]:
    """seed 派生的候选排列名次：ranks[candidate_index] = 名次"""
    order = list(range(count))
    random.Random(seed).shuffle(order)
    ranks = [0] * count
    for position, index in enumerate(order):
        ranks[index] = position
    return tuple(ranks)


def _nearest(hue: float, existing: list[float]) -> float:
    if not existing:
        return _MAX_DISTANCE
    return min(hue_distance(hue, other) for other in existing)


class HueAllocator:
    """色相分配器"""

    def __init__(
        self,
        palette: Iterable[float] = config.PALETTE_HUES,
        resolution: float = config.HUE_RESOLUTION,
        tie_break: TieBreak = TieBreak.SEEDED_PERMUTATION,
        palette_tolerance: float = config.PALETTE_MATCH_TOLERANCE,
        min_hue_distance: float = config.MIN_HUE_DISTANCE,
    ):
        if resolution <= 0 or resolution > 360:
            raise ValueError(f"invalid hue resolution: {resolution}")
        self._palette = tuple(palette)
        self._resolution = resolution
        self._tie_break = tie_break
        self._palette_tolerance = palette_tolerance
        self._min_hue_distance = min_hue_distance
        count = int(round(360.0 / resolution))
        self._candidates = tuple(i * resolution for i in range(count))

    @property
    def palette(self) -> tuple[float, ...]:
        return self._palette

    @property
    def candidates(self) -> tuple[float, ...]:
        return self._candidates

    def allocate(self, existing_hues: Iterable[float], seed: int) -> Allocation:
        """为新 pane 分配色相

        Args:
            existing_hues: 当前缓存中所有存活的色相
            seed: 文档的 startup_seed

        Returns:
            Allocation
        """
        existing = list(existing_hues)

        if len(existing) < len(self._palette):
            allocation = self._from_palette(existing)
            if allocation is not None:
                return allocation
            logger.debug("[Allocator] Palette fully occupied by stale hues, searching")

        return self._search(existing, seed)

    def _from_palette(self, existing: list[float]) -> Allocation | None:
        for hue in self._palette:
            distance = _nearest(hue, existing)
            if distance >= self._palette_tolerance:
                return Allocation(hue=hue, slot=AllocationSlot.PALETTE, min_distance=distance)
        return None

    def _search(self, existing: list[float], seed: int) -> Allocation:
        scores = [_nearest(candidate, existing) for candidate in self._candidates]
        best_score = max(scores)
        tied = [i for i, score in enumerate(scores) if math.isclose(score, best_score, abs_tol=1e-9)]

        if self._tie_break is TieBreak.SEEDED_PERMUTATION:
            ranks = _permutation_ranks(seed, len(self._candidates))
            index = min(tied, key=lambda i: ranks[i])
        else:
            index = tied[0]

        exhausted = best_score < self._min_hue_distance
        if exhausted:
            metrics.inc("allocator.exhausted")
            logger.warning(
                f"[Allocator] {len(existing)} hues in use, best candidate "
                f"{self._candidates[index]:.1f} is only {best_score:.1f}° from its neighbour"
            )

        return Allocation(
            hue=self._candidates[index],
            slot=AllocationSlot.SEARCH,
            min_distance=best_score,
            exhausted=exhausted,
        )


def draw_envelope(seed: int, rank: int) -> tuple[float, float]:
    """在 pastel 范围内独立均匀抽取饱和度和亮度

    由 seed 和 pane 出现名次决定，不依赖时间，重复 reconcile 结果一致。

    Returns:
        (saturation, lightness)
    """
    (sat_min, sat_max), (light_min, light_max) = pastel_envelope()
    rng = random.Random(f"{seed}:{rank}")
    saturation = round(rng.uniform(sat_min, sat_max), 4)
    lightness = round(rng.uniform(light_min, light_max), 4)
    return saturation, lightness


_default_allocator = HueAllocator()


def allocate(existing_hues: Iterable[float], seed: int) -> float:
    """使用默认分配器分配色相"""
    return _default_allocator.allocate(existing_hues, seed).hue
