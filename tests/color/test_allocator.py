"""色相分配器测试"""

import pytest

from panebg import config
from panebg.color.allocator import (
    AllocationSlot,
    HueAllocator,
    TieBreak,
    allocate,
    draw_envelope,
)
from panebg.color.space import hue_distance
from panebg.telemetry import metrics


def _score(hue: float, existing: list[float]) -> float:
    return min(hue_distance(hue, other) for other in existing)


class TestPaletteSlot:
    """调色板分配"""

    def test_empty_returns_first_palette_hue(self):
        allocation = HueAllocator().allocate([], seed=1)
        assert allocation.hue == config.PALETTE_HUES[0]
        assert allocation.slot is AllocationSlot.PALETTE
        assert allocation.min_distance == 180.0
        assert allocation.exhausted is False

    def test_palette_in_order(self):
        """连续分配 8 次，依次得到调色板色相"""
        allocator = HueAllocator()
        hues: list[float] = []
        for _ in range(len(config.PALETTE_HUES)):
            allocation = allocator.allocate(hues, seed=42)
            assert allocation.slot is AllocationSlot.PALETTE
            hues.append(allocation.hue)
        assert hues == list(config.PALETTE_HUES)

    def test_skips_present_palette_hue(self):
        """已存在的调色板色相被跳过"""
        assert HueAllocator().allocate([9.0, 147.0], seed=1).hue == 219.0

    def test_skips_palette_hue_near_stale_hue(self):
        """与旧缓存色相过近（10° vs tomato 9°）也视为已占用"""
        assert HueAllocator().allocate([10.0], seed=1).hue == 147.0

    def test_out_of_order_existing(self):
        """只占用了后面的调色板色相时，仍从头取第一个空位"""
        assert HueAllocator().allocate([147.0], seed=1).hue == 9.0

    def test_falls_through_when_palette_covered(self):
        """少于 8 个色相但覆盖了全部调色板时，转入搜索"""
        allocator = HueAllocator(palette=(10.0, 12.0))
        allocation = allocator.allocate([11.0], seed=1)
        assert allocation.slot is AllocationSlot.SEARCH
        assert allocation.hue == 191.0


class TestSearchSlot:
    """调色板耗尽后的最大最小距离搜索"""

    def test_ninth_pane_fills_largest_gap(self):
        """调色板最大空隙在 51°–147° 之间，中点 99°"""
        allocation = HueAllocator().allocate(list(config.PALETTE_HUES), seed=7)
        assert allocation.slot is AllocationSlot.SEARCH
        assert allocation.hue == 99.0
        assert allocation.min_distance == 48.0

    def test_antipodal(self):
        allocation = HueAllocator(palette=()).allocate([10.0], seed=3)
        assert allocation.hue == 190.0
        assert allocation.min_distance == 180.0

    def test_result_maximizes_min_distance(self):
        """结果不比任何其他候选更靠近已有色相"""
        allocator = HueAllocator(palette=())
        existing = [3.0, 47.0, 120.0, 121.0, 200.0, 260.0, 333.0]
        allocation = allocator.allocate(existing, seed=5)
        best = max(_score(c, existing) for c in allocator.candidates)
        assert _score(allocation.hue, existing) == best
        assert allocation.min_distance == best

    def test_sequential_allocations_unique(self):
        allocator = HueAllocator()
        hues: list[float] = []
        for _ in range(30):
            hues.append(allocator.allocate(hues, seed=11).hue)
        assert len(set(hues)) == 30

    def test_exhausted_when_too_crowded(self):
        """所有候选都低于最小距离时仍返回最佳候选并标记 exhausted"""
        allocator = HueAllocator(palette=())
        existing = [float(h) for h in range(0, 360, 5)]
        allocation = allocator.allocate(existing, seed=1)
        assert allocation.exhausted is True
        assert allocation.min_distance == 2.0
        assert metrics.get_counter("allocator.exhausted") == 1

    def test_full_wheel_still_returns_candidate(self):
        allocator = HueAllocator(palette=())
        existing = [float(h) for h in range(360)]
        allocation = allocator.allocate(existing, seed=1)
        assert allocation.min_distance == 0.0
        assert allocation.hue in allocator.candidates

    def test_invalid_resolution(self):
        with pytest.raises(ValueError):
            HueAllocator(resolution=0)


class TestTieBreak:
    """并列决胜策略"""

    def test_lowest_hue(self):
        allocator = HueAllocator(palette=(), tie_break=TieBreak.LOWEST_HUE)
        assert allocator.allocate([0.0, 180.0], seed=1).hue == 90.0
        assert allocator.allocate([], seed=1).hue == 0.0

    def test_seeded_permutation_picks_a_tied_candidate(self):
        allocator = HueAllocator(palette=())
        assert allocator.allocate([0.0, 180.0], seed=99).hue in (90.0, 270.0)

    def test_seeded_permutation_deterministic(self):
        allocator = HueAllocator(palette=())
        first = allocator.allocate([], seed=12345).hue
        assert HueAllocator(palette=()).allocate([], seed=12345).hue == first

    def test_seeded_permutation_varies_with_seed(self):
        """不同 seed 不总是选同一个并列候选"""
        allocator = HueAllocator(palette=())
        picks = {allocator.allocate([0.0, 180.0], seed=s).hue for s in range(40)}
        assert picks == {90.0, 270.0}


class TestDrawEnvelope:
    """饱和度/亮度抽样"""

    def test_within_envelope(self):
        for rank in range(50):
            saturation, lightness = draw_envelope(seed=2024, rank=rank)
            assert 0.70 <= saturation <= 0.80
            assert 0.75 <= lightness <= 0.85

    def test_deterministic(self):
        assert draw_envelope(7, 3) == draw_envelope(7, 3)

    def test_varies_by_rank(self):
        values = {draw_envelope(7, rank) for rank in range(10)}
        assert len(values) > 1


def test_module_allocate_uses_palette():
    assert allocate([], seed=0) == config.PALETTE_HUES[0]
    assert allocate([config.PALETTE_HUES[0]], seed=0) == config.PALETTE_HUES[1]
