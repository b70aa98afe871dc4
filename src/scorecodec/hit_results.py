from __future__ import annotations

from enum import IntEnum
from typing import Mapping


class HitResult(IntEnum):
    NONE = 0
    MISS = 1
    MEH = 2
    OK = 3
    GOOD = 4
    GREAT = 5
    PERFECT = 6
    SMALL_TICK_MISS = 7
    SMALL_TICK_HIT = 8
    LARGE_TICK_MISS = 9
    LARGE_TICK_HIT = 10
    SMALL_BONUS = 11
    LARGE_BONUS = 12
    IGNORE_MISS = 13
    IGNORE_HIT = 14
    COMBO_BREAK = 15
    SLIDER_TAIL_HIT = 16
    # Pads legacy scores up to the beatmap max combo; never produced by gameplay.
    LEGACY_COMBO_INCREASE = 99

    @property
    def json_key(self) -> str:
        return self.name.lower()


_COMBO_RESULTS = frozenset(
    {
        HitResult.MISS,
        HitResult.MEH,
        HitResult.OK,
        HitResult.GOOD,
        HitResult.GREAT,
        HitResult.PERFECT,
        HitResult.LARGE_TICK_HIT,
        HitResult.LARGE_TICK_MISS,
        HitResult.LEGACY_COMBO_INCREASE,
        HitResult.COMBO_BREAK,
        HitResult.SLIDER_TAIL_HIT,
    }
)

_TICK_RESULTS = frozenset(
    {
        HitResult.LARGE_TICK_HIT,
        HitResult.LARGE_TICK_MISS,
        HitResult.SMALL_TICK_HIT,
        HitResult.SMALL_TICK_MISS,
        HitResult.SLIDER_TAIL_HIT,
    }
)

_BONUS_RESULTS = frozenset({HitResult.SMALL_BONUS, HitResult.LARGE_BONUS})

_UNSCORABLE_RESULTS = frozenset(
    {
        HitResult.NONE,
        HitResult.IGNORE_HIT,
        HitResult.IGNORE_MISS,
        HitResult.COMBO_BREAK,
        HitResult.LEGACY_COMBO_INCREASE,
    }
)

DEFAULT_BASE_SCORES: Mapping[HitResult, int] = {
    HitResult.SMALL_TICK_HIT: 10,
    HitResult.LARGE_TICK_HIT: 30,
    HitResult.SLIDER_TAIL_HIT: 150,
    HitResult.MEH: 50,
    HitResult.OK: 100,
    HitResult.GOOD: 200,
    HitResult.GREAT: 300,
    HitResult.PERFECT: 315,
    HitResult.SMALL_BONUS: 10,
    HitResult.LARGE_BONUS: 50,
}

_BY_JSON_KEY = {result.json_key: result for result in HitResult}


def affects_combo(result: HitResult) -> bool:
    return result in _COMBO_RESULTS


def is_tick(result: HitResult) -> bool:
    return result in _TICK_RESULTS


def is_bonus(result: HitResult) -> bool:
    return result in _BONUS_RESULTS


def is_scorable(result: HitResult) -> bool:
    return result not in _UNSCORABLE_RESULTS


def is_basic(result: HitResult) -> bool:
    """Basic judgements are the scorable ones that are neither ticks nor bonuses."""
    return is_scorable(result) and not is_tick(result) and not is_bonus(result)


def hit_result_from_json_key(key: str) -> HitResult | None:
    return _BY_JSON_KEY.get(str(key).strip().lower())


def statistics_to_json(statistics: Mapping[HitResult, int]) -> dict[str, int]:
    return {result.json_key: int(count) for result, count in statistics.items()}


def statistics_from_json(raw: Mapping[str, int]) -> dict[HitResult, int]:
    """Unknown judgement names are dropped."""
    out: dict[HitResult, int] = {}
    for key, count in raw.items():
        result = hit_result_from_json_key(key)
        if result is None:
            continue
        out[result] = int(count)
    return out
