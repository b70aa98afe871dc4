from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, Iterable, Mapping, Sequence, TypeAlias


class LegacyMods(IntFlag):
    NONE = 0
    NO_FAIL = 1 << 0
    EASY = 1 << 1
    TOUCH_DEVICE = 1 << 2
    HIDDEN = 1 << 3
    HARD_ROCK = 1 << 4
    SUDDEN_DEATH = 1 << 5
    DOUBLE_TIME = 1 << 6
    RELAX = 1 << 7
    HALF_TIME = 1 << 8
    NIGHTCORE = 1 << 9  # always set together with DOUBLE_TIME
    FLASHLIGHT = 1 << 10
    AUTOPLAY = 1 << 11
    SPUN_OUT = 1 << 12
    AUTOPILOT = 1 << 13
    PERFECT = 1 << 14  # always set together with SUDDEN_DEATH
    KEY4 = 1 << 15
    KEY5 = 1 << 16
    KEY6 = 1 << 17
    KEY7 = 1 << 18
    KEY8 = 1 << 19
    FADE_IN = 1 << 20
    RANDOM = 1 << 21
    CINEMA = 1 << 22
    TARGET = 1 << 23
    KEY9 = 1 << 24
    KEY_COOP = 1 << 25
    KEY1 = 1 << 26
    KEY3 = 1 << 27
    KEY2 = 1 << 28
    SCORE_V2 = 1 << 29
    MIRROR = 1 << 30


CLASSIC_ACRONYM = "CL"


@dataclass(frozen=True, slots=True)
class Mod:
    acronym: str
    settings: Mapping[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"acronym": self.acronym}
        if self.settings:
            out["settings"] = dict(self.settings)
        return out


def classic_mod() -> Mod:
    return Mod(CLASSIC_ACRONYM)


def has_mod(mods: Iterable[Mod], acronym: str) -> bool:
    return any(mod.acronym == acronym for mod in mods)


ModTable: TypeAlias = Sequence[tuple[LegacyMods, str]]

COMMON_MOD_TABLE: ModTable = (
    (LegacyMods.NO_FAIL, "NF"),
    (LegacyMods.EASY, "EZ"),
    (LegacyMods.HIDDEN, "HD"),
    (LegacyMods.HARD_ROCK, "HR"),
    (LegacyMods.SUDDEN_DEATH, "SD"),
    (LegacyMods.PERFECT, "PF"),
    (LegacyMods.DOUBLE_TIME, "DT"),
    (LegacyMods.NIGHTCORE, "NC"),
    (LegacyMods.HALF_TIME, "HT"),
    (LegacyMods.FLASHLIGHT, "FL"),
    (LegacyMods.AUTOPLAY, "AT"),
    (LegacyMods.CINEMA, "CN"),
    (LegacyMods.SCORE_V2, "SV2"),
)

# Flags whose presence hides the flag they are paired with on the wire.
_IMPLIED_FLAGS: Mapping[LegacyMods, LegacyMods] = {
    LegacyMods.NIGHTCORE: LegacyMods.DOUBLE_TIME,
    LegacyMods.PERFECT: LegacyMods.SUDDEN_DEATH,
    LegacyMods.CINEMA: LegacyMods.AUTOPLAY,
}


def mods_from_legacy(value: int, table: ModTable) -> list[Mod]:
    flags = LegacyMods(int(value) & 0x7FFF_FFFF)
    hidden = LegacyMods.NONE
    for flag, implied in _IMPLIED_FLAGS.items():
        if flag in flags:
            hidden |= implied
    mods: list[Mod] = []
    for flag, acronym in table:
        if flag in flags and flag not in hidden:
            mods.append(Mod(acronym))
    return mods


def mods_to_legacy(mods: Iterable[Mod], table: ModTable) -> int:
    by_acronym = {acronym: flag for flag, acronym in table}
    value = LegacyMods.NONE
    for mod in mods:
        flag = by_acronym.get(mod.acronym)
        if flag is None:
            continue
        value |= flag
        if flag in (LegacyMods.NIGHTCORE, LegacyMods.PERFECT):
            value |= _IMPLIED_FLAGS[flag]
    return int(value)


def score_multiplier(mods: Iterable[Mod], multipliers: Mapping[str, float]) -> float:
    out = 1.0
    for mod in mods:
        out *= float(multipliers.get(mod.acronym, 1.0))
    return out
