from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import TypeAlias


class ReplayButtonState(IntFlag):
    NONE = 0
    LEFT1 = 1 << 0
    RIGHT1 = 1 << 1
    LEFT2 = 1 << 2
    RIGHT2 = 1 << 3
    SMOKE = 1 << 4


class OsuAction(IntEnum):
    LEFT_BUTTON = 0
    RIGHT_BUTTON = 1
    SMOKE = 2


class TaikoAction(IntEnum):
    LEFT_RIM = 0
    LEFT_CENTRE = 1
    RIGHT_CENTRE = 2
    RIGHT_RIM = 3


class CatchAction(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    DASH = 2


@dataclass(frozen=True, slots=True)
class LegacyReplayFrame:
    time: float
    mouse_x: float | None = None
    mouse_y: float | None = None
    button_state: ReplayButtonState = ReplayButtonState.NONE

    @property
    def mouse_left(self) -> bool:
        return bool(self.button_state & (ReplayButtonState.LEFT1 | ReplayButtonState.LEFT2))

    @property
    def mouse_right(self) -> bool:
        return bool(self.button_state & (ReplayButtonState.RIGHT1 | ReplayButtonState.RIGHT2))


@dataclass(frozen=True, slots=True)
class OsuReplayFrame:
    time: float
    x: float = 0.0
    y: float = 0.0
    actions: tuple[OsuAction, ...] = ()


@dataclass(frozen=True, slots=True)
class TaikoReplayFrame:
    time: float
    actions: tuple[TaikoAction, ...] = ()


@dataclass(frozen=True, slots=True)
class CatchReplayFrame:
    time: float
    position: float = 0.0
    dashing: bool = False
    actions: tuple[CatchAction, ...] = ()


@dataclass(frozen=True, slots=True)
class ManiaReplayFrame:
    time: float
    # Zero-based indices of the held columns.
    columns: tuple[int, ...] = ()


ReplayFrame: TypeAlias = LegacyReplayFrame | OsuReplayFrame | TaikoReplayFrame | CatchReplayFrame | ManiaReplayFrame


@dataclass(slots=True)
class Replay:
    frames: list[ReplayFrame] = field(default_factory=list)
