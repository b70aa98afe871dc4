from __future__ import annotations

"""Delta-encoded text form of a replay timeline.

Records are `delta|x|y|buttons` joined with `,` and end with the sentinel
record `-12345|0|0|<seed>`. Times are integer milliseconds on the wire.
"""

import math
import re
from typing import TYPE_CHECKING, Final, Iterable

import structlog

from ..beatmap import PlayableBeatmap
from ..errors import ReplayTextError
from .frames import LegacyReplayFrame, ReplayButtonState, ReplayFrame

if TYPE_CHECKING:
    from ..rulesets import Ruleset

SENTINEL_DELTA: Final[str] = "-12345"
# Kept literal: formatting a negative number must never depend on locale.
END_RECORD: Final[str] = "-12345|0|0|0"

MAX_COORDINATE_VALUE: Final[float] = 131072.0
MAX_PARSE_VALUE: Final[float] = 2147483647.0

# Stable writes two frames at (256, -500) before the first real input (time 0 and skip boundary - 1).
PLACEHOLDER_POSITION: Final[tuple[float, float]] = (256.0, -500.0)
PLACEHOLDER_RECORD_COUNT: Final[int] = 2

log = structlog.stdlib.get_logger()

_FLOAT_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")
_INT_RE = re.compile(r"\s*[+-]?\d+\s*")


def _parse_float(text: str, *, name: str, limit: float = MAX_PARSE_VALUE) -> float:
    if _FLOAT_RE.fullmatch(text) is None:
        raise ReplayTextError(f"invalid {name} in replay frame: {text!r}")
    value = float(text)
    if not math.isfinite(value) or abs(value) > limit:
        raise ReplayTextError(f"{name} out of range in replay frame: {text!r}")
    return value


def _parse_int(text: str, *, name: str) -> int:
    if _INT_RE.fullmatch(text) is None:
        raise ReplayTextError(f"invalid {name} in replay frame: {text!r}")
    value = int(text)
    if abs(value) > MAX_PARSE_VALUE:
        raise ReplayTextError(f"{name} out of range in replay frame: {text!r}")
    return value


def parse_legacy_frames(text: str, *, offset: float = 0.0) -> list[LegacyReplayFrame]:
    """Parse replay text into legacy frames with absolute times.

    Negative deltas still advance the running time but their frames are dropped,
    which matches forward-only playback in the legacy client.
    """

    frames: list[LegacyReplayFrame] = []
    last_time = float(offset)
    placeholders = 0
    rewinds = 0

    for index, record in enumerate(text.split(",")):
        parts = record.split("|")
        if len(parts) < 4:
            continue
        if parts[0] == SENTINEL_DELTA:
            # parts[3] carries the RNG seed; nothing consumes it.
            continue

        delta = _parse_float(parts[0], name="delta")
        mouse_x = _parse_float(parts[1], name="x", limit=MAX_COORDINATE_VALUE)
        mouse_y = _parse_float(parts[2], name="y", limit=MAX_COORDINATE_VALUE)

        last_time += delta

        if index < PLACEHOLDER_RECORD_COUNT and (mouse_x, mouse_y) == PLACEHOLDER_POSITION:
            placeholders += 1
            continue
        if delta < 0:
            rewinds += 1
            continue

        buttons = _parse_int(parts[3], name="button state")
        frames.append(
            LegacyReplayFrame(
                time=last_time,
                mouse_x=mouse_x,
                mouse_y=mouse_y,
                button_state=ReplayButtonState(buttons & 0xFFFF_FFFF),
            )
        )

    if placeholders or rewinds:
        log.debug("replay_frames_skipped", placeholders=placeholders, rewinds=rewinds, kept=len(frames))
    return frames


def decode_replay_text(
    text: str,
    ruleset: Ruleset,
    beatmap: PlayableBeatmap | None = None,
    *,
    offset: float = 0.0,
) -> list[ReplayFrame]:
    frames: list[ReplayFrame] = []
    previous: ReplayFrame | None = None
    for legacy in parse_legacy_frames(text, offset=offset):
        previous = ruleset.frame_from_legacy(legacy, beatmap, previous)
        frames.append(previous)
    return frames


def _format_coordinate(value: float | None) -> str:
    if value is None:
        return "0"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_legacy_frames(
    frames: Iterable[ReplayFrame],
    ruleset: Ruleset,
    beatmap: PlayableBeatmap | None = None,
) -> list[LegacyReplayFrame]:
    out: list[LegacyReplayFrame] = []
    for frame in frames:
        if isinstance(frame, LegacyReplayFrame):
            out.append(frame)
        else:
            out.append(ruleset.frame_to_legacy(frame, beatmap))
    return out


def encode_replay_text(
    frames: Iterable[ReplayFrame],
    ruleset: Ruleset,
    beatmap: PlayableBeatmap | None = None,
    *,
    offset: float = 0.0,
) -> str:
    parts: list[str] = []
    last_time = 0
    for legacy in to_legacy_frames(frames, ruleset, beatmap):
        # Legacy readers only parse integral times. `round` is half-to-even, like the legacy writer.
        time = int(round(legacy.time - offset))
        parts.append(
            f"{time - last_time}|{_format_coordinate(legacy.mouse_x)}|"
            f"{_format_coordinate(legacy.mouse_y)}|{int(legacy.button_state)},"
        )
        last_time = time
    parts.append(END_RECORD)
    return "".join(parts)
