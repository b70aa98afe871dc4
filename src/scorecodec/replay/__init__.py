from __future__ import annotations

from .frames import (
    CatchAction,
    CatchReplayFrame,
    LegacyReplayFrame,
    ManiaReplayFrame,
    OsuAction,
    OsuReplayFrame,
    Replay,
    ReplayButtonState,
    ReplayFrame,
    TaikoAction,
    TaikoReplayFrame,
)
from .timeline import END_RECORD, decode_replay_text, encode_replay_text, parse_legacy_frames

__all__ = [
    "END_RECORD",
    "CatchAction",
    "CatchReplayFrame",
    "LegacyReplayFrame",
    "ManiaReplayFrame",
    "OsuAction",
    "OsuReplayFrame",
    "Replay",
    "ReplayButtonState",
    "ReplayFrame",
    "TaikoAction",
    "TaikoReplayFrame",
    "decode_replay_text",
    "encode_replay_text",
    "parse_legacy_frames",
]
