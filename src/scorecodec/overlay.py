from __future__ import annotations

from typing import Any

import msgspec

from legacyio.errors import CorruptPayload

from .hit_results import statistics_from_json, statistics_to_json
from .mods import Mod
from .score import ScoreInfo


class ModEntry(msgspec.Struct, omit_defaults=True):
    acronym: str
    settings: dict[str, Any] = msgspec.field(default_factory=dict)


class ScoreInfoOverlay(msgspec.Struct):
    """JSON score info written into modern replays after the legacy fields."""

    online_id: int = -1
    mods: list[ModEntry] = msgspec.field(default_factory=list)
    statistics: dict[str, int] = msgspec.field(default_factory=dict)
    maximum_statistics: dict[str, int] = msgspec.field(default_factory=dict)
    client_version: str | None = ""
    rank: str | int | None = None
    user_id: int = -1
    total_score_without_mods: int | None = None


_ENCODER = msgspec.json.Encoder()
_DECODER = msgspec.json.Decoder(ScoreInfoOverlay)


def decode_overlay(data: bytes | str) -> ScoreInfoOverlay:
    try:
        return _DECODER.decode(data)
    except msgspec.DecodeError as exc:
        raise CorruptPayload(f"invalid score info overlay: {exc}") from exc


def encode_overlay(overlay: ScoreInfoOverlay) -> bytes:
    return _ENCODER.encode(overlay)


def merge_overlay(info: ScoreInfo, overlay: ScoreInfoOverlay) -> None:
    """Apply overlay fields onto flat-decoded score info.

    Precedence, field by field (overlay wins wherever it is applied):

    1. `online_id` always replaces the flat value.
    2. `statistics` and `maximum_statistics` replace the maps built from the
       six legacy counts; unknown judgement names are dropped.
    3. `mods` replaces the bitmask-derived list, settings included.
    4. `client_version` and `rank` replace their (absent) flat values.
    5. `user_id` is applied only when it names a real user (> 1).
    6. `total_score_without_mods` is applied when present; the caller derives
       it otherwise.
    """

    info.online_id = int(overlay.online_id)
    info.statistics = statistics_from_json(overlay.statistics)
    info.maximum_statistics = statistics_from_json(overlay.maximum_statistics)
    info.mods = [Mod(entry.acronym, dict(entry.settings)) for entry in overlay.mods]
    info.client_version = overlay.client_version
    info.rank = None if overlay.rank is None else str(overlay.rank)
    if int(overlay.user_id) > 1:
        info.user_online_id = int(overlay.user_id)
    if overlay.total_score_without_mods is not None:
        info.total_score_without_mods = int(overlay.total_score_without_mods)


def overlay_from_score(info: ScoreInfo) -> ScoreInfoOverlay:
    return ScoreInfoOverlay(
        online_id=int(info.online_id),
        mods=[ModEntry(acronym=mod.acronym, settings=dict(mod.settings)) for mod in info.mods],
        statistics=statistics_to_json(info.statistics),
        maximum_statistics=statistics_to_json(info.maximum_statistics),
        client_version=info.client_version or "",
        rank=info.rank,
        user_id=int(info.user_online_id) if info.user_online_id is not None else -1,
        total_score_without_mods=info.total_score_without_mods,
    )
