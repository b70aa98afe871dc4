from __future__ import annotations

"""Format version constants and the version-gated tail of the score envelope."""

from dataclasses import dataclass
from typing import BinaryIO, Callable, Final
import warnings

from construct import Construct, Int32sl, Int64sl

from legacyio.cursor import LegacyByteArray, build_field, read_field

LATEST_VERSION: Final[int] = 30000013
# First stable-compatible YYYYMMDD-style version given to lazer-made replays.
FIRST_LAZER_VERSION: Final[int] = 30000000
# Scores below this were written before standardised total score v2 existed.
FIRST_STANDARDISED_VERSION: Final[int] = 30000002
LEGACY_TOTAL_SCORE_VERSION: Final[int] = 30000001

ONLINE_ID_INT32_VERSION: Final[int] = 20121008
ONLINE_ID_INT64_VERSION: Final[int] = 20140721
SCORE_INFO_OVERLAY_VERSION: Final[int] = 30000001


class ScoreFormatVersionWarning(UserWarning):
    """Warnings related to a score's recorded format version."""


def is_legacy_version(version: int) -> bool:
    return int(version) < FIRST_LAZER_VERSION


def total_score_version_for(version: int) -> int:
    # Marks old scores for migration to standardised scoring; not derivable from other fields.
    return LEGACY_TOTAL_SCORE_VERSION if int(version) < FIRST_STANDARDISED_VERSION else LATEST_VERSION


def warn_on_newer_version(version: int, *, latest: int = LATEST_VERSION) -> bool:
    """Warn if a score was written by a newer client than this codec knows.

    Returns True if a warning was emitted.
    """

    if int(version) <= int(latest):
        return False
    warnings.warn(
        f"Score format version {int(version)} is newer than the latest known version {int(latest)}; "
        "unknown trailing fields are ignored.",
        category=ScoreFormatVersionWarning,
        stacklevel=2,
    )
    return True


@dataclass(frozen=True, slots=True)
class VersionGatedField:
    name: str
    applies: Callable[[int], bool]
    field: Construct


# Applied in order after the replay blob. Each entry is read (or written) only when
# `applies(version)` holds; absent fields keep their defaults.
VERSION_GATED_FIELDS: Final[tuple[VersionGatedField, ...]] = (
    VersionGatedField(
        name="legacy_online_id",
        applies=lambda version: version >= ONLINE_ID_INT64_VERSION,
        field=Int64sl,
    ),
    VersionGatedField(
        name="legacy_online_id",
        applies=lambda version: ONLINE_ID_INT32_VERSION <= version < ONLINE_ID_INT64_VERSION,
        field=Int32sl,
    ),
    VersionGatedField(
        name="score_info",
        applies=lambda version: version >= SCORE_INFO_OVERLAY_VERSION,
        field=LegacyByteArray,
    ),
)


def gated_fields_for(version: int) -> tuple[VersionGatedField, ...]:
    return tuple(entry for entry in VERSION_GATED_FIELDS if entry.applies(int(version)))


def read_gated_fields(stream: BinaryIO, version: int) -> dict[str, object]:
    out: dict[str, object] = {}
    for entry in gated_fields_for(version):
        out[entry.name] = read_field(stream, entry.field, name=entry.name)
    return out


def build_gated_fields(version: int, values: dict[str, object]) -> bytes:
    out = bytearray()
    for entry in gated_fields_for(version):
        out += build_field(entry.field, values.get(entry.name), name=entry.name)
    return bytes(out)
