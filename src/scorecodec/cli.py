from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer

from .beatmap import PlayableBeatmap
from .decoder import ScoreDecoder
from .encoder import ScoreEncoder, strip_name_mark
from .errors import LegacyIOError, ScoreCodecError
from .hit_results import statistics_to_json
from .logging_setup import configure_logging
from .score import Score

app = typer.Typer(add_completion=False)


@app.callback()
def cmd_root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="log debug events to stderr"),
    json_logs: bool = typer.Option(False, "--json-logs", help="render log events as JSON"),
) -> None:
    """Inspect and re-export legacy osu! score files."""
    configure_logging("DEBUG" if verbose else "WARNING", json_logs=json_logs)


class _SingleBeatmapLookup:
    """Resolves every hash to one user-described beatmap."""

    def __init__(self, *, format_version: int, total_columns: int) -> None:
        self._format_version = int(format_version)
        self._total_columns = int(total_columns)

    def find(self, md5_hash: str) -> PlayableBeatmap | None:
        return PlayableBeatmap(
            md5_hash=md5_hash,
            format_version=self._format_version,
            hit_object_count=1,
            total_columns=self._total_columns,
        )


def _decoder(columns: int | None, beatmap_version: int) -> ScoreDecoder:
    if columns is None:
        return ScoreDecoder()
    return ScoreDecoder(beatmaps=_SingleBeatmapLookup(format_version=beatmap_version, total_columns=columns))


def _load(score_file: Path, columns: int | None, beatmap_version: int) -> tuple[Score, PlayableBeatmap | None]:
    if not score_file.is_file():
        typer.echo(f"score file not found: {score_file}", err=True)
        raise typer.Exit(code=1)
    try:
        score = _decoder(columns, beatmap_version).decode_file(score_file)
    except (ScoreCodecError, LegacyIOError) as exc:
        typer.echo(f"failed to decode {score_file}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    beatmap = None
    if columns is not None:
        beatmap = PlayableBeatmap(
            md5_hash=score.info.beatmap_hash,
            format_version=beatmap_version,
            hit_object_count=1,
            total_columns=columns,
        )
    return score, beatmap


def _summary(score: Score) -> dict[str, Any]:
    info = score.info
    return {
        "ruleset": info.ruleset.short_name,
        "format_version": info.format_version,
        "total_score_version": info.total_score_version,
        "is_legacy": info.is_legacy,
        "beatmap_hash": info.beatmap_hash,
        "username": info.username,
        "user_id": info.user_online_id,
        "online_id": info.online_id,
        "legacy_online_id": info.legacy_online_id,
        "date": info.date.isoformat(),
        "mods": [mod.to_json() for mod in info.mods],
        "statistics": statistics_to_json(info.statistics),
        "maximum_statistics": statistics_to_json(info.maximum_statistics),
        "total_score": info.total_score,
        "total_score_without_mods": info.total_score_without_mods,
        "max_combo": info.max_combo,
        "accuracy": round(info.accuracy, 6),
        "rank": info.rank,
        "client_version": info.client_version,
        "frames": len(score.replay.frames),
    }


_COLUMNS_HELP = "mania column count; supplies a beatmap so frames can be converted"
_BEATMAP_VERSION_HELP = "beatmap format version used with --columns (below 5 shifts frame timing)"


@app.command("info")
def cmd_info(
    score_file: Path = typer.Argument(..., help="score file path (.osr)"),
    columns: int | None = typer.Option(None, "--columns", min=1, max=20, help=_COLUMNS_HELP),
    beatmap_version: int = typer.Option(14, "--beatmap-version", help=_BEATMAP_VERSION_HELP),
) -> None:
    """Print a JSON summary of a score file."""
    score, _beatmap = _load(score_file, columns, beatmap_version)
    typer.echo(json.dumps(_summary(score), indent=2, sort_keys=True))


@app.command("frames")
def cmd_frames(
    score_file: Path = typer.Argument(..., help="score file path (.osr)"),
    limit: int | None = typer.Option(None, min=0, help="print at most N frames"),
    columns: int | None = typer.Option(None, "--columns", min=1, max=20, help=_COLUMNS_HELP),
    beatmap_version: int = typer.Option(14, "--beatmap-version", help=_BEATMAP_VERSION_HELP),
) -> None:
    """Print replay frames as JSON lines."""
    score, _beatmap = _load(score_file, columns, beatmap_version)
    frames = score.replay.frames if limit is None else score.replay.frames[:limit]
    for frame in frames:
        typer.echo(json.dumps({"type": type(frame).__name__, **asdict(frame)}, sort_keys=True))


@app.command("export")
def cmd_export(
    score_file: Path = typer.Argument(..., help="score file path (.osr)"),
    out_file: Path = typer.Argument(..., help="output score file path"),
    name_mark: bool = typer.Option(
        True,
        "--edited-mark/--no-edited-mark",
        help="append the edited mark to the username",
    ),
    default_version: bool = typer.Option(
        True,
        "--default-version/--keep-version",
        help="write the latest format version instead of the score's own",
    ),
    columns: int | None = typer.Option(None, "--columns", min=1, max=20, help=_COLUMNS_HELP),
    beatmap_version: int = typer.Option(14, "--beatmap-version", help=_BEATMAP_VERSION_HELP),
) -> None:
    """Decode a score file and write it back out in the legacy format."""
    score, beatmap = _load(score_file, columns, beatmap_version)
    # Re-exporting an exported score must not stack marks.
    score.info.username = strip_name_mark(score.info.username)
    try:
        encoder = ScoreEncoder(score, beatmap)
        encoder.export(out_file, use_default_version=default_version, add_name_mark=name_mark)
    except (ScoreCodecError, LegacyIOError) as exc:
        typer.echo(f"failed to export {score_file}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"wrote {out_file}")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="scorecodec", args=argv)


if __name__ == "__main__":
    main()
