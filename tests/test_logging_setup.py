from __future__ import annotations

import json
import logging

import pytest
import structlog

from scorecodec.logging_setup import configure_logging


@pytest.fixture
def restore_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    logging.getLogger().setLevel(logging.WARNING)


def test_json_logs_go_to_stderr(capsys: pytest.CaptureFixture[str], restore_logging) -> None:  # noqa: ANN001
    configure_logging("DEBUG", json_logs=True)
    structlog.stdlib.get_logger("scorecodec.test").debug("replay_frames_skipped", placeholders=2)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "replay_frames_skipped"
    assert event["placeholders"] == 2
    assert event["level"] == "debug"
    assert event["logger"] == "scorecodec.test"


def test_default_level_filters_debug(capsys: pytest.CaptureFixture[str], restore_logging) -> None:  # noqa: ANN001
    configure_logging()
    log = structlog.stdlib.get_logger("scorecodec.test")
    log.debug("hidden")
    log.warning("beatmap_lookup_failed", beatmap_hash="abc")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "beatmap_lookup_failed" in err
