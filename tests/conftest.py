"""Shared fixtures: keep every test's log output in its own temp file."""

import json

import pytest

import logger


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "livego.log"
    monkeypatch.setattr(logger, "LOG_PATH", str(path))
    monkeypatch.setattr(logger, "_level", logger.INFO)
    monkeypatch.setattr(logger, "_report_caller", False)
    return path


@pytest.fixture
def log_entries(isolated_log):
    """Return a callable that parses the JSON lines written so far."""

    def read():
        if not isolated_log.exists():
            return []
        with open(isolated_log) as f:
            return [json.loads(line) for line in f if line.strip()]

    return read
