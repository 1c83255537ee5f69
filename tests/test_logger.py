"""Logger tests: level threshold, caller annotation and file rotation."""

import pytest

import logger


class TestParseLevel:

    @pytest.mark.parametrize("name, level", [
        ("trace", logger.TRACE),
        ("debug", logger.DEBUG),
        ("DEBUG", logger.DEBUG),
        ("info", logger.INFO),
        ("warn", logger.WARN),
        ("warning", logger.WARN),
        ("Error", logger.ERROR),
        ("fatal", logger.FATAL),
        ("PANIC", logger.FATAL),
    ])
    def test_known_names(self, name, level):
        assert logger.parse_level(name) == level

    @pytest.mark.parametrize("name", ["", "verbose", "critical", None, 10])
    def test_unknown_names(self, name):
        assert logger.parse_level(name) is None


class TestThreshold:

    def test_default_threshold_drops_debug(self, log_entries):
        logger.debug("hidden")
        logger.info("shown")

        assert [e["msg"] for e in log_entries()] == ["shown"]

    def test_debug_threshold_keeps_everything(self, log_entries):
        logger.set_level(logger.DEBUG)
        logger.debug("a")
        logger.info("b")
        logger.system("c")

        assert [e["level"] for e in log_entries()] == ["DEBUG", "INFO", "SYSTEM"]

    def test_trace_threshold_keeps_debug(self, log_entries):
        logger.set_level(logger.TRACE)
        logger.debug("a")

        assert [e["msg"] for e in log_entries()] == ["a"]

    def test_error_threshold(self, log_entries):
        logger.set_level(logger.ERROR)
        logger.info("dropped")
        logger.warn("dropped")
        logger.system("dropped")
        logger.error("kept", {"code": 1})

        entries = log_entries()
        assert len(entries) == 1
        assert entries[0]["data"] == {"code": 1}

    def test_fatal_threshold_drops_errors(self, log_entries):
        logger.set_level(logger.FATAL)
        logger.error("dropped")

        assert log_entries() == []


class TestReportCaller:

    def test_caller_absent_by_default(self, log_entries):
        logger.info("x")

        assert "caller" not in log_entries()[0]

    def test_caller_names_the_calling_function(self, log_entries):
        logger.set_report_caller(True)
        logger.info("x")

        caller = log_entries()[0]["caller"]
        assert caller.startswith("test_logger.py:")
        assert caller.endswith(" test_caller_names_the_calling_function")


class TestLogFile:

    def test_rolling_truncation(self, monkeypatch, log_entries):
        monkeypatch.setattr(logger, "MAX_LINES", 10)
        for i in range(10):
            logger.info(f"line {i}")

        logger.info("line 10")

        msgs = [e["msg"] for e in log_entries()]
        assert msgs == [f"line {i}" for i in range(5, 11)]

    def test_creates_log_directory(self, isolated_log):
        logger.warn("first")

        assert isolated_log.exists()
