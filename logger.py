"""
logger.py — Process-wide structured JSON-line logger.

Keeps a rolling log file capped at MAX_LINES entries.
Provides typed helpers: debug, info, warn, error, system.
Lines go only to LOG_PATH; there is no reader here.

Verbosity and caller annotation are process-wide and meant to be set once,
during startup (see config.init_config), before other threads start logging.
"""
import json
import os
import sys
import threading
from datetime import datetime

LOG_PATH  = os.path.join(os.path.expanduser("~"), "livego", "logs", "livego.log")
MAX_LINES = 2000
_lock     = threading.Lock()

# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

TRACE = 5
DEBUG = 10
INFO  = 20
WARN  = 30
ERROR = 40
FATAL = 50

# fatal and panic both keep only the most severe lines
_LEVEL_NAMES = {
    "trace":   TRACE,
    "debug":   DEBUG,
    "info":    INFO,
    "warn":    WARN,
    "warning": WARN,
    "error":   ERROR,
    "fatal":   FATAL,
    "panic":   FATAL,
}

# SYSTEM lines are startup/shutdown notices and rank with INFO
_RANKS = {"DEBUG": DEBUG, "INFO": INFO, "SYSTEM": INFO, "WARN": WARN, "ERROR": ERROR}

_level         = INFO
_report_caller = False


def parse_level(name):
    """Return the level number for `name` (case-insensitive), or None."""
    if not isinstance(name, str):
        return None
    return _LEVEL_NAMES.get(name.strip().lower())


def set_level(level: int):
    global _level
    _level = level


def get_level() -> int:
    return _level


def set_report_caller(enabled: bool):
    global _report_caller
    _report_caller = bool(enabled)


def _caller() -> str:
    # _caller <- _write <- helper (info/debug/...) <- caller
    frame = sys._getframe(3)
    return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno} {frame.f_code.co_name}"


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

def _write(level: str, msg: str, data: dict = None):
    if _RANKS[level] < _level:
        return

    entry = {
        "ts":    datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "level": level,
        "msg":   msg,
    }
    if data:
        entry["data"] = data
    if _report_caller:
        entry["caller"] = _caller()

    os.makedirs(os.path.dirname(LOG_PATH), exist_ok=True)

    with _lock:
        # Rolling truncation: drop the oldest half when over limit
        try:
            with open(LOG_PATH, "r") as f:
                lines = f.readlines()
            if len(lines) >= MAX_LINES:
                with open(LOG_PATH, "w") as f:
                    f.writelines(lines[MAX_LINES // 2:])
        except FileNotFoundError:
            pass

        with open(LOG_PATH, "a") as f:
            f.write(json.dumps(entry, default=str) + "\n")


def debug(msg,  data=None): _write("DEBUG",  msg, data)
def info(msg,   data=None): _write("INFO",   msg, data)
def warn(msg,   data=None): _write("WARN",   msg, data)
def error(msg,  data=None): _write("ERROR",  msg, data)
def system(msg, data=None): _write("SYSTEM", msg, data)
