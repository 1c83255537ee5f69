"""
config.py — Load livego.yaml / livego.json over built-in defaults.

Usage
-----
    import config

    cfg = config.init_config(path)          # once, at startup
    if cfg.check_app_name("live"):
        urls, ok = cfg.get_static_push_url_list("live")

Keys missing from the file keep their built-in defaults, so the service
always starts even if the config file is absent or only partially written.
A missing file is not an error; an unreadable or unparsable one is.

The returned Config is immutable.  init_config is meant to run once, before
any other thread exists; afterwards the Config can be shared freely.
"""

import json

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

import logger

DEFAULT_CONFIG_FILE = "livego.yaml"


class ConfigError(Exception):
    """Base class for configuration failures that must abort startup."""


class ConfigParseError(ConfigError):
    """The config file could not be decoded (bad syntax or wrong value types)."""

    def __init__(self, path, fmt, cause):
        self.path  = path
        self.fmt   = fmt
        self.cause = cause
        super().__init__(f"failed to parse {fmt} config '{path}': {cause}")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class Application(BaseModel):
    """One streaming channel.  The zero value is what a `server` entry starts from."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    appname:     StrictStr             = ""
    live:        StrictBool            = False
    hls:         StrictBool            = False
    flv:         StrictBool            = False
    api:         StrictBool            = False
    static_push: tuple[StrictStr, ...] = ()


class JWT(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    secret:    StrictStr = ""
    algorithm: StrictStr = ""


class Config(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    level:       StrictStr = ""
    config_file: StrictStr = ""

    flv_archive:  StrictBool = False
    flv_dir:      StrictStr  = ""
    rtmp_noauth:  StrictBool = False
    rtmp_addr:    StrictStr  = ""
    rtmps_cert:   StrictStr  = ""
    rtmps_key:    StrictStr  = ""
    enable_rtmps: StrictBool = False

    httpflv_addr:       StrictStr  = ""
    hls_addr:           StrictStr  = ""
    hls_keep_after_end: StrictBool = False

    api_addr: StrictStr = ""

    redis_addr:    StrictStr = ""
    redis_pwd:     StrictStr = ""
    read_timeout:  StrictInt = 0
    write_timeout: StrictInt = 0

    enable_tls_verify: StrictBool = False
    gop_num:           StrictInt  = 0

    jwt:    JWT                     = Field(default_factory=JWT)
    server: tuple[Application, ...] = ()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    # Applications stay an ordered sequence: with duplicate names the first
    # entry wins, and only the first is ever observable.

    def get_app(self, appname: str):
        """Return the first Application named `appname`, or None."""
        for app in self.server:
            if app.appname == appname:
                return app
        return None

    def check_app_name(self, appname: str) -> bool:
        """True if the first application named `appname` is live."""
        for app in self.server:
            if app.appname == appname:
                return app.live
        return False

    def get_static_push_url_list(self, appname: str):
        """
        Return (urls, True) for the first live application named `appname`
        when it has static push destinations.  A live match with no
        destinations and no live match at all both give (None, False).
        """
        for app in self.server:
            if app.appname == appname and app.live:
                if app.static_push:
                    return list(app.static_push), True
                return None, False
        return None, False


# ---------------------------------------------------------------------------
# Built-in defaults
# ---------------------------------------------------------------------------

def default_config() -> Config:
    return Config(
        config_file        = DEFAULT_CONFIG_FILE,
        flv_archive        = False,
        rtmp_noauth        = False,
        rtmp_addr          = ":1935",
        httpflv_addr       = ":7001",
        hls_addr           = ":7002",
        hls_keep_after_end = False,
        api_addr           = ":8090",
        read_timeout       = 10,
        write_timeout      = 10,
        enable_tls_verify  = True,
        gop_num            = 1,
        server             = (
            Application(appname="live", live=True, hls=True, flv=True, api=True),
        ),
    )


# ---------------------------------------------------------------------------
# Decoding (overlay onto an existing Config)
# ---------------------------------------------------------------------------

def _present(mapping: dict) -> dict:
    """Drop '_*' comment keys and nulls; a null keeps whatever is underneath."""
    return {k: v for k, v in mapping.items() if not str(k).startswith("_") and v is not None}


def _merge(base: dict, over: dict) -> dict:
    """Merge *over* into *base*, one level deep.  Lists replace whole."""
    out = dict(base)
    for k, v in _present(over).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = {**out[k], **_present(v)}
        elif k == "server" and isinstance(v, list):
            out[k] = [_present(item) if isinstance(item, dict) else item for item in v]
        else:
            out[k] = v
    return out


def _overlay(cfg: Config, doc) -> Config:
    if doc is None:
        return cfg
    if not isinstance(doc, dict):
        raise ValueError(f"top level must be a mapping, got {type(doc).__name__}")
    return Config.model_validate(_merge(cfg.model_dump(), doc))


def _parse_json(text: str):
    return json.loads(text)


def _parse_yaml(text: str):
    return yaml.safe_load(text)


_PARSERS = {"json": _parse_json, "yaml": _parse_yaml}


def _decode(cfg: Config, text: str, fmt: str, path: str) -> Config:
    try:
        return _overlay(cfg, _PARSERS[fmt](text))
    except (ValidationError, ValueError, yaml.YAMLError, RecursionError) as exc:
        # json.JSONDecodeError is a ValueError; deep nesting exhausts the parsers' stack
        raise ConfigParseError(path, fmt, exc) from exc


def detect_format(path: str):
    """Return "json", "yaml", or None when the extension says nothing."""
    # Paths shorter than ".json" carry no usable extension
    if len(path) < 5:
        return None
    if path.endswith(".json"):
        return "json"
    if path.endswith(".yaml") or path.endswith(".yml"):
        return "yaml"
    return None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_config(path: str = None) -> Config:
    """
    Load `path` (default: livego.yaml in the working directory) over the
    built-in defaults.

    A missing file yields the defaults.  Any other OSError propagates
    unchanged; a file that cannot be decoded raises ConfigParseError.
    """
    cfg = default_config()

    if not path:
        path = cfg.config_file

    try:
        with open(path, encoding="utf-8") as fh:
            text = fh.read()
    except FileNotFoundError:
        logger.info(f"Config file '{path}' not found, using defaults")
        return cfg
    except UnicodeDecodeError as exc:
        raise ConfigParseError(path, "text", exc) from exc

    fmt = detect_format(path)
    if fmt is not None:
        cfg = _decode(cfg, text, fmt, path)
    else:
        # Unknown extension: YAML first, then JSON
        try:
            cfg, fmt = _decode(cfg, text, "yaml", path), "yaml"
        except ConfigParseError as yaml_err:
            try:
                cfg, fmt = _decode(cfg, text, "json", path), "json"
            except ConfigParseError as json_err:
                raise ConfigParseError(
                    path, "yaml or json",
                    f"yaml: {yaml_err.cause}; json: {json_err.cause}",
                ) from json_err

    logger.info(f"Config loaded from '{path}'", {"format": fmt})
    return cfg


# ---------------------------------------------------------------------------
# Initializer
# ---------------------------------------------------------------------------

_MASK = "******"


def config_to_dict(cfg: Config, mask_secrets: bool = False) -> dict:
    """JSON-ready mapping using the on-disk key names."""
    out = cfg.model_dump(mode="json")
    if mask_secrets:
        if out["redis_pwd"]:
            out["redis_pwd"] = _MASK
        if out["jwt"]["secret"]:
            out["jwt"]["secret"] = _MASK
    return out


def init_config(path: str = None, log=logger) -> Config:
    """
    Load the configuration and apply its `level` to the logging facility.

    `log` is the logging port (the logger module unless a test swaps it):
    it provides DEBUG, parse_level, set_level, set_report_caller and debug.
    An unknown level name leaves logging as it was.  Errors from
    load_config propagate unchanged.
    """
    cfg = load_config(path)

    level = log.parse_level(cfg.level)
    if level is not None:
        log.set_level(level)
        log.set_report_caller(level == log.DEBUG)

    log.debug("Current configurations", config_to_dict(cfg, mask_secrets=True))
    return cfg
