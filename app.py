"""
app.py — livego startup entry point.

This file is intentionally thin: it loads the configuration, applies its
log level, and reports what the media engine is about to serve.

    python app.py [-c livego.yaml] [--dump]
"""

import argparse
import json
import sys

import config as cfgmod
import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="livego configuration bootstrap")
    parser.add_argument(
        "-c", "--config_file",
        default="",
        help=f"configuration file (default: {cfgmod.DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="print the effective configuration as JSON and exit",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = cfgmod.init_config(args.config_file)
    except (OSError, cfgmod.ConfigError) as exc:
        # Nothing to fall back to; let the supervisor restart us with a fixed file
        logger.error("Failed to load configuration", {"error": str(exc)})
        print(f"livego: {exc}", file=sys.stderr)
        return 1

    if args.dump:
        print(json.dumps(cfgmod.config_to_dict(cfg, mask_secrets=True), indent=2))
        return 0

    names = list(dict.fromkeys(app.appname for app in cfg.server))
    logger.system("livego starting", {
        "rtmp":    cfg.rtmp_addr,
        "rtmps":   cfg.enable_rtmps,
        "httpflv": cfg.httpflv_addr,
        "hls":     cfg.hls_addr,
        "api":     cfg.api_addr,
        "apps":    [name for name in names if cfg.check_app_name(name)],
    })
    for name in names:
        app = cfg.get_app(name)
        urls, ok = cfg.get_static_push_url_list(name)
        if ok:
            logger.info(f"App '{name}' relays to {len(urls)} static push target(s)", {"urls": urls})
        elif not app.live:
            logger.debug(f"App '{name}' is configured but not live")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
