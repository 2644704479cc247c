#!/usr/bin/env python3
"""Serve position analysis over HTTP.

Usage:
    python scripts/run_api_server.py                                  # configs/api_server.yaml
    python scripts/run_api_server.py --port 9000 --max-depth 4
"""

import argparse
import logging
import os
import sys

import yaml

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chessassist.engine.config import EngineConfig

logger = logging.getLogger("chessassist.api")


def build_config(args) -> dict:
    """Read the YAML config and fold command-line overrides into it."""
    with open(args.config) as f:
        config = yaml.safe_load(f) or {}

    engine_cfg = dict(config.get("engine") or {})
    if args.depth is not None:
        engine_cfg["depth"] = args.depth
    if args.max_depth is not None:
        engine_cfg["max_depth"] = args.max_depth
    config["engine"] = engine_cfg
    return config


def main() -> int:
    parser = argparse.ArgumentParser(description="chessassist analysis server")
    parser.add_argument("--config", default="configs/api_server.yaml",
                        help="Server config YAML (default: configs/api_server.yaml)")
    parser.add_argument("--host", default=None, help="Override server.host")
    parser.add_argument("--port", type=int, default=None, help="Override server.port")
    parser.add_argument("--depth", type=int, default=None, help="Override engine.depth")
    parser.add_argument("--max-depth", type=int, default=None, help="Override engine.max_depth")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = build_config(args)
        EngineConfig.from_dict(config["engine"])
    except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
        logger.error(f"Invalid server config {args.config}: {e}")
        return 2

    server_cfg = config.get("server") or {}
    host = args.host or server_cfg.get("host", "127.0.0.1")
    port = args.port or server_cfg.get("port", 8000)

    try:
        import uvicorn
    except ImportError:
        print("uvicorn not installed. Run: pip install -e '.[api]'", file=sys.stderr)
        return 1

    from chessassist.api import app, init_app

    init_app(app, config)
    logger.info(f"Listening on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
