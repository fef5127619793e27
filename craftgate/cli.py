#!/usr/bin/env python3
"""
Command line entry point.

    craftgate serve --port 3000
    craftgate types
    craftgate render minecraft-java mc1 25566
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_settings
from .orchestrator import CommandBuilder, CreateParams, GatewayError, default_registry


def cmd_serve(args: argparse.Namespace) -> int:
    from .main import run

    run(load_settings(), reload=args.reload or None, host=args.host, port=args.port)
    return 0


def cmd_types(args: argparse.Namespace) -> int:
    registry = default_registry()
    for key, config in registry.items():
        print(
            "-",
            key,
            "| image:",
            config.image,
            "| port:",
            f"{config.container_port}{config.protocol.suffix}",
        )
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    settings = load_settings()
    registry = default_registry()
    builder = CommandBuilder(settings.docker_binary)
    try:
        command = builder.build(
            registry.lookup(args.type), CreateParams(name=args.name, host_port=args.port)
        )
    except GatewayError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        return 2
    print(command.describe())
    return 0


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="craftgate",
        description="Create and control game-server containers over HTTP.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", help="Bind address (default: CRAFTGATE_HOST or 0.0.0.0).")
    serve.add_argument("--port", type=int, help="Listen port (default: CRAFTGATE_PORT or 3000).")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes.")
    serve.set_defaults(func=cmd_serve)

    types = sub.add_parser("types", help="List the registered server types.")
    types.set_defaults(func=cmd_types)

    render = sub.add_parser("render", help="Print the create command without running it.")
    render.add_argument("type", help="Server type, e.g. minecraft-java.")
    render.add_argument("name", help="Container name.")
    render.add_argument("port", type=int, help="Host port.")
    render.set_defaults(func=cmd_render)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=load_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
