"""areacheck CLI entry point.

Usage: uv run areacheck [command]

    serve   run the request loop behind a TCP gateway
    cgi     answer a single request from a CGI environment
    check   validate and evaluate one point locally
"""
import argparse
import json
import logging
import signal
import sys
import time

from areacheck.config import ConfigError, ServerConfig
from areacheck.domain.coordinates import CoordinateTriple, EvaluationResult
from areacheck.domain.region import is_in_region
from areacheck.gateway.stdio import StdioGateway
from areacheck.gateway.tcp import TcpGateway
from areacheck.protocol.adapter import ProtocolAdapter
from areacheck.protocol.codec import INVALID_DATA, RequestError, parse_number
from areacheck.server.loop import RequestLoop

log = logging.getLogger("areacheck")


def _add_serve_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "serve",
        help="Serve requests over the TCP gateway until interrupted.",
    )
    p.add_argument(
        "--host", default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)",
    )
    p.add_argument(
        "--port", type=int, default=9000,
        help="Bind port (default: 9000)",
    )


def _add_check_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "check",
        help="Evaluate a single point without starting a server.",
    )
    p.add_argument("x", help="x coordinate (',' accepted as decimal separator)")
    p.add_argument("y", help="y coordinate")
    p.add_argument("r", help="region radius")


def _run_serve(args: argparse.Namespace, config: ServerConfig) -> int:
    gateway = TcpGateway(host=args.host, port=args.port)
    loop = RequestLoop(gateway, ProtocolAdapter(config))
    gateway.start()

    def _on_sigterm(signum, frame):
        log.info("Received signal %d, shutting down", signum)
        loop.stop()

    signal.signal(signal.SIGTERM, _on_sigterm)
    try:
        loop.run()
    except KeyboardInterrupt:
        log.info("Interrupted, shutting down")
    finally:
        loop.stop()
    return 0


def _run_cgi(args: argparse.Namespace, config: ServerConfig) -> int:
    RequestLoop(StdioGateway(), ProtocolAdapter(config)).run()
    return 0


def _run_check(args: argparse.Namespace, config: ServerConfig) -> int:
    start_ns = time.perf_counter_ns()
    try:
        point = CoordinateTriple(
            x=parse_number(args.x), y=parse_number(args.y), r=parse_number(args.r)
        )
    except RequestError as exc:
        print(json.dumps({"error": exc.message}))
        return 1
    if not config.build_validator().validate(point.x, point.y, point.r):
        print(json.dumps({"error": INVALID_DATA}))
        return 1

    inside = is_in_region(point.x, point.y, point.r)
    elapsed_us = (time.perf_counter_ns() - start_ns) / 1_000
    result = EvaluationResult.create(point, inside, elapsed_us)
    print(json.dumps(result.to_dict()))
    return 0


_COMMANDS = {
    "serve": _run_serve,
    "cgi": _run_cgi,
    "check": _run_check,
}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="areacheck",
        description="Point-in-region checker with per-session history.",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO). Logs go to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_serve_parser(subparsers)
    subparsers.add_parser("cgi", help="Answer one request from the CGI environment.")
    _add_check_parser(subparsers)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ServerConfig.from_env()
    except ConfigError as exc:
        log.error("Invalid configuration: %s", exc)
        sys.exit(2)

    sys.exit(_COMMANDS[args.command](args, config))
