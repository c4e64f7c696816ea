from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from aemops.app import list_methods, run_method
from aemops.common.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run AEM content operations")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level, including every HTTP response",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    call = subparsers.add_parser("call", help="Run one named method")
    call.add_argument("method", type=str, help="Method name, e.g. activatePage")
    call.add_argument(
        "--params",
        type=str,
        default="{}",
        help="JSON object with the method parameters",
    )

    subparsers.add_parser("methods", help="List the available methods")
    subparsers.add_parser("ping", help="Check that the author instance answers")

    return parser.parse_args(list(argv))


def _parse_params(raw: str) -> dict[str, Any]:
    try:
        params = json.loads(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid JSON in --params: {exc}") from exc
    if not isinstance(params, dict):
        raise ValueError("--params must be a JSON object")
    return params


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    params: dict[str, Any] = {}
    try:
        if parsed_args.command == "call":
            params = _parse_params(parsed_args.params)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.command == "methods":
        _emit([info.model_dump() for info in list_methods()])
        return

    try:
        if parsed_args.command == "call":
            result = run_method(parsed_args.method, params)
        elif parsed_args.command == "ping":
            result = run_method("testConnection")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error while running command")
        sys.exit(1)

    _emit(result)
    if not result["success"]:
        sys.exit(1)
    if parsed_args.command == "ping" and not result["data"]["connected"]:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
