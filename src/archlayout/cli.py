"""Command-line interface for laying out architecture models."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from archlayout.config import DEFAULT_CONFIG, LayoutConfig
from archlayout.errors import ConfigError, ModelError
from archlayout.model import load_architecture
from archlayout.renderers import JsonRenderer
from archlayout.views import OVERVIEW, all_views, view, view_names

logger = logging.getLogger(__name__)

ALL_VIEWS = "all"


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: str | None = None
    exit_code: int = 1


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="archlayout",
        description="Lay out architecture models as positioned diagrams (JSON).",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    layout_parser = subparsers.add_parser("layout", help="Lay out one view (or all views) of a model")
    layout_parser.add_argument("input", help="Model .json file")
    layout_parser.add_argument(
        "--view",
        default=OVERVIEW,
        help="'overview', a container path or id, 'scenario:<title>' or 'all' (default: overview)",
    )
    layout_parser.add_argument(
        "--direction",
        type=str.upper,
        choices=["LR", "RL", "TB", "BT"],
        help="Override the direction from the model's style/metadata",
    )
    layout_parser.add_argument("--config", help="JSON file with layout settings")
    layout_parser.add_argument("--curved", action="store_true", help="Emit curve control points for edges")
    layout_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Lay out independent views and sibling scopes in parallel",
    )
    layout_parser.add_argument("-o", "--output", help="Output .json path (default: stdout)")

    views_parser = subparsers.add_parser("views", help="List the views a model supports")
    views_parser.add_argument("input", help="Model .json file")

    return parser


def _load_config(path: str | None) -> LayoutConfig:
    if not path:
        return DEFAULT_CONFIG
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CliError("E_CONFIG", f"failed to read config file: {path}", hint=str(exc), exit_code=2) from exc
    if not isinstance(data, dict):
        raise CliError("E_CONFIG", f"config file must hold a JSON object: {path}", exit_code=2)
    return LayoutConfig.from_mapping(data)


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError("E_IO_WRITE", f"failed to write output file: {path}", hint=str(exc), exit_code=4) from exc


def _handle_layout(args: argparse.Namespace) -> int:
    if args.workers < 1:
        raise CliError("E_ARGS", "--workers must be >= 1", exit_code=2)

    arch = load_architecture(args.input)
    config = _load_config(args.config)
    renderer = JsonRenderer()
    logger.debug("layout view=%s direction=%s workers=%d", args.view, args.direction or "<model>", args.workers)

    if args.view == ALL_VIEWS:
        diagrams = all_views(arch, args.direction, config, curved=args.curved, max_workers=args.workers)
        text = renderer.render_many(diagrams)
    else:
        diagram = view(arch, args.view, args.direction, config, curved=args.curved, max_workers=args.workers)
        text = renderer.render(diagram)

    if args.output:
        _write_text(Path(args.output), text + "\n")
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(text + "\n")
    return 0


def _handle_views(args: argparse.Namespace) -> int:
    for name in view_names(load_architecture(args.input)):
        print(name)
    return 0


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, ModelError):
        return CliError("E_MODEL", str(exc), hint="Check the model file and the requested view.", exit_code=3)
    if isinstance(exc, ConfigError):
        return CliError("E_CONFIG", str(exc), hint="Check the layout settings file.", exit_code=2)
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {"ok": False, "code": err.code, "message": err.message, "hint": err.hint}
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def main(argv: Iterable[str] | None = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv) and raw_argv[idx + 1] == "json":
            error_format = "json"

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format
        logging.basicConfig(
            level=logging.DEBUG if args.debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        if args.command == "layout":
            return _handle_layout(args)
        if args.command == "views":
            return _handle_views(args)

        raise CliError("E_ARGS", "missing subcommand", hint="Use one of: layout, views.", exit_code=2)
    except UsageError as exc:
        err = CliError("E_ARGS", str(exc), hint="Use subcommands: layout, views.", exit_code=2)
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in e2e tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if "--debug" in raw_argv:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
