"""CLI entry point."""

from __future__ import annotations

import argparse
import logging
from typing import Iterable, Optional, Sequence

from ecodiff import __version__
from ecodiff.errors import EcodiffError
from ecodiff.hydra_utils import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_PATH,
    compose_config,
    format_config,
    resolve_config,
)
from ecodiff.logging_utils import (
    configure_logging,
    log_exception,
    run_with_error_handling,
)
from ecodiff.tasks.runner import list_analyses, run_analysis_from_config

_SUBCOMMANDS: Sequence[str] = (
    "help",
    "cfg",
    "run",
    "list",
)


def _add_config_arguments(parser: argparse.ArgumentParser, overrides_help: str) -> None:
    parser.add_argument(
        "--config-path",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the Hydra config directory.",
    )
    parser.add_argument(
        "--config-name",
        default=DEFAULT_CONFIG_NAME,
        help="Hydra config name (without extension).",
    )
    parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help=overrides_help,
    )


def _cfg_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    print(format_config(cfg), end="")


def _run_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    resolved = resolve_config(cfg)
    level = (resolved.get("log") or {}).get("level")
    if level:
        configure_logging(level)
    logger = logging.getLogger("ecodiff.run")
    result = run_analysis_from_config(resolved, logger=logger)
    if result.output_path is None:
        print(result.frame.to_csv(index=False), end="")
        return
    logger.info("Wrote %s (%d rows).", result.output_path, len(result.frame))
    print(f"output={result.output_path}")


def _list_handler(args: argparse.Namespace) -> None:
    for name in list_analyses():
        print(name)


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _register_cfg_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    cfg_parser = subparsers.add_parser(
        "cfg",
        help="Compose and print Hydra config.",
        description="Compose and print Hydra config.",
    )
    _add_config_arguments(
        cfg_parser,
        "Hydra overrides (ex: analysis=abundance_change columns.time=year).",
    )
    cfg_parser.set_defaults(handler=_cfg_handler)


def _register_run_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    run_parser = subparsers.add_parser(
        "run",
        help="Run an analysis on an abundance table.",
        description=(
            "Compose a config, run analysis.name on input.path and write "
            "output.path (csv, tsv or parquet)."
        ),
    )
    _add_config_arguments(
        run_parser,
        "Hydra overrides (ex: input.path=plots.csv columns.treatment=trt --pool).",
    )
    run_parser.set_defaults(handler=_run_handler)


def _register_list_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    list_parser = subparsers.add_parser(
        "list",
        help="List registered analyses.",
        description="List registered analyses.",
    )
    list_parser.set_defaults(handler=_list_handler)


def _build_parser(subcommands: Iterable[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecodiff",
        description="Pairwise community difference metrics.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in subcommands:
        if name == "help":
            _register_help_subcommand(subparsers, parser)
        elif name == "cfg":
            _register_cfg_subcommand(subparsers)
        elif name == "run":
            _register_run_subcommand(subparsers)
        elif name == "list":
            _register_list_subcommand(subparsers)
        else:
            raise ValueError(f"Unknown subcommand: {name!r}.")
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser(_SUBCOMMANDS)
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    try:
        args.handler(args)
    except EcodiffError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    run_with_error_handling(_cli_main, logger=logger, cli_logger=logger, argv=argv)


if __name__ == "__main__":
    main()
