import argparse
import importlib
import logging
import sys

from pydantic import ValidationError

from .config import get_settings
from .deps import Store
from .exceptions import WeekboardError

logger = logging.getLogger(__name__)

COMMAND_MODULES = [
    "tasks",
    "projects",
    "weeks",
    "board",
]


def _include_commands(subparsers) -> None:
    # each module under commands/ registers its own subcommands
    for modname in COMMAND_MODULES:
        mod = importlib.import_module(f"{__package__}.commands.{modname}")
        mod.register(subparsers)
        logger.debug("[commands] mounted %s", modname)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weekboard",
        description="weekboard - weekly terminal task board",
    )
    parser.add_argument("--db", metavar="URL", help="SQLAlchemy database URL (overrides WEEKBOARD_DATABASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    _include_commands(subparsers)
    return parser


def configure_logging(verbose: bool, level: str) -> None:
    if verbose:
        logging.basicConfig(
            level="DEBUG", format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        logging.basicConfig(level=level.upper(), format="%(levelname)s - %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    overrides = {"database_url": args.db} if args.db else {}
    try:
        settings = get_settings(**overrides)
    except ValidationError as e:
        bad = ", ".join(f"WEEKBOARD_{str(err['loc'][0]).upper()}" for err in e.errors() if err["loc"])
        print(f"Error: invalid setting {bad}", file=sys.stderr)
        return 1
    configure_logging(args.verbose, settings.log_level)

    handler = getattr(args, "handler", None)
    if handler is None:
        from .commands.board import open_board
        handler = open_board

    store = Store(settings)
    try:
        return handler(args, store)
    except WeekboardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.dispose()


if __name__ == "__main__":
    sys.exit(main())
