"""
scopedb CLI - inspect and edit a JSON-file scoped store.

Commands:
- scopedb get: Read a value (initializing it with --default when missing)
- scopedb set: Write a value
- scopedb database: Print the database object
- scopedb clear: Reset the database object to {}
- scopedb info: Show the resolved configuration
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from scopedb.accessor import ScopedDB
from scopedb.config import ScopeDBConfig, StoreConfig, load_config
from scopedb.errors import ConfigurationError, ErrorCode, ScopeDBError, create_error_response
from scopedb.identity import StaticIdentityProvider
from scopedb.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def _parse_value(raw: str) -> Any:
    """Parse a command-line value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _emit(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def _build_config(args: argparse.Namespace) -> ScopeDBConfig:
    config = load_config(args.config)
    if args.file:
        store = StoreConfig(
            backend="json",
            path=args.file,
            recover_corrupt=config.store.recover_corrupt,
        )
        config = config.model_copy(update={"store": store})
    if config.store.backend != "json":
        raise ConfigurationError(
            ErrorCode.E803_CONFIG_VALIDATION_FAILED,
            "The CLI needs a JSON file store: pass --file or set store.backend=json",
        )
    return config


def _build_db(args: argparse.Namespace) -> ScopedDB:
    config = _build_config(args)
    identity = StaticIdentityProvider(args.identity) if args.identity else None
    return ScopedDB.from_config(config, identity)


def cmd_get(args: argparse.Namespace) -> int:
    """Print a value, initializing it with --default when missing."""
    db = _build_db(args)
    read = db.get_by_user if args.user else db.get
    _emit(read(args.namespace, args.path, _parse_value(args.default)))
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    """Write a value."""
    db = _build_db(args)
    write = db.set_by_user if args.user else db.set
    write(args.namespace, args.path, _parse_value(args.value))
    return 0


def cmd_database(args: argparse.Namespace) -> int:
    """Print the database object."""
    db = _build_db(args)
    view = db.database_by_user() if args.user else db.database()
    _emit(view.value())
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    """Reset the database object to {} and print it."""
    db = _build_db(args)
    view = db.database_by_user_clear() if args.user else db.database_clear()
    _emit(view.value())
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Print the resolved configuration."""
    config = _build_config(args) if args.file else load_config(args.config)
    _emit(config.model_dump(by_alias=True))
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-f", "--file", type=str, help="JSON document to operate on")
    parser.add_argument("-c", "--config", type=str, help="Path to YAML configuration file")
    parser.add_argument(
        "-u",
        "--user",
        action="store_true",
        help="Use the user-scoped path instead of the public one",
    )
    parser.add_argument("--identity", type=str, help="Identity for user-scoped paths")


def _add_path_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", nargs="?", default="", help="Dot-delimited sub-path")
    parser.add_argument(
        "-n",
        "--namespace",
        type=str,
        default=None,
        help="Namespace (default: defaults.namespace from config, 'db')",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scopedb",
        description="scopedb - scoped key-path store CLI",
    )

    from scopedb import __version__

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: logging.level from config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    get_parser = subparsers.add_parser("get", help="Read a value")
    _add_path_arguments(get_parser)
    get_parser.add_argument("-d", "--default", type=str, default='""', help="Default (JSON) when missing")
    _add_common_arguments(get_parser)
    get_parser.set_defaults(func=cmd_get)

    set_parser = subparsers.add_parser("set", help="Write a value")
    _add_path_arguments(set_parser)
    set_parser.add_argument("value", help="Value to store (parsed as JSON when possible)")
    _add_common_arguments(set_parser)
    set_parser.set_defaults(func=cmd_set)

    database_parser = subparsers.add_parser("database", help="Print the database object")
    _add_common_arguments(database_parser)
    database_parser.set_defaults(func=cmd_database)

    clear_parser = subparsers.add_parser("clear", help="Reset the database object to {}")
    _add_common_arguments(clear_parser)
    clear_parser.set_defaults(func=cmd_clear)

    info_parser = subparsers.add_parser("info", help="Show resolved configuration")
    _add_common_arguments(info_parser)
    info_parser.set_defaults(func=cmd_info)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
        configure_logging(
            args.log_level or config.logging.level,
            json_format=config.logging.json_format,
        )
        return int(args.func(args))
    except ScopeDBError as e:
        e.log(logging.DEBUG)
        print(json.dumps(create_error_response(e)), file=sys.stderr)
        return 1
    except ValueError as e:
        logger.debug("Command failed: %s", e, exc_info=True)
        print(json.dumps(create_error_response(e)), file=sys.stderr)
        return 1
