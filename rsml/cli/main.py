"""
RSML CLI Main Module
====================

Main CLI entry point with all commands.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rsml import __version__
from rsml.core.config import Config
from rsml.engine.rsml_compiler import CompilerOptions
from rsml.utils.logger import configure_logging

LOG_LEVELS = ["debug", "info", "warning", "error"]


def _common_options() -> argparse.ArgumentParser:
    """Options accepted by every command."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject unknown characters and content after the root element",
    )
    common.add_argument(
        "--crate",
        dest="crate_path",
        default=None,
        help="Path prefix of the builder types (default: hyprui)",
    )
    common.add_argument(
        "--no-merge-text",
        dest="merge_text",
        action="store_false",
        default=None,
        help="Keep each word between tags as its own text node",
    )
    common.add_argument(
        "--config",
        default=None,
        help="Python config file",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Minimum log level",
    )
    common.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Log output format",
    )
    return common


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    common = _common_options()

    parser = argparse.ArgumentParser(
        prog="rsml",
        description="RSML markup compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rsml compile ui/counter.rsml          Print generated Rust code
  rsml expand src/main.rs -o out.rs     Expand rsml! invocations
  rsml check rsml_tests/                Compile every .rsml file
  rsml tokens ui/counter.rsml --json    Dump the token stream
        """,
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"rsml {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compile command
    compile_parser = subparsers.add_parser(
        "compile",
        parents=[common],
        help="Compile an .rsml file to Rust code",
    )
    compile_parser.add_argument("file", help="Markup file")
    compile_parser.add_argument("-o", "--output", help="Write code to this file")

    # Expand command
    expand_parser = subparsers.add_parser(
        "expand",
        parents=[common],
        help="Expand rsml! invocations in a Rust source file",
    )
    expand_parser.add_argument("file", help="Rust source file")
    expand_parser.add_argument("-o", "--output", help="Write expanded source to this file")

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Compile every markup file under the given paths",
    )
    check_parser.add_argument("paths", nargs="+", help="Files or directories")
    check_parser.add_argument(
        "--pattern",
        default="*.rsml",
        help="File pattern used inside directories",
    )
    check_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Do not print generated code",
    )

    # Debug dumps
    tokens_parser = subparsers.add_parser(
        "tokens",
        parents=[common],
        help="Print the token stream of a markup file",
    )
    tokens_parser.add_argument("file", help="Markup file")
    tokens_parser.add_argument("--json", action="store_true", help="Print as JSON")

    tree_parser = subparsers.add_parser(
        "tree",
        parents=[common],
        help="Print the markup tree of a file as JSON",
    )
    tree_parser.add_argument("file", help="Markup file")

    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Layer config file, environment and command-line flags."""
    config = Config()

    if args.config:
        config.load_file(args.config)
    config.load_env()

    overrides = {
        "compiler.strict": args.strict,
        "compiler.crate_path": args.crate_path,
        "compiler.merge_text": args.merge_text,
        "logging.level": args.log_level,
        "logging.format": args.log_format,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    return config


def cli(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    handlers = {
        "compile": handle_compile,
        "expand": handle_expand,
        "check": handle_check,
        "tokens": handle_tokens,
        "tree": handle_tree,
    }

    handler = handlers.get(parsed.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        config = build_config(parsed)
        configure_logging(
            level=config.get("logging.level", "warning"),
            format=config.get("logging.format", "text"),
        )
        return handler(parsed, CompilerOptions.from_config(config))
    except KeyboardInterrupt:
        print("\nAborted.")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def handle_compile(args: argparse.Namespace, options: CompilerOptions) -> int:
    from rsml.cli.commands.compile import compile_command
    return compile_command(args.file, args.output, options)


def handle_expand(args: argparse.Namespace, options: CompilerOptions) -> int:
    from rsml.cli.commands.compile import expand_command
    return expand_command(args.file, args.output, options)


def handle_check(args: argparse.Namespace, options: CompilerOptions) -> int:
    from rsml.cli.commands.check import check_paths
    return check_paths(args.paths, options, args.pattern, verbose=not args.quiet)


def handle_tokens(args: argparse.Namespace, options: CompilerOptions) -> int:
    from rsml.cli.commands.inspect import tokens_command
    return tokens_command(args.file, options, as_json=args.json)


def handle_tree(args: argparse.Namespace, options: CompilerOptions) -> int:
    from rsml.cli.commands.inspect import tree_command
    return tree_command(args.file, options)


def main() -> None:
    """Main entry point."""
    sys.exit(cli())


if __name__ == "__main__":
    main()
