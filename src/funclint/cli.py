"""
CLI entry point for funclint.

Usage:
    funclint lint <path>...            Lint files/directories
    funclint tree <file>               Show function-like nodes and their body lengths
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from funclint import __version__
from funclint.errors import ConfigurationError, SourceParseError


def cmd_lint(args):
    """Lint files and directories."""
    from .config import load_config
    from .linter import Linter

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    linter = Linter(config)
    result = linter.lint_paths([Path(p) for p in args.paths], recursive=args.recursive)

    if args.json:
        output = {
            "failures": [f.to_dict() for f in result.failures],
            "errors": [e.to_dict() for e in result.errors],
            "files_checked": result.files_checked,
        }
        print(json.dumps(output, indent=2))
    else:
        for failure in result.failures:
            print(failure)
        for error in result.errors:
            print(error, file=sys.stderr)
        print(f"\n{result.files_checked} files checked, "
              f"{len(result.failures)} failures, {len(result.errors)} errors")

    return 0 if result.ok else 1


def cmd_tree(args):
    """Show function-like nodes of a file with their body lengths."""
    from .linter import FRONTENDS
    from .rules.max_func_body_length import calc_body_length

    path = Path(args.file)
    frontend = FRONTENDS.get(path.suffix)
    if frontend is None:
        print(f"Unsupported file type: {path.suffix or path.name}", file=sys.stderr)
        return 1

    try:
        source_file = frontend(path)
    except (SourceParseError, OSError) as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    print(f"Parsed: {source_file.filename} "
          f"({source_file.line_map.line_count} lines, {source_file.node_count} nodes)")
    for node in source_file.walk():
        if not node.is_function_like():
            continue
        line, column = source_file.get_line_and_character_of_position(node.start)
        name = node.name or "<anonymous>"
        length = calc_body_length(node, source_file)
        print(f"  {line + 1}:{column + 1}  {node.kind.value:<22} {name:<30} body: {length}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="funclint",
        description="Function body length linter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    funclint lint src/ -r
    funclint lint app.py --config funclint.yaml --json
    funclint tree app.py
"""
    )
    parser.add_argument('--version', action='version', version=f'funclint {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # lint
    lint_p = subparsers.add_parser('lint', help='Lint files or directories')
    lint_p.add_argument('paths', nargs='+', help='Files or directories to lint')
    lint_p.add_argument('-c', '--config', help='Configuration file (YAML)')
    lint_p.add_argument('-r', '--recursive', action='store_true', help='Recurse into directories')
    lint_p.add_argument('--json', action='store_true', help='Output as JSON')
    lint_p.set_defaults(func=cmd_lint)

    # tree
    tree_p = subparsers.add_parser('tree', help='Show function-like nodes of a file')
    tree_p.add_argument('file', help='File to parse')
    tree_p.set_defaults(func=cmd_tree)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
