"""CLI entrypoints for packmeta commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .errors import PackError
from .logging import configure_logging
from .models import TemplateFile
from .packer import Packer, manifest_to_dict


def _add_output_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Subcommands repeat the flags; SUPPRESS keeps a top-level value from being reset.
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Log debug detail, including each assembly that is read.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only print warnings and errors to the console.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="packmeta",
        description="Compute package metadata, dependencies and files for a pack run.",
    )
    _add_output_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Resolve every package template in a solution and print the manifests.",
    )
    _add_output_options(inspect_parser, suppress_default=True)
    inspect_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the solution root (defaults to current directory).",
    )
    inspect_parser.add_argument(
        "--build-config",
        default=None,
        help="Build configuration whose outputs are packed (defaults to the configured value or Release).",
    )
    inspect_parser.add_argument(
        "--package-version",
        default=None,
        help="Version to use for every project template instead of the assembly version.",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the manifests as JSON.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for packmeta commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        root = Path(args.path)
        try:
            config = load_config(root)
        except PackError as exc:
            parser.exit(1, f"{exc}\n")
        configure_logging(verbose=args.verbose, quiet=args.quiet, log_file=config.log_file)
        try:
            result = Packer().collect(
                root,
                build_config=args.build_config,
                version=args.package_version,
                config=config,
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except PackError as exc:
            parser.exit(1, f"packmeta inspect failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps([manifest_to_dict(t) for t in result.templates], indent=2))
        else:
            for template in result.templates:
                print(_summarize(template))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _summarize(template: TemplateFile) -> str:
    manifest = manifest_to_dict(template)
    lines = [f"{manifest['id']} {manifest['version'] or '(no version)'} ({_relativize(Path(template.file_name))})"]
    for dependency in manifest["dependencies"]:
        requirement = dependency["version"] or "*"
        lines.append(f"  dependency {dependency['id']} {requirement}")
    for mapping in manifest["files"]:
        lines.append(f"  file {_relativize(Path(mapping['source']))} ==> {mapping['target']}")
    return "\n".join(lines)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
