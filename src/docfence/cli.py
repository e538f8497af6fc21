"""CLI entry point for docfence."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from docfence.builder import Builder
from docfence.config import BuildConfig
from docfence.errors import IOFailure
from docfence.storage import MANIFEST_NAME, Manifest

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_BAD_INPUT = 2


def exit_code(manifest: Manifest, strict: bool) -> int:
    """Strict runs fail on any recorded warning; default runs never do."""
    if strict and manifest.has_warnings:
        return EXIT_WARNINGS
    return EXIT_OK


def build(
    input_dir: str,
    output_dir: Optional[str],
    strict: bool = False,
    jobs: int = 0,
    copy_assets: bool = True,
) -> int:
    """Build a tree of chapters into static pages.

    Args:
        input_dir: Folder or .zip holding the chapters
        output_dir: Destination folder; None checks without writing
        strict: Return a nonzero code when any warning was recorded
        jobs: Documents processed concurrently (0 = auto)
        copy_assets: Copy referenced assets next to the pages

    Returns:
        Process exit code
    """
    source = Path(input_dir)
    if not source.exists():
        logger.error(f"Input not found: {input_dir}")
        return EXIT_BAD_INPUT

    config = BuildConfig(
        input_dir=source,
        output_dir=Path(output_dir) if output_dir else None,
        strict=strict,
        jobs=jobs,
        copy_assets=copy_assets,
    )

    if config.writes_output:
        logger.info(f"Building {config.input_dir} -> {config.output_dir}")
    else:
        logger.info(f"Checking {config.input_dir}")

    try:
        manifest = Builder(config).build()
    except IOFailure as e:
        logger.error(f"Cannot process: {e}")
        logger.error("Supported inputs: folders, .zip files")
        return EXIT_BAD_INPUT

    if config.writes_output:
        logger.info(f"Manifest -> {config.output_dir / MANIFEST_NAME}")

    code = exit_code(manifest, config.strict)
    if code != EXIT_OK:
        logger.error("Strict mode: warnings were recorded")
    return code


def info(manifest_path: str) -> int:
    """Show a summary of a build manifest.

    Args:
        manifest_path: Path to manifest.json, or the output folder holding it
    """
    path = Path(manifest_path)
    if path.is_dir():
        path = path / MANIFEST_NAME
    if not path.exists():
        logger.error(f"Manifest not found: {manifest_path}")
        return EXIT_BAD_INPUT

    manifest = Manifest.load(path)
    totals = manifest.totals()

    print(f"Manifest: {path}")
    print(f"  Source: {manifest.source}")
    print(f"")
    print(f"Totals:")
    for key, value in totals.items():
        print(f"  {key}: {value}")
    print(f"")
    print(f"Documents:")
    for entry in manifest.entries:
        flag = "!" if entry.warning_count else " "
        print(
            f" {flag} {entry.path:<50} {entry.stage.value:<10} "
            f"ok={entry.fragments_validated} skipped={entry.fragments_skipped} "
            f"failed={entry.fragments_failed} dangling={entry.dangling_links}"
        )
    return EXIT_OK


def deck(input_dir: Optional[str] = None, output_dir: Optional[str] = None) -> int:
    """Launch the Build Deck TUI for interactive builds."""
    # Import here to avoid loading Textual unless needed
    from docfence.build_deck import main as build_deck_main

    build_deck_main(input_dir, output_dir)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="docfence",
        description="docfence - static documentation builds with code fragment validation",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every pipeline stage",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # build command
    build_parser = subparsers.add_parser(
        "build",
        help="Render a tree of chapters into static pages",
    )
    build_parser.add_argument("--input", "-i", required=True, help="Input folder or zip file path")
    build_parser.add_argument("--output", "-o", required=True, help="Output folder")
    build_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit nonzero when any parse error or dangling link is recorded",
    )
    build_parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=0,
        help="Documents processed concurrently (default: CPU count, max 8)",
    )
    build_parser.add_argument(
        "--no-assets",
        action="store_true",
        help="Do not copy referenced assets into the output",
    )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Validate fragments and links without writing pages",
    )
    check_parser.add_argument("--input", "-i", required=True, help="Input folder or zip file path")
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit nonzero when any parse error or dangling link is recorded",
    )
    check_parser.add_argument("--jobs", "-j", type=int, default=0)

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show a summary of a build manifest",
    )
    info_parser.add_argument("manifest", help="Path to manifest.json or an output folder")

    # deck command
    deck_parser = subparsers.add_parser(
        "deck",
        help="Launch the Build Deck TUI",
    )
    deck_parser.add_argument("--input", "-i", help="Prefill the input path")
    deck_parser.add_argument("--output", "-o", help="Prefill the output path")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("docfence").setLevel(logging.DEBUG)

    if args.command == "build":
        return build(
            args.input,
            args.output,
            strict=args.strict,
            jobs=args.jobs,
            copy_assets=not args.no_assets,
        )
    elif args.command == "check":
        return build(args.input, None, strict=args.strict, jobs=args.jobs)
    elif args.command == "info":
        return info(args.manifest)
    elif args.command == "deck":
        return deck(args.input, args.output)
    return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
