"""CLI entry point for blame-split."""

import argparse
import logging
import os
import sys

import blame_split.io.git_cli
import blame_split.io.logging_setup
import blame_split.io.settings
import blame_split.palette
from blame_split.tui.app import BlameSplitApp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blame-split",
        description="Browse git blame history of a file in a split view",
    )
    parser.add_argument("file", help="File to blame")
    parser.add_argument("--line", type=int, default=1, help="Initial cursor line (default: 1)")
    parser.add_argument(
        "--rev",
        type=str,
        default=None,
        help="Jump to this revision after blaming the working tree",
    )
    parser.add_argument(
        "--contents",
        type=str,
        default=None,
        help="Blame the content of this file as unsaved changes to FILE",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Gutter width in cells (default: saved setting, else 60)",
    )
    parser.add_argument(
        "--seed-hue",
        type=float,
        default=None,
        help="Base hue for commit colors (default: $BLAME_SPLIT_SEED_HUE, else 190)",
    )
    return parser


def read_lines(path: str) -> list[str]:
    """File lines counted the way git blame counts them (form feeds and carriage returns stay put)."""
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return blame_split.io.git_cli.split_lines(f.read())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    # The TUI owns the terminal, so logs go to the file only.
    log_runtime = blame_split.io.logging_setup.configure(args.file, console=False)
    logger.info(
        "blame %s: logging to %s (level %s)", args.file, log_runtime.file_path, log_runtime.level_name
    )

    if not os.path.isfile(args.file) and args.contents is None:
        print(f"blame-split: no such file: {args.file}", file=sys.stderr)
        return 2

    seed_hue = args.seed_hue
    if seed_hue is None:
        seed_hue = blame_split.io.settings.load_setting("seed_hue")
    palette_size = blame_split.io.settings.load_setting("palette_size")
    try:
        palette = blame_split.palette.init_palette(seed_hue, int(palette_size))
    except (TypeError, ValueError):
        logger.warning("invalid palette settings (seed_hue=%r, palette_size=%r)", seed_hue, palette_size)
        palette = blame_split.palette.init_palette()

    modified = args.contents is not None
    try:
        lines = read_lines(args.contents or args.file)
    except OSError as exc:
        print(f"blame-split: {exc}", file=sys.stderr)
        return 2

    try:
        backend, repo_path = blame_split.io.git_cli.resolve_repo_path(args.file)
        app = BlameSplitApp(
            repo_path,
            lines,
            backend,
            line=max(1, args.line),
            revision=args.rev,
            gutter_width=args.width,
            palette=palette,
            modified=modified,
        )
        app.run()
        if app.return_code:
            return app.return_code
    except blame_split.io.git_cli.GitUnavailableError as exc:
        logger.error("git unavailable: %s", exc)
        print(f"blame-split: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
