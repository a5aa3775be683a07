"""CLI entry point."""

import argparse
import asyncio
import sys

from .config import load_config
from .errors import ScraperError
from .logger import setup_logger
from .pipeline import run_pipeline
from .sanitize import sanitize_title


def _prompt(message: str) -> str:
    value = ""
    while not value.strip():
        value = input(f"{message}: ")
    return value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download a paginated document from an online viewer as a PDF"
    )
    parser.add_argument("url", nargs="?", default=None,
                        help="Document viewer URL (prompted for when omitted)")
    parser.add_argument("--title", type=str, default=None,
                        help="Document title, used to name the PDF (prompted for when omitted)")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a YAML config file")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Directory for the PDF and temporary page images")
    parser.add_argument("--keep-pages-on-failure", action="store_true",
                        help="Leave downloaded page images on disk if the run fails")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.keep_pages_on_failure:
        config.cleanup_on_failure = False

    logger = setup_logger(config.log_dir, verbose=args.verbose)

    url = args.url or _prompt("Please enter document URL")
    raw_title = args.title or _prompt("Please enter document title")
    try:
        title = sanitize_title(raw_title, config.platform)
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        result = asyncio.run(run_pipeline(config, url, title))
    except ScraperError as e:
        logger.exception(f"{type(e).__name__}: {e.message}")
        return 1

    print(f"Saved {result.page_count} pages "
          f"({result.geometry.width}x{result.geometry.height}) to {result.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
