"""Command-line entry point: dipmaker SOURCE OUTPUT [options]."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dipmaker.config.settings import PackageOptions
from dipmaker.core.errors import PackagingError
from dipmaker.core.logger import setup_logger
from dipmaker.pipeline import build_package

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dipmaker",
        description="Build a dissemination package and queue its derivative jobs",
    )
    parser.add_argument("source", type=Path, help="Submission package directory")
    parser.add_argument("output", type=Path, help="Dissemination package directory")
    parser.add_argument(
        "--ocr",
        action="store_true",
        default=None,
        help="Request OCR text and coordinates (default: DIPMAKER_OCR_REQUIRED)",
    )
    parser.add_argument(
        "--pdf-master",
        action="store_true",
        default=None,
        help="Treat source PDFs as masters instead of print images",
    )
    parser.add_argument(
        "--display-format",
        help="Display format; image items are labelled as photographs when set",
    )
    parser.add_argument(
        "--object-type",
        help="Package object type: ead or monograph (default: ead)",
    )
    parser.add_argument(
        "--subdirectory",
        help="Only look for files in this sub-directory of each container directory",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar over description units",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> PackageOptions:
    return PackageOptions.from_env(
        ocr_required=args.ocr,
        pdf_master=args.pdf_master,
        display_format=args.display_format,
        object_type=args.object_type.strip().lower() if args.object_type else None,
        subdirectory=args.subdirectory,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = options_from_args(args)

    try:
        result = build_package(args.source, args.output, options, show_progress=args.progress)
    except PackagingError as e:
        logger.error(f"Packaging failed: {e}")
        return 1
    except Exception as e:
        logger.error_trace(f"Unexpected error while packaging {args.source}: {e}")
        return 2

    print(f"Generated: {result.structural_metadata_path} ({result.job_count} job(s) queued)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
