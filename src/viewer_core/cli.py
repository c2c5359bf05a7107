#!/usr/bin/env python3
"""
DICOM tag dump CLI

Prints the rows the viewer's tags dialog would show for DICOM files on
disk, one "name<TAB>value" line per row. Useful to check what a dataset
looks like in the dialog without starting the UI.

Usage:
    python -m viewer_core.cli image.dcm
    python -m viewer_core.cli study_dir/ --list-folders
    python -m viewer_core.cli study_dir/ --folder series2 --search window
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pydicom
from pydicom.errors import InvalidDicomError

from .config import ViewerConfig
from .errors import BucketNotFound
from .folders import partition
from .search import filter_rows
from .tags import TagFlattener, dataset_to_tag_dict

logger = logging.getLogger(__name__)


def find_input_files(path: Path) -> List[str]:
    """
    Relative paths of the files to consider.

    A directory yields paths relative to it, so its sub-folders become the
    folders to choose from; a single file yields its bare name.
    """
    if path.is_file():
        return [path.name]
    return sorted(
        p.relative_to(path).as_posix()
        for p in path.rglob('*')
        if p.is_file()
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='viewer-tags',
        description='Print the flattened DICOM tags shown by the viewer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All tags of one file
  viewer-tags image.dcm

  # Tags mentioning "window" of the files in folder series2
  viewer-tags study_dir/ --folder series2 --search window

  # Folders of a study directory
  viewer-tags study_dir/ --list-folders
        """
    )

    parser.add_argument(
        'input',
        type=Path,
        help='DICOM file or directory'
    )

    parser.add_argument(
        '--folder',
        help='Top-level folder of a directory input to read (default: first)'
    )

    parser.add_argument(
        '--list-folders',
        action='store_true',
        help='List the folders of a directory input and exit'
    )

    parser.add_argument(
        '-s', '--search',
        default='',
        help='Only show rows whose name or value contains this text'
    )

    parser.add_argument(
        '-i', '--instance',
        type=int,
        default=0,
        help='Instance index for per-instance values (default: 0)'
    )

    parser.add_argument(
        '--plain',
        action='store_true',
        help='Treat metadata as plain key/value pairs'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if not args.input.exists():
        print(f"Error: Input path does not exist: {args.input}", file=sys.stderr)
        return 1

    config = ViewerConfig()
    base = args.input if args.input.is_dir() else args.input.parent
    folders = partition(find_input_files(args.input), config)

    if args.list_folders:
        for name in folders.ordered_bucket_names:
            print(f"{name}\t{len(folders.buckets[name])}")
        return 0

    if args.folder:
        try:
            folders.select_bucket(args.folder)
        except BucketNotFound as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    files = folders.files_to_load()
    if not files:
        print(f"Error: No files found in: {args.input}", file=sys.stderr)
        return 1

    flattener = TagFlattener(config)
    fail_count = 0

    for rel in files:
        path = base / rel
        try:
            ds = pydicom.dcmread(str(path), stop_before_pixels=True)
        except (InvalidDicomError, OSError) as e:
            fail_count += 1
            logger.warning("Cannot read %s: %s", path, e)
            continue

        record = dataset_to_tag_dict(ds)
        structured = False if args.plain else None
        rows = filter_rows(flattener.flatten(record, args.instance, structured), args.search)

        if len(files) > 1:
            print(f"# {rel}")
        for row in rows:
            print(f"{row.name}\t{row.value}")

    return 0 if fail_count == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
