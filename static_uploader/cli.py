"""
Command-line interface for the uploader.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .coordinator import UploadCoordinator
from .exceptions import UploaderError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: Whether to enable debug logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_config_file(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load config overrides from a JSON file.

    Args:
        config_file: Path to config file

    Returns:
        Dictionary of configuration values

    Raises:
        UploaderError: If the file cannot be read or is not a JSON object
    """
    if not config_file:
        return {}

    try:
        with open(config_file) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise UploaderError(f"Error loading config file {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise UploaderError(f"Config file {config_file} must contain a JSON object")
    return data


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge the JSON config file with the flags given on the command line."""
    overrides = load_config_file(args.config)

    flags = {
        'cwd': getattr(args, 'cwd', None),
        'bucket': getattr(args, 'bucket', None),
        'glob': getattr(args, 'glob', None),
        'glob_ignore': getattr(args, 'ignore', None),
        'base': getattr(args, 'base', None),
        'workers': getattr(args, 'workers', None),
        'output': getattr(args, 'output', None),
    }
    overrides.update({k: v for k, v in flags.items() if v is not None})

    if getattr(args, 'include_hidden', False):
        overrides['include_hidden'] = True
    if getattr(args, 'overwrite', False):
        overrides['overwrite'] = True
    return overrides


def handle_upload(args: argparse.Namespace) -> int:
    """Handle the upload command.

    Returns:
        Exit code: 1 if any file failed, 0 otherwise
    """
    coordinator = UploadCoordinator(load_config(build_overrides(args)))
    summary = coordinator.start()

    for failure in summary.failures:
        print(f"FAILED {failure.local_path} -> {failure.key}: {failure.message}")

    return 1 if summary.failed_uploads else 0


def handle_list(args: argparse.Namespace) -> int:
    coordinator = UploadCoordinator(load_config(build_overrides(args)))
    fetched = coordinator.fetch_uploaded_files(args.prefix)
    for key in fetched.fetched_keys:
        print(key)
    return 0 if fetched.listing_complete else 1


def handle_purge(args: argparse.Namespace) -> int:
    """Handle the purge command.

    Returns:
        Exit code: 1 if the listing was cut short or any key could not be
        deleted, 0 otherwise
    """
    coordinator = UploadCoordinator(load_config(build_overrides(args)))
    fetched = coordinator.fetch_uploaded_files(args.prefix)
    complete = fetched.listing_complete
    summary = fetched.batch_delete_files()

    for key in summary.failed_keys:
        print(f"FAILED {key}")
    if not complete:
        print(f"INCOMPLETE listing under '{args.prefix}'")

    return 1 if summary.failed_keys or not complete else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload static build artifacts to an S3 bucket")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose logging")
    parser.add_argument('-c', '--config', type=Path,
                        help="Path to JSON config file")

    subparsers = parser.add_subparsers(dest='command', required=True)

    # Upload command
    upload_parser = subparsers.add_parser('upload',
                                          help="Upload matching files")
    upload_parser.add_argument('--cwd', type=str,
                               help="Working directory")
    upload_parser.add_argument('-g', '--glob', type=str,
                               help="Glob pattern of files to upload")
    upload_parser.add_argument('-i', '--ignore', type=str, action='append',
                               help="Exclusion pattern (repeatable)")
    upload_parser.add_argument('-b', '--base', type=str,
                               help="Base directory stripped from keys")
    upload_parser.add_argument('--bucket', type=str,
                               help="Destination bucket")
    upload_parser.add_argument('--include-hidden', action='store_true',
                               help="Let wildcards match dot files and directories")
    upload_parser.add_argument('--overwrite', action='store_true',
                               help="Replace objects that already exist")
    upload_parser.add_argument('-w', '--workers', type=int,
                               help="Number of concurrent uploads")
    upload_parser.add_argument('-o', '--output', type=str,
                               help="Report file, relative to the working directory")
    upload_parser.set_defaults(handler=handle_upload)

    for name, handler, help_text in (
        ('list', handle_list, "List remote keys under a prefix"),
        ('purge', handle_purge, "Delete remote keys under a prefix"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('prefix', type=str,
                         help="Key prefix")
        sub.add_argument('--cwd', type=str,
                         help="Working directory")
        sub.add_argument('--bucket', type=str,
                         help="Bucket name")
        sub.set_defaults(handler=handler)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.handler(args)
    except UploaderError as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
