# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for shareupload.

This module provides the main CLI entry point for the shareupload tool.

Commands:

    validate: Validate a job file (no network calls)
    upload: Upload the job's document into the remote file share

Example:
    Validate a job file:
        ```bash
        $ shareupload validate jobs/monthly-report.yaml
        ```

    Upload, overriding the target directory:
        ```bash
        $ shareupload upload jobs/monthly-report.yaml --directory-path reports/2025
        ```

    Enable debug output:
        ```bash
        $ shareupload upload jobs/monthly-report.yaml --debug
        ```

Exit Codes:

- 0: Success
- 1: Error (invalid job file or failed upload)

Note:
    The CLI uses argparse for command parsing. Each command has its own
    handler function (cmd_<command>). Upload failures are already reported
    by the pipeline as "<kind>: <detail>" messages; the CLI only prints
    them and sets the exit code.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys

from shareupload import __version__
from shareupload.config import (
    load_job_config,
    repository_from_config,
    request_from_config,
    vault_from_config,
    verify_size_from_config,
)
from shareupload.core import upload_document
from shareupload.exceptions import ShareUploadError
from shareupload.logging import get_logger, set_global_logger
from shareupload.validation import validate_job


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'shareupload validate' command.

    Args:
        args: Parsed command-line arguments containing the job path and
            verbose flag.

    Returns:
        Exit code (0 for valid job, 1 for invalid).

    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    job_path = Path(args.job).resolve()

    print(f"Validating job: {job_path}")
    print()

    result = validate_job(job_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Job:         {result.job_path}")
    print(f"Status:      {result.status.upper()}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Job is valid!")
        return 0
    print()
    print(f"[FAILED] Job validation failed with {len(result.errors)} error(s).")
    return 1


def _overrides_from_args(args: argparse.Namespace) -> dict:
    return {
        "share": {"directory_path": args.directory_path},
        "upload": {
            "file_name": args.file_name,
            "document_id": args.document_id,
            "verify_size": True if args.verify_size else None,
        },
    }


def cmd_upload(args: argparse.Namespace) -> int:
    """Handler for 'shareupload upload' command.

    Loads the job file (with defaults and command-line overrides), resolves
    the access token, walks the remote directory path, and streams the
    document into the share in 4 MiB chunks.

    Args:
        args: Parsed command-line arguments containing the job path,
            overrides, and verbosity flags.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    job_path = Path(args.job).resolve()
    if not job_path.exists():
        print(f"Error: Job file not found: {job_path}")
        return 1

    try:
        cfg = load_job_config(job_path, overrides=_overrides_from_args(args))
        request = request_from_config(cfg)
        repository = repository_from_config(cfg)
        vault = vault_from_config(cfg)
        verify_size = verify_size_from_config(cfg)
    except ShareUploadError as err:
        print(f"Error: {err.describe()}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    print(f"Uploading document {request.document_id} as {request.file_name}")
    print(f"Share: {request.account_url}/{request.share_name}")
    print()

    outcome = upload_document(
        request,
        repository=repository,
        vault=vault,
        verify_size=verify_size,
        logger=logger,
    )

    print("=" * 70)
    print("UPLOAD RESULTS")
    print("=" * 70)
    print(f"Document ID:     {request.document_id}")
    print(f"Directory:       {request.directory_path or '(share root)'}")
    print(f"File Name:       {request.file_name}")
    print(f"Success:         {outcome.success}")
    if outcome.message:
        print(f"Error:           {outcome.message}")
    print("=" * 70)
    print()

    if outcome.success:
        print("[SUCCESS] Document uploaded successfully!")
        return 0
    print("[FAILED] Upload failed.")
    return 1


def _package_version() -> str:
    try:
        return version("shareupload")
    except PackageNotFoundError:
        return __version__


def main() -> None:
    """Main entry point for the shareupload CLI.

    This function is registered as the 'shareupload' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="shareupload",
        description="Upload repository documents into a remote file share in chunks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"shareupload {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate a job file (no network calls)",
        description="Check a job YAML for syntax errors and missing fields without contacting any service.",
    )
    parser_validate.add_argument(
        "job",
        help="Path to the job YAML file",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'upload' command
    parser_upload = subparsers.add_parser(
        "upload",
        help="Upload the job's document into the file share",
        description="Resolve credentials, create the directory path, and stream the document into the share.",
    )
    parser_upload.add_argument(
        "job",
        help="Path to the job YAML file",
    )
    parser_upload.add_argument(
        "--directory-path",
        default=None,
        help="Target directory under the share root (overrides share.directory_path)",
    )
    parser_upload.add_argument(
        "--file-name",
        default=None,
        help="Target file name (overrides upload.file_name)",
    )
    parser_upload.add_argument(
        "--document-id",
        type=int,
        default=None,
        help="Source document id (overrides upload.document_id)",
    )
    parser_upload.add_argument(
        "--verify-size",
        action="store_true",
        help="Fail if the bytes streamed differ from the document's declared size",
    )
    parser_upload.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_upload.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_upload.set_defaults(func=cmd_upload)

    args = parser.parse_args()

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
