#!/usr/bin/env python3

"""
===========================
= AWS IAM USER EXPORTER =
===========================

Title: IAM User Export Script
Date: OCT-18-2026

Description:
Exports the full configuration of every IAM user in an account into one JSON
file per resource category: the user list, each user object, permissions
boundaries, attached managed policies, inline policy documents and tags.
Each category is exported independently; a failure in one is logged and the
export carries on.

Usage:
  python iamexport.py [--source-profile NAME] [--export-path DIR]
                      [--erase-first] [--force] [--non-interactive]
"""

import argparse
import datetime
import sys
from pathlib import Path
from typing import List, Optional

from botocore.exceptions import BotoCoreError

import utils
from iamxlib.aws_client import get_boto3_client, supports_user_tags, validate_aws_credentials
from iamxlib.config import ExportContext, get_default_profile, get_export_path
from iamxlib.exporter import run_export

SCRIPT_NAME = "iamexport"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Export AWS IAM users to JSON files')
    parser.add_argument('--source-profile', '--SourceProfile', dest='source_profile', default=None,
                        help='Named AWS profile to export from (default: config.json or "default")')
    parser.add_argument('--export-path', '--ExportPath', dest='export_path', default=None,
                        help='Destination directory (default: config.json, C:\\IAMExport or ~/IAMExport)')
    parser.add_argument('--erase-first', '--EraseFirst', dest='erase_first', action='store_true',
                        help='Erase the contents of the export directory before exporting')
    parser.add_argument('--force', '--Force', dest='force', action='store_true',
                        help='Do not ask for confirmation before erasing')
    parser.add_argument('--non-interactive', action='store_true',
                        help='Never prompt; an unforced erase is skipped')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Log to the console only')
    return parser.parse_args(argv)


def build_context(profile: str, export_path: Path) -> ExportContext:
    """
    Create the IAM client and resolve API capabilities once for the whole run.

    Raises:
        botocore.exceptions.BotoCoreError: if the profile or client cannot be set up
    """
    iam_client = get_boto3_client('iam', profile=profile)
    tags_supported = supports_user_tags(iam_client)
    if not tags_supported:
        utils.log_debug("IAM API has no ListUserTags operation; tags will not be exported")
    return ExportContext(
        profile=profile,
        export_path=export_path,
        iam_client=iam_client,
        tags_supported=tags_supported,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the export.

    Returns:
        int: 0 on completion (including an account with no users),
             1 on a fatal error, 130 if interrupted
    """
    args = parse_args(argv)
    utils.setup_logging(SCRIPT_NAME, log_to_file=not args.no_log_file)
    start_time = datetime.datetime.now()
    utils.log_script_start(SCRIPT_NAME, "Export IAM users, policies, boundaries and tags to JSON")

    profile = args.source_profile or get_default_profile()
    export_path = Path(args.export_path).expanduser() if args.export_path else get_export_path()
    confirm = None if args.non_interactive else utils.prompt_for_confirmation

    try:
        utils.log_info(f"Source profile: {profile}")
        utils.log_info(f"Export path: {export_path}")

        try:
            context = build_context(profile, export_path)
        except BotoCoreError as e:
            utils.log_error(f"Could not create IAM client for profile {profile}", e)
            return 1

        valid, account_id, error = validate_aws_credentials(profile)
        if not valid:
            utils.log_error(f"AWS credentials for profile {profile} are not valid: {error}")
            return 1
        utils.log_info(f"Account: {account_id}")

        utils.log_section("EXPORTING IAM USERS")
        try:
            summary = run_export(context, erase_first=args.erase_first, force=args.force, confirm=confirm)
        except KeyboardInterrupt:
            utils.log_info("User cancelled operation with Ctrl+C")
            return 130
        except Exception as e:
            utils.log_error("IAM user export failed", e)
            return 1

        utils.log_export_summary(
            "IAM Users", summary.principal_count, str(export_path), len(summary.failures)
        )
        utils.log_success(f"IAM user export finished. Files are in {export_path}")
        return 0
    finally:
        utils.log_script_end(SCRIPT_NAME, start_time)


if __name__ == "__main__":
    sys.exit(main())
