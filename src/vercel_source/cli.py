# src/vercel_source/cli.py

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

import platformdirs
from dotenv import load_dotenv

from vercel_source import log_utils
from vercel_source.config import load_settings
from vercel_source.constants import (
    APP_NAME,
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_PARTIAL_FAILURE,
    EXIT_SUCCESS,
    LOG_LEVEL_ENV_VAR,
    MAX_CONCURRENT_ENV_VAR,
    TEAM_ENV_VAR,
    TOKEN_ENV_VAR,
)
from vercel_source.download.interfaces import MaterializeSummary
from vercel_source.download.orchestrator import download_source
from vercel_source.exceptions import InputError, VercelSourceError
from vercel_source.utils import get_api_request_summary, reset_api_tracking

USAGE_EXAMPLES = (
    f"e.g: {APP_NAME} example-5ik51k4n7.vercel.app\n"
    f"e.g: {APP_NAME} dpl_6CR1uw9hBdpWgrMvPkncsTGRC18A"
)

HELP_EPILOG = f"""\
Examples:
  {APP_NAME} example.vercel.app
  {APP_NAME} example-5ik51k4n7.vercel.app ./my-project
  {APP_NAME} dpl_6CR1uw9hBdpWgrMvPkncsTGRC18A

Environment Variables:
  {TOKEN_ENV_VAR}     Your Vercel API token (required)
  {TEAM_ENV_VAR}      Your Vercel team ID (optional)
  {MAX_CONCURRENT_ENV_VAR}
                    Default for --max-concurrent
  {LOG_LEVEL_ENV_VAR}
                    Initial log level (DEBUG, INFO, ...)

Setup:
  1. Get your Vercel token from: https://vercel.com/account/tokens
  2. Create a .env file with: {TOKEN_ENV_VAR}=your_token_here
  3. Run the command with your deployment URL
"""


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Download source code from Vercel deployments",
        epilog=HELP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "deployment",
        nargs="?",
        metavar="deployment-url-or-id",
        help="Deployment domain (example.vercel.app) or id (dpl_...)",
    )
    parser.add_argument(
        "destination",
        nargs="?",
        metavar="destination-dir",
        help="Directory to write the source into (defaults to the deployment argument)",
    )
    parser.add_argument(
        "--max-concurrent",
        "-j",
        type=int,
        default=None,
        help="Maximum number of simultaneous file downloads",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Console log level",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write a rotating log file to the user log directory",
    )
    return parser


def _report_summary(summary: MaterializeSummary, destination: str) -> None:
    """
    Log the end-of-run report, listing every entry that failed.
    """
    logger = log_utils.logger
    if summary.ok:
        logger.info(f"\n✓ Successfully downloaded source code to {destination}")
    else:
        logger.warning(
            f"\nDownloaded source code to {destination} with "
            f"{len(summary.failed)} failed entries"
        )
    logger.info(f"→ Total files: {summary.file_count}")
    logger.info(f"→ Total directories: {summary.directory_count}")
    logger.info(f"→ Downloaded: {summary.downloaded}, skipped: {summary.skipped}")

    for result in summary.failed:
        logger.error(f"✗ {result.entry_name}: {result.error_message}")

    api_summary = get_api_request_summary()
    logger.debug(
        "API requests: %d total, %d failed",
        api_summary["total_requests"],
        api_summary["failed_requests"],
    )


def run(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, perform the download and return the process exit code.

    `--help` exits through argparse before any configuration or network access.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    # The logger read the environment on import, before .env was loaded
    log_level = args.log_level or os.environ.get(LOG_LEVEL_ENV_VAR)
    if log_level:
        log_utils.set_log_level(log_level)
    if args.log_file:
        log_file = log_utils.add_file_logging(
            Path(platformdirs.user_log_dir(APP_NAME)), log_level or "INFO"
        )
        log_utils.logger.info(f"Logging to {log_file}")

    try:
        settings = load_settings(max_concurrent=args.max_concurrent)
        if not args.deployment:
            raise InputError("Missing deployment URL or id", usage_hint=USAGE_EXAMPLES)

        destination = args.destination or args.deployment
        reset_api_tracking()
        summary = asyncio.run(download_source(settings, args.deployment, destination))
    except InputError as e:
        log_utils.logger.error(str(e))
        if e.usage_hint:
            log_utils.logger.info(e.usage_hint)
        return e.exit_code
    except VercelSourceError as e:
        log_utils.logger.error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        log_utils.logger.warning("Interrupted")
        return EXIT_INTERRUPTED
    except Exception as e:
        log_utils.logger.exception(f"Unexpected error: {e}")
        return EXIT_FAILURE

    _report_summary(summary, destination)
    return EXIT_SUCCESS if summary.ok else EXIT_PARTIAL_FAILURE


def main():
    """Entry point for the vercel-source-downloader console script."""
    sys.exit(run())


if __name__ == "__main__":
    main()
