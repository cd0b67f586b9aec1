#!/usr/bin/env python3
"""
Enrollment Client - Command Line Entry Point

Bootstraps remote config, prints the resolved API endpoint and optionally
checks whether a registration exists on the server.

Usage:
    enrollment-client                              # Use default settings file
    enrollment-client --config my.yaml             # Use custom settings file
    enrollment-client --check-registration 123456  # Look up a registration
"""

import argparse
import asyncio
import json
import sys

from enrollment_client.app import EnrollmentApp
from enrollment_client.common.config import load_settings_file
from enrollment_client.common.exceptions import ApiError, describe_api_error
from enrollment_client.common.logging_setup import set_log_level
from enrollment_client.services.api.enrollment import check_user_exists


async def main_async(args: argparse.Namespace) -> int:
    """
    Async main function.

    Returns:
        Process exit code
    """
    settings = load_settings_file(args.config)
    set_log_level("DEBUG" if args.verbose else settings.log_level)

    async with EnrollmentApp(settings) as app:
        print(json.dumps(app.get_status(), indent=2))

        if args.check_registration:
            try:
                lookup = await check_user_exists(app.http_client, args.check_registration)
            except ApiError as e:
                print(f"Lookup failed: {describe_api_error(e)}", file=sys.stderr)
                return 2

            state = "exists" if lookup.exists else "not found"
            print(f"Registration {lookup.registration_id}: {state}")

    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Enrollment client remote config bootstrap"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to settings file (default: enrollment.yaml)"
    )
    parser.add_argument(
        "--check-registration",
        type=str,
        default=None,
        metavar="ID",
        help="Check whether a registration number exists on the server"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(main_async(args)))
    except KeyboardInterrupt:
        print("\nStopped by user")


if __name__ == "__main__":
    main()
