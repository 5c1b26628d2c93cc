"""Command line entry point for the WSO2 to Tyk migration."""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .exceptions import MigrationError
from .models.migration import DEFAULT_ENV_NAME, MatchPolicy, MigrationConfig
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)

USAGE = (
    "%(prog)s <wso2_host> <wso2_username> <wso2_password> <tyk_host> <tyk_token> [options]\n"
    "       %(prog)s --wso2-host H --wso2-username U --wso2-password P "
    "--tyk-host T --tyk-token K [options]"
)

# Named flag -> MigrationConfig attribute, in positional order
CONNECTION_ARGS = [
    ("wso2_host", "--wso2-host", "WSO2 API Manager host, e.g. https://wso2:9443"),
    ("wso2_username", "--wso2-username", "WSO2 username"),
    ("wso2_password", "--wso2-password", "WSO2 password (or WSO2_PASSWORD env var)"),
    ("tyk_host", "--tyk-host", "Tyk Dashboard URL, e.g. http://tyk-dashboard:3000"),
    ("tyk_token", "--tyk-token", "Tyk Dashboard API token (or TYK_TOKEN env var)"),
]

ENV_FALLBACKS = {
    "wso2_password": "WSO2_PASSWORD",
    "tyk_token": "TYK_TOKEN",
}


class UsageError(Exception):
    """Invalid command line invocation."""
    pass


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on invalid usage."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="wso2-tyk-migrate",
        usage=USAGE,
        description="Migrate published APIs from WSO2 API Manager to the Tyk Dashboard",
    )
    parser.add_argument(
        "positional",
        nargs="*",
        metavar="ARG",
        help="wso2_host wso2_username wso2_password tyk_host tyk_token",
    )

    connection = parser.add_argument_group("connection")
    for dest, flag, help_text in CONNECTION_ARGS:
        connection.add_argument(flag, dest=dest, help=help_text)

    parser.add_argument("--config", help="JSON file with migration settings")
    parser.add_argument(
        "--env-name",
        help=f"apictl environment used for the export (default: {DEFAULT_ENV_NAME})",
    )
    parser.add_argument("--export-dir", help="Override the apictl export directory")
    parser.add_argument(
        "--match-target-url",
        action="store_true",
        default=None,
        help="Also compare the upstream URL when looking for existing APIs",
    )
    parser.add_argument("--dry-run", action="store_true", default=None, help="Check and report without importing")
    parser.add_argument("--yes", "-y", dest="assume_yes", action="store_true", default=None,
                        help="Recreate a conflicting apictl environment without asking")
    parser.add_argument("--verify-ssl", action="store_true", default=None,
                        help="Verify TLS certificates (disabled by default)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for each Tyk request")
    parser.add_argument("--report-dir", help="Write a JSON run report to this directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def build_config(args: argparse.Namespace) -> MigrationConfig:
    """
    Merge the config file, command line and environment into one config.

    Command line values win over the config file; environment variables
    only fill secrets that are still empty.

    Raises:
        UsageError: If the invocation is malformed or incomplete
    """
    data = {}
    if args.config:
        try:
            with open(args.config) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise UsageError(f"Could not read config file {args.config}: {e}")
        if not isinstance(data, dict):
            raise UsageError(f"Config file {args.config} must contain a JSON object")

    try:
        config = MigrationConfig.from_dict(data)
    except ValueError as e:
        raise UsageError(f"Invalid config file {args.config}: {e}")

    named = {dest: getattr(args, dest) for dest, _, _ in CONNECTION_ARGS}

    if args.positional:
        if any(value is not None for value in named.values()):
            raise UsageError("Positional arguments cannot be combined with named connection flags")
        if len(args.positional) != len(CONNECTION_ARGS):
            raise UsageError("Incorrect number of arguments")
        named = dict(zip((dest for dest, _, _ in CONNECTION_ARGS), args.positional))

    for dest, value in named.items():
        if value is not None:
            setattr(config, dest, value)

    for dest, env_var in ENV_FALLBACKS.items():
        if not getattr(config, dest) and os.environ.get(env_var):
            setattr(config, dest, os.environ[env_var])

    if args.env_name:
        config.env_name = args.env_name
    if args.export_dir:
        config.export_dir = args.export_dir
    if args.match_target_url:
        config.match_policy = MatchPolicy.NAME_PATH_AND_TARGET
    if args.dry_run:
        config.dry_run = True
    if args.assume_yes:
        config.assume_yes = True
    if args.verify_ssl:
        config.verify_ssl = True
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.report_dir:
        config.report_dir = args.report_dir

    missing = config.missing_fields()
    if missing:
        flags = ", ".join(flag for dest, flag, _ in CONNECTION_ARGS if dest in missing)
        raise UsageError(f"Missing required arguments: {flags}")

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    # Options may appear between the positional connection arguments
    args = parser.parse_intermixed_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = build_config(args)
    except UsageError as e:
        parser.error(str(e))

    orchestrator = MigrationOrchestrator(config)

    try:
        report = orchestrator.run_migration()
    except MigrationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted; rerun to resume, existing APIs will be skipped")
        return 130

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" + (" (DRY RUN)" if report.dry_run else ""))
    print("=" * 60)
    print(f"Migrated: {report.migrated_count}")
    print(f"Skipped: {report.skipped_count}")
    print(f"Failed: {report.failed_count}")
    if report.duration_seconds is not None:
        print(f"Duration: {report.duration_seconds:.2f} seconds")
    print(report.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
