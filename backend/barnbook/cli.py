"""
Barnbook Seed — Command-Line Entry Point
=========================================

What:  Operator CLI for bootstrapping a Barnbook database.
How:   argparse sub-commands that call the services and map their outcome
       to a process exit status. This is the only module that knows about
       exit codes.

Usage:
    barnbook-seed migrate
    barnbook-seed seed
    barnbook-seed seed --file seeds.json
    printf '%s' "$PASSWORD" | barnbook-seed seed --email a@b.test --display-name A --password-stdin
    barnbook-seed check

Exit Status:
    0    success, including a seed run where every identity already existed
    1    any failure; details are logged to stderr
    2    invalid command-line usage (argparse)
    130  interrupted
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from barnbook import __version__
from barnbook.config import Settings
from barnbook.database import create_engine, ping, table_exists
from barnbook.exceptions import BarnbookError, ValidationError
from barnbook.logging_config import new_run_id, setup_logging
from barnbook.models.user import User
from barnbook.schemas.seed import (
    SeedIdentity,
    identities_from_settings,
    load_seed_file,
)
from barnbook.services import migration_service
from barnbook.services.seed_service import run_seed

logger = logging.getLogger("barnbook.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="barnbook-seed",
        description="Migrate and seed the Barnbook database.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--database-url",
        help="Override DATABASE_URL (e.g. postgresql+asyncpg://user:pw@host/db)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Ensure seed identities exist (idempotent)")
    source = seed.add_mutually_exclusive_group()
    source.add_argument("--file", help="JSON file listing identities to seed")
    source.add_argument("--email", help="Seed a single identity with this email")
    seed.add_argument("--display-name", help="Display name for --email")
    seed.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password for --email from stdin",
    )

    migrate = subparsers.add_parser("migrate", help="Apply database migrations")
    migrate.add_argument("--revision", default="head", help="Target revision (default: head)")

    subparsers.add_parser("check", help="Check database connectivity and schema")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment with command-line overrides applied."""
    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        return Settings(**overrides)
    except PydanticValidationError as e:
        errors = e.errors(include_input=False, include_url=False)
        raise ValidationError(
            message="Invalid configuration",
            context={"errors": [f"{err['loc']}: {err['msg']}" for err in errors]},
        ) from None


def resolve_identities(args: argparse.Namespace, settings: Settings) -> List[SeedIdentity]:
    """
    Pick the identities to seed.

    Precedence: --file, --email (password from stdin), SEED_FILE, then the
    SEED_EMAIL / SEED_PASSWORD / SEED_DISPLAY_NAME identity.
    """
    if args.file:
        return load_seed_file(args.file)

    if args.email:
        if not args.password_stdin:
            raise ValidationError(
                message="--email requires --password-stdin; passwords are not accepted as arguments",
                field="password",
            )
        password = sys.stdin.readline().rstrip("\r\n")
        try:
            return [
                SeedIdentity(
                    email=args.email,
                    password=SecretStr(password),
                    display_name=args.display_name or "",
                )
            ]
        except PydanticValidationError as e:
            errors = e.errors(include_input=False, include_url=False)
            raise ValidationError(
                message="Seed identity from the command line is invalid",
                context={"errors": [f"{err['loc']}: {err['msg']}" for err in errors]},
            ) from None

    for warning in settings.default_credential_warnings():
        logger.warning(warning)
    return identities_from_settings(settings)


def cmd_seed(args: argparse.Namespace, settings: Settings) -> int:
    identities = resolve_identities(args, settings)
    report = asyncio.run(run_seed(settings, identities))
    print(f"Seed complete: {report.processed} identity(ies) ensured ({', '.join(report.emails)})")
    return EXIT_OK


def cmd_migrate(args: argparse.Namespace, settings: Settings) -> int:
    migration_service.upgrade(settings, revision=args.revision)
    print(f"Migrations applied up to {args.revision}")
    return EXIT_OK


async def _check(settings: Settings) -> int:
    engine = create_engine(settings)
    try:
        await ping(engine)
        print("Database: reachable")
        current = await migration_service.current_revision(engine)
        head = migration_service.head_revision(settings)
        print(f"Schema revision: {current or 'none'} (latest: {head or 'none'})")
        users_table = User.__tablename__
        if not await table_exists(engine, users_table):
            print(f"Table '{users_table}': missing (run `barnbook-seed migrate`)")
            return EXIT_FAILURE
        print(f"Table '{users_table}': present")
        return EXIT_OK
    finally:
        await engine.dispose()


def cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    return asyncio.run(_check(settings))


COMMANDS = {
    "seed": cmd_seed,
    "migrate": cmd_migrate,
    "check": cmd_check,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the CLI and return the process exit status.

    Every failure is logged on the error channel (stderr) before returning 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "seed" and not args.email and (
        args.display_name is not None or args.password_stdin
    ):
        parser.error("--display-name and --password-stdin require --email")

    try:
        settings = load_settings(args)
    except BarnbookError as exc:
        setup_logging("INFO")
        logger.error("%s | Context: %s", exc.message, exc.context)
        return EXIT_FAILURE

    setup_logging(settings.log_level)
    run_id = new_run_id()
    logger.debug("barnbook-seed %s, run %s, command %s", __version__, run_id, args.command)

    try:
        return COMMANDS[args.command](args, settings)
    except BarnbookError as exc:
        logger.error("%s failed: %s | Context: %s", args.command, exc.message, exc.context)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("%s interrupted", args.command)
        return EXIT_INTERRUPTED
    except Exception as exc:
        # Last line of defense: an unexpected error must still exit non-zero
        logger.error("%s failed unexpectedly: %s", args.command, exc, exc_info=True)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
