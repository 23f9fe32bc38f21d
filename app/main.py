"""Command line entry point of the consent notice tools.

Usage:

    python main.py notice-pull
    python main.py notice-push --filename=data/fr.json --language=fr
    python main.py notice-macros --language=fr,en --dry-run
    python main.py apply-template --dry-run
    python main.py purposes-pull
    python main.py purposes-push
    python main.py regulation-pull --regulation-id=gdpr
    python main.py regulation-push --regulation-id=gdpr --language=en
    python main.py vendors-update --regulation-id=gdpr
"""

import argparse
import sys

import requests
from dotenv import load_dotenv

from core.config import settings
from core.errors import AuthenticationFailure, ConfigurationError, ConsentToolsError
from core.logging import bind_run_context, configure_logging, get_module_logger
from integrations.didomi import create_client
from modules import notices, purposes, regulations

logger = get_module_logger()

load_dotenv()


def str_to_bool(value):
    """Parse `--dry-run=true` style values."""
    if isinstance(value, bool):
        return value
    if value.lower() in ("true", "1", "yes", "y"):
        return True
    if value.lower() in ("false", "0", "no", "n"):
        return False
    raise argparse.ArgumentTypeError(f"Expected a boolean value, got {value!r}")


def require(value, name):
    if not value:
        raise ConfigurationError(f"{name} is missing")
    return value


def _add_dry_run(parser):
    parser.add_argument(
        "--dry-run",
        type=str_to_bool,
        nargs="?",
        const=True,
        default=settings.DRY_RUN,
        help="Compute and log the changes without writing them",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="consent-notice-tools",
        description="Read and update consent notice configurations.",
    )
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    parser.add_argument(
        "--json-logs",
        type=str_to_bool,
        nargs="?",
        const=True,
        default=None,
        help="Render logs as JSON lines",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull = subparsers.add_parser("notice-pull", help="Pull notice translations")
    pull.add_argument("--notice-id", default=settings.notice.NOTICE_ID)
    pull.add_argument("--filename", default=settings.files.TRANSLATIONS_PATH)
    pull.add_argument("--language", default=None)

    push = subparsers.add_parser("notice-push", help="Push notice translations")
    push.add_argument("--notice-id", default=settings.notice.NOTICE_ID)
    push.add_argument("--filename", required=True)
    push.add_argument("--language", required=True)
    _add_dry_run(push)

    macros = subparsers.add_parser(
        "notice-macros", help="Propagate the master notice text to child notices"
    )
    macros.add_argument("--notice-id", default=settings.notice.NOTICE_ID)
    macros.add_argument(
        "--language",
        required=True,
        help="A language (fr), several (fr,en) or all enabled languages (all)",
    )
    macros.add_argument("--macros-file", default=settings.files.MACROS_PATH)
    macros.add_argument("--fail-fast", action="store_true")
    _add_dry_run(macros)

    template = subparsers.add_parser(
        "apply-template", help="Apply the master regulation text to child notices"
    )
    template.add_argument("--master-notice-id", default=settings.notice.MASTER_NOTICE_ID)
    template.add_argument("--macros-file", default=settings.files.MACROS_PATH)
    template.add_argument("--yes", action="store_true", help="Skip the confirmation")
    _add_dry_run(template)

    purposes_pull = subparsers.add_parser("purposes-pull", help="Pull purposes")
    purposes_pull.add_argument("--filename", default=settings.files.PURPOSES_INPUT_PATH)

    purposes_push = subparsers.add_parser("purposes-push", help="Push purposes")
    purposes_push.add_argument(
        "--filename", default=settings.files.PURPOSES_OUTPUT_PATH
    )
    _add_dry_run(purposes_push)

    for name in ("regulation-pull", "regulation-push", "vendors-update"):
        sub = subparsers.add_parser(name)
        sub.add_argument("--notice-id", default=settings.notice.NOTICE_ID)
        sub.add_argument("--regulation-id", default=settings.notice.REGULATION_ID)
        if name != "vendors-update":
            sub.add_argument("--directory", default=settings.files.REGULATIONS_DIR)
        if name == "regulation-push":
            sub.add_argument("--language", default=None)
        if name == "vendors-update":
            sub.add_argument("--vendors-file", default=settings.files.VENDORS_PATH)
            sub.add_argument(
                "--limit", type=int, default=settings.api.PARTNERS_LIMIT
            )
        if name != "regulation-pull":
            _add_dry_run(sub)

    return parser


def run_command(args, client) -> int:
    """Run a parsed command and return the process exit code."""
    command = args.command

    if command == "notice-pull":
        notices.pull_notice_translations(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.filename,
            language=args.language,
            regulation_ids=settings.notice.regulation_ids,
        )
    elif command == "notice-push":
        notices.push_notice_translations(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.filename,
            args.language,
            dry_run=args.dry_run,
        )
    elif command == "notice-macros":
        reports = notices.run_macros_replacement(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.language,
            notices.load_children_notices(args.macros_file),
            dry_run=args.dry_run,
            fail_fast=args.fail_fast,
            regulation_id=settings.notice.REGULATION_ID,
            regulation_ids=settings.notice.regulation_ids,
            translations_path=settings.files.TRANSLATIONS_PATH,
        )
        if not all(report.is_success for report in reports):
            return 1
    elif command == "apply-template":
        notices.apply_custom_text_template(
            client,
            require(args.master_notice_id, "MASTER_NOTICE_ID"),
            notices.load_children_notices(args.macros_file),
            dry_run=args.dry_run,
            assume_yes=args.yes,
        )
    elif command == "purposes-pull":
        purposes.pull_purposes_translations(client, args.filename)
    elif command == "purposes-push":
        purposes.push_purposes_translations(client, args.filename, dry_run=args.dry_run)
    elif command == "regulation-pull":
        regulations.pull_regulation_config(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.regulation_id,
            args.directory,
        )
    elif command == "regulation-push":
        regulations.push_regulation_config(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.regulation_id,
            args.directory,
            language=args.language,
            dry_run=args.dry_run,
        )
    elif command == "vendors-update":
        regulations.update_regulation_vendors(
            client,
            require(args.notice_id, "NOTICE_ID"),
            args.regulation_id,
            regulations.read_vendor_iab_ids(args.vendors_file),
            args.limit,
            dry_run=args.dry_run,
        )
    return 0


def main(argv=None, client_factory=create_client) -> int:
    """Parse arguments, run the command and map errors to an exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.json_logs)

    with bind_run_context(args.command, dry_run=getattr(args, "dry_run", False)):
        try:
            client = client_factory(settings.api)
            exit_code = run_command(args, client)
        except AuthenticationFailure as e:
            logger.error("authentication_failed", error=str(e))
            return 1
        except ConsentToolsError as e:
            logger.error("command_failed", error=str(e), error_type=type(e).__name__)
            return 1
        except requests.RequestException as e:
            logger.error("consent_api_request_failed", error=str(e))
            return 1

    logger.info("command_completed", command=args.command, exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
