"""Command line entry point.

``svntag tag`` is meant to be called as the last step of a build job. It
prints the tagging report to stdout and exits 0 even when tagging fails,
unless ``--fail-on-error`` is given.
"""

import argparse
import asyncio
import os
import signal
import sys
from typing import Sequence

from svntag import __version__
from svntag.config import settings
from svntag.core.config_store import DEFAULT_REQUEST, ConfigStore
from svntag.core.environment import build_environment
from svntag.core.exceptions import SvnTagError
from svntag.core.publisher import TagPublisher
from svntag.core.validation import check_template
from svntag.models.build import BuildContext
from svntag.models.tag import ModuleDescriptor, TaggingOutcome, TagRequest
from svntag.utils.logging import configure_logging, get_logger
from svntag.vcs.client import SvnClient

logger = get_logger("cli")


def parse_module(value: str) -> ModuleDescriptor:
    """Parse ``URL`` or ``URL=LOCAL_PATH`` into a module descriptor."""
    url, sep, local_path = value.partition("=")
    if not url:
        raise argparse.ArgumentTypeError(f"Invalid module '{value}': missing URL")
    return ModuleDescriptor(repository_url=url, local_path=local_path if sep else ".")


def parse_variable(value: str) -> tuple[str, str]:
    """Parse ``KEY=VALUE``."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Invalid variable '{value}': expected KEY=VALUE")
    return key, val


def _env_int(name: str) -> int | None:
    value = os.environ.get(name, "")
    return int(value) if value.isdigit() else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svntag",
        description="svntag: create Subversion tags for finished builds.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override SVNTAG_LOG_LEVEL.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    # Command: tag
    tag_parser = subparsers.add_parser("tag", help="Tag the modules of a finished build.")
    tag_parser.add_argument(
        "--job",
        default=os.environ.get("JOB_NAME"),
        help="Job name (default: $JOB_NAME).",
    )
    tag_parser.add_argument(
        "--build-number",
        type=int,
        default=_env_int("BUILD_NUMBER"),
        help="Build number (default: $BUILD_NUMBER).",
    )
    tag_parser.add_argument(
        "--build-tag",
        default=os.environ.get("BUILD_TAG"),
        help="Build tag (default: $BUILD_TAG or svntag-<job>-<number>).",
    )
    tag_parser.add_argument(
        "-m",
        "--module",
        dest="modules",
        action="append",
        type=parse_module,
        default=[],
        metavar="URL[=PATH]",
        help="Module repository URL (URL@REV pins a revision) and checkout path. Repeatable.",
    )
    tag_parser.add_argument(
        "-D",
        "--var",
        dest="variables",
        action="append",
        type=parse_variable,
        default=[],
        metavar="KEY=VALUE",
        help="Extra template variable. Repeatable.",
    )
    tag_parser.add_argument(
        "--no-process-env",
        action="store_true",
        help="Do not expose the process environment to templates.",
    )
    tag_parser.add_argument("--base-url", default="", help="Override the tag base URL template.")
    tag_parser.add_argument("--tag-comment", default="", help="Override the tag comment template.")
    tag_parser.add_argument("--mkdir-comment", default="", help="Override the mkdir comment template.")
    tag_parser.add_argument("--delete-comment", default="", help="Override the delete comment template.")
    tag_parser.add_argument("--db", default=None, help="Configuration database (default: SVNTAG_CONFIG_DB_PATH).")
    tag_parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Exit with status 1 when tagging fails.",
    )
    tag_parser.set_defaults(func=run_tag)

    # Command: validate
    validate_parser = subparsers.add_parser("validate", help="Check a template for syntax errors.")
    validate_parser.add_argument("template", help="Template to check.")
    validate_parser.add_argument(
        "--url",
        action="store_true",
        help="Treat the template as the tag base URL (must not be empty).",
    )
    validate_parser.set_defaults(func=run_validate)

    # Command: serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve_parser.add_argument("--host", default=settings.api_host)
    serve_parser.add_argument("--port", type=int, default=settings.api_port)
    serve_parser.set_defaults(func=run_serve)

    return parser


async def _publish(publisher: TagPublisher, context: BuildContext) -> TaggingOutcome:
    """Publish with SIGINT/SIGTERM stopping before the next module."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows and non-main threads
            pass

    try:
        return await publisher.publish(context, cancel_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def run_tag(args: argparse.Namespace) -> int:
    if not args.job:
        print("svntag: --job is required when $JOB_NAME is not set", file=sys.stderr)
        return 2
    if args.build_number is None:
        print("svntag: --build-number is required when $BUILD_NUMBER is not set", file=sys.stderr)
        return 2

    variables = {} if args.no_process_env else dict(os.environ)
    variables.update(dict(args.variables))

    context = BuildContext(
        job_name=args.job,
        build_number=args.build_number,
        build_tag=args.build_tag,
        variables=variables,
        modules=args.modules,
        overrides=TagRequest(
            base_url_template=args.base_url,
            tag_comment=args.tag_comment,
            mkdir_comment=args.mkdir_comment,
            delete_comment=args.delete_comment,
        ),
    )

    try:
        store = ConfigStore(args.db) if args.db else ConfigStore()
    except SvnTagError as e:
        # Fall back to the command line templates alone
        logger.warning("cli.config_store_unavailable", error=e.message)
        store = None

    publisher = TagPublisher(client=SvnClient(), store=store)
    if store is None:
        env = build_environment(context.job_name, context.build_number, context.build_tag, variables)
        request = context.overrides.with_defaults(DEFAULT_REQUEST)
        outcome = asyncio.run(publisher.run(request, env, context.modules))
    else:
        outcome = asyncio.run(_publish(publisher, context))

    print(outcome.report)
    if args.fail_on_error and not outcome.overall_success:
        return 1
    return 0


def run_validate(args: argparse.Namespace) -> int:
    result = check_template(args.template, required=args.url)
    if result.ok:
        print("OK")
        return 0
    print(result.message, file=sys.stderr)
    return 1


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("svntag.main:app", host=args.host, port=args.port)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
