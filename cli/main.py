from __future__ import annotations

import argparse
import asyncio
from datetime import timezone
from typing import Sequence

from domain.models import DispatchStatus, EmailMode, RunSummary
from domain.services import (
    AnswerResolver,
    ApplicationStateMachine,
    ChallengeGate,
    DedupStore,
    DiscoveryEngine,
    JobSearchService,
    Orchestrator,
    PacingPolicy,
    PageActions,
    PostingExtractor,
)
from infra.browser import PlaywrightPageAutomation
from infra.config import ConfigValidationError, FileSystemConfigProvider
from infra.interaction import ConsoleUserInteraction
from infra.messaging import EmailOutbound
from infra.persistence import SQLitePostingRepository
from infra.runtime import StructuredLogger, SystemClock, UuidIdGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="job-hunter")
    parser.add_argument("--db-path", default="job_hunter.db")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Search the configured platforms and apply")
    run_p.add_argument("--config-dir", default="./config", help="Path to config folder")
    run_p.add_argument(
        "--headless",
        dest="headless",
        action="store_true",
        default=None,
        help="Force a headless browser (default: the profile's show_browser setting)",
    )
    run_p.add_argument("--no-headless", dest="headless", action="store_false")

    validate_p = sub.add_parser("validate", help="Check the config folder and exit")
    validate_p.add_argument("--config-dir", default="./config")

    recent_p = sub.add_parser("list-recent", help="List applications from the last N days")
    recent_p.add_argument("--days", type=int, default=7)

    email_p = sub.add_parser("test-email", help="Log in to the configured SMTP server")
    email_p.add_argument("--config-dir", default="./config")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = StructuredLogger(min_level=args.log_level)
    clock = SystemClock()

    if args.command == "validate":
        return _handle_validate(FileSystemConfigProvider(args.config_dir))

    if args.command == "list-recent":
        with SQLitePostingRepository(db_path=args.db_path) as repo:
            for posting in DedupStore(repo, clock).recent_applications(days=args.days):
                applied = (
                    posting.applied_at.astimezone(timezone.utc).isoformat()
                    if posting.applied_at
                    else "-"
                )
                print(
                    f"{posting.platform.value} | {posting.company} | {posting.title} | "
                    f"{applied} | {posting.application_method.value} | {posting.url}",
                )
        return 0

    if args.command == "test-email":
        config_provider = FileSystemConfigProvider(args.config_dir)
        try:
            outbound = EmailOutbound(
                config_provider.get_email_config(),
                drafts_dir=config_provider.get_app_config().drafts_dir,
                clock=clock,
                logger=logger,
            )
        except ConfigValidationError as exc:
            print(f"Config error: {exc}")
            return 1
        errors = outbound.validate()
        if errors:
            print("Email configuration errors:")
            for err in errors:
                print(f"  - {err}")
            return 1
        ok = asyncio.run(outbound.test_connection())
        print("Email connection test successful!" if ok else "Email connection failed.")
        return 0 if ok else 1

    if args.command == "run":
        return _handle_run(args, logger, clock)

    raise SystemExit(f"Unsupported command: {args.command}")


def _handle_validate(config_provider: FileSystemConfigProvider) -> int:
    errors = config_provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return 1
    profile = config_provider.get_user_configuration()
    print(f"Config OK: platforms={', '.join(profile.platforms)}")
    print(f"Job titles: {', '.join(profile.job_titles)}")
    print(f"Email mode: {profile.email_mode.value}")
    return 0


def _handle_run(
    args: argparse.Namespace,
    logger: StructuredLogger,
    clock: SystemClock,
) -> int:
    config_provider = FileSystemConfigProvider(args.config_dir)
    errors = config_provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return 1

    app_config = config_provider.get_app_config()
    email_config = config_provider.get_email_config()
    configuration = config_provider.get_user_configuration()
    catalogue = config_provider.get_template_questions()
    headless = not configuration.show_browser if args.headless is None else args.headless

    ui = ConsoleUserInteraction()
    outbound = EmailOutbound(
        email_config,
        drafts_dir=app_config.drafts_dir,
        clock=clock,
        logger=logger,
    )
    if configuration.email_mode is EmailMode.SEND:
        email_errors = outbound.validate()
        if email_errors:
            print("Email configuration errors:")
            for err in email_errors:
                print(f"  - {err}")
            return 1

    async def _run() -> RunSummary:
        pacing = PacingPolicy(
            app_config.delay_between_actions_ms,
            item_delay_ms=app_config.delay_between_actions_ms,
        )
        async with PlaywrightPageAutomation(headless=headless) as page:
            gate = ChallengeGate(page, ui, logger)
            actions = PageActions(page, pacing, gate)
            search = JobSearchService(
                actions=actions,
                discovery=DiscoveryEngine(actions, logger),
                extractor=PostingExtractor(actions, clock, logger),
                ui=ui,
                logger=logger,
                app_config=app_config,
            )
            with SQLitePostingRepository(db_path=args.db_path) as repo:
                orchestrator = Orchestrator(
                    search=search,
                    dedup=DedupStore(repo, clock),
                    state_machine=ApplicationStateMachine(
                        actions,
                        AnswerResolver(catalogue),
                        logger,
                    ),
                    outbound=outbound,
                    pacing=pacing,
                    ui=ui,
                    logger=logger,
                    id_generator=UuidIdGenerator(clock),
                )
                return await orchestrator.run(configuration)

    summary = asyncio.run(_run())
    print(f"run={summary.run_id} discovered={summary.discovered} new={summary.pending}")
    for status in DispatchStatus:
        print(f"  {status.value}: {summary.count(status)}")
    for result in summary.results:
        if result.status is DispatchStatus.FAILED:
            print(f"  - {result.posting.company} | {result.posting.title} | {result.reason}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
