from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from domain.models import (
    ApplicationMethod,
    DispatchResult,
    DispatchStatus,
    Posting,
    RunSummary,
    UserConfiguration,
)
from domain.ports import IdGeneratorPort, LoggerPort, OutboundMessagePort, UserInteractionPort
from domain.services.application import ApplicationStateMachine
from domain.services.dedup import DedupStore
from domain.services.pacing import PacingPolicy
from domain.services.search import JobSearchService


def unique_by_key(postings: Sequence[Posting]) -> list[Posting]:
    """Keep the first posting seen for each ``(platform_id, platform)`` key."""
    seen: dict[tuple[str, object], Posting] = {}
    for posting in postings:
        seen.setdefault(posting.key, posting)
    return list(seen.values())


class Orchestrator:
    """
    Runs one job-hunting session end to end.

    Postings are dispatched strictly one after another. A failure while
    handling one posting is logged and recorded against it; the next posting
    is still attempted.
    """

    def __init__(
        self,
        *,
        search: JobSearchService,
        dedup: DedupStore,
        state_machine: ApplicationStateMachine,
        outbound: OutboundMessagePort,
        pacing: PacingPolicy,
        ui: UserInteractionPort,
        logger: LoggerPort,
        id_generator: IdGeneratorPort,
    ) -> None:
        self._search = search
        self._dedup = dedup
        self._state_machine = state_machine
        self._outbound = outbound
        self._pacing = pacing
        self._ui = ui
        self._logger = logger
        self._id_generator = id_generator

    async def run(self, configuration: UserConfiguration) -> RunSummary:
        run_id = self._id_generator.new_run_id()
        discovered = unique_by_key(await self._search.search(configuration))
        for posting in discovered:
            self._dedup.save(posting)

        pending = self._dedup.filter_unapplied(discovered)
        self._logger.info(
            "dispatch_started",
            run_id=run_id,
            discovered=len(discovered),
            pending=len(pending),
        )
        await self._ui.send_info(
            f"Found {len(discovered)} jobs, {len(pending)} new jobs to process.",
        )

        results = await self.process(pending, configuration, run_id=run_id)
        summary = RunSummary(
            run_id=run_id,
            discovered=len(discovered),
            pending=len(pending),
            results=tuple(results),
        )
        self._logger.info(
            "dispatch_finished",
            run_id=run_id,
            **{status.value: summary.count(status) for status in DispatchStatus},
        )
        return summary

    async def process(
        self,
        postings: Sequence[Posting],
        configuration: UserConfiguration,
        *,
        run_id: str | None = None,
    ) -> list[DispatchResult]:
        results: list[DispatchResult] = []
        for index, posting in enumerate(postings):
            result = await self.dispatch(posting, configuration)
            self._record(result, run_id)
            results.append(result)
            if index < len(postings) - 1:
                await self._pacing.between_items()
        return results

    async def dispatch(
        self,
        posting: Posting,
        configuration: UserConfiguration,
    ) -> DispatchResult:
        try:
            if posting.contact_email:
                sent = await self._outbound.send_application(posting, configuration)
                if not sent:
                    return DispatchResult(posting, DispatchStatus.FAILED, "email delivery failed")
                return DispatchResult(
                    replace(posting, application_method=ApplicationMethod.EMAIL),
                    DispatchStatus.EMAILED,
                )

            if posting.has_inline_apply:
                outcome = await self._state_machine.apply(posting, configuration)
                if not outcome.applied:
                    return DispatchResult(posting, DispatchStatus.FAILED, outcome.reason)
                return DispatchResult(
                    replace(posting, application_method=ApplicationMethod.INLINE_APPLY),
                    DispatchStatus.APPLIED_INLINE,
                )

            await self._ui.send_info(
                f"Skipping {posting.title} - No email or easy apply available",
            )
            return DispatchResult(
                posting,
                DispatchStatus.SKIPPED_NO_CHANNEL,
                "no email or inline apply available",
            )
        except Exception as exc:
            self._logger.error(
                "dispatch_failed",
                platform=posting.platform.value,
                platform_id=posting.platform_id,
                title=posting.title,
                company=posting.company,
                error=str(exc),
            )
            return DispatchResult(posting, DispatchStatus.FAILED, str(exc) or type(exc).__name__)

    def _record(self, result: DispatchResult, run_id: str | None) -> None:
        try:
            if result.succeeded:
                self._dedup.mark_applied(result.posting)
            elif result.reason:
                self._dedup.annotate(result.posting, result.reason)
        except Exception as exc:
            self._logger.error(
                "dispatch_record_failed",
                run_id=run_id,
                platform_id=result.posting.platform_id,
                error=str(exc),
            )
            return
        self._logger.info(
            "posting_dispatched",
            run_id=run_id,
            platform=result.posting.platform.value,
            platform_id=result.posting.platform_id,
            status=result.status.value,
            reason=result.reason,
        )
