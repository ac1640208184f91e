from __future__ import annotations

from domain.models import (
    ApplicationAttempt,
    ApplyOutcome,
    AttemptState,
    FieldKind,
    Posting,
    UserConfiguration,
)
from domain.ports import LoggerPort
from domain.services.actions import PageActions
from domain.services.answers import AnswerResolver
from domain.services.platforms import ApplyFlowSelectors, profile_for

DEFAULT_MAX_STEPS = 10

REASON_NOT_AVAILABLE = "inline apply not available"
REASON_NO_ENTRY = "entry control not found"
REASON_STUCK = "stuck: no progress control"
REASON_BUDGET = "step budget exhausted"


class ApplicationStateMachine:
    """
    Drives the inline multi-step apply wizard for one posting.

    ``START -> LOCATING -> STEPPING -> SUCCESS | ABANDONED``. Each stepping
    iteration checks for the confirmation heading, fills what it can, ticks
    agreement boxes and clicks the highest-priority advance control. Fill
    errors are logged and never stop the attempt; a failed click propagates
    to the caller.
    """

    def __init__(
        self,
        actions: PageActions,
        resolver: AnswerResolver,
        logger: LoggerPort,
        *,
        max_steps: int = DEFAULT_MAX_STEPS,
        check_timeout_ms: int = 2_000,
    ) -> None:
        if max_steps < 0:
            raise ValueError("max_steps cannot be negative")
        self._actions = actions
        self._resolver = resolver
        self._logger = logger
        self._max_steps = max_steps
        self._check_timeout_ms = check_timeout_ms

    async def apply(self, posting: Posting, configuration: UserConfiguration) -> ApplyOutcome:
        attempt = ApplicationAttempt(max_steps=self._max_steps)
        flow = profile_for(posting.platform).apply_flow
        if not posting.has_inline_apply or flow is None:
            return self._abandon(posting, attempt, REASON_NOT_AVAILABLE)

        await self._actions.navigate(posting.url)
        await self._actions.settle(2000)

        attempt.state = AttemptState.LOCATING
        entry = await self._actions.first_visible(flow.entry, timeout_ms=self._check_timeout_ms)
        if entry is None:
            return self._abandon(posting, attempt, REASON_NO_ENTRY)
        await self._actions.click(entry)
        await self._actions.settle(3000)

        attempt.state = AttemptState.STEPPING
        while attempt.step < attempt.max_steps:
            attempt.iterations += 1

            if await self._success_visible(flow, attempt):
                attempt.state = AttemptState.SUCCESS
                self._logger.info(
                    "inline_apply_succeeded",
                    platform_id=posting.platform_id,
                    title=posting.title,
                    company=posting.company,
                    steps=attempt.iterations,
                )
                return ApplyOutcome(applied=True, steps=attempt.iterations)

            await self._fill_step(flow, configuration, posting)

            advance = await self._locate_advance(flow)
            if advance is None:
                return self._abandon(posting, attempt, REASON_STUCK)
            await self._actions.click(advance)
            await self._actions.settle(2000)

            attempt.step += 1

        return self._abandon(posting, attempt, REASON_BUDGET)

    # -- stepping -----------------------------------------------------------

    async def _success_visible(
        self,
        flow: ApplyFlowSelectors,
        attempt: ApplicationAttempt,
    ) -> bool:
        if not await self._actions.is_visible(
            flow.success_heading,
            timeout_ms=self._check_timeout_ms,
        ):
            attempt.last_signature = ""
            return False
        heading = await self._actions.read_text(flow.success_heading)
        attempt.last_signature = " ".join(heading.split())
        return any(phrase in heading for phrase in flow.success_phrases)

    async def _locate_advance(self, flow: ApplyFlowSelectors) -> str | None:
        advance = await self._actions.first_visible(
            flow.advance,
            timeout_ms=self._check_timeout_ms,
        )
        if advance is not None:
            return advance
        if await self._actions.is_visible(flow.generic_submit, timeout_ms=self._check_timeout_ms):
            return flow.generic_submit
        return None

    async def _fill_step(
        self,
        flow: ApplyFlowSelectors,
        configuration: UserConfiguration,
        posting: Posting,
    ) -> None:
        try:
            await self._upload_resume(flow, configuration)
        except Exception as exc:
            self._logger.warning(
                "resume_upload_failed",
                platform_id=posting.platform_id,
                error=str(exc),
            )
        try:
            await self._answer_questions(flow, configuration)
        except Exception as exc:
            self._logger.warning(
                "template_questions_failed",
                platform_id=posting.platform_id,
                error=str(exc),
            )
        await self._tick_checkboxes(flow, posting)

    async def _upload_resume(
        self,
        flow: ApplyFlowSelectors,
        configuration: UserConfiguration,
    ) -> None:
        if not configuration.cv_file_path:
            return
        if await self._actions.is_visible(flow.file_input, timeout_ms=self._check_timeout_ms):
            await self._actions.upload_file(flow.file_input, configuration.cv_file_path)

    async def _answer_questions(
        self,
        flow: ApplyFlowSelectors,
        configuration: UserConfiguration,
    ) -> None:
        for group_selector in flow.question_groups:
            for form_field in await self._actions.form_fields(group_selector):
                try:
                    resolution = self._resolver.resolve(
                        form_field.label,
                        form_field.kind,
                        configuration.template_answers,
                    )
                    if resolution is None:
                        continue
                    if form_field.kind is FieldKind.SELECT:
                        await self._actions.select_option(form_field.selector, resolution.value)
                    else:
                        await self._actions.replace_text(form_field.selector, resolution.value)
                    self._logger.debug(
                        "question_answered",
                        question=form_field.label,
                        source=resolution.source.value,
                    )
                except Exception as exc:
                    self._logger.debug(
                        "question_answer_failed",
                        question=form_field.label,
                        error=str(exc),
                    )

    async def _tick_checkboxes(self, flow: ApplyFlowSelectors, posting: Posting) -> None:
        for selector in flow.agreement_checkboxes:
            try:
                if not await self._actions.is_visible(selector, timeout_ms=1_000):
                    continue
                if not await self._actions.is_checked(selector):
                    await self._actions.click(selector)
            except Exception as exc:
                self._logger.warning(
                    "checkbox_tick_failed",
                    platform_id=posting.platform_id,
                    selector=selector,
                    error=str(exc),
                )

    def _abandon(
        self,
        posting: Posting,
        attempt: ApplicationAttempt,
        reason: str,
    ) -> ApplyOutcome:
        attempt.state = AttemptState.ABANDONED
        self._logger.warning(
            "inline_apply_abandoned",
            platform_id=posting.platform_id,
            title=posting.title,
            reason=reason,
            steps=attempt.iterations,
            last_signature=attempt.last_signature,
        )
        return ApplyOutcome(applied=False, reason=reason, steps=attempt.iterations)
