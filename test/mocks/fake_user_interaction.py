from __future__ import annotations

from typing import Callable

from domain.models import FreeTextQuestionResponse
from domain.ports import UserInteractionPort


class FakeUserInteraction:
    """
    Test double for ``UserInteractionPort``.

    Answers can be pre-seeded per ``question_id`` using ``free_text_answers``.
    ``on_free_text`` runs before each answer is returned, which lets a test
    change the page while the "human" is acting.
    """

    def __init__(
        self,
        free_text_answers: dict[str, str] | None = None,
        on_free_text: Callable[[str], None] | None = None,
    ) -> None:
        self.free_text_answers: dict[str, str] = free_text_answers or {}
        self.on_free_text = on_free_text
        self.info_messages: list[str] = []
        self.free_text_calls: list[str] = []

    async def send_info(self, message: str) -> None:
        self.info_messages.append(message)

    async def ask_free_text(
        self,
        question_id: str,
        prompt: str,
    ) -> FreeTextQuestionResponse:
        self.free_text_calls.append(question_id)
        if self.on_free_text is not None:
            self.on_free_text(question_id)
        answer = self.free_text_answers.get(question_id, "")
        return FreeTextQuestionResponse(question_id=question_id, text=answer)


_ui_check: UserInteractionPort = FakeUserInteraction()
