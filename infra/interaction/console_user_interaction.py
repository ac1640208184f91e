from __future__ import annotations

import asyncio
import sys
from typing import Callable, TextIO

from domain.models import FreeTextQuestionResponse


class ConsoleUserInteraction:
    """Terminal implementation of UserInteractionPort.

    ``ask_free_text`` blocks until the user presses ENTER, which is how
    challenge screens and login verification wait for a human. The prompt
    runs in a worker thread so the browser's event loop keeps running.
    """

    def __init__(
        self,
        *,
        read_line: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._read_line = read_line
        self._output = output

    async def send_info(self, message: str) -> None:
        print(message, file=self._output or sys.stdout, flush=True)

    async def ask_free_text(
        self,
        question_id: str,
        prompt: str,
    ) -> FreeTextQuestionResponse:
        text = await asyncio.to_thread(self._read_line, f"{prompt}\n> ")
        return FreeTextQuestionResponse(question_id=question_id, text=text.strip())
