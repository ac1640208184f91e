"""
Answer lookup for form questions.

Matchers are evaluated in order and the first one that yields a value wins:

1. ``PROFILE_KEY`` - a key of the user's answer map occurs in the question.
2. ``CATALOGUE_ANSWER`` - a catalogue entry matches by keyword and the user
   answered that entry's key.
3. ``CATALOGUE_DEFAULT`` - the same catalogue entry lists options and the
   field is a choice field; its first option is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Sequence

from domain.models import FieldKind, TemplateQuestion


class AnswerSource(str, Enum):
    PROFILE_KEY = "profile_key"
    CATALOGUE_ANSWER = "catalogue_answer"
    CATALOGUE_DEFAULT = "catalogue_default"


@dataclass(frozen=True)
class AnswerResolution:
    value: str
    source: AnswerSource
    catalogue_key: str | None = None


def _normalize(text: str) -> str:
    return " ".join(text.replace("_", " ").lower().split())


class AnswerResolver:
    def __init__(self, catalogue: Sequence[TemplateQuestion] = ()) -> None:
        self._catalogue = tuple(catalogue)
        self._matchers: tuple[
            tuple[AnswerSource, Callable[[str, FieldKind, Mapping[str, str]], AnswerResolution | None]],
            ...,
        ] = (
            (AnswerSource.PROFILE_KEY, self._match_profile_key),
            (AnswerSource.CATALOGUE_ANSWER, self._match_catalogue_answer),
            (AnswerSource.CATALOGUE_DEFAULT, self._match_catalogue_default),
        )

    @property
    def catalogue(self) -> tuple[TemplateQuestion, ...]:
        return self._catalogue

    def resolve(
        self,
        question_text: str,
        kind: FieldKind,
        answers: Mapping[str, str],
    ) -> AnswerResolution | None:
        text = _normalize(question_text)
        if not text:
            return None
        for _source, matcher in self._matchers:
            resolution = matcher(text, kind, answers)
            if resolution is not None:
                return resolution
        return None

    def match_template(self, question_text: str) -> TemplateQuestion | None:
        text = _normalize(question_text)
        for template in self._catalogue:
            if any(_normalize(kw) and _normalize(kw) in text for kw in template.keywords):
                return template
        return None

    # -- matchers -----------------------------------------------------------

    def _match_profile_key(
        self,
        text: str,
        kind: FieldKind,
        answers: Mapping[str, str],
    ) -> AnswerResolution | None:
        for key, value in answers.items():
            phrase = _normalize(key)
            if phrase and value and phrase in text:
                return AnswerResolution(value=value, source=AnswerSource.PROFILE_KEY)
        return None

    def _match_catalogue_answer(
        self,
        text: str,
        kind: FieldKind,
        answers: Mapping[str, str],
    ) -> AnswerResolution | None:
        template = self.match_template(text)
        if template is None:
            return None
        value = answers.get(template.key)
        if not value:
            return None
        return AnswerResolution(
            value=value,
            source=AnswerSource.CATALOGUE_ANSWER,
            catalogue_key=template.key,
        )

    def _match_catalogue_default(
        self,
        text: str,
        kind: FieldKind,
        answers: Mapping[str, str],
    ) -> AnswerResolution | None:
        if kind is not FieldKind.SELECT:
            return None
        template = self.match_template(text)
        if template is None or not template.options:
            return None
        return AnswerResolution(
            value=template.options[0],
            source=AnswerSource.CATALOGUE_DEFAULT,
            catalogue_key=template.key,
        )
