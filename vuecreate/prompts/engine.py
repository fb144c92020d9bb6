"""Question model and the prompt engine that renders it.

A ``PromptEngine`` takes an ordered list of questions and returns the answer
map. Each question is asked only when its ``when`` predicate accepts the
answers collected so far. The default implementation renders with
``questionary``; tests substitute a scripted engine.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Protocol

import questionary

Answers = dict[str, Any]
Predicate = Callable[[Answers], bool]

QUESTION_TYPES = ("list", "checkbox", "confirm", "input")


@dataclass
class Choice:
    name: str
    value: Any
    checked: bool = False
    # Shown under the choice list while the choice is highlighted.
    description: str = ""
    link: str = ""

    def help_text(self) -> str | None:
        text = "\n".join(part for part in (self.description, self.link) if part)
        return text or None


@dataclass
class Question:
    """One interactive question.

    ``choices`` and ``default`` may be callables of the answers collected so
    far, so a question can adapt to earlier picks.
    """

    name: str
    type: str
    message: str
    choices: list[Choice] | Callable[[Answers], list[Choice]] | None = None
    when: Predicate | None = None
    default: Any = None

    def __post_init__(self) -> None:
        if self.type not in QUESTION_TYPES:
            raise ValueError(f"Unknown question type '{self.type}' for '{self.name}'")

    def is_visible(self, answers: Answers) -> bool:
        return self.when is None or bool(self.when(answers))

    def resolve_choices(self, answers: Answers) -> list[Choice]:
        if callable(self.choices):
            return list(self.choices(answers))
        return list(self.choices or [])

    def resolve_default(self, answers: Answers) -> Any:
        if callable(self.default):
            return self.default(answers)
        return self.default

    def with_when(self, when: Predicate | None) -> "Question":
        """Return a copy with a different visibility predicate."""
        return replace(self, when=when)


class PromptEngine(Protocol):
    async def prompt(self, questions: Sequence[Question], answers: Answers | None = None) -> Answers:
        ...


class QuestionaryEngine:
    """Renders questions in the terminal with ``questionary``.

    Ctrl-C propagates as ``KeyboardInterrupt`` instead of being turned into
    an empty answer.
    """

    async def prompt(self, questions: Sequence[Question], answers: Answers | None = None) -> Answers:
        collected: Answers = dict(answers or {})
        for question in questions:
            if not question.is_visible(collected):
                continue
            collected[question.name] = await self._ask(question, collected)
        return collected

    async def _ask(self, question: Question, answers: Answers) -> Any:
        default = question.resolve_default(answers)

        if question.type == "confirm":
            return await questionary.confirm(
                question.message, default=bool(default) if default is not None else True
            ).unsafe_ask_async()

        if question.type == "input":
            return await questionary.text(
                question.message, default="" if default is None else str(default)
            ).unsafe_ask_async()

        choices = question.resolve_choices(answers)
        if question.type == "checkbox":
            return await questionary.checkbox(
                question.message,
                choices=[
                    questionary.Choice(
                        c.name, value=c.value, checked=c.checked, description=c.help_text()
                    )
                    for c in choices
                ],
            ).unsafe_ask_async()

        rendered = [
            questionary.Choice(c.name, value=c.value, description=c.help_text()) for c in choices
        ]
        selected = next((c for c in rendered if c.value == default), None)
        return await questionary.select(
            question.message, choices=rendered, default=selected
        ).unsafe_ask_async()
