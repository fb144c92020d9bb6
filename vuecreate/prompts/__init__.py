"""Interactive prompts: question model, composer and built-in feature modules.

Quick usage::

    from vuecreate.prompts import PromptComposer, get_prompt_modules

    composer = PromptComposer.from_modules(get_prompt_modules(), presets)
    answers = await QuestionaryEngine().prompt(composer.compose_final())
"""

from vuecreate.prompts.composer import (
    MANUAL_PRESET,
    PromptComposer,
    PromptComposerError,
    format_features,
    is_manual_mode,
)
from vuecreate.prompts.engine import Choice, PromptEngine, Question, QuestionaryEngine
from vuecreate.prompts.features import get_prompt_modules

__all__ = [
    "MANUAL_PRESET",
    "Choice",
    "PromptComposer",
    "PromptComposerError",
    "PromptEngine",
    "Question",
    "QuestionaryEngine",
    "format_features",
    "get_prompt_modules",
    "is_manual_mode",
]
