from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from prompt_dialects.formats import PromptFormat


@dataclass(frozen=True)
class Initial:
    """Step that emits the BOS token and system preamble."""


@dataclass(frozen=True)
class Turn:
    """Step that emits the user utterance at zero-based position ``index``."""

    text: str
    index: int


RenderStep = Union[Initial, Turn]

INITIAL = Initial()


@dataclass(frozen=True)
class Affixes:
    initial_prefix: str
    initial_suffix: str
    turn_prefix: str
    turn_suffix: str
    # Overrides turn_prefix for index 0 when set.
    first_turn_prefix: Optional[str] = None


# Literal token sequences; models are sensitive to every byte here.
_AFFIXES: dict[PromptFormat, Affixes] = {
    PromptFormat.CHATML: Affixes(
        initial_prefix="<|im_start|>system\n",
        initial_suffix="<|im_end|>",
        turn_prefix="\n<|im_start|>user\n",
        turn_suffix="<|im_end|>\n<|im_start|>assistant\n",
    ),
    PromptFormat.INSTRUCT: Affixes(
        initial_prefix="",
        initial_suffix="",
        turn_prefix="\n\n### Instruction:\n\n",
        turn_suffix="\n\n### Response:\n\n",
    ),
    PromptFormat.LLAMA_INSTRUCT: Affixes(
        initial_prefix=" [INST] <<SYS>>\n",
        initial_suffix="\n<</SYS>>\n",
        turn_prefix="<s> [INST] ",
        turn_suffix=" [/INST] ",
        # The system block already opened [INST]; the first turn continues it.
        first_turn_prefix="",
    ),
    PromptFormat.USER_ASSISTANT: Affixes(
        initial_prefix=" ### System:\n",
        initial_suffix="</s>\n\n",
        turn_prefix="<s> ### User:\n",
        turn_suffix="\n\n### Assistant:\n",
    ),
}


def affixes_for(fmt: PromptFormat) -> Affixes:
    return _AFFIXES[fmt]


@dataclass(frozen=True)
class PromptFormatter:
    """Render conversation steps into the literal prompt text of one dialect.

    The formatter keeps no history: callers render ``INITIAL`` once, then one
    ``Turn`` per user utterance, and concatenate the fragments (with model
    replies in between) themselves. ``Turn.index`` is trusted as given.
    """

    format: PromptFormat
    system: str = ""
    bos_token: str = ""

    def prefix(self, step: RenderStep) -> str:
        affixes = _AFFIXES[self.format]
        if isinstance(step, Initial):
            return affixes.initial_prefix
        if isinstance(step, Turn):
            if step.index == 0 and affixes.first_turn_prefix is not None:
                return affixes.first_turn_prefix
            return affixes.turn_prefix
        raise TypeError(f"Expected a render step, got {type(step).__name__}")

    def suffix(self, step: RenderStep) -> str:
        affixes = _AFFIXES[self.format]
        if isinstance(step, Initial):
            return affixes.initial_suffix
        if isinstance(step, Turn):
            return affixes.turn_suffix
        raise TypeError(f"Expected a render step, got {type(step).__name__}")

    def render(self, step: RenderStep) -> str:
        prefix = self.prefix(step)
        suffix = self.suffix(step)
        if isinstance(step, Turn):
            return f"{prefix}{step.text}{suffix}"
        if not self.system:
            return self.bos_token
        return f"{self.bos_token}{prefix}{self.system}{suffix}"
