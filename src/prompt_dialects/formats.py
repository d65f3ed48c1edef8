from __future__ import annotations

from enum import Enum


class PromptFormat(str, Enum):
    """Prompt dialects a target model may expect its conversation laid out in."""

    INSTRUCT = "instruct"
    CHATML = "chatml"
    USER_ASSISTANT = "user_assistant"
    LLAMA_INSTRUCT = "llama_inst"

    @property
    def allows_system_prompt(self) -> bool:
        return _ALLOWS_SYSTEM_PROMPT[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, name: str | PromptFormat) -> PromptFormat:
        """Resolve a format from its value, member name or a common alias.

        Matching ignores case and treats ``-`` and spaces like ``_``.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("-", "_").replace(" ", "_")
        fmt = _ALIASES.get(key)
        if fmt is None:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown prompt format '{name}'. Expected one of: {valid}")
        return fmt


# Per variant; a dialect without a system role maps to False.
_ALLOWS_SYSTEM_PROMPT = {
    PromptFormat.INSTRUCT: True,
    PromptFormat.CHATML: True,
    PromptFormat.USER_ASSISTANT: True,
    PromptFormat.LLAMA_INSTRUCT: True,
}

_LABELS = {
    PromptFormat.INSTRUCT: "Instruct",
    PromptFormat.CHATML: "ChatML",
    PromptFormat.USER_ASSISTANT: "User/Assistant",
    PromptFormat.LLAMA_INSTRUCT: "Llama [INST]",
}

_ALIASES = {
    **{member.value: member for member in PromptFormat},
    **{member.name.lower(): member for member in PromptFormat},
    "chatml_style": PromptFormat.CHATML,
    "alpaca": PromptFormat.INSTRUCT,
    "userassistant": PromptFormat.USER_ASSISTANT,
    "llama": PromptFormat.LLAMA_INSTRUCT,
    "llama_instruct": PromptFormat.LLAMA_INSTRUCT,
    "llamainstruct": PromptFormat.LLAMA_INSTRUCT,
}
