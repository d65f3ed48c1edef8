"""Prompt layouts for conversational language models."""

from prompt_dialects.config import (
    TemplateConfig,
    apply_placeholders,
    load_profiles,
    load_template_config,
)
from prompt_dialects.dialogue import assemble_prompt, parse_dialogue_text
from prompt_dialects.formats import PromptFormat
from prompt_dialects.template import (
    INITIAL,
    Initial,
    PromptFormatter,
    RenderStep,
    Turn,
)

__all__ = [
    "INITIAL",
    "Initial",
    "PromptFormat",
    "PromptFormatter",
    "RenderStep",
    "TemplateConfig",
    "Turn",
    "apply_placeholders",
    "assemble_prompt",
    "load_profiles",
    "load_template_config",
    "parse_dialogue_text",
]
