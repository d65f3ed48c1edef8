from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from prompt_dialects.logging import get_logger
from prompt_dialects.template import INITIAL, PromptFormatter, Turn

logger = get_logger(__name__)

_ROLE_PATTERN = re.compile(r"^\s*(user|assistant)\s*:\s*(.*)$", re.IGNORECASE)


def parse_dialogue_text(text: str) -> List[Dict[str, str]]:
    """
    Parse dialogue text in the format:
    ```
    user: I'd like to know something about fruit.
    assistant: What would you like to know about fruit?
    user: What is the difference between a fruit and a vegetable?
    ```

    Returns a list of messages:
    [
        {"role": "user", "content": "I'd like to know something about fruit."},
        {"role": "assistant", "content": "What would you like to know about fruit?"},
        ...
    ]

    Role names are case-insensitive, content continues until the next role
    line, and blank lines inside a message are preserved. Lines before the
    first role line are ignored.
    """
    messages: List[Dict[str, str]] = []
    current_role: Optional[str] = None
    current_content: List[str] = []

    def flush() -> None:
        if current_role and current_content:
            content = "\n".join(current_content).strip()
            if content:
                messages.append({"role": current_role, "content": content})

    for line in text.splitlines():
        line = line.rstrip()

        if not line.strip():
            if current_role and current_content:
                current_content.append("")
            continue

        match = _ROLE_PATTERN.match(line)
        if match:
            flush()
            current_role = match.group(1).lower()
            content_start = match.group(2).strip()
            current_content = [content_start] if content_start else []
        elif current_role:
            current_content.append(line)

    flush()
    return messages


def parse_dialogue_file(path: str | Path) -> List[Dict[str, str]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dialogue file not found: {path}")
    return parse_dialogue_text(path.read_text(encoding="utf-8"))


def _check_role(message: Dict[str, str]) -> str:
    role = message.get("role")
    if role not in ("user", "assistant"):
        raise ValueError(f"Unsupported message role: {role!r} (expected 'user' or 'assistant')")
    return role


def assemble_prompt(
    formatter: PromptFormatter,
    messages: Iterable[Dict[str, str]],
    *,
    include_initial: bool = True,
) -> str:
    """Concatenate the rendered fragments for a whole conversation.

    Assistant messages are model output and are appended verbatim between the
    user turns that surround them.
    """
    parts: List[str] = []
    if include_initial:
        parts.append(formatter.render(INITIAL))

    turns = 0
    for message in messages:
        role = _check_role(message)
        content = message.get("content", "")
        if role == "user":
            parts.append(formatter.render(Turn(text=content, index=turns)))
            turns += 1
        else:
            parts.append(content)

    prompt = "".join(parts)
    logger.debug(
        "Assembled %s prompt: %d user turns, %d chars",
        formatter.format.value,
        turns,
        len(prompt),
    )
    return prompt
