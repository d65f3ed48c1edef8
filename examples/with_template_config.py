#!/usr/bin/env python3
"""
Example using a template config JSON file.

Loads configs/template-config.example.json, expands its placeholders and
renders a short dialogue with the configured format.
"""

from pathlib import Path

from prompt_dialects import assemble_prompt, load_template_config, parse_dialogue_text

DIALOGUE = """
user: Can you summarise the plot of Hamlet?
assistant: A prince avenges his father's murder, and almost everyone dies.
user: Who dies first?
"""


def main():
    config_path = Path(__file__).resolve().parent.parent / "configs" / "template-config.example.json"
    config = load_template_config(config_path)
    if config is None:
        raise SystemExit(f"Config not found: {config_path}")

    print(f"Format: {config.format.label}\n")
    print(assemble_prompt(config.to_formatter(), parse_dialogue_text(DIALOGUE)))


if __name__ == "__main__":
    main()
