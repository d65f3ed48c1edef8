from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from prompt_dialects.config import (
    TemplateConfig,
    build_template_config,
    load_profiles,
    merge_config_data,
    profile_data,
    read_config_data,
    resolve_config_path,
)
from prompt_dialects.dialogue import assemble_prompt, parse_dialogue_file
from prompt_dialects.formats import PromptFormat
from prompt_dialects.logging import (
    configure_debug_file_logging,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)

EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser for prompt rendering."""
    parser = argparse.ArgumentParser(
        prog="prompt-dialects",
        description="Render a conversation into the prompt layout of a model dialect.",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        help="Prompt format (instruct, chatml, user_assistant, llama_inst).",
    )
    parser.add_argument(
        "--system",
        type=str,
        default=None,
        help="System prompt text (overrides config/profile).",
    )
    parser.add_argument(
        "--bos",
        dest="bos_token",
        type=str,
        default=None,
        help="Beginning-of-sequence token (overrides config/profile).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON template config.",
    )
    parser.add_argument(
        "--profile",
        type=str,
        default=None,
        help="Named profile from a profiles JSON (see --profiles-file).",
    )
    parser.add_argument(
        "--profiles-file",
        type=str,
        default="configs/profiles.json",
        help="Path to profiles JSON (default: configs/profiles.json).",
    )
    parser.add_argument(
        "--dialogue",
        type=str,
        default=None,
        help="Text file with 'user:'/'assistant:' lines to render.",
    )
    parser.add_argument(
        "--turn",
        dest="turns",
        action="append",
        default=[],
        help="User turn text; repeat for several turns (appended after --dialogue).",
    )
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="List the supported prompt formats and exit.",
    )
    parser.add_argument(
        "--debug-file",
        type=str,
        default=None,
        help="Write debug logs to this file.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug messages to stderr.",
    )
    return parser


def render_formats_table() -> Table:
    table = Table(title="Prompt formats")
    table.add_column("Name", style="bold")
    table.add_column("Label")
    table.add_column("System prompt")
    for fmt in PromptFormat:
        table.add_row(fmt.value, fmt.label, "yes" if fmt.allows_system_prompt else "no")
    return table


def resolve_template_config(args: argparse.Namespace) -> TemplateConfig:
    """Merge profile, config file and explicit flags; later sources win."""
    profile: Optional[Dict[str, Any]] = None
    if args.profile:
        profiles_path = resolve_config_path(args.profiles_file)
        if profiles_path is None or not profiles_path.exists():
            raise ValueError(f"Profiles file not found: {args.profiles_file}")
        profile = profile_data(load_profiles(profiles_path), args.profile)
    config: Optional[Dict[str, Any]] = None
    if args.config:
        config = read_config_data(resolve_config_path(args.config))
        if config is None:
            raise ValueError(f"Config file not found: {args.config}")
    overrides = {
        "format": args.format,
        "system": args.system,
        "bos_token": args.bos_token,
    }
    flags = {key: value for key, value in overrides.items() if value is not None}
    data = merge_config_data(profile, config, flags)
    if "format" not in data:
        raise ValueError("No prompt format given; use --format, --config or --profile")
    return build_template_config(data, source="command line")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.debug_file:
        configure_debug_file_logging(Path(args.debug_file))

    if args.list_formats:
        Console().print(render_formats_table())
        return 0

    err_console = Console(stderr=True)
    try:
        config = resolve_template_config(args)
        messages: List[Dict[str, str]] = []
        if args.dialogue:
            messages.extend(parse_dialogue_file(args.dialogue))
        messages.extend({"role": "user", "content": text} for text in args.turns)
        prompt = assemble_prompt(config.to_formatter(), messages)
    except (ValueError, FileNotFoundError) as exc:
        logger.debug("Prompt rendering failed", exc_info=True)
        err_console.print(Text.assemble(("error: ", "red"), str(exc)))
        return EXIT_USAGE

    sys.stdout.write(prompt)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
