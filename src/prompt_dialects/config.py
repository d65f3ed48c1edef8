from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from prompt_dialects.formats import PromptFormat
from prompt_dialects.logging import get_logger
from prompt_dialects.template import PromptFormatter

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = "configs"


class TemplateConfig(BaseModel):
    """
    Configuration for a prompt formatter: dialect, system preamble and BOS token.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    format: PromptFormat
    system: str = ""  # empty means no system preamble
    bos_token: str = ""  # empty means no leading BOS marker
    placeholders: Dict[str, str] = Field(default_factory=dict)
    deterministic_time_iso: Optional[str] = Field(
        default=None,
        description="ISO timestamp used for <|DATE|>/<|TIME|> expansion instead of the clock",
    )

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> PromptFormat:
        return PromptFormat.parse(value)

    def to_formatter(self) -> PromptFormatter:
        system = self.system
        if system and not self.format.allows_system_prompt:
            logger.warning(
                "Format %s has no system role; dropping system prompt (%d chars)",
                self.format.value,
                len(system),
            )
            system = ""
        return PromptFormatter(format=self.format, system=system, bos_token=self.bos_token)


_ANGLE_PREFIX = "<|"
_ANGLE_SUFFIX = "|>"


def _build_builtin_placeholders(
    now: datetime, now_utc: datetime
) -> Dict[str, str]:
    return {
        "DATE": now.strftime("%Y-%m-%d"),
        "DATETIME": now.isoformat(timespec="seconds"),
        "TIME": now.strftime("%H:%M:%S"),
        "TIMEZ": now.strftime("%H:%M:%S %Z").rstrip(),
        "TIMEA": now.strftime("%I:%M:%S %p"),
        "TIMEU": now_utc.strftime("%H:%M:%S UTC"),
    }


def _replace_angle_tokens(value: str, replacements: Dict[str, str]) -> str:
    """Replace <|TOKEN|> placeholders using the replacements map (case-insensitive).

    Tokens without a replacement, such as ``<|im_start|>``, are kept verbatim.
    """
    parts: List[str] = []
    idx = 0
    length = len(value)
    while idx < length:
        start = value.find(_ANGLE_PREFIX, idx)
        if start == -1:
            parts.append(value[idx:])
            break
        end = value.find(_ANGLE_SUFFIX, start + 2)
        if end == -1:
            parts.append(value[idx:])
            break
        parts.append(value[idx:start])
        replacement = replacements.get(value[start + 2 : end].upper())
        if replacement is None:
            parts.append(value[start : end + 2])
        else:
            parts.append(replacement)
        idx = end + 2
    return "".join(parts)


def _parse_deterministic_time(value: str) -> tuple[datetime, datetime]:
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = f"{cleaned[:-1]}+00:00"
    try:
        dt = datetime.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValueError(
            f"Invalid deterministic_time_iso value '{value}'. Expected ISO UTC timestamp."
        ) from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.astimezone(), dt_utc


def apply_placeholders(
    value: Optional[str],
    placeholders: Dict[str, str],
    *,
    deterministic_time_iso: Optional[str] = None,
) -> Optional[str]:
    """Expand dynamic placeholders and user-defined symbols.

    Supports both built-in and user-defined placeholders in two formats:
    - Built-in: <|DATE|>, <|TIME|>, <|TIMEZ|>, <|TIMEA|>, <|TIMEU|>, <|DATETIME|>
    - User-defined: <|KEY|> (case-insensitive) or {key} (case-sensitive)

    User keys shadow built-ins of the same name.
    """
    if value is None:
        return None

    if _ANGLE_PREFIX in value:
        if deterministic_time_iso:
            now, now_utc = _parse_deterministic_time(deterministic_time_iso)
        else:
            now = datetime.now().astimezone()
            now_utc = datetime.now(timezone.utc)
        replacements = _build_builtin_placeholders(now, now_utc)
        for key, replacement in placeholders.items():
            replacements[key.upper()] = replacement
        value = _replace_angle_tokens(value, replacements)

    for key, replacement in placeholders.items():
        value = value.replace(f"{{{key}}}", replacement)
    return value


def resolve_config_path(path: str | Path | None, config_dir: str | Path | None = None) -> Path | None:
    if path is None:
        return None
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    if candidate.exists():
        return candidate
    base_dir = Path(config_dir or os.getenv("PROMPT_DIALECTS_CONFIG_DIR", DEFAULT_CONFIG_DIR))
    fallback = base_dir / candidate
    if fallback.exists():
        return fallback
    return candidate


def build_template_config(data: Dict[str, Any], *, source: str = "<dict>") -> TemplateConfig:
    """Validate raw config data and expand placeholders in the system text."""
    placeholders = {
        str(k): str(v) for k, v in (data.get("placeholders", {}) or {}).items()
    }
    try:
        config = TemplateConfig(**{**data, "placeholders": placeholders})
    except ValidationError as e:
        raise ValueError(f"Invalid template config {source}: {e}") from e

    system = apply_placeholders(
        config.system,
        config.placeholders,
        deterministic_time_iso=config.deterministic_time_iso,
    )
    logger.debug(
        "Loaded template config from %s (format=%s, system=%d chars, bos=%r)",
        source,
        config.format.value,
        len(system or ""),
        config.bos_token,
    )
    return config.model_copy(update={"system": system or ""})


def load_template_config(path: str | Path) -> Optional[TemplateConfig]:
    """
    Load a TemplateConfig from a JSON file.

    Supported fields:
    {
      "format": "chatml",
      "system": "You are {assistant}. Today is <|DATE|>.",
      "bos_token": "<s>",
      "placeholders": { "assistant": "Dave" },
      "deterministic_time_iso": "2026-01-27T12:00:00Z"
    }

    Returns:
        TemplateConfig if file exists and is valid, None if file doesn't exist.
        Raises ValueError if file exists but is invalid.
    """
    data = read_config_data(path)
    if data is None:
        return None
    return build_template_config(data, source=str(path))


def read_config_data(path: str | Path) -> Optional[Dict[str, Any]]:
    """Read the raw JSON object of a template config, or None if the file is missing."""
    raw_path = Path(path)
    if not raw_path.exists():
        return None

    try:
        data = json.loads(raw_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return data


# Profiles --------------------------------------------------------------------


def load_profiles(path: str | Path) -> Dict[str, Dict[str, Any]]:
    """
    Load profile map from JSON. Schema:
    {
      "qwen-chat": {"format": "chatml", "system": "You are a helpful assistant."},
      "llama-2-chat": {"format": "llama_inst", "bos_token": "<s>"}
    }
    """
    raw = Path(path)
    try:
        profiles = json.loads(raw.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in profiles file {path}: {e}") from e
    if not isinstance(profiles, dict):
        raise ValueError(f"Profiles file {path} must contain a JSON object")
    return profiles


def profile_data(profiles: Dict[str, Dict[str, Any]], name: str) -> Dict[str, Any]:
    if name not in profiles:
        known = ", ".join(sorted(profiles)) or "(none)"
        raise ValueError(f"Unknown profile '{name}'. Known profiles: {known}")
    data = profiles[name]
    if not isinstance(data, dict):
        raise ValueError(f"Profile '{name}' must be a JSON object")
    return data


def profile_config(profiles: Dict[str, Dict[str, Any]], name: str) -> TemplateConfig:
    return build_template_config(profile_data(profiles, name), source=f"profile '{name}'")


def merge_config_data(*layers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge raw config layers; later layers win.

    Only keys a layer actually carries override earlier ones. Placeholder maps
    are merged key by key.
    """
    merged: Dict[str, Any] = {}
    placeholders: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        placeholders.update(layer.get("placeholders") or {})
        merged.update({key: value for key, value in layer.items() if key != "placeholders"})
    if placeholders:
        merged["placeholders"] = placeholders
    return merged
