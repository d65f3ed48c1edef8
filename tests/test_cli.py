"""Tests for the prompt-dialects command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from prompt_dialects.cli import build_parser, main


def test_parser_collects_repeated_turns() -> None:
    args = build_parser().parse_args(["--format", "chatml", "--turn", "a", "--turn", "b"])
    assert args.turns == ["a", "b"]
    assert args.bos_token is None


def test_renders_turns_from_flags(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--format", "llama_inst", "--system", "S", "--bos", "<s>", "--turn", "Hi"])
    out = capsys.readouterr().out
    assert code == 0
    assert out == "<s> [INST] <<SYS>>\nS\n<</SYS>>\nHi [/INST] "


def test_renders_dialogue_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dialogue = tmp_path / "dialogue.txt"
    dialogue.write_text("user: one\nassistant: reply\n", encoding="utf-8")
    code = main(["--format", "instruct", "--dialogue", str(dialogue), "--turn", "two"])
    out = capsys.readouterr().out
    assert code == 0
    assert out == (
        "\n\n### Instruction:\n\none\n\n### Response:\n\n"
        "reply"
        "\n\n### Instruction:\n\ntwo\n\n### Response:\n\n"
    )


def test_flags_override_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps({"format": "chatml", "system": "from config", "bos_token": "<BOS>"}),
        encoding="utf-8",
    )
    code = main(["--config", str(config), "--system", "from flag"])
    out = capsys.readouterr().out
    assert code == 0
    assert out == "<BOS><|im_start|>system\nfrom flag<|im_end|>"


def test_profile_and_config_merge(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    profiles = tmp_path / "profiles.json"
    profiles.write_text(
        json.dumps({"orca": {"format": "user_assistant", "system": "profile", "bos_token": "<s>"}}),
        encoding="utf-8",
    )
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"format": "user_assistant", "system": "config"}), encoding="utf-8")
    code = main(["--profiles-file", str(profiles), "--profile", "orca", "--config", str(config)])
    out = capsys.readouterr().out
    assert code == 0
    assert out == "<s> ### System:\nconfig</s>\n\n"


def test_list_formats(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-formats"]) == 0
    out = capsys.readouterr().out
    for name in ("instruct", "chatml", "user_assistant", "llama_inst"):
        assert name in out


def test_missing_format_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--turn", "Hi"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "No prompt format given" in captured.err


def test_unknown_format_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--format", "vicuna"]) == 2
    assert "vicuna" in capsys.readouterr().err


def test_missing_config_is_usage_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(tmp_path / "absent.json")]) == 2
    assert "Config file not found" in capsys.readouterr().err


def test_debug_file_receives_logs(
    tmp_path: Path, package_logger, capsys: pytest.CaptureFixture[str]
) -> None:
    debug_file = tmp_path / "logs" / "debug.log"
    assert main(["--format", "chatml", "--turn", "Hi", "--debug-file", str(debug_file)]) == 0
    for handler in package_logger.handlers:
        handler.flush()
    assert "Assembled chatml prompt" in debug_file.read_text(encoding="utf-8")
    capsys.readouterr()


def test_config_file_keeps_profile_fields_it_does_not_set(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    profiles = tmp_path / "profiles.json"
    profiles.write_text(json.dumps({"p": {"format": "chatml", "system": "P"}}), encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"format": "chatml", "bos_token": "<B>"}), encoding="utf-8")
    code = main(["--profiles-file", str(profiles), "--profile", "p", "--config", str(config)])
    assert code == 0
    assert capsys.readouterr().out == "<B><|im_start|>system\nP<|im_end|>"


def test_system_flag_uses_profile_placeholders(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    profiles = tmp_path / "profiles.json"
    profiles.write_text(
        json.dumps({"p": {"format": "chatml", "placeholders": {"a": "X"}}}), encoding="utf-8"
    )
    code = main(["--profiles-file", str(profiles), "--profile", "p", "--system", "{a}"])
    assert code == 0
    assert capsys.readouterr().out == "<|im_start|>system\nX<|im_end|>"
