"""
Pytest configuration and shared fixtures for prompt-dialects tests.
"""
import logging
from pathlib import Path

import pytest

from prompt_dialects.formats import PromptFormat
from prompt_dialects.logging import PACKAGE_LOGGER


@pytest.fixture(scope="session")
def test_configs_dir() -> Path:
    """Returns the bundled configs directory."""
    return Path(__file__).parent.parent / "configs"


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Returns a temporary directory for test output."""
    return tmp_path


@pytest.fixture(params=list(PromptFormat), ids=lambda fmt: fmt.value)
def any_format(request) -> PromptFormat:
    """Parametrizes a test over every prompt format."""
    return request.param


@pytest.fixture
def sample_template_config() -> dict:
    """Returns a sample template config for testing."""
    return {
        "format": "chatml",
        "system": "You are {assistant}, talking to <|USER|> at <|TIMEU|>.",
        "bos_token": "<s>",
        "placeholders": {
            "assistant": "TestBot",
            "user": "Tester",
        },
        "deterministic_time_iso": "2026-01-27T12:00:00Z",
    }


@pytest.fixture
def sample_dialogue() -> list:
    """Returns a sample conversation for testing."""
    return [
        {"role": "user", "content": "Hello!"},
        {"role": "assistant", "content": "Hello! How can I help you?"},
        {"role": "user", "content": "Tell me a joke."},
    ]


@pytest.fixture
def package_logger():
    """Yields the package logger and removes handlers added during the test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers_before = list(logger.handlers)
    level_before = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers_before:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level_before)
