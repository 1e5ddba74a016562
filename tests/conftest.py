"""Pytest configuration and fixtures for actor handler generator tests."""

from __future__ import annotations

import logging
import shutil
import textwrap
from pathlib import Path

import pytest

from actor_handler_generator.cli import main

# Test directory structure
TESTS_DIR = Path(__file__).parent
SOURCES_DIR = TESTS_DIR / "sources"
GENERATED_DIR = TESTS_DIR / "_generated"


@pytest.fixture(scope="session")
def generated_dir():
    """Expand all test sources once per session and return the output directory.

    Sources with rejected handler methods make the generator exit with 1; that is expected here,
    the tests inspect the diagnostics separately.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Expanding test sources from {SOURCES_DIR}")

    if GENERATED_DIR.exists():
        shutil.rmtree(GENERATED_DIR)
    GENERATED_DIR.mkdir(parents=True)

    exit_code = main(["-p", str(SOURCES_DIR), "-o", str(GENERATED_DIR), "-r", "--no-format"])
    if exit_code not in (0, 1):
        pytest.fail(f"Expansion of test sources aborted with exit code {exit_code}")

    return GENERATED_DIR


@pytest.fixture(scope="session")
def greeter_module(generated_dir):
    """Read the expanded greeter module."""
    return (generated_dir / "greeter_handlers.py").read_text(encoding="utf8")


@pytest.fixture(scope="session")
def recipient_module(generated_dir):
    """Read the expanded recipient module."""
    return (generated_dir / "recipient_handlers.py").read_text(encoding="utf8")


@pytest.fixture
def example_source():
    """A module with two valid handlers on `Example`."""
    return textwrap.dedent(
        """\
        from actor_handler_generator import actor_handler


        class Greeting:
            name: str


        class Hello:
            pass


        @actor_handler
        class Example:
            def greet(self, message: Greeting, ctx: ExampleContext) -> Hello:
                return Hello()

            def say_hello(self, message: Hello, ctx: ExampleContext):
                pass
        """
    )
