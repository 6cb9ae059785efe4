"""Shared fixtures for the idiolint test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from loguru import logger

from idiolint.builtin.rules import default_registry
from idiolint.compiler.parser import parse_source
from idiolint.kernel.linting.engine import analyze
from idiolint.kernel.linting.fixes import apply_fixes
from idiolint.kernel.linting.models import AnalysisResult
from idiolint.kernel.linting.rules import RuleRegistry
from idiolint.kernel.syntax.tree import SourceUnit


@pytest.fixture
def registry() -> RuleRegistry:
    return default_registry()


@pytest.fixture
def parse() -> Callable[[str], SourceUnit]:
    return parse_source


@pytest.fixture
def lint(registry: RuleRegistry) -> Callable[..., AnalysisResult]:
    """Parse ``text`` and run the built-in rules, optionally restricted to ``rule_ids``."""

    def _lint(text: str, *rule_ids: str) -> AnalysisResult:
        unit = parse_source(text)
        return analyze(unit.tree, registry, rule_ids=rule_ids or None, path=unit.path)

    return _lint


@pytest.fixture
def fix(lint: Callable[..., AnalysisResult]) -> Callable[..., str]:
    """Lint ``text`` with ``rule_ids`` and return the text after applying every fix."""

    def _fix(text: str, *rule_ids: str, unsafe: bool = False) -> str:
        return apply_fixes(text, lint(text, *rule_ids), include_unsafe=unsafe).text

    return _fix


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Capture loguru messages at WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]), level="WARNING"
    )
    yield messages
    logger.remove(handler_id)
