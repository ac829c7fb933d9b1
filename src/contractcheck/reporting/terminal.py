"""Terminal reporter rendering category sections and a summary line."""
from __future__ import annotations

from typing import Sequence

import click
from colorama import Fore, Style, init as colorama_init

from contractcheck.core.assertions import format_line
from contractcheck.core.models import Category, RunSummary, TestCase, TestResult

from .base import Reporter


class TerminalReporter(Reporter):
    """Human-readable reporter that streams to stdout."""

    def __init__(self, *, use_color: bool = True, show_header: bool = False) -> None:
        self._use_color = use_color
        self._show_header = show_header
        if use_color:
            colorama_init(strip=False)

    def on_start(self, name: str, cases: Sequence[TestCase]) -> None:
        if self._show_header:
            click.echo(self._paint(f"Running {len(cases)} contract(s) from {name}", Fore.CYAN))

    def on_category(self, category: Category, count: int) -> None:
        click.echo(f"=== {category.value} ===")

    def on_case_result(self, result: TestResult, index: int, total: int) -> None:
        click.echo(self.render(result))

    def render(self, result: TestResult) -> str:
        line = format_line(result)
        if not self._use_color:
            return line
        label, rest = line.split(":", 1)
        color = Fore.GREEN if result.passed else Fore.RED
        return f"{color}{label}{Style.RESET_ALL}:{rest}"

    def on_complete(self, summary: RunSummary, results: Sequence[TestResult]) -> None:
        color = Fore.GREEN if summary.failed == 0 else Fore.RED
        click.echo(self._paint(summary.line(), color))

    def _paint(self, text: str, color: str) -> str:
        if not self._use_color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"
