"""Reporter interface definitions."""
from __future__ import annotations

from typing import List, Sequence

from contractcheck.core.models import Category, RunSummary, TestCase, TestResult


class Reporter:
    """Interface for output renderers."""

    def on_start(self, name: str, cases: Sequence[TestCase]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_category(self, category: Category, count: int) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_case_result(self, result: TestResult, index: int, total: int) -> None:  # pragma: no cover
        raise NotImplementedError

    def on_complete(self, summary: RunSummary, results: Sequence[TestResult]) -> None:  # pragma: no cover
        raise NotImplementedError


class ReportManager:
    """Dispatches lifecycle callbacks to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)

    def start(self, name: str, cases: Sequence[TestCase]) -> None:
        for reporter in self._reporters:
            reporter.on_start(name, cases)

    def category(self, category: Category, count: int) -> None:
        for reporter in self._reporters:
            reporter.on_category(category, count)

    def handle_result(self, result: TestResult, index: int, total: int) -> None:
        for reporter in self._reporters:
            reporter.on_case_result(result, index, total)

    def complete(self, summary: RunSummary, results: Sequence[TestResult]) -> None:
        for reporter in self._reporters:
            reporter.on_complete(summary, results)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)
