"""Assertion primitives and the pass/fail tally they feed."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import click

from .models import RunSummary, TestResult
from .targets import DEFAULT_TIMEOUT, run_command

ResultCallback = Callable[[TestResult], None]


@dataclass
class Tally:
    """Running pass/fail counters for one verifier run."""

    passed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed

    def record(self, passed: bool) -> None:
        if passed:
            self.passed += 1
        else:
            self.failed += 1

    def summary(self) -> RunSummary:
        return RunSummary(total=self.total, passed=self.passed, failed=self.failed)


def compare_equal(expected: str, actual: str) -> Optional[str]:
    """Return a failure reason unless the strings are identical."""

    if expected == actual:
        return None
    return f"expected '{expected}', got '{actual}'"


def compare_exit(expected: int, actual: int) -> Optional[str]:
    if expected == actual:
        return None
    return f"expected exit {expected}, got {actual}"


def compare_contains(needle: str, haystack: str) -> Optional[str]:
    # Literal containment; the needle is never treated as a pattern.
    if needle in haystack:
        return None
    return f"expected to contain '{needle}', got '{haystack}'"


def format_line(result: TestResult) -> str:
    if result.passed:
        return f"PASS: {result.case_id}"
    return f"FAIL: {result.case_id} -- {result.message}"


def _echo_line(result: TestResult) -> None:
    click.echo(format_line(result))


class Verifier:
    """Records assertion outcomes into an explicit :class:`Tally`.

    Every assertion produces an immutable :class:`TestResult`, bumps the
    tally and hands the result to ``on_result`` (which prints the
    ``PASS``/``FAIL`` line by default). Failures never raise.
    """

    def __init__(
        self,
        *,
        on_result: Optional[ResultCallback] = None,
        tally: Optional[Tally] = None,
    ) -> None:
        self._on_result = on_result or _echo_line
        self.tally = tally if tally is not None else Tally()
        self._results: List[TestResult] = []

    @property
    def results(self) -> Sequence[TestResult]:
        return tuple(self._results)

    def record(self, result: TestResult) -> TestResult:
        self.tally.record(result.passed)
        self._results.append(result)
        self._on_result(result)
        return result

    def assert_equal(self, description: str, expected: str, actual: str) -> TestResult:
        reason = compare_equal(expected, actual)
        return self.record(
            TestResult(case_id=description, passed=reason is None, message=reason or "", output=actual)
        )

    def assert_exit_code(
        self,
        description: str,
        expected_code: int,
        *command: str,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> TestResult:
        invocation = run_command(command, timeout=timeout)
        reason = compare_exit(expected_code, invocation.exit_code)
        if reason and invocation.timed_out:
            reason += f" (timed out after {timeout:g}s)"
        return self.record(
            TestResult(
                case_id=description,
                passed=reason is None,
                message=reason or "",
                duration_s=invocation.duration_s,
                output=invocation.output,
                exit_code=invocation.exit_code,
            )
        )

    def assert_contains(self, description: str, needle: str, haystack: str) -> TestResult:
        reason = compare_contains(needle, haystack)
        return self.record(
            TestResult(case_id=description, passed=reason is None, message=reason or "", output=haystack)
        )

    def summary(self) -> RunSummary:
        return self.tally.summary()
