"""Contract runner executing registry cases against a target."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from contractcheck.reporting.base import Reporter, ReportManager
from contractcheck.reporting.terminal import TerminalReporter

from .assertions import Verifier, compare_contains, compare_equal, compare_exit
from .fixtures import build_tokens, case_directory, render_value, scoped_workspace, write_files
from .models import Category, RunSummary, TestCase, TestResult
from .targets import Invocation, TargetConfig, invoke

logger = logging.getLogger(__name__)


def group_by_category(cases: Sequence[TestCase]) -> List[Tuple[Category, List[TestCase]]]:
    """Bucket cases per category in report order, keeping registry order inside a bucket."""

    buckets: Dict[Category, List[TestCase]] = {category: [] for category in Category}
    for case in cases:
        buckets[case.category].append(case)
    return [(category, members) for category, members in buckets.items() if members]


def check_case(
    case: TestCase,
    invocation: Invocation,
    *,
    tokens: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """Return the first mismatch between ``case`` and ``invocation``, if any."""

    reason = compare_exit(case.expected_exit, invocation.exit_code)
    if reason:
        if invocation.timed_out and timeout:
            reason += f" (timed out after {timeout:g}s)"
        return reason
    if case.expected_output is None:
        return None
    expected = render_value(case.expected_output, tokens or {})
    if case.match == "contains":
        return compare_contains(expected, invocation.output)
    return compare_equal(expected, invocation.output)


class ContractRunner:
    """Executes contract cases sequentially against one target."""

    def __init__(
        self,
        target: TargetConfig,
        *,
        reporters: Optional[Sequence[Reporter]] = None,
        fail_fast: bool = False,
        name: str = "contracts",
    ) -> None:
        self._target = target
        self._reporters = list(reporters) if reporters is not None else _default_reporters()
        self._fail_fast = fail_fast
        self._name = name

    def run_all(self, cases: Sequence[TestCase]) -> RunSummary:
        manager = ReportManager(self._reporters)
        total = len(cases)

        def emit(result: TestResult) -> None:
            manager.handle_result(result, verifier.tally.total, total)

        verifier = Verifier(on_result=emit)
        manager.start(self._name, cases)
        logger.debug("running %d case(s) against %s", total, self._target.label())
        with scoped_workspace() as workspace:
            stop = False
            for category, members in group_by_category(cases):
                manager.category(category, len(members))
                for case in members:
                    result = verifier.record(self._execute_case(case, workspace))
                    if self._fail_fast and not result.passed:
                        logger.info("stopping after first failure (%s)", case.id)
                        stop = True
                        break
                if stop:
                    break
        summary = verifier.summary()
        manager.complete(summary, verifier.results)
        return summary

    def _execute_case(self, case: TestCase, workspace: Path) -> TestResult:
        start = time.perf_counter()
        try:
            case_dir = case_directory(workspace, case.id)
            tokens = build_tokens(workspace, case_dir)
            write_files(case_dir, case.files, tokens)
            invocation = invoke(self._target, case.input, tokens=tokens)
            reason = check_case(case, invocation, tokens=tokens, timeout=self._target.timeout)
        except Exception as exc:
            logger.debug("case %s raised", case.id, exc_info=True)
            return TestResult(
                case_id=case.id,
                passed=False,
                message=f"error: {exc}",
                category=case.category,
                duration_s=time.perf_counter() - start,
            )
        if reason and invocation.stderr:
            logger.info("%s stderr: %s", case.id, invocation.stderr.strip())
        return TestResult(
            case_id=case.id,
            passed=reason is None,
            message=reason or "",
            category=case.category,
            duration_s=time.perf_counter() - start,
            output=invocation.output,
            exit_code=invocation.exit_code,
        )


def run_all(
    cases: Sequence[TestCase],
    target: TargetConfig,
    *,
    reporters: Optional[Sequence[Reporter]] = None,
    fail_fast: bool = False,
    name: str = "contracts",
) -> RunSummary:
    """Run every case in registry order and return the folded summary."""

    runner = ContractRunner(target, reporters=reporters, fail_fast=fail_fast, name=name)
    return runner.run_all(cases)


def _default_reporters() -> List[Reporter]:
    return [TerminalReporter(use_color=False)]
