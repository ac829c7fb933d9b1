"""Core dataclasses shared across contractcheck subsystems."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple


class Category(str, Enum):
    """Contract buckets, declared in report order."""

    HAPPY_PATH = "happy-path"
    EDGE_CASE = "edge-case"
    ERROR_CASE = "error-case"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == text:
                return member
        allowed = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown category '{value}' (expected one of: {allowed})")


MATCH_MODES = ("exact", "contains")


@dataclass(frozen=True)
class TestCase:
    """One declarative contract: input, expected output and exit status."""

    __test__ = False  # keep pytest from collecting this class

    id: str
    category: Category
    input: Any = None
    expected_output: Optional[str] = None
    expected_exit: int = 0
    match: str = "exact"
    description: str = ""
    files: Mapping[str, str] = field(default_factory=dict)
    tags: Tuple[str, ...] = tuple()


@dataclass(frozen=True)
class TestResult:
    """Outcome of a single assertion or case."""

    __test__ = False

    case_id: str
    passed: bool
    message: str = ""
    category: Optional[Category] = None
    duration_s: float = 0.0
    output: Optional[str] = None
    exit_code: Optional[int] = None


@dataclass(frozen=True)
class RunSummary:
    """Aggregate counts folded from a sequence of results."""

    total: int = 0
    passed: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: Iterable[TestResult]) -> "RunSummary":
        total = passed = 0
        for result in results:
            total += 1
            if result.passed:
                passed += 1
        return cls(total=total, passed=passed, failed=total - passed)

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1

    def line(self) -> str:
        return f"{self.total} run, {self.passed} passed, {self.failed} failed"
