"""Authoring checks for contract registries."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from contractcheck.core.models import Category, TestCase

from .models import Registry

DEFAULT_MIN_PER_CATEGORY = 2

_PLACEHOLDER = re.compile(r"\b(?:TODO|TBD|FIXME)\b|<(?i:placeholder)>|<\.\.\.>|^\s*\.\.\.\s*$")


@dataclass(frozen=True)
class LintIssue:
    message: str
    case_id: Optional[str] = None

    def __str__(self) -> str:
        if self.case_id:
            return f"{self.case_id}: {self.message}"
        return self.message


def lint_registry(registry: Registry, *, min_per_category: int = DEFAULT_MIN_PER_CATEGORY) -> List[LintIssue]:
    """Report coverage gaps and unresolved placeholder values."""

    issues: List[LintIssue] = []
    counts = {category: 0 for category in Category}
    for case in registry.cases:
        counts[case.category] += 1
    for category, count in counts.items():
        if count < min_per_category:
            issues.append(
                LintIssue(f"category '{category.value}' has {count} case(s), expected at least {min_per_category}")
            )
    for case in registry.cases:
        for field_name, value in _case_fields(case):
            if looks_like_placeholder(value):
                issues.append(LintIssue(f"{field_name} looks like a placeholder: {value!r}", case_id=case.id))
    return issues


def looks_like_placeholder(value: str) -> bool:
    # {tmpdir}, {casedir} and {python} are resolved at run time and are not placeholders.
    return bool(_PLACEHOLDER.search(value))


def _case_fields(case: TestCase) -> Iterator[tuple[str, str]]:
    yield from _strings("input", case.input)
    if case.expected_output is not None:
        yield "expected_output", case.expected_output
    for name, content in case.files.items():
        yield f"files[{name}]", content


def _strings(prefix: str, value: Any) -> Iterator[tuple[str, str]]:
    if isinstance(value, str):
        yield prefix, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _strings(f"{prefix}.{key}", item)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            yield from _strings(f"{prefix}[{index}]", item)
