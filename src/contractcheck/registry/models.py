"""Data models for contract registry files."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from contractcheck.core.models import TestCase
from contractcheck.core.targets import TargetConfig


@dataclass(frozen=True)
class Registry:
    name: str
    target: TargetConfig
    cases: Sequence[TestCase]
    description: str = ""
    path: Path = field(default_factory=Path.cwd)

    def case_ids(self) -> tuple[str, ...]:
        return tuple(case.id for case in self.cases)
