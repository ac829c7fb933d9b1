"""JSON reporter emitting structured execution results."""
from __future__ import annotations

import datetime as dt
import json
import pathlib
import time
from typing import Any, Dict, Optional, Sequence

import click
from jsonschema import validate

from contractcheck.core.models import Category, RunSummary, TestCase, TestResult

from .base import Reporter
from .schema import JSON_SCHEMA_V1, SCHEMA_VERSION


class JsonReporter(Reporter):
    """Writes results as JSON validated against the schema.

    With no ``path`` the document is echoed to stdout.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = pathlib.Path(path) if path else None
        self._records: list[Dict[str, Any]] = []
        self._name = ""
        self._start_time = 0.0

    def on_start(self, name: str, cases: Sequence[TestCase]) -> None:
        self._name = name
        self._records.clear()
        self._start_time = time.perf_counter()

    def on_category(self, category: Category, count: int) -> None:
        return None

    def on_case_result(self, result: TestResult, index: int, total: int) -> None:
        self._records.append(_result_to_dict(result))

    def on_complete(self, summary: RunSummary, results: Sequence[TestResult]) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "generated_at": dt.datetime.now(dt.timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds")
            + "Z",
            "registry": self._name,
            "summary": {
                "total": summary.total,
                "passed": summary.passed,
                "failed": summary.failed,
                "duration_s": time.perf_counter() - self._start_time,
            },
            "cases": list(self._records),
        }
        validate(instance=payload, schema=JSON_SCHEMA_V1)
        text = json.dumps(payload, indent=2)
        if self._path is None:
            click.echo(text)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as exc:  # pragma: no cover - filesystem protection
            raise RuntimeError(f"Failed to write JSON report to {self._path}: {exc}") from exc
        click.echo(f"JSON report written to {self._path}", err=True)


def _result_to_dict(result: TestResult) -> Dict[str, Any]:
    return {
        "id": result.case_id,
        "category": result.category.value if result.category else None,
        "passed": result.passed,
        "message": result.message,
        "duration_ms": result.duration_s * 1000,
        "exit_code": result.exit_code,
        "output": result.output,
    }
