from __future__ import annotations

import pytest

from contractcheck.registry import parse_registry


def _error(raw) -> str:
    with pytest.raises(ValueError) as exc:
        parse_registry(raw)
    return str(exc.value)


def test_top_level_must_be_mapping() -> None:
    assert "mapping" in _error(["not", "a", "mapping"])


def test_missing_required_sections() -> None:
    message = _error({"cases": [{"id": "a", "category": "edge-case"}]})
    assert "target" in message


def test_unknown_category_rejected() -> None:
    message = _error({"target": {"command": "tool"}, "cases": [{"id": "a", "category": "smoke"}]})
    assert "cases/0/category" in message


def test_unknown_case_field_rejected() -> None:
    message = _error({"target": {"command": "tool"}, "cases": [{"id": "a", "category": "edge-case", "expect": "x"}]})
    assert "cases/0" in message
    assert "expect" in message


def test_non_integer_exit_rejected() -> None:
    message = _error(
        {"target": {"command": "tool"}, "cases": [{"id": "a", "category": "edge-case", "expected_exit": "one"}]}
    )
    assert "expected_exit" in message


def test_empty_cases_rejected() -> None:
    assert "cases" in _error({"target": {"command": "tool"}, "cases": []})


def test_bad_match_mode_rejected() -> None:
    message = _error(
        {"target": {"command": "tool"}, "cases": [{"id": "a", "category": "edge-case", "match": "regex"}]}
    )
    assert "match" in message
