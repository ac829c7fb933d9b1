from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from contractcheck.core.models import Category
from contractcheck.core.targets import DEFAULT_TIMEOUT
from contractcheck.registry import load_registry, parse_registry

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "contracts.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_load_registry_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        target:
          command: tool --flag
        cases:
          - id: hp-1
            category: happy-path
            input: hi
            expected_output: hello
          - id: 7
            category: error-case
            expected_exit: 2
        """,
    )
    registry = load_registry(str(path))
    assert registry.name == "contracts"
    assert registry.path == path.resolve()
    assert registry.target.command == ("tool", "--flag")
    assert registry.target.timeout == DEFAULT_TIMEOUT
    assert registry.target.workdir == tmp_path.resolve()
    assert registry.target.strip_trailing_newlines is True
    first, second = registry.cases
    assert first.category is Category.HAPPY_PATH
    assert first.expected_exit == 0
    assert first.match == "exact"
    assert second.id == "7"
    assert second.expected_output is None
    assert registry.case_ids() == ("hp-1", "7")


def test_numeric_values_become_strings(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        target: {command: [calc]}
        cases:
          - {id: add, category: happy-path, input: 12, expected_output: 42}
        """,
    )
    case = load_registry(str(path)).cases[0]
    assert case.input == "12"
    assert case.expected_output == "42"


def test_function_target_with_source_resolved_relative_to_registry(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        target:
          function: slugify
          source: impl/slug.py
          timeout: 0
          env: {A: 1}
        cases:
          - {id: a, category: edge-case}
        """,
    )
    target = load_registry(str(path)).target
    assert target.kind == "function"
    assert target.source == (tmp_path / "impl" / "slug.py").resolve()
    assert target.timeout is None
    assert target.env == {"A": "1"}


def test_duplicate_ids_rejected(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
        target: {command: tool}
        cases:
          - {id: same, category: happy-path}
          - {id: same, category: edge-case}
        """,
    )
    with pytest.raises(ValueError) as exc:
        load_registry(str(path))
    assert "Duplicate case id 'same'" in str(exc.value)


def test_command_and_function_are_exclusive(tmp_path: Path) -> None:
    both = {"target": {"command": "tool", "function": "m:f"}, "cases": [{"id": "a", "category": "edge-case"}]}
    neither = {"target": {}, "cases": [{"id": "a", "category": "edge-case"}]}
    for raw in (both, neither):
        with pytest.raises(ValueError) as exc:
            parse_registry(raw, base=tmp_path)
        assert "exactly one of" in str(exc.value)


def test_source_requires_function(tmp_path: Path) -> None:
    raw = {"target": {"command": "tool", "source": "x.py"}, "cases": [{"id": "a", "category": "edge-case"}]}
    with pytest.raises(ValueError):
        parse_registry(raw, base=tmp_path)


def test_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        load_registry("/nonexistent/contracts.yaml")


def test_invalid_yaml_raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("target: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValueError) as exc:
        load_registry(str(path))
    assert "not valid YAML" in str(exc.value)


@pytest.mark.parametrize("name", ["greet", "slugify"])
def test_example_registries_load(name: str) -> None:
    registry = load_registry(str(EXAMPLES / name / "contracts.yaml"))
    assert registry.name == name
    categories = {case.category for case in registry.cases}
    assert categories == set(Category)
