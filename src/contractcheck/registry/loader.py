"""YAML loader and validation for contract registry files."""
from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import Draft7Validator

from contractcheck.core.models import MATCH_MODES, Category, TestCase
from contractcheck.core.targets import DEFAULT_TIMEOUT, TargetConfig

from .models import Registry

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "contracts.yaml"


def load_registry(path: str) -> Registry:
    """Load and validate a registry file."""

    registry_path = Path(path).expanduser().resolve()
    if not registry_path.is_file():
        raise FileNotFoundError(f"Registry file not found: {registry_path}")
    try:
        raw = yaml.safe_load(registry_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Registry file is not valid YAML: {exc}") from exc
    registry = parse_registry(raw, base=registry_path.parent, default_name=registry_path.stem)
    logger.debug("loaded %d case(s) from %s", len(registry.cases), registry_path)
    return Registry(
        name=registry.name,
        description=registry.description,
        target=registry.target,
        cases=registry.cases,
        path=registry_path,
    )


def parse_registry(raw: Any, *, base: Optional[Path] = None, default_name: str = "contracts") -> Registry:
    """Build a :class:`Registry` from already-decoded YAML/JSON data."""

    base = base or Path.cwd()
    if not isinstance(raw, Mapping):
        raise ValueError("Registry file must contain a mapping at the top level")
    errors = sorted(_validator.iter_errors(raw), key=lambda e: [str(part) for part in e.path])
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ValueError(f"Registry schema validation failed: {messages}")
    name = str(raw.get("name") or default_name)
    description = str(raw.get("description", ""))
    target = _parse_target(raw["target"], base)
    cases = _parse_cases(raw["cases"])
    return Registry(name=name, description=description, target=target, cases=cases, path=base)


def _parse_target(raw: Mapping[str, Any], base: Path) -> TargetConfig:
    command_raw = raw.get("command")
    function = raw.get("function")
    if (command_raw is None) == (function is None):
        raise ValueError("target requires exactly one of 'command' or 'function'")
    command = _normalize_command(command_raw) if command_raw is not None else None
    source_raw = raw.get("source")
    if source_raw and not function:
        raise ValueError("target.source is only valid together with target.function")
    source = (base / str(source_raw)).resolve() if source_raw else None
    timeout = raw.get("timeout", DEFAULT_TIMEOUT)
    workdir_raw = raw.get("workdir")
    workdir = (base / str(workdir_raw)).resolve() if workdir_raw else base
    env = {str(k): str(v) for k, v in (raw.get("env") or {}).items()}
    return TargetConfig(
        command=command,
        function=str(function).strip() if function is not None else None,
        source=source,
        timeout=float(timeout) if timeout else None,
        env=env,
        workdir=workdir,
        strip_trailing_newlines=bool(raw.get("strip_trailing_newlines", True)),
    )


def _normalize_command(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        argv = tuple(shlex.split(raw))
    elif isinstance(raw, (list, tuple)):
        argv = tuple(str(part) for part in raw)
    else:
        raise ValueError("target.command must be a string or list")
    if not argv:
        raise ValueError("target.command cannot be empty")
    return argv


def _parse_cases(raw: Any) -> tuple[TestCase, ...]:
    cases: list[TestCase] = []
    seen: Dict[str, int] = {}
    for index, entry in enumerate(raw):
        case_id = str(entry["id"]).strip()
        if not case_id:
            raise ValueError(f"cases/{index}: id cannot be empty")
        if case_id in seen:
            raise ValueError(f"Duplicate case id '{case_id}' (cases/{seen[case_id]} and cases/{index})")
        seen[case_id] = index
        expected_output = entry.get("expected_output")
        files_raw = entry.get("files") or {}
        cases.append(
            TestCase(
                id=case_id,
                category=Category.parse(entry["category"]),
                input=_scalar_to_text(entry.get("input")),
                expected_output=_scalar_to_text(expected_output),
                expected_exit=int(entry.get("expected_exit", 0)),
                match=str(entry.get("match", "exact")),
                description=str(entry.get("description", "")),
                files={str(k): str(v) for k, v in files_raw.items()},
                tags=tuple(str(tag) for tag in entry.get("tags", []) or []),
            )
        )
    return tuple(cases)


def _scalar_to_text(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


REGISTRY_SCHEMA = {
    "type": "object",
    "required": ["target", "cases"],
    "properties": {
        "name": {"type": "string"},
        "description": {"type": "string"},
        "target": {
            "type": "object",
            "properties": {
                "command": {
                    "anyOf": [
                        {"type": "string", "minLength": 1},
                        {"type": "array", "minItems": 1, "items": {"type": ["string", "number"]}},
                    ]
                },
                "function": {"type": "string", "minLength": 1},
                "source": {"type": "string"},
                "timeout": {"type": ["number", "null"], "minimum": 0},
                "env": {"type": "object", "additionalProperties": {"type": ["string", "number", "boolean"]}},
                "workdir": {"type": "string"},
                "strip_trailing_newlines": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "cases": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "category"],
                "properties": {
                    "id": {"type": ["string", "integer"]},
                    "category": {"type": "string", "enum": [c.value for c in Category]},
                    "description": {"type": "string"},
                    "input": {},
                    "expected_output": {"type": ["string", "number", "null"]},
                    "expected_exit": {"type": "integer"},
                    "match": {"type": "string", "enum": list(MATCH_MODES)},
                    "files": {"type": "object", "additionalProperties": {"type": ["string", "number"]}},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
                "additionalProperties": False,
            },
        },
    },
}
_validator = Draft7Validator(REGISTRY_SCHEMA)
