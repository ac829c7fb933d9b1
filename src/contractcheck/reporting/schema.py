"""JSON schema definition for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

JSON_SCHEMA_V1 = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "contractcheck report",
    "type": "object",
    "required": ["schema_version", "generated_at", "registry", "summary", "cases"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "registry": {"type": "string"},
        "summary": {
            "type": "object",
            "required": ["total", "passed", "failed", "duration_s"],
            "properties": {
                "total": {"type": "integer", "minimum": 0},
                "passed": {"type": "integer", "minimum": 0},
                "failed": {"type": "integer", "minimum": 0},
                "duration_s": {"type": "number"},
            },
        },
        "cases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "category", "passed", "message", "duration_ms"],
                "properties": {
                    "id": {"type": "string"},
                    "category": {"type": ["string", "null"]},
                    "passed": {"type": "boolean"},
                    "message": {"type": "string"},
                    "duration_ms": {"type": "number"},
                    "exit_code": {"type": ["integer", "null"]},
                    "output": {"type": ["string", "null"]},
                },
            },
        },
    },
}
