"""Contract registry loading and authoring checks."""

from .lint import LintIssue, lint_registry
from .loader import DEFAULT_REGISTRY, load_registry, parse_registry
from .models import Registry

__all__ = [
    "DEFAULT_REGISTRY",
    "LintIssue",
    "Registry",
    "lint_registry",
    "load_registry",
    "parse_registry",
]
