"""Core models and helpers exposed at the package level."""
from .assertions import Tally, Verifier
from .models import Category, RunSummary, TestCase, TestResult
from .targets import Invocation, TargetConfig

__all__ = [
    "Category",
    "Invocation",
    "RunSummary",
    "Tally",
    "TargetConfig",
    "TestCase",
    "TestResult",
    "Verifier",
]
