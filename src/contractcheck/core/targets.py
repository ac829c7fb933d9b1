"""Invocation of the command or Python callable under test."""
from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import io
import logging
import os
import shlex
import subprocess
import sys
import time
from contextlib import redirect_stderr, redirect_stdout
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .fixtures import render_value

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

# Shell conventions for statuses that never came from the target itself.
EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127

_FUNCTIONS: Dict[str, Callable[..., Any]] = {}


@dataclass(frozen=True)
class TargetConfig:
    """How to reach the program under test."""

    command: Optional[Tuple[str, ...]] = None
    function: Optional[str] = None
    source: Optional[Path] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    env: Mapping[str, str] = field(default_factory=dict)
    workdir: Path = field(default_factory=Path.cwd)
    strip_trailing_newlines: bool = True

    @property
    def kind(self) -> str:
        return "function" if self.function else "command"

    def label(self) -> str:
        if self.function:
            return self.function
        return shlex.join(self.command or ())


@dataclass(frozen=True)
class Invocation:
    """Observable outcome of one target run."""

    output: str
    exit_code: int
    stderr: str = ""
    timed_out: bool = False
    duration_s: float = 0.0


def register_function(name: str, func: Callable[..., Any]) -> None:
    """Expose ``func`` as a function target under ``name`` (used by plugins)."""

    if not callable(func):
        raise TypeError(f"Function target '{name}' is not callable")
    if name in _FUNCTIONS and _FUNCTIONS[name] is not func:
        raise ValueError(f"Function target '{name}' already registered")
    _FUNCTIONS[name] = func


def invoke(
    target: TargetConfig,
    value: Any = None,
    *,
    tokens: Optional[Mapping[str, str]] = None,
) -> Invocation:
    """Run the target once with the case input ``value``."""

    tokens = tokens or {}
    if target.function:
        func = resolve_callable(target)
        result = call_function(func, render_value(value, tokens))
    else:
        # Split before rendering so token values containing spaces or
        # backslashes stay inside a single argument.
        argv, stdin = build_argv(target.command or (), value)
        argv = render_value(argv, tokens)
        stdin = render_value(stdin, tokens)
        env = os.environ.copy()
        env.update({str(k): render_value(str(v), tokens) for k, v in target.env.items()})
        result = run_command(
            argv,
            stdin=stdin,
            workdir=target.workdir,
            env=env,
            timeout=target.timeout,
        )
    if target.strip_trailing_newlines:
        result = Invocation(
            output=result.output.rstrip("\n"),
            exit_code=result.exit_code,
            stderr=result.stderr,
            timed_out=result.timed_out,
            duration_s=result.duration_s,
        )
    return result


def build_argv(command: Sequence[str], value: Any) -> Tuple[List[str], Optional[str]]:
    """Append the case input to ``command``; returns (argv, stdin)."""

    argv = list(command)
    stdin: Optional[str] = None
    if value is None:
        return argv, stdin
    if isinstance(value, Mapping):
        args = value.get("args")
        if args is not None:
            argv.extend(_as_args(args))
        raw_stdin = value.get("stdin")
        if raw_stdin is not None:
            stdin = str(raw_stdin)
        return argv, stdin
    argv.extend(_as_args(value))
    return argv, stdin


def _as_args(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(part) for part in value]
    return shlex.split(str(value))


def run_command(
    argv: Sequence[str],
    *,
    stdin: Optional[str] = None,
    workdir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> Invocation:
    """Run ``argv`` to completion and capture stdout/stderr and the exit status.

    Launch failures are folded into the exit status the way a shell reports
    them, so callers compare them like any other code.
    """

    start = time.perf_counter()
    logger.debug("running %s (cwd=%s timeout=%s)", shlex.join(argv), workdir, timeout)
    try:
        proc = subprocess.run(
            list(argv),
            input=stdin,
            stdin=subprocess.DEVNULL if stdin is None else None,
            cwd=str(workdir) if workdir else None,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout or None,
        )
    except subprocess.TimeoutExpired as exc:
        logger.info("command %s timed out after %ss", shlex.join(argv), timeout)
        return Invocation(
            output=_decode(exc.stdout),
            exit_code=EXIT_TIMEOUT,
            stderr=_decode(exc.stderr),
            timed_out=True,
            duration_s=time.perf_counter() - start,
        )
    except FileNotFoundError as exc:
        logger.debug("command not found: %s", exc)
        return Invocation(
            output="",
            exit_code=EXIT_NOT_FOUND,
            stderr=str(exc),
            duration_s=time.perf_counter() - start,
        )
    except OSError as exc:
        logger.debug("command could not be executed: %s", exc)
        return Invocation(
            output="",
            exit_code=EXIT_NOT_EXECUTABLE,
            stderr=str(exc),
            duration_s=time.perf_counter() - start,
        )
    return Invocation(
        output=proc.stdout,
        exit_code=proc.returncode,
        stderr=proc.stderr,
        duration_s=time.perf_counter() - start,
    )


def _decode(data: Any) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data)


def call_function(func: Callable[..., Any], value: Any) -> Invocation:
    """Call ``func(value)`` in-process and map its outcome onto an Invocation.

    A ``str`` return is output with exit 0, ``(output, code)`` sets the code,
    ``SystemExit`` carries its code and any other exception exits 1.
    """

    start = time.perf_counter()
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = 0
    output: Optional[str] = None
    try:
        with redirect_stdout(stdout), redirect_stderr(stderr):
            returned = func(value)
    except SystemExit as exc:
        exit_code = _system_exit_code(exc, stderr)
    except Exception as exc:
        logger.debug("function target raised %r", exc)
        stderr.write(f"{type(exc).__name__}: {exc}")
        exit_code = 1
    else:
        if isinstance(returned, tuple) and len(returned) == 2:
            output, exit_code = str(returned[0]), int(returned[1])
        elif returned is not None:
            output = str(returned)
    if output is None:
        output = stdout.getvalue()
    return Invocation(
        output=output,
        exit_code=exit_code,
        stderr=stderr.getvalue(),
        duration_s=time.perf_counter() - start,
    )


def _system_exit_code(exc: SystemExit, stderr: io.StringIO) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    stderr.write(str(code))
    return 1


def resolve_callable(target: TargetConfig) -> Callable[..., Any]:
    name = target.function or ""
    if target.source:
        return load_from_source(target.source, name)
    if name in _FUNCTIONS:
        return _FUNCTIONS[name]
    func = import_string(name)
    if not callable(func):
        raise TypeError(f"Function target '{name}' is not callable")
    return func


def import_string(path: str) -> Any:
    """Return the attribute at the given dotted path.

    Supports ``module:attr`` or ``module.attr`` syntax.
    """

    if not path:
        raise ValueError("Empty import path provided")
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, sep, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Invalid import path '{path}'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise AttributeError(f"Module '{module_name}' has no attribute '{attr}'") from exc


def load_from_source(source: Path, func_name: str) -> Callable[..., Any]:
    """Load a callable named ``func_name`` from a Python file at ``source``."""

    path = source.expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Function source file not found: {path}")
    module_name = f"contractcheck_target_{path.stem}_{hash(str(path)) & 0xFFFF:x}"
    module = sys.modules.get(module_name)
    if module is None:
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Unable to load module from {path}")
        module = importlib.util.module_from_spec(spec)
        loader = spec.loader
        assert isinstance(loader, importlib.machinery.SourceFileLoader)
        sys.modules[module_name] = module
        loader.exec_module(module)
    if not hasattr(module, func_name):
        raise AttributeError(f"Function '{func_name}' not found in {path}")
    func = getattr(module, func_name)
    if not callable(func):
        raise TypeError(f"Attribute '{func_name}' in {path} is not callable")
    return func
