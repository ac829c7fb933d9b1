"""Scoped temporary workspace and token rendering for case fixtures."""
from __future__ import annotations

import atexit
import logging
import shutil
import signal
import sys
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping

logger = logging.getLogger(__name__)

TOKEN_NAMES = ("tmpdir", "casedir", "python")

_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig is not None
)


@contextmanager
def scoped_workspace(prefix: str = "contractcheck-") -> Iterator[Path]:
    """Yield a fresh private directory that is removed on every exit path.

    Cleanup is registered before the directory is handed out: an ``atexit``
    hook covers interpreter shutdown and SIGTERM/SIGHUP unwind the body so
    the ``finally`` block runs on termination too. The signal surfaces to the
    caller as ``SystemExit(128 + signum)`` once the directory is gone.
    """

    root = Path(tempfile.mkdtemp(prefix=prefix))
    cleanup = _Cleanup(root)
    atexit.register(cleanup)
    previous = _install_signal_handlers()
    logger.debug("created workspace %s", root)
    try:
        yield root
    except Terminated as exc:
        raise SystemExit(exc.code) from None
    finally:
        _restore_signal_handlers(previous)
        cleanup()
        atexit.unregister(cleanup)


class _Cleanup:
    def __init__(self, root: Path) -> None:
        self._root = root

    def __call__(self) -> None:
        if self._root.exists():
            shutil.rmtree(self._root, ignore_errors=True)
            logger.debug("removed workspace %s", self._root)


class Terminated(BaseException):
    """Unwinds a workspace body on SIGTERM/SIGHUP.

    Derives from ``BaseException`` only, so ``except Exception`` and
    ``except SystemExit`` in target code let it through.
    """

    def __init__(self, signum: int) -> None:
        super().__init__(signum)
        self.signum = signum
        self.code = 128 + signum


def _raise_exit(signum: int, _frame: Any) -> None:
    raise Terminated(signum)


def _install_signal_handlers() -> Dict[int, Any]:
    if threading.current_thread() is not threading.main_thread():
        return {}
    previous: Dict[int, Any] = {}
    for sig in _SIGNALS:
        previous[sig] = signal.signal(sig, _raise_exit)
    return previous


def _restore_signal_handlers(previous: Mapping[int, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def case_directory(workspace: Path, case_id: str) -> Path:
    """Create the fixture directory for one case inside ``workspace``."""

    safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in case_id).strip(".") or "case"
    path = workspace / safe
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_files(directory: Path, files: Mapping[str, str], tokens: Mapping[str, str]) -> None:
    """Write fixture ``files`` (relative path -> content) under ``directory``."""

    base = directory.resolve()
    for name, content in files.items():
        target = (base / name).resolve()
        if base != target and base not in target.parents:
            raise ValueError(f"Fixture path '{name}' escapes the case directory")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(render_value(str(content), tokens), encoding="utf-8")


def build_tokens(workspace: Path, case_dir: Path) -> Dict[str, str]:
    # {python} is the running interpreter, for registries that launch scripts.
    return {"tmpdir": str(workspace), "casedir": str(case_dir), "python": sys.executable}


def render_value(value: Any, tokens: Mapping[str, str]) -> Any:
    """Replace ``{name}`` tokens literally inside strings, lists and mappings."""

    if not tokens or value is None:
        return value
    if isinstance(value, str):
        for name, replacement in tokens.items():
            value = value.replace("{" + name + "}", replacement)
        return value
    if isinstance(value, Mapping):
        return {key: render_value(item, tokens) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(render_value(item, tokens) for item in value)
    return value
