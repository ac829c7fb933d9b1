import sys
import textwrap
from pathlib import Path

import pytest

from contractcheck.core.targets import TargetConfig


ECHO_SCRIPT = textwrap.dedent(
    """
    import os
    import sys

    args = sys.argv[1:]
    if args and args[0] == "--exit":
        code = int(args[1])
        print(" ".join(args[2:]))
        raise SystemExit(code)
    if args and args[0] == "--env":
        print(os.environ.get(args[1], ""))
        raise SystemExit(0)
    if args and args[0] == "--cat":
        with open(args[1], encoding="utf-8") as handle:
            sys.stdout.write(handle.read())
        raise SystemExit(0)
    if args and args[0] == "--sleep":
        import time
        time.sleep(float(args[1]))
    print(" ".join(args) if args else sys.stdin.read(), end="" if not args else "\\n")
    """
)


@pytest.fixture
def echo_script(tmp_path: Path) -> Path:
    """A tiny CLI used as the program under test."""

    script = tmp_path / "echo_tool.py"
    script.write_text(ECHO_SCRIPT, encoding="utf-8")
    return script


@pytest.fixture
def echo_target(echo_script: Path) -> TargetConfig:
    return TargetConfig(command=(sys.executable, str(echo_script)), workdir=echo_script.parent, timeout=30)
