from __future__ import annotations

import dataclasses
import sys
import textwrap
from pathlib import Path

import pytest

from contractcheck.core.targets import (
    EXIT_TIMEOUT,
    TargetConfig,
    build_argv,
    call_function,
    import_string,
    invoke,
    load_from_source,
    register_function,
    resolve_callable,
)


def test_build_argv_splits_strings_like_a_shell() -> None:
    argv, stdin = build_argv(("tool",), "--name 'Ada Lovelace'")
    assert argv == ["tool", "--name", "Ada Lovelace"]
    assert stdin is None


def test_build_argv_accepts_lists_and_mappings() -> None:
    assert build_argv(("tool",), ["a b", 3]) == (["tool", "a b", "3"], None)
    assert build_argv(("tool",), {"args": "-v", "stdin": "data"}) == (["tool", "-v"], "data")
    assert build_argv(("tool",), None) == (["tool"], None)


def test_invoke_command_captures_stdout_and_strips_trailing_newlines(echo_target: TargetConfig) -> None:
    result = invoke(echo_target, "hi there")
    assert result.output == "hi there"
    assert result.exit_code == 0


def test_invoke_keeps_trailing_newlines_when_disabled(echo_target: TargetConfig) -> None:
    target = dataclasses.replace(echo_target, strip_trailing_newlines=False)
    assert invoke(target, "hi").output == "hi\n"


def test_invoke_passes_stdin(echo_target: TargetConfig) -> None:
    result = invoke(echo_target, {"stdin": "from stdin\n\n"})
    assert result.output == "from stdin"


def test_invoke_reports_exit_code(echo_target: TargetConfig) -> None:
    result = invoke(echo_target, ["--exit", "3", "boom"])
    assert result.exit_code == 3
    assert result.output == "boom"


def test_invoke_renders_env_tokens(echo_target: TargetConfig) -> None:
    target = dataclasses.replace(echo_target, env={"WHERE": "{tmpdir}/x"})
    result = invoke(target, ["--env", "WHERE"], tokens={"tmpdir": "/scratch"})
    assert result.output == "/scratch/x"


def test_invoke_splits_input_before_rendering_tokens(echo_target: TargetConfig, tmp_path: Path) -> None:
    spaced = tmp_path / "with space"
    spaced.mkdir()
    (spaced / "data.txt").write_text("payload", encoding="utf-8")
    result = invoke(echo_target, "--cat {casedir}/data.txt", tokens={"casedir": str(spaced)})
    assert (result.exit_code, result.output) == (0, "payload")


def test_invoke_renders_python_token_in_command(echo_script: Path, tmp_path: Path) -> None:
    target = TargetConfig(command=("{python}", str(echo_script)), workdir=tmp_path, timeout=30)
    tokens = {"tmpdir": str(tmp_path), "casedir": str(tmp_path), "python": sys.executable}
    assert invoke(target, "hi", tokens=tokens).output == "hi"


def test_invoke_timeout_yields_timeout_code(echo_target: TargetConfig) -> None:
    target = dataclasses.replace(echo_target, timeout=0.5)
    result = invoke(target, ["--sleep", "10"])
    assert result.timed_out
    assert result.exit_code == EXIT_TIMEOUT


def test_call_function_return_conventions() -> None:
    assert call_function(lambda value: value.upper(), "abc").output == "ABC"
    pair = call_function(lambda value: ("partial", 4), None)
    assert (pair.output, pair.exit_code) == ("partial", 4)


def test_call_function_uses_printed_output_when_nothing_returned() -> None:
    result = call_function(lambda value: print(f"got {value}"), "x")
    assert result.output == "got x\n"
    assert result.exit_code == 0


def test_call_function_maps_exceptions_to_exit_codes() -> None:
    def exits(_value):
        raise SystemExit(5)

    def message_exit(_value):
        raise SystemExit("usage: tool NAME")

    def crashes(_value):
        raise ValueError("bad input")

    assert call_function(exits, None).exit_code == 5
    result = call_function(message_exit, None)
    assert result.exit_code == 1
    assert result.stderr == "usage: tool NAME"
    crashed = call_function(crashes, None)
    assert crashed.exit_code == 1
    assert "ValueError: bad input" in crashed.stderr


def test_import_string_supports_colon_and_dot() -> None:
    assert import_string("textwrap:dedent") is textwrap.dedent
    assert import_string("textwrap.dedent") is textwrap.dedent
    with pytest.raises(ValueError):
        import_string("nodots")


def test_load_from_source(tmp_path: Path) -> None:
    source = tmp_path / "impl.py"
    source.write_text("def shout(value):\n    return value.upper() + '!'\n", encoding="utf-8")
    func = load_from_source(source, "shout")
    assert func("hey") == "HEY!"
    with pytest.raises(AttributeError):
        load_from_source(source, "missing")
    with pytest.raises(FileNotFoundError):
        load_from_source(tmp_path / "nope.py", "shout")


def test_registered_function_targets_resolve_by_name() -> None:
    def reverse(value):
        return value[::-1]

    register_function("tests.reverse", reverse)
    register_function("tests.reverse", reverse)
    target = TargetConfig(function="tests.reverse")
    assert resolve_callable(target) is reverse
    assert invoke(target, "abc").output == "cba"
    with pytest.raises(ValueError):
        register_function("tests.reverse", lambda value: value)


def test_invoke_function_from_source_file(tmp_path: Path) -> None:
    source = tmp_path / "impl.py"
    source.write_text("def double(value):\n    return value * 2\n", encoding="utf-8")
    target = TargetConfig(function="double", source=source)
    assert invoke(target, "ab").output == "abab"


def test_command_target_uses_workdir(tmp_path: Path) -> None:
    (tmp_path / "data.txt").write_text("local file\n", encoding="utf-8")
    target = TargetConfig(
        command=(sys.executable, "-c", "print(open('data.txt').read().strip())"),
        workdir=tmp_path,
    )
    assert invoke(target).output == "local file"
