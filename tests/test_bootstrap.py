from __future__ import annotations

from pathlib import Path

import contractcheck
from contractcheck.core.targets import TargetConfig, invoke


def test_plugins_register_function_targets(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "cc_plugin_upper.py").write_text(
        "from contractcheck.core.targets import register_function\n"
        "\n"
        "def register():\n"
        "    register_function('plugin.upper', lambda value: value.upper())\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv("CONTRACTCHECK_PLUGINS", " cc_plugin_upper , ")
    monkeypatch.setattr(contractcheck, "_BOOTSTRAPPED", False)
    contractcheck.bootstrap()
    assert invoke(TargetConfig(function="plugin.upper"), "abc").output == "ABC"
    contractcheck.bootstrap()
