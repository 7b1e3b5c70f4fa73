from __future__ import annotations

import io
from contextlib import redirect_stderr
from pathlib import Path

import pytest

from folioterm import cli
from folioterm.errors import ExitCode
from folioterm.window import Viewport


def _base_args(tmp_path: Path) -> list[str]:
    return [
        "--config",
        str(tmp_path / "missing.toml"),
        "--state-dir",
        str(tmp_path / "state"),
        "--log-file",
        str(tmp_path / "folioterm.log"),
    ]


def _no_input(prompt: str) -> str:
    raise EOFError


def test_cli_help_includes_public_flags() -> None:
    help_text = cli.build_parser().format_help()

    for flag in ("--config", "--state-dir", "--path", "--viewport", "--fresh", "--log-level", "--log-file"):
        assert flag in help_text


def test_parse_args_defaults() -> None:
    namespace = cli.parse_args([])

    assert namespace.path == "/"
    assert namespace.viewport == cli.DEFAULT_VIEWPORT
    assert namespace.log_level == "INFO"
    assert namespace.fresh is False


def test_viewport_flag_is_parsed() -> None:
    namespace = cli.parse_args(["--viewport", "375X667"])

    assert namespace.viewport == Viewport(375, 667)


@pytest.mark.parametrize("value", ["wide", "100", "0x400", "axb"])
def test_invalid_viewport_returns_usage_error(value: str) -> None:
    with redirect_stderr(io.StringIO()):
        code = cli.main(["--viewport", value])

    assert code == 2


def test_invalid_log_level_returns_usage_error() -> None:
    with redirect_stderr(io.StringIO()):
        code = cli.main(["--log-level", "verbose"])

    assert code == 2


def test_warning_alias_for_log_level_is_accepted(tmp_path: Path) -> None:
    code = cli.main(
        [*_base_args(tmp_path), "--log-level", "warning"],
        input_func=_no_input,
        output=io.StringIO(),
    )

    assert code == 0


def test_unknown_start_route_is_validation_error(tmp_path: Path) -> None:
    stream = io.StringIO()
    with redirect_stderr(stream):
        code = cli.main([*_base_args(tmp_path), "--path", "/nowhere"], input_func=_no_input)

    assert code == int(ExitCode.VALIDATION_ERROR)
    assert "Unknown start route" in stream.getvalue()
    assert "Next step" in stream.getvalue()


def test_unreadable_state_is_storage_error(tmp_path: Path) -> None:
    state_dir = tmp_path / "state"
    (state_dir / "store.json").mkdir(parents=True)

    stream = io.StringIO()
    with redirect_stderr(stream):
        code = cli.main([*_base_args(tmp_path), "--fresh"], input_func=_no_input)

    assert code == int(ExitCode.STORAGE_ERROR)


def test_local_host_info_reads_language(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANG", "de_DE.UTF-8")

    info = cli.local_host_info()

    assert info.language == "de-DE"
    assert info.user_agent.startswith("folioterm/")
