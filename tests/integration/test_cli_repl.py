from __future__ import annotations

import io
import json
import os
import subprocess
import sys
from pathlib import Path

from folioterm import cli
from folioterm.storage import FileStore

BANNER = 'Welcome to the terminal. Type "help" to see available commands.'


class ScriptedInput:
    def __init__(self, lines: list[str]) -> None:
        self.pending = list(lines)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.pending:
            raise EOFError
        return self.pending.pop(0)


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text("reboot_delay_seconds = 0\nexit_delay_seconds = 0\n", encoding="utf-8")
    return path


def _run(tmp_path: Path, lines: list[str], *extra: str, **kwargs) -> tuple[int, list[str], ScriptedInput]:
    scripted = ScriptedInput(lines)
    output = io.StringIO()
    code = cli.main(
        [
            "--config",
            str(_write_config(tmp_path)),
            "--state-dir",
            str(tmp_path / "state"),
            "--log-file",
            str(tmp_path / "folioterm.log"),
            *extra,
        ],
        input_func=scripted,
        output=output,
        **kwargs,
    )
    return code, output.getvalue().splitlines(), scripted


def test_repl_prints_banner_and_command_output(tmp_path: Path) -> None:
    code, lines, scripted = _run(tmp_path, ["echo hello", "pwd"])

    assert code == 0
    assert lines[0] == BANNER
    assert "hello" in lines
    assert "/" in lines
    assert "guest@portfolio:/$ echo hello" not in lines
    assert scripted.prompts[0] == "guest@portfolio:/$ "


def test_exit_command_ends_session(tmp_path: Path) -> None:
    code, lines, scripted = _run(tmp_path, ["exit", "echo never"])

    assert code == 0
    assert "Closing terminal…" in lines
    assert "never" not in lines
    assert scripted.pending == ["echo never"]


def test_reboot_remounts_with_restored_history(tmp_path: Path) -> None:
    code, lines, _ = _run(tmp_path, ["echo one", "reboot", "pwd"])

    assert code == 0
    assert lines.count(BANNER) == 2
    assert "guest@portfolio:/$ echo one" in lines
    assert lines.index("guest@portfolio:/$ echo one") > lines.index("Rebooting…")
    assert FileStore(tmp_path / "state").get("terminal-session") is None


def test_su_reads_password_without_echo(tmp_path: Path) -> None:
    secrets = ScriptedInput(["toor"])
    code, lines, scripted = _run(tmp_path, ["sudo su", "logout"], secret_input_func=secrets)

    assert code == 0
    assert secrets.prompts == ["Password: "]
    assert "Authentication successful. You are now root." in lines
    assert "root@portfolio:/# " in scripted.prompts
    assert "Logged out of root." in lines


def test_blog_remounts_on_blog_route(tmp_path: Path) -> None:
    code, lines, scripted = _run(tmp_path, ["blog", "pwd"])

    assert code == 0
    assert "Opening blog at /blog …" in lines
    assert "guest@portfolio:/blog$ " in scripted.prompts
    assert lines[-1] == ""
    assert "/blog" in lines
    assert FileStore(tmp_path / "state").get("terminal-session") is None


def test_clear_emits_form_feed_and_only_later_output(tmp_path: Path) -> None:
    output = io.StringIO()
    code = cli.main(
        [
            "--config",
            str(_write_config(tmp_path)),
            "--state-dir",
            str(tmp_path / "state"),
            "--log-file",
            str(tmp_path / "folioterm.log"),
        ],
        input_func=ScriptedInput(["echo one", "clear", "echo two"]),
        output=output,
    )

    assert code == 0
    before, sep, after = output.getvalue().partition("\f")
    assert sep == "\f"
    assert "one" in before.splitlines()
    assert after.splitlines()[0] == "two"
    assert "one" not in after.splitlines()


def test_whoami_and_github_use_injected_collaborators(tmp_path: Path) -> None:
    opened: list[str] = []

    async def lookup(url: str) -> str:
        return "198.51.100.4"

    code, lines, _ = _run(
        tmp_path,
        ["whoami", "github"],
        ip_lookup=lookup,
        url_opener=opened.append,
    )

    assert code == 0
    assert "IP address: 198.51.100.4" in lines
    assert "Checking…" not in lines
    assert opened == ["https://github.com"]


def test_fresh_flag_discards_saved_session(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "state")
    store.set(
        "terminal-session",
        json.dumps(
            {
                "version": 1,
                "history": [{"id": 9, "type": "output", "content": "from before"}],
                "commands": ["echo from before"],
                "is_root": False,
                "geometry": {"x": 0, "y": 0, "width": 800, "height": 500},
                "restore": True,
                "reopen": False,
            }
        ),
    )

    code, lines, _ = _run(tmp_path, [], "--fresh")

    assert code == 0
    assert "from before" not in lines


def test_saved_session_is_restored_without_fresh(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "state")
    store.set(
        "terminal-session",
        json.dumps(
            {
                "version": 1,
                "history": [{"id": 9, "type": "output", "content": "from before"}],
                "commands": ["echo from before"],
                "is_root": False,
                "geometry": {"x": 0, "y": 0, "width": 800, "height": 500},
                "restore": True,
            }
        ),
    )

    code, lines, _ = _run(tmp_path, [])

    assert code == 0
    assert lines[:2] == [BANNER, "from before"]


def _env_for(tmp_path: Path) -> dict[str, str]:
    env = dict(os.environ)
    existing = env.get("PYTHONPATH", "")
    src_path = str(Path("src").resolve())
    env["PYTHONPATH"] = f"{src_path}{os.pathsep}{existing}" if existing else src_path
    env["HOME"] = str(tmp_path)
    env.pop("FOLIOTERM_ROOT_PASSWORD", None)
    env["PYTHONIOENCODING"] = "utf-8"
    return env


def test_cli_module_reports_invalid_args_via_exit_code(tmp_path: Path) -> None:
    completed = subprocess.run(
        [sys.executable, "-m", "folioterm", "--viewport", "big", "--log-file", str(tmp_path / "ft.log")],
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=False,
        env=_env_for(tmp_path),
    )

    assert completed.returncode == 2
    assert "--viewport must look like WIDTHxHEIGHT" in completed.stderr


def test_cli_module_runs_repl_over_stdin(tmp_path: Path) -> None:
    completed = subprocess.run(
        [
            sys.executable,
            "-m",
            "folioterm",
            "--state-dir",
            str(tmp_path / "state"),
            "--log-level",
            "warning",
            "--log-file",
            str(tmp_path / "ft.log"),
        ],
        input="echo hi\nexit\n",
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=False,
        env=_env_for(tmp_path),
    )

    assert completed.returncode == 0
    assert "hi" in completed.stdout.splitlines() or "guest@portfolio:/$ hi" in completed.stdout
    assert "Closing terminal…" in completed.stdout
