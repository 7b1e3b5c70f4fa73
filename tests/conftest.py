from __future__ import annotations

from pathlib import Path

import pytest

from folioterm.config import TerminalConfig
from folioterm.shell import HostInfo, ShellContext


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def _no_root_password_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FOLIOTERM_ROOT_PASSWORD", raising=False)


@pytest.fixture
def config() -> TerminalConfig:
    return TerminalConfig(reboot_delay_seconds=0, exit_delay_seconds=0)


@pytest.fixture
def host_info() -> HostInfo:
    return HostInfo(platform="Linux", user_agent="pytest-agent", language="en-US")


@pytest.fixture
def context(config: TerminalConfig, host_info: HostInfo) -> ShellContext:
    return ShellContext(config=config, current_path="/", host_info=host_info)
