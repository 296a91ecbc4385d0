from __future__ import annotations

from pathlib import Path

import pytest

from prologixctl.core.config import Settings, config_path, load_settings
from prologixctl.core.errors import ConfigError


def _write_settings(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def config_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    return tmp_path / "cfg"


def test_missing_file_gives_defaults(config_home: Path) -> None:
    assert config_path() == config_home / "prologixctl" / "config.yaml"
    assert load_settings() == Settings()


def test_settings_file_overrides_defaults(config_home: Path) -> None:
    _write_settings(
        config_home / "prologixctl" / "config.yaml",
        """
discover_timeout_s: 1.5
port: 13040
broadcast_address: 192.168.1.255
output_format: yaml
""",
    )

    settings = load_settings()
    assert settings.discover_timeout_s == 1.5
    assert settings.port == 13040
    assert settings.broadcast_address == "192.168.1.255"
    assert settings.output_format == "yaml"


def test_empty_file_gives_defaults(config_home: Path) -> None:
    _write_settings(config_home / "prologixctl" / "config.yaml", "")
    assert load_settings() == Settings()


@pytest.mark.parametrize(
    "content",
    [
        "unknown_key: 1\n",
        "port: 70000\n",
        "discover_timeout_s: -1\n",
        "output_format: xml\n",
        "broadcast_address: not-an-ip\n",
        "- just\n- a list\n",
        "port: [unclosed\n",
        "port: 3040\nport: 3041\n",
    ],
)
def test_invalid_settings_rejected(config_home: Path, content: str) -> None:
    _write_settings(config_home / "prologixctl" / "config.yaml", content)
    with pytest.raises(ConfigError):
        load_settings()


def test_explicit_path(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    _write_settings(path, "port: 4000\n")
    assert load_settings(path).port == 4000


def test_broadcast_address_format_is_checked_by_schema(config_home: Path) -> None:
    _write_settings(config_home / "prologixctl" / "config.yaml", "broadcast_address: 300.1.1.1\n")
    with pytest.raises(ConfigError) as exc:
        load_settings()
    assert "(broadcast_address)" in str(exc.value)
