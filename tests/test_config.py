"""Tests for configuration loading."""

from pathlib import Path

import pytest
import typer

from serveradmin.core.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    Settings,
    load_settings,
    resolve_config_path,
)


def test_defaults():
    settings = Settings()
    assert settings.passwd_file == Path("/etc/passwd")
    assert settings.default_shell == "/bin/bash"
    assert settings.protected_users == ["root", "ubuntu"]
    assert settings.admin_groups == ["sudo", "adm", "dialout", "cdrom", "dip", "video", "plugdev"]
    assert settings.nginx.sites_enabled == Path("/etc/nginx/sites-enabled")
    assert settings.portainer.default_port == 9000
    assert settings.portainer.max_port_attempts == 3


def test_resolve_order(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    assert resolve_config_path() == DEFAULT_CONFIG_FILE

    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yml"))
    assert resolve_config_path() == tmp_path / "env.yml"
    assert resolve_config_path(tmp_path / "explicit.yml") == tmp_path / "explicit.yml"


def test_load_partial_yaml(tmp_path):
    config = tmp_path / "config.yml"
    config.write_text(
        "home_base: /srv/home\n"
        "nginx:\n"
        "  cert_days: 30\n"
        "portainer:\n"
        "  default_port: 9443\n"
    )

    settings = load_settings(config)

    assert settings.home_base == Path("/srv/home")
    assert settings.nginx.cert_days == 30
    assert settings.nginx.sites_available == Path("/etc/nginx/sites-available")
    assert settings.portainer.default_port == 9443


def test_empty_file_means_defaults(tmp_path):
    config = tmp_path / "config.yml"
    config.write_text("")
    assert load_settings(config) == Settings()


def test_missing_default_file_means_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "absent.yml"))
    assert load_settings() == Settings()


def test_missing_explicit_file_exits(tmp_path):
    with pytest.raises(typer.Exit):
        load_settings(tmp_path / "absent.yml")


@pytest.mark.parametrize("content", [
    "nginx: [unclosed\n",
    "- just\n- a list\n",
    "default_shell: bash\n",
    "portainer:\n  default_port: 70000\n",
])
def test_invalid_config_exits(tmp_path, content):
    config = tmp_path / "config.yml"
    config.write_text(content)
    with pytest.raises(typer.Exit):
        load_settings(config)
