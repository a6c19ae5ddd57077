"""Tests for ProjSettings: unified settings with TOML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from projctl.config.settings import ProjSettings, find_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PROJCTL_CONFIG", "PROJCTL_ROOT", "PROJCTL_QUIET", "PROJCTL_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


class TestProjSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = ProjSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.workspace.path == "."
        assert settings.workspace_path == tmp_path.resolve()
        assert settings.plugins.builtins is True
        assert settings.plugins.disabled == []
        assert settings.local_plugin_dir == tmp_path.resolve() / ".projctl" / "plugins"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = ProjSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_cli_flags(self, tmp_path: Path) -> None:
        settings = ProjSettings.from_cli(root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "projctl.toml").write_text(
            '[workspace]\npath = "src"\n[plugins]\ndisabled = ["git-builtin"]\n'
        )
        settings = ProjSettings.from_cli(root=tmp_path)
        assert settings.workspace.path == "src"
        assert settings.workspace_path == (tmp_path / "src").resolve()
        assert settings.plugins.disabled == ["git-builtin"]
        assert settings.plugins.builtins is True

    def test_root_defaults_to_config_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "projctl.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        settings = ProjSettings.from_cli()

        assert settings.config_path == (tmp_path / "projctl.toml").resolve()
        assert settings.root.resolve() == tmp_path.resolve()

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[plugins]\nlocal_dir = "plugins"\n')
        settings = ProjSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.config_path == custom
        assert settings.local_plugin_dir == tmp_path.resolve() / "plugins"

    def test_invalid_toml_raises_click_exception(self, tmp_path: Path) -> None:
        (tmp_path / "projctl.toml").write_text("[workspace\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            ProjSettings.from_cli(root=tmp_path)

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "projctl.toml").write_text('[workspace]\npath = "src"\n')
        monkeypatch.setenv("PROJCTL_WORKSPACE__PATH", "other")
        settings = ProjSettings.from_cli(root=tmp_path)
        assert settings.workspace.path == "other"


class TestFindConfig:
    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "projctl.toml").write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "projctl.toml").resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "elsewhere.toml"
        config.write_text("")
        monkeypatch.setenv("PROJCTL_CONFIG", str(config))
        assert find_config(tmp_path) == config

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROJCTL_CONFIG", str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None
