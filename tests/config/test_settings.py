"""Tests for WizSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from grpcwiz.config.models import DEFAULT_MARKER_PATTERNS
from grpcwiz.config.settings import WizSettings


class TestWizSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.no_interact is False
        assert settings.generate.namespace is None
        assert settings.generate.proto_file == "wire.proto"
        assert settings.sources.models_dir is None
        assert settings.sources.marker_patterns == DEFAULT_MARKER_PATTERNS
        assert settings.versions.resolve is False

    def test_frozen(self, tmp_path: Path) -> None:
        settings = WizSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_cli_flags(self, tmp_path: Path) -> None:
        settings = WizSettings.from_cli(project_root=tmp_path, json_output=True, verbose=True)
        assert settings.json_output is True
        assert settings.verbose is True


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "grpcwiz.toml").write_text(
            '[generate]\nnamespace = "acme.rpc"\n[sources]\nmodels_dir = "src/models"\n'
        )
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.generate.namespace == "acme.rpc"
        assert settings.sources.models_dir == "src/models"
        assert settings.generate.proto_file == "wire.proto"  # default preserved

    def test_empty_toml_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "grpcwiz.toml").write_text("")
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.versions.packages == ("grpcio", "grpcio-tools", "protobuf")

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[generate]\nproto_file = "api.proto"\n')
        settings = WizSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.generate.proto_file == "api.proto"
        assert settings.config_path == custom

    def test_project_root_from_config_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "grpcwiz.toml").write_text("")
        child = tmp_path / "src" / "pkg"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)
        settings = WizSettings.from_cli()
        assert settings.project_root == tmp_path.resolve()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "grpcwiz.toml").write_text("[generate\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            WizSettings.from_cli(project_root=tmp_path)


    def test_pyproject_tool_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.grpcwiz]\njson_output = true\n\n[tool.grpcwiz.generate]\nproto_file = "api.proto"\n'
        )
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.generate.proto_file == "api.proto"
        assert settings.json_output is False


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "grpcwiz.toml").write_text('[generate]\nnamespace = "from_toml"\n')
        monkeypatch.setenv("GRPCWIZ_GENERATE__NAMESPACE", "from_env")
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.generate.namespace == "from_env"

    def test_cli_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GRPCWIZ_QUIET", "false")
        settings = WizSettings.from_cli(project_root=tmp_path, quiet=True)
        assert settings.quiet is True


class TestResolvePath:
    def test_relative(self, tmp_path: Path) -> None:
        settings = WizSettings.from_cli(project_root=tmp_path)
        assert settings.resolve_path("gen/out") == tmp_path / "gen" / "out"

    def test_absolute(self, tmp_path: Path) -> None:
        settings = WizSettings.from_cli(project_root=tmp_path)
        target = tmp_path.parent / "elsewhere"
        assert settings.resolve_path(target) == target
