import pathlib
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from cargo_tasks import config
from cargo_tasks.config import Settings, TaskContext, load_context, resolve_root
from cargo_tasks.errors import ToolNotFoundError


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.cargo == "cargo"
        assert settings.fmt_toolchain == "nightly"
        assert settings.rustdocflags == "-D warnings"

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "CARGO_TASKS_CARGO": "/opt/cargo/bin/cargo",
                "CARGO_TASKS_FMT_TOOLCHAIN": "stable",
                "CARGO_TASKS_RUSTDOCFLAGS": "",
                "UNRELATED": "x",
            }
        )
        assert settings.cargo == "/opt/cargo/bin/cargo"
        assert settings.fmt_toolchain == "stable"
        assert settings.rustdocflags == ""

    def test_empty_toolchain_rejected(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"CARGO_TASKS_FMT_TOOLCHAIN": ""})

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.cargo = "other"


class TestResolveRoot:
    def test_explicit_root(self, tmp_path):
        assert resolve_root(tmp_path, environ={}) == tmp_path.resolve()

    def test_env_root(self, tmp_path):
        environ = {config.ROOT_ENV: str(tmp_path)}
        assert resolve_root(None, environ=environ) == tmp_path.resolve()

    def test_invalid_root(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            resolve_root(tmp_path / "missing", environ={})

    def test_defaults_to_entry_point_dir(self, tmp_path):
        script = tmp_path / "x.py"
        script.write_text("")
        (tmp_path / "Cargo.toml").write_text("")
        with patch("sys.argv", [str(script)]):
            assert resolve_root(None, environ={}) == tmp_path.resolve()

    def test_entry_point_dir_relative_script(self, tmp_path, monkeypatch):
        (tmp_path / "crate").mkdir()
        (tmp_path / "crate" / "x.py").write_text("")
        (tmp_path / "crate" / "Cargo.toml").write_text("")
        monkeypatch.chdir(tmp_path)
        assert config.entry_point_dir("crate/x.py") == (tmp_path / "crate").resolve()

    def test_entry_point_dir_without_script(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert config.entry_point_dir("") == pathlib.Path.cwd()

    def test_console_script_uses_cwd(self, tmp_path, monkeypatch):
        bin_dir = tmp_path / "venv" / "bin"
        bin_dir.mkdir(parents=True)
        script = bin_dir / "cargo-tasks"
        script.write_text("")
        crate = tmp_path / "crate"
        crate.mkdir()
        monkeypatch.chdir(crate)
        assert config.entry_point_dir(str(script)) == pathlib.Path.cwd()


class TestLoadContext:
    @patch("cargo_tasks.utils.which")
    def test_missing_tool(self, mock_which, tmp_path):
        mock_which.return_value = None
        with pytest.raises(ToolNotFoundError) as exc_info:
            load_context(tmp_path, settings=Settings())
        assert exc_info.value.tool == "cargo"
        mock_which.assert_called_once_with("cargo")

    @patch("cargo_tasks.utils.which")
    def test_missing_tool_checked_before_root(self, mock_which, tmp_path):
        mock_which.return_value = None
        with pytest.raises(ToolNotFoundError):
            load_context(tmp_path / "missing", settings=Settings())

    @patch("cargo_tasks.utils.which")
    def test_context(self, mock_which, tmp_path):
        cargo = tmp_path / "cargo"
        mock_which.return_value = cargo
        context = load_context(tmp_path, settings=Settings(fmt_toolchain="beta"))
        assert context == TaskContext(
            root=tmp_path.resolve(),
            cargo=cargo,
            settings=Settings(fmt_toolchain="beta"),
        )

    @patch("cargo_tasks.utils.which")
    def test_custom_cargo(self, mock_which, tmp_path):
        mock_which.return_value = tmp_path / "my-cargo"
        load_context(tmp_path, settings=Settings(cargo="my-cargo"))
        mock_which.assert_called_once_with("my-cargo")
