"""Tests for interpreter, model and tool root resolution."""

from pathlib import Path

import pytest

from aikocanary.core.asr import CanaryEnvironment


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


class TestInterpreterPath:
    def test_override_wins(self, home):
        env = CanaryEnvironment(env={"CANARY_MLX_PYTHON": "/env/python"}, home=home)
        assert env.resolve_interpreter_path("/explicit/python") == Path("/explicit/python")

    def test_override_is_not_checked_for_existence(self, home):
        env = CanaryEnvironment(env={}, home=home)
        assert env.resolve_interpreter_path(Path("/nope")) == Path("/nope")

    def test_env_var_used_without_override(self, home):
        env = CanaryEnvironment(env={"CANARY_MLX_PYTHON": "/env/python"}, home=home)
        assert env.resolve_interpreter_path(None) == Path("/env/python")

    def test_default_convention(self, home):
        env = CanaryEnvironment(env={}, home=home)
        assert env.resolve_interpreter_path() == home / "canary-mlx/.venv/bin/python"

    def test_empty_env_var_is_ignored(self, home):
        env = CanaryEnvironment(env={"CANARY_MLX_PYTHON": ""}, home=home)
        assert env.resolve_interpreter_path() == home / "canary-mlx/.venv/bin/python"


class TestModelPath:
    def test_override_wins(self, home):
        env = CanaryEnvironment(env={"CANARY_MODEL": "/env/model"}, home=home)
        assert env.resolve_model_path("/explicit/model") == Path("/explicit/model")

    def test_env_var_used_without_override(self, home):
        env = CanaryEnvironment(env={"CANARY_MODEL": "/env/model"}, home=home)
        assert env.resolve_model_path(None) == Path("/env/model")

    def test_default_convention(self, home):
        env = CanaryEnvironment(env={}, home=home)
        assert env.resolve_model_path() == home / "canary-mlx/canary-1b-v2-mlx"


class TestToolRoot:
    def test_override_wins(self, home):
        env = CanaryEnvironment(env={"CANARY_MLX_ROOT": "/env/root"}, home=home)
        assert env.resolve_tool_root("/explicit/root") == Path("/explicit/root")

    def test_env_var_used_without_override(self, home):
        env = CanaryEnvironment(env={"CANARY_MLX_ROOT": "/env/root"}, home=home)
        assert env.resolve_tool_root(None) == Path("/env/root")

    def test_default_when_directory_exists(self, home):
        (home / "canary-mlx").mkdir()
        env = CanaryEnvironment(env={}, home=home)
        assert env.resolve_tool_root() == home / "canary-mlx"

    def test_none_when_default_directory_missing(self, home):
        env = CanaryEnvironment(env={}, home=home)
        assert env.resolve_tool_root() is None


class TestDefaults:
    def test_reads_os_environ_by_default(self, monkeypatch, home):
        monkeypatch.setenv("CANARY_MODEL", "/from/os/environ")
        env = CanaryEnvironment(home=home)
        assert env.resolve_model_path() == Path("/from/os/environ")

    def test_home_defaults_to_user_home(self):
        assert CanaryEnvironment(env={}).home == Path.home()
