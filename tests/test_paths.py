"""
Tests for the on-disk layout — base directory resolution and command paths.
"""

import logging
from pathlib import Path

import pytest

import binr
from binr.core.config.settings import BinrConfig
from binr.core.domain.paths import PathResolver, config_home
from binr.core.errors import InvalidArgumentError


class TestConfigHome:
    def test_xdg_wins(self):
        env = {"HOME": "/users/alice", "XDG_CONFIG_HOME": "/users/alice/.xdg_config"}
        assert config_home(env) == Path("/users/alice/.xdg_config")

    def test_home_only(self):
        assert config_home({"HOME": "/users/alice"}) == Path("/users/alice/.config")

    def test_empty_xdg_is_unset(self):
        env = {"HOME": "/users/alice", "XDG_CONFIG_HOME": ""}
        assert config_home(env) == Path("/users/alice/.config")

    def test_homeless_falls_back_to_cwd(self, tmp_path: Path, monkeypatch, caplog):
        monkeypatch.chdir(tmp_path)
        with caplog.at_level(logging.WARNING, logger="binr"):
            assert config_home({"HOME": "", "XDG_CONFIG_HOME": ""}) == Path.cwd()
        assert "current working directory" in caplog.text


class TestPathResolver:
    def test_unversioned(self):
        paths = PathResolver(Path("/users/alice/.config"))
        assert paths.path("myapp", "mybin") == Path("/users/alice/.config/binr/myapp/mybin")

    def test_versioned(self):
        paths = PathResolver(Path("/users/alice/.config"))
        assert paths.path("myapp", "mybin", "v1.0.0") == Path(
            "/users/alice/.config/binr/myapp/mybin-v1.0.0"
        )

    def test_cache_layout(self):
        paths = PathResolver(Path("/base"))
        assert paths.cache_dir == Path("/base/binr/.cache")
        assert paths.cache_entry("abc") == Path("/base/binr/.cache/abc")

    def test_relative_base_is_made_absolute(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        paths = PathResolver(Path("."))
        assert paths.path("myapp", "mybin") == Path.cwd() / "binr" / "myapp" / "mybin"
        assert paths.path("myapp", "mybin").is_absolute()

    @pytest.mark.parametrize(
        "namespace,command,version",
        [("", "mybin", ""), ("myapp", "", ""), ("myapp", "mybin", "foo")],
    )
    def test_invalid_arguments(self, namespace, command, version):
        with pytest.raises(InvalidArgumentError):
            PathResolver(Path("/base")).path(namespace, command, version)

    @pytest.mark.parametrize(
        "namespace,command",
        [
            ("..", "mybin"),
            (".", "mybin"),
            (".cache", "mybin"),
            ("my/app", "mybin"),
            ("myapp", ".."),
            ("myapp", "../../mybin"),
            ("myapp", "my\0bin"),
        ],
    )
    def test_names_stay_inside_tree(self, namespace, command):
        with pytest.raises(InvalidArgumentError, match="namespace|command"):
            PathResolver(Path("/base")).path(namespace, command)

    def test_dotted_names_allowed(self):
        paths = PathResolver(Path("/base"))
        assert paths.path("my.app", "my.bin") == Path("/base/binr/my.app/my.bin")

    def test_does_not_touch_filesystem(self, tmp_path: Path):
        PathResolver(tmp_path).path("myapp", "mybin", "v1.0.0")
        assert not (tmp_path / "binr").exists()


class TestModulePath:
    """binr.path() resolves its base from the environment."""

    def test_homeless_defaults_to_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", "")
        monkeypatch.setenv("USERPROFILE", "")
        monkeypatch.setenv("XDG_CONFIG_HOME", "")
        assert binr.path("myapp", "mybin") == Path.cwd() / "binr" / "myapp" / "mybin"

    def test_home_with_version(self, monkeypatch):
        monkeypatch.setenv("HOME", "/users/alice")
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert binr.path("myapp", "mybin", "v1.0.0") == Path(
            "/users/alice/.config/binr/myapp/mybin-v1.0.0"
        )

    def test_explicit_config(self, tmp_path: Path):
        config = BinrConfig(base_dir=tmp_path)
        assert binr.path("myapp", "mybin", config=config) == tmp_path / "binr" / "myapp" / "mybin"
